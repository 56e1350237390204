"""Thin client for an OpenSearch-compatible k-NN index over its REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import quote

import httpx

if TYPE_CHECKING:
    from podcast_rag.config import Settings

logger = logging.getLogger(__name__)

VECTOR_FIELD = "vectorData"


class SearchIndexError(RuntimeError):
    """Raised on any transport error, non-2xx status or malformed index response."""


class VectorIndex:
    """Index documents and run k-NN / id-terms queries.

    Every call is a single blocking round trip; there is no retry. Any
    failure surfaces as :class:`SearchIndexError`.
    """

    def __init__(self, client: httpx.Client, index_name: str = "oxide") -> None:
        self._client = client
        self.index_name = index_name

    @classmethod
    def from_settings(cls, settings: Settings) -> VectorIndex:
        auth = None
        if settings.opensearch_username:
            auth = httpx.BasicAuth(settings.opensearch_username, settings.opensearch_password)
        client = httpx.Client(
            base_url=settings.opensearch_url,
            auth=auth,
            verify=settings.opensearch_verify_certs,
            timeout=settings.opensearch_timeout,
        )
        return cls(client, settings.opensearch_index)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            raise SearchIndexError(f"{method} {path} failed: {exc}") from exc
        if not response.is_success:
            raise SearchIndexError(
                f"unexpected response to {method} {path}: {response.status_code} {response.text}"
            )
        return response

    def exists(self) -> bool:
        try:
            response = self._client.head(f"/{self.index_name}")
        except httpx.HTTPError as exc:
            raise SearchIndexError(f"HEAD /{self.index_name} failed: {exc}") from exc
        if response.status_code == 404:
            return False
        if not response.is_success:
            raise SearchIndexError(
                f"unexpected response checking index {self.index_name}: {response.status_code}"
            )
        return True

    def create(self, dimensions: int) -> None:
        """Create the index with a ``knn_vector`` mapping for the vector field."""
        body = {
            "settings": {"index": {"knn": True}},
            "mappings": {
                "properties": {
                    VECTOR_FIELD: {"type": "knn_vector", "dimension": dimensions},
                    "vectorId": {"type": "integer"},
                    "guid": {"type": "keyword"},
                }
            },
        }
        self._request("PUT", f"/{self.index_name}", body)
        logger.info("Created index %s (%d dimensions)", self.index_name, dimensions)

    def ensure_index(self, dimensions: int) -> bool:
        """Create the index if missing. Returns True if it was created."""
        if self.exists():
            return False
        self.create(dimensions)
        return True

    def upsert(self, document_id: str, document: dict[str, Any]) -> None:
        self._request("PUT", f"/{self.index_name}/_doc/{quote(document_id, safe='')}", document)

    def search(self, body: dict[str, Any]) -> list[dict[str, Any]]:
        """Run a search and return the raw ``hits.hits`` entries in index order."""
        response = self._request("POST", f"/{self.index_name}/_search", body)
        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchIndexError(f"failed to deserialize search results: {exc}") from exc

        outer = payload.get("hits") if isinstance(payload, dict) else None
        hits = outer.get("hits") if isinstance(outer, dict) else None
        if not isinstance(hits, list):
            raise SearchIndexError("failed to deserialize search results: no hits.hits list")
        return cast(list[dict[str, Any]], hits)
