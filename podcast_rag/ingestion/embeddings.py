"""Embedding helpers using the OpenAI embeddings API."""

from __future__ import annotations

from openai import OpenAI, OpenAIError


class EmbeddingError(RuntimeError):
    """Raised when the embeddings API call fails."""


def embed_texts(
    client: OpenAI,
    texts: list[str],
    model: str = "text-embedding-3-small",
) -> tuple[list[list[float]], str]:
    """Embed a list of texts using the OpenAI embeddings API.

    Args:
        client: OpenAI client handle.
        texts: Strings to embed.
        model: OpenAI embedding model name.

    Returns:
        ``(vectors, model)``: one embedding vector per input text, and the
        model identifier reported by the API.

    Raises:
        EmbeddingError: On transport, quota or response-shape errors.
    """
    try:
        response = client.embeddings.create(input=texts, model=model)
    except OpenAIError as exc:
        raise EmbeddingError(f"embedding request failed: {exc}") from exc

    if len(response.data) != len(texts):
        raise EmbeddingError(
            f"expected {len(texts)} embeddings, got {len(response.data)}"
        )
    return [item.embedding for item in response.data], response.model


def get_query_embedding(
    client: OpenAI,
    query: str,
    model: str = "text-embedding-3-small",
) -> list[float]:
    """Generate an embedding vector for the given query string."""
    vectors, _ = embed_texts(client, [query], model=model)
    return vectors[0]
