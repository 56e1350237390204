"""FastAPI dependencies: process-wide settings and service clients."""

from __future__ import annotations

from functools import lru_cache

from podcast_rag.clients import ServiceClients, build_clients
from podcast_rag.config import Settings, get_settings


def settings_dependency() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def clients_dependency() -> ServiceClients:
    """Build the service clients on first use and reuse them afterwards."""
    return build_clients(get_settings())
