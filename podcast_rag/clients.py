"""Service handles for the external collaborators, built once per process."""

from __future__ import annotations

from dataclasses import dataclass

from anthropic import Anthropic
from openai import OpenAI

from podcast_rag.config import Settings
from podcast_rag.retrieval.index import VectorIndex


@dataclass
class ServiceClients:
    """Explicitly constructed clients passed to the components that need them."""

    openai: OpenAI
    anthropic: Anthropic
    index: VectorIndex

    def close(self) -> None:
        self.index.close()


def build_clients(settings: Settings) -> ServiceClients:
    return ServiceClients(
        openai=OpenAI(api_key=settings.openai_api_key or None),
        anthropic=Anthropic(api_key=settings.anthropic_api_key or None),
        index=VectorIndex.from_settings(settings),
    )
