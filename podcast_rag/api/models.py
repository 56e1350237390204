"""Pydantic request/response schemas for the Podcast RAG API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class QueryRequest(BaseModel):
    """Request body for the /api/query endpoint."""

    question: str


class QueryResponse(BaseModel):
    """Response body for the /api/query endpoint."""

    question: str
    answer: str
    sources: list[str]
    segments: list[str]
    model: str | None = None
    usage: dict[str, Any] | None = None
