from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from podcast_rag.api.dependencies import clients_dependency
from podcast_rag.api.routes.query import router as query_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Only close clients that a request actually built.
    if clients_dependency.cache_info().currsize:
        clients_dependency().close()
    clients_dependency.cache_clear()


app = FastAPI(
    title="Podcast RAG API",
    description="Retrieval-augmented answers over a podcast archive",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(query_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
