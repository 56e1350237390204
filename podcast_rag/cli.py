"""Command line entry point for the podcast RAG pipeline.

Run as a module::

    python -m podcast_rag.cli download
    python -m podcast_rag.cli transcribe
    python -m podcast_rag.cli embed
    python -m podcast_rag.cli index
    python -m podcast_rag.cli query "Tell me about fan power consumption in oxide racks"

Each step is resumable: episodes already downloaded, transcribed or
embedded are skipped on the next run.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

import httpx
from openai import OpenAI

from podcast_rag.clients import build_clients
from podcast_rag.config import Settings, get_settings
from podcast_rag.episodes.download import download_episodes
from podcast_rag.episodes.manifest import load_manifest, save_manifest
from podcast_rag.episodes.transcribe import transcribe_episodes
from podcast_rag.ingestion.indexing import index_all
from podcast_rag.ingestion.pipeline import build_all_embeddings
from podcast_rag.pipeline_config import EmbeddingFailurePolicy, PipelineConfig
from podcast_rag.retrieval.index import VectorIndex
from podcast_rag.retrieval.pipeline import answer_question

logger = logging.getLogger("podcast_rag")


def _download(settings: Settings, args: argparse.Namespace) -> None:
    manifest = load_manifest(settings.data_dir)
    max_episodes = args.max if args.max is not None else settings.max_episodes
    with httpx.Client(follow_redirects=True, timeout=300.0) as client:
        try:
            new = download_episodes(
                client, manifest, settings.data_dir, settings.rss_feed_url, max_episodes
            )
        finally:
            save_manifest(settings.data_dir, manifest)
    logger.info("Downloaded %d new episodes", len(new))


def _transcribe(settings: Settings, args: argparse.Namespace) -> None:
    manifest = load_manifest(settings.data_dir)
    try:
        new = transcribe_episodes(manifest, settings.data_dir, settings.assemblyai_api_key)
    finally:
        save_manifest(settings.data_dir, manifest)
    logger.info("Transcribed %d episodes", len(new))


def _embed(settings: Settings, args: argparse.Namespace) -> None:
    manifest = load_manifest(settings.data_dir)
    config = PipelineConfig.from_settings(settings)
    if args.fail_fast:
        config = replace(config, failure_policy=EmbeddingFailurePolicy.FAIL_FAST)
    client = OpenAI(api_key=settings.openai_api_key or None)
    built = build_all_embeddings(
        client, manifest, settings.data_dir, config, model=settings.embedding_model
    )
    logger.info("Built embeddings for %d episodes", built)


def _index(settings: Settings, args: argparse.Namespace) -> None:
    manifest = load_manifest(settings.data_dir)
    index = VectorIndex.from_settings(settings)
    try:
        total = index_all(index, manifest, settings.data_dir, settings.embedding_dimensions)
    finally:
        index.close()
    logger.info("Indexed %d documents", total)


def _query(settings: Settings, args: argparse.Namespace) -> None:
    clients = build_clients(settings)
    try:
        result = answer_question(
            clients,
            args.question,
            config=PipelineConfig.from_settings(settings),
            embedding_model=settings.embedding_model,
            llm_model=settings.llm_model,
            base_prompt=settings.base_prompt,
        )
    finally:
        clients.close()

    print(result["answer"])
    if result["sources"]:
        print("\nSources:")
        for source in result["sources"]:
            print(f"  - {source}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="podcast-rag", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("download", aliases=["d"], help="Download podcast data to a local cache")
    p.add_argument("--max", type=int, default=None, help="Maximum new episodes to download")
    p.set_defaults(func=_download)

    p = sub.add_parser("transcribe", aliases=["t"], help="Transcribe downloaded episodes")
    p.set_defaults(func=_transcribe)

    p = sub.add_parser("embed", aliases=["e"], help="Generate embeddings from transcriptions")
    p.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort an episode on the first failed chunk instead of skipping it",
    )
    p.set_defaults(func=_embed)

    p = sub.add_parser("index", aliases=["i"], help="Load embeddings into the search index")
    p.set_defaults(func=_index)

    p = sub.add_parser("query", aliases=["q"], help="Ask a question with retrieved context")
    p.add_argument("question")
    p.set_defaults(func=_query)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(get_settings(), args)
    except Exception as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
