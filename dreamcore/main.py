"""
Embedding worker entry point.

Configures logging, optionally creates tables, builds the Gemini embedder
and runs the worker until SIGINT/SIGTERM.

Usage:
    python -m dreamcore.main
    python -m dreamcore.main --once
    dreamcore-worker --create-tables

Dependencies: dotenv, dreamcore.configs, dreamcore.boundary, dreamcore.workers
System role: Process entry point for background embedding
"""

import argparse
import asyncio
import logging
import signal

from dotenv import load_dotenv

from dreamcore.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from dreamcore.configs import Settings, get_settings
from dreamcore.core.document_processing import DocumentPipeline
from dreamcore.observability.logger import configure_logging
from dreamcore.workers import EmbeddingWorker

logger = logging.getLogger(__name__)


def build_worker(settings: Settings, session_factory) -> EmbeddingWorker:
    """
    Wire the production worker.

    Args:
        settings: Application settings
        session_factory: Async session factory

    Returns:
        EmbeddingWorker: Worker using the Gemini embedder
    """
    from dreamcore.boundary.embeddings.gemini import build_gemini_embedder

    embedder = build_gemini_embedder(settings.embedding_model)
    pipeline = DocumentPipeline(embedder, settings=settings.pipeline)
    return EmbeddingWorker(session_factory, pipeline, settings=settings.worker)


async def run(once: bool = False, create: bool = False) -> None:
    """
    Run the worker.

    Args:
        once: Process a single poll cycle and exit
        create: Create missing tables before starting
    """
    settings = get_settings()
    engine = get_async_engine(settings.database)
    try:
        if create or settings.database.create_tables:
            await create_tables(engine)
            logger.info(f"{__name__}:run - Tables created")

        worker = build_worker(settings, get_async_session_factory(engine))

        if once:
            await worker.sweep_stale()
            outcomes = await worker.run_once()
            logger.info(f"{__name__}:run - Processed {len(outcomes)} jobs")
            return

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                # Windows event loops
                pass

        await worker.start()
        try:
            await stop.wait()
        finally:
            await worker.stop()
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Dream transcript embedding worker")
    parser.add_argument("--once", action="store_true", help="run one poll cycle and exit")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing database tables before starting",
    )
    args = parser.parse_args()

    load_dotenv()
    configure_logging(get_settings().log_level)
    asyncio.run(run(once=args.once, create=args.create_tables))


if __name__ == "__main__":
    main()
