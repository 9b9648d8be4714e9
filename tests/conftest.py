"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite async databases, fake embedders, settings with small sizes,
seed helpers for documents, themes and fragments
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import re
import uuid
from datetime import datetime, timezone

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from dreamcore.boundary.embeddings import LangChainEmbedder
from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.configs.retrieval import RetrievalSettings
from dreamcore.configs.worker import WorkerSettings

VOCABULARY = ["water", "falling", "chase", "flying", "teeth", "house", "anxiety", "mother"]


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize datetimes read back from SQLite (naive, UTC) for comparison."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def keyword_vector(text: str) -> list[float]:
    """Bag-of-words vector over VOCABULARY."""
    words = re.findall(r"[a-z]+", text.lower())
    return [float(sum(1 for w in words if w.startswith(term))) for term in VOCABULARY]


def unit_vector(term: str) -> list[float]:
    """Catalog vector pointing at a single vocabulary term."""
    return [1.0 if t == term else 0.0 for t in VOCABULARY]


class KeywordEmbedder:
    """Deterministic embedder counting vocabulary terms; records every call."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [keyword_vector(text) for text in texts]


class FailingEmbedder:
    """Embedder that raises on the given call numbers (1-based), or always."""

    def __init__(self, fail_on: set[int] | None = None, exc: Exception | None = None) -> None:
        self.fail_on = fail_on
        self.exc = exc or RuntimeError("embedding service unavailable")
        self.call_count = 0

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.call_count += 1
        if self.fail_on is None or self.call_count in self.fail_on:
            raise self.exc
        return [keyword_vector(text) for text in texts]


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from dreamcore.boundary.db.base import Base
    import dreamcore.boundary.db.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def session_factory(tmp_path):
    """
    File-backed SQLite database shared by several sessions.

    Uses the production engine factory so concurrent sessions get
    immediate-mode transactions.

    Yields:
        async_sessionmaker: Factory bound to a fresh database
    """
    from dreamcore.boundary.db.connection import (
        create_tables,
        get_async_engine,
        get_async_session_factory,
    )
    from dreamcore.configs.database import DatabaseSettings

    db_config = DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'dreamcore.db'}")
    engine = get_async_engine(db_config)
    await create_tables(engine)

    yield get_async_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def keyword_embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def fake_embedder() -> LangChainEmbedder:
    """LangChain deterministic fake embeddings behind the Embedder interface."""
    return LangChainEmbedder(DeterministicFakeEmbedding(size=len(VOCABULARY)))


@pytest.fixture
def pipeline_settings() -> PipelineSettings:
    """Small sizes so tests can exercise splitting with short texts."""
    return PipelineSettings(
        min_tokens_for_embedding=3,
        max_tokens_per_chunk=50,
        chunk_size_tokens=30,
        overlap_tokens=5,
        chars_per_token=4,
        embedding_batch_size=2,
        embedding_batch_delay_ms=0,
        embedding_version="test-v1",
        theme_similarity_threshold=0.6,
        max_themes_per_document=5,
    )


@pytest.fixture
def worker_settings() -> WorkerSettings:
    return WorkerSettings(
        max_concurrent_jobs=2,
        max_job_attempts=3,
        polling_interval_ms=20,
        cleanup_interval_ms=50,
        stale_job_timeout_ms=60_000,
    )


@pytest.fixture
def retrieval_settings() -> RetrievalSettings:
    return RetrievalSettings()


async def seed_themes(session, terms: list[str] | None = None) -> None:
    """Insert catalog themes whose vectors point at single vocabulary terms."""
    from dreamcore.boundary.db.models import ThemeModel

    for term in terms or VOCABULARY:
        session.add(
            ThemeModel(
                code=term,
                label=term.capitalize(),
                embedding=unit_vector(term),
                is_active=True,
            )
        )
    await session.flush()


async def seed_document(session, raw_text: str, language: str | None = None):
    """Insert a pending document."""
    from dreamcore.boundary.db.CRUD import DocumentCRUD

    return await DocumentCRUD().create(session, raw_text=raw_text, language=language)


@pytest.fixture
def sample_id() -> uuid.UUID:
    return uuid.uuid4()
