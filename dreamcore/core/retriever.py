"""
Theme-based knowledge fragment retrieval with graceful degradation.

Tries three tiers in order and returns the first non-empty result:
theme associations, semantic similarity to a query, keyword search.
A failing tier is logged and treated as empty; retrieve() never raises.

Dependencies: sqlalchemy, dreamcore.boundary.db, dreamcore.boundary.embeddings
System role: Knowledge retrieval for downstream interpretation
"""

import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dreamcore.boundary.db.CRUD import FragmentCRUD, ThemeCRUD
from dreamcore.boundary.db.models import KnowledgeFragmentModel
from dreamcore.boundary.embeddings import Embedder
from dreamcore.configs.retrieval import RetrievalSettings
from dreamcore.core.exceptions import RetrievalError
from dreamcore.core.vector_math import cosine_similarity
from dreamcore.models.fragment import RetrievalMethod, RetrievalResult, RetrievedFragment
from dreamcore.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 3
MAX_KEYWORDS = 12
_WORD = re.compile(r"[a-z0-9]+")

Tier = Callable[[list[str], str, str | None], Awaitable[list[RetrievedFragment]]]


class FragmentRetriever:
    """Retrieve knowledge fragments for a set of themes within a scope."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        embedder: Embedder | None = None,
        settings: RetrievalSettings | None = None,
        fragment_crud: FragmentCRUD | None = None,
        theme_crud: ThemeCRUD | None = None,
    ) -> None:
        """
        Initialize retriever.

        Args:
            session_factory: Opens one session per tier
            embedder: Enables the semantic tier when provided
            settings: Retrieval settings (uses defaults if None)
            fragment_crud: Fragment store
            theme_crud: Theme catalog, used for keyword extraction
        """
        self._session_factory = session_factory
        self._embedder = embedder
        self._settings = settings or RetrievalSettings()
        self._fragment_crud = fragment_crud or FragmentCRUD()
        self._theme_crud = theme_crud or ThemeCRUD()

    async def retrieve(
        self,
        theme_codes: Sequence[str],
        scope: str,
        max_results: int | None = None,
        query_text: str | None = None,
    ) -> RetrievalResult:
        """
        Retrieve fragments, falling back tier by tier.

        Args:
            theme_codes: Themes produced for a document
            scope: Fragment owner/category tag
            max_results: Fragments to return (defaults to settings.max_results)
            query_text: Free text enabling the semantic tier and adding keywords

        Returns:
            RetrievalResult: Fragments with the tier that produced them;
                method ALL_TIERS_EMPTY with no fragments when every tier is empty
        """
        limit = self._settings.max_results if max_results is None else max(max_results, 0)
        themes_used = list(dict.fromkeys(code for code in theme_codes if code))

        tiers: list[tuple[RetrievalMethod, Tier]] = [
            (RetrievalMethod.THEME_ASSOCIATION, self._by_theme_association),
            (RetrievalMethod.SEMANTIC_FALLBACK, self._by_semantic_similarity),
            (RetrievalMethod.TEXT_SEARCH_FALLBACK, self._by_text_search),
        ]
        for method, tier in tiers:
            try:
                fragments = await tier(themes_used, scope, query_text)
            except RetrievalError as e:
                log_with_context(
                    logger,
                    logging.WARNING,
                    f"{__name__}:retrieve - {method.value} tier unusable: {e.message}",
                    scope=scope,
                    **e.details,
                )
                continue
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:retrieve - {method.value} tier failed",
                    e,
                    scope=scope,
                    theme_codes=",".join(themes_used),
                )
                continue

            if fragments:
                logger.info(
                    f"{__name__}:retrieve - {len(fragments)} fragments via {method.value}",
                    extra={"scope": scope, "theme_count": len(themes_used)},
                )
                return RetrievalResult(
                    fragments=fragments[:limit],
                    method=method,
                    themes_used=themes_used,
                    total_found=len(fragments),
                )

        logger.info(
            f"{__name__}:retrieve - No fragments found",
            extra={"scope": scope, "theme_count": len(themes_used)},
        )
        return RetrievalResult(
            fragments=[],
            method=RetrievalMethod.ALL_TIERS_EMPTY,
            themes_used=themes_used,
            total_found=0,
        )

    async def _by_theme_association(
        self,
        theme_codes: list[str],
        scope: str,
        query_text: str | None,
    ) -> list[RetrievedFragment]:
        if not theme_codes:
            return []

        async with self._session_factory() as session:
            rows = await self._fragment_crud.get_theme_associations(
                session,
                theme_codes,
                scope,
                min_similarity=self._settings.similarity_floor,
                limit=self._settings.association_row_limit,
            )
            scores: dict[UUID, float] = {}
            matched: dict[UUID, list[str]] = {}
            for fragment_id, theme_code, similarity in rows:
                scores[fragment_id] = max(similarity, scores.get(fragment_id, similarity))
                matched.setdefault(fragment_id, []).append(theme_code)

            pool = sorted(scores, key=lambda fid: (-scores[fid], str(fid)))
            pool = pool[: self._settings.candidate_pool_size]
            records = await self._fragment_crud.get_by_ids(session, pool)

        by_id = {record.id: record for record in records}
        return [
            _to_fragment(by_id[fid], scores[fid], matched[fid])
            for fid in pool
            if fid in by_id
        ]

    async def _by_semantic_similarity(
        self,
        theme_codes: list[str],
        scope: str,
        query_text: str | None,
    ) -> list[RetrievedFragment]:
        if self._embedder is None or not query_text or not query_text.strip():
            return []

        vectors = await self._embedder.embed([query_text])
        if len(vectors) != 1:
            raise RetrievalError(
                f"Query embedding returned {len(vectors)} vectors",
                method=RetrievalMethod.SEMANTIC_FALLBACK.value,
            )
        query_vector = vectors[0]

        async with self._session_factory() as session:
            records = await self._fragment_crud.get_with_embeddings(session, scope)

        scored = []
        for record in records:
            if len(record.embedding) != len(query_vector):
                logger.warning(
                    f"{__name__}:_by_semantic_similarity - Skipping fragment with "
                    f"dimension {len(record.embedding)}",
                    extra={"fragment_id": str(record.id)},
                )
                continue
            score = cosine_similarity(query_vector, record.embedding)
            if score >= self._settings.semantic_threshold:
                scored.append((score, record))

        scored.sort(key=lambda item: (-item[0], str(item[1].id)))
        return [_to_fragment(record, score, []) for score, record in scored]

    async def _by_text_search(
        self,
        theme_codes: list[str],
        scope: str,
        query_text: str | None,
    ) -> list[RetrievedFragment]:
        async with self._session_factory() as session:
            themes = await self._theme_crud.get_by_codes(session, theme_codes)
            keywords = build_keywords(
                [theme.label for theme in themes] + theme_codes,
                query_text,
            )
            if not keywords:
                return []
            records = await self._fragment_crud.search_text(
                session, scope, keywords, limit=self._settings.text_search_limit
            )

        scored = []
        for record in records:
            text = record.text.lower()
            hits = [kw for kw in keywords if kw in text]
            if hits:
                scored.append((len(hits), hits, record))

        scored.sort(key=lambda item: (-item[0], str(item[2].id)))
        return [_to_fragment(record, float(count), hits) for count, hits, record in scored]


def build_keywords(theme_terms: Sequence[str], query_text: str | None = None) -> list[str]:
    """
    Extract search keywords from theme labels/codes and query text.

    Args:
        theme_terms: Theme labels and codes ("being_chased" yields "being", "chased")
        query_text: Optional free text

    Returns:
        list[str]: Lowercase, de-duplicated words of at least three characters
    """
    words: list[str] = []
    for term in list(theme_terms) + [query_text or ""]:
        words.extend(_WORD.findall(term.lower()))
    keywords = [w for w in dict.fromkeys(words) if len(w) >= MIN_KEYWORD_LENGTH]
    return keywords[:MAX_KEYWORDS]


def _to_fragment(
    record: KnowledgeFragmentModel,
    score: float,
    matched_themes: list[str],
) -> RetrievedFragment:
    return RetrievedFragment(
        id=record.id,
        text=record.text,
        source=record.source,
        scope=record.scope,
        metadata=record.fragment_metadata or {},
        score=score,
        matched_themes=matched_themes,
    )
