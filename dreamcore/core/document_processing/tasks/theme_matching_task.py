"""
Theme matching against the theme catalog.

Scores the whole chunks x themes cosine matrix at once, keeps pairs at or
above the threshold and aggregates per theme with max.

Dependencies: numpy (via dreamcore.core.vector_math)
System role: Third stage of the embedding pipeline
"""

import logging
from uuid import UUID

from dreamcore.core.vector_math import cosine_similarity_matrix

from ..models import CatalogTheme, ChunkEmbedding, ThemeMatch

logger = logging.getLogger(__name__)


class ThemeMatchingTask:
    """Match chunk embeddings to catalog themes."""

    def __init__(self, threshold: float = 0.6, top_k: int = 5) -> None:
        self.threshold = threshold
        self.top_k = top_k

    def match(
        self,
        document_id: UUID | None,
        embeddings: list[ChunkEmbedding],
        catalog: list[CatalogTheme],
        threshold: float | None = None,
        top_k: int | None = None,
    ) -> list[ThemeMatch]:
        """
        Select the document's themes.

        Args:
            document_id: Document being matched (for logging)
            embeddings: Chunk embeddings of the document
            catalog: Theme catalog with vectors
            threshold: Minimum similarity (defaults to the task's threshold)
            top_k: Maximum themes returned (defaults to the task's top_k)

        Returns:
            list[ThemeMatch]: At most top_k themes, score desc then code asc.
                Empty when nothing reaches the threshold.

        Raises:
            ValueError: When a chunk and a theme vector differ in dimensionality
        """
        threshold = self.threshold if threshold is None else threshold
        top_k = self.top_k if top_k is None else top_k

        scores = cosine_similarity_matrix(
            [e.vector for e in embeddings],
            [theme.vector for theme in catalog],
        )

        matches: list[ThemeMatch] = []
        if scores.size:
            # Lowest chunk index wins ties within a theme
            best_rows = scores.argmax(axis=0)
            for column, theme in enumerate(catalog):
                row = int(best_rows[column])
                score = float(scores[row, column])
                if score >= threshold:
                    matches.append(
                        ThemeMatch(
                            theme_code=theme.code,
                            similarity=score,
                            chunk_index=embeddings[row].chunk.chunk_index,
                        )
                    )

        candidates = len(matches)
        matches = sorted(matches, key=lambda m: (-m.similarity, m.theme_code))[:top_k]
        logger.debug(
            f"{__name__}:match - {len(matches)} themes above {threshold}",
            extra={"document_id": str(document_id), "candidates": candidates},
        )
        return matches
