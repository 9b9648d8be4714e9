"""
Knowledge fragment retrieval schemas.

Dependencies: pydantic
System role: FragmentRetriever output contract
"""

import enum
import uuid

from pydantic import BaseModel, Field


class RetrievalMethod(str, enum.Enum):
    """
    Retrieval tier that produced a result.

    THEME_ASSOCIATION: Precomputed fragment-theme similarities
    SEMANTIC_FALLBACK: Query embedding against fragment embeddings
    TEXT_SEARCH_FALLBACK: Keyword search over fragment text
    ALL_TIERS_EMPTY: No tier returned anything
    """

    THEME_ASSOCIATION = "theme-association"
    SEMANTIC_FALLBACK = "semantic-fallback"
    TEXT_SEARCH_FALLBACK = "text-search-fallback"
    ALL_TIERS_EMPTY = "all-tiers-empty"


class RetrievedFragment(BaseModel):
    """Knowledge fragment with its retrieval score."""

    id: uuid.UUID
    text: str
    source: str = ""
    scope: str
    metadata: dict = Field(default_factory=dict)
    score: float = Field(description="Similarity or keyword-hit score, tier dependent")
    matched_themes: list[str] = Field(default_factory=list)


class RetrievalResult(BaseModel):
    """Fragments returned by FragmentRetriever.retrieve()."""

    fragments: list[RetrievedFragment] = Field(default_factory=list)
    method: RetrievalMethod
    themes_used: list[str] = Field(default_factory=list)
    total_found: int = 0
