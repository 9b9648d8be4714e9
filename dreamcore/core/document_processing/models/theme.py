"""
Theme catalog entry and theme match models.

Dependencies: pydantic
System role: Theme matching inputs and outputs
"""

from pydantic import BaseModel, Field


class CatalogTheme(BaseModel):
    """Theme catalog entry as seen by the matcher."""

    code: str
    label: str = ""
    vector: list[float]


class ThemeMatch(BaseModel):
    """Theme associated with a document."""

    theme_code: str
    similarity: float = Field(description="Maximum chunk similarity to the theme")
    chunk_index: int = Field(description="Chunk that produced the maximum")
