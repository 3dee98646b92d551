"""Library-related data models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AlbumPage(BaseModel):
    """One page of the saved-albums listing."""
    remaining: int
    ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> AlbumPage:
        """Build from a ``GET /me/albums`` response body."""
        return cls(
            remaining=int(data.get("total", 0)),
            ids=[item["album"]["id"] for item in data.get("items", [])],
        )


class CleanupResult(BaseModel):
    """Summary of a finished cleanup loop."""
    pages: int = 0
    deleted: int = 0
    last_remaining: int | None = None
    interrupted: bool = False
