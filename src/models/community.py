"""
Community Models

Posts in the student feed and the curated list of student deals.
Both are display data: the ledger never reads them.
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Post(BaseModel):
    """A post in the community feed."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    author: str
    author_avatar: str = ""
    text: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Post body"
    )
    image_url: Optional[str] = None
    # Relative display label ("2 hours ago"), not a timestamp
    created_at: str = "Just now"
    likes: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)


class Deal(BaseModel):
    """A student discount. Deals are never edited in the app."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    link: str = "#"
    expires_at: date
    tags: list[str] = Field(default_factory=list)

    def is_active(self, on: date) -> bool:
        """A deal is valid up to and including its expiry date."""
        return on <= self.expires_at
