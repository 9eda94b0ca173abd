"""
Community Feed and Student Deals

The feed is a newest-first list of posts; new posts are authored by the
current profile. The deals catalog is a fixed list the UI can filter.
Neither reads or writes the ledger.
"""

from collections.abc import Iterable
from datetime import date
from threading import RLock
from typing import Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger
from src.models.community import Deal, Post
from src.models.ledger import ProfileData


logger = structlog.get_logger(__name__)


class CommunityFeed:
    """In-memory community feed, newest post first."""

    def __init__(
        self,
        posts: Iterable[Post] = (),
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._posts = [p.model_copy(deep=True) for p in posts]
        self._audit_logger = audit_logger
        self._lock = RLock()

    @property
    def posts(self) -> list[Post]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._posts]

    def add_post(
        self,
        text: str,
        profile: ProfileData,
        image_url: Optional[str] = None,
    ) -> Post:
        """
        Publish a post as the given profile.

        Raises:
            pydantic.ValidationError: If the text is blank.
        """
        post = Post(
            author=profile.display_name,
            author_avatar=profile.photo_url,
            text=text,
            image_url=image_url or None,
        )
        with self._lock:
            self._posts.insert(0, post)

        if self._audit_logger:
            self._audit_logger.log_post_added(post_id=post.id, author=post.author)
        return post.model_copy(deep=True)

    def like_post(self, post_id: UUID) -> Optional[Post]:
        """Add one like. Unknown ids are ignored."""
        with self._lock:
            for post in self._posts:
                if post.id == post_id:
                    post.likes += 1
                    return post.model_copy(deep=True)
        logger.debug("post_not_found", post_id=str(post_id))
        return None


class DealsCatalog:
    """Read-only list of student deals."""

    def __init__(self, deals: Iterable[Deal] = ()):
        self._deals = tuple(deals)

    @property
    def deals(self) -> list[Deal]:
        return list(self._deals)

    def tags(self) -> list[str]:
        return sorted({tag for deal in self._deals for tag in deal.tags})

    def filter(
        self,
        tag: Optional[str] = None,
        active_on: Optional[date] = None,
    ) -> list[Deal]:
        """
        Deals carrying `tag` (if given) that have not expired on `active_on`
        (if given). Original order is kept.
        """
        return [
            deal for deal in self._deals
            if (tag is None or tag in deal.tags)
            and (active_on is None or deal.is_active(active_on))
        ]
