"""Tests for the community feed, the deals catalog and the seed data."""

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.community import CommunityFeed, DealsCatalog
from src.data import load_seed
from src.models.audit import AuditEventType
from src.models.community import Deal, Post
from src.models.ledger import ProfileData


@pytest.fixture
def profile():
    return ProfileData(display_name="Fredrik Åkare", photo_url="https://example.com/me.png")


@pytest.fixture
def deals():
    return [
        Deal(id="a", title="Coffee", description="", expires_at=date(2024, 12, 31), tags=["Food & Drink"]),
        Deal(id="b", title="Laptop", description="", expires_at=date(2025, 1, 15), tags=["Tech", "Education"]),
        Deal(id="c", title="Books", description="", expires_at=date(2024, 9, 30), tags=["Books", "Education"]),
    ]


class TestCommunityFeed:
    """Tests for posting and liking."""

    def test_add_post_newest_first(self, profile):
        older = Post(author="Anna S.", text="Hi")
        feed = CommunityFeed([older])

        post = feed.add_post("Saved 500 SEK!", profile)

        assert [p.id for p in feed.posts] == [post.id, older.id]
        assert post.author == "Fredrik Åkare"
        assert post.author_avatar == "https://example.com/me.png"
        assert post.likes == 0

    def test_blank_image_is_none(self, profile):
        feed = CommunityFeed()
        post = feed.add_post("Hello", profile, image_url="")
        assert post.image_url is None

    def test_blank_post_rejected(self, profile):
        feed = CommunityFeed()
        with pytest.raises(ValidationError):
            feed.add_post("   ", profile)
        assert feed.posts == []

    def test_like(self, profile):
        feed = CommunityFeed()
        post = feed.add_post("Hello", profile)

        feed.like_post(post.id)
        liked = feed.like_post(post.id)

        assert liked.likes == 2
        assert feed.posts[0].likes == 2

    def test_like_unknown_post(self):
        assert CommunityFeed().like_post(uuid4()) is None

    def test_posts_are_snapshots(self, profile):
        feed = CommunityFeed()
        feed.add_post("Hello", profile)
        feed.posts[0].likes = 100
        assert feed.posts[0].likes == 0

    def test_post_is_audited(self, profile, audit_logger, audit_storage):
        feed = CommunityFeed(audit_logger=audit_logger)
        post = feed.add_post("Hello", profile)

        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.POST_ADDED
        assert event.entity_id == post.id


class TestDealsCatalog:
    """Tests for filtering deals."""

    def test_tags(self, deals):
        assert DealsCatalog(deals).tags() == ["Books", "Education", "Food & Drink", "Tech"]

    def test_filter_by_tag_keeps_order(self, deals):
        result = DealsCatalog(deals).filter(tag="Education")
        assert [d.id for d in result] == ["b", "c"]

    def test_filter_active(self, deals):
        result = DealsCatalog(deals).filter(active_on=date(2024, 12, 31))
        assert [d.id for d in result] == ["a", "b"]

    def test_filter_both(self, deals):
        result = DealsCatalog(deals).filter(tag="Education", active_on=date(2024, 10, 1))
        assert [d.id for d in result] == ["b"]

    def test_no_filter(self, deals):
        assert len(DealsCatalog(deals).filter()) == 3


class TestSeedData:
    """The bundled seed file loads and validates."""

    def test_load(self):
        seed = load_seed()

        assert seed.profile.display_name == "Fredrik Åkare"
        assert seed.profile.saving_goals == []
        assert len(seed.profile.badges) == 3
        assert [p.author for p in seed.posts] == ["Anna S.", "Björn L.", "Carla M."]
        assert [d.id for d in seed.deals] == ["d1", "d2", "d3", "d4"]

    def test_each_load_is_fresh(self):
        first = load_seed()
        second = load_seed()
        assert first.posts[0].id != second.posts[0].id
        assert first.profile is not second.profile


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
