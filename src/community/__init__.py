"""Community feed and deals package."""

from src.community.feed import CommunityFeed, DealsCatalog

__all__ = ["CommunityFeed", "DealsCatalog"]
