"""
Seed data for a fresh session.

The default profile, the starter community posts and the deals list
live in seed.json next to this module.
"""

import json
from pathlib import Path
from typing import NamedTuple, Optional, Union

from src.models.community import Deal, Post
from src.models.ledger import ProfileData


SEED_PATH = Path(__file__).with_name("seed.json")


class SeedData(NamedTuple):
    profile: ProfileData
    posts: tuple[Post, ...]
    deals: tuple[Deal, ...]


def load_seed(path: Optional[Union[str, Path]] = None) -> SeedData:
    """Load and validate the seed file. Every call returns fresh objects."""
    with open(path or SEED_PATH, "r", encoding="utf-8") as f:
        data = json.load(f)

    profile = ProfileData.model_validate(data["profile"])
    posts = tuple(Post.model_validate(p) for p in data.get("posts", []))
    deals = tuple(Deal.model_validate(d) for d in data.get("deals", []))

    return SeedData(profile=profile, posts=posts, deals=deals)


__all__ = ["SEED_PATH", "SeedData", "load_seed"]
