"""
Tests for discovery filtering and swipe -> match promotion.
"""

from __future__ import annotations

import random

import pytest

from backend_buzz.config import SwipePolicy
from backend_buzz.core.exceptions import DuplicateSwipe, ValidationError
from backend_buzz.services import discovery


def _user_ids(batch):
    return sorted(p.user_id for p in batch)


def test_candidates_follow_gender_preference(db, member):
    viewer = member("male", looking_for="female")
    w1 = member("female")
    w2 = member("female")
    member("male")
    assert _user_ids(discovery.list_candidates(db, viewer.id, "female")) == sorted([w1.id, w2.id])
    assert len(discovery.list_candidates(db, viewer.id, "both")) == 3


def test_candidates_exclude_self_swiped_and_ineligible(db, member):
    """Never the viewer, never someone already swiped, only verified users with a profile."""
    viewer = member("female", looking_for="both")
    liked = member("male")
    passed = member("male")
    fresh = member("male")
    member("male", verified=False)
    member("male", with_profile=False)
    discovery.record_swipe(db, viewer.id, liked.id, "like")
    discovery.record_swipe(db, viewer.id, passed.id, "pass")
    assert _user_ids(discovery.list_candidates(db, viewer.id, "both")) == [fresh.id]


def test_candidates_limit_and_shuffle(db, member):
    """Batch is truncated; a seeded rng gives a reproducible order."""
    viewer = member("male", looking_for="female")
    for _ in range(6):
        member("female")
    first = discovery.list_candidates(db, viewer.id, "female", 4, rng=random.Random(7))
    again = discovery.list_candidates(db, viewer.id, "female", 4, rng=random.Random(7))
    assert len(first) == 4
    assert [p.id for p in first] == [p.id for p in again]
    assert len(discovery.list_candidates(db, viewer.id, "female", 50)) == 6


def test_candidates_bad_arguments(db, member):
    viewer = member("male")
    with pytest.raises(ValidationError):
        discovery.list_candidates(db, viewer.id, "robots")
    with pytest.raises(ValidationError):
        discovery.list_candidates(db, viewer.id, "female", 0)


def test_mutual_like_creates_one_match(db, member):
    a = member("male")
    b = member("female")
    first = discovery.record_swipe(db, a.id, b.id, "like")
    assert first.is_match is False
    assert first.match is None
    second = discovery.record_swipe(db, b.id, a.id, "super_like")
    assert second.is_match is True
    assert second.match_created is True
    assert (second.match.user1_id, second.match.user2_id) == (min(a.id, b.id), max(a.id, b.id))
    assert len(db.matches) == 1


def test_repeat_like_does_not_duplicate_match(db, member):
    """Under the default policy a repeat swipe is recorded but the pair keeps one match."""
    a = member("male")
    b = member("female")
    discovery.record_swipe(db, a.id, b.id, "like")
    discovery.record_swipe(db, b.id, a.id, "like")
    again = discovery.record_swipe(db, a.id, b.id, "like")
    assert again.is_match is True
    assert again.match_created is False
    assert len(db.matches) == 1
    assert len(discovery.list_swipes_by_user(db, a.id)) == 2


def test_pass_never_matches(db, member):
    a = member("male")
    b = member("female")
    discovery.record_swipe(db, a.id, b.id, "like")
    result = discovery.record_swipe(db, b.id, a.id, "pass")
    assert result.is_match is False
    assert db.matches == []


def test_latest_decision_supersedes(db, member):
    """A like later replaced by a pass no longer counts toward a match."""
    a = member("male")
    b = member("female")
    discovery.record_swipe(db, a.id, b.id, "like")
    discovery.record_swipe(db, a.id, b.id, "pass")
    result = discovery.record_swipe(db, b.id, a.id, "like")
    assert result.is_match is False
    assert db.matches == []


def test_reject_policy_refuses_repeat(db, member, backend):
    a = member("male")
    b = member("female")
    discovery.record_swipe(db, a.id, b.id, "pass", policy=SwipePolicy.REJECT)
    writes = backend.writes
    with pytest.raises(DuplicateSwipe):
        discovery.record_swipe(db, a.id, b.id, "like", policy=SwipePolicy.REJECT)
    assert backend.writes == writes
    assert len(discovery.list_swipes_by_user(db, a.id)) == 1


def test_invalid_swipes(db, member):
    a = member("male")
    with pytest.raises(ValidationError, match="yourself"):
        discovery.record_swipe(db, a.id, a.id, "like")
    with pytest.raises(ValidationError, match="Invalid action type"):
        discovery.record_swipe(db, a.id, a.id + 1, "love")
    assert db.swipe_actions == []
