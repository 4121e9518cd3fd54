from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from ..models.data_models import Vote

# Hot ranking (Hacker News style)
GRAVITY = 1.8
HOT_AGE_OFFSET_HOURS = 2

# Personalized recommendation weights
TAG_PREFERENCE_WEIGHT = 5
AUTHOR_PREFERENCE_BONUS = 15
PREFERENCE_RECENCY_MAX = 10
PREFERENCE_RECENCY_DECAY_DAYS = 7

# Related paper weights
RELATED_TAG_WEIGHT = 10
RELATED_AUTHOR_WEIGHT = 20
RELATED_RECENCY_MAX = 5
RELATED_RECENCY_DECAY_DAYS = 30

# Vote bonus (shared by related + personalized)
VOTE_BONUS_RATE = 0.5
VOTE_BONUS_CAP = 10

# Network edge weight per shared author
NETWORK_AUTHOR_WEIGHT = 2

_SECONDS_PER_HOUR = 60 * 60
_SECONDS_PER_DAY = 24 * _SECONDS_PER_HOUR


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# Age

def _age_seconds(created_at: datetime, now: Optional[datetime]) -> float:
    now = now or utc_now()
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return max((now - created_at).total_seconds(), 0.0)


def age_in_hours(created_at: datetime, now: Optional[datetime] = None) -> float:
    return _age_seconds(created_at, now) / _SECONDS_PER_HOUR


def age_in_days(created_at: datetime, now: Optional[datetime] = None) -> float:
    return _age_seconds(created_at, now) / _SECONDS_PER_DAY


# Primitives

def vote_score(votes: Iterable[Union[Vote, int]]) -> int:
    return sum(v.value if isinstance(v, Vote) else int(v) for v in votes)


def hotness(score: float, age_hours: float) -> float:
    """(score + 1) / (age + 2)^gravity"""
    age_hours = max(age_hours, 0.0)
    return (score + 1) / (age_hours + HOT_AGE_OFFSET_HOURS) ** GRAVITY


def vote_bonus(vote_count: float) -> float:
    return min(vote_count * VOTE_BONUS_RATE, VOTE_BONUS_CAP)


def preference_recency_bonus(recency_days: float) -> float:
    return max(0.0, PREFERENCE_RECENCY_MAX - recency_days / PREFERENCE_RECENCY_DECAY_DAYS)


def related_recency_bonus(age_days: float) -> float:
    return max(0.0, RELATED_RECENCY_MAX - age_days / RELATED_RECENCY_DECAY_DAYS)


def preference_score(tag_matches: float, author_matches: int,
                     recency_days: float, vote_count: float) -> float:
    """
    tag_matches: 후보 논문 태그별 선호 횟수의 합
    author_matches: 선호 저자와 매칭된 후보 저자 수
    """
    return (
        tag_matches * TAG_PREFERENCE_WEIGHT +
        author_matches * AUTHOR_PREFERENCE_BONUS +
        preference_recency_bonus(recency_days) +
        vote_bonus(vote_count)
    )


def related_score(shared_tag_count: int, shared_author_count: int,
                  age_days: float, vote_count: float) -> float:
    return (
        shared_tag_count * RELATED_TAG_WEIGHT +
        shared_author_count * RELATED_AUTHOR_WEIGHT +
        related_recency_bonus(age_days) +
        vote_bonus(vote_count)
    )
