from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from ..models.data_models import Paper
from .scoring import GRAVITY, HOT_AGE_OFFSET_HOURS, age_in_hours, utc_now

STRATEGIES = ("hot", "top", "new")
DEFAULT_STRATEGY = "new"


def hotness_scores(papers: Sequence[Paper], now: Optional[datetime] = None) -> np.ndarray:
    """후보 전체의 hotness를 한 번에 계산 (scoring.hotness 와 동일한 식)"""
    now = now or utc_now()
    if not papers:
        return np.zeros((0,), dtype=float)

    votes = np.asarray([p.vote_count for p in papers], dtype=float)
    ages = np.asarray([age_in_hours(p.created_at, now) for p in papers], dtype=float)
    return (votes + 1.0) / np.power(ages + HOT_AGE_OFFSET_HOURS, GRAVITY)


def rank_papers(candidates: Sequence[Paper], strategy: str = DEFAULT_STRATEGY,
                now: Optional[datetime] = None) -> List[Paper]:
    """
    hot: hotness 내림차순
    top: vote_count 내림차순, 동점이면 최신 우선
    new: created_at 내림차순, 동점이면 득표 많은 순
    완전 동점은 입력 순서를 유지한다 (stable sort).
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown ranking strategy: {strategy!r} (expected one of {STRATEGIES})")

    papers = list(candidates)

    if strategy == "hot":
        scores = hotness_scores(papers, now)
        order = np.argsort(-scores, kind="stable")
        return [papers[i] for i in order]

    if strategy == "top":
        return sorted(papers, key=lambda p: (p.vote_count, p.created_at), reverse=True)

    return sorted(papers, key=lambda p: (p.created_at, p.vote_count), reverse=True)
