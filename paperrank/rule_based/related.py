import logging
from datetime import datetime
from typing import List, Optional, Sequence

from ..models.data_models import Paper, ScoredCandidate
from .overlap import find_overlap
from .scoring import age_in_days, related_recency_bonus, related_score, utc_now, vote_bonus

logger = logging.getLogger(__name__)

RELATED_CANDIDATE_LIMIT = 100
DEFAULT_RELATED_LIMIT = 10


def score_related(target: Paper, candidate_pool: Sequence[Paper],
                  limit: int = DEFAULT_RELATED_LIMIT,
                  now: Optional[datetime] = None) -> List[ScoredCandidate]:
    """
    target 과 태그/저자 overlap 기반으로 후보를 점수화.
    점수 0 이하 후보는 버리고 내림차순 상위 limit 개 반환.
    """
    now = now or utc_now()
    results: List[ScoredCandidate] = []

    for p in candidate_pool:
        # 자기 자신은 추천하지 않음
        if p.id == target.id:
            continue

        overlap = find_overlap(target, p)
        days = age_in_days(p.created_at, now)
        score = related_score(
            len(overlap.shared_tags), len(overlap.shared_authors), days, p.vote_count
        )
        if score <= 0:
            continue

        results.append(ScoredCandidate(
            paper=p,
            score=score,
            shared_tags=overlap.shared_tags,
            shared_authors=overlap.shared_authors,
            features={
                "shared_tags": float(len(overlap.shared_tags)),
                "shared_authors": float(len(overlap.shared_authors)),
                "recency": related_recency_bonus(days),
                "votes": vote_bonus(p.vote_count),
            },
        ))

    results.sort(key=lambda r: r.score, reverse=True)
    logger.debug(f"[Related] target={target.id} pool={len(candidate_pool)} kept={len(results)}")
    return results[:limit]
