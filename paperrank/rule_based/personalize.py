from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..models.data_models import Paper, PreferenceProfile, ScoredCandidate
from .overlap import authors_match, split_authors
from .ranking import rank_papers
from .scoring import (
    age_in_days,
    preference_recency_bonus,
    preference_score,
    utc_now,
    vote_bonus,
)

PERSONALIZATION_CANDIDATE_LIMIT = 100
DEFAULT_PERSONALIZED_LIMIT = 10


# Preference Profile

def build_preference_profile(user_id: int, upvoted_papers: Iterable[Paper]) -> PreferenceProfile:
    """
    upvote 한 논문들로 태그 빈도표와 저자 집합을 만든다.
    태그는 논문마다 중복 없이 등장 횟수를 누적 (zkp 논문 2편 → zkp=2).
    """
    tag_counts: Counter = Counter()
    authors = set()

    for p in upvoted_papers:
        tag_counts.update(p.tags)
        authors.update(a.lower() for a in split_authors(p.authors))

    return PreferenceProfile(user_id=user_id, tag_counts=dict(tag_counts), authors=authors)


# Candidate Score

def score_candidate(paper: Paper, profile: PreferenceProfile,
                    now: Optional[datetime] = None) -> ScoredCandidate:
    now = now or utc_now()

    matched_tags = [t for t in paper.tags if profile.tag_counts.get(t)]
    tag_matches = sum(profile.tag_counts.get(t, 0) for t in paper.tags)

    matched_authors = [
        a for a in split_authors(paper.authors)
        if any(authors_match(a.lower(), pref) for pref in profile.authors)
    ]

    days = age_in_days(paper.created_at, now)
    score = preference_score(tag_matches, len(matched_authors), days, paper.vote_count)

    return ScoredCandidate(
        paper=paper,
        score=score,
        shared_tags=matched_tags,
        shared_authors=matched_authors,
        features={
            "tag_matches": float(tag_matches),
            "author_matches": float(len(matched_authors)),
            "recency": preference_recency_bonus(days),
            "votes": vote_bonus(paper.vote_count),
        },
    )


# Personalize

def personalize(user_id: Optional[int], candidate_pool: Sequence[Paper],
                upvoted_papers: Iterable[Paper] = (),
                limit: int = DEFAULT_PERSONALIZED_LIMIT,
                now: Optional[datetime] = None,
                voted_paper_ids: Iterable[str] = ()) -> List[ScoredCandidate]:
    """
    user_id 가 없으면 cold start: 전체 top 순위를 그대로 잘라서 반환.
    있으면 upvote 기반 선호 프로필로 후보를 점수화 (하한 필터 없음).
    """
    if user_id is None:
        top = rank_papers(candidate_pool, "top", now=now)[:limit]
        return [ScoredCandidate(paper=p, score=float(p.vote_count)) for p in top]

    now = now or utc_now()
    profile = build_preference_profile(user_id, upvoted_papers)

    # 어느 방향이든 투표한 논문은 다시 추천하지 않음
    excluded = set(voted_paper_ids)
    candidates = [p for p in candidate_pool if p.id not in excluded]

    results = [score_candidate(p, profile, now) for p in candidates]
    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]
