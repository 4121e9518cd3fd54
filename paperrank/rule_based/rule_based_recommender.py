import logging
from datetime import datetime
from typing import List, Optional

from ..data.data_loader import MongoDataLoader
from ..errors import PaperNotFoundError
from ..models.data_models import Paper, PaperNetwork, ScoredCandidate
from .network import NETWORK_CANDIDATE_LIMIT, build_network
from .personalize import DEFAULT_PERSONALIZED_LIMIT, PERSONALIZATION_CANDIDATE_LIMIT, personalize
from .ranking import DEFAULT_STRATEGY, rank_papers
from .related import DEFAULT_RELATED_LIMIT, RELATED_CANDIDATE_LIMIT, score_related

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


class RuleBasedRecommender:
    def __init__(self, data_loader: MongoDataLoader):
        self.data_loader = data_loader

    def _get_paper(self, paper_id: str) -> Paper:
        paper = self.data_loader.get_paper(paper_id)
        if paper is None:
            raise PaperNotFoundError(paper_id)
        return paper

    def rank(
            self,
            sort: str = DEFAULT_STRATEGY,
            tag: Optional[str] = None,
            user_id: Optional[int] = None,
            limit: int = DEFAULT_LIST_LIMIT,
            now: Optional[datetime] = None,
        ) -> List[Paper]:

        candidates = self.data_loader.get_all_papers(tag=tag)
        ranked = rank_papers(candidates, sort, now=now)[:limit]

        # 로그인 유저면 본인 투표값 표시
        if user_id is not None and ranked:
            votes = self.data_loader.get_user_votes(user_id, [p.id for p in ranked])
            for p in ranked:
                p.user_vote = votes.get(p.id)
        return ranked

    def recommend_related(self, paper_id: str, top_k: int = DEFAULT_RELATED_LIMIT,
                          now: Optional[datetime] = None) -> List[ScoredCandidate]:
        target = self._get_paper(paper_id)
        pool = self.data_loader.get_recent_papers(RELATED_CANDIDATE_LIMIT, exclude_id=target.id)
        return score_related(target, pool, limit=top_k, now=now)

    def paper_network(self, paper_id: str) -> PaperNetwork:
        target = self._get_paper(paper_id)
        pool = self.data_loader.get_papers_sharing_tags(target, NETWORK_CANDIDATE_LIMIT)
        return build_network(target, pool)

    def recommend_for_user(self, user_id: Optional[int], top_k: int = DEFAULT_PERSONALIZED_LIMIT,
                           now: Optional[datetime] = None) -> List[ScoredCandidate]:
        if user_id is None:
            return personalize(None, self.data_loader.get_all_papers(), limit=top_k, now=now)

        upvoted = self.data_loader.get_upvoted_papers(user_id)
        pool = self.data_loader.get_unvoted_papers(user_id, PERSONALIZATION_CANDIDATE_LIMIT)
        logger.info(f"[Personalize] user_id={user_id}, upvoted={len(upvoted)}, candidates={len(pool)}")
        return personalize(user_id, pool, upvoted, limit=top_k, now=now)
