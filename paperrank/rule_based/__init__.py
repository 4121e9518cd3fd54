from .scoring import hotness, preference_score, related_score, vote_score
from .ranking import rank_papers
from .related import score_related
from .personalize import build_preference_profile, personalize
from .network import build_network
from .comment_tree import build_comment_tree
from .rule_based_recommender import RuleBasedRecommender

__all__ = [
    "hotness",
    "preference_score",
    "related_score",
    "vote_score",
    "rank_papers",
    "score_related",
    "build_preference_profile",
    "personalize",
    "build_network",
    "build_comment_tree",
    "RuleBasedRecommender",
]
