from .api_interface import (
    add_comment,
    cast_vote,
    delete_comment,
    edit_comment,
    get_comments,
    get_paper_network,
    get_papers,
    get_personalized_recommendations,
    get_related_papers,
    get_search_suggestions,
    get_user_comments,
    get_user_profile,
    get_user_submissions,
    get_user_votes,
    list_tags,
    search_papers,
    submit_paper,
)

__all__ = [
    "add_comment",
    "cast_vote",
    "delete_comment",
    "edit_comment",
    "get_comments",
    "get_paper_network",
    "get_papers",
    "get_personalized_recommendations",
    "get_related_papers",
    "get_search_suggestions",
    "get_user_comments",
    "get_user_profile",
    "get_user_submissions",
    "get_user_votes",
    "list_tags",
    "search_papers",
    "submit_paper",
]
