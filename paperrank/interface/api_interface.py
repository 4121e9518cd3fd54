from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, Optional

from ..data.data_loader import MongoDataLoader
from ..data.preprocess import normalize_tags
from ..errors import (
    CommentNotFoundError,
    CommentPermissionError,
    DuplicatePaperError,
    InvalidCommentError,
    InvalidVoteError,
    PaperNotFoundError,
    UserNotFoundError,
)
from ..models.data_models import Comment
from ..rule_based.comment_tree import build_comment_tree
from ..rule_based.rule_based_recommender import DEFAULT_LIST_LIMIT, RuleBasedRecommender
from ..rule_based.search import DEFAULT_SEARCH_LIMIT, paginate, sort_search_results

logger = logging.getLogger(__name__)

VALID_VOTES = (1, -1, 0)
MIN_SUGGESTION_QUERY = 2
DEFAULT_PROFILE_LIMIT = 30
DELETED_COMMENT_TEXT = "[deleted by the author]"

# MongoDataLoader / Recommender 싱글톤
_loader_singleton: Optional[MongoDataLoader] = None
_recommender_singleton: Optional[RuleBasedRecommender] = None


def _get_loader() -> MongoDataLoader:
    global _loader_singleton
    if _loader_singleton is None:
        _loader_singleton = MongoDataLoader()
    return _loader_singleton


def _get_recommender() -> RuleBasedRecommender:
    global _recommender_singleton
    if _recommender_singleton is None:
        _recommender_singleton = RuleBasedRecommender(_get_loader())
    return _recommender_singleton


# ------------------------------------------------------
# 논문 목록 (hot / top / new)
# ------------------------------------------------------
def get_papers(
    sort: str = "new",
    tag: Optional[str] = None,
    user_id: Optional[int] = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> Dict[str, Any]:
    papers = _get_recommender().rank(sort=sort, tag=tag, user_id=user_id, limit=limit)
    return {
        "sort": sort,
        "count": len(papers),
        "results": [p.to_frontend_dict() for p in papers],
    }


# ------------------------------------------------------
# 관련 논문 / 네트워크 그래프
# ------------------------------------------------------
def get_related_papers(paper_id: str, limit: int = 10) -> Dict[str, Any]:
    results = _get_recommender().recommend_related(paper_id, top_k=limit)
    return {
        "paper_id": paper_id,
        "count": len(results),
        "results": [r.to_frontend_dict() for r in results],
    }


def get_paper_network(paper_id: str) -> Dict[str, Any]:
    network = _get_recommender().paper_network(paper_id)
    logger.info(f"[Network] paper_id={paper_id}, nodes={len(network.nodes)}, edges={len(network.edges)}")
    return network.to_dict()


# ------------------------------------------------------
# 개인화 추천 (user_id 없으면 전체 top)
# ------------------------------------------------------
def get_personalized_recommendations(user_id: Optional[int], limit: int = 10) -> Dict[str, Any]:
    results = _get_recommender().recommend_for_user(user_id, top_k=limit)
    return {
        "user_id": user_id,
        "count": len(results),
        "results": [r.to_frontend_dict() for r in results],
        "mode": "personalized" if user_id is not None else "top",
    }


# ------------------------------------------------------
# 투표
# ------------------------------------------------------
def cast_vote(user_id: int, paper_id: str, value: int) -> Dict[str, Any]:
    if value not in VALID_VOTES:
        raise InvalidVoteError(value)

    loader = _get_loader()
    if loader.get_paper(paper_id) is None:
        raise PaperNotFoundError(paper_id)

    vote_count = loader.cast_vote(user_id, paper_id, value)
    logger.info(f"[Vote] user_id={user_id}, paper_id={paper_id}, value={value} -> vote_count={vote_count}")

    return {
        "vote_count": vote_count,
        "user_vote": None if value == 0 else value,
    }


# ------------------------------------------------------
# 논문 제출 (메타데이터 자동 추출은 외부 담당, 여기서는 수동 입력)
# ------------------------------------------------------
def submit_paper(
    user_id: int,
    url: str,
    title: str,
    tags: Iterable[str] = (),
    username: Optional[str] = None,
    abstract: Optional[str] = None,
    bib_entry: Optional[str] = None,
    authors: Optional[str] = None,
    published_date: Optional[str] = None,
) -> Dict[str, Any]:
    loader = _get_loader()

    existing = loader.find_paper_by_url(url)
    if existing is not None:
        raise DuplicatePaperError(existing)

    paper = loader.insert_paper(
        title=title,
        url=url,
        submitter_id=user_id,
        submitter_username=username,
        tags=normalize_tags(tags),
        abstract=abstract,
        bib_entry=bib_entry,
        authors=authors,
        published_date=published_date,
    )
    return paper.to_frontend_dict()


# ------------------------------------------------------
# 검색 / 태그
# ------------------------------------------------------
def search_papers(
    q: Optional[str] = None,
    title: Optional[str] = None,
    author: Optional[str] = None,
    abstract: Optional[str] = None,
    tag: Optional[str] = None,
    sort: str = "relevance",
    limit: int = DEFAULT_SEARCH_LIMIT,
    offset: int = 0,
) -> Dict[str, Any]:
    papers = _get_loader().search_papers(q=q, title=title, author=author, abstract=abstract, tag=tag)
    page = paginate(sort_search_results(papers, sort=sort, q=q), limit=limit, offset=offset)
    page["papers"] = [p.to_frontend_dict() for p in page["papers"]]
    return page


def get_search_suggestions(q: Optional[str]) -> Dict[str, Any]:
    if not q or len(q) < MIN_SUGGESTION_QUERY:
        return {"titles": [], "authors": [], "tags": []}
    return _get_loader().get_search_suggestions(q)


def list_tags() -> Dict[str, Any]:
    tags = _get_loader().list_tags()
    return {"count": len(tags), "results": tags}


# ------------------------------------------------------
# 댓글 (parent_id 기반 스레드)
# ------------------------------------------------------
def get_comments(paper_id: str) -> Dict[str, Any]:
    loader = _get_loader()
    if loader.get_paper(paper_id) is None:
        raise PaperNotFoundError(paper_id)

    comments = loader.get_comments(paper_id)
    tree = build_comment_tree(comments)
    return {
        "paper_id": paper_id,
        "count": len(comments),
        "results": [c.to_frontend_dict() for c in tree],
    }


def _get_own_comment(loader: MongoDataLoader, paper_id: str, comment_id: str, user_id: int, action: str) -> Comment:
    comment = loader.get_comment(comment_id)
    if comment is None:
        raise CommentNotFoundError(comment_id)
    if comment.user_id != user_id:
        raise CommentPermissionError(action)
    if comment.paper_id != paper_id:
        raise InvalidCommentError("Comment does not belong to this paper")
    return comment


def add_comment(
    paper_id: str,
    user_id: int,
    content: str,
    parent_id: Optional[str] = None,
    username: Optional[str] = None,
) -> Dict[str, Any]:
    content = (content or "").strip()
    if not content:
        raise InvalidCommentError("Comment content is required")

    loader = _get_loader()
    if loader.get_paper(paper_id) is None:
        raise PaperNotFoundError(paper_id)

    if parent_id is not None:
        parent = loader.get_comment(parent_id)
        if parent is None:
            raise CommentNotFoundError(parent_id, "Parent comment not found")
        if parent.paper_id != paper_id:
            raise InvalidCommentError("Parent comment does not belong to this paper")

    comment = loader.insert_comment(
        paper_id=paper_id, user_id=user_id, content=content, parent_id=parent_id, username=username,
    )
    logger.info(f"[Comment] added: paper_id={paper_id}, comment_id={comment.id}, parent_id={parent_id}")
    return comment.to_frontend_dict()


def edit_comment(paper_id: str, comment_id: str, user_id: int, content: str) -> Dict[str, Any]:
    content = (content or "").strip()
    if not content:
        raise InvalidCommentError("Comment content is required")

    loader = _get_loader()
    comment = _get_own_comment(loader, paper_id, comment_id, user_id, "edit")
    if comment.deleted:
        raise InvalidCommentError("Cannot edit a deleted comment")

    return loader.update_comment(comment_id, content).to_frontend_dict()


def delete_comment(paper_id: str, comment_id: str, user_id: int) -> Dict[str, Any]:
    """
    답글이 달린 댓글은 스레드 유지를 위해 soft delete (내용만 교체),
    답글이 없으면 문서를 지운다.
    """
    loader = _get_loader()
    _get_own_comment(loader, paper_id, comment_id, user_id, "delete")

    if loader.count_replies(comment_id) > 0:
        loader.update_comment(comment_id, DELETED_COMMENT_TEXT, deleted=True)
        logger.info(f"[Comment] soft deleted: comment_id={comment_id}")
        return {"message": "Comment marked as deleted", "soft": True}

    loader.delete_comment(comment_id)
    logger.info(f"[Comment] deleted: comment_id={comment_id}")
    return {"message": "Comment deleted successfully", "soft": False}


# ------------------------------------------------------
# 사용자 프로필 / 활동 내역
# ------------------------------------------------------
def get_user_profile(user_id: int) -> Dict[str, Any]:
    stats = _get_loader().get_user_stats(user_id)
    activity = (
        stats["submission_count"] + stats["comment_count"] + stats["vote_count"]
    )
    if activity == 0:
        raise UserNotFoundError(user_id)

    return {
        "user": {"user_id": user_id, "username": stats["username"]},
        "stats": {
            "submission_count": stats["submission_count"],
            "comment_count": stats["comment_count"],
            "vote_count": stats["vote_count"],
            "total_votes_received": stats["total_votes_received"],
        },
    }


def get_user_submissions(user_id: int, limit: int = DEFAULT_PROFILE_LIMIT, offset: int = 0) -> Dict[str, Any]:
    papers = _get_loader().get_user_submissions(user_id, limit=limit, offset=offset)
    return {
        "user_id": user_id,
        "count": len(papers),
        "results": [p.to_frontend_dict() for p in papers],
    }


def get_user_comments(user_id: int, limit: int = DEFAULT_PROFILE_LIMIT, offset: int = 0) -> Dict[str, Any]:
    comments = _get_loader().get_user_comments(user_id, limit=limit, offset=offset)
    results = []
    for c in comments:
        item = c.to_frontend_dict()
        item.pop("replies")
        results.append(item)
    return {"user_id": user_id, "count": len(results), "results": results}


def get_user_votes(user_id: int, limit: int = DEFAULT_PROFILE_LIMIT, offset: int = 0) -> Dict[str, Any]:
    votes = _get_loader().get_user_vote_history(user_id, limit=limit, offset=offset)
    return {"user_id": user_id, "count": len(votes), "results": votes}
