from typing import Any, Dict, List, Optional, Sequence

from ..models.data_models import Paper

SEARCH_SORTS = ("relevance", "date", "votes")
DEFAULT_SEARCH_LIMIT = 30


def _contains(text: Optional[str], q: str) -> bool:
    return bool(text) and q.lower() in text.lower()


def _match_rank(paper: Paper, q: str) -> int:
    # 제목 > 저자 > 초록
    if _contains(paper.title, q):
        return 0
    if _contains(paper.authors, q):
        return 1
    if _contains(paper.abstract, q):
        return 2
    return 3


def sort_search_results(papers: Sequence[Paper], sort: str = "relevance",
                        q: Optional[str] = None) -> List[Paper]:
    if sort not in SEARCH_SORTS:
        sort = "relevance"

    if sort == "date":
        return sorted(papers, key=lambda p: p.created_at, reverse=True)

    # votes desc, created desc
    ordered = sorted(papers, key=lambda p: (p.vote_count, p.created_at), reverse=True)
    if sort == "relevance" and q:
        ordered.sort(key=lambda p: _match_rank(p, q))
    return ordered


def paginate(papers: Sequence[Paper], limit: int = DEFAULT_SEARCH_LIMIT,
             offset: int = 0) -> Dict[str, Any]:
    total = len(papers)
    return {
        "papers": list(papers[offset:offset + limit]),
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": offset + limit < total,
        },
    }
