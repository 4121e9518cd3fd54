"""
paperrank 서버 - FastAPI 메인 파일.

논문 목록(hot/top/new), 투표, 댓글 스레드, 사용자 프로필, 검색,
관련 논문, 네트워크 그래프, 개인화 추천 API를 제공합니다.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from paperrank.errors import (
    CommentNotFoundError,
    CommentPermissionError,
    DuplicatePaperError,
    InvalidCommentError,
    InvalidVoteError,
    PaperNotFoundError,
    UserNotFoundError,
)
from paperrank.interface import api_interface

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# --- Schemas ---


class PaperOut(BaseModel):
    """논문 1건"""
    id: str
    title: str
    url: str
    abstract: Optional[str] = None
    bib_entry: Optional[str] = None
    authors: Optional[str] = None
    published_date: Optional[str] = None
    submitter_id: Optional[int] = None
    submitter_username: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None
    vote_count: int = 0
    tags: List[str] = []
    user_vote: Optional[int] = None


class ScoredPaperOut(PaperOut):
    """점수와 근거(공유 태그/저자)가 붙은 추천 논문"""
    score: float
    shared_tags: List[str] = []
    shared_authors: List[str] = []
    features: Dict[str, float] = {}


class PaperListResponse(BaseModel):
    sort: str
    count: int
    results: List[PaperOut]


class RecommendationResponse(BaseModel):
    """추천 API 응답"""
    user_id: Optional[int] = None
    mode: str
    count: int
    results: List[ScoredPaperOut]
    timestamp: str


class RelatedPapersResponse(BaseModel):
    paper_id: str
    count: int
    results: List[ScoredPaperOut]
    timestamp: str


class NetworkNodeOut(BaseModel):
    id: str
    label: str
    url: str
    tags: List[str] = []
    isTarget: bool = False


class NetworkEdgeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    to: str
    label: str
    weight: int


class NetworkResponse(BaseModel):
    nodes: List[NetworkNodeOut]
    edges: List[NetworkEdgeOut]


class VoteRequest(BaseModel):
    user_id: int
    vote: int  # 1 | -1 | 0(취소)


class VoteResponse(BaseModel):
    vote_count: int
    user_vote: Optional[int] = None


class SubmitRequest(BaseModel):
    user_id: int
    url: str
    title: str
    username: Optional[str] = None
    tags: List[str] = []
    abstract: Optional[str] = None
    bib_entry: Optional[str] = None
    authors: Optional[str] = None
    published_date: Optional[str] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


class SearchResponse(BaseModel):
    papers: List[PaperOut]
    pagination: Pagination


class SuggestionResponse(BaseModel):
    titles: List[str] = []
    authors: List[str] = []
    tags: List[str] = []


class TagCount(BaseModel):
    name: str
    count: int


class TagListResponse(BaseModel):
    count: int
    results: List[TagCount]


class CommentOut(BaseModel):
    """댓글 1건 (replies 에 답글이 재귀적으로 달림)"""
    id: str
    paper_id: str
    paper_title: Optional[str] = None
    user_id: int
    username: Optional[str] = None
    parent_id: Optional[str] = None
    content: str
    deleted: bool = False
    created_at: str
    updated_at: Optional[str] = None
    replies: List["CommentOut"] = []


class CommentListResponse(BaseModel):
    paper_id: str
    count: int
    results: List[CommentOut]


class CommentRequest(BaseModel):
    user_id: int
    content: str
    parent_id: Optional[str] = None
    username: Optional[str] = None


class CommentEditRequest(BaseModel):
    user_id: int
    content: str


class CommentDeleteResponse(BaseModel):
    message: str
    soft: bool


class UserOut(BaseModel):
    user_id: int
    username: Optional[str] = None


class UserStats(BaseModel):
    submission_count: int
    comment_count: int
    vote_count: int
    total_votes_received: int


class UserProfileResponse(BaseModel):
    user: UserOut
    stats: UserStats


class UserPapersResponse(BaseModel):
    user_id: int
    count: int
    results: List[PaperOut]


class UserCommentsResponse(BaseModel):
    user_id: int
    count: int
    results: List[CommentOut]


class VoteHistoryOut(BaseModel):
    vote_type: int
    created_at: Optional[str] = None
    paper_id: str
    paper_title: str
    paper_url: str
    submitter_username: Optional[str] = None
    tags: List[str] = []


class UserVotesResponse(BaseModel):
    user_id: int
    count: int
    results: List[VoteHistoryOut]


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    service: str
    version: str


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- Lifespan ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 시작 및 종료"""
    logger.info("[Startup] paperrank server starting...")

    try:
        logger.info("[Startup] Ensuring MongoDB indexes...")
        api_interface._get_loader().ensure_indexes()
        logger.info("[Startup] MongoDB ready")
    except Exception as e:
        logger.warning(f"[Startup] Index setup failed (will retry on first request): {e}")

    yield

    logger.info("[Shutdown] paperrank server shutting down...")


app = FastAPI(
    title="paperrank",
    description="커뮤니티 논문 공유 사이트의 랭킹/추천 API",
    version="1.0.0",
    lifespan=lifespan,
)


# --- API Endpoints ---


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """헬스 체크"""
    return HealthResponse(status="ok", service="paperrank", version="1.0.0")


@app.get("/papers", response_model=PaperListResponse)
def list_papers(
    sort: Literal["hot", "top", "new"] = Query("new", description="정렬 방식"),
    tag: Optional[str] = Query(None, description="태그 필터"),
    user_id: Optional[int] = Query(None, description="로그인 사용자 ID (본인 투표 표시)"),
    limit: int = Query(50, ge=1, le=200, description="개수"),
):
    try:
        logger.info(f"[API] Papers: sort={sort}, tag={tag}, user_id={user_id}, limit={limit}")
        return api_interface.get_papers(sort=sort, tag=tag, user_id=user_id, limit=limit)
    except Exception as e:
        logger.error(f"[API] Papers error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/papers", response_model=PaperOut, status_code=201)
def submit_paper(request: SubmitRequest):
    if not request.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")
    try:
        logger.info(f"[API] Submit: user_id={request.user_id}, url={request.url}")
        return api_interface.submit_paper(
            user_id=request.user_id,
            url=request.url,
            title=request.title,
            tags=request.tags,
            username=request.username,
            abstract=request.abstract,
            bib_entry=request.bib_entry,
            authors=request.authors,
            published_date=request.published_date,
        )
    except DuplicatePaperError as e:
        existing = e.existing
        raise HTTPException(status_code=409, detail={
            "error": str(e),
            "existingPaper": {
                "id": existing.id,
                "title": existing.title,
                "url": existing.url,
            } if existing else None,
        })
    except Exception as e:
        logger.error(f"[API] Submit error: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit paper")


@app.get("/papers/tags", response_model=TagListResponse)
def list_tags():
    try:
        return api_interface.list_tags()
    except Exception as e:
        logger.error(f"[API] Tags error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/papers/{paper_id}/vote", response_model=VoteResponse)
def vote(paper_id: str, request: VoteRequest):
    try:
        return api_interface.cast_vote(request.user_id, paper_id, request.vote)
    except InvalidVoteError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found")
    except Exception as e:
        logger.error(f"[API] Vote error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/papers/{paper_id}/comments", response_model=CommentListResponse)
def list_comments(paper_id: str):
    """논문의 댓글 스레드 (parent/child 트리)"""
    try:
        return api_interface.get_comments(paper_id)
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found")
    except Exception as e:
        logger.error(f"[API] Comments error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/papers/{paper_id}/comments", response_model=CommentOut, status_code=201)
def create_comment(paper_id: str, request: CommentRequest):
    try:
        logger.info(f"[API] Comment: paper_id={paper_id}, user_id={request.user_id}, parent_id={request.parent_id}")
        return api_interface.add_comment(
            paper_id=paper_id,
            user_id=request.user_id,
            content=request.content,
            parent_id=request.parent_id,
            username=request.username,
        )
    except InvalidCommentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found")
    except CommentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"[API] Comment error: {e}")
        raise HTTPException(status_code=500, detail="Failed to create comment")


@app.patch("/papers/{paper_id}/comments/{comment_id}", response_model=CommentOut)
def update_comment(paper_id: str, comment_id: str, request: CommentEditRequest):
    try:
        return api_interface.edit_comment(paper_id, comment_id, request.user_id, request.content)
    except InvalidCommentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CommentPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except CommentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"[API] Comment edit error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update comment")


@app.delete("/papers/{paper_id}/comments/{comment_id}", response_model=CommentDeleteResponse)
def remove_comment(
    paper_id: str,
    comment_id: str,
    user_id: int = Query(..., description="삭제 요청 사용자 ID"),
):
    """답글이 있으면 soft delete, 없으면 삭제"""
    try:
        return api_interface.delete_comment(paper_id, comment_id, user_id)
    except InvalidCommentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CommentPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except CommentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"[API] Comment delete error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete comment")


@app.get("/users/{user_id}", response_model=UserProfileResponse)
def user_profile(user_id: int):
    """사용자 프로필 + 활동 통계"""
    try:
        return api_interface.get_user_profile(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except Exception as e:
        logger.error(f"[API] User profile error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/users/{user_id}/submissions", response_model=UserPapersResponse)
def user_submissions(
    user_id: int,
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return api_interface.get_user_submissions(user_id, limit=limit, offset=offset)
    except Exception as e:
        logger.error(f"[API] User submissions error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/users/{user_id}/comments", response_model=UserCommentsResponse)
def user_comments(
    user_id: int,
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return api_interface.get_user_comments(user_id, limit=limit, offset=offset)
    except Exception as e:
        logger.error(f"[API] User comments error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/users/{user_id}/votes", response_model=UserVotesResponse)
def user_votes(
    user_id: int,
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return api_interface.get_user_votes(user_id, limit=limit, offset=offset)
    except Exception as e:
        logger.error(f"[API] User votes error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/search", response_model=SearchResponse)
def search(
    q: Optional[str] = Query(None, description="제목/초록/저자 통합 검색"),
    title: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    abstract: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    sort: Literal["relevance", "date", "votes"] = Query("relevance"),
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return api_interface.search_papers(
            q=q, title=title, author=author, abstract=abstract, tag=tag,
            sort=sort, limit=limit, offset=offset,
        )
    except Exception as e:
        logger.error(f"[API] Search error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/search/suggestions", response_model=SuggestionResponse)
def search_suggestions(q: Optional[str] = Query(None)):
    try:
        return api_interface.get_search_suggestions(q)
    except Exception as e:
        logger.error(f"[API] Suggestions error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/recommendations/related/{paper_id}", response_model=RelatedPapersResponse)
def related_papers(
    paper_id: str,
    limit: int = Query(10, ge=1, le=100, description="추천 개수"),
):
    """태그/저자 overlap 기반 관련 논문"""
    try:
        logger.info(f"[API] Related papers: paper_id={paper_id}, limit={limit}")
        result: Dict[str, Any] = api_interface.get_related_papers(paper_id, limit=limit)
        logger.info(f"[API] Returned {result['count']} related papers")
        return {**result, "timestamp": _timestamp()}
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found")
    except Exception as e:
        logger.error(f"[API] Related papers error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/recommendations/network/{paper_id}", response_model=NetworkResponse)
def paper_network(paper_id: str):
    """그래프 시각화용 노드/엣지"""
    try:
        return api_interface.get_paper_network(paper_id)
    except PaperNotFoundError:
        raise HTTPException(status_code=404, detail="Paper not found")
    except Exception as e:
        logger.error(f"[API] Network error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/recommendations/personalized", response_model=RecommendationResponse)
def personalized(
    user_id: Optional[int] = Query(None, description="사용자 ID (없으면 전체 top)"),
    limit: int = Query(10, ge=1, le=100, description="추천 개수"),
):
    """
    개인화 추천.

    upvote 한 논문의 태그/저자로 선호 프로필을 만들고
    아직 투표하지 않은 논문을 점수화합니다.
    """
    try:
        logger.info(f"[API] Personalized: user_id={user_id}, limit={limit}")
        result = api_interface.get_personalized_recommendations(user_id, limit=limit)
        logger.info(f"[API] Returned {result['count']} recommendations ({result['mode']})")
        return {**result, "timestamp": _timestamp()}
    except Exception as e:
        logger.error(f"[API] Personalized error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
