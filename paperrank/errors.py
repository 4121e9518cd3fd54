"""서비스 계층에서 발생시키는 도메인 예외. server.py 에서 HTTP 상태 코드로 매핑된다."""
from __future__ import annotations

from typing import Optional

from .models.data_models import Paper


class PaperRankError(Exception):
    """paperrank 예외의 공통 부모 클래스"""


class PaperNotFoundError(PaperRankError, LookupError):
    def __init__(self, paper_id: str):
        super().__init__(f"Paper not found: {paper_id}")
        self.paper_id = paper_id


class InvalidVoteError(PaperRankError, ValueError):
    def __init__(self, value: int):
        super().__init__("Vote must be 1 (upvote), -1 (downvote), or 0 (remove)")
        self.value = value


class DuplicatePaperError(PaperRankError):
    def __init__(self, existing: Optional[Paper] = None):
        super().__init__("This paper has already been submitted")
        self.existing = existing


class CommentNotFoundError(PaperRankError, LookupError):
    """댓글(또는 답글의 부모 댓글)이 없을 때 → 404"""

    def __init__(self, comment_id: str, message: str = "Comment not found"):
        super().__init__(message)
        self.comment_id = comment_id


class InvalidCommentError(PaperRankError, ValueError):
    """빈 내용, 다른 논문의 댓글, 삭제된 댓글 수정 → 400"""


class CommentPermissionError(PaperRankError):
    """작성자가 아닌 사용자의 수정/삭제 → 403"""

    def __init__(self, action: str = "delete"):
        super().__init__(f"You can only {action} your own comments")
        self.action = action


class UserNotFoundError(PaperRankError, LookupError):
    """제출/댓글/투표 기록이 하나도 없는 사용자 → 404"""

    def __init__(self, user_id: int):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id
