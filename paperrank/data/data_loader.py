from __future__ import annotations
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

from dotenv import load_dotenv
from pymongo import ASCENDING, DESCENDING, MongoClient

from ..models.data_models import Comment, Paper
from .preprocess import normalize_tags, normalize_url

logger = logging.getLogger(__name__)


# -----------------------------------------
#  환경변수 로드 (프로젝트 루트 .env)
# -----------------------------------------
_CURRENT_DIR = Path(__file__).resolve().parent
# data -> paperrank -> project root
_PROJECT_ROOT = _CURRENT_DIR.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB", "paperrank")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "30000"))

SUGGESTION_LIMIT = 5


def _icontains(text: str) -> Dict[str, Any]:
    return {"$regex": re.escape(text), "$options": "i"}


class MongoDataLoader:
    """
    MongoDB 기반 Paper 로딩 + 투표/댓글 기록 클래스.

    - papers: 논문 문서 (tags 배열 포함, vote_count 는 저장하지 않음)
    - votes: (user_id, paper_id) 당 1개, value = +1 | -1
    - comments: parent_id 로 답글 관계를 표현하는 평평한 댓글 문서
    """

    def __init__(self, client: Optional[MongoClient] = None, db_name: str = None):
        if client is None:
            client = MongoClient(
                MONGO_URI,
                tz_aware=True,
                serverSelectionTimeoutMS=MONGO_TIMEOUT_MS,
                connectTimeoutMS=MONGO_TIMEOUT_MS,
                socketTimeoutMS=MONGO_TIMEOUT_MS,
            )

        self.client = client
        self.db = self.client[db_name or MONGO_DB_NAME]

        # Collections
        self.col_papers = self.db["papers"]
        self.col_votes = self.db["votes"]
        self.col_comments = self.db["comments"]

    def ensure_indexes(self) -> None:
        self.col_papers.create_index([("created_at", DESCENDING)])
        self.col_papers.create_index([("tags", ASCENDING)])
        self.col_papers.create_index([("url_key", ASCENDING)])
        self.col_votes.create_index(
            [("user_id", ASCENDING), ("paper_id", ASCENDING)], unique=True
        )
        self.col_votes.create_index([("paper_id", ASCENDING)])
        self.col_comments.create_index([("paper_id", ASCENDING), ("created_at", ASCENDING)])
        self.col_comments.create_index([("parent_id", ASCENDING)])
        self.col_comments.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])

    # ------------------------------------------------------
    # Paper Document → Paper dataclass 변환
    # ------------------------------------------------------
    @staticmethod
    def _doc_to_paper(doc: Dict[str, Any], vote_count: int = 0) -> Paper:
        return Paper(
            id=str(doc["_id"]),
            title=doc.get("title") or "",
            url=doc.get("url") or "",
            created_at=doc["created_at"],
            abstract=doc.get("abstract"),
            bib_entry=doc.get("bib_entry"),
            authors=doc.get("authors"),
            published_date=doc.get("published_date"),
            submitter_id=doc.get("submitter_id"),
            submitter_username=doc.get("submitter_username"),
            updated_at=doc.get("updated_at"),
            vote_count=int(vote_count),
            tags=list(doc.get("tags") or []),
        )

    def _vote_counts(self, paper_ids: Sequence[str]) -> Dict[str, int]:
        if not paper_ids:
            return {}
        cursor = self.col_votes.aggregate([
            {"$match": {"paper_id": {"$in": list(paper_ids)}}},
            {"$group": {"_id": "$paper_id", "vote_count": {"$sum": "$value"}}},
        ])
        return {d["_id"]: int(d["vote_count"]) for d in cursor}

    def _to_papers(self, docs: Iterable[Dict[str, Any]]) -> List[Paper]:
        docs = list(docs)
        counts = self._vote_counts([d["_id"] for d in docs])
        return [self._doc_to_paper(d, counts.get(d["_id"], 0)) for d in docs]

    # ------------------------------------------------------
    # PAPER 조회 관련
    # ------------------------------------------------------
    def get_paper(self, paper_id: str) -> Optional[Paper]:
        doc = self.col_papers.find_one({"_id": paper_id})
        if not doc:
            return None
        return self._doc_to_paper(doc, self.get_vote_count(paper_id))

    def get_all_papers(self, tag: Optional[str] = None) -> List[Paper]:
        query = {"tags": tag} if tag else {}
        cursor = self.col_papers.find(query).sort("created_at", DESCENDING)
        return self._to_papers(cursor)

    def get_recent_papers(self, limit: int = 100, exclude_id: Optional[str] = None) -> List[Paper]:
        query = {"_id": {"$ne": exclude_id}} if exclude_id else {}
        cursor = self.col_papers.find(query).sort("created_at", DESCENDING).limit(limit)
        return self._to_papers(cursor)

    def get_papers_sharing_tags(self, paper: Paper, limit: int = 20) -> List[Paper]:
        if not paper.tags:
            return []
        cursor = (
            self.col_papers.find({"tags": {"$in": list(paper.tags)}, "_id": {"$ne": paper.id}})
            .limit(limit)
        )
        return self._to_papers(cursor)

    def find_paper_by_url(self, url: str) -> Optional[Paper]:
        doc = self.col_papers.find_one({"url_key": normalize_url(url)})
        if not doc:
            return None
        return self._doc_to_paper(doc, self.get_vote_count(doc["_id"]))

    def insert_paper(
        self,
        title: str,
        url: str,
        submitter_id: int,
        tags: Iterable[str] = (),
        submitter_username: Optional[str] = None,
        abstract: Optional[str] = None,
        bib_entry: Optional[str] = None,
        authors: Optional[str] = None,
        published_date: Optional[str] = None,
    ) -> Paper:
        doc = {
            "_id": str(uuid4()),
            "title": title,
            "url": url.strip(),
            "url_key": normalize_url(url),
            "abstract": abstract,
            "bib_entry": bib_entry,
            "authors": authors,
            "published_date": published_date,
            "submitter_id": submitter_id,
            "submitter_username": submitter_username,
            "tags": normalize_tags(tags),
            "created_at": datetime.now(timezone.utc),
        }
        self.col_papers.insert_one(doc)
        logger.info(f"[Mongo] paper inserted: id={doc['_id']}, tags={doc['tags']}")
        return self._doc_to_paper(doc)

    # ------------------------------------------------------
    # VOTE 관련
    # ------------------------------------------------------
    def get_vote_count(self, paper_id: str) -> int:
        return self._vote_counts([paper_id]).get(paper_id, 0)

    def cast_vote(self, user_id: int, paper_id: str, value: int) -> int:
        """
        value: 1 / -1 → upsert, 0 → 투표 취소.
        반환값은 갱신된 vote_count.
        """
        if value == 0:
            self.col_votes.delete_one({"user_id": user_id, "paper_id": paper_id})
        else:
            self.col_votes.update_one(
                {"user_id": user_id, "paper_id": paper_id},
                {
                    "$set": {"value": value, "updated_at": datetime.now(timezone.utc)},
                    "$setOnInsert": {"created_at": datetime.now(timezone.utc)},
                },
                upsert=True,
            )
        return self.get_vote_count(paper_id)

    def get_user_votes(self, user_id: int, paper_ids: Sequence[str]) -> Dict[str, int]:
        cursor = self.col_votes.find({"user_id": user_id, "paper_id": {"$in": list(paper_ids)}})
        return {d["paper_id"]: int(d["value"]) for d in cursor}

    # ------------------------------------------------------
    # USER 기반 후보
    # ------------------------------------------------------
    def get_voted_paper_ids(self, user_id: int) -> List[str]:
        return [d["paper_id"] for d in self.col_votes.find({"user_id": user_id})]

    def get_upvoted_papers(self, user_id: int) -> List[Paper]:
        # downvote 는 선호 프로필에 반영하지 않음
        ids = [d["paper_id"] for d in self.col_votes.find({"user_id": user_id, "value": 1})]
        if not ids:
            return []
        return self._to_papers(self.col_papers.find({"_id": {"$in": ids}}))

    def get_unvoted_papers(self, user_id: int, limit: int = 100) -> List[Paper]:
        voted = self.get_voted_paper_ids(user_id)
        cursor = (
            self.col_papers.find({"_id": {"$nin": voted}})
            .sort("created_at", DESCENDING)
            .limit(limit)
        )
        return self._to_papers(cursor)

    # ------------------------------------------------------
    # SEARCH / TAGS
    # ------------------------------------------------------
    def search_papers(
        self,
        q: Optional[str] = None,
        title: Optional[str] = None,
        author: Optional[str] = None,
        abstract: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[Paper]:
        conditions: List[Dict[str, Any]] = []

        if q:
            conditions.append({"$or": [
                {"title": _icontains(q)},
                {"abstract": _icontains(q)},
                {"authors": _icontains(q)},
            ]})
        if title:
            conditions.append({"title": _icontains(title)})
        if author:
            conditions.append({"authors": _icontains(author)})
        if abstract:
            conditions.append({"abstract": _icontains(abstract)})
        if tag:
            conditions.append({"tags": tag})

        query = {"$and": conditions} if conditions else {}
        return self._to_papers(self.col_papers.find(query))

    def _latest_distinct(self, field: str, pattern: Dict[str, Any]) -> List[str]:
        # 같은 값은 하나로 묶은 뒤 자르므로 중복이 limit 를 차지하지 않는다
        cursor = self.col_papers.aggregate([
            {"$match": {field: pattern}},
            {"$group": {"_id": f"${field}", "latest": {"$max": "$created_at"}}},
            {"$sort": {"latest": -1, "_id": 1}},
            {"$limit": SUGGESTION_LIMIT},
        ])
        return [d["_id"] for d in cursor]

    def get_search_suggestions(self, q: str) -> Dict[str, List[str]]:
        pattern = _icontains(q)
        tags = [
            d["_id"] for d in self.col_papers.aggregate([
                {"$unwind": "$tags"},
                {"$match": {"tags": pattern}},
                {"$group": {"_id": "$tags"}},
                {"$sort": {"_id": 1}},
                {"$limit": SUGGESTION_LIMIT},
            ])
        ]
        return {
            "titles": self._latest_distinct("title", pattern),
            "authors": self._latest_distinct("authors", pattern),
            "tags": tags,
        }

    def list_tags(self) -> List[Dict[str, Any]]:
        cursor = self.col_papers.aggregate([
            {"$unwind": "$tags"},
            {"$group": {"_id": "$tags", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ])
        return [{"name": d["_id"], "count": int(d["count"])} for d in cursor]

    # ------------------------------------------------------
    # COMMENT 관련
    # ------------------------------------------------------
    @staticmethod
    def _doc_to_comment(doc: Dict[str, Any], paper_title: Optional[str] = None) -> Comment:
        return Comment(
            id=str(doc["_id"]),
            paper_id=doc["paper_id"],
            user_id=doc["user_id"],
            content=doc.get("content") or "",
            created_at=doc["created_at"],
            parent_id=doc.get("parent_id"),
            username=doc.get("username"),
            deleted=bool(doc.get("deleted", False)),
            updated_at=doc.get("updated_at"),
            paper_title=paper_title,
        )

    def get_comments(self, paper_id: str) -> List[Comment]:
        cursor = self.col_comments.find({"paper_id": paper_id}).sort("created_at", ASCENDING)
        return [self._doc_to_comment(d) for d in cursor]

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        doc = self.col_comments.find_one({"_id": comment_id})
        return self._doc_to_comment(doc) if doc else None

    def count_replies(self, comment_id: str) -> int:
        return self.col_comments.count_documents({"parent_id": comment_id})

    def insert_comment(
        self,
        paper_id: str,
        user_id: int,
        content: str,
        parent_id: Optional[str] = None,
        username: Optional[str] = None,
    ) -> Comment:
        now = datetime.now(timezone.utc)
        doc = {
            "_id": str(uuid4()),
            "paper_id": paper_id,
            "user_id": user_id,
            "username": username,
            "parent_id": parent_id,
            "content": content,
            "deleted": False,
            "created_at": now,
            "updated_at": now,
        }
        self.col_comments.insert_one(doc)
        logger.info(f"[Mongo] comment inserted: id={doc['_id']}, paper_id={paper_id}, parent_id={parent_id}")
        return self._doc_to_comment(doc)

    def update_comment(self, comment_id: str, content: str, deleted: bool = False) -> Optional[Comment]:
        self.col_comments.update_one(
            {"_id": comment_id},
            {"$set": {"content": content, "deleted": deleted, "updated_at": datetime.now(timezone.utc)}},
        )
        return self.get_comment(comment_id)

    def delete_comment(self, comment_id: str) -> None:
        self.col_comments.delete_one({"_id": comment_id})

    # ------------------------------------------------------
    # USER 프로필 (사용자 테이블은 외부 인증 서비스 담당 → 활동 기록에서 집계)
    # ------------------------------------------------------
    def _find_username(self, user_id: int) -> Optional[str]:
        lookups = (
            (self.col_papers, "submitter_id", "submitter_username"),
            (self.col_comments, "user_id", "username"),
        )
        for col, id_field, name_field in lookups:
            doc = col.find_one(
                {id_field: user_id, name_field: {"$ne": None}},
                sort=[("created_at", DESCENDING)],
            )
            if doc:
                return doc[name_field]
        return None

    def get_user_stats(self, user_id: int) -> Dict[str, Any]:
        paper_ids = [d["_id"] for d in self.col_papers.find({"submitter_id": user_id}, {"_id": 1})]
        received = sum(self._vote_counts(paper_ids).values())
        return {
            "user_id": user_id,
            "username": self._find_username(user_id),
            "submission_count": len(paper_ids),
            "comment_count": self.col_comments.count_documents({"user_id": user_id}),
            "vote_count": self.col_votes.count_documents({"user_id": user_id}),
            "total_votes_received": received,
        }

    def get_user_submissions(self, user_id: int, limit: int = 30, offset: int = 0) -> List[Paper]:
        cursor = (
            self.col_papers.find({"submitter_id": user_id})
            .sort("created_at", DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        return self._to_papers(cursor)

    def _paper_docs(self, paper_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        if not paper_ids:
            return {}
        return {d["_id"]: d for d in self.col_papers.find({"_id": {"$in": list(set(paper_ids))}})}

    def get_user_comments(self, user_id: int, limit: int = 30, offset: int = 0) -> List[Comment]:
        docs = list(
            self.col_comments.find({"user_id": user_id})
            .sort("created_at", DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        papers = self._paper_docs([d["paper_id"] for d in docs])
        return [
            self._doc_to_comment(d, papers[d["paper_id"]].get("title"))
            for d in docs
            if d["paper_id"] in papers
        ]

    def get_user_vote_history(self, user_id: int, limit: int = 30, offset: int = 0) -> List[Dict[str, Any]]:
        docs = list(
            self.col_votes.find({"user_id": user_id})
            .sort("created_at", DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        papers = self._paper_docs([d["paper_id"] for d in docs])

        history = []
        for d in docs:
            paper = papers.get(d["paper_id"])
            if paper is None:
                continue
            created_at = d.get("created_at")
            history.append({
                "vote_type": int(d["value"]),
                "created_at": created_at.isoformat() if created_at else None,
                "paper_id": paper["_id"],
                "paper_title": paper.get("title") or "",
                "paper_url": paper.get("url") or "",
                "submitter_username": paper.get("submitter_username"),
                "tags": list(paper.get("tags") or []),
            })
        return history
