from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # DB에서 naive datetime이 오면 UTC로 간주
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class Paper:
    id: str
    title: str
    url: str
    created_at: datetime
    abstract: Optional[str] = None
    bib_entry: Optional[str] = None
    authors: Optional[str] = None
    published_date: Optional[str] = None
    submitter_id: Optional[int] = None
    submitter_username: Optional[str] = None
    updated_at: Optional[datetime] = None
    vote_count: int = 0
    tags: List[str] = field(default_factory=list)
    user_vote: Optional[int] = None

    def __post_init__(self) -> None:
        self.created_at = _as_utc(self.created_at)
        self.updated_at = _as_utc(self.updated_at)

    def to_frontend_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "abstract": self.abstract,
            "bib_entry": self.bib_entry,
            "authors": self.authors,
            "published_date": self.published_date,
            "submitter_id": self.submitter_id,
            "submitter_username": self.submitter_username,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "vote_count": self.vote_count,
            "tags": list(self.tags),
            "user_vote": self.user_vote,
        }


@dataclass
class Vote:
    user_id: int
    paper_id: str
    value: int  # +1 | -1


@dataclass
class PreferenceProfile:
    user_id: int
    tag_counts: Dict[str, int] = field(default_factory=dict)
    authors: Set[str] = field(default_factory=set)


@dataclass
class ScoredCandidate:
    paper: Paper
    score: float
    shared_tags: List[str] = field(default_factory=list)
    shared_authors: List[str] = field(default_factory=list)
    features: Dict[str, float] = field(default_factory=dict)

    def to_frontend_dict(self) -> Dict[str, Any]:
        return {
            **self.paper.to_frontend_dict(),
            "score": self.score,
            "shared_tags": list(self.shared_tags),
            "shared_authors": list(self.shared_authors),
            "features": dict(self.features),
        }


@dataclass
class NetworkNode:
    id: str
    label: str
    url: str
    tags: List[str] = field(default_factory=list)
    is_target: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "url": self.url,
            "tags": list(self.tags),
            "isTarget": self.is_target,
        }


@dataclass
class NetworkEdge:
    source: str
    target: str
    label: str
    weight: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "label": self.label,
            "weight": self.weight,
        }


@dataclass
class PaperNetwork:
    nodes: List[NetworkNode] = field(default_factory=list)
    edges: List[NetworkEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class Comment:
    id: str
    paper_id: str
    user_id: int
    content: str
    created_at: datetime
    parent_id: Optional[str] = None
    username: Optional[str] = None
    deleted: bool = False
    updated_at: Optional[datetime] = None
    paper_title: Optional[str] = None
    replies: List["Comment"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.created_at = _as_utc(self.created_at)
        self.updated_at = _as_utc(self.updated_at)

    def to_frontend_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "paper_id": self.paper_id,
            "paper_title": self.paper_title,
            "user_id": self.user_id,
            "username": self.username,
            "parent_id": self.parent_id,
            "content": self.content,
            "deleted": self.deleted,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "replies": [r.to_frontend_dict() for r in self.replies],
        }
