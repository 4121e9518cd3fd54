from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from paperrank.data.preprocess import normalize_tags, normalize_url
from paperrank.models.data_models import Comment, Paper

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_paper(paper_id, tags=(), authors=None, days_old=0.0, vote_count=0, title=None, **kwargs):
    return Paper(
        id=paper_id,
        title=title or f"Paper {paper_id}",
        url=f"https://example.org/{paper_id}",
        created_at=NOW - timedelta(days=days_old),
        authors=authors,
        vote_count=vote_count,
        tags=list(tags),
        **kwargs,
    )


class InMemoryLoader:
    """MongoDataLoader 와 같은 메서드를 가진 테스트용 loader"""

    def __init__(self, papers=()):
        self.papers: Dict[str, Paper] = {p.id: replace(p, vote_count=0) for p in papers}
        self.votes: Dict[Tuple[int, str], int] = {}
        self.comments: Dict[str, Comment] = {}
        self._comment_seq = 0

    def _with_count(self, paper: Paper) -> Paper:
        return replace(paper, vote_count=self.get_vote_count(paper.id), tags=list(paper.tags))

    def _newest_first(self, papers) -> List[Paper]:
        return sorted((self._with_count(p) for p in papers), key=lambda p: p.created_at, reverse=True)

    def get_vote_count(self, paper_id: str) -> int:
        return sum(v for (_, pid), v in self.votes.items() if pid == paper_id)

    def get_paper(self, paper_id: str) -> Optional[Paper]:
        paper = self.papers.get(paper_id)
        return self._with_count(paper) if paper else None

    def get_all_papers(self, tag=None) -> List[Paper]:
        return self._newest_first(p for p in self.papers.values() if not tag or tag in p.tags)

    def get_recent_papers(self, limit=100, exclude_id=None) -> List[Paper]:
        return self._newest_first(p for p in self.papers.values() if p.id != exclude_id)[:limit]

    def get_papers_sharing_tags(self, paper, limit=20) -> List[Paper]:
        return [
            self._with_count(p) for p in self.papers.values()
            if p.id != paper.id and set(p.tags) & set(paper.tags)
        ][:limit]

    def get_voted_paper_ids(self, user_id) -> List[str]:
        return [pid for (uid, pid) in self.votes if uid == user_id]

    def get_upvoted_papers(self, user_id) -> List[Paper]:
        return [self.get_paper(pid) for (uid, pid), v in self.votes.items() if uid == user_id and v == 1]

    def get_unvoted_papers(self, user_id, limit=100) -> List[Paper]:
        voted = set(self.get_voted_paper_ids(user_id))
        return self._newest_first(p for p in self.papers.values() if p.id not in voted)[:limit]

    def get_user_votes(self, user_id, paper_ids) -> Dict[str, int]:
        return {pid: v for (uid, pid), v in self.votes.items() if uid == user_id and pid in paper_ids}

    def cast_vote(self, user_id, paper_id, value) -> int:
        if value == 0:
            self.votes.pop((user_id, paper_id), None)
        else:
            self.votes[(user_id, paper_id)] = value
        return self.get_vote_count(paper_id)

    def find_paper_by_url(self, url) -> Optional[Paper]:
        key = normalize_url(url)
        for p in self.papers.values():
            if normalize_url(p.url) == key:
                return p
        return None

    def insert_paper(self, title, url, submitter_id, tags=(), submitter_username=None, **fields) -> Paper:
        paper = Paper(
            id=f"new-{len(self.papers) + 1}",
            title=title,
            url=url,
            created_at=datetime.now(timezone.utc),
            submitter_id=submitter_id,
            submitter_username=submitter_username,
            tags=normalize_tags(tags),
            **fields,
        )
        self.papers[paper.id] = paper
        return paper

    def search_papers(self, q=None, title=None, author=None, abstract=None, tag=None) -> List[Paper]:
        def has(text, needle):
            return bool(text) and needle.lower() in text.lower()

        result = []
        for p in self.papers.values():
            if q and not (has(p.title, q) or has(p.abstract, q) or has(p.authors, q)):
                continue
            if title and not has(p.title, title):
                continue
            if author and not has(p.authors, author):
                continue
            if abstract and not has(p.abstract, abstract):
                continue
            if tag and tag not in p.tags:
                continue
            result.append(self._with_count(p))
        return result

    def get_search_suggestions(self, q):
        return {
            "titles": [p.title for p in self.papers.values() if q.lower() in p.title.lower()][:5],
            "authors": [],
            "tags": [],
        }

    def list_tags(self):
        counts: Dict[str, int] = {}
        for p in self.papers.values():
            for t in p.tags:
                counts[t] = counts.get(t, 0) + 1
        ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [{"name": name, "count": count} for name, count in ordered]

    # 댓글: 삽입 순서 = created_at 오름차순
    def get_comments(self, paper_id) -> List[Comment]:
        return [replace(c) for c in self.comments.values() if c.paper_id == paper_id]

    def get_comment(self, comment_id) -> Optional[Comment]:
        comment = self.comments.get(comment_id)
        return replace(comment) if comment else None

    def count_replies(self, comment_id) -> int:
        return sum(1 for c in self.comments.values() if c.parent_id == comment_id)

    def insert_comment(self, paper_id, user_id, content, parent_id=None, username=None) -> Comment:
        self._comment_seq += 1
        comment = Comment(
            id=f"c{self._comment_seq}",
            paper_id=paper_id,
            user_id=user_id,
            content=content,
            created_at=NOW + timedelta(minutes=self._comment_seq),
            parent_id=parent_id,
            username=username,
        )
        self.comments[comment.id] = comment
        return replace(comment)

    def update_comment(self, comment_id, content, deleted=False) -> Optional[Comment]:
        comment = self.comments[comment_id]
        comment.content = content
        comment.deleted = deleted
        comment.updated_at = NOW + timedelta(hours=1)
        return replace(comment)

    def delete_comment(self, comment_id) -> None:
        self.comments.pop(comment_id, None)

    # 사용자 프로필
    def get_user_stats(self, user_id):
        submitted = [p for p in self.papers.values() if p.submitter_id == user_id]
        names = [p.submitter_username for p in submitted] + [
            c.username for c in self.comments.values() if c.user_id == user_id
        ]
        return {
            "user_id": user_id,
            "username": next((n for n in names if n), None),
            "submission_count": len(submitted),
            "comment_count": sum(1 for c in self.comments.values() if c.user_id == user_id),
            "vote_count": len(self.get_voted_paper_ids(user_id)),
            "total_votes_received": sum(self.get_vote_count(p.id) for p in submitted),
        }

    def get_user_submissions(self, user_id, limit=30, offset=0) -> List[Paper]:
        mine = self._newest_first(p for p in self.papers.values() if p.submitter_id == user_id)
        return mine[offset:offset + limit]

    def get_user_comments(self, user_id, limit=30, offset=0) -> List[Comment]:
        mine = [
            replace(c, paper_title=self.papers[c.paper_id].title)
            for c in reversed(list(self.comments.values()))
            if c.user_id == user_id and c.paper_id in self.papers
        ]
        return mine[offset:offset + limit]

    def get_user_vote_history(self, user_id, limit=30, offset=0):
        history = [
            {
                "vote_type": v,
                "created_at": None,
                "paper_id": pid,
                "paper_title": self.papers[pid].title,
                "paper_url": self.papers[pid].url,
                "submitter_username": self.papers[pid].submitter_username,
                "tags": list(self.papers[pid].tags),
            }
            for (uid, pid), v in reversed(list(self.votes.items()))
            if uid == user_id and pid in self.papers
        ]
        return history[offset:offset + limit]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_papers():
    return [
        make_paper("target", tags=["zkp", "crypto"], authors="John Smith, Alice Jones", days_old=3),
        make_paper("x", tags=["zkp", "privacy"], days_old=10, vote_count=5),
        make_paper("y", tags=["blockchain"], days_old=1, vote_count=50),
        make_paper("z", tags=["mpc"], authors="Smith", days_old=40),
        make_paper("old", tags=["misc"], days_old=400),
    ]


@pytest.fixture
def loader(sample_papers):
    return InMemoryLoader(sample_papers)
