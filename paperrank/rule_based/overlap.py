"""
태그/저자 overlap 추출.

저자 매칭은 양방향 부분 문자열 포함 (대소문자 무시).
"J. Smith" / "John Smith" 같은 표기 차이를 느슨하게 잡지만
"Li" 가 "Lin" 에 매칭되는 식의 오탐도 그대로 허용한다.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..models.data_models import Paper


@dataclass
class Overlap:
    shared_tags: List[str] = field(default_factory=list)
    shared_authors: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.shared_tags and not self.shared_authors


def split_authors(authors: Optional[str]) -> List[str]:
    if not authors:
        return []
    # 빈 조각은 모든 저자에 매칭되므로 버린다
    return [a.strip() for a in authors.split(",") if a.strip()]


def authors_match(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def shared_tags(tags_a: Iterable[str], tags_b: Iterable[str]) -> List[str]:
    other = set(tags_b)
    return [t for t in tags_a if t in other]


def shared_authors(authors_a: Sequence[str], authors_b: Sequence[str]) -> List[str]:
    return [a for a in authors_a if any(authors_match(a, b) for b in authors_b)]


def author_match_pairs(authors_a: Sequence[str], authors_b: Sequence[str]) -> Set[Tuple[str, str]]:
    return {(a, b) for a in authors_a for b in authors_b if authors_match(a, b)}


def find_overlap(target: Paper, candidate: Paper) -> Overlap:
    return Overlap(
        shared_tags=shared_tags(target.tags, candidate.tags),
        shared_authors=shared_authors(
            split_authors(target.authors), split_authors(candidate.authors)
        ),
    )
