import re
from typing import Iterable, List, Optional

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return text.strip().lower()


def normalize_tag(name: str) -> str:
    return normalize_text(name)


def normalize_tags(names: Iterable[str]) -> List[str]:
    """소문자/trim 후 중복과 빈 태그 제거 (입력 순서 유지)"""
    result: List[str] = []
    for name in names:
        tag = normalize_tag(name)
        if tag and tag not in result:
            result.append(tag)
    return result


def normalize_url(url: str) -> str:
    """중복 제출 검사용 키: scheme과 끝의 '/' 제거"""
    key = url.strip()
    key = _SCHEME_RE.sub("", key)
    return key.rstrip("/")
