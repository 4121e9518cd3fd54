from dataclasses import replace
from typing import Dict, List, Sequence

from ..models.data_models import Comment


def build_comment_tree(comments: Sequence[Comment]) -> List[Comment]:
    """
    평평한 댓글 목록(created_at 오름차순) → parent/child 트리.
    부모를 찾을 수 없는 답글은 버린다.
    """
    nodes: Dict[str, Comment] = {c.id: replace(c, replies=[]) for c in comments}
    roots: List[Comment] = []

    for c in comments:
        node = nodes[c.id]
        if c.parent_id is None:
            roots.append(node)
        elif c.parent_id in nodes:
            nodes[c.parent_id].replies.append(node)

    return roots
