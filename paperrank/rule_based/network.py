from typing import Sequence

from ..models.data_models import NetworkEdge, NetworkNode, Paper, PaperNetwork
from .overlap import find_overlap
from .scoring import NETWORK_AUTHOR_WEIGHT

NETWORK_CANDIDATE_LIMIT = 20


def _node(paper: Paper, is_target: bool = False) -> NetworkNode:
    return NetworkNode(
        id=str(paper.id),
        label=paper.title,
        url=paper.url,
        tags=list(paper.tags),
        is_target=is_target,
    )


def build_network(target: Paper, candidate_pool: Sequence[Paper]) -> PaperNetwork:
    """
    target 을 중심으로 한 star 그래프.
    후보당 edge 는 최대 1개: 태그 label 뒤에 저자 overlap 을 붙이고
    weight = 공유 태그 수 + 2 * 공유 저자 수.
    """
    candidates = [p for p in candidate_pool if p.id != target.id][:NETWORK_CANDIDATE_LIMIT]

    network = PaperNetwork(nodes=[_node(target, is_target=True)])
    network.nodes.extend(_node(p) for p in candidates)

    for p in candidates:
        overlap = find_overlap(target, p)
        if overlap.is_empty:
            continue

        parts = []
        if overlap.shared_tags:
            parts.append(", ".join(overlap.shared_tags))
        if overlap.shared_authors:
            parts.append("Authors: " + ", ".join(overlap.shared_authors))

        network.edges.append(NetworkEdge(
            source=str(target.id),
            target=str(p.id),
            label=" | ".join(parts),
            weight=len(overlap.shared_tags) + NETWORK_AUTHOR_WEIGHT * len(overlap.shared_authors),
        ))

    return network
