from .data.mock_data import get_mock_papers
from .rule_based.network import build_network
from .rule_based.ranking import STRATEGIES, rank_papers
from .rule_based.related import score_related


def demo_ranking():
    papers = get_mock_papers()
    for strategy in STRATEGIES:
        print(f"=== {strategy} ===")
        for p in rank_papers(papers, strategy):
            print(f"{p.title[:60]} (votes={p.vote_count})")


def demo_related(paper_index: int = 0):
    papers = get_mock_papers()
    target = papers[paper_index]
    print(f"=== Related to: {target.title[:60]} ===")
    for r in score_related(target, papers):
        print(f"{r.paper.title[:60]} (score={r.score:.2f}, tags={r.shared_tags}, authors={r.shared_authors})")

    network = build_network(target, papers)
    print(f"network: {len(network.nodes)} nodes, {len(network.edges)} edges")


if __name__ == "__main__":
    demo_ranking()
    demo_related()
