import pytest

from conftest import NOW, make_paper
from paperrank.rule_based.personalize import build_preference_profile, personalize, score_candidate
from paperrank.rule_based.ranking import rank_papers


@pytest.fixture
def upvoted():
    return [
        make_paper("u1", tags=["zkp"], authors="Alice Jones"),
        make_paper("u2", tags=["zkp", "mpc"], authors=" Bob Lee ,"),
    ]


def test_profile_counts_tag_occurrences(upvoted):
    profile = build_preference_profile(7, upvoted)
    assert profile.user_id == 7
    assert profile.tag_counts == {"zkp": 2, "mpc": 1}
    assert profile.authors == {"alice jones", "bob lee"}


def test_frequency_weighted_tag_scoring(upvoted):
    profile = build_preference_profile(7, upvoted)
    # 70일 지난 0표 논문: recency/vote 보너스 0
    zkp = score_candidate(make_paper("c1", tags=["zkp"], days_old=70), profile, NOW)
    mpc = score_candidate(make_paper("c2", tags=["mpc"], days_old=70), profile, NOW)
    assert zkp.score == pytest.approx(10)
    assert mpc.score == pytest.approx(5)
    assert zkp.shared_tags == ["zkp"]


def test_author_preference_bonus(upvoted):
    profile = build_preference_profile(7, upvoted)
    cand = make_paper("c3", authors="Jones, Carol White", days_old=70)
    scored = score_candidate(cand, profile, NOW)
    assert scored.score == pytest.approx(15)
    assert scored.shared_authors == ["Jones"]


def test_personalize_orders_by_score_without_floor(upvoted):
    pool = [
        make_paper("none", tags=["misc"], days_old=70),
        make_paper("mpc", tags=["mpc"], days_old=70),
        make_paper("zkp", tags=["zkp"], days_old=70),
    ]
    results = personalize(7, pool, upvoted, limit=10, now=NOW)
    assert [r.paper.id for r in results] == ["zkp", "mpc", "none"]
    assert results[-1].score == 0


def test_personalize_excludes_voted_papers(upvoted):
    pool = [make_paper("seen", tags=["zkp"]), make_paper("fresh", tags=["misc"])]
    results = personalize(7, pool, upvoted, now=NOW, voted_paper_ids=["seen"])
    assert [r.paper.id for r in results] == ["fresh"]


def test_personalize_limit(upvoted):
    pool = [make_paper(f"p{i}", tags=["zkp"], days_old=i) for i in range(5)]
    assert len(personalize(7, pool, upvoted, limit=3, now=NOW)) == 3


def test_cold_start_equals_top_ranking(sample_papers):
    results = personalize(None, sample_papers, limit=3, now=NOW)
    expected = rank_papers(sample_papers, "top", now=NOW)[:3]
    assert [r.paper for r in results] == expected
    assert [r.score for r in results] == [float(p.vote_count) for p in expected]


def test_user_without_upvotes_gets_recency_and_votes_only():
    pool = [make_paper("a", days_old=0, vote_count=0), make_paper("b", days_old=70, vote_count=40)]
    results = personalize(3, pool, [], now=NOW)
    assert [r.score for r in results] == [pytest.approx(10), pytest.approx(10)]
