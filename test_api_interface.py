import pytest

from paperrank.errors import DuplicatePaperError, InvalidVoteError, PaperNotFoundError, UserNotFoundError
from paperrank.interface import api_interface
from paperrank.rule_based.rule_based_recommender import RuleBasedRecommender


@pytest.fixture(autouse=True)
def use_loader(monkeypatch, loader):
    monkeypatch.setattr(api_interface, "_loader_singleton", loader)
    monkeypatch.setattr(api_interface, "_recommender_singleton", RuleBasedRecommender(loader))
    return loader


def test_vote_updates_count_and_can_be_retracted(loader):
    assert api_interface.cast_vote(1, "x", 1) == {"vote_count": 1, "user_vote": 1}
    assert api_interface.cast_vote(2, "x", 1)["vote_count"] == 2
    # 같은 유저가 방향을 바꾸면 덮어쓴다
    assert api_interface.cast_vote(1, "x", -1)["vote_count"] == 0
    assert api_interface.cast_vote(1, "x", 0) == {"vote_count": 1, "user_vote": None}


def test_invalid_vote_rejected():
    with pytest.raises(InvalidVoteError):
        api_interface.cast_vote(1, "x", 2)


def test_vote_on_missing_paper():
    with pytest.raises(PaperNotFoundError):
        api_interface.cast_vote(1, "nope", 1)


def test_get_papers_top_with_user_vote(loader):
    api_interface.cast_vote(1, "y", 1)
    api_interface.cast_vote(2, "y", 1)
    api_interface.cast_vote(2, "z", -1)

    result = api_interface.get_papers(sort="top", user_id=2, limit=3)
    assert result["count"] == 3
    first = result["results"][0]
    assert first["id"] == "y"
    assert first["vote_count"] == 2
    assert first["user_vote"] == 1


def test_get_papers_tag_filter():
    result = api_interface.get_papers(sort="new", tag="zkp")
    assert {p["id"] for p in result["results"]} == {"target", "x"}


def test_related_papers_for_missing_paper():
    with pytest.raises(PaperNotFoundError):
        api_interface.get_related_papers("missing")


def test_related_papers_excludes_target():
    result = api_interface.get_related_papers("target", limit=10)
    ids = [r["id"] for r in result["results"]]
    assert "target" not in ids
    assert "x" in ids
    assert all(r["score"] > 0 for r in result["results"])


def test_network_only_uses_tag_sharing_papers():
    network = api_interface.get_paper_network("target")
    assert [n["id"] for n in network["nodes"]] == ["target", "x"]
    assert network["edges"] == [{"from": "target", "to": "x", "label": "zkp", "weight": 1}]


def test_personalized_excludes_any_voted_paper():
    api_interface.cast_vote(5, "x", 1)
    api_interface.cast_vote(5, "y", -1)

    result = api_interface.get_personalized_recommendations(5, limit=10)
    ids = [r["id"] for r in result["results"]]
    assert result["mode"] == "personalized"
    assert "x" not in ids and "y" not in ids
    # x(zkp) 를 upvote 했으므로 zkp 태그 논문이 가장 위
    assert ids[0] == "target"


def test_personalized_cold_start():
    api_interface.cast_vote(1, "z", 1)
    result = api_interface.get_personalized_recommendations(None, limit=2)
    assert result["mode"] == "top"
    # 나머지는 모두 0표 → 최신순 (y 가 1일 전)
    assert [r["id"] for r in result["results"]] == ["z", "y"]


def test_submit_normalizes_tags_and_rejects_duplicates():
    paper = api_interface.submit_paper(
        user_id=1, url="https://eprint.iacr.org/2024/1", title="New", tags=[" ZKP ", "zkp", ""],
    )
    assert paper["tags"] == ["zkp"]

    with pytest.raises(DuplicatePaperError) as exc:
        api_interface.submit_paper(user_id=2, url="http://eprint.iacr.org/2024/1/", title="Again")
    assert exc.value.existing.id == paper["id"]


def test_search_and_tags():
    result = api_interface.search_papers(tag="zkp", sort="date", limit=1)
    assert result["pagination"] == {"total": 2, "limit": 1, "offset": 0, "hasMore": True}
    assert result["papers"][0]["id"] == "target"

    tags = api_interface.list_tags()
    assert tags["results"][0] == {"name": "zkp", "count": 2}


def test_short_suggestion_query_returns_empty():
    assert api_interface.get_search_suggestions("z") == {"titles": [], "authors": [], "tags": []}


def test_user_profile_and_activity():
    paper = api_interface.submit_paper(user_id=7, url="https://example.org/mine", title="Mine", username="alice")
    api_interface.cast_vote(8, paper["id"], 1)
    api_interface.cast_vote(9, paper["id"], 1)
    api_interface.cast_vote(8, "x", -1)
    api_interface.add_comment(paper["id"], user_id=8, content="nice", username="bob")

    profile = api_interface.get_user_profile(7)
    assert profile["user"] == {"user_id": 7, "username": "alice"}
    assert profile["stats"] == {
        "submission_count": 1, "comment_count": 0, "vote_count": 0, "total_votes_received": 2,
    }

    bob = api_interface.get_user_profile(8)
    assert bob["user"]["username"] == "bob"
    assert bob["stats"]["vote_count"] == 2
    assert bob["stats"]["comment_count"] == 1

    submissions = api_interface.get_user_submissions(7)
    assert [p["id"] for p in submissions["results"]] == [paper["id"]]
    assert submissions["results"][0]["vote_count"] == 2

    comments = api_interface.get_user_comments(8)
    assert comments["results"][0]["paper_title"] == "Mine"
    assert "replies" not in comments["results"][0]

    votes = api_interface.get_user_votes(8)
    # 최근 투표가 먼저
    assert [(v["paper_id"], v["vote_type"]) for v in votes["results"]] == [("x", -1), (paper["id"], 1)]
    assert api_interface.get_user_votes(8, limit=1, offset=1)["results"][0]["paper_title"] == "Mine"


def test_user_without_activity_not_found():
    with pytest.raises(UserNotFoundError):
        api_interface.get_user_profile(404)
