from conftest import make_paper
from paperrank.rule_based.overlap import (
    author_match_pairs,
    authors_match,
    find_overlap,
    shared_authors,
    shared_tags,
    split_authors,
)


def test_split_authors_trims_and_drops_empty():
    assert split_authors(" John Smith ,Alice Jones, ") == ["John Smith", "Alice Jones"]
    assert split_authors(None) == []
    assert split_authors("") == []


def test_shared_tags_is_exact_intersection():
    assert shared_tags(["zkp", "crypto"], ["zkp", "privacy"]) == ["zkp"]
    assert shared_tags(["zkp"], ["zk"]) == []
    assert shared_tags([], ["zkp"]) == []


def test_authors_match_is_case_insensitive_substring():
    assert authors_match("Smith", "John Smith")
    assert authors_match("JOHN SMITH", "smith")
    assert not authors_match("Alice Jones", "John Smith")


def test_short_names_match_loosely():
    assert authors_match("Li", "Lin")


def test_shared_authors_keeps_fragments_from_first_list():
    a = ["John Smith", "Alice Jones", "Bob"]
    b = ["smith", "Carol"]
    assert shared_authors(a, b) == ["John Smith"]
    assert shared_authors(b, a) == ["smith"]


def test_shared_authors_does_not_deduplicate():
    assert shared_authors(["Smith", "Smith"], ["John Smith"]) == ["Smith", "Smith"]


def test_author_match_pairs_symmetric():
    a = ["John Smith", "Li", "Alice"]
    b = ["Smith", "Lin Wei", "Bob"]
    forward = author_match_pairs(a, b)
    backward = author_match_pairs(b, a)
    assert forward == {(y, x) for (x, y) in backward}
    assert forward == {("John Smith", "Smith"), ("Li", "Lin Wei")}


def test_find_overlap_between_papers():
    target = make_paper("t", tags=["zkp", "crypto"], authors="John Smith, Alice Jones")
    other = make_paper("o", tags=["crypto"], authors="Smith")
    overlap = find_overlap(target, other)
    assert overlap.shared_tags == ["crypto"]
    assert overlap.shared_authors == ["John Smith"]
    assert not overlap.is_empty
    assert find_overlap(target, make_paper("n", tags=["misc"])).is_empty
