from icore.search.sequencer import parse_id_list, reorder


def test_parse_id_list_trims_and_drops_blanks():
    assert parse_id_list(" s1, ,s2,,s1 ") == ["s1", "s2", "s1"]
    assert parse_id_list("") == []
    assert parse_id_list(None) == []


def test_reorder_follows_id_list():
    docs = [{"storyID": "a"}, {"storyID": "b"}, {"storyID": "c"}]
    assert [d["storyID"] for d in reorder(["c", "a", "b"], docs)] == ["c", "a", "b"]


def test_reorder_drops_missing_ids_and_repeats_duplicates():
    docs = [{"storyID": "a", "title": "A"}]
    result = reorder(["x", "a", "a"], docs)
    assert result == [{"storyID": "a", "title": "A"}, {"storyID": "a", "title": "A"}]


def test_reorder_keeps_every_document_sharing_an_id():
    docs = [{"storyID": "a", "n": 1}, {"storyID": "b"}, {"storyID": "a", "n": 2}]
    result = reorder(["b", "a"], docs)
    assert [d.get("n") for d in result] == [None, 1, 2]


def test_reorder_matches_numeric_ids_as_text():
    docs = [{"id": 7}]
    assert reorder(["7"], docs, key="id") == [{"id": 7}]
