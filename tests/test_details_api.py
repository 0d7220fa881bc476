import json

import pytest

from icore.api.details_api import DetailsService, find_story_id, parse_order
from icore.api.models import BiographyDetails
from icore.errors import InvalidRequestError, StorageServiceError
from icore.retrieval.blob_store import BlobDocument

BIOGRAPHY = {
    "Accession": "A2001.001",
    "MakerCategories": ["ScienceMakers", "EducationMakers"],
    "Sessions": [
        {
            "SessionOrder": 2,
            "Tapes": [
                {"TapeOrder": 1, "Stories": [{"StoryID": "s-201"}, {"StoryID": "s-202"}]},
            ],
        },
        {
            "SessionOrder": 1,
            "Tapes": [
                {"TapeOrder": 3, "Stories": [{"StoryID": "s-131"}]},
                {"TapeOrder": 1, "Stories": [{"StoryID": "s-111"}, {"StoryID": "s-112"}]},
            ],
        },
    ],
}


def _blob(payload):
    content = json.dumps(payload).encode("utf-8")
    return BlobDocument(content=content, content_type="application/json", length=len(content))


class FakeStore:
    def __init__(self, blobs):
        self.blobs = blobs
        self.fetched = []

    def fetch(self, container, blob_name, timeout=None):
        self.fetched.append((container, blob_name))
        return self.blobs.get(blob_name)


@pytest.fixture
def store():
    return FakeStore(
        {
            "biography/details/A2001.001": _blob(BIOGRAPHY),
            "story/details/s-112": _blob({"storyID": "s-112"}),
            "story/details/s-202": _blob({"storyID": "s-202"}),
        }
    )


def test_details_document_accepts_pascal_case():
    details = BiographyDetails.model_validate(BIOGRAPHY)
    assert details.accession == "A2001.001"
    assert details.maker_categories == ["ScienceMakers", "EducationMakers"]
    assert details.sessions[1].tapes[1].stories[0].story_id == "s-111"


def test_find_story_id_matches_order_values_not_positions():
    details = BiographyDetails.model_validate(BIOGRAPHY)
    assert find_story_id(details, 1, 1, 2) == "s-112"
    assert find_story_id(details, 2, 1, 2) == "s-202"
    assert find_story_id(details, 1, 3, 1) == "s-131"


def test_find_story_id_missing_positions():
    details = BiographyDetails.model_validate(BIOGRAPHY)
    assert find_story_id(details, 3, 1, 1) is None
    assert find_story_id(details, 1, 2, 1) is None
    assert find_story_id(details, 1, 1, 3) is None


@pytest.mark.parametrize("value", ["0", "-1", "abc", "", None, "40000"])
def test_parse_order_rejects_bad_values(value):
    with pytest.raises(InvalidRequestError):
        parse_order("tapeOrder", value)


def test_parse_order_accepts_whole_numbers():
    assert parse_order("tapeOrder", " 7 ") == 7


def test_biography_details(store):
    blob = DetailsService(store).biography_details("A2001.001")
    assert json.loads(blob.content)["Accession"] == "A2001.001"
    assert store.fetched == [("data", "biography/details/A2001.001")]


def test_story_details(store):
    service = DetailsService(store, container="docs")
    assert json.loads(service.story_details("s-112").content) == {"storyID": "s-112"}
    assert store.fetched == [("docs", "story/details/s-112")]


def test_missing_documents_are_none(store):
    service = DetailsService(store)
    assert service.biography_details("nobody") is None
    assert service.story_details("nothing") is None


@pytest.mark.parametrize("method", ["biography_details", "story_details"])
def test_blank_identifier_is_client_error(store, method):
    with pytest.raises(InvalidRequestError):
        getattr(DetailsService(store), method)("  ")


def test_story_details_via_sequence(store):
    blob = DetailsService(store).story_details_via_sequence("A2001.001", "2", "1", "2")

    assert json.loads(blob.content) == {"storyID": "s-202"}
    assert store.fetched[-1] == ("data", "story/details/s-202")


def test_sequence_without_story_is_none(store):
    service = DetailsService(store)
    assert service.story_details_via_sequence("A2001.001", "1", "1", "9") is None
    assert service.story_details_via_sequence("unknown", "1", "1", "1") is None


def test_sequence_validates_before_fetching(store):
    with pytest.raises(InvalidRequestError):
        DetailsService(store).story_details_via_sequence("A2001.001", "1", "zero", "1")
    assert store.fetched == []


def test_required_maker_category_hides_other_biographies(store):
    inside = DetailsService(store, required_maker_categories=["ScienceMakers"])
    outside = DetailsService(store, required_maker_categories=["MusicMakers"])

    assert inside.biography_details("A2001.001") is not None
    assert outside.biography_details("A2001.001") is None
    assert outside.story_details_via_sequence("A2001.001", "2", "1", "1") is None


def test_every_required_maker_category_must_be_present(store):
    both = DetailsService(store, required_maker_categories=["ScienceMakers", "EducationMakers"])
    one_missing = DetailsService(store, required_maker_categories=["ScienceMakers", "MusicMakers"])

    assert both.biography_details("A2001.001") is not None
    assert both.story_details_via_sequence("A2001.001", "2", "1", "1") is None
    assert one_missing.biography_details("A2001.001") is None


@pytest.mark.parametrize("content", [b"not json", b'{"Sessions": "nope"}'])
def test_unreadable_biography_details_is_storage_error(content):
    blob = BlobDocument(content=content, length=len(content))
    service = DetailsService(FakeStore({"biography/details/A1": blob}))

    with pytest.raises(StorageServiceError, match="A1"):
        service.story_details_via_sequence("A1", "1", "1", "1")
