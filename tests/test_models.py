import pytest
from pydantic import ValidationError

from icore.search.models import (
    DateRange,
    FacetSelection,
    SearchMode,
    SearchRequest,
    SortOrder,
    split_csv,
)


def test_split_csv():
    assert split_csv(" a, ,b,,a ") == ("a", "b", "a")
    assert split_csv(["x ", "", None]) == ("x",)
    assert split_csv(None) == ()


def test_facet_selection_normalizes_raw_params():
    selection = FacetSelection.from_params(gender=" F ", year=" 1960 ", maker="Art,", last_initial="")

    assert selection.gender == "F"
    assert selection.birth_decade_start == 1960
    assert selection.maker_categories == ("Art",)
    assert selection.last_initial is None
    assert not selection.is_empty()


def test_facet_selection_empty():
    assert FacetSelection.from_params(gender="", year="x", maker=" , ").is_empty()


def test_facet_selection_is_frozen():
    with pytest.raises(ValidationError):
        FacetSelection().gender = "F"


def test_date_range_bounds():
    with pytest.raises(ValidationError):
        DateRange(month=13, day_low=1, day_high=1)
    with pytest.raises(ValidationError):
        DateRange(month=1, day_low=0, day_high=1)


def test_payload_omits_unset_parts():
    assert SearchRequest().to_payload() == {"search": "", "top": 0, "skip": 0, "count": True}


def test_payload_renders_every_part():
    request = SearchRequest(
        free_text="x",
        search_mode=SearchMode.ANY,
        search_fields=["a", "b"],
        filter="f eq 1",
        facets=["gender"],
        select=["id"],
        top=3,
        skip=6,
        highlight_fields=["a"],
        highlight_pre_tag="<b>",
        highlight_post_tag="</b>",
        sort=SortOrder(field="lastName", descending=True),
    )

    assert request.to_payload() == {
        "search": "x",
        "top": 3,
        "skip": 6,
        "count": True,
        "searchMode": "any",
        "searchFields": "a,b",
        "filter": "f eq 1",
        "facets": ["gender"],
        "select": "id",
        "highlight": "a",
        "highlightPreTag": "<b>",
        "highlightPostTag": "</b>",
        "orderby": "lastName desc",
    }
