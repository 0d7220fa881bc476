"""Builds complete search requests for each supported search mode."""

from typing import List, Optional, Sequence

from ..errors import InvalidRequestError
from .date_window import window_filter
from .facets import FacetFilterCompiler, join_filters
from .models import (
    DateRange,
    FacetSelection,
    SearchMode,
    SearchRequest,
    SortOrder,
    SuggestRequest,
    split_csv,
)

MAX_PAGE_SIZE = 500
DEFAULT_PAGE_SIZE = 20

BIOGRAPHY_INDEX = "biographies"
STORY_INDEX = "stories"

# Requested far above the real number of distinct tags so the service counts
# every document instead of sampling.
TAG_COUNT_FACET_BUCKETS = 200

HIGHLIGHT_PRE_TAG = "<em>"
HIGHLIGHT_POST_TAG = "</em>"

BIOGRAPHY_SUGGESTER = "biography_suggester"
SUGGESTION_COUNT = 8

ALL_FIELDS = "all"
WILDCARD_QUERY = "*"

DEFAULT_BIOGRAPHY_SEARCH_FIELDS = ["descriptionShort", "lastName", "preferredName", "accession"]
DEFAULT_STORY_SEARCH_FIELDS = ["title", "transcript"]

BIOGRAPHY_FIELDS = ["biographyID", "preferredName", "birthDate", "accession"]
STORY_FIELDS = [
    "storyID",
    "biographyID",
    "sessionOrder",
    "tapeOrder",
    "storyOrder",
    "duration",
    "interviewDate",
    "title",
]

BIOGRAPHY_FACETS = [
    "lastInitial,count:26",
    "gender",
    "birthYear,interval:10",
    "makerCategories,count:15",
    "occupationTypes",
]
STORY_FACETS = [
    "gender",
    "birthYear,interval:10",
    "makerCategories,count:15",
    "occupationTypes",
]

BROWSE_SORT = SortOrder(field="lastName", descending=False)
OLDEST_FIRST_SORT = SortOrder(field="birthYear", descending=False)


def resolve_search_fields(search_fields: Optional[str], defaults: Sequence[str]) -> List[str]:
    """
    Resolve the field list to search.

    "all", None or a list with no usable entries selects the defaults.
    """
    if search_fields is None or search_fields.strip().lower() == ALL_FIELDS:
        return list(defaults)
    fields = list(split_csv(search_fields))
    return fields or list(defaults)


def page_window(page_size: int, current_page: int) -> tuple[int, int]:
    """
    Validate paging and compute (top, skip).

    Raises:
        InvalidRequestError: page_size outside 1..MAX_PAGE_SIZE or page < 1
    """
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise InvalidRequestError(f"pageSize must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")
    if current_page < 1:
        raise InvalidRequestError(f"currentPage must be 1 or greater, got {current_page}")
    return page_size, (current_page - 1) * page_size


def interview_year_filter(lower_bound: Optional[int], upper_bound: Optional[int]) -> Optional[str]:
    """
    Inclusive interview-date range from year bounds.

    A bound of None or 0 (or below) is unset. Lower bounds start on January 1,
    upper bounds end on December 31.
    """
    lower = lower_bound if lower_bound and lower_bound > 0 else None
    upper = upper_bound if upper_bound and upper_bound > 0 else None
    return join_filters(
        f"interviewDate ge {lower}-01-01" if lower is not None else None,
        f"interviewDate le {upper}-12-31" if upper is not None else None,
    )


def resolve_sort(sort_field: Optional[str], descending: bool) -> Optional[SortOrder]:
    if sort_field is None or not sort_field.strip():
        return None
    return SortOrder(field=sort_field.strip(), descending=descending)


def is_browse_query(query: Optional[str]) -> bool:
    """True for an empty query or a bare wildcard (surrounding spaces allowed)."""
    return not query or query.strip() == WILDCARD_QUERY


class QueryRequestBuilder:
    """
    Composes SearchRequests for every search mode.

    Facet filters go through the injected compiler so deployment-level forced
    facets apply to every request.
    """

    def __init__(self, compiler: Optional[FacetFilterCompiler] = None):
        self.compiler = compiler or FacetFilterCompiler()

    def biography_search(
        self,
        query: Optional[str],
        facets: FacetSelection,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        search_fields: Optional[str] = ALL_FIELDS,
        sort_field: Optional[str] = None,
        sort_descending: bool = False,
    ) -> SearchRequest:
        """
        Full-text biography search.

        Terms must all match so negation and boolean operators in the query
        behave. An empty or wildcard query with no explicit sort is listed by
        last name, ascending.
        """
        top, skip = page_window(page_size, current_page)
        fields = resolve_search_fields(search_fields, DEFAULT_BIOGRAPHY_SEARCH_FIELDS)

        sort = resolve_sort(sort_field, sort_descending)
        if sort is None and is_browse_query(query):
            sort = BROWSE_SORT

        return SearchRequest(
            free_text=query or "",
            search_mode=SearchMode.ALL,
            search_fields=fields,
            filter=self.compiler.compile(facets),
            facets=list(BIOGRAPHY_FACETS),
            select=list(BIOGRAPHY_FIELDS),
            top=top,
            skip=skip,
            highlight_fields=fields,
            highlight_pre_tag=HIGHLIGHT_PRE_TAG,
            highlight_post_tag=HIGHLIGHT_POST_TAG,
            sort=sort,
        )

    def biography_date_window(
        self,
        ranges: Sequence[DateRange],
        facets: FacetSelection,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        oldest_first: bool = False,
    ) -> SearchRequest:
        """
        Biographies born inside a resolved date window.

        There is no free text, so terms match in "any" mode.
        """
        top, skip = page_window(page_size, current_page)
        return SearchRequest(
            free_text="",
            search_mode=SearchMode.ANY,
            filter=join_filters(self.compiler.compile(facets), window_filter(ranges)),
            facets=list(BIOGRAPHY_FACETS),
            select=list(BIOGRAPHY_FIELDS),
            top=top,
            skip=skip,
            sort=OLDEST_FIRST_SORT if oldest_first else None,
        )

    def story_search(
        self,
        query: Optional[str],
        facets: FacetSelection,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        search_fields: Optional[str] = ALL_FIELDS,
        interview_year_lower: Optional[int] = 0,
        interview_year_upper: Optional[int] = 0,
        sort_field: Optional[str] = None,
        sort_descending: bool = False,
    ) -> SearchRequest:
        """Full-text story search, optionally within one parent biography."""
        top, skip = page_window(page_size, current_page)
        fields = resolve_search_fields(search_fields, DEFAULT_STORY_SEARCH_FIELDS)
        return SearchRequest(
            free_text=query or "",
            search_mode=SearchMode.ALL,
            search_fields=fields,
            filter=join_filters(
                self.compiler.compile(facets),
                interview_year_filter(interview_year_lower, interview_year_upper),
            ),
            facets=list(STORY_FACETS),
            select=list(STORY_FIELDS),
            top=top,
            skip=skip,
            highlight_fields=fields,
            highlight_pre_tag=HIGHLIGHT_PRE_TAG,
            highlight_post_tag=HIGHLIGHT_POST_TAG,
            sort=resolve_sort(sort_field, sort_descending),
        )

    def story_search_by_tags(
        self,
        facets: FacetSelection,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
    ) -> SearchRequest:
        """Stories carrying every selected tag (wildcard free text)."""
        top, skip = page_window(page_size, current_page)
        return SearchRequest(
            free_text=WILDCARD_QUERY,
            search_mode=SearchMode.ANY,
            filter=self.compiler.compile(facets),
            facets=list(STORY_FACETS),
            select=list(STORY_FIELDS),
            top=top,
            skip=skip,
        )

    def story_tag_counts(self, tags: Sequence[str]) -> SearchRequest:
        """
        Per-tag story counts among stories carrying every given tag.

        No documents are returned; only the tags facet is requested.
        """
        return SearchRequest(
            free_text=WILDCARD_QUERY,
            search_mode=SearchMode.ANY,
            filter=self.compiler.compile(FacetSelection(tags=tuple(tags))),
            facets=[f"tags,count:{TAG_COUNT_FACET_BUCKETS}"],
            select=[],
            top=0,
        )

    def story_set(self, story_ids: Sequence[str], facets: FacetSelection) -> SearchRequest:
        """Look up an explicit set of stories by ID (one page of up to MAX_PAGE_SIZE)."""
        return SearchRequest(
            free_text=" ".join(story_ids),
            search_mode=SearchMode.ANY,
            search_fields=["storyID"],
            filter=self.compiler.compile(facets),
            facets=list(STORY_FACETS),
            select=list(STORY_FIELDS),
            top=MAX_PAGE_SIZE,
        )

    def biography_suggest(self, term: str, fuzzy: bool = False) -> SuggestRequest:
        return SuggestRequest(
            term=term,
            suggester_name=BIOGRAPHY_SUGGESTER,
            fuzzy=fuzzy,
            top=SUGGESTION_COUNT,
        )
