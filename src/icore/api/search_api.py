"""Search API: one entry point per search mode.

Each method takes raw query-string values (already defaulted by the caller),
builds the request, runs it through the gateway and returns a ResultSet.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import FacetValidationError
from ..retrieval.search_gateway import SearchGateway
from ..search.date_window import resolve_anchor, resolve_window
from ..search.facets import validate_facet_params
from ..search.models import FacetSelection, Granularity, SearchResponse, split_csv
from ..search.query_builder import (
    BIOGRAPHY_INDEX,
    DEFAULT_PAGE_SIZE,
    STORY_INDEX,
    QueryRequestBuilder,
)
from ..search.sequencer import reorder
from ..utils.logging import get_logger
from ..utils.time import Clock, SystemClock
from .models import HomePageInfo, ResultSet

logger = get_logger(__name__)


def _to_result_set(response: SearchResponse, documents: Optional[List[Dict]] = None) -> ResultSet:
    return ResultSet(
        facets=response.facets,
        documents=response.documents if documents is None else documents,
        count=response.total_count,
    )


class SearchService:
    """
    Faceted search over biographies and stories.

    Args:
        gateway: Search service client
        builder: Request builder (carries forced facets)
        clock: Source of "today" for date windows
        strict_facets: Reject unusable facet values instead of ignoring them
        vocabularies: Allowed facet identifiers for strict mode
    """

    def __init__(
        self,
        gateway: SearchGateway,
        builder: Optional[QueryRequestBuilder] = None,
        *,
        clock: Optional[Clock] = None,
        strict_facets: bool = False,
        vocabularies: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        self.gateway = gateway
        self.builder = builder or QueryRequestBuilder()
        self.clock = clock or SystemClock()
        self.strict_facets = strict_facets
        self.vocabularies = dict(vocabularies or {})

    def _facets(
        self,
        gender: Optional[str] = None,
        year: Optional[str] = None,
        maker: Optional[str] = None,
        job: Optional[str] = None,
        last_initial: Optional[str] = None,
        parent_biography_id: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> FacetSelection:
        if self.strict_facets:
            problems = validate_facet_params(
                gender=gender,
                year=year,
                maker=maker,
                job=job,
                last_initial=last_initial,
                tags=tags,
                vocabularies=self.vocabularies,
            )
            if problems:
                raise FacetValidationError(problems)
        return FacetSelection.from_params(
            gender=gender,
            year=year,
            maker=maker,
            job=job,
            last_initial=last_initial,
            parent_biography_id=parent_biography_id,
            tags=tags,
        )

    def biography_search(
        self,
        query: Optional[str] = "",
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        search_fields: Optional[str] = "all",
        gender: Optional[str] = "",
        year: Optional[str] = "",
        maker: Optional[str] = "",
        job: Optional[str] = "",
        last_initial: Optional[str] = "",
        sort_field: Optional[str] = "",
        sort_descending: bool = False,
    ) -> ResultSet:
        """Full-text biography search with facets."""
        facets = self._facets(gender=gender, year=year, maker=maker, job=job, last_initial=last_initial)
        request = self.builder.biography_search(
            query,
            facets,
            page_size=page_size,
            current_page=current_page,
            search_fields=search_fields,
            sort_field=sort_field,
            sort_descending=sort_descending,
        )
        return _to_result_set(self.gateway.search(BIOGRAPHY_INDEX, request))

    def people_born_in_window(
        self,
        granularity: Granularity,
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        gender: Optional[str] = "",
        year: Optional[str] = "",
        maker: Optional[str] = "",
        job: Optional[str] = "",
        last_initial: Optional[str] = "",
        date_today: Optional[str] = "",
    ) -> ResultSet:
        """
        Biographies of people born in the day/week/month around a date.

        Args:
            granularity: Window size
            date_today: Explicit anchor date; blank means the clock's today

        Raises:
            InvalidRequestError: If date_today is present but unparseable
        """
        facets = self._facets(gender=gender, year=year, maker=maker, job=job, last_initial=last_initial)
        anchor = resolve_anchor(date_today, self.clock)
        ranges = resolve_window(granularity, anchor)
        logger.debug(f"Born-this-{granularity.value} window for {anchor.isoformat()}: {ranges}")
        request = self.builder.biography_date_window(
            ranges,
            facets,
            page_size=page_size,
            current_page=current_page,
            oldest_first=granularity == Granularity.DAY,
        )
        return _to_result_set(self.gateway.search(BIOGRAPHY_INDEX, request))

    def people_born_this_day(self, **kwargs) -> ResultSet:
        return self.people_born_in_window(Granularity.DAY, **kwargs)

    def people_born_this_week(self, **kwargs) -> ResultSet:
        return self.people_born_in_window(Granularity.WEEK, **kwargs)

    def people_born_this_month(self, **kwargs) -> ResultSet:
        return self.people_born_in_window(Granularity.MONTH, **kwargs)

    def story_search(
        self,
        query: Optional[str] = "",
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        parent_biography_id: Optional[str] = "",
        search_fields: Optional[str] = "all",
        interview_year_lower: Optional[int] = 0,
        interview_year_upper: Optional[int] = 0,
        gender: Optional[str] = "",
        year: Optional[str] = "",
        maker: Optional[str] = "",
        job: Optional[str] = "",
        sort_field: Optional[str] = "",
        sort_descending: bool = False,
    ) -> ResultSet:
        """Full-text story search with facets and interview-year bounds."""
        facets = self._facets(
            gender=gender,
            year=year,
            maker=maker,
            job=job,
            parent_biography_id=parent_biography_id,
        )
        request = self.builder.story_search(
            query,
            facets,
            page_size=page_size,
            current_page=current_page,
            search_fields=search_fields,
            interview_year_lower=interview_year_lower,
            interview_year_upper=interview_year_upper,
            sort_field=sort_field,
            sort_descending=sort_descending,
        )
        return _to_result_set(self.gateway.search(STORY_INDEX, request))

    def story_search_by_tags(
        self,
        csv_tags: Optional[str] = "",
        page_size: int = DEFAULT_PAGE_SIZE,
        current_page: int = 1,
        gender: Optional[str] = "",
        year: Optional[str] = "",
        maker: Optional[str] = "",
        job: Optional[str] = "",
    ) -> ResultSet:
        """Stories carrying every tag in a comma-separated list."""
        facets = self._facets(gender=gender, year=year, maker=maker, job=job, tags=csv_tags)
        request = self.builder.story_search_by_tags(facets, page_size=page_size, current_page=current_page)
        return _to_result_set(self.gateway.search(STORY_INDEX, request))

    def story_tag_counts(self, csv_tags: Optional[str] = "") -> ResultSet:
        """Tag facet counts among stories carrying every given tag (no documents)."""
        if self.strict_facets:
            self._facets(tags=csv_tags)
        request = self.builder.story_tag_counts(split_csv(csv_tags))
        response = self.gateway.search(STORY_INDEX, request)
        return _to_result_set(response, documents=[])

    def story_set(
        self,
        story_ids: Sequence[str],
        gender: Optional[str] = "",
        year: Optional[str] = "",
        maker: Optional[str] = "",
        job: Optional[str] = "",
    ) -> ResultSet:
        """
        Stories for an explicit ID list, in the list's order.

        IDs that don't match (or are filtered out by facets) are dropped.
        An empty list returns an empty result without calling the service.
        """
        facets = self._facets(gender=gender, year=year, maker=maker, job=job)
        if not story_ids:
            return ResultSet(count=0)
        request = self.builder.story_set(story_ids, facets)
        response = self.gateway.search(STORY_INDEX, request)
        ordered = reorder(story_ids, response.documents, key="storyID")
        return _to_result_set(response, documents=[dict(d) for d in ordered])

    def biography_suggest(self, term: str, fuzzy: bool = False) -> List[str]:
        """Type-ahead suggestions for the biography search box."""
        if not term or not term.strip():
            return []
        request = self.builder.biography_suggest(term, fuzzy=fuzzy)
        return self.gateway.suggest(BIOGRAPHY_INDEX, request)

    def home_page_info(self) -> HomePageInfo:
        """
        Corpus statistics.

        When forced facets limit the deployment to a subset, the subset sizes
        come from the total counts of match-everything searches.
        """
        info = HomePageInfo(
            search_service_name=self.gateway.service_name,
            biography_count=self.gateway.count(BIOGRAPHY_INDEX),
            story_count=self.gateway.count(STORY_INDEX),
        )
        if not self.builder.compiler.forced:
            return info

        # Unusable subset data (no biography or no story total) reports zero for both
        info.subset_biography_count = 0
        info.subset_story_count = 0
        biographies = self.biography_search(query="*", page_size=1)
        if biographies.count is None:
            return info
        stories = self.story_search(query="*", page_size=1)
        if stories.count is None:
            return info
        info.subset_biography_count = biographies.count
        info.subset_story_count = stories.count
        return info
