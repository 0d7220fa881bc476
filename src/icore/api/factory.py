"""Composition root: builds the service objects from configuration once."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config.loader import facet_vocabularies, load_reference_list, require_setting
from ..retrieval.blob_store import BlobStore
from ..retrieval.search_gateway import SearchGateway
from ..search.facets import FacetFilterCompiler
from ..search.models import split_csv
from ..search.query_builder import QueryRequestBuilder
from ..utils.logging import get_logger
from ..utils.time import Clock
from .details_api import DetailsService
from .search_api import SearchService

logger = get_logger(__name__)


@dataclass
class Services:
    search: SearchService
    details: DetailsService


def build_search_service(config: Dict[str, Any], clock: Optional[Clock] = None) -> SearchService:
    search_cfg = config["search"]
    facets_cfg = config["facets"]

    gateway = SearchGateway(
        service_name=require_setting(config, "search", "service_name"),
        api_key=require_setting(config, "search", "api_key"),
        api_version=search_cfg["api_version"],
        endpoint=search_cfg.get("endpoint"),
        timeout_seconds=search_cfg["timeout_seconds"],
    )
    builder = QueryRequestBuilder(FacetFilterCompiler(facets_cfg["forced"]))

    vocabularies = None
    if facets_cfg["strict"] and facets_cfg.get("facet_list_path"):
        vocabularies = facet_vocabularies(load_reference_list(facets_cfg["facet_list_path"]))

    if facets_cfg["forced"]:
        logger.info(f"Forced facets active: {facets_cfg['forced']}")

    return SearchService(
        gateway,
        builder,
        clock=clock,
        strict_facets=facets_cfg["strict"],
        vocabularies=vocabularies,
    )


def build_details_service(config: Dict[str, Any]) -> DetailsService:
    storage_cfg = config["storage"]
    store = BlobStore(
        account_url=require_setting(config, "storage", "account_url"),
        sas_token=storage_cfg.get("sas_token"),
        timeout_seconds=storage_cfg["timeout_seconds"],
    )
    return DetailsService(
        store,
        container=storage_cfg["container"],
        required_maker_categories=split_csv(config["facets"]["forced"].get("maker_categories")),
    )


def build_services(config: Dict[str, Any], clock: Optional[Clock] = None) -> Services:
    """
    Build every service from a normalized config (see config.loader.load_config).

    Call once at startup and pass the result to whatever serves requests.
    """
    return Services(
        search=build_search_service(config, clock=clock),
        details=build_details_service(config),
    )
