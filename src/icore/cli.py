"""CLI entrypoint for the icore search service."""

import argparse
import json
import shutil
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel

from icore.api.factory import Services, build_services
from icore.config.loader import EXAMPLE_CONFIG_PATH, load_config, load_reference_list
from icore.errors import InvalidRequestError, RemoteServiceError
from icore.retrieval.blob_store import BlobDocument
from icore.search.models import Granularity
from icore.search.query_builder import DEFAULT_PAGE_SIZE
from icore.search.sequencer import parse_id_list
from icore.utils.logging import get_logger

logger = get_logger(__name__)

EXIT_REMOTE_ERROR = 1
EXIT_CLIENT_ERROR = 2


def _emit(result: Any) -> None:
    """Print a result as JSON on stdout."""
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json")
    print(json.dumps(result, indent=2, ensure_ascii=False))


def _emit_blob(blob: Optional[BlobDocument], what: str) -> None:
    if blob is None:
        print(f"{what} not found", file=sys.stderr)
        raise SystemExit(EXIT_CLIENT_ERROR)
    sys.stdout.write(blob.content.decode("utf-8-sig"))
    sys.stdout.write("\n")


def _services(args: argparse.Namespace) -> Services:
    return build_services(load_config(args.config))


def _facet_args(args: argparse.Namespace) -> dict:
    return {
        "gender": args.gender,
        "year": args.year,
        "maker": args.maker,
        "job": args.job,
    }


def cmd_init(args: argparse.Namespace) -> None:
    """Create icore.config.yaml from the bundled example."""
    example = Path(EXAMPLE_CONFIG_PATH)
    target = Path(args.config) if args.config else Path("icore.config.yaml")

    if not example.exists():
        logger.error(f"Example file not found: {example}")
        logger.error(f"Please ensure {EXAMPLE_CONFIG_PATH} exists")
        return

    if target.exists() and not args.force:
        print(f"Skipped {target} (already exists, use --force to overwrite)")
        return

    try:
        shutil.copy(example, target)
    except OSError as e:
        logger.error(f"Failed to create {target}: {e}")
        return
    print(f"Created {target}")
    print("Next: set search.service_name and storage.account_url, then export ICORE_SEARCH_API_KEY")


def cmd_biographies_search(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.biography_search(
        query=args.query,
        page_size=args.page_size,
        current_page=args.page,
        search_fields=args.fields,
        last_initial=args.last_initial,
        sort_field=args.sort,
        sort_descending=args.descending,
        **_facet_args(args),
    ))


def cmd_biographies_born(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.people_born_in_window(
        Granularity(args.window),
        page_size=args.page_size,
        current_page=args.page,
        last_initial=args.last_initial,
        date_today=args.date,
        **_facet_args(args),
    ))


def cmd_biographies_suggest(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.biography_suggest(args.term, fuzzy=args.fuzzy))


def cmd_stories_search(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.story_search(
        query=args.query,
        page_size=args.page_size,
        current_page=args.page,
        parent_biography_id=args.biography,
        search_fields=args.fields,
        interview_year_lower=args.interview_from,
        interview_year_upper=args.interview_to,
        sort_field=args.sort,
        sort_descending=args.descending,
        **_facet_args(args),
    ))


def cmd_stories_tags(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.story_search_by_tags(
        args.tags,
        page_size=args.page_size,
        current_page=args.page,
        **_facet_args(args),
    ))


def cmd_stories_tag_counts(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.story_tag_counts(args.tags))


def cmd_stories_set(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.story_set(parse_id_list(args.ids), **_facet_args(args)))


def cmd_details_biography(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit_blob(services.details.biography_details(args.accession), f"Biography {args.accession}")


def cmd_details_story(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit_blob(services.details.story_details(args.story_id), f"Story {args.story_id}")


def cmd_details_sequence(args: argparse.Namespace) -> None:
    services = _services(args)
    blob = services.details.story_details_via_sequence(
        args.accession, args.session, args.tape, args.story
    )
    _emit_blob(blob, f"Story {args.session}/{args.tape}/{args.story} of {args.accession}")


def cmd_home(args: argparse.Namespace) -> None:
    services = _services(args)
    _emit(services.search.home_page_info())


def cmd_lists(args: argparse.Namespace) -> None:
    """Print a static reference list (facet list or tag list)."""
    config = load_config(args.config)
    path = config["facets"].get(f"{args.list_name}_list_path")
    if not path:
        raise InvalidRequestError(f"facets.{args.list_name}_list_path is not configured")
    _emit(load_reference_list(path))


def _add_paging(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE, help="Results per page (1-500)")
    parser.add_argument("--page", type=int, default=1, help="Page number, starting at 1")


def _add_facets(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--gender", default="", help="Gender code (e.g. F, M)")
    parser.add_argument("--year", default="", help="Birth decade start (e.g. 1940)")
    parser.add_argument("--maker", default="", help="Comma-separated maker categories (all must match)")
    parser.add_argument("--job", default="", help="Comma-separated occupation types (all must match)")


def _add_sort(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sort", default="", help="Field to sort on")
    parser.add_argument("--descending", action="store_true", help="Sort descending")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icore",
        description="Faceted search over oral-history biographies and stories",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: icore.config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Create icore.config.yaml from the example")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing config file")
    init_parser.set_defaults(func=cmd_init)

    # biographies commands
    bio_parser = subparsers.add_parser("biographies", help="Biography searches")
    bio_subparsers = bio_parser.add_subparsers(
        dest="biographies_subcommand",
        help="Biography subcommands",
        required=True,
    )
    bio_search = bio_subparsers.add_parser("search", help="Full-text biography search")
    bio_search.add_argument("query", nargs="?", default="", help="Search text (blank or * to browse)")
    bio_search.add_argument("--fields", default="all", help="Comma-separated fields to search, or 'all'")
    bio_search.add_argument("--last-initial", default="", help="First letter of the last name")
    _add_paging(bio_search)
    _add_facets(bio_search)
    _add_sort(bio_search)
    bio_search.set_defaults(func=cmd_biographies_search)

    bio_born = bio_subparsers.add_parser("born", help="People born in the day/week/month around a date")
    bio_born.add_argument(
        "--window",
        choices=[g.value for g in Granularity],
        default=Granularity.DAY.value,
        help="Window size",
    )
    bio_born.add_argument("--date", default="", help="Anchor date (default: today)")
    bio_born.add_argument("--last-initial", default="", help="First letter of the last name")
    _add_paging(bio_born)
    _add_facets(bio_born)
    bio_born.set_defaults(func=cmd_biographies_born)

    bio_suggest = bio_subparsers.add_parser("suggest", help="Type-ahead suggestions")
    bio_suggest.add_argument("term", help="Partial search text")
    bio_suggest.add_argument("--fuzzy", action="store_true", help="Allow fuzzy matches")
    bio_suggest.set_defaults(func=cmd_biographies_suggest)

    # stories commands
    story_parser = subparsers.add_parser("stories", help="Story searches")
    story_subparsers = story_parser.add_subparsers(
        dest="stories_subcommand",
        help="Story subcommands",
        required=True,
    )
    story_search = story_subparsers.add_parser("search", help="Full-text story search")
    story_search.add_argument("query", nargs="?", default="", help="Search text")
    story_search.add_argument("--fields", default="all", help="Comma-separated fields to search, or 'all'")
    story_search.add_argument("--biography", default="", help="Limit to one biography's stories")
    story_search.add_argument("--interview-from", type=int, default=0, help="Earliest interview year")
    story_search.add_argument("--interview-to", type=int, default=0, help="Latest interview year")
    _add_paging(story_search)
    _add_facets(story_search)
    _add_sort(story_search)
    story_search.set_defaults(func=cmd_stories_search)

    story_tags = story_subparsers.add_parser("tags", help="Stories carrying every given tag")
    story_tags.add_argument("tags", help="Comma-separated tag IDs")
    _add_paging(story_tags)
    _add_facets(story_tags)
    story_tags.set_defaults(func=cmd_stories_tags)

    story_counts = story_subparsers.add_parser("tag-counts", help="Tag counts among stories carrying every given tag")
    story_counts.add_argument("tags", nargs="?", default="", help="Comma-separated tag IDs")
    story_counts.set_defaults(func=cmd_stories_tag_counts)

    story_set = story_subparsers.add_parser("set", help="Stories for an ID list, in list order")
    story_set.add_argument("ids", help="Comma-separated story IDs")
    _add_facets(story_set)
    story_set.set_defaults(func=cmd_stories_set)

    # details commands
    details_parser = subparsers.add_parser("details", help="Detail documents")
    details_subparsers = details_parser.add_subparsers(
        dest="details_subcommand",
        help="Details subcommands",
        required=True,
    )
    details_bio = details_subparsers.add_parser("biography", help="Biography details by accession")
    details_bio.add_argument("accession", help="Biography accession")
    details_bio.set_defaults(func=cmd_details_biography)

    details_story = details_subparsers.add_parser("story", help="Story details by story ID")
    details_story.add_argument("story_id", help="Story ID")
    details_story.set_defaults(func=cmd_details_story)

    details_seq = details_subparsers.add_parser("sequence", help="Story details by session/tape/story position")
    details_seq.add_argument("accession", help="Biography accession")
    details_seq.add_argument("session", help="Session order")
    details_seq.add_argument("tape", help="Tape order within the session")
    details_seq.add_argument("story", help="Story position within the tape")
    details_seq.set_defaults(func=cmd_details_sequence)

    # home command
    home_parser = subparsers.add_parser("home", help="Corpus statistics")
    home_parser.set_defaults(func=cmd_home)

    # lists command
    lists_parser = subparsers.add_parser("lists", help="Static reference lists")
    lists_parser.add_argument("list_name", choices=["facet", "tag"], help="Which list to print")
    lists_parser.set_defaults(func=cmd_lists)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except InvalidRequestError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(EXIT_CLIENT_ERROR)
    except FileNotFoundError as e:
        logger.error(f"Config not found: {e}")
        print("Error: config file not found. Run 'icore init' first", file=sys.stderr)
        raise SystemExit(EXIT_CLIENT_ERROR)
    except RemoteServiceError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(EXIT_REMOTE_ERROR)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
