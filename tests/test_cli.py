"""CLI tests: commands run against fake services, output is JSON on stdout."""

import json

import pytest

import icore.cli as cli_mod
from icore.api.details_api import DetailsService
from icore.api.factory import Services
from icore.api.search_api import SearchService
from icore.errors import SearchServiceError
from icore.retrieval.blob_store import BlobDocument
from icore.search.models import SearchResponse


class _Store:
    def __init__(self, blobs):
        self.blobs = blobs

    def fetch(self, container, blob_name, timeout=None):
        return self.blobs.get(blob_name)


@pytest.fixture
def services(monkeypatch, fake_gateway, fixed_clock):
    content = b'{"storyID": "s1"}'
    store = _Store({"story/details/s1": BlobDocument(content=content, length=len(content))})
    bundle = Services(
        search=SearchService(fake_gateway, clock=fixed_clock),
        details=DetailsService(store),
    )
    monkeypatch.setattr(cli_mod, "load_config", lambda path=None: {})
    monkeypatch.setattr(cli_mod, "build_services", lambda config: bundle)
    return bundle


def test_biographies_search_prints_result_set(services, fake_gateway, capsys):
    fake_gateway.responses.append(SearchResponse(documents=[{"biographyID": "1"}], total_count=1))

    cli_mod.main(["biographies", "search", "jazz", "--gender", "F", "--page-size", "5"])

    output = json.loads(capsys.readouterr().out)
    assert output == {"facets": {}, "documents": [{"biographyID": "1"}], "count": 1}
    _, request = fake_gateway.searches[0]
    assert request.top == 5
    assert request.filter == "gender eq 'F'"


def test_born_command_uses_window(services, fake_gateway, capsys):
    cli_mod.main(["biographies", "born", "--window", "month", "--date", "2024-03-09"])

    _, request = fake_gateway.searches[0]
    assert request.filter == "(birthMonth eq 3 and birthDay ge 1 and birthDay le 31)"


def test_stories_set_keeps_order(services, fake_gateway, capsys):
    fake_gateway.responses.append(
        SearchResponse(documents=[{"storyID": "a"}, {"storyID": "b"}], total_count=2)
    )

    cli_mod.main(["stories", "set", "b,a"])

    output = json.loads(capsys.readouterr().out)
    assert [d["storyID"] for d in output["documents"]] == ["b", "a"]


def test_details_story_prints_document(services, capsys):
    cli_mod.main(["details", "story", "s1"])
    assert json.loads(capsys.readouterr().out) == {"storyID": "s1"}


def test_missing_details_exit_with_client_error(services, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli_mod.main(["details", "story", "nope"])
    assert exc_info.value.code == cli_mod.EXIT_CLIENT_ERROR
    assert "not found" in capsys.readouterr().err


def test_bad_paging_exits_with_client_error(services, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli_mod.main(["stories", "search", "war", "--page-size", "0"])
    assert exc_info.value.code == cli_mod.EXIT_CLIENT_ERROR
    assert "pageSize" in capsys.readouterr().err


def test_remote_failure_exits_with_remote_error(services, fake_gateway):
    fake_gateway.error = SearchServiceError("down", 503)
    with pytest.raises(SystemExit) as exc_info:
        cli_mod.main(["home"])
    assert exc_info.value.code == cli_mod.EXIT_REMOTE_ERROR


def test_missing_config_exits_with_client_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc_info:
        cli_mod.main(["home"])
    assert exc_info.value.code == cli_mod.EXIT_CLIENT_ERROR
    assert "icore init" in capsys.readouterr().err


@pytest.fixture
def example_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    example = tmp_path / "config" / "icore.config.example.yaml"
    example.parent.mkdir()
    example.write_text("version: 1\n", encoding="utf-8")
    return example


def test_init_creates_config(example_config, tmp_path, capsys):
    cli_mod.main(["init"])

    target = tmp_path / "icore.config.yaml"
    assert target.read_text(encoding="utf-8") == "version: 1\n"
    assert "Created" in capsys.readouterr().out


def test_init_skips_existing_without_force(example_config, tmp_path, capsys):
    target = tmp_path / "icore.config.yaml"
    target.write_text("version: 2\n", encoding="utf-8")

    cli_mod.main(["init"])
    assert target.read_text(encoding="utf-8") == "version: 2\n"
    assert "Skipped" in capsys.readouterr().out

    cli_mod.main(["init", "--force"])
    assert target.read_text(encoding="utf-8") == "version: 1\n"


def test_lists_prints_reference_list(tmp_path, monkeypatch, capsys):
    tag_list = tmp_path / "tags.json"
    tag_list.write_text('{"tags": [{"ID": "t1", "Label": "Childhood"}]}', encoding="utf-8")
    config = {"facets": {"tag_list_path": str(tag_list), "facet_list_path": None}}
    monkeypatch.setattr(cli_mod, "load_config", lambda path=None: config)

    cli_mod.main(["lists", "tag"])
    assert json.loads(capsys.readouterr().out)["tags"][0]["Label"] == "Childhood"

    with pytest.raises(SystemExit) as exc_info:
        cli_mod.main(["lists", "facet"])
    assert exc_info.value.code == cli_mod.EXIT_CLIENT_ERROR
