import pytest
import requests

from icore.errors import StorageServiceError
from icore.retrieval.blob_store import BlobStore, normalize_content_type


def _store(session, sas_token="sv=1&sig=abc"):
    return BlobStore(account_url="https://acct.blob.core.windows.net/", sas_token=sas_token, session=session)


def test_blob_url_appends_sas(fake_session_factory):
    store = _store(fake_session_factory(), sas_token="?sv=1")
    assert store.blob_url("data", "story/details/42") == (
        "https://acct.blob.core.windows.net/data/story/details/42?sv=1"
    )


def test_blob_url_without_sas(fake_session_factory):
    store = _store(fake_session_factory(), sas_token=None)
    assert store.blob_url("data", "a b") == "https://acct.blob.core.windows.net/data/a%20b"


def test_fetch_returns_document(fake_session_factory, fake_response_factory):
    response = fake_response_factory(
        content=b'{"storyID": "42"}',
        headers={"Content-Type": "application/json; charset=utf-8"},
    )
    session = fake_session_factory([response])

    blob = _store(session).fetch("data", "story/details/42")

    assert blob.content == b'{"storyID": "42"}'
    assert blob.content_type == "application/json"
    assert blob.length == len(blob.content)
    assert session.calls[0]["url"].endswith("/data/story/details/42?sv=1&sig=abc")


def test_missing_blob_is_none(fake_session_factory, fake_response_factory):
    session = fake_session_factory([fake_response_factory(status_code=404)])
    assert _store(session).fetch("data", "story/details/nope") is None


def test_blank_name_is_none_without_request(fake_session_factory):
    session = fake_session_factory()
    assert _store(session).fetch("data", "") is None
    assert session.calls == []


def test_server_error_raises(fake_session_factory, fake_response_factory):
    session = fake_session_factory([fake_response_factory(status_code=503)])

    with pytest.raises(StorageServiceError) as exc_info:
        _store(session).fetch("data", "x")

    assert exc_info.value.status_code == 503


def test_transport_error_raises(fake_session_factory):
    session = fake_session_factory([requests.Timeout("slow")])
    with pytest.raises(StorageServiceError):
        _store(session).fetch("data", "x")


def test_normalize_content_type():
    assert normalize_content_type("application/json; charset=utf-8") == "application/json"
    assert normalize_content_type("text/plain") == "text/plain"
    assert normalize_content_type(None) is None
