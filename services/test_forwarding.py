import pytest

from core.config import Config, ProxySettings
from core.exceptions import InvalidEncoding, MissingTarget
from core.headers import HeaderBuilder
from services.forwarding import ForwardingService, has_body


def _service(logger, **proxy):
    return ForwardingService(Config(proxy=ProxySettings(**proxy)), logger, HeaderBuilder())


def test_prepare_query_form_with_extra_params(recording_logger):
    prepared = _service(recording_logger).prepare(
        "GET",
        "/proxy",
        "target=https%3A%2F%2Fapi.example.com%2Fsearch%3Fq%3D1&page=2",
        [("accept", "application/json")],
        "127.0.0.1",
    )
    assert prepared.method == "GET"
    assert prepared.url == "https://api.example.com/search?q=1&page=2"
    assert ("Host", "api.example.com") in prepared.headers
    assert prepared.client_ip == "127.0.0.1"
    assert prepared.has_body is False


def test_prepare_path_form_adds_https(recording_logger):
    prepared = _service(recording_logger).prepare("POST", "/proxy/api.example.com/data", "", [], "127.0.0.1")
    assert prepared.url == "https://api.example.com/data"


def test_prepare_without_target_raises_missing_target(recording_logger):
    with pytest.raises(MissingTarget):
        _service(recording_logger).prepare("GET", "/proxy/", "", [], "127.0.0.1")


def test_prepare_bad_encoding(recording_logger):
    with pytest.raises(InvalidEncoding):
        _service(recording_logger).prepare("GET", "/proxy", "target=https%3A%2F%2Fa%ZZ", [], "127.0.0.1")


def test_prepare_ignores_forwarded_for_unless_trusted(recording_logger):
    headers = [("x-forwarded-for", "203.0.113.7")]
    untrusted = _service(recording_logger).prepare("GET", "/proxy/a.example.com", "", headers, "10.0.0.9")
    trusted = _service(recording_logger, trust_proxy=True).prepare(
        "GET", "/proxy/a.example.com", "", headers, "10.0.0.9"
    )
    assert untrusted.client_ip == "10.0.0.9"
    assert trusted.client_ip == "203.0.113.7"


def test_verbose_logs_each_resolution_step(recording_logger):
    _service(recording_logger, verbose=True).prepare("GET", "/proxy", "target=a.example.com&x=1", [], "")
    assert recording_logger.debug == [
        "Processing raw target URL: a.example.com",
        "Decoded target URL: https://a.example.com",
        "Final URL to proxy: https://a.example.com?x=1",
    ]


def test_quiet_by_default(recording_logger):
    _service(recording_logger).prepare("GET", "/proxy", "target=a.example.com", [], "")
    assert recording_logger.debug == []


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        ([], False),
        ([("content-length", "0")], False),
        ([("Content-Length", "5")], True),
        ([("transfer-encoding", "chunked")], True),
    ],
)
def test_has_body(headers, expected):
    assert has_body(headers) is expected
