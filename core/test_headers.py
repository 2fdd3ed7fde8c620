import pytest

from core.headers import HeaderBuilder, should_skip_header


@pytest.fixture
def builder():
    return HeaderBuilder()


def _names(headers):
    return [key.lower() for key, _ in headers]


@pytest.mark.parametrize(
    "name",
    [
        "Connection",
        "Host",
        "X-Forwarded-Host",
        "X-Forwarded-Proto",
        "Content-Length",
        "content-length",
        "Transfer-Encoding",
        "Keep-Alive",
        "X-Nginx-Cache",
    ],
)
def test_should_skip_header(name):
    assert should_skip_header(name)


@pytest.mark.parametrize("name", ["Authorization", "X-Forwarded-For", "X-Custom-New-Header", "Cookie"])
def test_unknown_and_regular_headers_are_forwarded(name):
    assert not should_skip_header(name)


def test_build_upstream_headers_applies_deny_set_and_sets_host(builder):
    inbound = [
        ("host", "proxy.local:8080"),
        ("connection", "keep-alive"),
        ("x-forwarded-host", "proxy.local"),
        ("x-forwarded-proto", "https"),
        ("content-length", "12"),
        ("x-nginx-request-id", "abc"),
        ("authorization", "Bearer t"),
        ("accept-encoding", "gzip"),
    ]
    headers = builder.build_upstream_headers(inbound, "https://api.example.com/data", "10.0.0.1", False)

    names = _names(headers)
    for denied in ("connection", "x-forwarded-host", "x-forwarded-proto", "content-length", "x-nginx-request-id"):
        assert denied not in names
    assert ("Host", "api.example.com") in headers
    assert names.count("host") == 1
    assert ("authorization", "Bearer t") in headers
    assert ("accept-encoding", "gzip") in headers


def test_build_upstream_headers_keeps_repeated_headers(builder):
    inbound = [("x-tag", "a"), ("x-tag", "b"), ("accept-encoding", "br")]
    headers = builder.build_upstream_headers(inbound, "https://api.example.com", "1.2.3.4", False)
    assert [value for key, value in headers if key == "x-tag"] == ["a", "b"]


def test_build_upstream_headers_requests_identity_when_client_sent_no_encoding(builder):
    headers = builder.build_upstream_headers([], "https://api.example.com", "1.2.3.4", False)
    assert ("Accept-Encoding", "identity") in headers


def test_real_ip_injected_only_in_trust_mode(builder):
    inbound = [("x-forwarded-for", "203.0.113.7, 10.0.0.2"), ("x-real-ip", "198.51.100.1")]

    trusted = builder.build_upstream_headers(inbound, "https://api.example.com", "203.0.113.7", True)
    assert [value for key, value in trusted if key.lower() == "x-real-ip"] == ["203.0.113.7"]

    untrusted = builder.build_upstream_headers(inbound, "https://api.example.com", "10.0.0.9", False)
    assert [value for key, value in untrusted if key.lower() == "x-real-ip"] == ["198.51.100.1"]


def test_client_ip_uses_leftmost_forwarded_for_when_trusted(builder):
    inbound = [("X-Forwarded-For", " 203.0.113.7 , 10.0.0.2")]
    assert builder.client_ip(inbound, "10.0.0.9", True) == "203.0.113.7"


def test_client_ip_falls_back_to_real_ip_when_trusted(builder):
    assert builder.client_ip([("x-real-ip", "198.51.100.1")], "10.0.0.9", True) == "198.51.100.1"


def test_client_ip_ignores_forwarded_headers_when_not_trusted(builder):
    inbound = [("x-forwarded-for", "203.0.113.7"), ("x-real-ip", "198.51.100.1")]
    assert builder.client_ip(inbound, "10.0.0.9", False) == "10.0.0.9"


def test_filter_response_headers(builder):
    upstream = [
        ("Content-Type", "application/json"),
        ("Access-Control-Allow-Origin", "https://evil.example"),
        ("access-control-expose-headers", "X-Thing"),
        ("Transfer-Encoding", "chunked"),
        ("Set-Cookie", "a=1"),
        ("Set-Cookie", "b=2"),
    ]
    assert builder.filter_response_headers(upstream) == [
        ("Content-Type", "application/json"),
        ("Set-Cookie", "a=1"),
        ("Set-Cookie", "b=2"),
    ]
