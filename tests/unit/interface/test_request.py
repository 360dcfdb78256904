"""Unit tests for request helpers."""

import pytest
from fastapi import Request

from murmur.interface.api.request import bearer_token, client_ip, is_trusted_proxy

PROXIES = ["10.0.0.0/8", "testclient"]


def make_request(peer: str, headers: dict[str, str] | None = None) -> Request:
    raw_headers = [
        (name.lower().encode(), value.encode())
        for name, value in (headers or {}).items()
    ]
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/comments",
            "headers": raw_headers,
            "client": (peer, 50000),
        }
    )


class TestClientIp:
    """Tests for client_ip."""

    def test_untrusted_peer_cannot_spoof_forwarded_header(self):
        request = make_request("203.0.113.9", {"X-Forwarded-For": "198.51.100.1"})

        assert client_ip(request, PROXIES) == "203.0.113.9"

    def test_forwarded_header_ignored_without_trusted_proxies(self):
        request = make_request("10.0.0.2", {"X-Forwarded-For": "198.51.100.1"})

        assert client_ip(request) == "10.0.0.2"

    def test_trusted_peer_reports_caller(self):
        request = make_request("10.0.0.2", {"X-Forwarded-For": "198.51.100.1"})

        assert client_ip(request, PROXIES) == "198.51.100.1"

    def test_rightmost_untrusted_hop_wins(self):
        # Arrange
        request = make_request(
            "10.0.0.2",
            {"X-Forwarded-For": "192.0.2.50, 198.51.100.1, 10.0.0.7"},
        )

        # Act
        ip = client_ip(request, PROXIES)

        # Assert
        assert ip == "198.51.100.1"

    def test_real_ip_header_used_when_no_forwarded_chain(self):
        request = make_request("testclient", {"X-Real-IP": "198.51.100.4"})

        assert client_ip(request, PROXIES) == "198.51.100.4"


@pytest.mark.parametrize(
    "host,expected",
    [
        ("10.1.2.3", True),
        ("testclient", True),
        ("192.0.2.1", False),
        ("not-an-ip", False),
    ],
)
def test_is_trusted_proxy(host, expected):
    assert is_trusted_proxy(host, PROXIES) is expected


def test_bearer_token_prefers_authorization_header():
    request = make_request("10.0.0.2", {"Authorization": "Bearer abc.def"})

    assert bearer_token(request) == "abc.def"
