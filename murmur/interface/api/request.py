"""Helpers for reading caller details off incoming requests."""

import ipaddress
from collections.abc import Sequence

from fastapi import Request

AUTH_COOKIE = "auth_token"


def is_trusted_proxy(host: str, trusted_proxies: Sequence[str]) -> bool:
    """Whether ``host`` matches an address, network or host name entry."""
    for entry in trusted_proxies:
        if host == entry:
            return True
        try:
            if ipaddress.ip_address(host) in ipaddress.ip_network(entry, strict=False):
                return True
        except ValueError:
            continue
    return False


def client_ip(request: Request, trusted_proxies: Sequence[str] = ()) -> str:
    """Caller address.

    Forwarding headers are only honored when the direct peer is a trusted
    proxy. ``X-Forwarded-For`` is then read right to left and the first hop
    that is not itself a trusted proxy wins.
    """
    peer = request.client.host if request.client else ""
    if not is_trusted_proxy(peer, trusted_proxies):
        return peer

    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if not is_trusted_proxy(hop, trusted_proxies):
            return hop
    if hops:
        return hops[0]

    real_ip = request.headers.get("x-real-ip", "").strip()
    return real_ip or peer


def bearer_token(request: Request) -> str | None:
    """Access token from the Authorization header or the auth cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(AUTH_COOKIE) or None
