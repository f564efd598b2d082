"""Helpers for reading the caller's address."""

import ipaddress

from fastapi import Request


def client_ip(request: Request) -> str | None:
    """Public IP of the caller, honouring the first X-Forwarded-For hop.

    Loopback, private and unparseable addresses yield None.
    """
    forwarded = request.headers.get("x-forwarded-for")
    raw = forwarded.split(",")[0].strip() if forwarded else None
    if not raw and request.client:
        raw = request.client.host
    if not raw:
        return None

    try:
        address = ipaddress.ip_address(raw)
    except ValueError:
        return None
    if address.is_private or address.is_loopback or address.is_unspecified:
        return None
    return str(address)
