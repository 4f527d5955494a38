#!/usr/bin/env python3
"""
resolver.py

Asynchronous client for the remote domain lookup service.

Contract:
    GET <endpoint>?domain=<domain>
    -> {"ip_addresses": ["93.184.216.34", ...], "message": "...", "status": 200}

Behavior:
 - Uses aiohttp; one request per domain, all issued concurrently.
 - Join-all: resolve_all() waits for every request and fails as a whole if
   any single lookup fails (first failure in position order is raised).
 - Every request is bounded by a total timeout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from hostsedit.utils import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

USER_AGENT = "hostsedit/1.0 (+hosts file editor)"


class ResolveError(Exception):
    """Raised when a domain cannot be resolved through the lookup service."""

    def __init__(self, domain: str, reason: str) -> None:
        super().__init__(f"{domain}: {reason}")
        self.domain = domain
        self.reason = reason


def _first_address(domain: str, payload: Any) -> str:
    """Return ip_addresses[0] from a lookup response body."""
    if not isinstance(payload, dict):
        raise ResolveError(domain, "response is not a JSON object")
    addresses = payload.get("ip_addresses")
    if not isinstance(addresses, list) or not addresses:
        message = payload.get("message") or "no addresses returned"
        raise ResolveError(domain, str(message))
    first = addresses[0]
    if not isinstance(first, str) or not first:
        raise ResolveError(domain, "invalid address in response")
    return first


async def resolve(
    session: aiohttp.ClientSession,
    domain: str,
    endpoint: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Look up `domain` and return the first candidate address."""
    timeout_obj = aiohttp.ClientTimeout(total=timeout)
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    try:
        async with session.get(
            endpoint,
            params={"domain": domain},
            headers=headers,
            timeout=timeout_obj,
        ) as resp:
            if not 200 <= resp.status < 300:
                raise ResolveError(domain, f"HTTP {resp.status}")
            try:
                payload = await resp.json(content_type=None)
            except ValueError as exc:
                raise ResolveError(domain, "invalid JSON body") from exc
    except asyncio.TimeoutError as exc:
        raise ResolveError(domain, "timed out") from exc
    except aiohttp.ClientError as exc:
        raise ResolveError(domain, f"request failed: {type(exc).__name__}") from exc
    except ValueError as exc:
        raise ResolveError(domain, f"invalid request: {exc}") from exc

    address = _first_address(domain, payload)
    logger.debug("resolved %s -> %s", domain, address)
    return address


async def resolve_all(
    domains: list[str],
    endpoint: str,
    timeout: float = DEFAULT_TIMEOUT,
    session: aiohttp.ClientSession | None = None,
) -> list[str]:
    """
    Resolve every domain concurrently and return addresses in input order.

    Raises the first ResolveError (by position) if any lookup fails; no
    partial result is returned.
    """
    if not domains:
        raise ResolveError("", "no domains to resolve")

    async def _gather(s: aiohttp.ClientSession) -> list[str | BaseException]:
        tasks = [resolve(s, d, endpoint, timeout) for d in domains]
        return await asyncio.gather(*tasks, return_exceptions=True)

    if session is not None:
        results = await _gather(session)
    else:
        async with aiohttp.ClientSession() as own_session:
            results = await _gather(own_session)

    for result in results:
        if isinstance(result, BaseException):
            raise result
    return [r for r in results if isinstance(r, str)]
