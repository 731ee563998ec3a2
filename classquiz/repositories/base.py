import logging

import httpx
from postgrest.exceptions import APIError

from ..core.errors import DependencyUnavailable

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: APIError) -> bool:
    return str(getattr(exc, "code", "")) == UNIQUE_VIOLATION


async def run_read(query, *, what: str):
    """
    Execute a read query, re-attempting once on a transport failure.

    Reads are safe to repeat; a second failure is surfaced as
    DependencyUnavailable.
    """
    try:
        return await query.execute()
    except httpx.TransportError as exc:
        logger.warning("Store unreachable while reading %s, retrying once: %s", what, exc)
    try:
        return await query.execute()
    except httpx.TransportError as exc:
        logger.error("Store unreachable while reading %s: %s", what, exc)
        raise DependencyUnavailable("Data store is temporarily unavailable") from exc


async def run_write(query, *, what: str):
    """Execute a write query once; user-initiated writes are never retried."""
    try:
        return await query.execute()
    except httpx.TransportError as exc:
        logger.error("Store unreachable while writing %s: %s", what, exc)
        raise DependencyUnavailable("Data store is temporarily unavailable") from exc
