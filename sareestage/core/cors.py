"""Allow-list CORS headers for the edge relay."""

from typing import Iterable, MutableMapping, Optional

ALLOW_METHODS = "GET,POST,OPTIONS"
ALLOW_HEADERS = "Content-Type,Authorization"


def apply_cors_headers(
    headers: MutableMapping[str, str],
    origin: Optional[str],
    allowed_origins: Iterable[str],
    with_credentials: bool = False,
) -> None:
    """Echo ``origin`` only when it is allow-listed; never fall back to a wildcard."""
    if origin and origin in set(allowed_origins):
        headers["Access-Control-Allow-Origin"] = origin
        if with_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
    headers["Vary"] = "Origin"
    headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS


__all__ = ["apply_cors_headers", "ALLOW_METHODS", "ALLOW_HEADERS"]
