"""Cache-Control and ETag helpers shared by the resource controllers."""

from iwms.config import get_settings

NO_STORE = "no-cache, no-store, must-revalidate"
CREATED = "private, max-age=0, no-cache"
OCCUPANCY_CURRENT = "public, max-age=30"
OCCUPANCY_TRENDS = "public, max-age=300"


def private_max_age() -> str:
    """Browser caching matched to the server-side entity TTL."""
    return f"private, max-age={get_settings().cache_ttl_seconds}"


def etag_for(version: int) -> str:
    return f'"{version}"'


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """True when an ``If-None-Match`` header covers ``etag``."""
    if not if_none_match:
        return False
    candidates = [c.strip() for c in if_none_match.split(",")]
    return "*" in candidates or any(c.removeprefix("W/") == etag for c in candidates)
