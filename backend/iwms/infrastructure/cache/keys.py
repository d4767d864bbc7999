"""Cache key layout, one prefix per resource."""

FLOOR_PLAN_PREFIX = "floor_plan:"
LEASE_PREFIX = "lease:"
USER_PREFIX = "user:"
OCCUPANCY_PREFIX = "occupancy:"

LEASE_ACTIVE_KEY = f"{LEASE_PREFIX}active"


def floor_plan_key(floor_plan_id: str) -> str:
    return f"{FLOOR_PLAN_PREFIX}{floor_plan_id}"


def floor_plan_page_key(property_id: str, page: int, limit: int) -> str:
    return f"{FLOOR_PLAN_PREFIX}property:{property_id}:{page}:{limit}"


def floor_plan_pages_pattern(property_id: str) -> str:
    return f"{FLOOR_PLAN_PREFIX}property:{property_id}:*"


def lease_key(lease_id: str) -> str:
    return f"{LEASE_PREFIX}{lease_id}"


def lease_property_key(property_id: str) -> str:
    return f"{LEASE_PREFIX}property:{property_id}"


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def user_email_key(email: str) -> str:
    return f"{USER_PREFIX}email:{normalize_email(email)}"


def occupancy_key(space_id: str) -> str:
    return f"{OCCUPANCY_PREFIX}{space_id}"
