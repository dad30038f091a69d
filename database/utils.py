import uuid
from typing import Optional


def parse_uuid(value) -> Optional[uuid.UUID]:
    """UUID for an external id, or None when the value is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None
