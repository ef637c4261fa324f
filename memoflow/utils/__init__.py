from .responses import error_response
from .timestamps import UTC, from_storage_timestamp, to_storage_timestamp, utc_now

__all__ = [
    "error_response",
    "UTC",
    "from_storage_timestamp",
    "to_storage_timestamp",
    "utc_now",
]
