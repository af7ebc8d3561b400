"""Shared utilities: datetime and id generators."""

from app.shared.utils.datetime import (
    end_of_day_utc,
    ensure_utc,
    start_of_day_utc,
    utc_now,
)
from app.shared.utils.generators import generate_cuid, generate_request_id

__all__ = [
    "generate_cuid",
    "generate_request_id",
    "utc_now",
    "ensure_utc",
    "start_of_day_utc",
    "end_of_day_utc",
]
