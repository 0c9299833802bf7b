"""Utility modules."""
from assessment_api.utils.json_utils import (
    json_dump,
    json_load,
    read_json_file,
    write_json_file,
)
from assessment_api.utils.time_utils import parse_iso_timestamp, utc_now
from assessment_api.utils.validation import (
    clamp_non_negative_int,
    generate_id,
    round_half_up,
    validate_id,
)

__all__ = [
    "json_dump",
    "json_load",
    "read_json_file",
    "write_json_file",
    "parse_iso_timestamp",
    "utc_now",
    "clamp_non_negative_int",
    "generate_id",
    "round_half_up",
    "validate_id",
]
