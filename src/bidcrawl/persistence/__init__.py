"""Result persistence."""

from .export import read_records, records_to_data, write_records

__all__ = [
    "read_records",
    "records_to_data",
    "write_records",
]
