"""Assignment output formatting."""

from .formatters import (
    CSV_COLUMNS,
    assignments_table,
    cache_stats_table,
    class_summary_table,
    class_teachers_table,
    format_csv,
    format_json,
    to_jsonable,
)

__all__ = [
    "CSV_COLUMNS",
    "assignments_table",
    "cache_stats_table",
    "class_summary_table",
    "class_teachers_table",
    "format_csv",
    "format_json",
    "to_jsonable",
]
