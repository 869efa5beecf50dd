"""Human-readable logs and reports for randomization runs."""

from .writer import (
    EFFECT_LOG_NAME,
    SUMMARY_REPORT_NAME,
    format_effect,
    format_effect_log,
    format_summary_report,
    result_to_dict,
    save_json,
    write_effect_log,
    write_reports,
    write_summary_report,
)

__all__ = [
    "EFFECT_LOG_NAME",
    "SUMMARY_REPORT_NAME",
    "format_effect",
    "format_effect_log",
    "format_summary_report",
    "result_to_dict",
    "save_json",
    "write_effect_log",
    "write_reports",
    "write_summary_report",
]
