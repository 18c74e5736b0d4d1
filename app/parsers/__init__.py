"""
app/parsers package marker.
"""

from app.parsers.content_report import parse_content_report
from app.parsers.csv_text import normalize_text, split_line, split_lines
from app.parsers.numeric import parse_number, to_number
from app.parsers.spend_report import find_header_index, parse_spend_report

__all__ = [
    "find_header_index",
    "normalize_text",
    "parse_content_report",
    "parse_number",
    "parse_spend_report",
    "split_line",
    "split_lines",
    "to_number",
]
