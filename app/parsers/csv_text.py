"""
app/parsers/csv_text.py

Whole-text cleanup and quote-aware line splitting for exported reports.

Quoted spans only protect commas: a doubled quote inside a quoted field is
not unescaped, and quoted fields may not span lines. Neither report format
produces those constructs.
"""

from __future__ import annotations

_BOM = "\ufeff"


def normalize_text(text: str) -> str:
    """
    Drop a leading byte-order mark, convert CRLF/CR to LF and trim the text.
    """
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def split_lines(text: str) -> list[str]:
    """
    Return the non-blank lines of *text* after normalization.
    """
    return [line for line in normalize_text(text).split("\n") if line.strip()]


def split_line(line: str) -> list[str]:
    """
    Split one line on commas that sit outside double quotes.

    Quote characters toggle the quoted state and are dropped from the output.
    Every field is stripped of surrounding whitespace.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quote = False
    for ch in line:
        if ch == '"':
            in_quote = not in_quote
        elif ch == "," and not in_quote:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def zip_row(headers: list[str], values: list[str]) -> dict[str, str]:
    """
    Map *values* onto *headers*; missing trailing cells become empty strings.
    """
    row: dict[str, str] = {}
    for index, header in enumerate(headers):
        row[header] = values[index] if index < len(values) else ""
    return row
