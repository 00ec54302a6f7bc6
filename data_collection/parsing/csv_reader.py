"""
data_collection/parsing/csv_reader.py

Line-oriented CSV reading with delimiter sniffing and quote handling.
"""

from __future__ import annotations

import re

CANDIDATE_DELIMITERS = (",", ";", "\t", "|")

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(text: str) -> list[str]:
    """
    Split on line breaks and drop blank lines.
    """

    return [line for line in _LINE_BREAK.split(text) if line.strip()]


def detect_delimiter(line: str, default: str) -> str:
    """
    Pick the candidate delimiter that occurs most often in ``line``.

    Ties with the default, or no candidate at all, keep ``default``.
    """

    counts = {delimiter: line.count(delimiter) for delimiter in CANDIDATE_DELIMITERS}
    best = max(counts.values())
    if best == 0 or counts.get(default) == best:
        return default
    return next(delimiter for delimiter in CANDIDATE_DELIMITERS if counts[delimiter] == best)


def parse_line(line: str, delimiter: str) -> list[str]:
    """
    Split one CSV line. ``""`` inside a quoted field is a literal quote; fields are trimmed.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    while index < len(line):
        char = line[index]
        if char == '"':
            if in_quotes and index + 1 < len(line) and line[index + 1] == '"':
                current.append('"')
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current).strip())
    return fields


def generate_headers(count: int) -> list[str]:
    return [f"Column_{index + 1}" for index in range(count)]
