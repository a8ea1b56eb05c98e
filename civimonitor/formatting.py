from __future__ import annotations

from typing import Any, Iterable

SUMMARY_DELIMITER = " / "

# Same replacements as PHP htmlspecialchars() with its default flags.
_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#039;",
        "<": "&lt;",
        ">": "&gt;",
    }
)


def escape_html(value: Any) -> str:
    if value is None or value is False:
        return ""
    # PHP string conversion: true is "1", integral floats drop the ".0".
    if value is True:
        return "1"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).translate(_HTML_ESCAPES)


def format_check(title: Any, message: Any) -> str:
    return f"{escape_html(title)}: {escape_html(message)}"


def format_missing_keys(keys: Iterable[str]) -> str:
    return f"Missing keys: {', '.join(keys)}."


def join_summary(fragments: Iterable[str]) -> str:
    return SUMMARY_DELIMITER.join(fragments)
