"""Format rules - explicit value-to-text conversion for request parameters.

A format rule decides how a parameter value is rendered into the URL. Rules are
always passed explicitly (the default is INVARIANT); nothing here consults the
process locale, so rendering is the same regardless of the calling context.

Any callable ``(value) -> str`` is also accepted wherever a FormatRule is.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Union


class FormatRule:
    """Converts a parameter value to its textual representation."""

    def render(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, Enum):
            return self.render(value.value)
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return self.render_bool(value)
        if isinstance(value, (int, float, Decimal)):
            return self.render_number(value)
        if isinstance(value, datetime):
            return self.render_datetime(value)
        if isinstance(value, date):
            return self.render_date(value)
        if isinstance(value, time):
            return value.isoformat()
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def __call__(self, value: Any) -> str:
        return self.render(value)

    def render_bool(self, value: bool) -> str:
        return "True" if value else "False"

    def render_number(self, value: int | float | Decimal) -> str:
        return str(value)

    def render_datetime(self, value: datetime) -> str:
        return value.isoformat()

    def render_date(self, value: date) -> str:
        return value.isoformat()


class InvariantFormat(FormatRule):
    """Culture-neutral rendering: ``.`` decimal point, ISO 8601 dates."""

    def __repr__(self) -> str:
        return "InvariantFormat()"


class CultureFormat(FormatRule):
    """Rendering with explicit culture conventions.

    Example (es-ES style):
        CultureFormat(decimal_separator=",", group_separator=".",
                      date_format="%d/%m/%Y", datetime_format="%d/%m/%Y %H:%M:%S")
    """

    def __init__(
        self,
        decimal_separator: str = ".",
        group_separator: str = "",
        date_format: str | None = None,
        datetime_format: str | None = None,
        true_text: str = "True",
        false_text: str = "False",
    ) -> None:
        self.decimal_separator = decimal_separator
        self.group_separator = group_separator
        self.date_format = date_format
        self.datetime_format = datetime_format
        self.true_text = true_text
        self.false_text = false_text

    def __repr__(self) -> str:
        return (
            f"CultureFormat(decimal_separator={self.decimal_separator!r}, "
            f"group_separator={self.group_separator!r}, "
            f"date_format={self.date_format!r}, "
            f"datetime_format={self.datetime_format!r})"
        )

    def render_bool(self, value: bool) -> str:
        return self.true_text if value else self.false_text

    def render_number(self, value: int | float | Decimal) -> str:
        text = str(value)
        if "e" in text.lower() or text.lower() in ("nan", "inf", "-inf"):
            return text
        sign = ""
        if text.startswith("-"):
            sign, text = "-", text[1:]
        integral, _, fraction = text.partition(".")
        if self.group_separator:
            groups = []
            while len(integral) > 3:
                groups.insert(0, integral[-3:])
                integral = integral[:-3]
            groups.insert(0, integral)
            integral = self.group_separator.join(groups)
        if fraction:
            return f"{sign}{integral}{self.decimal_separator}{fraction}"
        return f"{sign}{integral}"

    def render_datetime(self, value: datetime) -> str:
        if self.datetime_format:
            return value.strftime(self.datetime_format)
        return value.isoformat()

    def render_date(self, value: date) -> str:
        if self.date_format:
            return value.strftime(self.date_format)
        return value.isoformat()


class PatternFormat(FormatRule):
    """Renders values through a Python format spec, e.g. ``PatternFormat(".2f")``.

    Values the format spec does not apply to (strings for numeric patterns,
    ...) fall back to invariant rendering; None renders as an empty string.
    """

    def __init__(self, format_spec: str) -> None:
        self.format_spec = format_spec

    def __repr__(self) -> str:
        return f"PatternFormat({self.format_spec!r})"

    def render(self, value: Any) -> str:
        if value is None:
            return ""
        try:
            return format(value, self.format_spec)
        except (TypeError, ValueError):
            return super().render(value)


FormatRuleLike = Union[FormatRule, Callable[[Any], str]]

INVARIANT = InvariantFormat()


def render_value(value: Any, format_rule: FormatRuleLike | None = None) -> str:
    """Render a value with the given rule, defaulting to INVARIANT."""
    rule = format_rule if format_rule is not None else INVARIANT
    return rule(value)
