"""Parameter store - ordered request parameters with their format rules.

Parameters are registered by name first and bound to a value afterwards,
mirroring the builder chain ``add_parameter(name).with_value(value)``.
Insertion order is preserved and never changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from fluent_request.errors import ConfigurationError
from fluent_request.formatting import INVARIANT, FormatRuleLike, render_value


class _Unset:
    """Sentinel for a registered parameter that has no value yet."""

    def __repr__(self) -> str:
        return "<unset>"


UNSET: Any = _Unset()


@dataclass
class Parameter:
    """One named parameter. ``value`` is UNSET until bound."""

    name: str
    value: Any = UNSET
    format_rule: FormatRuleLike = INVARIANT

    @property
    def is_bound(self) -> bool:
        return self.value is not UNSET

    def render(self) -> str:
        return render_value(self.value, self.format_rule)


class ParameterStore:
    """Ordered, unique-name mapping of parameter name to (value, format rule)."""

    def __init__(self) -> None:
        self._parameters: dict[str, Parameter] = {}

    def add(self, name: str) -> Parameter:
        """Register a pending parameter.

        Raises:
            ConfigurationError: If the name is empty/blank or already registered.
        """
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("Parameter name must be a non-empty string")
        if name in self._parameters:
            raise ConfigurationError(f"Parameter '{name}' is already registered")
        parameter = Parameter(name=name)
        self._parameters[name] = parameter
        return parameter

    def bind(self, name: str, value: Any, format_rule: FormatRuleLike | None = None) -> Parameter:
        """Bind a value (and format rule) to a registered parameter."""
        try:
            parameter = self._parameters[name]
        except KeyError:
            raise ConfigurationError(f"Parameter '{name}' is not registered") from None
        parameter.value = value
        parameter.format_rule = format_rule if format_rule is not None else INVARIANT
        return parameter

    def unbound(self) -> list[str]:
        """Names of parameters that were registered but never bound."""
        return [p.name for p in self._parameters.values() if not p.is_bound]

    def rendered(self) -> list[tuple[str, str]]:
        """(name, rendered value) pairs in insertion order.

        Raises:
            ConfigurationError: If any parameter is unbound.
        """
        pending = self.unbound()
        if pending:
            names = ", ".join(f"'{name}'" for name in pending)
            raise ConfigurationError(
                f"Parameters added without a value: {names}; "
                f"call with_value() after add_parameter()"
            )
        return [(p.name, p.render()) for p in self._parameters.values()]

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters.values())

    def __len__(self) -> int:
        return len(self._parameters)

    def __bool__(self) -> bool:
        return bool(self._parameters)

    def __contains__(self, name: object) -> bool:
        return name in self._parameters

    def __repr__(self) -> str:
        inner = ", ".join(f"{p.name}={p.value!r}" for p in self._parameters.values())
        return f"ParameterStore({inner})"
