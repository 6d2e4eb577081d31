"""JSON codec - object/JSON conversion backed by pydantic.

serialize() and deserialize() never degrade silently: anything pydantic cannot
represent or populate raises SerializationError / DeserializationError instead
of dropping fields or returning a default instance.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError, PydanticUserError
from pydantic_core import PydanticSerializationError, from_json, to_json

from fluent_request.errors import ConfigurationError, DeserializationError, SerializationError
from fluent_request.models import Formatting

T = TypeVar("T")

INDENT = 2
MAX_PRETTY_LENGTH = 5000


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", None) or repr(target_type)


def _build_adapter(target_type: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(target_type)
    except (PydanticSchemaGenerationError, PydanticUserError) as e:
        raise ConfigurationError(
            f"Unsupported response type {_type_name(target_type)}: {e}"
        ) from e


_cached_adapter = lru_cache(maxsize=128)(_build_adapter)


class JsonCodec:
    """Object <-> JSON conversions used by the builder and executor."""

    def serialize(self, obj: Any, formatting: Formatting = Formatting.COMPACT) -> str:
        """Serialize ``obj`` (models, dataclasses, mappings, sequences, scalars).

        Raises:
            SerializationError: If a value has no JSON representation, including
                NaN and infinite floats.
        """
        indent = INDENT if Formatting(formatting) is Formatting.INDENTED else None
        try:
            data = to_json(obj, indent=indent)
            from_json(data, allow_inf_nan=False)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot serialize {type(obj).__name__} to JSON: {e}"
            ) from e
        return data.decode("utf-8")

    def adapter_for(self, target_type: Any) -> TypeAdapter[Any]:
        """Resolve the validator for ``target_type``.

        Raises:
            ConfigurationError: If pydantic cannot build a schema for the type.
        """
        try:
            hash(target_type)
        except TypeError:
            return _build_adapter(target_type)
        return _cached_adapter(target_type)

    def deserialize(self, text: str, target_type: type[T], status_code: int | None = None) -> T:
        """Parse ``text`` into an instance of ``target_type``.

        Raises:
            ConfigurationError: If ``target_type`` is not supported.
            DeserializationError: If text is not valid JSON or does not match
                the target shape.
        """
        adapter = self.adapter_for(target_type)
        try:
            return adapter.validate_json(text)
        except ValidationError as e:
            raise DeserializationError(
                f"Response cannot be parsed into {_type_name(target_type)}: {e}",
                target_type=target_type,
                text=text,
                status_code=status_code,
            ) from e

    def pretty(self, text: str | None) -> str:
        """Format text for logging: indented if JSON, truncated otherwise. Never raises."""
        if text is None or not text.strip():
            return "<empty>"
        stripped = text.strip()
        if stripped.startswith(("{", "[")):
            try:
                return json.dumps(json.loads(stripped), indent=INDENT, ensure_ascii=False)
            except json.JSONDecodeError:
                pass
        if len(text) > MAX_PRETTY_LENGTH:
            return text[:MAX_PRETTY_LENGTH] + "... (truncated)"
        return text


default_codec = JsonCodec()
