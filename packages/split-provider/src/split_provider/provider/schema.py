from __future__ import annotations

from enum import StrEnum
from typing import Any, Mapping

from pydantic import BaseModel, model_validator

from ..errors import SchemaError


class AttributeType(StrEnum):
    string = "string"
    boolean = "bool"
    integer = "int"


_PYTHON_TYPES: dict[AttributeType, type] = {
    AttributeType.string: str,
    AttributeType.boolean: bool,
    AttributeType.integer: int,
}


class Attribute(BaseModel):
    type: AttributeType
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    description: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_mode(self) -> "Attribute":
        if self.required and (self.optional or self.computed):
            raise ValueError("required attributes cannot be optional or computed")
        if not (self.required or self.optional or self.computed):
            raise ValueError("attribute must be required, optional or computed")
        return self

    @property
    def configurable(self) -> bool:
        return self.required or self.optional

    def parse(self, text: str) -> Any:
        """Convert a command-line string into this attribute's type."""
        if self.type == AttributeType.boolean:
            lowered = text.strip().lower()
            if lowered in {"true", "1", "yes"}:
                return True
            if lowered in {"false", "0", "no"}:
                return False
            raise SchemaError(f"invalid bool value {text!r}")
        if self.type == AttributeType.integer:
            try:
                return int(text)
            except ValueError:
                raise SchemaError(f"invalid int value {text!r}") from None
        return text

    def accepts(self, value: Any) -> bool:
        expected = _PYTHON_TYPES[self.type]
        # bool is an int subclass; keep the two apart.
        if expected is int and isinstance(value, bool):
            return False
        return isinstance(value, expected)


Schema = Mapping[str, Attribute]


class ResourceData:
    """Configuration and observed state of one data source instance.

    Configured values are validated against the schema on construction.
    ``set`` overwrites unconditionally; reads are recomputed in full.
    """

    def __init__(self, schema: Schema, config: Mapping[str, Any] | None = None) -> None:
        self.schema = schema
        self._id: str | None = None
        self._values: dict[str, Any] = {}
        config = dict(config or {})

        for name, value in config.items():
            attribute = self._attribute(name)
            if not attribute.configurable:
                raise SchemaError(
                    f"{name!r} is computed and cannot be configured", attribute=name
                )
            self._check_type(name, attribute, value)
            self._values[name] = value

        for name, attribute in schema.items():
            if attribute.required and config.get(name) is None:
                raise SchemaError(f"missing required attribute {name!r}", attribute=name)

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def is_populated(self) -> bool:
        return self._id is not None

    def set_id(self, value: str) -> None:
        self._id = value

    def get(self, name: str) -> Any:
        self._attribute(name)
        return self._values.get(name)

    def set(self, name: str, value: Any) -> None:
        attribute = self._attribute(name)
        self._check_type(name, attribute, value)
        self._values[name] = value

    def state(self) -> dict[str, Any]:
        state: dict[str, Any] = {"id": self._id}
        for name in self.schema:
            state[name] = self._values.get(name)
        return state

    def _attribute(self, name: str) -> Attribute:
        try:
            return self.schema[name]
        except KeyError:
            raise SchemaError(f"unknown attribute {name!r}", attribute=name) from None

    @staticmethod
    def _check_type(name: str, attribute: Attribute, value: Any) -> None:
        if value is None or attribute.accepts(value):
            return
        raise SchemaError(
            f"{name!r} expects {attribute.type}, got {type(value).__name__}",
            attribute=name,
        )
