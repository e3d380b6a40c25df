from __future__ import annotations

from typing import TypeVar

T = TypeVar("T")


def unwrap(value: T | None, default: T) -> T:
    if value is None:
        return default
    return value


def str_value(value: str | None) -> str:
    return unwrap(value, "")


def bool_value(value: bool | None) -> bool:
    return unwrap(value, False)
