"""Attribute helpers for the input API."""

from typing import Any, Iterable

from devlog.attrs import Attr, Value


class JSONValue:
    """Wraps a value so that devlog renders it as prettified JSON."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def json_log_value(self) -> Any:
        return self.value

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"JSONValue({self.value!r})"


def json(key: str, value: Any) -> Attr:
    """Create an attribute whose value is logged as prettified JSON.

    Example:
        log.info("user created", json("user", {"id": 1, "name": "hermannm"}))
        # user: {
        #     "id": 1,
        #     "name": "hermannm"
        #   }
    """
    return Attr(key, Value.of(JSONValue(value)))


def append_attrs(attrs: list[Attr], new_attrs: Iterable[Attr]) -> list[Attr]:
    """Append new_attrs to attrs, skipping any whose key is already in attrs."""
    seen = {attr.key for attr in attrs}
    for attr in new_attrs:
        if attr.key in seen:
            continue
        seen.add(attr.key)
        attrs.append(attr)
    return attrs
