"""Conversion of report dataclasses into JSON-ready payloads."""

from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal


def to_camel_case(name: str) -> str:
    """Convert a snake_case attribute name to camelCase."""
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def to_payload(value):
    """Convert a report value into plain JSON types.

    Dataclass fields and read-only properties become camelCase keys, Decimal
    values become floats and dates ISO strings. Mapping keys such as currency
    codes are kept as they are.

    Args:
        value: Report dataclass, collection or scalar.

    Returns:
        Structure made of dicts, lists, strings, numbers, booleans and None.
    """
    if is_dataclass(value) and not isinstance(value, type):
        payload = {
            to_camel_case(field.name): to_payload(getattr(value, field.name))
            for field in fields(value)
        }
        for name in _property_names(type(value)):
            payload[to_camel_case(name)] = to_payload(getattr(value, name))
        return payload
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return [to_payload(item) for item in sorted(value)]
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value


def _property_names(cls: type) -> list[str]:
    names = []
    for klass in reversed(cls.__mro__):
        for name, attribute in vars(klass).items():
            if isinstance(attribute, property) and not name.startswith("_"):
                if name not in names:
                    names.append(name)
    return names


__all__ = ["to_camel_case", "to_payload"]
