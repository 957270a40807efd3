"""JSON value model stored inside every envelope.

A Value is the plain Python JSON tree: ``None``, ``bool``, ``int``, ``float``,
``str``, ``list`` of Values, or ``dict`` of ``str`` to Value. Anything else
(tuples, sets, bytes, datetimes, non-finite floats, cycles) is rejected before
it reaches the disk.
"""

import math
from typing import Any, TypeAlias, TypeVar

from pantry.errors import PantryValidationError

Scalar: TypeAlias = str | int | float | bool | None
Value: TypeAlias = Scalar | list["Value"] | dict[str, "Value"]
ValueObject: TypeAlias = dict[str, Value]
ValueArray: TypeAlias = list[Value]

T = TypeVar("T")

SCALAR_TYPES: tuple[type, ...] = (type(None), bool, int, float, str)


def validate_value(value: Any) -> None:
    """Check that ``value`` is fully representable as a JSON Value.

    The tree is walked with an explicit stack, so arbitrarily deep values are
    checked without hitting the interpreter's recursion limit.

    Args:
        value: Candidate value tree.

    Raises:
        PantryValidationError: On the first offending node, with its location.
    """
    # (node, location, leaving): leaving entries pop a container off the ancestor set
    stack: list[tuple[Any, str, bool]] = [(value, "$", False)]
    ancestors: set[int] = set()

    while stack:
        node, location, leaving = stack.pop()
        if leaving:
            ancestors.discard(id(node))
            continue

        node_type = type(node)

        if node_type is float:
            if not math.isfinite(node):
                raise PantryValidationError(f"Non-finite number {node!r} at {location}")
            continue

        if node_type in SCALAR_TYPES:
            continue

        if node_type is not list and node_type is not dict:
            raise PantryValidationError(f"Unsupported type {node_type.__name__} at {location}")

        marker = id(node)
        if marker in ancestors:
            raise PantryValidationError(f"Cyclic reference at {location}")
        ancestors.add(marker)
        stack.append((node, location, True))

        if node_type is list:
            children = [(item, f"{location}[{index}]") for index, item in enumerate(node)]
        else:
            children = []
            for key, item in node.items():
                if type(key) is not str:
                    raise PantryValidationError(f"Non-string key {key!r} at {location}")
                children.append((item, f"{location}.{key}"))

        # Reversed so children are checked in document order
        stack.extend((item, child_location, False) for item, child_location in reversed(children))


def as_object(value: Any) -> ValueObject | None:
    """Return ``value`` if it is an object-shaped Value, None otherwise."""
    if isinstance(value, dict):
        return value
    return None


def as_array(value: Any) -> ValueArray | None:
    """Return ``value`` if it is an array Value, None otherwise."""
    if isinstance(value, list):
        return value
    return None


def matches_kind(value: Any, kind: type[T]) -> bool:
    """Exact type match: ``True`` is not an int and ``1`` is not a float."""
    return type(value) is kind
