# src/luastitch/utils_types.py


from types import UnionType
from typing import (
    Any,
    Literal,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)


def schema_from_typeddict(td: type[Any]) -> dict[str, Any]:
    """Extract field names and their annotated types from a TypedDict."""
    return get_type_hints(td, include_extras=True)


def _isinstance_generics(
    value: Any,
    origin: Any,
    args: tuple[Any, ...],
) -> bool:
    if not isinstance(value, origin):
        return False

    if not args:
        return True

    # list[str]
    if origin is list:
        return all(safe_isinstance(v, args[0]) for v in value)

    # dict[str, int]
    if origin is dict:
        key_t, val_t = args if len(args) == 2 else (Any, Any)  # noqa: PLR2004
        return all(
            safe_isinstance(k, key_t) and safe_isinstance(v, val_t)
            for k, v in value.items()
        )

    return True


def safe_isinstance(value: Any, expected_type: Any) -> bool:  # noqa: PLR0911
    """Like isinstance(), but understands the typing constructs used in configs.

    Handles Any, Literal, Union/Optional, TypedDicts (checked as dicts)
    and list[...] / dict[...] with inner types.
    """
    if expected_type is Any:
        return True

    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if origin is Literal:
        return value in args

    if origin in {Union, UnionType}:
        return any(safe_isinstance(value, t) for t in args)

    if isinstance(expected_type, type) and hasattr(expected_type, "__total__"):
        # TypedDict-like
        return isinstance(value, dict)

    if origin:
        return _isinstance_generics(value, origin, args)

    # bool is an int subclass, but `true` is not a valid integer setting
    if expected_type in (int, float) and isinstance(value, bool):
        return False

    try:
        return isinstance(value, expected_type)
    except TypeError:
        return False


def type_name(expected_type: Any) -> str:
    """Readable name of a typing construct, for error messages."""
    origin = get_origin(expected_type)
    if origin is Literal:
        return " | ".join(repr(a) for a in get_args(expected_type))
    if origin in {Union, UnionType}:
        return " | ".join(type_name(a) for a in get_args(expected_type))
    if origin is list:
        (inner,) = get_args(expected_type) or (Any,)
        return f"list[{type_name(inner)}]"
    if origin is dict:
        return "object"
    if expected_type is type(None):
        return "null"
    return getattr(expected_type, "__name__", str(expected_type))
