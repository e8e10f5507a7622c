"""
Helper functions for index declarations.

Providers declare indexes as ``(keys, options)`` pairs; these helpers turn
every accepted declaration form into the ``(list of (field, direction),
options dict)`` shape the driver takes.
"""

from collections.abc import Mapping
from typing import Any

from ..exceptions import ConfigurationError

IndexKeys = dict[str, Any] | list[tuple[str, Any]]
NormalizedIndexSpec = tuple[list[tuple[str, Any]], dict[str, Any]]


def normalize_keys(keys: IndexKeys) -> list[tuple[str, Any]]:
    """
    Normalize index keys to a consistent format.

    Args:
        keys: Index keys as dict or list of tuples

    Returns:
        List of (field_name, direction) tuples
    """
    if isinstance(keys, Mapping):
        return [(k, v) for k, v in keys.items()]
    return [(k, v) for k, v in keys]


def is_key_pattern(value: Any) -> bool:
    """Check whether ``value`` looks like a non-empty index key pattern."""
    if isinstance(value, Mapping):
        return bool(value) and all(isinstance(k, str) for k in value)
    if isinstance(value, (list, tuple)):
        return bool(value) and all(
            isinstance(pair, (list, tuple)) and len(pair) == 2 and isinstance(pair[0], str)
            for pair in value
        )
    return False


def normalize_index_spec(spec: Any) -> NormalizedIndexSpec:
    """
    Normalize one index declaration.

    Accepted forms:
        ({"email": 1}, {"unique": True})
        ([("created_at", -1)], None)
        {"email": 1}
        [("last_name", 1), ("first_name", 1)]

    Args:
        spec: Index declaration

    Returns:
        Tuple of (normalized keys, options dict)

    Raises:
        ConfigurationError: If the declaration is not one of the accepted forms
    """
    if (
        isinstance(spec, (list, tuple))
        and len(spec) == 2
        and is_key_pattern(spec[0])
        and (spec[1] is None or isinstance(spec[1], Mapping))
    ):
        keys, options = spec
    elif is_key_pattern(spec):
        keys, options = spec, None
    else:
        raise ConfigurationError(
            "Invalid index declaration; expected (keys, options) or a key pattern",
            config_key="indexes",
            config_value=repr(spec),
        )
    return normalize_keys(keys), dict(options or {})


def normalize_index_specs(specs: Any) -> list[NormalizedIndexSpec]:
    """
    Normalize a sequence of index declarations, keeping declaration order.

    ``None`` is treated as no indexes.
    """
    if specs is None:
        return []
    if isinstance(specs, (str, bytes, Mapping)) or not isinstance(specs, (list, tuple)):
        raise ConfigurationError(
            "indexes must be a list of index declarations",
            config_key="indexes",
            config_value=repr(specs),
        )
    return [normalize_index_spec(spec) for spec in specs]
