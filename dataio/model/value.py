"""Structural analysis of in-memory values.

Values are trees of scalars (`None`, `bool`, `int`, `float`, `str`), lists and
dictionaries. These helpers classify nodes of such trees the same way for every codec:
a dictionary whose keys are exactly `0..n-1` is treated as a list, anything iterable
that is not text is traversable, and the depth of a tree is the shortest path to a
leaf.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any, Iterator

import numpy as np


def is_traversable(value: Any) -> bool:
    """Check if a value is a container whose items can be walked.

    Args:
        value: Any value.

    Returns:
        `True` for mappings, lists, tuples, sets and numpy arrays with at least one
        dimension. Strings and bytes are not traversable.
    """
    if isinstance(value, (str, bytes, bytearray)):
        return False
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, (Mapping, list, tuple, Set))


def is_list(value: Any) -> bool:
    """Check if a traversable value is indexed by the contiguous sequence `0..n-1`."""
    if not is_traversable(value):
        return False
    if isinstance(value, Mapping):
        return all(
            type(key) is int and key == index for index, key in enumerate(value.keys())
        )
    return True


def is_associative(value: Any) -> bool:
    """Check if a value is a mapping with at least one non-positional key."""
    return isinstance(value, Mapping) and not is_list(value)


def iter_items(value: Any) -> Iterator[tuple[Any, Any]]:
    """Iterate over `(key, item)` pairs of a traversable value.

    Lists, tuples, sets and arrays yield their positional index as key.
    """
    if isinstance(value, Mapping):
        yield from value.items()
    elif isinstance(value, np.ndarray):
        yield from enumerate(value.tolist())
    else:
        yield from enumerate(value)


def min_depth(value: Any) -> int:
    """Compute the minimum nesting depth of a value.

    Scalars have depth 0. A container has depth `1 + min(depth of its items)`, and an
    empty container has depth 1.

    Args:
        value: Value to analyze.

    Returns:
        The length of the shortest path from the root to a leaf.
    """
    if not is_traversable(value):
        return 0
    depths = [min_depth(item) for _, item in iter_items(value)]
    if not depths:
        return 1
    return 1 + min(depths)


def to_builtin(value: Any) -> Any:
    """Convert numpy scalars and arrays nested in a value to Python builtins."""
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, Mapping):
        return {key: to_builtin(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_builtin(item) for item in value]
    return value
