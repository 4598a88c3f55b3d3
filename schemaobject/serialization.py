#  -*- coding: utf-8 -*-
"""
Plain-data snapshots of instances.

``to_object(instance)`` turns a live instance into a tree of Python-native
containers:

- one key per declared property that is not invisible, in declaration order;
- ``None`` for properties without a value or default;
- nested instances become dictionaries and arrays become lists, recursively;
- dates stay ``datetime.datetime`` objects;
- aliases are invisible by default; one declared visible repeats the current
  value of its target.

The snapshot shares no mutable container with the instance, so it can be
modified freely and fed back into ``create_instance``.
"""

from __future__ import annotations

from collections.abc import Mapping

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any

from schemaobject.schema import Schema


def _is_instance(value: Any) -> bool:
    return isinstance(value, Mapping) and isinstance(getattr(value, 'schema', None), Schema)


def _plain(value: Any, include_invisible: bool) -> Any:

    if _is_instance(value):
        return to_object(value, include_invisible=include_invisible)

    if isinstance(value, (list, tuple)):
        return [_plain(item, include_invisible) for item in value]

    if isinstance(value, Mapping):
        return {key: _plain(item, include_invisible) for key, item in value.items()}

    return value


def to_object(instance: Any, include_invisible: bool = False) -> dict[str, Any]:
    """
    Serialize an instance into a plain dictionary.

    Parameters
    ----------
    instance : Instance
        Instance to serialize.
    include_invisible : bool, default False
        If True, invisible properties are included too, in the instance and
        in every nested instance.

    Returns
    -------
    dict
        Snapshot of the instance.

    Examples
    --------
    >>> from schemaobject import String, create_instance
    >>> person = create_instance({'first_name': String, 'last_name': String},
    ...                          {'first_name': 'Scott'})
    >>> to_object(person)
    {'first_name': 'Scott', 'last_name': None}
    """
    schema = instance.schema

    return {
        name: _plain(instance.get(name), include_invisible)
        for name, descriptor in schema.items()
        if include_invisible or not descriptor.invisible
    }
