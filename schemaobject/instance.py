#  -*- coding: utf-8 -*-
"""
Live objects conforming to a schema.

An ``Instance`` stores the accepted value of each property and routes every
access through the accessor table of its schema:

>>> from schemaobject import Schema, String, Number, Instance
>>> schema = Schema({'name': String, 'age': {'type': Number, 'min': 0}})
>>> person = Instance(schema, {'name': 'Ada', 'age': '36'})
>>> person.age
36
>>> person.age = -1          # rejected, value untouched
>>> person['age']
36

Instances are read-only mappings of their resolved property values, so
``dict(instance)``, ``instance.items()`` and comparisons with other mappings
work as expected. Properties can be accessed through ``get``/``set``, item
access or attribute access. Attribute access does not reach properties whose
name collides with a method (``get``, ``items``, ``copy``, ...); use
``get``/``set`` for those.
"""

from __future__ import annotations

import copy
import logging

from collections.abc import Mapping, Iterator

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any

from schemaobject.pipeline import SchemaArray
from schemaobject.schema import Schema, check_types
from schemaobject.serialization import to_object


logger = logging.getLogger(__name__)


class Instance(Mapping):
    """
    Live object of a schema.

    Parameters
    ----------
    schema : Schema or Mapping
        Compiled schema, or a definition compiled on the fly.
    seed : Mapping, optional
        Initial values. Written through the pipeline in schema declaration
        order; keys that name no property are skipped and values that are
        rejected are not applied.

    Raises
    ------
    SchemaError
        If ``schema`` is a definition that does not compile.
    TypeError
        If ``seed`` is not a mapping.
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_schema', '_values')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, schema: Schema | Mapping[str, Any], seed: Mapping[str, Any] | None = None) -> None:

        if not isinstance(schema, Schema):
            schema = Schema(schema)

        object.__setattr__(self, '_schema', schema)
        object.__setattr__(self, '_values', {})

        if seed is not None:
            self.update(seed)

    def __getitem__(self, name: str) -> Any:
        try:
            read, _ = self._schema.accessors[name]
        except KeyError:
            raise KeyError(f"'{self._schema.name}' has no property '{name}'") from None

        return read(self)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._schema)

    def __len__(self) -> int:
        return len(self._schema)

    def __contains__(self, name: object) -> bool:
        return name in self._schema

    def __getattr__(self, name: str) -> Any:
        # only reached when the regular attribute lookup fails
        if name.startswith('_'):
            raise AttributeError(name)

        try:
            read, _ = self._schema.accessors[name]
        except KeyError:
            raise AttributeError(f"'{self._schema.name}' has no property '{name}'") from None

        return read(self)

    def __setattr__(self, name: str, value: Any) -> None:

        if name.startswith('_'):
            object.__setattr__(self, name, value)

        elif name in self._schema:
            self.set(name, value)

        elif hasattr(type(self), name):
            object.__setattr__(self, name, value)

        else:
            raise AttributeError(f"'{self._schema.name}' has no property '{name}'")

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *self._schema})

    def __repr__(self) -> str:
        fields = ', '.join(
            f'{name}={self.get(name)!r}'
            for name, descriptor in self._schema.items()
            if descriptor.alias is None
        )
        return f"{self._schema.name}({fields})"

    def __copy__(self) -> Instance:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Instance:
        return self._copy(memo)

    # ========== ========== ========== ========== ========== protected methods
    def _spawn(self, schema: Schema, seed: Mapping[str, Any] | None = None) -> Instance:
        """Build a child instance of ``schema`` (used for nested schemas)."""
        if schema.factory is not None:
            return schema.factory(seed)

        return Instance(schema, seed)

    def _copy(self, memo: dict[int, Any] | None = None) -> Instance:
        clone = self._spawn(self._schema)

        for name, value in self._values.items():
            clone._values[name] = _copy_stored(value, clone, memo)

        return clone

    # ========== ========== ========== ========== ========== public methods
    def get(self, name: str, default: Any = None) -> Any:
        """
        Resolved value of a property.

        Returns the stored value, or the property default when nothing is
        stored. ``default`` is returned for names the schema does not declare.
        """
        try:
            read, _ = self._schema.accessors[name]
        except KeyError:
            return default

        return read(self)

    def set(self, name: str, value: Any) -> None:
        """
        Write a property through its pipeline.

        Rejected values leave the property untouched and are not reported.
        ``None`` clears the stored value.

        Raises
        ------
        KeyError
            If the schema does not declare ``name``.
        """
        try:
            _, write = self._schema.accessors[name]
        except KeyError:
            raise KeyError(f"'{self._schema.name}' has no property '{name}'") from None

        write(self, value)

    def update(self, seed: Mapping[str, Any]) -> None:
        """
        Write several properties at once.

        Properties are written in schema declaration order, whatever the order
        of ``seed``. Keys that name no property are ignored.
        """
        check_types(seed, Mapping)

        for name, (_, write) in self._schema.accessors.items():
            if name in seed:
                write(self, seed[name])

        if logger.isEnabledFor(logging.DEBUG):
            unknown = [key for key in seed if key not in self._schema]

            if unknown:
                logger.debug("Ignored unknown keys %s for '%s'", unknown, self._schema.name)

    def clear(self) -> None:
        """Forget every stored value; properties fall back to their defaults."""
        self._values.clear()

    def copy(self) -> Instance:
        """
        Independent instance of the same schema holding the same stored values.

        Stored values are copied as they are: hooks are not run again and
        observers are not notified. Nested instances and arrays are copied,
        not shared.
        """
        return self._copy()

    def to_object(self, include_invisible: bool = False) -> dict[str, Any]:
        """Plain dictionary snapshot, see ``schemaobject.serialization.to_object``."""
        return to_object(self, include_invisible=include_invisible)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def schema(self) -> Schema:
        return self._schema


def _copy_stored(value: Any, owner: Instance, memo: dict[int, Any] | None) -> Any:
    """Copy of a stored value for ``owner``; other values are deep-copied only when ``memo`` is given."""
    if isinstance(value, Instance):
        return value._copy(memo)

    if isinstance(value, SchemaArray):
        return value.rebind(owner, [_copy_stored(item, owner, memo) for item in value])

    if memo is not None:
        return copy.deepcopy(value, memo)

    return value


def create_instance(schema: Schema | Mapping[str, Any], seed: Mapping[str, Any] | None = None) -> Instance:
    """
    Create an instance of ``schema``, optionally seeded with initial values.

    Never fails because of seed values: the ones that cannot be typecast or
    validated are simply not applied.
    """
    return Instance(schema, seed)
