#  -*- coding: utf-8 -*-
"""
Property pipeline: what happens on every read and write of a property.

Write path
----------
1. Read-only properties ignore the write.
2. Aliases forward the write to their target.
3. ``None`` clears the stored value, so reads fall back to the default. No
   hook runs: ``transform`` never receives ``None``.
4. ``transform(value, instance)``.
5. Typecast. Arrays are cast element by element, dropping the elements that
   fail; nested schemas are merged into a child instance.
6. ``string_transform(value, instance)`` (String only).
7. Validators, in declaration order.
8. Store the value and notify ``observer(instance, old, new)``.

A failure in steps 5 or 7 leaves the stored value untouched. Rejections are
never reported to the caller; they are logged at DEBUG level.

Read path
---------
Aliases read their target. Read-only properties always resolve their default.
Otherwise the stored value is returned (through ``getter`` when declared), or
the default when nothing is stored.

The functions of this module are specialized per descriptor once, when the
schema is compiled (see ``make_accessors``), so no type dispatch happens on
each access.
"""

from __future__ import annotations

import logging

import numpy

from collections.abc import Iterable, Mapping

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, TypeAlias, TYPE_CHECKING

from schemaobject.types import Alias, Array, Object

if TYPE_CHECKING:
    from schemaobject.schema import PropertyDescriptor


logger = logging.getLogger(__name__)


Reader: TypeAlias = Callable[[Any], Any]
Writer: TypeAlias = Callable[[Any, Any], None]
Caster: TypeAlias = Callable[[Any, Any, Any], tuple[bool, Any]]
Processor: TypeAlias = Callable[[Any, Any], tuple[bool, Any]]


# ========== ========== ========== ========== ========== SchemaArray
class SchemaArray(list):
    """
    List holding the value of an Array property.

    Elements added through ``append``, ``insert``, ``extend``, ``+=`` or item
    assignment go through the element pipeline of the property first.
    Elements that are rejected are silently dropped, exactly like when the
    whole array is written.

    Parameters
    ----------
    owner : Instance
        Instance owning the property. Passed to element hooks.
    process : callable
        Element pipeline, ``process(owner, value) -> (accepted, value)``.
    values : iterable, optional
        Initial elements, processed like any other addition.
    """

    __slots__ = ('_owner', '_process')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, owner: Any, process: Processor, values: Iterable = ()) -> None:
        super().__init__()
        self._owner = owner
        self._process = process
        super().extend(self._accepted(values))

    def __setitem__(self, index, value) -> None:

        if isinstance(index, slice):
            super().__setitem__(index, self._accepted(value))
            return

        accepted, value = self._process(self._owner, value)

        if accepted:
            super().__setitem__(index, value)

    def __iadd__(self, values: Iterable) -> SchemaArray:
        self.extend(values)
        return self

    # ========== ========== ========== ========== ========== private methods
    def _accepted(self, values: Iterable) -> list:
        accepted_values = []

        for value in values:
            accepted, value = self._process(self._owner, value)

            if accepted:
                accepted_values.append(value)

        return accepted_values

    # ========== ========== ========== ========== ========== public methods
    def append(self, value: Any) -> None:
        accepted, value = self._process(self._owner, value)

        if accepted:
            super().append(value)

    def insert(self, index: int, value: Any) -> None:
        accepted, value = self._process(self._owner, value)

        if accepted:
            super().insert(index, value)

    def extend(self, values: Iterable) -> None:
        super().extend(self._accepted(values))

    def copy(self) -> list:
        """Plain list with the same elements."""
        return list(self)

    def rebind(self, owner: Any, values: Iterable = ()) -> SchemaArray:
        """
        Array with the same element pipeline, owned by ``owner``.

        ``values`` are stored as they are, without going through the pipeline.
        """
        array = SchemaArray(owner, self._process)
        list.extend(array, values)
        return array


# ========== ========== ========== ========== ========== pipeline
def resolve_default(descriptor: PropertyDescriptor, instance: Any) -> Any:
    """Evaluate the default of a property for ``instance``."""
    default = descriptor.default

    if callable(default):
        return default(instance)

    return default


def run(descriptor: PropertyDescriptor,
        caster: Caster,
        instance: Any,
        value: Any,
        current: Any = None) -> tuple[bool, Any]:
    """
    Run transform, typecast, string transform and validators on ``value``.

    Parameters
    ----------
    descriptor : PropertyDescriptor
        Descriptor of the property (or of the array element).
    caster : callable
        Typecast specialized for the descriptor by ``make_caster``.
    instance : Instance
        Instance the value is written to. Passed to the hooks.
    value : object
        Raw value.
    current : object, optional
        Currently stored value, used to merge nested schemas in place.

    Returns
    -------
    tuple[bool, object]
        ``(True, value)`` when the value is accepted, ``(False, None)`` when
        it is rejected.
    """
    if descriptor.transform is not None:
        value = descriptor.transform(value, instance)

    accepted, cast_value = caster(instance, value, current)

    if not accepted:
        logger.debug("Rejected %r for '%s': cannot cast to %s", value, descriptor.name, descriptor.type)
        return False, None

    if descriptor.string_transform is not None:
        cast_value = descriptor.string_transform(cast_value, instance)

    if not descriptor.validate(cast_value):
        logger.debug("Rejected %r for '%s': validation failed", cast_value, descriptor.name)
        return False, None

    return True, cast_value


def make_caster(descriptor: PropertyDescriptor) -> Caster:
    """
    Build the typecast step for ``descriptor``.

    Scalars use the typecast of their type tag. Arrays build a ``SchemaArray``
    through the element pipeline. Nested schemas merge a mapping into the
    current child instance, or into a new one.
    """
    if descriptor.type is Array:
        element = descriptor.array_of
        element_caster = make_caster(element)

        def process(owner: Any, value: Any) -> tuple[bool, Any]:
            return run(element, element_caster, owner, value)

        def cast_array(instance: Any, value: Any, current: Any) -> tuple[bool, Any]:

            if isinstance(value, numpy.ndarray):
                value = value.tolist()

            if not isinstance(value, (list, tuple)):
                return False, None

            array = SchemaArray(instance, process, value)

            if len(array) != len(value):
                logger.debug("Dropped %d element(s) of '%s'", len(value) - len(array), descriptor.name)

            return True, array

        return cast_array

    if descriptor.type is Object:
        schema = descriptor.schema

        def cast_object(instance: Any, value: Any, current: Any) -> tuple[bool, Any]:
            if not isinstance(value, Mapping):
                return False, None

            if getattr(current, 'schema', None) is schema:
                child = current
            else:
                child = instance._spawn(schema)

            child.update(value)

            return True, child

        return cast_object

    typecast = descriptor.type.typecast

    def cast_scalar(instance: Any, value: Any, current: Any) -> tuple[bool, Any]:
        return typecast(value)

    return cast_scalar


def make_reader(descriptor: PropertyDescriptor) -> Reader:

    name = descriptor.name

    if descriptor.type is Alias:
        target = descriptor.alias
        return lambda instance: instance.get(target)

    if descriptor.read_only:
        return lambda instance: resolve_default(descriptor, instance)

    getter = descriptor.getter

    def read(instance: Any) -> Any:
        try:
            value = instance._values[name]
        except KeyError:
            return resolve_default(descriptor, instance)

        if getter is not None:
            value = getter(value, instance)

        return value

    return read


def make_writer(descriptor: PropertyDescriptor) -> Writer:

    name = descriptor.name

    if descriptor.read_only:

        def ignore(instance: Any, value: Any) -> None:
            logger.debug("Ignored write to read-only property '%s'", name)

        return ignore

    if descriptor.type is Alias:
        target = descriptor.alias
        return lambda instance, value: instance.set(target, value)

    caster = make_caster(descriptor)
    observer = descriptor.observer

    def write(instance: Any, value: Any) -> None:
        values = instance._values
        current = values.get(name)

        if value is None:

            if name not in values:
                return

            del values[name]

        else:
            accepted, value = run(descriptor, caster, instance, value, current)

            if not accepted:
                return

            values[name] = value

        if observer is not None:
            observer(instance, current, value)

    return write


def make_accessors(descriptor: PropertyDescriptor) -> tuple[Reader, Writer]:
    """
    Build the ``(read, write)`` pair of a property.

    ``read(instance)`` returns the resolved value; ``write(instance, value)``
    runs the write pipeline and never raises on rejected values.
    """
    return make_reader(descriptor), make_writer(descriptor)
