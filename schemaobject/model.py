#  -*- coding: utf-8 -*-
"""
Class-based schemas.

Subclasses of ``SchemaObject`` declare their properties as class attributes;
the metaclass collects them across the MRO and compiles them into the class
schema (``cls.schema``)::

    class Address(SchemaObject):
        street = Property(String)
        zip = Property(String, regex=r'^\\d{5}$')
        postal_code = Property(Alias, alias='zip', invisible=True)

    class Person(SchemaObject):
        first_name = Property(String, string_transform=lambda value, person: value.strip())
        last_name = Property(String)
        address = Property(Address)
        full_name = Property(String, read_only=True)

        @full_name.default
        def full_name(self):
            return f'{self.first_name} {self.last_name}'

    person = Person(first_name=' Ada ', last_name='Lovelace', address={'zip': 12345})

Hooks attached with the decorator methods of ``Property`` (``default``,
``transform``, ``string_transform``, ``getter``, ``observer``) are written as
methods: the instance comes first. Hooks passed as keyword arguments keep the
``hook(value, instance)`` signature of schema definitions.
"""

from __future__ import annotations

from abc import ABCMeta
from collections.abc import Mapping

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Self

from rich.console import RenderableType
from rich.text import Text

from schemaobject.display import Displayable, format_as_form
from schemaobject.errors import SchemaError
from schemaobject.instance import Instance
from schemaobject.schema import Schema
from schemaobject.types import Any as AnyType


# ========== ========== ========== ========== ========== Property
class Property:
    """
    Declaration of a ``SchemaObject`` property.

    Parameters
    ----------
    type_ : object, default Any
        Anything a schema definition accepts as ``type``, including another
        ``SchemaObject`` subclass.
    **attributes
        Attribute specification (``default``, ``read_only``, ``min``, ...).
    """

    __slots__ = ('type', 'attributes')

    def __init__(self, type_: Any = AnyType, **attributes: Any) -> None:
        self.type = type_
        self.attributes: dict[str, Any] = attributes

    def __repr__(self) -> str:
        return f"Property({self.type!r}, {self.attributes!r})"

    def _replace(self, **changes: Any) -> Self:
        return type(self)(self.type, **{**self.attributes, **changes})

    # ---------- ---------- decorators
    def default(self, func: Callable[[Any], Any]) -> Self:
        """Use ``func(self)`` as the default."""
        return self._replace(default=func)

    def transform(self, func: Callable[[Any, Any], Any]) -> Self:
        """Use ``func(self, value)`` as the transform. Not called when ``None`` is written."""
        return self._replace(transform=lambda value, instance: func(instance, value))

    def string_transform(self, func: Callable[[Any, Any], Any]) -> Self:
        """Use ``func(self, value)`` as the string transform."""
        return self._replace(string_transform=lambda value, instance: func(instance, value))

    def getter(self, func: Callable[[Any, Any], Any]) -> Self:
        """Use ``func(self, value)`` as the getter."""
        return self._replace(getter=lambda value, instance: func(instance, value))

    def observer(self, func: Callable[[Any, Any, Any], None]) -> Self:
        """Use ``func(self, old_value, new_value)`` as the observer."""
        return self._replace(observer=func)

    # ---------- ----------
    def spec(self) -> dict[str, Any]:
        """Attribute specification for the schema compiler."""
        return {'type': self.type, **self.attributes}


# ========== ========== ========== ========== ========== SchemaObjectMeta
class SchemaObjectMeta(ABCMeta):
    """
    Metaclass compiling the ``Property`` declarations of a class.

    Declarations are collected from the bases first (in MRO order, so a
    subclass overrides a property of its base) and then from the class body.
    They are removed from the class namespace; the compiled schema is stored
    in ``cls.schema`` with the class registered as factory, so nested
    properties typed with a ``SchemaObject`` subclass get instances of that
    class.

    Raises
    ------
    SchemaError
        If the declarations do not compile, or a property name shadows an
        attribute of the class (``get``, ``items``, ``schema``, ...).
    """

    def __new__(mcs,
                name: str,
                bases: tuple[type, ...],
                namespace: dict[str, Any],
                **kwargs: Any) -> SchemaObjectMeta:

        properties: dict[str, Property] = {}

        for base in reversed(bases):
            properties.update(getattr(base, '_declared_properties', {}))

        for key, value in list(namespace.items()):
            if isinstance(value, Property):
                properties[key] = namespace.pop(key)

        namespace['_declared_properties'] = properties

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        for key in properties:
            if hasattr(cls, key):
                raise SchemaError(f"shadows the attribute {name}.{key}", key)

        cls.schema = Schema({key: prop.spec() for key, prop in properties.items()}, name=name, factory=cls)

        return cls


# ========== ========== ========== ========== ========== SchemaObject
class SchemaObject(Displayable, Instance, metaclass=SchemaObjectMeta):
    """
    Base class of class-based schemas.

    Parameters
    ----------
    seed : Mapping, optional
        Initial values.
    **values
        More initial values; they take precedence over ``seed``.

    Examples
    --------
    >>> class Point(SchemaObject):
    ...     x = Property(Number, default=0)
    ...     y = Property(Number, default=0)
    >>> point = Point(x='3')
    >>> point.x, point.y
    (3, 0)
    >>> point.to_object()
    {'x': 3, 'y': 0}
    """

    schema: Schema

    def __init__(self, seed: Mapping[str, Any] | None = None, /, **values: Any) -> None:

        if values:
            seed = {**(seed or {}), **values}

        Instance.__init__(self, type(self).schema, seed)

    def _title(self) -> Text:
        return Text(self.schema.name, style='bold')

    def _content(self) -> RenderableType:
        return format_as_form(self, self.display_settings)
