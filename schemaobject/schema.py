#  -*- coding: utf-8 -*-
"""
Schema compiler.

A schema definition is a mapping from property name to either a bare type or
a full attribute specification::

    {
        'name': String,
        'age': {'type': Number, 'min': 0},
        'tags': {'type': Array, 'array_of': {'type': String, 'max_length': 20}},
        'address': {'street': String, 'zip': String},
        'postal_code': {'type': Alias, 'alias': 'zip'},
    }

``Schema(definition)`` compiles it once into an ordered, immutable collection
of ``PropertyDescriptor`` objects, together with the accessor table
(``name -> (read, write)``) used by instances.

Attribute specification
-----------------------
type
    Type tag (``String``, ``Number``, ...), tag name (``'string'``), Python
    builtin (``str``, ``int``, ...), nested ``Schema``, nested definition
    mapping, or ``SchemaObject`` subclass.
transform, string_transform, getter
    Hooks with signature ``hook(value, instance) -> value``.
observer
    Hook with signature ``observer(instance, old_value, new_value)``.
default
    Literal value, or ``default(instance) -> value``.
read_only, invisible
    Flags. Aliases are invisible unless declared with ``invisible: False``.
array_of
    Element specification of an Array (bare or full). Any when omitted.
alias
    Target property name of an Alias.
regex, enum, min_length, max_length
    String validators.
min, max
    Number validators.

camelCase spellings (``readOnly``, ``minLength``, ``arrayOf``, ...) are
accepted so JSON-shaped definitions compile as is. Unknown attributes are
ignored. A mapping without a ``type`` key is a nested schema definition.
"""

from __future__ import annotations

import logging
import re

from collections.abc import Mapping, Iterator
from types import MappingProxyType

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable

from schemaobject.errors import SchemaError
from schemaobject.pipeline import Reader, Writer, make_accessors
from schemaobject.types import (SchemaType, Validator,
                                String, Array, Object, Alias, Any as AnyType,
                                resolve_type)


logger = logging.getLogger(__name__)


ATTRIBUTE_SYNONYMS: dict[str, str] = {
    'readOnly': 'read_only',
    'readonly': 'read_only',
    'arrayOf': 'array_of',
    'arrayType': 'array_of',
    'stringTransform': 'string_transform',
    'minLength': 'min_length',
    'maxLength': 'max_length',
}

_HOOKS: tuple[str, ...] = ('transform', 'string_transform', 'getter', 'observer')

_KNOWN_ATTRIBUTES: frozenset[str] = frozenset({
    'type', 'default', 'read_only', 'invisible', 'array_of', 'alias', 'schema', *_HOOKS
})


# ========== ========== ========== ========== ========== ==========
def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False) -> bool:
    """
    Raise TypeError unless ``obj`` is an instance of ``types``.

    Parameters
    ----------
    obj : object
        Value to test.
    types : type or tuple of type
        Expected type(s).
    can_be_none : bool, default False
        If True, ``None`` is accepted as well.

    Returns
    -------
    bool
        Always True; mismatches raise.

    Raises
    ------
    TypeError
        If the check fails.
    """
    if can_be_none and obj is None:
        return True

    if not isinstance(obj, types):
        types = types if isinstance(types, tuple) else (types,)
        names = ', '.join(cls.__name__ for cls in types)
        raise TypeError(f"Expected instance of one of the following classes: {names}. "
                        f"Given {type(obj).__name__} instead")

    return True


# ========== ========== ========== ========== ========== PropertyDescriptor
class PropertyDescriptor:
    """
    Compiled, immutable rules of one property.

    Descriptors are created by the schema compiler and never change
    afterwards. Exactly one shape applies: plain type, Array (``array_of`` is
    set), Object (``schema`` is set) or Alias (``alias`` is set).

    Attributes
    ----------
    name : str
        Property name.
    type : SchemaType
        Type tag.
    transform : callable or None
        ``transform(value, instance)``, applied before typecasting. Not called
        for ``None``, which clears the property.
    string_transform : callable or None
        ``string_transform(value, instance)``, applied after typecasting
        (String properties only).
    validators : tuple of callable
        Predicates run in declaration order.
    default : object or callable
        Literal default, or ``default(instance)``.
    read_only : bool
        Writes are ignored; reads always resolve the default.
    invisible : bool
        Excluded from ``to_object``.
    array_of : PropertyDescriptor or None
        Element descriptor of an Array.
    alias : str or None
        Target property of an Alias.
    schema : Schema or None
        Nested schema of an Object.
    getter : callable or None
        ``getter(value, instance)``, applied to stored values on read.
    observer : callable or None
        ``observer(instance, old_value, new_value)``, called after a write is
        accepted.
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_name', '_type', '_transform', '_string_transform', '_validators',
                 '_default', '_read_only', '_invisible', '_array_of', '_alias',
                 '_schema', '_getter', '_observer')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 name: str,
                 type_: SchemaType,
                 *,
                 transform: Callable | None = None,
                 string_transform: Callable | None = None,
                 validators: tuple[Validator, ...] = (),
                 default: Any = None,
                 read_only: bool = False,
                 invisible: bool = False,
                 array_of: PropertyDescriptor | None = None,
                 alias: str | None = None,
                 schema: Schema | None = None,
                 getter: Callable | None = None,
                 observer: Callable | None = None) -> None:

        self._name: str = name
        self._type: SchemaType = type_
        self._transform = transform
        self._string_transform = string_transform
        self._validators: tuple[Validator, ...] = tuple(validators)
        self._default = default
        self._read_only: bool = bool(read_only)
        self._invisible: bool = bool(invisible)
        self._array_of = array_of
        self._alias = alias
        self._schema = schema
        self._getter = getter
        self._observer = observer

    def __repr__(self) -> str:
        flags = [flag for flag in ('read_only', 'invisible') if getattr(self, flag)]

        if self._alias is not None:
            flags.append(f'alias={self._alias!r}')

        if self._array_of is not None:
            flags.append(f'array_of={self._array_of.type}')

        if self._schema is not None:
            flags.append(f'schema={self._schema.name!r}')

        details = ''.join(f', {flag}' for flag in flags)

        return f"PropertyDescriptor({self._name!r}, {self._type}{details})"

    # ========== ========== ========== ========== ========== public methods
    def validate(self, value: Any) -> bool:
        """Run the validators in order; True when all of them pass."""
        return all(check(value) for check in self._validators)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> SchemaType:
        return self._type

    @property
    def transform(self) -> Callable | None:
        return self._transform

    @property
    def string_transform(self) -> Callable | None:
        return self._string_transform

    @property
    def validators(self) -> tuple[Validator, ...]:
        return self._validators

    @property
    def default(self) -> Any:
        return self._default

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def invisible(self) -> bool:
        return self._invisible

    @property
    def array_of(self) -> PropertyDescriptor | None:
        return self._array_of

    @property
    def alias(self) -> str | None:
        return self._alias

    @property
    def schema(self) -> Schema | None:
        return self._schema

    @property
    def getter(self) -> Callable | None:
        return self._getter

    @property
    def observer(self) -> Callable | None:
        return self._observer


# ========== ========== ========== ========== ========== Schema
class Schema(Mapping):
    """
    Compiled schema: an ordered, read-only mapping ``name -> PropertyDescriptor``.

    Parameters
    ----------
    definition : Mapping
        Schema definition, see the module documentation.
    name : str, optional
        Name used in representations and messages. Defaults to ``'Schema'``.
    factory : callable, optional
        ``factory(seed) -> Instance`` used to build child instances of this
        schema when it is nested in another one. ``SchemaObject`` classes
        register themselves here.

    Raises
    ------
    SchemaError
        If the definition is malformed.
    TypeError
        If ``definition`` is not a mapping.

    Examples
    --------
    >>> schema = Schema({'name': String, 'age': {'type': Number, 'min': 0}})
    >>> list(schema)
    ['name', 'age']
    >>> schema['age'].type
    Number
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_name', '_factory', '_descriptors', '_accessors')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 definition: Mapping[str, Any],
                 name: str | None = None,
                 factory: Callable[[Any], Any] | None = None) -> None:

        check_types(definition, Mapping)

        self._name: str = name or 'Schema'
        self._factory = factory

        descriptors: dict[str, PropertyDescriptor] = {}

        for prop_name, spec in definition.items():

            if not isinstance(prop_name, str) or not prop_name:
                raise SchemaError(f"Property names must be non-empty strings, got {prop_name!r}")

            descriptors[prop_name] = _compile_property(prop_name, spec)

        _check_aliases(descriptors)

        self._descriptors = MappingProxyType(descriptors)
        self._accessors = MappingProxyType(
            {prop_name: make_accessors(descriptor) for prop_name, descriptor in descriptors.items()}
        )

        logger.debug("Compiled schema '%s' with properties %s", self._name, list(descriptors))

    def __getitem__(self, name: str) -> PropertyDescriptor:
        return self._descriptors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return f"Schema({self._name!r}, {list(self._descriptors)})"

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def name(self) -> str:
        return self._name

    @property
    def factory(self) -> Callable[[Any], Any] | None:
        return self._factory

    @property
    def accessors(self) -> Mapping[str, tuple[Reader, Writer]]:
        """Read-only accessor table ``name -> (read, write)``."""
        return self._accessors

    @property
    def visible(self) -> list[str]:
        """Names of the properties included in ``to_object``."""
        return [name for name, descriptor in self._descriptors.items() if not descriptor.invisible]


def compile_schema(definition: Mapping[str, Any], name: str | None = None) -> Schema:
    """
    Compile a schema definition.

    Equivalent to ``Schema(definition, name)``.

    Raises
    ------
    SchemaError
        If the definition is malformed.
    """
    return Schema(definition, name=name)


# ========== ========== ========== ========== ========== compiler internals
def _normalize(spec: Mapping[str, Any]) -> dict[str, Any]:
    return {ATTRIBUTE_SYNONYMS.get(key, key): value for key, value in spec.items()}


def _nested_schema(name: str, spec: Any) -> Schema | None:
    """Return the nested schema declared by ``spec``, or None when it is not one."""
    if isinstance(spec, Schema):
        return spec

    if isinstance(spec, type) and isinstance(getattr(spec, 'schema', None), Schema):
        return spec.schema

    if isinstance(spec, Mapping) and 'type' not in spec:
        return Schema(spec, name=name)

    return None


def _compile_property(name: str, spec: Any) -> PropertyDescriptor:

    nested = _nested_schema(name, spec)

    if nested is not None:
        return PropertyDescriptor(name, Object, schema=nested)

    attributes = _normalize(spec) if isinstance(spec, Mapping) else {'type': spec}
    declared_type = attributes.pop('type')

    nested = _nested_schema(name, declared_type)

    if nested is None and attributes.get('schema') is not None:
        nested = _nested_schema(name, attributes['schema'])

        if nested is None:
            raise SchemaError("schema must be a Schema or a definition mapping", name)

    type_ = Object if nested is not None else resolve_type(declared_type)

    if type_ is None:
        raise SchemaError(f"unrecognized type {declared_type!r}", name)

    if type_ is Object and nested is None:
        raise SchemaError("Object properties require a nested schema", name)

    for hook in _HOOKS:
        if attributes.get(hook) is not None and not callable(attributes[hook]):
            raise SchemaError(f"{hook} must be callable", name)

    unknown = [key for key in attributes if key not in _KNOWN_ATTRIBUTES and key not in type_.validator_builders]

    if unknown:
        logger.debug("Ignoring unknown attributes %s of property '%s'", unknown, name)

    string_transform = attributes.get('string_transform')

    if string_transform is not None and type_ is not String:
        logger.debug("Ignoring string_transform of non-String property '%s'", name)
        string_transform = None

    try:
        validators = type_.build_validators(attributes)
    except (TypeError, ValueError, re.error) as error:
        raise SchemaError(str(error), name) from error

    array_of = None

    if type_ is Array:
        element_spec = attributes.get('array_of')

        if element_spec is None:
            array_of = PropertyDescriptor(f'{name}[]', AnyType)
        else:
            array_of = _compile_property(f'{name}[]', element_spec)

        if array_of.type is Alias:
            raise SchemaError("array elements cannot be aliases", name)

    alias = None

    if type_ is Alias:
        alias = attributes.get('alias')

        if not isinstance(alias, str) or not alias:
            raise SchemaError("Alias properties require the name of their target in 'alias'", name)

    return PropertyDescriptor(
        name,
        type_,
        transform=attributes.get('transform'),
        string_transform=string_transform,
        validators=validators,
        default=attributes.get('default'),
        read_only=attributes.get('read_only', False),
        invisible=attributes.get('invisible', type_ is Alias),
        array_of=array_of,
        alias=alias,
        schema=nested,
        getter=attributes.get('getter'),
        observer=attributes.get('observer'),
    )


def _check_aliases(descriptors: Mapping[str, PropertyDescriptor]) -> None:
    """Check that every alias resolves, through any chain of aliases, to a real property."""

    for name, descriptor in descriptors.items():

        if descriptor.type is not Alias:
            continue

        seen = [name]
        target = descriptor.alias

        while True:

            if target not in descriptors:
                raise SchemaError(f"alias target '{target}' is not declared", name)

            if target in seen:
                raise SchemaError(f"alias cycle {' -> '.join(seen + [target])}", name)

            if descriptors[target].type is not Alias:
                break

            seen.append(target)
            target = descriptors[target].alias
