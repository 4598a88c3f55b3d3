#  -*- coding: utf-8 -*-
"""
Type registry: the closed set of property types understood by a schema.

Each type tag is a singleton ``SchemaType`` carrying two things:

- ``typecast(value) -> (success, cast_value)``: a best-effort coercion of a
  loosely typed value. Typecasts never raise; failure is reported through the
  success flag.
- ``validator_builders``: a mapping from attribute name (``regex``, ``enum``,
  ``min_length``, ...) to a function that turns the attribute value into a
  predicate ``check(value) -> bool``.

Available tags
--------------
String, Number, Boolean, Date, Array, Object, Alias, Any

Array and Object are structural: their values are built element by element
(or property by property) by the pipeline, so their ``typecast`` is never
called for whole values. Alias and Any pass values through unchanged.

Date parsing policy
-------------------
- ``datetime.datetime`` passes; ``datetime.date`` becomes midnight of that day;
  ``pandas.Timestamp`` and ``numpy.datetime64`` become ``datetime.datetime``.
- Integers, integral floats and all-digit strings are epoch timestamps.
  Magnitudes below ``EPOCH_SECONDS_LIMIT`` are seconds, larger ones are
  milliseconds. The result is timezone-aware (UTC).
- Other strings are parsed as ISO 8601 first, then with ``US_DATE_FORMATS``.
- Booleans, sequences, mappings and unparsable strings are rejected.
"""

from __future__ import annotations

import datetime
import math
import numbers
import re

import numpy
import pandas

from decimal import Decimal

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from collections.abc import Iterable, Mapping
from typing import Callable, TypeAlias


Validator: TypeAlias = Callable[[object], bool]
ValidatorBuilder: TypeAlias = Callable[[object], Validator]
Cast: TypeAlias = tuple[bool, object]


ARRAY_SEPARATOR: str = ','
"""Separator used when an array is stringified for a String property."""

EPOCH_SECONDS_LIMIT: int = 10_000_000_000
"""Epoch values with a smaller magnitude are seconds, larger ones milliseconds."""

US_DATE_FORMATS: tuple[str, ...] = (
    '%m/%d/%Y',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y %H:%M:%S',
    '%m-%d-%Y',
    '%B %d, %Y',
    '%b %d, %Y',
)
"""``strptime`` formats tried, in order, after ISO 8601 parsing fails."""

_FAILED: Cast = (False, None)

_INTEGER_PATTERN = re.compile(r'[+-]?\d+')
_NUMBER_PATTERN = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')


# ========== ========== ========== ========== ========== ==========
def _unwrap(value: object) -> object:
    """Convert numpy scalars into the equivalent Python scalar."""
    if isinstance(value, numpy.generic) and not isinstance(value, numpy.datetime64):
        return value.item()
    return value


def _is_bool(value: object) -> bool:
    return isinstance(value, (bool, numpy.bool_))


def _parse_number(text: str) -> Cast:
    text = text.strip()

    if _INTEGER_PATTERN.fullmatch(text):
        return True, int(text)

    if _NUMBER_PATTERN.fullmatch(text):
        number = float(text)

        if math.isfinite(number):
            return True, number

    return _FAILED


# ========== ========== ========== ========== ========== validator builders
def regex_validator(pattern: str | re.Pattern) -> Validator:
    """Match when ``pattern`` is found anywhere in the value."""
    if not isinstance(pattern, (str, re.Pattern)):
        raise TypeError(f"regex must be a string or a compiled pattern, not {type(pattern).__name__}")

    compiled = re.compile(pattern)

    def check(value: object) -> bool:
        return compiled.search(value) is not None

    return check


def enum_validator(options: Iterable) -> Validator:
    """Match when the value is one of ``options``."""
    if isinstance(options, (str, bytes)) or not isinstance(options, Iterable):
        raise TypeError("enum must be a collection of allowed values")

    allowed = tuple(options)

    def check(value: object) -> bool:
        return value in allowed

    return check


def _length_bound(bound: object) -> int:
    if _is_bool(bound) or not isinstance(bound, numbers.Integral):
        raise TypeError(f"length bounds must be integers, not {type(bound).__name__}")

    if bound < 0:
        raise ValueError(f"length bounds must be non-negative, got {bound}")

    return int(bound)


def min_length_validator(bound: int) -> Validator:
    bound = _length_bound(bound)
    return lambda value: len(value) >= bound


def max_length_validator(bound: int) -> Validator:
    bound = _length_bound(bound)
    return lambda value: len(value) <= bound


def _numeric_bound(bound: object) -> float:
    if _is_bool(bound) or not isinstance(bound, numbers.Real):
        raise TypeError(f"numeric bounds must be numbers, not {type(bound).__name__}")
    return bound


def min_validator(bound: float) -> Validator:
    """Inclusive lower bound."""
    bound = _numeric_bound(bound)
    return lambda value: value >= bound


def max_validator(bound: float) -> Validator:
    """Inclusive upper bound."""
    bound = _numeric_bound(bound)
    return lambda value: value <= bound


# ========== ========== ========== ========== ========== SchemaType
class SchemaType:
    """
    Base class of the type tags.

    Subclasses override ``typecast`` and declare the attributes they turn into
    validators through ``validator_builders``. Tags are singletons and compare
    by identity.
    """

    # ========== ========== ========== ========== ========== class attributes
    name: str = ''
    validator_builders: Mapping[str, ValidatorBuilder] = {}

    # ========== ========== ========== ========== ========== special methods
    def __repr__(self) -> str:
        return self.name

    # ========== ========== ========== ========== ========== public methods
    def typecast(self, value: object) -> Cast:
        """
        Coerce ``value`` to this type.

        Parameters
        ----------
        value : object
            Raw value, typically coming from parsed JSON or user input.

        Returns
        -------
        tuple[bool, object]
            ``(True, cast_value)`` on success, ``(False, None)`` otherwise.
        """
        return True, value

    def build_validators(self, attributes: Mapping[str, object]) -> tuple[Validator, ...]:
        """
        Build the validators declared in ``attributes``.

        Attributes are visited in their declaration order so validators run in
        the order they were written. Attributes this type does not know about
        are skipped.

        Raises
        ------
        TypeError, ValueError, re.error
            If an attribute value cannot be turned into a validator.
        """
        return tuple(
            self.validator_builders[key](value)
            for key, value in attributes.items()
            if key in self.validator_builders and value is not None
        )


class StringType(SchemaType):

    name = 'String'
    validator_builders = {
        'regex': regex_validator,
        'enum': enum_validator,
        'min_length': min_length_validator,
        'max_length': max_length_validator,
    }

    def typecast(self, value: object) -> Cast:

        if isinstance(value, str):
            return True, str(value)

        if _is_bool(value):
            return True, 'true' if value else 'false'

        value = _unwrap(value)

        if isinstance(value, numbers.Integral):
            return True, str(int(value))

        if isinstance(value, float):
            return True, str(int(value)) if value.is_integer() else repr(value)

        if isinstance(value, (Decimal, numbers.Real)):
            return True, str(value)

        if isinstance(value, (datetime.date, datetime.time)):
            return True, value.isoformat()

        if isinstance(value, (list, tuple)):
            parts = []

            for item in value:

                if item is None:
                    parts.append('')
                    continue

                success, part = self.typecast(item)

                if not success:
                    return _FAILED

                parts.append(part)

            return True, ARRAY_SEPARATOR.join(parts)

        return _FAILED


class NumberType(SchemaType):

    name = 'Number'
    validator_builders = {
        'min': min_validator,
        'max': max_validator,
    }

    def typecast(self, value: object) -> Cast:

        if _is_bool(value):
            return True, int(value)

        value = _unwrap(value)

        if isinstance(value, str):
            return _parse_number(value)

        if isinstance(value, Decimal):
            return _parse_number(str(value))

        if isinstance(value, numbers.Integral):
            return True, int(value)

        if isinstance(value, numbers.Real):
            number = float(value)

            if math.isfinite(number):
                return True, number

        return _FAILED


class BooleanType(SchemaType):

    name = 'Boolean'

    def typecast(self, value: object) -> Cast:

        if _is_bool(value):
            return True, bool(value)

        value = _unwrap(value)

        if isinstance(value, (numbers.Real, Decimal)):
            return True, value != 0

        if isinstance(value, str):
            text = value.strip().lower()

            if text == 'true':
                return True, True

            if text == 'false':
                return True, False

            success, number = _parse_number(text)

            if success:
                return True, number != 0

        return _FAILED


class DateType(SchemaType):

    name = 'Date'

    @staticmethod
    def _from_epoch(value: int | float) -> Cast:
        unit = 's' if abs(value) < EPOCH_SECONDS_LIMIT else 'ms'

        try:
            stamp = pandas.to_datetime(value, unit=unit, utc=True)
        except (ValueError, OverflowError):
            return _FAILED

        return True, stamp.to_pydatetime()

    @staticmethod
    def _from_string(text: str) -> Cast:

        try:
            stamp = pandas.to_datetime(text, format='ISO8601')
        except (ValueError, TypeError):
            pass
        else:
            if stamp is not pandas.NaT:
                return True, stamp.to_pydatetime()

        for date_format in US_DATE_FORMATS:

            try:
                return True, datetime.datetime.strptime(text, date_format)
            except ValueError:
                continue

        return _FAILED

    def typecast(self, value: object) -> Cast:

        if value is None or value is pandas.NaT or _is_bool(value):
            return _FAILED

        if isinstance(value, pandas.Timestamp):
            return True, value.to_pydatetime()

        if isinstance(value, datetime.datetime):
            return True, value

        if isinstance(value, datetime.date):
            return True, datetime.datetime.combine(value, datetime.time())

        if isinstance(value, numpy.datetime64):

            if numpy.isnat(value):
                return _FAILED

            return True, pandas.Timestamp(value).to_pydatetime()

        value = _unwrap(value)

        if isinstance(value, numbers.Integral):
            return self._from_epoch(int(value))

        if isinstance(value, float):
            return self._from_epoch(int(value)) if value.is_integer() else _FAILED

        if isinstance(value, str):
            text = value.strip()

            if not text:
                return _FAILED

            if _INTEGER_PATTERN.fullmatch(text):
                return self._from_epoch(int(text))

            return self._from_string(text)

        return _FAILED


class ArrayType(SchemaType):
    """Arrays are cast element by element by the pipeline."""

    name = 'Array'

    def typecast(self, value: object) -> Cast:
        return _FAILED


class ObjectType(SchemaType):
    """Nested schemas are merged into child instances by the pipeline."""

    name = 'Object'

    def typecast(self, value: object) -> Cast:
        return _FAILED


class AliasType(SchemaType):

    name = 'Alias'


class AnyType(SchemaType):

    name = 'Any'


# ========== ========== ========== ========== ========== singletons
String = StringType()
Number = NumberType()
Boolean = BooleanType()
Date = DateType()
Array = ArrayType()
Object = ObjectType()
Alias = AliasType()
Any = AnyType()

TYPES: dict[str, SchemaType] = {
    tag.name.lower(): tag for tag in (String, Number, Boolean, Date, Array, Object, Alias, Any)
}
"""Type tags by lower-case name."""

PYTHON_TYPES: dict[type, SchemaType] = {
    str: String,
    int: Number,
    float: Number,
    Decimal: Number,
    bool: Boolean,
    datetime.datetime: Date,
    datetime.date: Date,
    pandas.Timestamp: Date,
    list: Array,
    tuple: Array,
    dict: Any,
    object: Any,
}
"""Python builtins accepted as shorthand for a type tag."""


def resolve_type(tag: object) -> SchemaType | None:
    """
    Resolve a type declaration into a type tag.

    Parameters
    ----------
    tag : object
        A ``SchemaType`` singleton, a tag name (``"string"``, case
        insensitive) or a Python type listed in ``PYTHON_TYPES``.

    Returns
    -------
    SchemaType or None
        The tag, or None when ``tag`` is not recognized.

    Examples
    --------
    >>> resolve_type('number') is Number
    True
    >>> resolve_type(bool) is Boolean
    True
    >>> resolve_type(set) is None
    True
    """
    if isinstance(tag, SchemaType):
        return tag

    if isinstance(tag, str):
        return TYPES.get(tag.strip().lower())

    if isinstance(tag, type):
        return PYTHON_TYPES.get(tag)

    return None


def typecast(tag: SchemaType, value: object) -> Cast:
    """Functional form of ``tag.typecast(value)``."""
    return tag.typecast(value)
