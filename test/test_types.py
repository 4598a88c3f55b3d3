#  -*- coding: utf-8 -*-
"""
Test suite for the type registry.

Tests cover:
- Typecasting of String, Number, Boolean and Date
- Pass-through of Any and Alias, structural Array and Object
- Validator builders and their argument checks
- Resolution of tags, tag names and Python builtins
"""

from __future__ import annotations

import datetime
import re

import numpy
import pandas
import pytest

from decimal import Decimal

from schemaobject.types import (String, Number, Boolean, Date, Array, Object, Alias, Any,
                                EPOCH_SECONDS_LIMIT, resolve_type, typecast,
                                regex_validator, enum_validator,
                                min_length_validator, max_length_validator,
                                min_validator, max_validator)


# ========== ========== ========== ========== String
class TestString:

    @pytest.mark.parametrize('value, expected', [
        ('hello', 'hello'),
        ('', ''),
        (42, '42'),
        (-7, '-7'),
        (3.0, '3'),
        (2.5, '2.5'),
        (True, 'true'),
        (False, 'false'),
        (numpy.int64(5), '5'),
        (Decimal('1.10'), '1.10'),
        (datetime.date(2020, 1, 2), '2020-01-02'),
    ])
    def test_scalars(self, value, expected) -> None:
        assert String.typecast(value) == (True, expected)

    def test_array_is_joined_with_commas(self) -> None:
        assert String.typecast(['a', 1, True]) == (True, 'a,1,true')

    def test_array_none_elements_are_empty(self) -> None:
        assert String.typecast(['a', None, 'b']) == (True, 'a,,b')

    @pytest.mark.parametrize('value', [{'a': 1}, object(), None, {1, 2}])
    def test_rejected(self, value) -> None:
        assert String.typecast(value) == (False, None)

    def test_array_with_uncastable_element_is_rejected(self) -> None:
        assert String.typecast(['a', {'b': 1}]) == (False, None)


# ========== ========== ========== ========== Number
class TestNumber:

    @pytest.mark.parametrize('value, expected', [
        (42, 42),
        ('42', 42),
        (' 42 ', 42),
        ('-3', -3),
        ('3.5', 3.5),
        ('1e3', 1000.0),
        ('.5', 0.5),
        (2.25, 2.25),
        (True, 1),
        (False, 0),
        (numpy.float32(0.5), 0.5),
        (Decimal('2.5'), 2.5),
    ])
    def test_accepted(self, value, expected) -> None:
        success, number = Number.typecast(value)
        assert success
        assert number == expected

    def test_integer_strings_stay_integers(self) -> None:
        _, number = Number.typecast('36')
        assert isinstance(number, int)

    @pytest.mark.parametrize('value', ['', 'abc', '12abc', 'nan', 'inf', float('nan'), float('inf'),
                                       None, [1], {'a': 1}])
    def test_rejected(self, value) -> None:
        assert Number.typecast(value) == (False, None)


# ========== ========== ========== ========== Boolean
class TestBoolean:

    @pytest.mark.parametrize('value, expected', [
        (True, True),
        (False, False),
        ('true', True),
        ('TRUE', True),
        (' False ', False),
        ('1', True),
        ('0', False),
        ('0.0', False),
        (2, True),
        (0, False),
        (numpy.bool_(True), True),
    ])
    def test_accepted(self, value, expected) -> None:
        assert Boolean.typecast(value) == (True, expected)

    @pytest.mark.parametrize('value', ['yes', '', None, [True], {'a': 1}])
    def test_rejected(self, value) -> None:
        assert Boolean.typecast(value) == (False, None)


# ========== ========== ========== ========== Date
class TestDate:

    def test_datetime_passes_through(self) -> None:
        moment = datetime.datetime(2021, 3, 4, 5, 6, 7)
        assert Date.typecast(moment) == (True, moment)

    def test_date_becomes_midnight(self) -> None:
        assert Date.typecast(datetime.date(2021, 3, 4)) == (True, datetime.datetime(2021, 3, 4))

    def test_pandas_timestamp(self) -> None:
        success, moment = Date.typecast(pandas.Timestamp('2021-03-04 05:06'))
        assert success
        assert type(moment) is datetime.datetime
        assert moment == datetime.datetime(2021, 3, 4, 5, 6)

    def test_numpy_datetime64(self) -> None:
        success, moment = Date.typecast(numpy.datetime64('2021-03-04'))
        assert success
        assert moment == datetime.datetime(2021, 3, 4)

    def test_iso_string(self) -> None:
        success, moment = Date.typecast('2021-03-04T05:06:07')
        assert success
        assert moment == datetime.datetime(2021, 3, 4, 5, 6, 7)

    def test_iso_date_only(self) -> None:
        assert Date.typecast('2021-03-04') == (True, datetime.datetime(2021, 3, 4))

    @pytest.mark.parametrize('text', ['03/04/2021', 'March 4, 2021', 'Mar 4, 2021'])
    def test_us_formats(self, text) -> None:
        assert Date.typecast(text) == (True, datetime.datetime(2021, 3, 4))

    def test_epoch_seconds(self) -> None:
        success, moment = Date.typecast(1_000_000_000)
        assert success
        assert moment == datetime.datetime(2001, 9, 9, 1, 46, 40, tzinfo=datetime.timezone.utc)

    def test_epoch_milliseconds(self) -> None:
        success, moment = Date.typecast(1_000_000_000_000)
        assert success
        assert moment == datetime.datetime(2001, 9, 9, 1, 46, 40, tzinfo=datetime.timezone.utc)

    def test_epoch_limit_switches_to_milliseconds(self) -> None:
        _, below = Date.typecast(9_000_000_000)
        _, above = Date.typecast(EPOCH_SECONDS_LIMIT)
        assert below.year == 2255
        assert above.year == 1970

    def test_digit_string_is_epoch(self) -> None:
        assert Date.typecast('1000000000') == Date.typecast(1_000_000_000)

    @pytest.mark.parametrize('value', [True, False, 'not a date', '', '   ', [2021, 3, 4], {'year': 2021},
                                       None, 1.5, numpy.datetime64('NaT')])
    def test_rejected(self, value) -> None:
        assert Date.typecast(value) == (False, None)


# ========== ========== ========== ========== structural and pass-through
class TestOtherTags:

    @pytest.mark.parametrize('value', [1, 'x', None, [1, 2], {'a': 1}])
    def test_any_passes_everything(self, value) -> None:
        assert Any.typecast(value) == (True, value)

    def test_alias_passes_through(self) -> None:
        assert Alias.typecast('x') == (True, 'x')

    @pytest.mark.parametrize('tag', [Array, Object])
    def test_structural_tags_do_not_cast_whole_values(self, tag) -> None:
        assert tag.typecast([1, 2]) == (False, None)

    def test_functional_form(self) -> None:
        assert typecast(Number, '7') == (True, 7)

    def test_repr_is_the_tag_name(self) -> None:
        assert repr(String) == 'String'


# ========== ========== ========== ========== validators
class TestValidators:

    def test_regex_searches(self) -> None:
        check = regex_validator(r'\d{5}')
        assert check('zip 12345')
        assert not check('1234')

    def test_regex_accepts_compiled_patterns(self) -> None:
        assert regex_validator(re.compile('^a'))('abc')

    def test_regex_rejects_bad_arguments(self) -> None:
        with pytest.raises(TypeError):
            regex_validator(5)

        with pytest.raises(re.error):
            regex_validator('(')

    def test_enum(self) -> None:
        check = enum_validator(['m', 'f'])
        assert check('m')
        assert not check('x')

    def test_enum_rejects_strings(self) -> None:
        with pytest.raises(TypeError):
            enum_validator('mf')

    def test_lengths(self) -> None:
        assert min_length_validator(2)('ab')
        assert not min_length_validator(3)('ab')
        assert max_length_validator(2)('ab')
        assert not max_length_validator(1)('ab')

    @pytest.mark.parametrize('bound, error', [(-1, ValueError), ('3', TypeError), (True, TypeError), (1.5, TypeError)])
    def test_length_bounds_checked(self, bound, error) -> None:
        with pytest.raises(error):
            min_length_validator(bound)

    def test_numeric_bounds_are_inclusive(self) -> None:
        assert min_validator(0)(0)
        assert not min_validator(0)(-1)
        assert max_validator(10)(10)
        assert not max_validator(10)(10.5)

    def test_numeric_bounds_checked(self) -> None:
        with pytest.raises(TypeError):
            min_validator('0')

    def test_build_validators_follows_declaration_order(self) -> None:
        validators = String.build_validators({'max_length': 3, 'regex': 'a', 'min': 4, 'enum': None})
        assert len(validators) == 2
        assert [check("abc") for check in validators] == [True, True]


# ========== ========== ========== ========== resolution
class TestResolveType:

    @pytest.mark.parametrize('tag, expected', [
        (String, String),
        ('string', String),
        ('NUMBER', Number),
        (' date ', Date),
        (str, String),
        (int, Number),
        (float, Number),
        (bool, Boolean),
        (datetime.datetime, Date),
        (list, Array),
        (dict, Any),
        (object, Any),
    ])
    def test_resolved(self, tag, expected) -> None:
        assert resolve_type(tag) is expected

    @pytest.mark.parametrize('tag', ['strin', set, 42, None])
    def test_unrecognized(self, tag) -> None:
        assert resolve_type(tag) is None
