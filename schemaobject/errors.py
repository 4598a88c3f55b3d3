#  -*- coding: utf-8 -*-
"""
Exceptions raised by schemaobject.

Only schema compilation reports failures. Writes that fail typecasting or
validation are rejected silently and never raise.
"""

from __future__ import annotations


class SchemaError(ValueError):
    """
    Raised when a schema definition cannot be compiled.

    Typical causes are an unrecognized type, an alias without a target or
    pointing at an undeclared property, an alias cycle, a hook that is not
    callable, or a malformed validator attribute.

    Parameters
    ----------
    message : str
        Description of the problem.
    property_name : str, optional
        Name of the offending property, when there is one.
    """

    def __init__(self, message: str, property_name: str | None = None) -> None:
        self.property_name: str | None = property_name

        if property_name is not None:
            message = f"Property '{property_name}': {message}"

        super().__init__(message)
