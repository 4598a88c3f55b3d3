#  -*- coding: utf-8 -*-
"""
Schemaobject: schema-driven runtime objects for loosely typed data.

A declarative schema (property types, transforms, validators, defaults,
visibility, read-only flags and aliases) is compiled once; live instances
route every property read and write through a per-property pipeline, so
loosely typed input such as parsed JSON goes in and coerced, validated,
normalized values come out.

Key Features
------------
- **Forgiving writes**: values are typecast; values that cannot be cast or
  fail validation are silently rejected, the property keeps its value
- **Lazy defaults**: literal or computed from the instance on every read
- **Composition**: nested schemas and typed arrays, recursively
- **Aliases**: properties that redirect reads and writes to another one
- **Class-based schemas**: ``SchemaObject`` subclasses with ``Property`` declarations
- **Rich terminal output**: instances render as Rich panels

Modules
-------
types
    Type tags (String, Number, Boolean, Date, Array, Object, Alias, Any) and typecasting
schema
    Schema compiler: Schema, PropertyDescriptor, compile_schema
pipeline
    Read and write paths of properties, SchemaArray
instance
    Instance and create_instance
serialization
    to_object
model
    Class-based schemas: SchemaObject, Property
display
    Rich rendering: Displayable, DisplaySettings, render

Examples
--------
>>> from schemaobject import create_instance, String, Number
>>>
>>> person = create_instance({
...     'first_name': String,
...     'age': {'type': Number, 'min': 0},
...     'gender': {'type': String, 'enum': ['m', 'f'],
...                'string_transform': lambda value, person: value.lower()},
... }, {'first_name': 'Scott', 'age': '42'})
>>>
>>> person.gender = 'F'
>>> person.age = -3              # rejected
>>> person.to_object()
{'first_name': 'Scott', 'age': 42, 'gender': 'f'}
"""


from .errors import SchemaError
from .types import String, Number, Boolean, Date, Array, Object, Alias, Any, SchemaType
from .schema import Schema, PropertyDescriptor, compile_schema
from .pipeline import SchemaArray
from .instance import Instance, create_instance
from .serialization import to_object
from .display import Displayable, DisplaySettings, render
from .model import SchemaObject, Property


__all__ = [
    "SchemaError",
    "SchemaType",
    "String",
    "Number",
    "Boolean",
    "Date",
    "Array",
    "Object",
    "Alias",
    "Any",
    "Schema",
    "PropertyDescriptor",
    "compile_schema",
    "SchemaArray",
    "Instance",
    "create_instance",
    "to_object",
    "Displayable",
    "DisplaySettings",
    "render",
    "SchemaObject",
    "Property",
]


try:
    # this will run if schemaobject is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('schemaobject')

    __author__ = meta.get('Author') or meta.get('Author-email')
    __license__ = meta['License']
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]
