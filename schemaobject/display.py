#  -*- coding: utf-8 -*-
"""
Rich terminal display of instances.

``render(instance)`` builds a Rich panel holding a form with the visible
properties of an instance; nested instances are rendered as nested panels.
``Displayable`` plugs the same rendering into ``__str__`` and ``__rich__`` for
the classes that inherit it (``SchemaObject`` does).

Display configuration is itself a schema-backed object, ``DisplaySettings``,
so settings are typecast and validated like any other instance::

    settings = DisplaySettings(console_width='120')
    settings.panel_box = 'heavy'        # normalized to 'HEAVY'
    settings.panel_box = 'nonsense'     # rejected, stays 'HEAVY'
"""

from __future__ import annotations

import datetime

from abc import ABC, abstractmethod
from collections.abc import Mapping
from io import StringIO

from rich import box
from rich.console import Console, Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich.text import Text

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any

from schemaobject.instance import Instance
from schemaobject.schema import Schema
from schemaobject.types import String, Number, Boolean


BOX_NAMES: tuple[str, ...] = tuple(name for name, value in vars(box).items() if isinstance(value, box.Box))
"""Names of the box styles available in ``rich.box``."""


# ========== ========== ========== ========== ========== DisplaySettings
DISPLAY_SETTINGS_SCHEMA = Schema({
    'console_width': {
        'type': Number,
        'default': 150,
        'min': 20,
        'transform': lambda value, settings: round(value) if isinstance(value, float) else value,
    },
    'property_style': {'type': String, 'default': 'bold bright_yellow'},
    'panel_border_style': {'type': String, 'default': 'bright_cyan'},
    'panel_box': {
        'type': String,
        'default': 'ROUNDED',
        'string_transform': lambda value, settings: value.strip().upper(),
        'enum': BOX_NAMES,
    },
    'panel_title_align': {
        'type': String,
        'default': 'center',
        'string_transform': lambda value, settings: value.strip().lower(),
        'enum': ('left', 'center', 'right'),
    },
    'none_style': {'type': String, 'default': 'dim italic'},
    'show_invisible': {'type': Boolean, 'default': False},
}, name='DisplaySettings')


class DisplaySettings(Instance):
    """
    Configuration of the terminal display.

    Attributes
    ----------
    console_width : int
        Width of the rendering console, at least 20. Default 150.
    property_style : str
        Rich style of property names. Default ``'bold bright_yellow'``.
    panel_border_style : str
        Rich style of panel borders. Default ``'bright_cyan'``.
    panel_box : str
        Name of a ``rich.box`` style, case insensitive. Default ``'ROUNDED'``.
    panel_title_align : str
        ``'left'``, ``'center'`` or ``'right'``. Default ``'center'``.
    none_style : str
        Rich style used for missing values. Default ``'dim italic'``.
    show_invisible : bool
        Also display invisible properties. Default False.
    """

    __slots__ = ()

    def __init__(self, seed: Mapping[str, Any] | None = None, /, **settings: Any) -> None:
        super().__init__(DISPLAY_SETTINGS_SCHEMA, {**(seed or {}), **settings})


# ========== ========== ========== ========== ========== rendering
def format_value(value: Any, settings: DisplaySettings) -> RenderableType:
    """Renderable of a single property value."""

    if isinstance(value, Instance):
        return render(value, settings)

    if value is None:
        return Text('None', style=settings.none_style)

    if isinstance(value, list) and any(isinstance(item, Instance) for item in value):
        return Group(*(format_value(item, settings) for item in value))

    if isinstance(value, str):
        return Text(value)

    if isinstance(value, datetime.datetime):
        return Text(value.isoformat())

    return Pretty(value)


def format_as_form(instance: Instance, settings: DisplaySettings) -> Table:
    """
    Two-column grid with property names (left) and values (right).

    Invisible properties are skipped unless ``settings.show_invisible``.
    """
    form = Table.grid(padding=(0, 4), expand=False)
    form.add_column(justify='left', style=settings.property_style)
    form.add_column(justify='left', style=None)

    names = list(instance.schema) if settings.show_invisible else instance.schema.visible

    for name in names:
        form.add_row(escape(f'{name}:'), format_value(instance.get(name), settings))

    return form


def render(instance: Instance, settings: DisplaySettings | None = None) -> Panel:
    """
    Rich panel of an instance.

    Parameters
    ----------
    instance : Instance
        Instance to render.
    settings : DisplaySettings, optional
        Display configuration. Defaults to ``DisplaySettings()``.

    Returns
    -------
    Panel
        Panel titled with the schema name.
    """
    settings = settings if settings is not None else DisplaySettings()

    return Panel(
        format_as_form(instance, settings),
        title=Text(instance.schema.name, style='bold'),
        border_style=settings.panel_border_style,
        title_align=settings.panel_title_align,
        expand=False,
        box=getattr(box, settings.panel_box),
    )


def to_text(renderable: RenderableType, settings: DisplaySettings | None = None) -> str:
    """Render through a Rich console into a string with ANSI codes."""
    settings = settings if settings is not None else DisplaySettings()

    string_io = StringIO()
    console = Console(file=string_io, force_terminal=True, width=int(settings.console_width))
    console.print(renderable)

    return string_io.getvalue()


# ========== ========== ========== ========== ========== Displayable
class Displayable(ABC):
    """
    Mixin giving a class a Rich panel representation.

    Subclasses implement ``_title`` and ``_content``; the mixin builds the
    panel and exposes it through ``__rich__`` (Rich consoles, Jupyter) and
    ``__str__`` (plain ``print``).

    Attributes
    ----------
    display_settings : DisplaySettings
        Display configuration of this object. Created on first access, so
        each object can be customized independently. Assign the same
        ``DisplaySettings`` to several objects to share it.
    """

    # ========== ========== ========== ========== ========== special methods
    def __str__(self) -> str:
        return to_text(self._display_panel(), self.display_settings)

    def __rich__(self) -> RenderableType:
        return self._display_panel()

    # ========== ========== ========== ========== ========== protected methods
    @abstractmethod
    def _title(self) -> Text:
        ...

    @abstractmethod
    def _content(self) -> RenderableType:
        ...

    def _display_panel(self) -> Panel:
        settings = self.display_settings

        return Panel(
            self._content(),
            title=self._title(),
            border_style=settings.panel_border_style,
            title_align=settings.panel_title_align,
            expand=False,
            box=getattr(box, settings.panel_box),
        )

    # ========== ========== ========== ========== ========== public methods
    def to_html(self) -> str:
        """HTML export of the panel, with inline styles."""
        console = Console(record=True, file=StringIO(), width=int(self.display_settings.console_width))
        console.print(self._display_panel())
        return console.export_html(inline_styles=True)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def display_settings(self) -> DisplaySettings:
        try:
            return self._display_settings
        except AttributeError:
            self._display_settings = DisplaySettings()
            return self._display_settings

    @display_settings.setter
    def display_settings(self, settings: DisplaySettings) -> None:
        if not isinstance(settings, DisplaySettings):
            raise TypeError(f"Expected DisplaySettings, given {type(settings).__name__} instead")

        self._display_settings = settings
