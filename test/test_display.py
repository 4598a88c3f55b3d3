#  -*- coding: utf-8 -*-
"""
Test suite for Displayable, DisplaySettings and render.

Tests cover:
- DisplaySettings: defaults, typecasting and validation of settings
- render: panel title, visible properties, nested panels
- Displayable: Rich protocol, string output, HTML export, per-object settings
"""

from __future__ import annotations

import pytest

from io import StringIO

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from schemaobject import Displayable, DisplaySettings, Instance, Schema, render, String, Number, Array
from schemaobject.display import BOX_NAMES, format_as_form, to_text


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def default_settings() -> DisplaySettings:
    """Create default DisplaySettings."""
    return DisplaySettings()


@pytest.fixture
def person() -> Instance:
    schema = Schema({
        'name': String,
        'age': Number,
        'password': {'type': String, 'invisible': True},
        'address': {'street': String},
        'pets': {'type': Array, 'array_of': {'name': String}},
    }, name='Person')

    return Instance(schema, {
        'name': 'Ada',
        'age': 36,
        'password': 'hunter2',
        'address': {'street': 'Main St'},
        'pets': [{'name': 'Rex'}],
    })


@pytest.fixture
def simple_displayable_class() -> type:
    """A simple Displayable implementation for testing."""

    class SimpleDisplay(Displayable):
        def __init__(self, title_text: str, body_text: str):
            self.title_text = title_text
            self.body_text = body_text

        def _title(self) -> Text:
            return Text(self.title_text)

        def _content(self) -> str:
            return self.body_text

    return SimpleDisplay


def plain(renderable, width: int = 150) -> str:
    console = Console(file=StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


# ========== ========== ========== ========== Test DisplaySettings
class TestDisplaySettings:
    """Test DisplaySettings configuration class."""

    def test_creates_with_defaults(self, default_settings) -> None:
        assert default_settings.console_width == 150
        assert default_settings.property_style == 'bold bright_yellow'
        assert default_settings.panel_border_style == 'bright_cyan'
        assert default_settings.panel_box == 'ROUNDED'
        assert default_settings.panel_title_align == 'center'
        assert default_settings.show_invisible is False

    def test_keyword_construction(self) -> None:
        settings = DisplaySettings(console_width='120', panel_box='heavy')
        assert settings.console_width == 120
        assert settings.panel_box == 'HEAVY'

    def test_seed_construction(self) -> None:
        settings = DisplaySettings({'property_style': 'bold cyan'}, panel_border_style='green')
        assert settings.property_style == 'bold cyan'
        assert settings.panel_border_style == 'green'

    def test_invalid_values_are_rejected(self, default_settings) -> None:
        default_settings.console_width = 5
        default_settings.panel_box = 'nonsense'
        default_settings.panel_title_align = 'middle'

        assert default_settings.console_width == 150
        assert default_settings.panel_box == 'ROUNDED'
        assert default_settings.panel_title_align == 'center'

    def test_title_align_is_normalized(self, default_settings) -> None:
        default_settings.panel_title_align = ' LEFT '
        assert default_settings.panel_title_align == 'left'

    def test_box_names_come_from_rich(self) -> None:
        assert 'ROUNDED' in BOX_NAMES
        assert 'HEAVY' in BOX_NAMES

    def test_settings_are_independent(self) -> None:
        first = DisplaySettings()
        second = DisplaySettings()
        first.console_width = 80
        assert second.console_width == 150

    def test_unknown_setting_raises(self, default_settings) -> None:
        with pytest.raises(AttributeError):
            default_settings.table_header_style = 'bold'


# ========== ========== ========== ========== Test render
class TestRender:

    def test_returns_a_panel(self, person) -> None:
        assert isinstance(render(person), Panel)

    def test_title_is_the_schema_name(self, person) -> None:
        panel = render(person)
        assert panel.title.plain == 'Person'

    def test_visible_properties_are_shown(self, person) -> None:
        output = plain(render(person))
        assert 'name:' in output
        assert 'Ada' in output
        assert '36' in output
        assert 'hunter2' not in output

    def test_show_invisible(self, person) -> None:
        output = plain(render(person, DisplaySettings(show_invisible=True)))
        assert 'password:' in output
        assert 'hunter2' in output

    def test_nested_instances_are_panels(self, person) -> None:
        output = plain(render(person))
        assert 'address' in output
        assert 'Main St' in output
        assert 'Rex' in output

    def test_missing_values(self) -> None:
        output = plain(render(Instance({'name': String})))
        assert 'None' in output

    def test_settings_are_used(self, person) -> None:
        panel = render(person, DisplaySettings(panel_border_style='green', panel_box='ascii'))
        assert panel.border_style == 'green'
        assert panel.box is box.ASCII

    def test_form_has_one_row_per_visible_property(self, person, default_settings) -> None:
        form = format_as_form(person, default_settings)
        assert form.row_count == len(person.schema.visible)

    def test_to_text(self, person) -> None:
        text = to_text(render(person), DisplaySettings(console_width=60))
        assert 'Ada' in text


# ========== ========== ========== ========== Test Displayable
class TestDisplayable:

    def test_cannot_instantiate_abstract(self) -> None:
        with pytest.raises(TypeError):
            Displayable()

    def test_rich_protocol(self, simple_displayable_class) -> None:
        obj = simple_displayable_class('Title', 'Body')
        panel = obj.__rich__()
        assert isinstance(panel, Panel)
        assert panel.title.plain == 'Title'

    def test_str_renders_the_panel(self, simple_displayable_class) -> None:
        output = str(simple_displayable_class('Title', 'Body'))
        assert 'Title' in output
        assert 'Body' in output

    def test_settings_are_created_lazily(self, simple_displayable_class) -> None:
        first = simple_displayable_class('A', 'a')
        second = simple_displayable_class('B', 'b')

        assert isinstance(first.display_settings, DisplaySettings)
        assert first.display_settings is first.display_settings
        assert first.display_settings is not second.display_settings

    def test_settings_can_be_shared(self, simple_displayable_class) -> None:
        shared = DisplaySettings(panel_border_style='red')
        first = simple_displayable_class('A', 'a')
        first.display_settings = shared
        assert first._display_panel().border_style == 'red'

    def test_settings_type_is_checked(self, simple_displayable_class) -> None:
        with pytest.raises(TypeError):
            simple_displayable_class('A', 'a').display_settings = {'console_width': 80}

    def test_to_html(self, simple_displayable_class) -> None:
        html = simple_displayable_class('Title', 'Body').to_html()
        assert '<html>' in html.lower() or '<!doctype html>' in html.lower()
        assert 'Body' in html
