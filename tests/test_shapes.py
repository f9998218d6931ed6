"""Tests for shape declarations (core/shapes.py).

Coverage:
* ``option`` flag validation and field defaults.
* ``@verb`` names, aliases and non-inheritance of verb metadata.
* ``option_fields`` introspection and its rejections, including required flags.
* ``unwrap_optional`` on Optional and wider unions.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

import pytest

from argbind.core.shapes import (
    OPTION_METADATA_KEY,
    OptionSpec,
    is_verb,
    option,
    option_fields,
    require_verb_spec,
    unwrap_optional,
    verb,
    verb_names,
    verb_spec,
)
from argbind.exceptions import ShapeDefinitionError
from conftest import CustomVerbBase, SimpleOptions, Verb1, Verb2


@dataclass
class _Mixed:
    count: int = option("-c", "--count", default=3)
    tags: list[str] = option("--tag", default_factory=list)
    label: str = "fixed"


# ---------------------------------------------------------------------------
# option()
# ---------------------------------------------------------------------------

class TestOption:
    def test_metadata_carries_flags(self) -> None:
        fld = dataclasses.fields(SimpleOptions)[0]
        spec = fld.metadata[OPTION_METADATA_KEY]
        assert isinstance(spec, OptionSpec)
        assert spec.flags == ("-p", "--path")
        assert spec.required is True

    def test_long_only(self) -> None:
        fld = option("--verbose")
        assert fld.metadata[OPTION_METADATA_KEY].flags == ("--verbose",)

    def test_missing_default_becomes_none(self) -> None:
        assert option("-x").default is None

    def test_default_factory(self) -> None:
        fld = option("--tag", default_factory=list)
        assert fld.default_factory() == []

    @pytest.mark.parametrize(
        "flags",
        [
            (),
            ("path",),
            ("-path",),
            ("--",),
            ("-a", "-b"),
            ("--one", "--two"),
            ("-a", "--all", "--extra"),
        ],
    )
    def test_invalid_flags_rejected(self, flags: tuple[str, ...]) -> None:
        with pytest.raises(ShapeDefinitionError):
            option(*flags)


# ---------------------------------------------------------------------------
# @verb
# ---------------------------------------------------------------------------

class TestVerb:
    def test_spec_is_attached(self) -> None:
        spec = verb_spec(Verb1)
        assert spec is not None
        assert spec.name == "verb1"
        assert spec.help == "Reads an input file"

    def test_aliases(self) -> None:
        assert verb_names(Verb2) == ("verb2", "v2")

    def test_options_shape_is_not_a_verb(self) -> None:
        assert not is_verb(SimpleOptions)
        assert verb_names(SimpleOptions) == ()

    def test_base_is_not_a_verb(self) -> None:
        assert not is_verb(CustomVerbBase)

    def test_spec_is_not_inherited(self) -> None:
        @dataclass
        class Derived(Verb1):
            pass

        assert verb_spec(Derived) is None

    def test_require_verb_spec_rejects_plain_shape(self) -> None:
        with pytest.raises(ShapeDefinitionError) as exc_info:
            require_verb_spec(SimpleOptions)
        assert "@verb" in (exc_info.value.hint or "")

    @pytest.mark.parametrize("name", ["", "-add", "two words"])
    def test_invalid_names_rejected(self, name: str) -> None:
        with pytest.raises(ShapeDefinitionError):
            verb(name)

    def test_invalid_alias_rejected(self) -> None:
        with pytest.raises(ShapeDefinitionError):
            verb("add", aliases=("--a",))


# ---------------------------------------------------------------------------
# option_fields()
# ---------------------------------------------------------------------------

class TestOptionFields:
    def test_fields_in_declaration_order(self) -> None:
        names = [fld.name for fld in option_fields(_Mixed)]
        assert names == ["count", "tags"]

    def test_annotations_are_resolved(self) -> None:
        fields = {fld.name: fld for fld in option_fields(_Mixed)}
        assert fields["count"].annotation is int
        assert fields["tags"].annotation == list[str]

    def test_defaults(self) -> None:
        fields = {fld.name: fld for fld in option_fields(_Mixed)}
        assert fields["count"].default == 3
        assert fields["tags"].default == []

    def test_inherited_fields_are_included(self) -> None:
        assert [fld.name for fld in option_fields(Verb1)] == ["input_path"]

    def test_non_dataclass_rejected(self) -> None:
        class NotAShape:
            pass

        with pytest.raises(ShapeDefinitionError):
            option_fields(NotAShape)

    def test_instance_rejected(self) -> None:
        with pytest.raises(ShapeDefinitionError):
            option_fields(SimpleOptions(file_path="x"))  # type: ignore[arg-type]

    def test_undefaulted_plain_field_rejected(self) -> None:
        @dataclass
        class Bad:
            plain: str

        with pytest.raises(ShapeDefinitionError):
            option_fields(Bad)

    def test_required_flag_rejected(self) -> None:
        @dataclass
        class Bad:
            verbose: bool = option("-v", "--verbose", required=True)

        with pytest.raises(ShapeDefinitionError) as exc_info:
            option_fields(Bad)
        assert "Bad.verbose" in str(exc_info.value)
        assert "required=True" in (exc_info.value.hint or "")

    def test_required_optional_flag_rejected(self) -> None:
        @dataclass
        class Bad:
            verbose: bool | None = option("--verbose", required=True)

        with pytest.raises(ShapeDefinitionError):
            option_fields(Bad)

    def test_flags_are_detected(self) -> None:
        @dataclass
        class Flags:
            quiet: bool = option("-q")
            maybe: bool | None = option("--maybe")
            level: int | None = option("--level")

        fields = {fld.name: fld for fld in option_fields(Flags)}
        assert fields["quiet"].is_flag
        assert fields["maybe"].is_flag
        assert not fields["level"].is_flag


# ---------------------------------------------------------------------------
# unwrap_optional()
# ---------------------------------------------------------------------------

class TestUnwrapOptional:
    def test_optional_is_unwrapped(self) -> None:
        assert unwrap_optional(int | None) is int

    def test_wider_union_is_kept(self) -> None:
        assert unwrap_optional(int | str | None) == int | str | None

    def test_plain_type_is_kept(self) -> None:
        assert unwrap_optional(str) is str
