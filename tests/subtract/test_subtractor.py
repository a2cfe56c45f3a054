"""Tests for signature tree subtraction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from sigdelta.core.errors import UnsupportedVariantError
from sigdelta.signature.ast import (
    Alias,
    AttrAccessor,
    AttrReader,
    Class,
    ClassAlias,
    Constant,
    Declaration,
    Extend,
    Global,
    Include,
    InstanceVariable,
    Interface,
    Location,
    MethodDefinition,
    MethodKind,
    Module,
    ModuleAlias,
    Prepend,
    Private,
    Public,
    TypeAlias,
    count_nodes,
)
from sigdelta.signature.index import ClassEntry, SignatureIndex
from sigdelta.signature.names import ROOT, TypeName
from sigdelta.subtract.subtractor import Subtractor, subtract


def _n(text: str) -> TypeName:
    return TypeName.parse(text)


def _index(*decls: Declaration) -> SignatureIndex:
    return SignatureIndex.from_declarations(decls)


class TestIdentity:
    """Subtracting nothing keeps everything."""

    def test_empty_subtrahend_returns_equal_tree(self) -> None:
        # Given
        minuend = [
            Class(
                name=_n("Foo"),
                members=(Constant(name=_n("BAZ"), type="Integer"), MethodDefinition(name="bar")),
            ),
            Global(name="$debug", type="bool"),
            TypeAlias(name=_n("json"), type="Hash[String, untyped]"),
        ]

        # When
        result = subtract(minuend, _index())

        # Then
        assert result == minuend

    def test_mixed_body_is_equal_up_to_reorder(self) -> None:
        """Nothing is dropped, but nested declarations move ahead of members."""
        # Given
        minuend = [
            Class(
                name=_n("Foo"),
                members=(
                    MethodDefinition(name="bar"),
                    Constant(name=_n("BAZ")),
                    Include(name=_n("Comparable")),
                    Class(name=_n("Inner")),
                ),
            )
        ]

        # When
        result = subtract(minuend, _index())

        # Then
        assert result != minuend
        assert count_nodes(result) == count_nodes(minuend)
        assert result == [
            Class(
                name=_n("Foo"),
                members=(
                    Constant(name=_n("BAZ")),
                    Class(name=_n("Inner")),
                    MethodDefinition(name="bar"),
                    Include(name=_n("Comparable")),
                ),
            )
        ]
        assert subtract(result, _index()) == result

    def test_empty_minuend(self) -> None:
        assert subtract([], _index(Class(name=_n("Foo")))) == []

    def test_input_not_mutated(self) -> None:
        original = Class(name=_n("Foo"), members=(MethodDefinition(name="bar"),))
        minuend = [original]

        subtract(minuend, _index(Class(name=_n("Foo"), members=(MethodDefinition(name="bar"),))))

        assert minuend == [original]
        assert original.members == (MethodDefinition(name="bar"),)


class TestLeafDeclarations:
    """Non-container declarations are removed on exact absolute-name match."""

    def test_constant(self) -> None:
        result = subtract(
            [Constant(name=_n("A")), Constant(name=_n("B"))],
            _index(Constant(name=_n("A"), type="Integer")),
        )
        assert result == [Constant(name=_n("B"))]

    def test_constant_shadowed_by_class(self) -> None:
        result = subtract([Constant(name=_n("Foo"))], _index(Class(name=_n("Foo"))))
        assert result == []

    def test_interface(self) -> None:
        result = subtract([Interface(name=_n("_Each"))], _index(Interface(name=_n("_Each"))))
        assert result == []

    def test_global(self) -> None:
        result = subtract(
            [Global(name="$stdout"), Global(name="$stderr")],
            _index(Global(name="$stdout", type="IO")),
        )
        assert result == [Global(name="$stderr")]

    def test_type_alias(self) -> None:
        result = subtract([TypeAlias(name=_n("json"))], _index(TypeAlias(name=_n("json"), type="String")))
        assert result == []

    def test_type_alias_different_namespace_kept(self) -> None:
        minuend = [TypeAlias(name=_n("Foo::json"))]
        assert subtract(minuend, _index(TypeAlias(name=_n("json")))) == minuend

    def test_absolute_and_relative_names_match(self) -> None:
        result = subtract([Constant(name=_n("::Foo::BAR"))], _index(Constant(name=_n("Foo::BAR"))))
        assert result == []


class TestAliasDeclarations:
    """Class and module aliases are shadowed by aliases or real declarations."""

    def test_class_alias_shadowed_by_class_alias(self) -> None:
        alias = ClassAlias(new_name=_n("Str"), old_name=_n("String"))
        assert subtract([alias], _index(ClassAlias(new_name=_n("Str"), old_name=_n("Symbol")))) == []

    def test_class_alias_shadowed_by_class(self) -> None:
        alias = ClassAlias(new_name=_n("Str"), old_name=_n("String"))
        assert subtract([alias], _index(Class(name=_n("Str")))) == []

    def test_class_alias_not_shadowed_by_module(self) -> None:
        alias = ClassAlias(new_name=_n("Str"), old_name=_n("String"))
        assert subtract([alias], _index(Module(name=_n("Str")))) == [alias]

    def test_module_alias_shadowed_by_module(self) -> None:
        alias = ModuleAlias(new_name=_n("K"), old_name=_n("Kernel"))
        assert subtract([alias], _index(Module(name=_n("K")))) == []
        assert subtract([alias], _index(ModuleAlias(new_name=_n("K"), old_name=_n("Kernel")))) == []

    def test_module_alias_not_shadowed_by_class_alias(self) -> None:
        alias = ModuleAlias(new_name=_n("K"), old_name=_n("Kernel"))
        assert subtract([alias], _index(ClassAlias(new_name=_n("K"), old_name=_n("Kernel")))) == [alias]


class TestContainers:
    """Classes and modules survive and have their bodies filtered."""

    def test_scenario_method_removed_nested_constant_kept(self) -> None:
        # Given
        minuend = [
            Class(
                name=_n("Foo"),
                members=(MethodDefinition(name="bar"), Constant(name=_n("BAZ"))),
            )
        ]
        subtrahend = _index(Class(name=_n("Foo"), members=(MethodDefinition(name="bar"),)))

        # When
        result = subtract(minuend, subtrahend)

        # Then
        assert result == [Class(name=_n("Foo"), members=(Constant(name=_n("BAZ")),))]

    def test_fully_subtracted_class_is_kept_empty(self) -> None:
        minuend = [Class(name=_n("Foo"), members=(MethodDefinition(name="bar"),))]
        subtrahend = _index(Class(name=_n("Foo"), members=(MethodDefinition(name="bar"),)))
        assert subtract(minuend, subtrahend) == [Class(name=_n("Foo"))]

    def test_nested_owner_is_qualified(self) -> None:
        # Given
        minuend = [
            Class(
                name=_n("Outer"),
                members=(Class(name=_n("Inner"), members=(MethodDefinition(name="m"),)),),
            )
        ]
        subtrahend = _index(Class(name=_n("Outer::Inner"), members=(MethodDefinition(name="m"),)))

        # When
        result = subtract(minuend, subtrahend)

        # Then
        assert result == [Class(name=_n("Outer"), members=(Class(name=_n("Inner")),))]

    def test_unqualified_owner_does_not_match(self) -> None:
        minuend = [
            Class(
                name=_n("Outer"),
                members=(Class(name=_n("Inner"), members=(MethodDefinition(name="m"),)),),
            )
        ]
        subtrahend = _index(Class(name=_n("Inner"), members=(MethodDefinition(name="m"),)))
        assert subtract(minuend, subtrahend) == minuend

    def test_nested_declarations_come_before_members(self) -> None:
        minuend = [
            Module(
                name=_n("M"),
                members=(
                    MethodDefinition(name="a"),
                    Constant(name=_n("X")),
                    MethodDefinition(name="b"),
                ),
            )
        ]
        result = subtract(minuend, _index())
        assert result[0].members == (  # type: ignore[union-attr]
            Constant(name=_n("X")),
            MethodDefinition(name="a"),
            MethodDefinition(name="b"),
        )

    def test_reopened_subtrahend_class(self) -> None:
        minuend = [Class(name=_n("Foo"), members=(MethodDefinition(name="a"), MethodDefinition(name="b")))]
        subtrahend = _index(
            Class(name=_n("Foo"), members=(MethodDefinition(name="a"),)),
            Class(name=_n("Foo"), members=(MethodDefinition(name="b"),)),
        )
        assert subtract(minuend, subtrahend) == [Class(name=_n("Foo"))]

    def test_metadata_preserved(self) -> None:
        location = Location(path="foo.rbs", start_line=1, end_line=9)
        minuend = [
            Class(
                name=_n("Foo"),
                type_params=("T",),
                super_class="Base[T]",
                members=(MethodDefinition(name="bar"), MethodDefinition(name="baz")),
                annotations=("%a{deprecated}",),
                location=location,
                comment="Foo docs.",
            )
        ]
        subtrahend = _index(Class(name=_n("Foo"), members=(MethodDefinition(name="bar"),)))

        [result] = subtract(minuend, subtrahend)

        assert isinstance(result, Class)
        assert result.type_params == ("T",)
        assert result.super_class == "Base[T]"
        assert result.annotations == ("%a{deprecated}",)
        assert result.location is location
        assert result.comment == "Foo docs."
        assert result.members == (MethodDefinition(name="baz"),)

    def test_module_self_types_preserved(self) -> None:
        minuend = [Module(name=_n("M"), self_types=("_Each",))]
        assert subtract(minuend, _index(Module(name=_n("M")))) == minuend

    def test_context_argument_qualifies_top_level(self) -> None:
        subtrahend = _index(Constant(name=_n("Outer::X")))
        subtractor = Subtractor(subtrahend)
        assert subtractor.call([Constant(name=_n("X"))], ROOT.push(_n("Outer"))) == []
        assert subtractor.call([Constant(name=_n("X"))]) == [Constant(name=_n("X"))]


class TestMembers:
    """Member filtering inside containers."""

    def test_kind_sensitive(self) -> None:
        minuend = [Class(name=_n("Foo"), members=(MethodDefinition(name="new"),))]
        subtrahend = _index(
            Class(name=_n("Foo"), members=(MethodDefinition(name="new", kind=MethodKind.SINGLETON),))
        )
        assert subtract(minuend, subtrahend) == minuend

    def test_mixins_and_visibility_never_removed(self) -> None:
        body = (
            Include(name=_n("Comparable")),
            Extend(name=_n("Forwardable")),
            Prepend(name=_n("Logging")),
            Private(),
            Public(),
        )
        minuend = [Class(name=_n("Foo"), members=body)]
        assert subtract(minuend, _index(Class(name=_n("Foo"), members=body))) == minuend

    def test_accessor_removed_with_reader_only(self) -> None:
        # Given
        minuend = [Class(name=_n("Person"), members=(AttrAccessor(name="age", type="Integer"),))]
        subtrahend = _index(Class(name=_n("Person"), members=(AttrReader(name="age"),)))

        # When
        result = subtract(minuend, subtrahend)

        # Then
        assert result == [Class(name=_n("Person"))]

    def test_accessor_kept_with_reader_only_under_both_policy(self) -> None:
        minuend = [Class(name=_n("Person"), members=(AttrAccessor(name="age"),))]
        subtrahend = _index(Class(name=_n("Person"), members=(AttrReader(name="age"),)))
        assert subtract(minuend, subtrahend, accessor_policy="both") == minuend

    def test_alias_member(self) -> None:
        minuend = [Class(name=_n("Foo"), members=(Alias(new_name="size", old_name="length"),))]
        subtrahend = _index(Class(name=_n("Foo"), members=(MethodDefinition(name="size"),)))
        assert subtract(minuend, subtrahend) == [Class(name=_n("Foo"))]

    def test_ivar_backed_by_attribute(self) -> None:
        minuend = [Class(name=_n("Foo"), members=(InstanceVariable(name="@bar"),))]
        subtrahend = _index(Class(name=_n("Foo"), members=(AttrReader(name="bar"),)))
        assert subtract(minuend, subtrahend) == [Class(name=_n("Foo"))]


class TestLaws:
    """Algebraic properties of subtraction."""

    @pytest.fixture
    def minuend(self) -> list[Declaration]:
        return [
            Class(
                name=_n("Foo"),
                members=(
                    MethodDefinition(name="a"),
                    Class(name=_n("Bar"), members=(MethodDefinition(name="b"),)),
                    AttrAccessor(name="c"),
                ),
            ),
            Constant(name=_n("LIMIT")),
            Interface(name=_n("_Each")),
        ]

    @pytest.fixture
    def subtrahend(self) -> SignatureIndex:
        return _index(
            Class(name=_n("Foo"), members=(MethodDefinition(name="a"),)),
            Class(name=_n("Foo::Bar"), members=(MethodDefinition(name="b"),)),
            Constant(name=_n("LIMIT")),
        )

    def test_idempotent(self, minuend: list[Declaration], subtrahend: SignatureIndex) -> None:
        once = subtract(minuend, subtrahend)
        assert subtract(once, subtrahend) == once

    def test_self_subtraction_leaves_only_skeleton(self, minuend: list[Declaration]) -> None:
        result = subtract(minuend, SignatureIndex.from_declarations(minuend))
        assert result == [Class(name=_n("Foo"), members=(Class(name=_n("Bar")),))]


class TestSubtrahendProtocol:
    """Any object shaped like the index can serve as a subtrahend."""

    def test_custom_index(self) -> None:
        @dataclass
        class StubIndex:
            global_decls: Mapping[str, object] = field(default_factory=dict)
            type_alias_decls: Mapping[TypeName, object] = field(default_factory=dict)
            interface_decls: Mapping[TypeName, object] = field(default_factory=dict)
            class_decls: Mapping[TypeName, ClassEntry] = field(default_factory=dict)

            def has_constant(self, name: TypeName) -> bool:
                return name == _n("::FROM_STUB")

            def has_interface(self, name: TypeName) -> bool:
                return False

            def has_class_alias(self, name: TypeName) -> bool:
                return False

            def has_class_decl(self, name: TypeName) -> bool:
                return False

            def has_module_alias(self, name: TypeName) -> bool:
                return False

            def has_module_decl(self, name: TypeName) -> bool:
                return False

        stub = StubIndex(
            class_decls={
                _n("::Foo"): ClassEntry(
                    name=_n("::Foo"), decls=(Class(name=_n("Foo"), members=(MethodDefinition(name="m"),)),)
                )
            }
        )
        minuend = [
            Constant(name=_n("FROM_STUB")),
            Constant(name=_n("OTHER")),
            Class(name=_n("Foo"), members=(MethodDefinition(name="m"),)),
        ]

        result = Subtractor(stub).call(minuend)  # type: ignore[arg-type]

        assert result == [Constant(name=_n("OTHER")), Class(name=_n("Foo"))]


class TestUnsupportedVariants:
    """Unknown node kinds are reported, not skipped."""

    def test_unknown_declaration(self) -> None:
        with pytest.raises(UnsupportedVariantError) as exc_info:
            subtract([object()], _index())  # type: ignore[list-item]
        assert exc_info.value.details == {"type": "object"}

    def test_unknown_member(self) -> None:
        minuend = [Class(name=_n("Foo"), members=("not a member",))]  # type: ignore[arg-type]
        with pytest.raises(UnsupportedVariantError):
            subtract(minuend, _index())
