"""Signature tree nodes.

All nodes are frozen dataclasses. Type expressions, type parameters and
annotations are opaque strings: they are carried through subtraction
verbatim and never interpreted.

Class and module bodies hold nested declarations and members in one ordered
tuple, the way they appear in source.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from sigdelta.core.errors import UnsupportedVariantError
from sigdelta.signature.names import TypeName


class MethodKind(str, Enum):
    """Receiver of a method, attribute or instance variable."""

    INSTANCE = "instance"
    SINGLETON = "singleton"
    SINGLETON_INSTANCE = "singleton_instance"  # module_function style


@dataclass(frozen=True, slots=True)
class Location:
    """Source span of a node."""

    path: str | None = None
    start_line: int = 0
    start_col: int = 0
    end_line: int = 0
    end_col: int = 0


# ============================================================================
# MEMBERS
# ============================================================================


@dataclass(frozen=True, slots=True)
class MethodDefinition:
    name: str
    kind: MethodKind = MethodKind.INSTANCE
    overloads: tuple[str, ...] = ()
    overloading: bool = False  # `...` continuation of an existing definition
    visibility: str | None = None  # "public" | "private" | None
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class Alias:
    new_name: str
    old_name: str
    kind: MethodKind = MethodKind.INSTANCE
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class Attribute:
    """Shared shape of attr_reader / attr_writer / attr_accessor.

    The backing instance variable is ``@<name>`` unless ``ivar_name`` names
    another one, or ``omit_ivar`` says there is none.
    """

    name: str
    type: str = "untyped"
    kind: MethodKind = MethodKind.INSTANCE
    ivar_name: str | None = None
    omit_ivar: bool = False
    visibility: str | None = None
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None

    @property
    def derived_ivar_name(self) -> str | None:
        if self.omit_ivar:
            return None
        return self.ivar_name or f"@{self.name}"


@dataclass(frozen=True, slots=True)
class AttrReader(Attribute):
    pass


@dataclass(frozen=True, slots=True)
class AttrWriter(Attribute):
    pass


@dataclass(frozen=True, slots=True)
class AttrAccessor(Attribute):
    pass


@dataclass(frozen=True, slots=True)
class Variable:
    name: str
    type: str = "untyped"
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class InstanceVariable(Variable):
    pass


@dataclass(frozen=True, slots=True)
class ClassInstanceVariable(Variable):
    pass


@dataclass(frozen=True, slots=True)
class ClassVariable(Variable):
    pass


@dataclass(frozen=True, slots=True)
class Mixin:
    name: TypeName
    args: tuple[str, ...] = ()
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class Include(Mixin):
    pass


@dataclass(frozen=True, slots=True)
class Extend(Mixin):
    pass


@dataclass(frozen=True, slots=True)
class Prepend(Mixin):
    pass


@dataclass(frozen=True, slots=True)
class VisibilityMarker:
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class Public(VisibilityMarker):
    pass


@dataclass(frozen=True, slots=True)
class Private(VisibilityMarker):
    pass


Member = (
    MethodDefinition
    | Alias
    | AttrReader
    | AttrWriter
    | AttrAccessor
    | InstanceVariable
    | ClassInstanceVariable
    | ClassVariable
    | Include
    | Extend
    | Prepend
    | Public
    | Private
)


# ============================================================================
# DECLARATIONS
# ============================================================================


@dataclass(frozen=True, slots=True)
class Constant:
    name: TypeName
    type: str = "untyped"
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class Global:
    name: str  # `$stdout`; globals are never namespaced
    type: str = "untyped"
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class TypeAlias:
    name: TypeName
    type: str = "untyped"
    type_params: tuple[str, ...] = ()
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class ClassAlias:
    new_name: TypeName
    old_name: TypeName
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class ModuleAlias:
    new_name: TypeName
    old_name: TypeName
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class Interface:
    name: TypeName
    type_params: tuple[str, ...] = ()
    members: tuple[Member, ...] = ()
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class Class:
    name: TypeName
    type_params: tuple[str, ...] = ()
    super_class: str | None = None
    members: tuple[Declaration | Member, ...] = ()
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None

    def each_decl(self) -> Iterator[Declaration]:
        return _nested_decls(self.members)

    def each_member(self) -> Iterator[Member]:
        return _own_members(self.members)


@dataclass(frozen=True, slots=True)
class Module:
    name: TypeName
    type_params: tuple[str, ...] = ()
    self_types: tuple[str, ...] = ()
    members: tuple[Declaration | Member, ...] = ()
    annotations: tuple[str, ...] = ()
    location: Location | None = None
    comment: str | None = None

    def each_decl(self) -> Iterator[Declaration]:
        return _nested_decls(self.members)

    def each_member(self) -> Iterator[Member]:
        return _own_members(self.members)


Declaration = Constant | Interface | Class | Module | Global | TypeAlias | ClassAlias | ModuleAlias

DECLARATION_TYPES: tuple[type, ...] = (
    Constant,
    Interface,
    Class,
    Module,
    Global,
    TypeAlias,
    ClassAlias,
    ModuleAlias,
)


def _nested_decls(children: Iterable[Declaration | Member]) -> Iterator[Declaration]:
    for child in children:
        if isinstance(child, DECLARATION_TYPES):
            yield child  # type: ignore[misc]


def _own_members(children: Iterable[Declaration | Member]) -> Iterator[Member]:
    for child in children:
        if not isinstance(child, DECLARATION_TYPES):
            yield child  # type: ignore[misc]


def with_members(decl: Class | Module, members: Iterable[Declaration | Member]) -> Class | Module:
    """Copy a class or module with a new body; every other field is kept as is."""
    if not isinstance(decl, (Class, Module)):
        raise UnsupportedVariantError.declaration(decl)
    return dataclasses.replace(decl, members=tuple(members))


def count_nodes(decls: Iterable[Declaration | Member]) -> int:
    """Number of declarations and members in a tree, recursively."""
    total = 0
    for node in decls:
        total += 1
        if isinstance(node, (Class, Module, Interface)):
            total += count_nodes(node.members)
    return total
