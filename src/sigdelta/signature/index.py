"""Read-only lookup index over a signature tree.

``SubtrahendIndex`` is the query surface the subtractor depends on.
``SignatureIndex`` is the stock implementation, built once from parsed
declarations and frozen afterwards; tests may pass any object with the same
shape.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

import structlog

from sigdelta.core.errors import UnsupportedVariantError
from sigdelta.signature.ast import (
    Class,
    ClassAlias,
    Constant,
    Declaration,
    Global,
    Interface,
    Member,
    Module,
    ModuleAlias,
    TypeAlias,
)
from sigdelta.signature.names import ROOT, Context, TypeName, resolve_name

if TYPE_CHECKING:
    from sigdelta.signature.documents import SignatureDocument

log = structlog.get_logger(__name__)


# ============================================================================
# ENTRIES
# ============================================================================


@dataclass(frozen=True, slots=True)
class ClassEntry:
    """All partial declarations of one class, in declaration order."""

    name: TypeName
    decls: tuple[Class | Module, ...]


@dataclass(frozen=True, slots=True)
class ModuleEntry:
    """All partial declarations of one module, in declaration order."""

    name: TypeName
    decls: tuple[Class | Module, ...]


@dataclass(frozen=True, slots=True)
class InterfaceEntry:
    name: TypeName
    decl: Interface


@dataclass(frozen=True, slots=True)
class ConstantEntry:
    name: TypeName
    decl: Constant


@dataclass(frozen=True, slots=True)
class GlobalEntry:
    name: str
    decl: Global


@dataclass(frozen=True, slots=True)
class TypeAliasEntry:
    name: TypeName
    decl: TypeAlias


@dataclass(frozen=True, slots=True)
class ClassAliasEntry:
    name: TypeName
    decl: ClassAlias


@dataclass(frozen=True, slots=True)
class ModuleAliasEntry:
    name: TypeName
    decl: ModuleAlias


# ============================================================================
# PROTOCOL
# ============================================================================


class PartialDecl(Protocol):
    """Anything exposing a member sequence."""

    @property
    def members(self) -> Sequence[Declaration | Member]: ...


class ClassLikeEntry(Protocol):
    @property
    def decls(self) -> Sequence[PartialDecl]: ...


class SingleDeclEntry(Protocol):
    @property
    def decl(self) -> PartialDecl: ...


class SubtrahendIndex(Protocol):
    """Presence queries over the subtrahend, keyed by absolute name."""

    @property
    def global_decls(self) -> Mapping[str, object]: ...

    @property
    def type_alias_decls(self) -> Mapping[TypeName, object]: ...

    @property
    def interface_decls(self) -> Mapping[TypeName, SingleDeclEntry]: ...

    @property
    def class_decls(self) -> Mapping[TypeName, ClassLikeEntry]: ...

    def has_constant(self, name: TypeName) -> bool: ...

    def has_interface(self, name: TypeName) -> bool: ...

    def has_class_alias(self, name: TypeName) -> bool: ...

    def has_class_decl(self, name: TypeName) -> bool: ...

    def has_module_alias(self, name: TypeName) -> bool: ...

    def has_module_decl(self, name: TypeName) -> bool: ...


# ============================================================================
# IMPLEMENTATION
# ============================================================================


class SignatureIndex:
    """Frozen index of one or more signature trees.

    Reopened classes and modules accumulate into a single entry. For the other
    kinds the first declaration of a name wins.
    """

    def __init__(
        self,
        *,
        class_decls: Mapping[TypeName, ClassEntry | ModuleEntry] | None = None,
        interface_decls: Mapping[TypeName, InterfaceEntry] | None = None,
        constant_decls: Mapping[TypeName, ConstantEntry] | None = None,
        global_decls: Mapping[str, GlobalEntry] | None = None,
        type_alias_decls: Mapping[TypeName, TypeAliasEntry] | None = None,
        class_alias_decls: Mapping[TypeName, ClassAliasEntry | ModuleAliasEntry] | None = None,
    ) -> None:
        self._class_decls = MappingProxyType(dict(class_decls or {}))
        self._interface_decls = MappingProxyType(dict(interface_decls or {}))
        self._constant_decls = MappingProxyType(dict(constant_decls or {}))
        self._global_decls = MappingProxyType(dict(global_decls or {}))
        self._type_alias_decls = MappingProxyType(dict(type_alias_decls or {}))
        self._class_alias_decls = MappingProxyType(dict(class_alias_decls or {}))

    @classmethod
    def from_declarations(
        cls, declarations: Iterable[Declaration], context: Context = ROOT
    ) -> SignatureIndex:
        builder = _IndexBuilder()
        builder.add_all(declarations, context)
        return builder.build()

    @classmethod
    def from_documents(cls, documents: Iterable[SignatureDocument]) -> SignatureIndex:
        builder = _IndexBuilder()
        for doc in documents:
            builder.add_all(doc.declarations, ROOT)
        return builder.build()

    @property
    def class_decls(self) -> Mapping[TypeName, ClassEntry | ModuleEntry]:
        return self._class_decls

    @property
    def interface_decls(self) -> Mapping[TypeName, InterfaceEntry]:
        return self._interface_decls

    @property
    def constant_decls(self) -> Mapping[TypeName, ConstantEntry]:
        return self._constant_decls

    @property
    def global_decls(self) -> Mapping[str, GlobalEntry]:
        return self._global_decls

    @property
    def type_alias_decls(self) -> Mapping[TypeName, TypeAliasEntry]:
        return self._type_alias_decls

    @property
    def class_alias_decls(self) -> Mapping[TypeName, ClassAliasEntry | ModuleAliasEntry]:
        return self._class_alias_decls

    def has_constant(self, name: TypeName) -> bool:
        # Classes, modules and their aliases live in the constant namespace too.
        return (
            name in self._constant_decls
            or name in self._class_decls
            or name in self._class_alias_decls
        )

    def has_interface(self, name: TypeName) -> bool:
        return name in self._interface_decls

    def has_class_decl(self, name: TypeName) -> bool:
        return isinstance(self._class_decls.get(name), ClassEntry)

    def has_module_decl(self, name: TypeName) -> bool:
        return isinstance(self._class_decls.get(name), ModuleEntry)

    def has_class_alias(self, name: TypeName) -> bool:
        return isinstance(self._class_alias_decls.get(name), ClassAliasEntry)

    def has_module_alias(self, name: TypeName) -> bool:
        return isinstance(self._class_alias_decls.get(name), ModuleAliasEntry)

    def __len__(self) -> int:
        return (
            len(self._class_decls)
            + len(self._interface_decls)
            + len(self._constant_decls)
            + len(self._global_decls)
            + len(self._type_alias_decls)
            + len(self._class_alias_decls)
        )

    def __repr__(self) -> str:
        return (
            f"SignatureIndex(classes={len(self._class_decls)}, "
            f"interfaces={len(self._interface_decls)}, "
            f"constants={len(self._constant_decls)}, "
            f"globals={len(self._global_decls)}, "
            f"type_aliases={len(self._type_alias_decls)}, "
            f"class_aliases={len(self._class_alias_decls)})"
        )


class _IndexBuilder:
    """Mutable accumulator used while walking declarations."""

    def __init__(self) -> None:
        self.class_decls: dict[TypeName, tuple[type, list[Class | Module]]] = {}
        self.interface_decls: dict[TypeName, InterfaceEntry] = {}
        self.constant_decls: dict[TypeName, ConstantEntry] = {}
        self.global_decls: dict[str, GlobalEntry] = {}
        self.type_alias_decls: dict[TypeName, TypeAliasEntry] = {}
        self.class_alias_decls: dict[TypeName, ClassAliasEntry | ModuleAliasEntry] = {}

    def add_all(self, declarations: Iterable[Declaration], context: Context) -> None:
        for decl in declarations:
            self.add(decl, context)

    def add(self, decl: Declaration, context: Context) -> None:
        if isinstance(decl, (Class, Module)):
            name = resolve_name(decl.name, context)
            entry_type = ClassEntry if isinstance(decl, Class) else ModuleEntry
            existing_type, decls = self.class_decls.setdefault(name, (entry_type, []))
            if existing_type is not entry_type:
                log.warning(
                    "class_module_mismatch",
                    name=str(name),
                    declared=entry_type.__name__,
                    existing=existing_type.__name__,
                )
            decls.append(decl)
            self.add_all(decl.each_decl(), context.push(decl.name))
        elif isinstance(decl, Interface):
            name = resolve_name(decl.name, context)
            self._first_wins(self.interface_decls, name, InterfaceEntry(name=name, decl=decl))
        elif isinstance(decl, Constant):
            name = resolve_name(decl.name, context)
            self._first_wins(self.constant_decls, name, ConstantEntry(name=name, decl=decl))
        elif isinstance(decl, Global):
            self._first_wins(self.global_decls, decl.name, GlobalEntry(name=decl.name, decl=decl))
        elif isinstance(decl, TypeAlias):
            name = resolve_name(decl.name, context)
            self._first_wins(self.type_alias_decls, name, TypeAliasEntry(name=name, decl=decl))
        elif isinstance(decl, ClassAlias):
            name = resolve_name(decl.new_name, context)
            self._first_wins(self.class_alias_decls, name, ClassAliasEntry(name=name, decl=decl))
        elif isinstance(decl, ModuleAlias):
            name = resolve_name(decl.new_name, context)
            self._first_wins(self.class_alias_decls, name, ModuleAliasEntry(name=name, decl=decl))
        else:
            raise UnsupportedVariantError.declaration(decl)

    @staticmethod
    def _first_wins(table: dict, key: object, entry: object) -> None:
        if key in table:
            log.debug("duplicate_declaration_ignored", name=str(key))
            return
        table[key] = entry

    def build(self) -> SignatureIndex:
        class_decls: dict[TypeName, ClassEntry | ModuleEntry] = {
            name: entry_type(name=name, decls=tuple(decls))
            for name, (entry_type, decls) in self.class_decls.items()
        }
        index = SignatureIndex(
            class_decls=class_decls,
            interface_decls=self.interface_decls,
            constant_decls=self.constant_decls,
            global_decls=self.global_decls,
            type_alias_decls=self.type_alias_decls,
            class_alias_decls=self.class_alias_decls,
        )
        log.debug("index_built", index=repr(index))
        return index
