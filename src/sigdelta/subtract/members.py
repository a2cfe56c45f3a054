"""Member existence checks against the subtrahend.

A minuend member "exists" when the subtrahend already declares an
equivalent member on the same owner. Equivalence is by name and kind only;
types and overloads are not compared.
"""

from __future__ import annotations

from collections.abc import Iterator

from sigdelta.config.models import AccessorPolicy
from sigdelta.core.errors import UnsupportedVariantError
from sigdelta.signature.ast import (
    Alias,
    AttrAccessor,
    Attribute,
    AttrReader,
    AttrWriter,
    ClassInstanceVariable,
    ClassVariable,
    Declaration,
    Extend,
    Include,
    InstanceVariable,
    Member,
    MethodDefinition,
    MethodKind,
    Prepend,
    Private,
    Public,
)
from sigdelta.signature.index import SubtrahendIndex
from sigdelta.signature.names import TypeName


def writer_name(name: str) -> str:
    return f"{name}="


def provided_method_names(member: Declaration | Member) -> tuple[str, ...]:
    """Method names a member defines on its owner."""
    if isinstance(member, MethodDefinition):
        return (member.name,)
    if isinstance(member, Alias):
        return (member.new_name,)
    if isinstance(member, AttrReader):
        return (member.name,)
    if isinstance(member, AttrWriter):
        return (writer_name(member.name),)
    if isinstance(member, AttrAccessor):
        return (member.name, writer_name(member.name))
    return ()


class MemberExistenceChecker:
    """Answers "does the subtrahend already have this member on this owner?"."""

    def __init__(self, index: SubtrahendIndex, *, accessor_policy: AccessorPolicy = "either") -> None:
        self._index = index
        self._accessor_policy = accessor_policy

    def exists(self, owner: TypeName, member: Member) -> bool:
        """Check ``member`` against the subtrahend's members of ``owner``.

        ``owner`` must already be absolute.

        Raises:
            UnsupportedVariantError: If ``member`` is not a known member kind.
        """
        if isinstance(member, MethodDefinition):
            return self.method_exists(owner, member.name, member.kind)
        if isinstance(member, Alias):
            return self.method_exists(owner, member.new_name, member.kind)
        if isinstance(member, AttrReader):
            return self.method_exists(owner, member.name, member.kind)
        if isinstance(member, AttrWriter):
            return self.method_exists(owner, writer_name(member.name), member.kind)
        if isinstance(member, AttrAccessor):
            reader = self.method_exists(owner, member.name, member.kind)
            writer = self.method_exists(owner, writer_name(member.name), member.kind)
            if self._accessor_policy == "both":
                return reader and writer
            return reader or writer
        if isinstance(member, InstanceVariable):
            return self.ivar_exists(owner, member.name, MethodKind.INSTANCE)
        if isinstance(member, ClassInstanceVariable):
            return self.ivar_exists(owner, member.name, MethodKind.SINGLETON)
        if isinstance(member, ClassVariable):
            return self.cvar_exists(owner, member.name)
        if isinstance(member, (Include, Extend, Prepend)):
            # Duplicated mixins are allowed.
            return False
        if isinstance(member, (Public, Private)):
            return False
        raise UnsupportedVariantError.member(member)

    def method_exists(self, owner: TypeName, name: str, kind: MethodKind) -> bool:
        return any(
            name in provided_method_names(m) and m.kind == kind  # type: ignore[union-attr]
            for m in self.each_member(owner)
        )

    def ivar_exists(self, owner: TypeName, name: str, scope: MethodKind) -> bool:
        for m in self.each_member(owner):
            if isinstance(m, InstanceVariable):
                if scope == MethodKind.INSTANCE and m.name == name:
                    return True
            elif isinstance(m, ClassInstanceVariable):
                if scope == MethodKind.SINGLETON and m.name == name:
                    return True
            elif isinstance(m, Attribute):
                if m.derived_ivar_name == name and m.kind == scope:
                    return True
        return False

    def cvar_exists(self, owner: TypeName, name: str) -> bool:
        return any(isinstance(m, ClassVariable) and m.name == name for m in self.each_member(owner))

    def each_member(self, owner: TypeName) -> Iterator[Declaration | Member]:
        """Members of every subtrahend declaration of ``owner``, in order.

        Yields nothing when the owner is not declared in the subtrahend.
        """
        if owner.is_interface:
            interface = self._index.interface_decls.get(owner)
            if interface is None:
                return
            decls = [interface.decl]
        else:
            entry = self._index.class_decls.get(owner)
            if entry is None:
                return
            decls = list(entry.decls)

        for decl in decls:
            yield from decl.members
