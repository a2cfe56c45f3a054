"""Signature tree subtraction.

Walks the minuend and keeps what the subtrahend does not already declare.
Leaf declarations are kept or dropped whole by absolute name; classes and
modules are never dropped, only rebuilt with their nested declarations and
members filtered. Input nodes are never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from sigdelta.config.models import AccessorPolicy
from sigdelta.core.errors import UnsupportedVariantError
from sigdelta.signature.ast import (
    Alias,
    Class,
    ClassAlias,
    Constant,
    Declaration,
    Global,
    Interface,
    Member,
    Module,
    ModuleAlias,
    Public,
    Private,
    TypeAlias,
    count_nodes,
    with_members,
)
from sigdelta.signature.index import SubtrahendIndex
from sigdelta.signature.names import ROOT, Context, resolve_name
from sigdelta.subtract.members import MemberExistenceChecker

log = structlog.get_logger(__name__)


def _member_label(member: Member) -> str:
    if isinstance(member, Alias):
        return member.new_name
    if isinstance(member, (Public, Private)):
        return type(member).__name__.lower()
    return str(member.name)


class Subtractor:
    """Subtracts declarations already present in a subtrahend index.

    Holds no per-run state, so one instance may serve many minuend trees.
    """

    def __init__(self, subtrahend: SubtrahendIndex, *, accessor_policy: AccessorPolicy = "either") -> None:
        self._subtrahend = subtrahend
        self._checker = MemberExistenceChecker(subtrahend, accessor_policy=accessor_policy)

    def call(self, minuend: Iterable[Declaration], context: Context = ROOT) -> list[Declaration]:
        """Return the declarations of ``minuend`` not present in the subtrahend.

        Args:
            minuend: Declarations to filter, in order.
            context: Enclosing namespaces of ``minuend`` (root for a file).

        Raises:
            UnsupportedVariantError: If a declaration or member has an unknown kind.
        """
        result: list[Declaration] = []
        for decl in minuend:
            kept = self._filter_decl(decl, context)
            if kept is None:
                log.debug("decl_dropped", kind=type(decl).__name__, name=_decl_label(decl), context=str(context))
            else:
                result.append(kept)
        return result

    def _filter_decl(self, decl: Declaration, context: Context) -> Declaration | None:
        subtrahend = self._subtrahend

        if isinstance(decl, Constant):
            name = resolve_name(decl.name, context)
            return None if subtrahend.has_constant(name) else decl
        if isinstance(decl, Interface):
            name = resolve_name(decl.name, context)
            return None if subtrahend.has_interface(name) else decl
        if isinstance(decl, (Class, Module)):
            return self._filter_members(decl, context)
        if isinstance(decl, Global):
            return None if decl.name in subtrahend.global_decls else decl
        if isinstance(decl, TypeAlias):
            name = resolve_name(decl.name, context)
            return None if name in subtrahend.type_alias_decls else decl
        if isinstance(decl, ClassAlias):
            name = resolve_name(decl.new_name, context)
            shadowed = subtrahend.has_class_alias(name) or subtrahend.has_class_decl(name)
            return None if shadowed else decl
        if isinstance(decl, ModuleAlias):
            name = resolve_name(decl.new_name, context)
            shadowed = subtrahend.has_module_alias(name) or subtrahend.has_module_decl(name)
            return None if shadowed else decl
        raise UnsupportedVariantError.declaration(decl)

    def _filter_members(self, decl: Class | Module, context: Context) -> Class | Module:
        owner = resolve_name(decl.name, context)

        children: list[Declaration | Member] = []
        children.extend(self.call(decl.each_decl(), context.push(decl.name)))
        for member in decl.each_member():
            if self._checker.exists(owner, member):
                log.debug("member_dropped", owner=str(owner), kind=type(member).__name__, name=_member_label(member))
                continue
            children.append(member)

        return with_members(decl, children)


def _decl_label(decl: Declaration) -> str:
    if isinstance(decl, (ClassAlias, ModuleAlias)):
        return str(decl.new_name)
    return str(decl.name)


def subtract(
    minuend: Sequence[Declaration],
    subtrahend: SubtrahendIndex,
    context: Context = ROOT,
    *,
    accessor_policy: AccessorPolicy = "either",
) -> list[Declaration]:
    """Subtract ``subtrahend`` from ``minuend`` and log a summary."""
    result = Subtractor(subtrahend, accessor_policy=accessor_policy).call(minuend, context)
    total = count_nodes(minuend)
    kept = count_nodes(result)
    log.debug("subtract_complete", total=total, kept=kept, dropped=total - kept)
    return result
