"""Signature trees: names, nodes, lookup index and documents."""

from sigdelta.signature.ast import (
    Alias,
    AttrAccessor,
    AttrReader,
    AttrWriter,
    Class,
    ClassAlias,
    ClassInstanceVariable,
    ClassVariable,
    Constant,
    Declaration,
    Extend,
    Global,
    Include,
    InstanceVariable,
    Interface,
    Location,
    Member,
    MethodDefinition,
    MethodKind,
    Module,
    ModuleAlias,
    Prepend,
    Private,
    Public,
    TypeAlias,
    with_members,
)
from sigdelta.signature.documents import (
    SignatureDocument,
    collect_documents,
    declaration_from_dict,
    dump_document,
    load_document,
    member_from_dict,
    to_dict,
    write_document,
)
from sigdelta.signature.index import SignatureIndex, SubtrahendIndex
from sigdelta.signature.names import ROOT, Context, Namespace, TypeName, resolve_name

__all__ = [
    # Names
    "ROOT",
    "Context",
    "Namespace",
    "TypeName",
    "resolve_name",
    # Nodes
    "Alias",
    "AttrAccessor",
    "AttrReader",
    "AttrWriter",
    "Class",
    "ClassAlias",
    "ClassInstanceVariable",
    "ClassVariable",
    "Constant",
    "Declaration",
    "Extend",
    "Global",
    "Include",
    "InstanceVariable",
    "Interface",
    "Location",
    "Member",
    "MethodDefinition",
    "MethodKind",
    "Module",
    "ModuleAlias",
    "Prepend",
    "Private",
    "Public",
    "TypeAlias",
    "with_members",
    # Index
    "SignatureIndex",
    "SubtrahendIndex",
    # Documents
    "SignatureDocument",
    "collect_documents",
    "declaration_from_dict",
    "dump_document",
    "load_document",
    "member_from_dict",
    "to_dict",
    "write_document",
]
