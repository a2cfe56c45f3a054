"""JSON/YAML signature documents.

A document is ``{"declarations": [...]}`` (a bare list is accepted too).
Every node is a mapping tagged with ``kind``::

    {"kind": "class", "name": "Foo", "super_class": "Object",
     "members": [{"kind": "method", "name": "bar", "overloads": ["() -> void"]}]}

Names are written the way they are declared (``Foo``, ``Foo::Bar``,
``::Foo``, ``_Each``). Optional fields left at their default are omitted on
output so documents stay small and diffable.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from sigdelta.core.errors import DocumentError, UnsupportedVariantError
from sigdelta.signature.ast import (
    Alias,
    AttrAccessor,
    AttrReader,
    Attribute,
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
    Mixin,
    Module,
    ModuleAlias,
    Prepend,
    Private,
    Public,
    TypeAlias,
    Variable,
)
from sigdelta.signature.names import TypeName

log = structlog.get_logger(__name__)

JSON_SUFFIXES = frozenset({".json"})
YAML_SUFFIXES = frozenset({".yaml", ".yml"})
SUPPORTED_SUFFIXES = JSON_SUFFIXES | YAML_SUFFIXES


@dataclass(frozen=True, slots=True)
class SignatureDocument:
    """Declarations loaded from one file."""

    path: Path
    declarations: tuple[Declaration, ...]

    @property
    def format(self) -> str:
        return "yaml" if self.path.suffix.lower() in YAML_SUFFIXES else "json"


# ============================================================================
# Field readers
# ============================================================================


def _field(node: dict[str, Any], key: str, *, required: bool = False) -> Any:
    if key not in node:
        if required:
            raise DocumentError.invalid_node(node, f"missing field '{key}'")
        return None
    return node[key]


def _str(node: dict[str, Any], key: str) -> str | None:
    value = _field(node, key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DocumentError.invalid_node(node, f"field '{key}' must be a string")
    return value


def _required_str(node: dict[str, Any], key: str) -> str:
    value = _str(node, key)
    if not value:
        raise DocumentError.invalid_node(node, f"missing field '{key}'")
    return value


def _bool(node: dict[str, Any], key: str) -> bool:
    value = _field(node, key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DocumentError.invalid_node(node, f"field '{key}' must be a boolean")
    return value


def _type(node: dict[str, Any]) -> str:
    return _str(node, "type") or "untyped"


def _name(node: dict[str, Any], key: str = "name") -> TypeName:
    text = _field(node, key, required=True)
    if not isinstance(text, str):
        raise DocumentError.invalid_node(node, f"field '{key}' must be a string")
    try:
        return TypeName.parse(text)
    except ValueError as e:
        raise DocumentError.invalid_node(node, str(e)) from e


def _strings(node: dict[str, Any], key: str) -> tuple[str, ...]:
    value = _field(node, key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DocumentError.invalid_node(node, f"field '{key}' must be a list of strings")
    return tuple(value)


def _kind(node: dict[str, Any]) -> MethodKind:
    value = _field(node, "method_kind") or "instance"
    try:
        return MethodKind(value)
    except ValueError as e:
        raise DocumentError.invalid_node(node, f"unknown method kind '{value}'") from e


def _location(node: dict[str, Any]) -> Location | None:
    value = _field(node, "location")
    if value is None:
        return None
    if not isinstance(value, dict):
        raise DocumentError.invalid_node(node, "field 'location' must be a mapping")
    try:
        return Location(
            path=value.get("path"),
            start_line=int(value.get("start_line", 0)),
            start_col=int(value.get("start_col", 0)),
            end_line=int(value.get("end_line", 0)),
            end_col=int(value.get("end_col", 0)),
        )
    except (TypeError, ValueError) as e:
        raise DocumentError.invalid_node(node, f"bad location: {e}") from e


def _common(node: dict[str, Any]) -> dict[str, Any]:
    return {
        "annotations": _strings(node, "annotations"),
        "location": _location(node),
        "comment": _str(node, "comment"),
    }


# ============================================================================
# Decoding
# ============================================================================


def _decode_method(node: dict[str, Any]) -> MethodDefinition:
    return MethodDefinition(
        name=_required_str(node, "name"),
        kind=_kind(node),
        overloads=_strings(node, "overloads"),
        overloading=_bool(node, "overloading"),
        visibility=_str(node, "visibility"),
        **_common(node),
    )


def _decode_alias(node: dict[str, Any]) -> Alias:
    return Alias(
        new_name=_required_str(node, "new_name"),
        old_name=_required_str(node, "old_name"),
        kind=_kind(node),
        **_common(node),
    )


def _attribute_decoder(cls: type[Attribute]) -> Callable[[dict[str, Any]], Member]:
    def decode(node: dict[str, Any]) -> Member:
        ivar = _field(node, "ivar_name")
        if ivar is not None and ivar is not False and not isinstance(ivar, str):
            raise DocumentError.invalid_node(node, "field 'ivar_name' must be a string or false")
        return cls(  # type: ignore[return-value]
            name=_required_str(node, "name"),
            type=_type(node),
            kind=_kind(node),
            ivar_name=ivar if isinstance(ivar, str) else None,
            omit_ivar=ivar is False,
            visibility=_str(node, "visibility"),
            **_common(node),
        )

    return decode


def _variable_decoder(cls: type[Variable]) -> Callable[[dict[str, Any]], Member]:
    def decode(node: dict[str, Any]) -> Member:
        return cls(  # type: ignore[return-value]
            name=_required_str(node, "name"),
            type=_type(node),
            location=_location(node),
            comment=_str(node, "comment"),
        )

    return decode


def _mixin_decoder(cls: type[Mixin]) -> Callable[[dict[str, Any]], Member]:
    def decode(node: dict[str, Any]) -> Member:
        return cls(name=_name(node), args=_strings(node, "args"), **_common(node))  # type: ignore[return-value]

    return decode


_MEMBER_DECODERS: dict[str, Callable[[dict[str, Any]], Member]] = {
    "method": _decode_method,
    "alias": _decode_alias,
    "attr_reader": _attribute_decoder(AttrReader),
    "attr_writer": _attribute_decoder(AttrWriter),
    "attr_accessor": _attribute_decoder(AttrAccessor),
    "ivar": _variable_decoder(InstanceVariable),
    "class_ivar": _variable_decoder(ClassInstanceVariable),
    "cvar": _variable_decoder(ClassVariable),
    "include": _mixin_decoder(Include),
    "extend": _mixin_decoder(Extend),
    "prepend": _mixin_decoder(Prepend),
    "public": lambda node: Public(location=_location(node)),
    "private": lambda node: Private(location=_location(node)),
}


def _decode_body(node: dict[str, Any]) -> tuple[Declaration | Member, ...]:
    value = _field(node, "members")
    if value is None:
        return ()
    if not isinstance(value, list):
        raise DocumentError.invalid_node(node, "field 'members' must be a list")
    return tuple(_node_from_dict(child) for child in value)


def _decode_class(node: dict[str, Any]) -> Class:
    return Class(
        name=_name(node),
        type_params=_strings(node, "type_params"),
        super_class=_str(node, "super_class"),
        members=_decode_body(node),
        **_common(node),
    )


def _decode_module(node: dict[str, Any]) -> Module:
    return Module(
        name=_name(node),
        type_params=_strings(node, "type_params"),
        self_types=_strings(node, "self_types"),
        members=_decode_body(node),
        **_common(node),
    )


def _decode_interface(node: dict[str, Any]) -> Interface:
    members = []
    for child in _decode_body(node):
        if not isinstance(child, (MethodDefinition, Alias, Include)):
            raise DocumentError.invalid_node(node, f"interfaces cannot contain {type(child).__name__}")
        members.append(child)
    return Interface(
        name=_name(node),
        type_params=_strings(node, "type_params"),
        members=tuple(members),
        **_common(node),
    )


def _decode_constant(node: dict[str, Any]) -> Constant:
    return Constant(name=_name(node), type=_type(node), **_common(node))


def _decode_global(node: dict[str, Any]) -> Global:
    name = _required_str(node, "name")
    if not name.startswith("$"):
        raise DocumentError.invalid_node(node, f"global name must start with '$': {name}")
    return Global(name=name, type=_type(node), **_common(node))


def _decode_type_alias(node: dict[str, Any]) -> TypeAlias:
    return TypeAlias(
        name=_name(node),
        type=_type(node),
        type_params=_strings(node, "type_params"),
        **_common(node),
    )


def _decode_class_alias(node: dict[str, Any]) -> ClassAlias:
    return ClassAlias(new_name=_name(node, "new_name"), old_name=_name(node, "old_name"), **_common(node))


def _decode_module_alias(node: dict[str, Any]) -> ModuleAlias:
    return ModuleAlias(new_name=_name(node, "new_name"), old_name=_name(node, "old_name"), **_common(node))


_DECLARATION_DECODERS: dict[str, Callable[[dict[str, Any]], Declaration]] = {
    "class": _decode_class,
    "module": _decode_module,
    "interface": _decode_interface,
    "constant": _decode_constant,
    "global": _decode_global,
    "type_alias": _decode_type_alias,
    "class_alias": _decode_class_alias,
    "module_alias": _decode_module_alias,
}


def _tag(node: Any) -> str:
    if not isinstance(node, dict):
        raise DocumentError.invalid_node(node, "node must be a mapping")
    kind = node.get("kind")
    if not isinstance(kind, str):
        raise DocumentError.invalid_node(node, "missing field 'kind'")
    return kind


def _node_from_dict(node: Any) -> Declaration | Member:
    kind = _tag(node)
    if kind in _DECLARATION_DECODERS:
        return _DECLARATION_DECODERS[kind](node)
    if kind in _MEMBER_DECODERS:
        return _MEMBER_DECODERS[kind](node)
    raise DocumentError.invalid_node(node, f"unknown kind '{kind}'")


def declaration_from_dict(node: Any) -> Declaration:
    """Decode one declaration node.

    Raises:
        DocumentError: If the node is not a well-formed declaration.
    """
    kind = _tag(node)
    decoder = _DECLARATION_DECODERS.get(kind)
    if decoder is None:
        raise DocumentError.invalid_node(node, f"'{kind}' is not a declaration kind")
    return decoder(node)


def member_from_dict(node: Any) -> Member:
    """Decode one member node.

    Raises:
        DocumentError: If the node is not a well-formed member.
    """
    kind = _tag(node)
    decoder = _MEMBER_DECODERS.get(kind)
    if decoder is None:
        raise DocumentError.invalid_node(node, f"'{kind}' is not a member kind")
    return decoder(node)


# ============================================================================
# Encoding
# ============================================================================


_KIND_TAGS: dict[type, str] = {
    Class: "class",
    Module: "module",
    Interface: "interface",
    Constant: "constant",
    Global: "global",
    TypeAlias: "type_alias",
    ClassAlias: "class_alias",
    ModuleAlias: "module_alias",
    MethodDefinition: "method",
    Alias: "alias",
    AttrReader: "attr_reader",
    AttrWriter: "attr_writer",
    AttrAccessor: "attr_accessor",
    InstanceVariable: "ivar",
    ClassInstanceVariable: "class_ivar",
    ClassVariable: "cvar",
    Include: "include",
    Extend: "extend",
    Prepend: "prepend",
    Public: "public",
    Private: "private",
}


def _location_to_dict(location: Location) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if location.path is not None:
        out["path"] = location.path
    out.update(
        start_line=location.start_line,
        start_col=location.start_col,
        end_line=location.end_line,
        end_col=location.end_col,
    )
    return out


def to_dict(node: Declaration | Member) -> dict[str, Any]:
    """Encode a declaration or member, omitting fields left at their default."""
    tag = _KIND_TAGS.get(type(node))
    if tag is None:
        raise UnsupportedVariantError.declaration(node)
    out: dict[str, Any] = {"kind": tag}

    if isinstance(node, (ClassAlias, ModuleAlias)):
        out["new_name"] = str(node.new_name)
        out["old_name"] = str(node.old_name)
    elif isinstance(node, Alias):
        out["new_name"] = node.new_name
        out["old_name"] = node.old_name
    elif not isinstance(node, (Public, Private)):
        out["name"] = str(node.name)

    if isinstance(node, (MethodDefinition, Alias, Attribute)) and node.kind != MethodKind.INSTANCE:
        out["method_kind"] = MethodKind(node.kind).value
    if isinstance(node, (Class, Module, Interface, TypeAlias)) and node.type_params:
        out["type_params"] = list(node.type_params)
    if isinstance(node, Class) and node.super_class is not None:
        out["super_class"] = node.super_class
    if isinstance(node, Module) and node.self_types:
        out["self_types"] = list(node.self_types)
    if isinstance(node, (Constant, Global, TypeAlias, Attribute, Variable)):
        out["type"] = node.type
    if isinstance(node, MethodDefinition):
        out["overloads"] = list(node.overloads)
        if node.overloading:
            out["overloading"] = True
    if isinstance(node, Attribute):
        if node.omit_ivar:
            out["ivar_name"] = False
        elif node.ivar_name is not None:
            out["ivar_name"] = node.ivar_name
    if isinstance(node, (MethodDefinition, Attribute)) and node.visibility is not None:
        out["visibility"] = node.visibility
    if isinstance(node, Mixin) and node.args:
        out["args"] = list(node.args)
    if isinstance(node, (Class, Module, Interface)):
        out["members"] = [to_dict(child) for child in node.members]

    annotations = getattr(node, "annotations", ())
    if annotations:
        out["annotations"] = list(annotations)
    location = getattr(node, "location", None)
    if location is not None:
        out["location"] = _location_to_dict(location)
    comment = getattr(node, "comment", None)
    if comment is not None:
        out["comment"] = comment
    return out


# ============================================================================
# Files
# ============================================================================


def parse_document(text: str, *, fmt: str, source: str = "<string>") -> tuple[Declaration, ...]:
    """Decode document text in ``json`` or ``yaml`` format."""
    try:
        data = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentError.parse_error(source, str(e)) from e

    if data is None:
        return ()
    if isinstance(data, dict):
        if "declarations" not in data:
            raise DocumentError.parse_error(source, "missing 'declarations'")
        data = data["declarations"]
        if not isinstance(data, list):
            raise DocumentError.parse_error(source, "'declarations' must be a list")
    if not isinstance(data, list):
        raise DocumentError.parse_error(source, "expected a list of declarations")
    return tuple(declaration_from_dict(node) for node in data)


def load_document(path: Path) -> SignatureDocument:
    """Load a signature document, choosing the format by file suffix.

    Raises:
        DocumentError: If the file is missing, has an unsupported suffix,
            or does not decode to a list of declarations.
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise DocumentError.unsupported_format(str(path))
    if not path.is_file():
        raise DocumentError.file_not_found(str(path))
    fmt = "json" if suffix in JSON_SUFFIXES else "yaml"
    declarations = parse_document(path.read_text(encoding="utf-8"), fmt=fmt, source=str(path))
    log.debug("document_loaded", path=str(path), declarations=len(declarations))
    return SignatureDocument(path=path, declarations=declarations)


def dump_document(declarations: Sequence[Declaration], *, fmt: str = "json", indent: int = 2) -> str:
    """Serialize declarations as a ``{"declarations": [...]}`` document."""
    data = {"declarations": [to_dict(decl) for decl in declarations]}
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, indent=indent or None, allow_unicode=True)
    return json.dumps(data, indent=indent or None, ensure_ascii=False) + "\n"


def write_document(path: Path, declarations: Sequence[Declaration], *, indent: int = 2) -> None:
    fmt = "yaml" if path.suffix.lower() in YAML_SUFFIXES else "json"
    path.write_text(dump_document(declarations, fmt=fmt, indent=indent), encoding="utf-8")


def collect_documents(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into supported document paths.

    Directories are searched recursively; results are sorted per directory
    and de-duplicated across arguments, keeping first occurrence.

    Raises:
        DocumentError: If an explicit path does not exist.
    """
    seen: set[Path] = set()
    result: list[Path] = []
    for path in paths:
        if path.is_dir():
            candidates = sorted(
                p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES
            )
        elif path.exists():
            candidates = [path]
        else:
            raise DocumentError.file_not_found(str(path))
        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                result.append(candidate)
    return result
