"""Qualified names and namespace resolution.

A ``TypeName`` is a namespace path plus a simple name, tagged absolute or
relative. Names declared inside nested classes/modules are relative to the
enclosing scopes; ``resolve_name`` applies the enclosing ``Context`` to turn
them into absolute names that compare equal across trees.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SEPARATOR = "::"


class NameKind(str, Enum):
    """What a type name refers to, derived from its spelling."""

    CLASS = "class"  # classes, modules, constants: Foo
    INTERFACE = "interface"  # _Foo
    ALIAS = "alias"  # foo

    @classmethod
    def of(cls, name: str) -> NameKind:
        if name.startswith("_"):
            return cls.INTERFACE
        if name[:1].islower():
            return cls.ALIAS
        return cls.CLASS


@dataclass(frozen=True, slots=True)
class Namespace:
    """A sequence of namespace segments, e.g. ``::Foo::Bar::``."""

    path: tuple[str, ...] = ()
    absolute: bool = False

    @classmethod
    def root(cls) -> Namespace:
        return cls(path=(), absolute=True)

    @classmethod
    def empty(cls) -> Namespace:
        return cls(path=(), absolute=False)

    def __add__(self, other: Namespace) -> Namespace:
        # An absolute namespace cannot be prefixed.
        if other.absolute:
            return other
        return Namespace(path=self.path + other.path, absolute=self.absolute)

    def __str__(self) -> str:
        prefix = SEPARATOR if self.absolute else ""
        return prefix + "".join(f"{segment}{SEPARATOR}" for segment in self.path)


@dataclass(frozen=True, slots=True)
class TypeName:
    """A possibly-relative qualified name of a class, module, interface or alias."""

    namespace: Namespace
    name: str

    @classmethod
    def parse(cls, text: str) -> TypeName:
        """Parse ``Foo``, ``Foo::Bar`` or ``::Foo::Bar``.

        Raises:
            ValueError: If the text is empty or has an empty segment.
        """
        absolute = text.startswith(SEPARATOR)
        body = text[len(SEPARATOR) :] if absolute else text
        segments = body.split(SEPARATOR)
        if not body or any(not segment for segment in segments):
            raise ValueError(f"Malformed type name: {text!r}")
        return cls(
            namespace=Namespace(path=tuple(segments[:-1]), absolute=absolute),
            name=segments[-1],
        )

    @property
    def absolute(self) -> bool:
        return self.namespace.absolute

    @property
    def kind(self) -> NameKind:
        return NameKind.of(self.name)

    @property
    def is_interface(self) -> bool:
        return self.kind is NameKind.INTERFACE

    def with_prefix(self, namespace: Namespace) -> TypeName:
        return TypeName(namespace=namespace + self.namespace, name=self.name)

    def to_namespace(self) -> Namespace:
        """``Foo::Bar`` becomes the namespace ``Foo::Bar::``."""
        return Namespace(path=self.namespace.path + (self.name,), absolute=self.absolute)

    def to_absolute(self) -> TypeName:
        if self.absolute:
            return self
        return TypeName(namespace=Namespace(path=self.namespace.path, absolute=True), name=self.name)

    def __str__(self) -> str:
        return f"{self.namespace}{self.name}"


@dataclass(frozen=True, slots=True)
class Context:
    """Chain of enclosing class/module names, outermost first.

    Frames hold the names as declared, so a frame may itself be relative to
    the frames before it.
    """

    frames: tuple[TypeName, ...] = ()

    def push(self, name: TypeName) -> Context:
        return Context(frames=self.frames + (name,))

    @property
    def is_root(self) -> bool:
        return not self.frames

    def __str__(self) -> str:
        return " > ".join(str(frame) for frame in self.frames) or "<root>"


ROOT = Context()


def resolve_name(name: TypeName, context: Context = ROOT) -> TypeName:
    """Qualify ``name`` through ``context`` and mark it absolute.

    Frames are applied innermost first; once the name is absolute the outer
    frames no longer change it. Resolving an absolute name is the identity.
    """
    for frame in reversed(context.frames):
        if name.absolute:
            break
        name = name.with_prefix(frame.to_namespace())
    return name.to_absolute()
