"""Class member discovery service."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Annotated, Any, ClassVar, Protocol, get_args, get_origin, get_type_hints

from .type_members import AccessorKind, AccessorMember, DataMember, is_named_tuple

_LOGGER = logging.getLogger("class_schema_generator.introspection")
_LOGGER.addHandler(logging.NullHandler())

DynamicMemberHook = Callable[[type], Sequence[AccessorMember]]


class IntrospectionError(Exception):
    """Raised when the members of a class cannot be discovered."""


class TypeIntrospector(Protocol):
    """Protocol implemented by member discovery providers."""

    def declared_members(self, type_: type) -> tuple[DataMember, ...]: ...

    def accessors(self, type_: type) -> tuple[AccessorMember, ...]: ...


class ClassIntrospector:
    """Discover data members and accessors of plain Python classes."""

    def __init__(
        self,
        *,
        public_fields_as_properties: bool = False,
        dynamic_member_hook: DynamicMemberHook | None = None,
    ) -> None:
        self._public_fields_as_properties = public_fields_as_properties
        self._dynamic_member_hook = dynamic_member_hook

    def ancestors(self, type_: type) -> tuple[type, ...]:
        """Return the class and its ancestors, most-derived first, without ``object``."""
        return tuple(klass for klass in type_.__mro__ if klass is not object)

    def declared_members(self, type_: type) -> tuple[DataMember, ...]:
        """Return annotated attributes declared along the ancestor chain."""
        hints = _resolve_type_hints(type_)
        members: list[DataMember] = []
        for klass in self.ancestors(type_):
            for name in inspect.get_annotations(klass):
                hint = hints.get(name)
                if hint is None or get_origin(hint) is ClassVar:
                    continue
                member_type, metadata = _split_annotated(hint)
                members.append(
                    DataMember(name=name, type=member_type, owner=klass, metadata=metadata)
                )
        return tuple(members)

    def accessors(self, type_: type) -> tuple[AccessorMember, ...]:
        """Return accessor-like members, followed by any from the dynamic member hook.

        The order is unspecified; callers sort accessors by name.
        """
        accessors = list(self._own_accessors(type_))
        if self._public_fields_as_properties:
            known = {accessor.name for accessor in accessors}
            for member in self.declared_members(type_):
                if member.name.startswith("_") or member.name in known:
                    continue
                known.add(member.name)
                accessors.append(
                    AccessorMember(name=member.name, owner=member.owner, kind=AccessorKind.FIELD)
                )
        accessors.extend(self._dynamic_accessors(type_))
        return tuple(accessors)

    def _own_accessors(self, type_: type) -> list[AccessorMember]:
        accessors: list[AccessorMember] = []
        for name in dir(type_):
            if name.startswith("_"):
                continue
            owner = _owner_of(type_, name)
            if owner is None:
                continue
            if is_named_tuple(owner) and name in getattr(owner, "_fields", ()):
                accessors.append(AccessorMember(name=name, owner=owner, kind=AccessorKind.FIELD))
                continue
            accessor = _accessor_from_attribute(name, owner, owner.__dict__[name])
            if accessor is not None:
                accessors.append(accessor)
        return accessors

    def _dynamic_accessors(self, type_: type) -> tuple[AccessorMember, ...]:
        if self._dynamic_member_hook is None:
            return ()
        try:
            dynamic = self._dynamic_member_hook(type_)
        except Exception as exc:
            raise IntrospectionError(
                f"Dynamic member hook failed for {type_.__qualname__}: {exc}"
            ) from exc
        if not dynamic:
            return ()
        for accessor in dynamic:
            if not isinstance(accessor, AccessorMember):
                raise IntrospectionError(
                    f"Dynamic member hook returned {accessor!r} for {type_.__qualname__}; "
                    "expected AccessorMember instances."
                )
        _LOGGER.debug(
            "Merged %d dynamic accessor(s) into %s", len(dynamic), type_.__qualname__
        )
        return tuple(dynamic)


def _resolve_type_hints(type_: type) -> dict[str, Any]:
    try:
        try:
            return get_type_hints(type_, include_extras=True)
        except NameError:
            # Classes defined inside a function are not reachable from module globals.
            return get_type_hints(type_, localns=_local_namespace(type_), include_extras=True)
    except (NameError, TypeError) as exc:
        raise IntrospectionError(
            f"Cannot resolve annotations of {type_.__qualname__}: {exc}"
        ) from exc


def _local_namespace(type_: type) -> dict[str, Any]:
    namespace: dict[str, Any] = {}
    for klass in reversed(type_.__mro__):
        namespace.update(vars(klass))
    for klass in type_.__mro__:
        namespace[klass.__name__] = klass
    return namespace


def _split_annotated(hint: Any) -> tuple[Any, tuple[object, ...]]:
    if get_origin(hint) is Annotated:
        base, *extras = get_args(hint)
        return base, tuple(extras)
    return hint, ()


def _owner_of(type_: type, name: str) -> type | None:
    for klass in type_.__mro__:
        if name in klass.__dict__:
            return klass
    return None


def _accessor_from_attribute(name: str, owner: type, raw: object) -> AccessorMember | None:
    if isinstance(raw, property):
        return AccessorMember(name=name, owner=owner, kind=AccessorKind.PROPERTY, target=raw)
    if isinstance(raw, staticmethod | classmethod):
        function = raw.__func__
        bound = isinstance(raw, classmethod)
        return AccessorMember(
            name=name,
            owner=owner,
            parameter_count=_parameter_count(function, bound=bound),
            is_static=True,
            target=function,
        )
    if inspect.isfunction(raw):
        return AccessorMember(
            name=name,
            owner=owner,
            parameter_count=_parameter_count(raw, bound=True),
            target=raw,
        )
    return None


def _parameter_count(function: Callable[..., Any], *, bound: bool) -> int:
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return 0
    if bound and parameters:
        parameters = parameters[1:]
    return len(parameters)
