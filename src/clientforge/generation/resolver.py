"""Type graph resolution.

TypeResolver maps shape definitions to canonical ResolvedType values and
keeps the run-scoped registry of generated (named) types. Every named
object or enum shape is registered exactly once, before its members are
visited, so shared and self-referential shapes resolve to the same type
without re-entering generation.

Example:
    >>> description = build_description(document)
    >>> resolver = TypeResolver(description, GeneratorSettings())
    >>> resolver.register_definitions()
    >>> resolver.resolve(description.definitions["Pet"]).name
    'Pet'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..description import ApiDescription, ShapeDefinition, ShapeKind
from ..errors import ResolutionError
from .naming import pascal_case, unique_name
from .settings import GeneratorSettings, NullHandling, TypeStyle

logger = logging.getLogger(__name__)

ANY_TYPE = "JsonValue"
FILE_TYPE = "FileParameter"

_PRIMITIVE_TYPES = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
}
_BINARY_FORMATS = {"binary"}
# Names defined by the rendered module itself.
_RESERVED_NAMES = frozenset({ANY_TYPE, FILE_TYPE, "ApiException", "Transport", "TransportResponse"})


@dataclass(frozen=True)
class ResolvedType:
    """Canonical output-side identity of a shape.

    Attributes:
        name: Base Python annotation (e.g. "Pet", "list[Pet]", "str")
        annotation: ``name`` with nullability folded in
        kind: Kind of the dereferenced shape
        style: Materialization style, fixed when the type is constructed
        generated: Whether a class generator is registered for ``name``
        item: Element type of a list or value type of a dict
        nullable: Whether None is accepted
    """

    name: str
    annotation: str
    kind: ShapeKind
    style: TypeStyle = TypeStyle.STRUCTURAL
    generated: bool = False
    item: ResolvedType | None = None
    nullable: bool = False


@dataclass
class NamedType:
    """Registration record of one generated type.

    Renderers read this to emit a class, TypedDict or alias definition.
    """

    name: str
    shape: ShapeDefinition
    style: TypeStyle
    base: str | None = None
    members: dict[str, ShapeDefinition] = field(default_factory=dict)
    required: set[str] = field(default_factory=set)

    @property
    def kind(self) -> ShapeKind:
        return self.shape.kind


class TypeResolver:
    """Run-scoped resolver; one instance per generation run.

    The resolver is not thread-safe. Independent runs must construct their
    own instance.
    """

    def __init__(self, description: ApiDescription, settings: GeneratorSettings) -> None:
        self._description = description
        self._settings = settings
        self._cache: dict[ShapeDefinition, ResolvedType] = {}
        self._named: dict[str, NamedType] = {}
        self._used_names: set[str] = set(_RESERVED_NAMES)
        self._reserved: dict[ShapeDefinition, str] = {}

    @property
    def settings(self) -> GeneratorSettings:
        return self._settings

    @property
    def named_types(self) -> list[NamedType]:
        """Generated types in registration order."""
        return list(self._named.values())

    def register_definitions(self) -> None:
        """Resolve every top-level definition in document order.

        Names of top-level definitions are reserved first so that inline
        shapes discovered while walking members never take them.
        """
        for name, shape in self._description.definitions.items():
            if shape.kind in (ShapeKind.OBJECT, ShapeKind.ENUM) and not shape.is_reference:
                self._reserved[shape] = unique_name(pascal_case(name) or "Anonymous", self._used_names)
        for name, shape in self._description.definitions.items():
            self.resolve(shape, False, pascal_case(name))

    def has_generator(self, type_name: str) -> bool:
        return type_name in self._named

    def named_type(self, type_name: str) -> NamedType | None:
        return self._named.get(type_name)

    def actual(self, shape: ShapeDefinition) -> ShapeDefinition:
        """Follow reference indirections until a structural shape is reached."""
        seen: list[str] = []
        current = shape
        while current.reference is not None:
            if current.reference in seen:
                raise ResolutionError(" -> ".join([*seen, current.reference]))
            seen.append(current.reference)
            target = self._description.find_definition(current.reference)
            if target is None:
                raise ResolutionError(current.reference)
            current = target
        return current

    def resolve(self, shape: ShapeDefinition, nullable: bool = False, name_hint: str = "") -> ResolvedType:
        actual = self.actual(shape)
        if actual.kind is ShapeKind.FILE:
            return self._make(FILE_TYPE, ShapeKind.FILE, False)
        if actual.kind is ShapeKind.ANY:
            return self._make(ANY_TYPE, ShapeKind.ANY, nullable)
        if actual.kind is ShapeKind.PRIMITIVE:
            if actual.format in _BINARY_FORMATS:
                return self._make("bytes", ShapeKind.PRIMITIVE, nullable)
            return self._make(_PRIMITIVE_TYPES.get(actual.primitive or "", ANY_TYPE), ShapeKind.PRIMITIVE, nullable)
        if actual.kind is ShapeKind.ARRAY:
            item = self._resolve_member(actual.item, name_hint, "Item")
            return self._make(f"list[{item.annotation}]", ShapeKind.ARRAY, nullable, item=item)
        if actual.kind is ShapeKind.DICTIONARY:
            value = self._resolve_member(actual.additional_properties, name_hint, "Value")
            return self._make(f"dict[str, {value.annotation}]", ShapeKind.DICTIONARY, nullable, item=value)
        return self._with_nullability(self._resolve_named(actual, name_hint), nullable)

    def file_type(self, multiple: bool = False, nullable: bool = False) -> ResolvedType:
        """The built-in upload type; never registered or materialized.

        A single file ignores nullability; only the list form carries it.
        """
        single = self._make(FILE_TYPE, ShapeKind.FILE, False)
        if not multiple:
            return single
        return self._make(f"list[{FILE_TYPE}]", ShapeKind.ARRAY, nullable, item=single)

    def _resolve_named(self, shape: ShapeDefinition, name_hint: str) -> ResolvedType:
        cached = self._cache.get(shape)
        if cached is not None:
            return cached

        name = self._reserved.get(shape) or unique_name(self._derive_name(shape, name_hint), self._used_names)
        style = self._settings.type_style(name)
        resolved = ResolvedType(name=name, annotation=name, kind=shape.kind, style=style, generated=True)
        named = NamedType(name=name, shape=shape, style=style)
        # Registered before members are visited; cycles stop here.
        self._cache[shape] = resolved
        self._named[name] = named
        logger.debug("Registered %s type %s (%s)", shape.kind.value, name, style.value)

        if shape.kind is ShapeKind.OBJECT:
            self._resolve_members(shape, named)
        return resolved

    def is_nullable(self, shape: ShapeDefinition) -> bool:
        """Whether the shape or its referenced definition accepts null.

        JSON_SCHEMA reads "nullable" and "null" in the type list; SWAGGER
        reads "x-nullable" only.
        """
        actual = self.actual(shape)
        if self._settings.null_handling is NullHandling.SWAGGER:
            return shape.x_nullable is True or actual.x_nullable is True
        return shape.nullable or actual.nullable

    def member_type(self, named: NamedType, member: str) -> ResolvedType:
        shape = named.members[member]
        return self.resolve(shape, self.is_nullable(shape), f"{named.name}{pascal_case(member)}")

    def _resolve_members(self, shape: ShapeDefinition, named: NamedType) -> None:
        # The first referenced object in allOf becomes the base class; every
        # other part is flattened into the members.
        for part in shape.all_of:
            actual_part = self.actual(part)
            if part.is_reference and actual_part.kind is ShapeKind.OBJECT and named.base is None:
                named.base = self.resolve(part).name
            else:
                self._collect_members(actual_part, named)
        self._collect_members(shape, named, include_all_of=False)
        for member in named.members:
            self.member_type(named, member)
        if shape.additional_properties is not None:
            self.resolve(shape.additional_properties, False, f"{named.name}Value")

    def _collect_members(self, shape: ShapeDefinition, named: NamedType, include_all_of: bool = True) -> None:
        if include_all_of:
            for part in shape.all_of:
                self._collect_members(self.actual(part), named)
        named.members.update(shape.properties)
        named.required.update(shape.required)

    def _resolve_member(self, member: ShapeDefinition | None, name_hint: str, suffix: str) -> ResolvedType:
        if member is None:
            return self._make(ANY_TYPE, ShapeKind.ANY, False)
        return self.resolve(member, self.is_nullable(member), f"{name_hint}{suffix}" if name_hint else suffix)

    def _derive_name(self, shape: ShapeDefinition, name_hint: str) -> str:
        for candidate in (shape.name, shape.title, name_hint):
            if candidate:
                cleaned = pascal_case(candidate)
                if cleaned:
                    return cleaned
        return "Anonymous"

    def _with_nullability(self, resolved: ResolvedType, nullable: bool) -> ResolvedType:
        if not nullable:
            return resolved
        return ResolvedType(
            name=resolved.name,
            annotation=self._settings.profile.optional(resolved.name),
            kind=resolved.kind,
            style=resolved.style,
            generated=resolved.generated,
            item=resolved.item,
            nullable=True,
        )

    def _make(
        self,
        name: str,
        kind: ShapeKind,
        nullable: bool,
        item: ResolvedType | None = None,
    ) -> ResolvedType:
        annotation = self._settings.profile.optional(name) if nullable else name
        return ResolvedType(name=name, annotation=annotation, kind=kind, item=item, nullable=nullable)
