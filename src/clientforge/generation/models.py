from __future__ import annotations

from dataclasses import dataclass, replace

from ..description import ShapeKind
from ..openapi import EnumValue
from .conversion import ConversionEmitter
from .extension import ExtensionCode
from .naming import snake_case, unique_name
from .resolver import NamedType, ResolvedType, TypeResolver
from .settings import TypeStyle

# Attributes the rendered classes define themselves.
_METHOD_NAMES = frozenset({"from_dict", "to_dict", "_values_from_dict"})


@dataclass(frozen=True)
class PropertyModel:
    """One member of a generated type.

    Attributes:
        name: JSON key
        field_name: Python attribute name on nominal classes
        annotation: Field annotation, optional when the key may be missing
        required: Whether the key is listed as required
        refers_generated: Whether the annotation names a generated type
        from_json: Expression reading the value from ``data``
        to_json: Expression writing the value from ``self``
    """

    name: str
    field_name: str
    annotation: str
    required: bool
    refers_generated: bool
    from_json: str
    to_json: str


@dataclass(frozen=True)
class TypeTemplateModel:
    name: str
    class_name: str
    kind: ShapeKind
    style: TypeStyle
    base: str | None
    properties: tuple[PropertyModel, ...]
    enum_values: tuple[EnumValue, ...] = ()
    description: str | None = None


def build_type_models(
    resolver: TypeResolver,
    conversion: ConversionEmitter,
    extension_code: ExtensionCode,
) -> list[TypeTemplateModel]:
    """Describe every generated type, bases ahead of the types deriving from them."""
    builder = _TypeModelBuilder(resolver, conversion, extension_code)
    return [builder.build(named) for named in _base_first(resolver)]


class _TypeModelBuilder:
    def __init__(
        self,
        resolver: TypeResolver,
        conversion: ConversionEmitter,
        extension_code: ExtensionCode,
    ) -> None:
        self._resolver = resolver
        self._conversion = conversion
        self._extension_code = extension_code
        self._profile = resolver.settings.profile

    def build(self, named: NamedType) -> TypeTemplateModel:
        base = self._class_base(named)
        if named.kind is ShapeKind.ENUM:
            properties: tuple[PropertyModel, ...] = ()
        else:
            properties = tuple(self._properties(named, flatten=base is None))
        class_name = named.name
        if named.style is TypeStyle.NOMINAL and named.kind is ShapeKind.OBJECT:
            class_name = self._extension_code.class_name_for(named.name)
        return TypeTemplateModel(
            name=named.name,
            class_name=class_name,
            kind=named.kind,
            style=named.style,
            base=base,
            properties=properties,
            enum_values=named.shape.enum_values,
            description=named.shape.description,
        )

    def _class_base(self, named: NamedType) -> str | None:
        """Nominal classes inherit only from nominal bases; other bases are flattened."""
        if named.base is None or named.style is not TypeStyle.NOMINAL:
            return None
        base = self._resolver.named_type(named.base)
        if base is None or base.style is not TypeStyle.NOMINAL:
            return None
        return named.base

    def _properties(self, named: NamedType, flatten: bool) -> list[PropertyModel]:
        chain = [named]
        if flatten:
            base = self._resolver.named_type(named.base) if named.base else None
            while base is not None and base.name not in {owner.name for owner in chain}:
                chain.insert(0, base)
                base = self._resolver.named_type(base.base) if base.base else None

        used_fields: set[str] = set(_METHOD_NAMES)
        properties: dict[str, PropertyModel] = {}
        for owner in chain:
            for member in owner.members:
                if member in properties:
                    continue
                properties[member] = self._property(owner, member, used_fields)
        return list(properties.values())

    def _property(self, owner: NamedType, member: str, used_fields: set[str]) -> PropertyModel:
        resolved = self._resolver.member_type(owner, member)
        required = member in owner.required
        # Missing keys read as None, so optional members convert like nullable ones.
        convertible = resolved if required else replace(resolved, nullable=True)
        annotation = resolved.annotation
        if not required and not resolved.nullable:
            annotation = self._profile.optional(annotation)
        field_name = unique_name(snake_case(member), used_fields)
        source = f"data.get({member!r})"
        target = f"self.{field_name}"
        return PropertyModel(
            name=member,
            field_name=field_name,
            annotation=annotation,
            required=required,
            refers_generated=_refers_generated(resolved),
            from_json=self._conversion.expression_for(convertible, source) or source,
            to_json=self._conversion.to_json_expression_for(convertible, target) or target,
        )


def _refers_generated(resolved: ResolvedType) -> bool:
    if resolved.generated:
        return True
    return resolved.item is not None and _refers_generated(resolved.item)


def _base_first(resolver: TypeResolver) -> list[NamedType]:
    ordered: dict[str, NamedType] = {}
    visiting: set[str] = set()

    def visit(named: NamedType) -> None:
        if named.name in ordered or named.name in visiting:
            return
        visiting.add(named.name)
        if named.base is not None:
            base = resolver.named_type(named.base)
            if base is not None:
                visit(base)
        ordered[named.name] = named

    for named in resolver.named_types:
        visit(named)
    return list(ordered.values())
