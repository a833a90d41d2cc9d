"""Conversion code emission.

ConversionEmitter produces the Python fragment that turns a raw decoded
JSON value into its materialized representation: generated classes are
built with ``from_dict``, lists and dicts are mapped element-wise and
everything else passes through unchanged.

Example:
    >>> emitter.emit(pets_shape, "result_data_200", "result_200").code
    'result_200 = [Pet.from_dict(item0) for item0 in result_data_200]'
"""

from __future__ import annotations

from dataclasses import dataclass

from ..description import ShapeDefinition, ShapeKind
from .policy import MaterializationPolicy
from .resolver import ResolvedType, TypeResolver


@dataclass(frozen=True)
class ConversionCode:
    """Generated conversion statements.

    Attributes:
        source: Variable holding the raw decoded value
        target: Variable receiving the materialized value
        lines: Statements assigning ``target``
    """

    source: str
    target: str
    lines: tuple[str, ...]

    @property
    def code(self) -> str:
        return "\n".join(self.lines)


class ConversionEmitter:
    def __init__(self, resolver: TypeResolver, policy: MaterializationPolicy) -> None:
        self._resolver = resolver
        self._policy = policy

    def emit(
        self,
        shape: ShapeDefinition,
        source: str,
        target: str,
        nullable: bool = False,
    ) -> ConversionCode | None:
        """Return the statements converting ``source`` into ``target``.

        Returns None when nothing along the shape materializes; callers then
        use the decoded value as-is.
        """
        expression = self.expression(shape, source, nullable)
        if expression is None:
            return None
        return ConversionCode(source=source, target=target, lines=(f"{target} = {expression}",))

    def expression(self, shape: ShapeDefinition, value: str, nullable: bool = False) -> str | None:
        return self.expression_for(self._resolver.resolve(shape, nullable), value)

    def expression_for(self, resolved: ResolvedType, value: str, depth: int = 0) -> str | None:
        if resolved.kind is ShapeKind.OBJECT:
            if not self._policy.should_materialize(resolved):
                return None
            converted = f"{resolved.name}.from_dict({value})"
        elif resolved.kind is ShapeKind.ARRAY and resolved.item is not None:
            item_var = f"item{depth}"
            inner = self.expression_for(resolved.item, item_var, depth + 1)
            if inner is None:
                return None
            converted = f"[{inner} for {item_var} in {value}]"
        elif resolved.kind is ShapeKind.DICTIONARY and resolved.item is not None:
            key_var = f"key{depth}"
            value_var = f"value{depth}"
            inner = self.expression_for(resolved.item, value_var, depth + 1)
            if inner is None:
                return None
            converted = f"{{{key_var}: {inner} for {key_var}, {value_var} in {value}.items()}}"
        else:
            return None

        return _guard_nullable(converted, resolved, value, depth)

    def emit_to_json(self, resolved: ResolvedType, source: str, target: str) -> ConversionCode | None:
        """Return the statements turning a materialized ``source`` back into JSON data."""
        expression = self.to_json_expression_for(resolved, source)
        if expression is None:
            return None
        return ConversionCode(source=source, target=target, lines=(f"{target} = {expression}",))

    def to_json_expression_for(self, resolved: ResolvedType, value: str, depth: int = 0) -> str | None:
        if resolved.kind is ShapeKind.OBJECT:
            if not self._policy.should_materialize(resolved):
                return None
            converted = f"{value}.to_dict()"
        elif resolved.kind is ShapeKind.ARRAY and resolved.item is not None:
            item_var = f"item{depth}"
            inner = self.to_json_expression_for(resolved.item, item_var, depth + 1)
            if inner is None:
                return None
            converted = f"[{inner} for {item_var} in {value}]"
        elif resolved.kind is ShapeKind.DICTIONARY and resolved.item is not None:
            key_var = f"key{depth}"
            value_var = f"value{depth}"
            inner = self.to_json_expression_for(resolved.item, value_var, depth + 1)
            if inner is None:
                return None
            converted = f"{{{key_var}: {inner} for {key_var}, {value_var} in {value}.items()}}"
        else:
            return None
        return _guard_nullable(converted, resolved, value, depth)


def _guard_nullable(converted: str, resolved: ResolvedType, value: str, depth: int) -> str:
    if not resolved.nullable:
        return converted
    converted = f"{converted} if {value} is not None else None"
    if depth > 0:
        converted = f"({converted})"
    return converted
