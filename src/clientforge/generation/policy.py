from __future__ import annotations

import logging

from ..description import ShapeKind
from .resolver import ResolvedType, TypeResolver
from .settings import TypeStyle

logger = logging.getLogger(__name__)


class MaterializationPolicy:
    """Decides whether decoded values become instances of a generated class.

    A type materializes only when its style is nominal and the resolver has
    a generator registered under its name. Structural types always stay
    plain decoded values, which gives consumers a "light" mode where only
    TypedDicts are produced.
    """

    def __init__(self, resolver: TypeResolver) -> None:
        self._resolver = resolver

    def should_materialize(self, resolved: ResolvedType | None) -> bool:
        if resolved is None or resolved.kind is ShapeKind.FILE:
            return False
        return resolved.style is TypeStyle.NOMINAL and self._resolver.has_generator(resolved.name)

    def for_parameter(self, resolved: ResolvedType) -> bool:
        """Dictionaries and arrays are judged by their value/item type."""
        if resolved.kind in (ShapeKind.DICTIONARY, ShapeKind.ARRAY):
            decision = self.should_materialize(resolved.item)
        else:
            decision = self.should_materialize(resolved)
        logger.debug("Parameter type %s materializes: %s", resolved.annotation, decision)
        return decision

    def for_response(self, resolved: ResolvedType | None) -> bool:
        return self.should_materialize(resolved)
