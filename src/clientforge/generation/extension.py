from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

EXTENDED_CLASS_SUFFIX = "Base"


@dataclass(frozen=True)
class ExtensionCode:
    """Hand-written code merged into generated classes by name.

    Attributes:
        extension_classes: Code block per class name
        extended_classes: Names that have a hand-written subclass; the
            generated class is renamed to free the public name
        base_classes: Names whose code is emitted once before all generated
            classes (e.g. a client base class)
    """

    extension_classes: Mapping[str, str] = field(default_factory=dict)
    extended_classes: frozenset[str] = frozenset()
    base_classes: frozenset[str] = frozenset()

    def is_extended(self, name: str) -> bool:
        return name in self.extended_classes

    def class_name_for(self, name: str) -> str:
        if self.is_extended(name):
            return f"{name}{EXTENDED_CLASS_SUFFIX}"
        return name

    def append(self, name: str, code: str) -> str:
        if not self.is_extended(name):
            return code
        block = self.extension_classes.get(name)
        if block is None:
            logger.debug("Class %s is extended but has no extension code", name)
            return code
        return f"{code}\n\n{block}"

    def base_class_code(self) -> list[str]:
        """Code blocks of configured base classes, in sorted name order."""
        return [self.extension_classes[name] for name in sorted(self.base_classes) if name in self.extension_classes]
