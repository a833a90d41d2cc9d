from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from .profile import GenerationProfile


class TypeStyle(str, Enum):
    """How values of a generated type are materialized."""

    NOMINAL = "nominal"
    STRUCTURAL = "structural"


class NullHandling(str, Enum):
    JSON_SCHEMA = "json_schema"
    SWAGGER = "swagger"


class OperationGrouping(str, Enum):
    SINGLE_CLIENT = "single_client"
    TAG = "tag"
    OPERATION_ID = "operation_id"


@dataclass(frozen=True)
class GeneratorSettings:
    """Options read by the generation engine.

    Attributes:
        type_styles: Per type name style overrides
        default_type_style: Style of generated types without an override
        extended_classes: Class names that have a hand-written subclass
        extension_code: Hand-written code blocks keyed by class name
        client_base_class: Base class for generated clients, if any
        null_handling: How nullability is read from the description
        operation_grouping: How operations are grouped into client classes
        class_name: Client class name template; "{controller}" is replaced
        profile: Target-interpreter features for rendered code
    """

    type_styles: Mapping[str, TypeStyle] = field(default_factory=dict)
    default_type_style: TypeStyle = TypeStyle.NOMINAL
    extended_classes: frozenset[str] = frozenset()
    extension_code: Mapping[str, str] = field(default_factory=dict)
    client_base_class: str | None = None
    null_handling: NullHandling = NullHandling.JSON_SCHEMA
    operation_grouping: OperationGrouping = OperationGrouping.TAG
    class_name: str = "{controller}Client"
    profile: GenerationProfile = field(default_factory=lambda: GenerationProfile.from_version("3.10"))

    def type_style(self, type_name: str) -> TypeStyle:
        return self.type_styles.get(type_name, self.default_type_style)

    def client_class_name(self, controller: str) -> str:
        return self.class_name.replace("{controller}", controller)

    @classmethod
    def from_mapping(cls, options: Mapping[str, object]) -> "GeneratorSettings":
        """Build settings from a plain mapping (camelCase or snake_case keys)."""
        values = {_snake_case(key): value for key, value in options.items()}
        kwargs: dict[str, object] = {}
        if "type_styles" in values:
            styles = values["type_styles"]
            if not isinstance(styles, Mapping):
                raise ValueError("typeStyles must be a mapping")
            kwargs["type_styles"] = {str(name): TypeStyle(style) for name, style in styles.items()}
        if "default_type_style" in values:
            kwargs["default_type_style"] = TypeStyle(values["default_type_style"])
        if "extended_classes" in values:
            kwargs["extended_classes"] = frozenset(str(name) for name in values["extended_classes"])  # type: ignore[attr-defined]
        if "extension_code" in values:
            code = values["extension_code"]
            if not isinstance(code, Mapping):
                raise ValueError("extensionCode must be a mapping")
            kwargs["extension_code"] = {str(name): str(block) for name, block in code.items()}
        if values.get("client_base_class"):
            kwargs["client_base_class"] = str(values["client_base_class"])
        if "null_handling" in values:
            kwargs["null_handling"] = NullHandling(values["null_handling"])
        if "operation_grouping" in values:
            kwargs["operation_grouping"] = OperationGrouping(values["operation_grouping"])
        if "class_name" in values:
            kwargs["class_name"] = str(values["class_name"])
        if "python_version" in values:
            kwargs["profile"] = GenerationProfile.from_version(str(values["python_version"]))
        return cls(**kwargs)  # type: ignore[arg-type]


def _snake_case(key: str) -> str:
    chars: list[str] = []
    for index, ch in enumerate(key):
        if ch.isupper() and index > 0:
            chars.append("_")
        chars.append(ch.lower())
    return "".join(chars)
