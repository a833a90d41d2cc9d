"""API description model consumed by the generator.

This module defines the shape graph and operation descriptors that the
generation engine works on, and build_description() which adapts an
already-decoded Swagger 2.0 or OpenAPI 3 mapping into them.

Key classes:
- ApiDescription: Root container for definitions and operations
- ShapeDefinition: One node of the data-shape graph (named or inline)
- OperationDescription: One HTTP operation
- ParameterDescription: One request parameter (path/query/header/body/form/file)
- ResponseDescription: One declared response

Shape definitions are never dereferenced here. A "$ref" becomes a
ShapeDefinition whose ``reference`` is set; the resolver follows it later
so that cyclic graphs can be described without recursion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, cast

from .errors import SpecError
from .openapi import (
    ComponentsObject,
    DescriptionDocument,
    EnumValue,
    MediaTypeObject,
    OperationObject,
    ParameterObject,
    PathItemObject,
    RequestBodyObject,
    ResponseObject,
    SchemaObject,
)

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_DEFINITION_PREFIXES = ("#/definitions/", "#/components/schemas/")
_JSON_CONTENT_TYPES = ("application/json", "text/json")


class ShapeKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    PRIMITIVE = "primitive"
    ENUM = "enum"
    FILE = "file"
    ANY = "any"


class ParameterKind(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    FORM = "form"
    FILE = "file"


@dataclass(frozen=True, eq=False)
class ShapeDefinition:
    """A node in the description's data-shape graph.

    Equality and hashing are by identity: two structurally identical inline
    shapes are still two shapes, while every path that reaches a named
    definition ends at the same instance.

    Attributes:
        kind: The shape kind; meaningless while ``reference`` is set
        name: Definition key for named shapes, None for inline shapes
        reference: A "$ref" pointer when this node is an indirection
        primitive: JSON type for primitive and enum shapes
        format: The schema format (e.g. "date-time", "binary")
        nullable: Whether null is accepted per "nullable" or a "null" type
        x_nullable: Explicit Swagger "x-nullable" flag, if present
        properties: Member shapes of an object, in declaration order
        required: Names of required properties
        item: Element shape of an array
        additional_properties: Value shape of a dictionary or open object
        all_of: Inherited or merged shapes
        enum_values: Allowed values of an enum
        title: Schema title, used to name inline shapes
        description: Human-readable description
    """

    kind: ShapeKind
    name: str | None = None
    reference: str | None = None
    primitive: str | None = None
    format: str | None = None
    nullable: bool = False
    x_nullable: bool | None = None
    properties: dict[str, ShapeDefinition] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    item: ShapeDefinition | None = None
    additional_properties: ShapeDefinition | None = None
    all_of: tuple[ShapeDefinition, ...] = ()
    enum_values: tuple[EnumValue, ...] = ()
    title: str | None = None
    description: str | None = None

    @property
    def is_reference(self) -> bool:
        return self.reference is not None

    def __repr__(self) -> str:
        if self.reference is not None:
            return f"ShapeDefinition(reference={self.reference!r})"
        return f"ShapeDefinition(kind={self.kind.value!r}, name={self.name!r})"


@dataclass(frozen=True)
class ParameterDescription:
    name: str
    kind: ParameterKind
    shape: ShapeDefinition
    required: bool = False
    collection_format: str | None = None
    description: str | None = None
    x_nullable: bool | None = None


@dataclass(frozen=True)
class ResponseDescription:
    status_code: str
    shape: ShapeDefinition | None
    description: str | None = None
    x_nullable: bool | None = None


@dataclass(frozen=True)
class OperationDescription:
    """One HTTP operation.

    Attributes:
        method: The HTTP method (lowercase)
        path: The URL path template (e.g., "/pets/{id}")
        operation_id: Unique operation identifier from the description
        tags: Grouping tags, first one is the controller by default
        parameters: Ordered parameters, path-level ones merged in
        responses: Declared responses with explicit status codes, in order
        default_response: The "default" response, if declared
        default_position: Number of explicit responses declared before
            "default"; None places it last
    """

    method: str
    path: str
    operation_id: str | None = None
    tags: tuple[str, ...] = ()
    summary: str | None = None
    parameters: tuple[ParameterDescription, ...] = ()
    responses: tuple[ResponseDescription, ...] = ()
    default_response: ResponseDescription | None = None
    default_position: int | None = None

    @property
    def display_name(self) -> str:
        return f"{self.method.upper()} {self.path}"


@dataclass(frozen=True)
class ApiDescription:
    """Root container produced by build_description().

    Attributes:
        title: The API title from info
        base_path: Base path prefixed to every operation path
        definitions: Named shapes in document order
        operations: All operations in document order
    """

    title: str
    base_path: str
    definitions: dict[str, ShapeDefinition]
    operations: list[OperationDescription]

    def find_definition(self, reference: str) -> ShapeDefinition | None:
        for prefix in _DEFINITION_PREFIXES:
            if reference.startswith(prefix):
                name = _unescape_pointer(reference[len(prefix) :])
                return self.definitions.get(name)
        return None


def build_description(document: DescriptionDocument) -> ApiDescription:
    """Build an ApiDescription from a decoded Swagger 2.0 or OpenAPI 3 mapping.

    Args:
        document: The decoded description (JSON/YAML already parsed)

    Returns:
        An ApiDescription with unresolved references kept as indirections

    Raises:
        SpecError: If the mapping is not a description or a parameter
            reference cannot be found
    """
    if not isinstance(document, dict):
        raise SpecError("API description must be an object")
    if not isinstance(document.get("swagger"), str) and not isinstance(document.get("openapi"), str):
        raise SpecError("Missing or invalid 'swagger'/'openapi' field in document")

    components = cast(ComponentsObject, document.get("components", {}))
    raw_schemas = document.get("definitions") or components.get("schemas", {})
    definitions = {name: build_shape(schema, name=name) for name, schema in raw_schemas.items()}

    builder = _OperationBuilder(document)
    operations: list[OperationDescription] = []
    for path, item in cast(dict[str, PathItemObject], document.get("paths", {})).items():
        operations.extend(builder.build_path_operations(path, item))

    info = document.get("info", {})
    return ApiDescription(
        title=info.get("title", ""),
        base_path=document.get("basePath", ""),
        definitions=definitions,
        operations=operations,
    )


def build_shape(schema: SchemaObject | bool | None, name: str | None = None) -> ShapeDefinition:
    """Convert a schema mapping into a ShapeDefinition tree."""
    if not isinstance(schema, dict):
        return ShapeDefinition(kind=ShapeKind.ANY, name=name)

    x_nullable = schema.get("x-nullable")
    if "$ref" in schema:
        return ShapeDefinition(
            kind=ShapeKind.ANY,
            reference=schema["$ref"],
            nullable=bool(schema.get("nullable")),
            x_nullable=x_nullable,
        )

    schema_type, type_nullable = _schema_type(schema)
    common = {
        "name": name,
        "format": schema.get("format"),
        "nullable": bool(schema.get("nullable") or type_nullable),
        "x_nullable": x_nullable,
        "title": schema.get("title"),
        "description": schema.get("description"),
    }

    if schema_type == "file":
        return ShapeDefinition(kind=ShapeKind.FILE, **common)

    enum_values = schema.get("enum")
    if enum_values:
        return ShapeDefinition(
            kind=ShapeKind.ENUM,
            primitive=schema_type or "string",
            enum_values=tuple(enum_values),
            **common,
        )

    if schema_type == "array":
        return ShapeDefinition(kind=ShapeKind.ARRAY, item=build_shape(schema.get("items")), **common)

    if schema_type in ("string", "integer", "number", "boolean"):
        return ShapeDefinition(kind=ShapeKind.PRIMITIVE, primitive=schema_type, **common)

    properties = schema.get("properties") or {}
    all_of = schema.get("allOf") or []
    additional = schema.get("additionalProperties")
    additional_shape = build_shape(additional) if isinstance(additional, dict) or additional is True else None
    if properties or all_of:
        return ShapeDefinition(
            kind=ShapeKind.OBJECT,
            properties={key: build_shape(value) for key, value in properties.items()},
            required=tuple(schema.get("required", [])),
            all_of=tuple(build_shape(part) for part in all_of),
            additional_properties=additional_shape,
            **common,
        )
    if additional_shape is not None:
        return ShapeDefinition(kind=ShapeKind.DICTIONARY, additional_properties=additional_shape, **common)
    return ShapeDefinition(kind=ShapeKind.ANY, **common)


def _schema_type(schema: SchemaObject) -> tuple[str | None, bool]:
    """Return the effective JSON type and whether "null" was listed in it."""
    raw = cast(object, schema.get("type"))
    if isinstance(raw, list):
        types = [item for item in raw if item != "null"]
        return (types[0] if types else None), len(types) != len(raw)
    if isinstance(raw, str):
        return raw, False
    return None, False


def _unescape_pointer(value: str) -> str:
    return value.replace("~1", "/").replace("~0", "~")


class _OperationBuilder:
    def __init__(self, document: DescriptionDocument) -> None:
        self._document = document

    def build_path_operations(self, path: str, item: PathItemObject) -> Iterable[OperationDescription]:
        common_params = cast(list[ParameterObject], item.get("parameters", []))
        for method in HTTP_METHODS:
            operation = cast(OperationObject | None, item.get(method))
            if not operation:
                continue
            parameters = self._merge_parameters(
                common_params,
                cast(list[ParameterObject], operation.get("parameters", [])),
            )
            parameters.extend(self._request_body_parameters(operation.get("requestBody")))
            responses, default, default_position = self._build_responses(operation.get("responses", {}))
            yield OperationDescription(
                method=method,
                path=path,
                operation_id=operation.get("operationId"),
                tags=tuple(operation.get("tags", [])),
                summary=operation.get("summary"),
                parameters=tuple(parameters),
                responses=tuple(responses),
                default_response=default,
                default_position=default_position,
            )

    def _merge_parameters(
        self,
        common: list[ParameterObject],
        specific: list[ParameterObject],
    ) -> list[ParameterDescription]:
        """Merge path-level and operation-level parameters.

        Operation-level parameters override path-level parameters with the
        same name and location.
        """
        merged: dict[tuple[str, str], ParameterObject] = {}
        for param in common + specific:
            param = self._deref_parameter(param)
            name = param.get("name")
            location = param.get("in")
            if not name or not location:
                continue
            merged[(name, location)] = param
        result: list[ParameterDescription] = []
        for param in merged.values():
            built = self._build_parameter(param)
            if built is not None:
                result.append(built)
        return result

    def _deref_parameter(self, param: ParameterObject) -> ParameterObject:
        ref = param.get("$ref")
        if not ref:
            return param
        pool: dict[str, ParameterObject]
        if ref.startswith("#/parameters/"):
            pool = self._document.get("parameters", {})
        elif ref.startswith("#/components/parameters/"):
            pool = cast(ComponentsObject, self._document.get("components", {})).get("parameters", {})
        else:
            raise SpecError(f"Unsupported parameter $ref: {ref}")
        name = _unescape_pointer(ref.rsplit("/", 1)[-1])
        if name not in pool:
            raise SpecError(f"Unresolvable parameter $ref: {ref}")
        return pool[name]

    def _build_parameter(self, param: ParameterObject) -> ParameterDescription | None:
        location = param.get("in", "")
        if location == "body":
            kind = ParameterKind.BODY
            shape = build_shape(param.get("schema"))
        elif location == "formData":
            kind = ParameterKind.FILE if _is_file_schema(cast(SchemaObject, param)) else ParameterKind.FORM
            shape = build_shape(cast(SchemaObject, param))
        elif location in ("path", "query", "header"):
            kind = ParameterKind(location)
            schema = param.get("schema")
            shape = build_shape(schema if schema is not None else cast(SchemaObject, param))
        else:
            logger.debug("Skipping parameter %r in unsupported location %r", param.get("name"), location)
            return None
        return ParameterDescription(
            name=param.get("name", ""),
            kind=kind,
            shape=shape,
            required=bool(param.get("required", location == "path")),
            collection_format=_collection_format(param),
            description=param.get("description"),
            x_nullable=param.get("x-nullable"),
        )

    def _request_body_parameters(self, body: RequestBodyObject | None) -> list[ParameterDescription]:
        """Translate an OpenAPI 3 requestBody into body/form/file parameters."""
        if not body:
            return []
        body = self._deref_request_body(body)
        content = body.get("content", {})
        required = bool(body.get("required", False))
        for form_type in ("multipart/form-data", "application/x-www-form-urlencoded"):
            media = content.get(form_type)
            schema = media.get("schema") if media else None
            if isinstance(schema, dict) and schema.get("properties"):
                return self._form_parameters(schema)
        schema = _pick_json_schema(content)
        return [
            ParameterDescription(
                name=body.get("x-name", "body"),
                kind=ParameterKind.BODY,
                shape=build_shape(schema),
                required=required,
                description=body.get("description"),
            )
        ]

    def _deref_request_body(self, body: RequestBodyObject) -> RequestBodyObject:
        ref = cast(dict[str, object], body).get("$ref")
        if not isinstance(ref, str):
            return body
        if not ref.startswith("#/components/requestBodies/"):
            raise SpecError(f"Unsupported requestBody $ref: {ref}")
        pool = cast(ComponentsObject, self._document.get("components", {})).get("requestBodies", {})
        name = _unescape_pointer(ref.rsplit("/", 1)[-1])
        if name not in pool:
            raise SpecError(f"Unresolvable requestBody $ref: {ref}")
        return pool[name]

    def _form_parameters(self, schema: SchemaObject) -> list[ParameterDescription]:
        required = set(schema.get("required", []))
        result: list[ParameterDescription] = []
        for name, prop in schema.get("properties", {}).items():
            is_file = _is_file_schema(prop)
            is_file_array = prop.get("type") == "array" and _is_file_schema(prop.get("items", {}))
            result.append(
                ParameterDescription(
                    name=name,
                    kind=ParameterKind.FILE if is_file or is_file_array else ParameterKind.FORM,
                    shape=build_shape(prop),
                    required=name in required,
                    collection_format="multi" if is_file_array else None,
                    description=prop.get("description"),
                )
            )
        return result

    def _build_responses(
        self,
        responses: dict[str, ResponseObject],
    ) -> tuple[list[ResponseDescription], ResponseDescription | None, int | None]:
        result: list[ResponseDescription] = []
        default: ResponseDescription | None = None
        default_position: int | None = None
        for status, response in responses.items():
            response = self._deref_response(response)
            schema = response.get("schema")
            if schema is None and "content" in response:
                schema = _pick_json_schema(response["content"])
            built = ResponseDescription(
                status_code=str(status),
                shape=build_shape(schema) if schema is not None else None,
                description=response.get("description"),
                x_nullable=response.get("x-nullable"),
            )
            if str(status) == "default":
                default = built
                default_position = len(result)
            else:
                result.append(built)
        return result, default, default_position

    def _deref_response(self, response: ResponseObject) -> ResponseObject:
        ref = cast(dict[str, object], response).get("$ref")
        if not isinstance(ref, str):
            return response
        if ref.startswith("#/responses/"):
            pool = self._document.get("responses", {})
        else:
            pool = cast(ComponentsObject, self._document.get("components", {})).get("responses", {})
        name = _unescape_pointer(ref.rsplit("/", 1)[-1])
        if name not in pool:
            raise SpecError(f"Unresolvable response $ref: {ref}")
        return pool[name]


def _is_file_schema(schema: SchemaObject) -> bool:
    return schema.get("type") == "file" or (schema.get("type") == "string" and schema.get("format") == "binary")


def _collection_format(param: ParameterObject) -> str | None:
    collection_format = param.get("collectionFormat")
    if collection_format:
        return collection_format
    # OpenAPI 3 form style with explode is the equivalent of "multi"
    if param.get("in") == "query" and param.get("explode", True) and param.get("style", "form") == "form":
        schema = param.get("schema", {})
        if schema.get("type") == "array":
            return "multi"
    return None


def _pick_json_schema(content: dict[str, MediaTypeObject]) -> SchemaObject | None:
    for content_type in _JSON_CONTENT_TYPES:
        media = content.get(content_type)
        if media is not None:
            return media.get("schema")
    for content_type, media in content.items():
        if content_type.endswith("+json"):
            return media.get("schema")
    for media in content.values():
        return media.get("schema")
    return None
