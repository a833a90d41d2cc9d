from __future__ import annotations

from typing import TypedDict

# Type aliases for JSON-like values found in a decoded description
JsonPrimitive = str | int | float | bool | None
JsonValue = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]

EnumValue = str | int | float | bool | None

SchemaObject = TypedDict(
    "SchemaObject",
    {
        "type": str,
        "format": str,
        "title": str,
        "description": str,
        "properties": dict[str, "SchemaObject"],
        "items": "SchemaObject",
        "required": list[str],
        "nullable": bool,
        "x-nullable": bool,
        "enum": list[EnumValue],
        "allOf": list["SchemaObject"],
        # additionalProperties can be a bool or a SchemaObject
        "additionalProperties": object,
        "$ref": str,
    },
    total=False,
)

MediaTypeObject = TypedDict(
    "MediaTypeObject",
    {
        "schema": SchemaObject,
    },
    total=False,
)

# Swagger 2.0 keeps "schema" on the response; OpenAPI 3 nests it under "content"
ResponseObject = TypedDict(
    "ResponseObject",
    {
        "description": str,
        "schema": SchemaObject,
        "content": dict[str, MediaTypeObject],
        "x-nullable": bool,
    },
    total=False,
)

RequestBodyObject = TypedDict(
    "RequestBodyObject",
    {
        "description": str,
        "content": dict[str, MediaTypeObject],
        "required": bool,
        "x-name": str,
    },
    total=False,
)

# Swagger 2.0 non-body parameters carry type/items/collectionFormat inline
ParameterObject = TypedDict(
    "ParameterObject",
    {
        "name": str,
        "in": str,
        "required": bool,
        "description": str,
        "schema": SchemaObject,
        "type": str,
        "format": str,
        "items": SchemaObject,
        "enum": list[EnumValue],
        "collectionFormat": str,
        "style": str,
        "explode": bool,
        "x-nullable": bool,
        "$ref": str,
    },
    total=False,
)

OperationObject = TypedDict(
    "OperationObject",
    {
        "operationId": str,
        "summary": str,
        "description": str,
        "tags": list[str],
        "parameters": list[ParameterObject],
        "requestBody": RequestBodyObject,
        "responses": dict[str, ResponseObject],
    },
    total=False,
)

PathItemObject = TypedDict(
    "PathItemObject",
    {
        "parameters": list[ParameterObject],
        "get": OperationObject,
        "put": OperationObject,
        "post": OperationObject,
        "delete": OperationObject,
        "options": OperationObject,
        "head": OperationObject,
        "patch": OperationObject,
        "trace": OperationObject,
    },
    total=False,
)

ComponentsObject = TypedDict(
    "ComponentsObject",
    {
        "schemas": dict[str, SchemaObject],
        "parameters": dict[str, ParameterObject],
        "responses": dict[str, ResponseObject],
        "requestBodies": dict[str, RequestBodyObject],
    },
    total=False,
)

InfoObject = TypedDict(
    "InfoObject",
    {
        "title": str,
        "version": str,
    },
    total=False,
)

DescriptionDocument = TypedDict(
    "DescriptionDocument",
    {
        "swagger": str,
        "openapi": str,
        "info": InfoObject,
        "basePath": str,
        "paths": dict[str, PathItemObject],
        "definitions": dict[str, SchemaObject],
        "parameters": dict[str, ParameterObject],
        "responses": dict[str, ResponseObject],
        "components": ComponentsObject,
    },
    total=False,
)
