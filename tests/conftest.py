from __future__ import annotations

from typing import Any

import pytest

from clientforge.description import ApiDescription, build_description
from clientforge.generation.resolver import TypeResolver
from clientforge.generation.settings import GeneratorSettings


@pytest.fixture()
def minimal_openapi_document() -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Example", "version": "1.0.0"},
        "paths": {},
    }


@pytest.fixture()
def petstore_document() -> dict[str, Any]:
    return {
        "swagger": "2.0",
        "info": {"title": "Petstore", "version": "1.0.0"},
        "basePath": "/v1",
        "definitions": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "name": {"type": "string"},
                    "tag": {"type": "string"},
                    "status": {"type": "string", "enum": ["available", "sold"]},
                    "owner": {"$ref": "#/definitions/Owner"},
                },
            },
            "Owner": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "pets": {"type": "array", "items": {"$ref": "#/definitions/Pet"}},
                },
            },
            "Dog": {
                "allOf": [
                    {"$ref": "#/definitions/Pet"},
                    {"type": "object", "properties": {"barks": {"type": "boolean"}}},
                ]
            },
            "Error": {
                "type": "object",
                "required": ["code", "message"],
                "properties": {
                    "code": {"type": "integer"},
                    "message": {"type": "string"},
                },
            },
            "NotFound": {
                "type": "object",
                "properties": {"resource": {"type": "string"}},
            },
        },
        "paths": {
            "/pets": {
                "get": {
                    "operationId": "listPets",
                    "summary": "List all pets",
                    "tags": ["pets"],
                    "parameters": [
                        {"name": "limit", "in": "query", "type": "integer"},
                        {
                            "name": "tags",
                            "in": "query",
                            "type": "array",
                            "items": {"type": "string"},
                            "collectionFormat": "multi",
                        },
                    ],
                    "responses": {
                        "200": {
                            "description": "A list of pets",
                            "schema": {"type": "array", "items": {"$ref": "#/definitions/Pet"}},
                        },
                        "default": {"description": "unexpected error", "schema": {"$ref": "#/definitions/Error"}},
                    },
                },
                "post": {
                    "operationId": "createPet",
                    "tags": ["pets"],
                    "parameters": [
                        {"name": "pet", "in": "body", "required": True, "schema": {"$ref": "#/definitions/Pet"}},
                    ],
                    "responses": {
                        "201": {"description": "Created"},
                        "400": {"description": "Invalid pet", "schema": {"$ref": "#/definitions/Error"}},
                    },
                },
            },
            "/pets/{petId}": {
                "get": {
                    "operationId": "showPetById",
                    "tags": ["pets"],
                    "parameters": [
                        {"name": "petId", "in": "path", "required": True, "type": "string"},
                    ],
                    "responses": {
                        "200": {"description": "The pet", "schema": {"$ref": "#/definitions/Pet"}},
                        "404": {"description": "Not found", "schema": {"$ref": "#/definitions/NotFound"}},
                        "500": {"description": "Server error", "schema": {"$ref": "#/definitions/Error"}},
                    },
                },
            },
            "/pets/{petId}/photo": {
                "post": {
                    "operationId": "uploadPhoto",
                    "tags": ["photos"],
                    "consumes": ["multipart/form-data"],
                    "parameters": [
                        {"name": "petId", "in": "path", "required": True, "type": "string"},
                        {"name": "file", "in": "formData", "required": True, "type": "file"},
                        {"name": "caption", "in": "formData", "type": "string"},
                    ],
                    "responses": {"200": {"description": "Uploaded"}},
                },
            },
        },
    }


@pytest.fixture()
def petstore(petstore_document: dict[str, Any]) -> ApiDescription:
    return build_description(petstore_document)


@pytest.fixture()
def resolver(petstore: ApiDescription) -> TypeResolver:
    resolver = TypeResolver(petstore, GeneratorSettings())
    resolver.register_definitions()
    return resolver
