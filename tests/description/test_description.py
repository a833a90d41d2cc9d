from __future__ import annotations

from typing import Any, cast

import pytest

from clientforge.description import (
    ApiDescription,
    ParameterKind,
    ShapeKind,
    build_description,
    build_shape,
)
from clientforge.errors import SpecError
from clientforge.openapi import DescriptionDocument


class TestBuildDescription:
    def test_rejects_non_description(self) -> None:
        with pytest.raises(SpecError):
            build_description(cast(DescriptionDocument, []))
        with pytest.raises(SpecError):
            build_description(cast(DescriptionDocument, {"info": {}}))

    def test_collects_definitions_and_operations_in_order(self, petstore: ApiDescription) -> None:
        assert petstore.title == "Petstore"
        assert petstore.base_path == "/v1"
        assert list(petstore.definitions) == ["Pet", "Owner", "Dog", "Error", "NotFound"]
        assert [operation.display_name for operation in petstore.operations] == [
            "GET /pets",
            "POST /pets",
            "GET /pets/{petId}",
            "POST /pets/{petId}/photo",
        ]

    def test_keeps_references_unresolved(self, petstore: ApiDescription) -> None:
        owner = petstore.definitions["Pet"].properties["owner"]
        assert owner.is_reference
        assert owner.reference == "#/definitions/Owner"
        assert petstore.find_definition("#/definitions/Owner") is petstore.definitions["Owner"]
        assert petstore.find_definition("#/definitions/Missing") is None

    def test_splits_default_response(self, petstore: ApiDescription) -> None:
        list_pets = petstore.operations[0]
        assert [response.status_code for response in list_pets.responses] == ["200"]
        assert list_pets.default_response is not None
        assert list_pets.default_response.shape is not None
        assert list_pets.default_response.shape.reference == "#/definitions/Error"
        assert list_pets.default_position == 1

    def test_records_default_position(self) -> None:
        document: dict[str, Any] = {
            "swagger": "2.0",
            "paths": {
                "/pets": {
                    "get": {
                        "responses": {
                            "200": {"description": "ok"},
                            "default": {"description": "error", "schema": {"type": "string"}},
                            "404": {"description": "missing", "schema": {"type": "integer"}},
                        }
                    }
                }
            },
        }
        operation = build_description(cast(DescriptionDocument, document)).operations[0]
        assert [response.status_code for response in operation.responses] == ["200", "404"]
        assert operation.default_position == 1

    def test_swagger_parameters(self, petstore: ApiDescription) -> None:
        limit, tags = petstore.operations[0].parameters
        assert limit.kind is ParameterKind.QUERY
        assert limit.required is False
        assert limit.shape.kind is ShapeKind.PRIMITIVE
        assert tags.shape.kind is ShapeKind.ARRAY
        assert tags.collection_format == "multi"

        path, file, caption = petstore.operations[3].parameters
        assert path.kind is ParameterKind.PATH
        assert path.required is True
        assert file.kind is ParameterKind.FILE
        assert file.shape.kind is ShapeKind.FILE
        assert caption.kind is ParameterKind.FORM

    def test_operation_parameters_override_path_parameters(self) -> None:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "paths": {
                "/items": {
                    "parameters": [{"name": "q", "in": "query", "required": False, "schema": {"type": "string"}}],
                    "get": {
                        "parameters": [{"name": "q", "in": "query", "required": True, "schema": {"type": "string"}}],
                        "responses": {"200": {"description": "ok"}},
                    },
                }
            },
        }
        operation = build_description(cast(DescriptionDocument, document)).operations[0]
        assert len(operation.parameters) == 1
        assert operation.parameters[0].required is True

    def test_openapi3_request_body_and_responses(self) -> None:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "components": {
                "schemas": {"Item": {"type": "object", "properties": {"id": {"type": "integer"}}}},
                "responses": {
                    "Problem": {
                        "description": "problem",
                        "content": {"application/problem+json": {"schema": {"type": "string"}}},
                    }
                },
            },
            "paths": {
                "/items": {
                    "post": {
                        "requestBody": {
                            "required": True,
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Item"}}},
                        },
                        "responses": {
                            "200": {
                                "description": "ok",
                                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Item"}}},
                            },
                            "422": {"$ref": "#/components/responses/Problem"},
                        },
                    }
                }
            },
        }
        description = build_description(cast(DescriptionDocument, document))
        operation = description.operations[0]
        (body,) = operation.parameters
        assert body.kind is ParameterKind.BODY
        assert body.name == "body"
        assert body.required is True
        assert body.shape.reference == "#/components/schemas/Item"
        ok, problem = operation.responses
        assert ok.shape is not None and ok.shape.reference == "#/components/schemas/Item"
        assert problem.shape is not None and problem.shape.kind is ShapeKind.PRIMITIVE

    def test_openapi3_request_body_reference(self) -> None:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "components": {
                "schemas": {"Pet": {"type": "object", "properties": {"name": {"type": "string"}}}},
                "requestBodies": {
                    "PetBody": {
                        "required": True,
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
                    }
                },
            },
            "paths": {
                "/pets": {
                    "post": {
                        "requestBody": {"$ref": "#/components/requestBodies/PetBody"},
                        "responses": {"204": {"description": "done"}},
                    }
                }
            },
        }
        (body,) = build_description(cast(DescriptionDocument, document)).operations[0].parameters
        assert body.kind is ParameterKind.BODY
        assert body.required is True
        assert body.shape.reference == "#/components/schemas/Pet"

    def test_missing_request_body_reference_raises(self) -> None:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "paths": {
                "/pets": {
                    "post": {
                        "requestBody": {"$ref": "#/components/requestBodies/Missing"},
                        "responses": {"204": {"description": "done"}},
                    }
                }
            },
        }
        with pytest.raises(SpecError, match="requestBodies/Missing"):
            build_description(cast(DescriptionDocument, document))

    def test_openapi3_multipart_form(self) -> None:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "paths": {
                "/upload": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "multipart/form-data": {
                                    "schema": {
                                        "type": "object",
                                        "required": ["attachment"],
                                        "properties": {
                                            "attachment": {"type": "string", "format": "binary"},
                                            "extras": {
                                                "type": "array",
                                                "items": {"type": "string", "format": "binary"},
                                            },
                                            "note": {"type": "string"},
                                        },
                                    }
                                }
                            }
                        },
                        "responses": {"204": {"description": "done"}},
                    }
                }
            },
        }
        operation = build_description(cast(DescriptionDocument, document)).operations[0]
        attachment, extras, note = operation.parameters
        assert attachment.kind is ParameterKind.FILE
        assert attachment.required is True
        assert attachment.collection_format is None
        assert extras.kind is ParameterKind.FILE
        assert extras.collection_format == "multi"
        assert note.kind is ParameterKind.FORM

    def test_missing_parameter_reference_raises(self) -> None:
        document: dict[str, Any] = {
            "swagger": "2.0",
            "paths": {
                "/items": {
                    "get": {
                        "parameters": [{"$ref": "#/parameters/Missing"}],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        with pytest.raises(SpecError, match="Missing"):
            build_description(cast(DescriptionDocument, document))

    def test_cookie_parameters_are_skipped(self) -> None:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "paths": {
                "/items": {
                    "get": {
                        "parameters": [{"name": "session", "in": "cookie", "schema": {"type": "string"}}],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        operation = build_description(cast(DescriptionDocument, document)).operations[0]
        assert operation.parameters == ()


class TestBuildShape:
    def test_nullable_forms(self) -> None:
        assert build_shape({"type": "string", "nullable": True}).nullable is True
        assert build_shape({"type": ["string", "null"]}).nullable is True
        shape = build_shape({"type": "string", "x-nullable": True})
        assert shape.nullable is False
        assert shape.x_nullable is True
        assert build_shape({"type": "string"}).nullable is False

    def test_kinds(self) -> None:
        assert build_shape({"type": "string", "enum": ["a", "b"]}).kind is ShapeKind.ENUM
        assert build_shape({"type": "object", "additionalProperties": {"type": "integer"}}).kind is (
            ShapeKind.DICTIONARY
        )
        assert build_shape({"type": "object"}).kind is ShapeKind.ANY
        assert build_shape(None).kind is ShapeKind.ANY
        assert build_shape({"type": "file"}).kind is ShapeKind.FILE

    def test_inline_shapes_are_distinct(self) -> None:
        first = build_shape({"type": "object", "properties": {"a": {"type": "string"}}})
        second = build_shape({"type": "object", "properties": {"a": {"type": "string"}}})
        assert first != second
