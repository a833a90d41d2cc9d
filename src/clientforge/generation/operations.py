"""Operation model construction.

OperationModelBuilder turns an OperationDescription into the
generation-ready OperationModel the renderer consumes. Building happens in
two phases:

1. ``describe()`` resolves every parameter and response type and computes
   the result and exception types. The returned model has no
   materialization decisions yet.
2. ``materialize()`` is a pure transformation that returns a copy with the
   ``use_dto_class`` flags and conversion code filled in.

``build()`` runs both phases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..description import (
    OperationDescription,
    ParameterDescription,
    ParameterKind,
    ResponseDescription,
    ShapeDefinition,
    ShapeKind,
)
from ..errors import ResolutionError
from .conversion import ConversionCode, ConversionEmitter
from .naming import operation_method_name, pascal_case, snake_case, unique_name
from .policy import MaterializationPolicy
from .profile import GenerationProfile
from .resolver import ResolvedType, TypeResolver
from .settings import GeneratorSettings, NullHandling

logger = logging.getLogger(__name__)

GENERIC_ERROR_TYPE = "str"
NO_VALUE_TYPE = "None"


def is_success_status(status_code: str) -> bool:
    return len(status_code) == 3 and status_code.startswith("2")


@dataclass(frozen=True)
class ParameterModel:
    name: str
    variable_name: str
    kind: ParameterKind
    shape: ShapeDefinition
    type: ResolvedType
    required: bool
    nullable: bool
    collection_format: str | None = None
    description: str | None = None
    data_variable: str = ""
    use_dto_class: bool = False
    conversion: ConversionCode | None = None

    @property
    def is_array(self) -> bool:
        return self.type.kind is ShapeKind.ARRAY

    @property
    def is_dictionary(self) -> bool:
        return self.type.kind is ShapeKind.DICTIONARY

    @property
    def is_file(self) -> bool:
        return self.kind is ParameterKind.FILE

    @property
    def is_optional(self) -> bool:
        return not self.required or self.nullable


@dataclass(frozen=True)
class ResponseModel:
    status_code: str
    shape: ShapeDefinition | None
    type: ResolvedType | None
    nullable: bool
    is_success: bool
    description: str | None = None
    use_dto_class: bool = False
    conversion: ConversionCode | None = None

    @property
    def has_type(self) -> bool:
        return self.type is not None

    @property
    def is_default(self) -> bool:
        return self.status_code == "default"

    @property
    def source_variable(self) -> str:
        return "result_data" if self.is_default else f"result_data_{self.status_code}"

    @property
    def target_variable(self) -> str:
        return "result" if self.is_default else f"result_{self.status_code}"


@dataclass(frozen=True)
class ExceptionType:
    """Union of error payload types an operation may raise.

    The generic marker (the raw response text) is always the last
    alternative; it also covers errors without a schema and transport
    failures.

    Attributes:
        alternatives: Types of non-success responses with a body, in
            declaration order
        generic: Whether the generic marker closes the union
    """

    alternatives: tuple[ResolvedType, ...] = ()
    generic: bool = True

    @property
    def members(self) -> list[str]:
        members = [alternative.annotation for alternative in self.alternatives]
        if self.generic:
            members.append(GENERIC_ERROR_TYPE)
        return members

    def render(self, profile: GenerationProfile) -> str:
        return profile.union(self.members)


@dataclass(frozen=True)
class OperationModel:
    """Generation-ready description of one operation.

    Attributes:
        operation_id: Identifier from the description, if any
        method: HTTP method (lowercase)
        path: URL path template
        method_name: Name of the generated client method
        controller: Grouping key of the client class the operation belongs to
        parameters: Parameter models in declaration order
        responses: Response models with explicit status codes, in order
        default_response: Model of the "default" response, if declared
        default_position: Number of explicit responses declared before
            "default"; None places it last
        result_type: Type of the success body, None for no value
        exception_type: Error payload union
    """

    operation_id: str | None
    method: str
    path: str
    method_name: str
    controller: str
    parameters: tuple[ParameterModel, ...]
    responses: tuple[ResponseModel, ...]
    default_response: ResponseModel | None
    result_type: ResolvedType | None
    exception_type: ExceptionType
    summary: str | None = None
    default_position: int | None = None

    @property
    def result_annotation(self) -> str:
        if self.result_type is None:
            return NO_VALUE_TYPE
        return self.result_type.annotation

    @property
    def success_response(self) -> ResponseModel | None:
        for response in self.responses:
            if response.is_success:
                return response
        return None

    @property
    def has_default_response(self) -> bool:
        return self.default_response is not None

    @property
    def all_responses(self) -> list[ResponseModel]:
        """Every response in declaration order, "default" included."""
        return _in_declaration_order(self.responses, self.default_response, self.default_position)

    def parameters_of(self, *kinds: ParameterKind) -> list[ParameterModel]:
        return [parameter for parameter in self.parameters if parameter.kind in kinds]


class OperationModelBuilder:
    """Builds OperationModels against one run-scoped resolver."""

    def __init__(
        self,
        resolver: TypeResolver,
        settings: GeneratorSettings,
        policy: MaterializationPolicy | None = None,
        conversion: ConversionEmitter | None = None,
    ) -> None:
        self._resolver = resolver
        self._settings = settings
        self._policy = policy or MaterializationPolicy(resolver)
        self._conversion = conversion or ConversionEmitter(resolver, self._policy)

    def build(
        self,
        operation: OperationDescription,
        controller: str = "",
        method_name: str | None = None,
    ) -> OperationModel:
        model = self.materialize(self.describe(operation, controller, method_name))
        logger.debug("Built %s as %s -> %s", operation.display_name, model.method_name, model.result_annotation)
        return model

    def describe(
        self,
        operation: OperationDescription,
        controller: str = "",
        method_name: str | None = None,
    ) -> OperationModel:
        try:
            return self._describe(operation, controller, method_name or operation_method_name(operation))
        except ResolutionError as exc:
            if exc.context:
                raise
            raise exc.with_context(operation.display_name) from exc

    def materialize(self, model: OperationModel) -> OperationModel:
        parameters = tuple(self._materialize_parameter(parameter) for parameter in model.parameters)
        responses = tuple(self._materialize_response(response) for response in model.responses)
        default_response = None
        if model.default_response is not None:
            default_response = self._materialize_response(model.default_response)
        return replace(model, parameters=parameters, responses=responses, default_response=default_response)

    def _describe(self, operation: OperationDescription, controller: str, method_name: str) -> OperationModel:
        type_prefix = pascal_case(method_name)
        used_variables: set[str] = {"self"}
        parameters = [
            self._parameter_model(parameter, type_prefix, used_variables) for parameter in operation.parameters
        ]
        # Conversion targets are picked after every argument name is taken.
        parameters = [
            replace(parameter, data_variable=unique_name(f"{parameter.variable_name}_data", used_variables))
            for parameter in parameters
        ]
        responses = tuple(self._response_model(response, type_prefix) for response in operation.responses)
        default_response = None
        if operation.default_response is not None:
            default_response = self._response_model(operation.default_response, type_prefix)
        declared = _in_declaration_order(responses, default_response, operation.default_position)

        return OperationModel(
            operation_id=operation.operation_id,
            method=operation.method,
            path=operation.path,
            method_name=method_name,
            controller=controller,
            parameters=tuple(parameters),
            responses=responses,
            default_response=default_response,
            result_type=self._result_type(responses),
            exception_type=self._exception_type(declared),
            summary=operation.summary,
            default_position=operation.default_position,
        )

    def _parameter_model(
        self,
        parameter: ParameterDescription,
        type_prefix: str,
        used_variables: set[str],
    ) -> ParameterModel:
        nullable = self._parameter_nullable(parameter)
        if parameter.kind is ParameterKind.FILE:
            resolved = self._resolver.file_type(parameter.collection_format == "multi", nullable)
        else:
            resolved = self._resolver.resolve(parameter.shape, nullable, f"{type_prefix}{pascal_case(parameter.name)}")
        return ParameterModel(
            name=parameter.name,
            variable_name=unique_name(snake_case(parameter.name), used_variables),
            kind=parameter.kind,
            shape=parameter.shape,
            type=resolved,
            required=parameter.required,
            nullable=nullable,
            collection_format=parameter.collection_format,
            description=parameter.description,
        )

    def _response_model(self, response: ResponseDescription, type_prefix: str) -> ResponseModel:
        success = is_success_status(response.status_code)
        nullable = self._response_nullable(response)
        resolved = None
        if response.shape is not None:
            hint = f"{type_prefix}Response" if success else f"{type_prefix}Exception"
            resolved = self._resolver.resolve(response.shape, nullable, hint)
        return ResponseModel(
            status_code=response.status_code,
            shape=response.shape,
            type=resolved,
            nullable=nullable,
            is_success=success,
            description=response.description,
        )

    def _materialize_parameter(self, parameter: ParameterModel) -> ParameterModel:
        use_dto_class = self._policy.for_parameter(parameter.type)
        conversion = None
        if use_dto_class:
            conversion = self._conversion.emit_to_json(
                parameter.type,
                parameter.variable_name,
                parameter.data_variable or f"{parameter.variable_name}_data",
            )
        return replace(parameter, use_dto_class=use_dto_class, conversion=conversion)

    def _materialize_response(self, response: ResponseModel) -> ResponseModel:
        if response.shape is None:
            return response
        return replace(
            response,
            use_dto_class=self._policy.for_response(response.type),
            conversion=self._conversion.emit(
                response.shape,
                response.source_variable,
                response.target_variable,
                response.nullable,
            ),
        )

    def _result_type(self, responses: tuple[ResponseModel, ...]) -> ResolvedType | None:
        for response in responses:
            if response.is_success:
                return response.type
        return None

    def _exception_type(self, responses: list[ResponseModel]) -> ExceptionType:
        errors = [response for response in responses if not response.is_success]
        return ExceptionType(
            alternatives=tuple(response.type for response in errors if response.type is not None),
        )

    def _parameter_nullable(self, parameter: ParameterDescription) -> bool:
        if self._settings.null_handling is NullHandling.SWAGGER:
            if parameter.x_nullable is not None:
                return parameter.x_nullable
            return not parameter.required
        return self._resolver.is_nullable(parameter.shape)

    def _response_nullable(self, response: ResponseDescription) -> bool:
        if response.shape is None:
            return False
        if self._settings.null_handling is NullHandling.SWAGGER:
            if response.x_nullable is not None:
                return response.x_nullable
        return self._resolver.is_nullable(response.shape)


def _in_declaration_order(
    responses: tuple[ResponseModel, ...],
    default_response: ResponseModel | None,
    default_position: int | None,
) -> list[ResponseModel]:
    ordered = list(responses)
    if default_response is not None:
        ordered.insert(len(ordered) if default_position is None else default_position, default_response)
    return ordered
