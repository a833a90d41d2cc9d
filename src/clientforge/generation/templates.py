"""Rendering of generation models into Python source.

The generation engine hands finished models to a Renderer and never
inspects the text it gets back. PythonRenderer is the default Renderer; it
emits a single self-contained module with dataclass DTOs for nominal types,
TypedDicts for structural ones, and one client class per controller that
talks to an injected ``Transport``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..description import ParameterKind, ShapeKind
from .models import PropertyModel, TypeTemplateModel
from .operations import OperationModel, ParameterModel, ResponseModel
from .profile import GenerationProfile
from .settings import TypeStyle

_SEPARATORS = {"csv": ",", "ssv": " ", "tsv": "\t", "pipes": "|"}


@dataclass(frozen=True)
class ClientTemplateModel:
    """Everything needed to render one client class.

    Attributes:
        class_name: Emitted class name (already renamed when extended)
        controller: Grouping key the operations share
        operations: Finished operation models, in document order
        base_class: Base class of the client, if configured
        base_path: Prefix of every operation path
    """

    class_name: str
    controller: str
    operations: tuple[OperationModel, ...]
    base_class: str | None = None
    base_path: str = ""


@dataclass(frozen=True)
class FileTemplateModel:
    title: str
    base_class_code: tuple[str, ...]
    types: tuple[str, ...]
    clients: tuple[str, ...]


class Renderer(Protocol):
    def render_client(self, model: ClientTemplateModel) -> str:
        ...

    def render_type(self, model: TypeTemplateModel) -> str:
        ...

    def render_file(self, model: FileTemplateModel) -> str:
        ...


class PythonRenderer:
    def __init__(self, profile: GenerationProfile) -> None:
        self._profile = profile

    def render_file(self, model: FileTemplateModel) -> str:
        sections = ["\n".join(self._prelude(model.title))]
        sections.extend(code.strip("\n") for code in model.base_class_code)
        sections.extend(code.strip("\n") for code in model.types)
        sections.extend(code.strip("\n") for code in model.clients)
        return "\n\n\n".join(section for section in sections if section) + "\n"

    def render_type(self, model: TypeTemplateModel) -> str:
        if model.kind is ShapeKind.ENUM:
            literals = ", ".join(repr(value) for value in model.enum_values)
            return f"{model.class_name} = Literal[{literals}]"
        if model.style is TypeStyle.STRUCTURAL:
            return "\n".join(self._typed_dict(model))
        return "\n".join(self._dataclass(model))

    def render_client(self, model: ClientTemplateModel) -> str:
        base = f"({model.base_class})" if model.base_class else ""
        lines = [
            f"class {model.class_name}{base}:",
            "    def __init__(self, transport: Transport, base_url: str = '') -> None:",
            "        self.transport = transport",
            "        self.base_url = base_url.rstrip('/')",
        ]
        for operation in model.operations:
            lines.append("")
            lines.extend(self._operation_method(operation, model.base_path))
            lines.append("")
            lines.extend(self._process_method(operation))
        return "\n".join(lines)

    def _prelude(self, title: str) -> list[str]:
        profile = self._profile
        lines = [f"# Generated by clientforge from {title!r}. Do not edit by hand."]
        lines.append("# ruff: noqa: F401")
        lines.append("from __future__ import annotations")
        lines.append("")
        lines.append("from collections.abc import Mapping, Sequence")
        lines.append("from dataclasses import dataclass")
        lines.append("from typing import Any, BinaryIO, Literal, Optional, Protocol, Union")
        if profile.use_typing_extensions:
            lines.append("from typing_extensions import Required, TypedDict")
        else:
            lines.append("from typing import Required, TypedDict")
        lines.append("from urllib.parse import quote")
        lines.append("")
        json_members = ["bool", "int", "float", "str", "None", "Sequence['JsonValue']", "Mapping[str, 'JsonValue']"]
        lines.append(f"JsonValue = {profile.union(json_members)}")
        lines.append("")
        lines.append("")
        lines.append("@dataclass")
        lines.append("class FileParameter:")
        lines.append(f"    data: {profile.union(['bytes', 'BinaryIO'])}")
        lines.append(f"    file_name: {profile.optional('str')} = None")
        lines.append(f"    content_type: {profile.optional('str')} = None")
        lines.append("")
        lines.append("")
        lines.append("class ApiException(Exception):")
        lines.append("    def __init__(self, message: str, status: int, response: str, result: object = None) -> None:")
        lines.append("        super().__init__(f'{message} (HTTP {status})')")
        lines.append("        self.status = status")
        lines.append("        self.response = response")
        lines.append("        self.result = result")
        lines.append("")
        lines.append("")
        lines.append("class TransportResponse(Protocol):")
        lines.append("    status_code: int")
        lines.append("    text: str")
        lines.append("")
        lines.append("    def json(self) -> Any:")
        lines.append("        ...")
        lines.append("")
        lines.append("")
        lines.append("class Transport(Protocol):")
        lines.append("    def send(")
        lines.append("        self,")
        lines.append("        method: str,")
        lines.append("        url: str,")
        lines.append("        *,")
        lines.append("        params: Sequence[tuple[str, object]],")
        lines.append("        headers: Mapping[str, str],")
        lines.append("        json: object,")
        lines.append("        data: Mapping[str, object],")
        lines.append("        files: Sequence[tuple[str, FileParameter]],")
        lines.append("    ) -> TransportResponse:")
        lines.append("        ...")
        return lines

    def _typed_dict(self, model: TypeTemplateModel) -> list[str]:
        lines = [f"{model.class_name} = TypedDict(", f"    {model.class_name!r},", "    {"]
        for prop in model.properties:
            lines.append(f"        {prop.name!r}: {_typed_dict_value(prop)},")
        lines.extend(["    },", "    total=False,", ")"])
        return lines

    def _dataclass(self, model: TypeTemplateModel) -> list[str]:
        kw_only = self._profile.use_kw_only_dataclasses
        base = f"({model.base})" if model.base else ""
        lines = ["@dataclass(kw_only=True)" if kw_only else "@dataclass", f"class {model.class_name}{base}:"]
        if model.description:
            lines.extend([f"    {_docstring(model.description)}", ""])
        for prop in model.properties:
            lines.append(f"    {self._field(prop, kw_only)}")
        if model.properties:
            lines.append("")

        if model.base is None:
            lines.extend(
                [
                    "    @classmethod",
                    f"    def from_dict(cls, data: Mapping[str, Any]) -> {model.class_name}:",
                    "        return cls(**cls._values_from_dict(data))",
                    "",
                ]
            )
        lines.append("    @classmethod")
        lines.append("    def _values_from_dict(cls, data: Mapping[str, Any]) -> dict[str, Any]:")
        if model.base is None:
            lines.append("        values: dict[str, Any] = {}")
        else:
            lines.append("        values = super()._values_from_dict(data)")
        for prop in model.properties:
            lines.append(f"        values[{prop.field_name!r}] = {prop.from_json}")
        lines.append("        return values")
        lines.append("")
        lines.append("    def to_dict(self) -> dict[str, Any]:")
        if model.base is None:
            lines.append("        data: dict[str, Any] = {}")
        else:
            lines.append("        data = super().to_dict()")
        for prop in model.properties:
            lines.append(f"        data[{prop.name!r}] = {prop.to_json}")
        lines.append("        return data")
        return lines

    def _field(self, prop: PropertyModel, kw_only: bool) -> str:
        if prop.required and kw_only:
            return f"{prop.field_name}: {prop.annotation}"
        annotation = prop.annotation
        if prop.required:
            annotation = self._profile.optional(annotation)
        return f"{prop.field_name}: {annotation} = None"

    def _operation_method(self, operation: OperationModel, base_path: str) -> list[str]:
        signature = ", ".join(["self", *self._arguments(operation)])
        lines = [f"    def {operation.method_name}({signature}) -> {operation.result_annotation}:"]
        lines.extend(self._method_docstring(operation))
        path = base_path.rstrip("/") + operation.path
        lines.append(f"        url_ = self.base_url + {path!r}")
        for parameter in operation.parameters_of(ParameterKind.PATH):
            placeholder = "{" + parameter.name + "}"
            lines.append(
                f"        url_ = url_.replace({placeholder!r}, quote(str({parameter.variable_name}), safe=''))"
            )
        lines.append("        query_: list[tuple[str, object]] = []")
        for parameter in operation.parameters_of(ParameterKind.QUERY):
            lines.extend(_guarded(parameter, _query_statements(parameter)))
        lines.append("        headers_: dict[str, str] = {'Accept': 'application/json'}")
        for parameter in operation.parameters_of(ParameterKind.HEADER):
            value = _header_value(parameter)
            lines.extend(_guarded(parameter, [f"headers_[{parameter.name!r}] = {value}"]))
        lines.append("        content_: object = None")
        for parameter in operation.parameters_of(ParameterKind.BODY):
            if parameter.conversion is not None:
                statements = [*parameter.conversion.lines, f"content_ = {parameter.conversion.target}"]
            else:
                statements = [f"content_ = {parameter.variable_name}"]
            lines.extend(_guarded(parameter, statements))
        lines.append("        form_: dict[str, object] = {}")
        for parameter in operation.parameters_of(ParameterKind.FORM):
            lines.extend(_guarded(parameter, [f"form_[{parameter.name!r}] = {parameter.variable_name}"]))
        lines.append("        files_: list[tuple[str, FileParameter]] = []")
        for parameter in operation.parameters_of(ParameterKind.FILE):
            if parameter.is_array:
                statement = f"files_.extend(({parameter.name!r}, item) for item in {parameter.variable_name})"
            else:
                statement = f"files_.append(({parameter.name!r}, {parameter.variable_name}))"
            lines.extend(_guarded(parameter, [statement]))
        lines.append("        response_ = self.transport.send(")
        lines.append(f"            {operation.method.upper()!r},")
        lines.append("            url_,")
        lines.append("            params=query_,")
        lines.append("            headers=headers_,")
        lines.append("            json=content_,")
        lines.append("            data=form_,")
        lines.append("            files=files_,")
        lines.append("        )")
        lines.append(f"        return self._process_{operation.method_name}(response_)")
        return lines

    def _arguments(self, operation: OperationModel) -> list[str]:
        required: list[str] = []
        optional: list[str] = []
        for parameter in operation.parameters:
            annotation = parameter.type.annotation
            if parameter.required and not parameter.nullable:
                required.append(f"{parameter.variable_name}: {annotation}")
                continue
            if not parameter.type.nullable:
                annotation = self._profile.optional(annotation)
            optional.append(f"{parameter.variable_name}: {annotation} = None")
        return required + optional

    def _method_docstring(self, operation: OperationModel) -> list[str]:
        summary = operation.summary or f"{operation.method.upper()} {operation.path}"
        lines = ['        """' + _escape_docstring(summary)]
        lines.append("")
        lines.append("        Raises:")
        lines.append(f"            ApiException: Error payload is {operation.exception_type.render(self._profile)}.")
        lines.append('        """')
        return lines

    def _process_method(self, operation: OperationModel) -> list[str]:
        lines = [
            f"    def _process_{operation.method_name}(self, response: TransportResponse) -> {operation.result_annotation}:",
            "        status = response.status_code",
        ]
        for response in operation.responses:
            lines.append(f"        if {_status_condition(response.status_code)}:")
            lines.extend(f"            {line}" for line in _response_body(response))
        if operation.default_response is not None:
            lines.extend(f"        {line}" for line in _response_body(operation.default_response))
        else:
            lines.append("        raise ApiException('An unexpected server error occurred.', status, response.text)")
        return lines


def _typed_dict_value(prop: PropertyModel) -> str:
    annotation = repr(prop.annotation) if prop.refers_generated else prop.annotation
    if prop.required:
        return f"Required[{annotation}]"
    return annotation


def _docstring(text: str) -> str:
    return f'"""{_escape_docstring(text)}"""'


def _escape_docstring(text: str) -> str:
    return text.strip().replace("\\", "\\\\").replace('"', '\\"')


def _guarded(parameter: ParameterModel, statements: list[str]) -> list[str]:
    if parameter.required and not parameter.nullable:
        return [f"        {statement}" for statement in statements]
    lines = [f"        if {parameter.variable_name} is not None:"]
    lines.extend(f"            {statement}" for statement in statements)
    return lines


def _query_statements(parameter: ParameterModel) -> list[str]:
    name = parameter.name
    variable = parameter.variable_name
    if parameter.is_array:
        if parameter.collection_format == "multi":
            return [f"query_.extend(({name!r}, item) for item in {variable})"]
        separator = _SEPARATORS.get(parameter.collection_format or "csv", ",")
        return [f"query_.append(({name!r}, {separator!r}.join(str(item) for item in {variable})))"]
    return [f"query_.append(({name!r}, {variable}))"]


def _header_value(parameter: ParameterModel) -> str:
    if parameter.is_array:
        separator = _SEPARATORS.get(parameter.collection_format or "csv", ",")
        return f"{separator!r}.join(str(item) for item in {parameter.variable_name})"
    return f"str({parameter.variable_name})"


def _status_condition(status_code: str) -> str:
    if status_code.isdigit():
        return f"status == {int(status_code)}"
    return f"status // 100 == {int(status_code[0])}"


def _response_body(response: ResponseModel) -> list[str]:
    message = response.description or f"HTTP status {response.status_code}"
    if not response.has_type:
        if response.is_success:
            return ["return None"]
        return [f"raise ApiException({message!r}, status, response.text)"]
    lines = [f"{response.source_variable} = response.json()"]
    value = response.source_variable
    if response.conversion is not None:
        lines.extend(response.conversion.lines)
        value = response.conversion.target
    if response.is_success:
        lines.append(f"return {value}")
    else:
        lines.append(f"raise ApiException({message!r}, status, response.text, {value})")
    return lines
