from .client import ClientGenerator, ClientOutput, generate_client
from .conversion import ConversionCode, ConversionEmitter
from .extension import ExtensionCode
from .models import PropertyModel, TypeTemplateModel, build_type_models
from .operations import (
    ExceptionType,
    OperationModel,
    OperationModelBuilder,
    ParameterModel,
    ResponseModel,
)
from .policy import MaterializationPolicy
from .profile import GenerationProfile
from .resolver import NamedType, ResolvedType, TypeResolver
from .settings import GeneratorSettings, NullHandling, OperationGrouping, TypeStyle
from .templates import ClientTemplateModel, FileTemplateModel, PythonRenderer, Renderer

__all__ = [
    "ClientGenerator",
    "ClientOutput",
    "ClientTemplateModel",
    "ConversionCode",
    "ConversionEmitter",
    "ExceptionType",
    "ExtensionCode",
    "FileTemplateModel",
    "GenerationProfile",
    "GeneratorSettings",
    "MaterializationPolicy",
    "NamedType",
    "NullHandling",
    "OperationGrouping",
    "OperationModel",
    "OperationModelBuilder",
    "ParameterModel",
    "PropertyModel",
    "PythonRenderer",
    "Renderer",
    "ResolvedType",
    "ResponseModel",
    "TypeResolver",
    "TypeStyle",
    "TypeTemplateModel",
    "build_type_models",
    "generate_client",
]
