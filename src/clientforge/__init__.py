from .description import ApiDescription, OperationDescription, ShapeDefinition, ShapeKind, build_description
from .errors import ClientforgeError, RenderingError, ResolutionError, SpecError
from .generation import (
    ClientGenerator,
    GenerationProfile,
    GeneratorSettings,
    NullHandling,
    OperationGrouping,
    PythonRenderer,
    TypeResolver,
    TypeStyle,
    generate_client,
)

__all__ = [
    "ApiDescription",
    "ClientGenerator",
    "ClientforgeError",
    "GenerationProfile",
    "GeneratorSettings",
    "NullHandling",
    "OperationDescription",
    "OperationGrouping",
    "PythonRenderer",
    "RenderingError",
    "ResolutionError",
    "ShapeDefinition",
    "ShapeKind",
    "SpecError",
    "TypeResolver",
    "TypeStyle",
    "build_description",
    "generate_client",
]
