"""Client class generation.

ClientGenerator orchestrates one generation run: it groups the described
operations into client classes, builds an OperationModel for each
operation, hands the assembled per-class model to a Renderer and merges
hand-written extension code into the rendered text.

Example:
    >>> generator = ClientGenerator(build_description(document))
    >>> source = generator.generate_file()
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from ...description import ApiDescription, OperationDescription
from ...errors import ClientforgeError, RenderingError
from ..conversion import ConversionEmitter
from ..extension import ExtensionCode
from ..models import build_type_models
from ..operations import OperationModelBuilder
from ..policy import MaterializationPolicy
from ..resolver import TypeResolver
from ..settings import GeneratorSettings
from ..templates import ClientTemplateModel, FileTemplateModel, PythonRenderer, Renderer
from .context import ClientOutput
from .helpers import group_operations, method_names

__all__ = [
    "ClientGenerator",
    "ClientOutput",
    "generate_client",
]

logger = logging.getLogger(__name__)

_Model = TypeVar("_Model")


class ClientGenerator:
    """Run-scoped client generator.

    Each instance owns its resolver, so one instance covers exactly one
    generation run over one description.
    """

    def __init__(
        self,
        description: ApiDescription,
        settings: GeneratorSettings | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.description = description
        self.settings = settings or GeneratorSettings()
        self.renderer = renderer or PythonRenderer(self.settings.profile)
        self.resolver = TypeResolver(description, self.settings)
        self.resolver.register_definitions()
        self.policy = MaterializationPolicy(self.resolver)
        self.conversion = ConversionEmitter(self.resolver, self.policy)
        self.builder = OperationModelBuilder(self.resolver, self.settings, self.policy, self.conversion)
        base_classes = frozenset([self.settings.client_base_class]) if self.settings.client_base_class else frozenset()
        self.extension_code = ExtensionCode(
            extension_classes=self.settings.extension_code,
            extended_classes=self.settings.extended_classes,
            base_classes=base_classes,
        )

    def generate_client_class(self, controller: str, operations: list[OperationDescription]) -> ClientOutput:
        names = method_names(operations, self.settings.operation_grouping)
        models = tuple(
            self.builder.build(operation, controller, name) for operation, name in zip(operations, names)
        )
        public_name = self.settings.client_class_name(controller)
        class_name = self.extension_code.class_name_for(public_name)
        template_model = ClientTemplateModel(
            class_name=class_name,
            controller=controller,
            operations=models,
            base_class=self.settings.client_base_class,
            base_path=self.description.base_path,
        )
        code = self._render(self.renderer.render_client, template_model, class_name)
        logger.debug("Emitted client %s with %d operations", class_name, len(models))
        return ClientOutput(
            class_name=class_name,
            controller=controller,
            operations=models,
            code=self.extension_code.append(public_name, code),
        )

    def generate_clients(self) -> list[ClientOutput]:
        grouped = group_operations(list(self.description.operations), self.settings.operation_grouping)
        return [self.generate_client_class(controller, operations) for controller, operations in grouped.items()]

    def generate_types(self) -> list[str]:
        """Render every type registered so far, bases first."""
        rendered: list[str] = []
        for model in build_type_models(self.resolver, self.conversion, self.extension_code):
            code = self._render(self.renderer.render_type, model, model.class_name)
            if model.class_name != model.name:
                code = self.extension_code.append(model.name, code)
            rendered.append(code)
        return rendered

    def generate_file(self) -> str:
        # Clients first: building operations registers inline types.
        clients = self.generate_clients()
        file_model = FileTemplateModel(
            title=self.description.title,
            base_class_code=tuple(self.extension_code.base_class_code()),
            types=tuple(self.generate_types()),
            clients=tuple(client.code for client in clients),
        )
        return self._render(self.renderer.render_file, file_model, self.description.title)

    def _render(self, render: Callable[[_Model], str], model: _Model, subject: str) -> str:
        try:
            return render(model)
        except ClientforgeError:
            raise
        except Exception as exc:
            raise RenderingError(f"Failed to render {subject}: {exc}") from exc


def generate_client(
    description: ApiDescription,
    settings: GeneratorSettings | None = None,
    renderer: Renderer | None = None,
) -> str:
    """Generate the complete client module for a description."""
    return ClientGenerator(description, settings, renderer).generate_file()
