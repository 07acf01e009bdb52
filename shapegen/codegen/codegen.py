"""Code generation module for shapegen.

This module provides the main Codegen class that orchestrates the generation
of a Python client module from a service model.
"""

import ast
import logging
from concurrent.futures import ThreadPoolExecutor

from shapegen.codegen.ast_utils import _all, _docstring, _render
from shapegen.codegen.client import (
    error_type_names,
    generate_client_class,
    generate_error_classes,
)
from shapegen.codegen.emitter import CodeEmitter, FileEmitter
from shapegen.codegen.loader import ServiceLoader
from shapegen.codegen.protocol import GenerateProtocol, get_protocol
from shapegen.codegen.types import TypeGenerator
from shapegen.config import ServiceConfig
from shapegen.model import Service, Shape

logger = logging.getLogger(__name__)

__all__ = ['Codegen']


class Codegen:
    """Main code generator for creating Python clients from service models.

    This class orchestrates the entire code generation process, including:
    - Loading and validating the service model
    - Selecting the generator for the service's wire protocol
    - Assembling the client module from models, client class and support types
    - Writing the module, and optionally a test module, through an emitter

    The module is assembled in a fixed order: module docstring, protocol
    prelude, error classes, data types, client class, serializer and
    deserializer classes per shape in declaration order, model rebuilds and
    ``__all__``. Identical input yields byte-identical output.

    Attributes:
        config: The ServiceConfig containing source and output settings.
        max_workers: Threads used to generate support types, sequential
            when ``None`` or 1.

    Example:
        >>> from shapegen.config import ServiceConfig
        >>> from shapegen.codegen.codegen import Codegen
        >>>
        >>> config = ServiceConfig(source='models/s3.json', output='./s3')
        >>> Codegen(config).generate()
        ['./s3/client.py', './s3/__init__.py']
    """

    def __init__(
        self,
        config: ServiceConfig,
        loader: ServiceLoader | None = None,
        emitter: CodeEmitter | None = None,
        max_workers: int | None = None,
    ):
        """Initialize the code generator.

        Args:
            config: Configuration specifying source model and output location.
            loader: Optional custom service loader.
            emitter: Optional custom emitter. Defaults to a FileEmitter
                writing to ``config.output``.
            max_workers: Threads used to generate support types.
        """
        self.config = config
        self.max_workers = max_workers
        self._loader = loader or ServiceLoader()
        self._emitter = emitter
        self.service: Service | None = None

    @property
    def emitter(self) -> CodeEmitter:
        if self._emitter is None:
            self._emitter = FileEmitter(self.config.output)
        return self._emitter

    def _load_service(self) -> Service:
        self.service = self._loader.load(self.config.source)
        return self.service

    def protocol_for(self, service: Service) -> GenerateProtocol:
        """Return the protocol generator for a service.

        The configured protocol takes precedence over the one in the model
        metadata; configured root tag overrides extend the protocol's table.
        """
        name = self.config.protocol or service.metadata.protocol
        protocol = get_protocol(name, fixtures_dir=self.config.fixtures_dir)
        if self.config.root_tag_overrides:
            protocol.root_tags = protocol.root_tags.extended(
                self.config.root_tag_overrides
            )
        return protocol

    def generate_source(
        self, service: Service, protocol: GenerateProtocol | None = None
    ) -> str:
        """Generate the source of the client module for a service."""
        protocol = protocol or self.protocol_for(service)

        types = TypeGenerator(service, protocol).generate()
        sections = [
            _render([_docstring(self._module_docstring(service, protocol))]),
            protocol.generate_prelude(service),
            _render(generate_error_classes(service)),
        ]
        if types:
            sections.append(_render([t.implementation_ast for t in types]))
        sections.append(generate_client_class(service, protocol.generate_methods(service)))
        sections.extend(self._support_types(service, protocol))
        if types:
            sections.append(_render(TypeGenerator.model_rebuilds(types)))

        exports = [t.name for t in types]
        exports.extend(error_type_names(service))
        exports.append(service.client_type_name)
        sections.append(_render([_all(exports)]))

        logger.info(
            f'Generated {service.client_type_name} with {len(types)} models '
            f'and {len(service.operations)} operations'
        )
        return '\n\n\n'.join(section for section in sections if section) + '\n'

    def _support_types(self, service: Service, protocol: GenerateProtocol) -> list[str]:
        def generate(item: tuple[str, Shape]) -> str | None:
            shape_name, shape = item
            return protocol.generate_support_types(shape_name, shape, service)

        shapes = list(service.shapes.items())
        if self.max_workers and self.max_workers > 1:
            # map() yields in submission order, i.e. shape declaration order
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(generate, shapes))
        else:
            results = [generate(item) for item in shapes]
        return [source for source in results if source]

    def _module_docstring(self, service: Service, protocol: GenerateProtocol) -> str:
        full_name = service.metadata.service_full_name or service.service_type_name
        return (
            f'Client for {full_name} (API version {service.metadata.api_version}, '
            f'{protocol.name} protocol).\n\n'
            'Generated by shapegen. Do not edit.\n'
        )

    def generate_tests_source(
        self, service: Service, protocol: GenerateProtocol | None = None
    ) -> str | None:
        """Generate the test module for the client module, if samples match."""
        protocol = protocol or self.protocol_for(service)
        tests = protocol.generate_tests(service)
        if tests is None:
            return None

        # from .client import *
        star_import = ast.ImportFrom(
            module=self.config.module_name, names=[ast.alias(name='*')], level=1
        )
        return f'{_render([star_import])}\n{tests}\n'

    def generate(self) -> list[str]:
        """Load the service model and write the generated modules.

        Returns:
            The paths of the generated files.
        """
        service = self._load_service()
        protocol = self.protocol_for(service)

        output = self.config.output
        generated_files: list[str] = []

        module_name = self.config.module_name
        self.emitter.emit_module(self.generate_source(service, protocol), module_name)
        generated_files.append(f'{output}/{module_name}.py')

        if self.config.generate_tests:
            tests = self.generate_tests_source(service, protocol)
            if tests is None:
                logger.warning(
                    f'No sample responses in {self.config.fixtures_dir} match '
                    f'{service.service_type_name}; skipping test module'
                )
            else:
                self.emitter.emit_module(tests, f'test_{module_name}')
                generated_files.append(f'{output}/test_{module_name}.py')

        self.emitter.emit_init()
        generated_files.append(f'{output}/__init__.py')
        return generated_files
