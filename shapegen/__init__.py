"""shapegen - Generate Python clients from botocore-style service models.

shapegen reads a service description (a graph of named shapes plus a list of
operations) and emits a single client module for it: pydantic models for the
structure shapes, a client class with one method per operation and the
serializer and deserializer classes the methods use. The query (including
ec2) and rest-xml wire protocols are supported.

Quick Start:
    >>> from shapegen import Codegen, ServiceConfig
    >>>
    >>> config = ServiceConfig(
    ...     source='./models/ec2-2016-11-15.json',
    ...     output='./ec2_client'
    ... )
    >>> codegen = Codegen(config)
    >>> codegen.generate()

CLI Usage:
    $ shapegen generate --config shapegen.yaml
    $ shapegen validate ./models/s3-2006-03-01.json
"""

from shapegen.codegen.codegen import Codegen
from shapegen.codegen.loader import ServiceLoader
from shapegen.codegen.types import TypeGenerator
from shapegen.config import CodegenConfig, ServiceConfig, get_config
from shapegen.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    ModelError,
    ModelLoadError,
    ModelReferenceError,
    ModelValidationError,
    OperationGenerationError,
    OutputError,
    ShapegenError,
    UnsupportedFeatureError,
    UnsupportedShapeError,
)

__all__ = [
    # Main classes
    'Codegen',
    'ServiceLoader',
    'TypeGenerator',
    # Configuration
    'CodegenConfig',
    'ServiceConfig',
    'get_config',
    # Exceptions
    'ShapegenError',
    'ModelError',
    'ModelLoadError',
    'ModelValidationError',
    'ModelReferenceError',
    'CodeGenerationError',
    'UnsupportedShapeError',
    'OperationGenerationError',
    'ConfigurationError',
    'OutputError',
    'UnsupportedFeatureError',
]

from shapegen._version import version as __version__
