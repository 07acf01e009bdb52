"""Code generation module for shapegen.

This module provides the core code generation functionality for creating
Python client code from service models.

Main Components:
    - Codegen: The main orchestrator for code generation
    - ServiceLoader: Loads service models from URLs or files
    - GenerateProtocol: Protocol-specific generation (query, rest-xml)
    - TypeGenerator: Generates pydantic models from structure shapes
    - CodeEmitter: Handles output of generated code

Example:
    >>> from shapegen.codegen import Codegen
    >>> from shapegen.config import ServiceConfig
    >>>
    >>> config = ServiceConfig(source='./s3.json', output='./s3_client')
    >>> codegen = Codegen(config)
    >>> codegen.generate()
"""

from shapegen.codegen.ast_utils import ImportCollector
from shapegen.codegen.codegen import Codegen
from shapegen.codegen.emitter import CodeEmitter, FileEmitter, StringEmitter
from shapegen.codegen.loader import ServiceLoader, check_references
from shapegen.codegen.protocol import GenerateProtocol, get_protocol
from shapegen.codegen.query import QueryGenerator
from shapegen.codegen.quirks import (
    QUERY_ROOT_TAGS,
    REST_XML_ROOT_TAGS,
    RootTagTable,
    derive_root_tag,
)
from shapegen.codegen.rest_xml import RestXmlGenerator
from shapegen.codegen.types import Type, TypeGenerator

__all__ = [
    'Codegen',
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
    'ImportCollector',
    'ServiceLoader',
    'check_references',
    'GenerateProtocol',
    'get_protocol',
    'QueryGenerator',
    'RestXmlGenerator',
    'RootTagTable',
    'derive_root_tag',
    'QUERY_ROOT_TAGS',
    'REST_XML_ROOT_TAGS',
    'Type',
    'TypeGenerator',
]
