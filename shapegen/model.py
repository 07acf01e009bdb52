"""Service model: the shape graph and operation list a client is generated from.

The models mirror the botocore service description format (``metadata``,
``operations`` and ``shapes``) closely enough that a botocore JSON document
validates directly into a :class:`Service`. All models are frozen: the graph
is built once by the loader and only read during generation.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shapegen.exceptions import ModelReferenceError

__all__ = [
    'ShapeType',
    'Location',
    'Member',
    'Shape',
    'HttpDescriptor',
    'ShapeRef',
    'Operation',
    'Metadata',
    'Service',
]

_PLACEHOLDER_RE = re.compile(r'\{([^}]+)\}')
_SERVICE_NAME_PREFIXES = ('Amazon ', 'AWS ')


class ShapeType(Enum):
    """Kinds of shapes the generators know a rule for."""

    structure = 'structure'
    list = 'list'
    map = 'map'
    string = 'string'
    integer = 'integer'
    long = 'long'
    double = 'double'
    float = 'float'
    boolean = 'boolean'
    blob = 'blob'
    timestamp = 'timestamp'

    @property
    def is_primitive(self) -> bool:
        return self not in (ShapeType.structure, ShapeType.list, ShapeType.map)


class Location(Enum):
    """Where a member travels on the wire."""

    uri = 'uri'
    header = 'header'
    headers = 'headers'
    querystring = 'querystring'
    status_code = 'statusCode'
    body = 'body'


class _ModelBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')


class Member(_ModelBase):
    """A typed reference to another shape plus its wire metadata."""

    shape: str
    location: Optional[Location] = None
    location_name: Optional[str] = Field(None, alias='locationName')
    streaming: bool = False
    deprecated: bool = False
    documentation: Optional[str] = None

    def tag_name(self, default: str) -> str:
        """Return the wire-visible name, falling back to ``default``."""
        return self.location_name or default


class Shape(_ModelBase):
    """A named type in the shape graph.

    Unknown ``type`` values are kept as plain strings so that the generators,
    not the loader, decide whether they have a rule for them.
    """

    shape_type: ShapeType | str = Field(
        ..., alias='type', union_mode='left_to_right'
    )
    members: Optional[dict[str, Member]] = None
    required_members: list[str] = Field(default_factory=list, alias='required')
    member: Optional[Member] = None
    key: Optional[Member] = None
    value: Optional[Member] = None
    payload: Optional[str] = None
    streaming: bool = False
    documentation: Optional[str] = None

    def required(self, member_name: str) -> bool:
        return member_name in self.required_members

    @property
    def is_structure(self) -> bool:
        return self.shape_type is ShapeType.structure

    def iter_members(self, include_deprecated: bool = False):
        """Yield ``(name, member)`` pairs in declaration order."""
        for name, member in (self.members or {}).items():
            if member.deprecated and not include_deprecated:
                continue
            yield name, member


class HttpDescriptor(_ModelBase):
    method: str = 'POST'
    request_uri: str = Field('/', alias='requestUri')

    def placeholders(self) -> list[str]:
        """Return the URI labels in template order, greedy markers removed."""
        return [label.rstrip('+') for label in _PLACEHOLDER_RE.findall(self.request_uri)]


class ShapeRef(_ModelBase):
    shape: str


class Operation(_ModelBase):
    """One remote procedure of a service."""

    name: str
    documentation: Optional[str] = None
    http: HttpDescriptor = Field(default_factory=HttpDescriptor)
    input: Optional[ShapeRef] = None
    output: Optional[ShapeRef] = None
    errors: list[ShapeRef] = Field(default_factory=list)
    error_type: Optional[str] = None

    def error_type_name(self, service: 'Service') -> str:
        return self.error_type or service.error_type_name


class Metadata(_ModelBase):
    endpoint_prefix: str = Field(..., alias='endpointPrefix')
    api_version: str = Field(..., alias='apiVersion')
    protocol: str = 'query'
    service_full_name: Optional[str] = Field(None, alias='serviceFullName')
    service_abbreviation: Optional[str] = Field(None, alias='serviceAbbreviation')
    signing_name: Optional[str] = Field(None, alias='signingName')
    xml_namespace: Optional[str] = Field(None, alias='xmlNamespace')


class Service(_ModelBase):
    """One remote API: metadata, operations and the shape registry."""

    metadata: Metadata
    operations: dict[str, Operation] = Field(default_factory=dict)
    shapes: dict[str, Shape] = Field(default_factory=dict)
    documentation: Optional[str] = None

    def shape(self, name: str, referrer: str | None = None) -> Shape:
        """Look up a shape by name."""
        try:
            return self.shapes[name]
        except KeyError:
            raise ModelReferenceError(name, referrer) from None

    def input_shape(self, operation: Operation) -> Shape | None:
        if operation.input is None:
            return None
        return self.shape(operation.input.shape, operation.name)

    def output_shape(self, operation: Operation) -> Shape | None:
        if operation.output is None:
            return None
        return self.shape(operation.output.shape, operation.name)

    @property
    def service_type_name(self) -> str:
        """Short PascalCase service name, e.g. ``S3`` for "Amazon S3"."""
        name = (
            self.metadata.service_abbreviation
            or self.metadata.service_full_name
            or self.metadata.endpoint_prefix
        )
        for prefix in _SERVICE_NAME_PREFIXES:
            if name.startswith(prefix):
                name = name[len(prefix) :]
        parts = re.split(r'[^A-Za-z0-9]+', name)
        return ''.join(part[:1].upper() + part[1:] for part in parts if part)

    @property
    def client_type_name(self) -> str:
        return f'{self.service_type_name}Client'

    @property
    def error_type_name(self) -> str:
        return f'{self.service_type_name}Error'
