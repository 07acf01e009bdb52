"""Protocol strategy interface.

A generated client module is the concatenation of protocol-independent parts
(data types, error classes, the client class shell) and the parts that depend
on how a service talks on the wire. :class:`GenerateProtocol` is the seam for
the latter; one subclass exists per supported wire protocol.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from shapegen.codegen.quirks import RootTagTable
from shapegen.exceptions import UnsupportedFeatureError
from shapegen.model import Service, Shape

logger = logging.getLogger(__name__)

__all__ = ['GenerateProtocol', 'get_protocol', 'PROTOCOL_NAMES']


class GenerateProtocol(ABC):
    """Generates the protocol-specific parts of a client module.

    Every method returns Python source text. None of them may modify the
    service model, and for identical input they must return identical text.
    """

    #: Name the protocol is selected by.
    name: str
    #: Root tag table used to find the response element of an operation.
    root_tags: RootTagTable

    @abstractmethod
    def generate_methods(self, service: Service) -> str:
        """Return the client methods, one per operation, in declaration order.

        The text is indented for inclusion in the client class body.
        """

    @abstractmethod
    def generate_prelude(self, service: Service) -> str:
        """Return the imports and module-level declarations the methods and
        support types rely on. Emitted once per generated module."""

    @abstractmethod
    def generate_struct_attributes(self, type_name: str) -> str:
        """Return the statements every generated data type body starts with.

        Args:
            type_name: The Python class name of the data type.
        """

    @abstractmethod
    def generate_support_types(
        self, shape_name: str, shape: Shape, service: Service
    ) -> str | None:
        """Return the serializer and/or deserializer classes for one shape.

        Returns:
            The source text, or ``None`` when no operation needs to serialize
            or deserialize values of this shape.
        """

    @abstractmethod
    def timestamp_type(self) -> str:
        """Return the annotation used for timestamp members."""

    @abstractmethod
    def generate_tests(self, service: Service) -> str | None:
        """Return pytest functions driven by recorded sample responses.

        Returns:
            The source text, or ``None`` when no recorded response matches an
            operation of the service.
        """


PROTOCOL_NAMES = {
    'ec2': 'query',
    'query': 'query',
    'rest-xml': 'rest-xml',
}


def get_protocol(
    name: str, fixtures_dir: str | Path | None = None, **kwargs
) -> GenerateProtocol:
    """Return the generator for a service's metadata protocol.

    Args:
        name: The protocol from the service metadata, e.g. ``ec2`` or
            ``rest-xml``.
        fixtures_dir: Directory of recorded sample responses for
            :meth:`GenerateProtocol.generate_tests`.
        **kwargs: Passed to the generator, e.g. ``root_tags``.

    Raises:
        UnsupportedFeatureError: If there is no generator for the protocol.
    """
    # Imported here: both generators import this module.
    from shapegen.codegen.query import QueryGenerator
    from shapegen.codegen.rest_xml import RestXmlGenerator

    canonical = PROTOCOL_NAMES.get(name)
    if canonical is None:
        raise UnsupportedFeatureError(
            f"protocol '{name}'",
            f'Supported protocols: {", ".join(sorted(PROTOCOL_NAMES))}',
        )

    logger.debug(f'Using {canonical} generator for protocol {name}')
    if canonical == 'query':
        return QueryGenerator(fixtures_dir=fixtures_dir, **kwargs)
    return RestXmlGenerator(fixtures_dir=fixtures_dir, **kwargs)
