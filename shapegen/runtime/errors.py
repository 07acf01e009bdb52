"""Errors raised by generated clients."""

from __future__ import annotations

import xml.etree.ElementTree as ET

__all__ = ['XmlParseError', 'MissingParameterError', 'ServiceError']


class XmlParseError(Exception):
    """A response did not have the shape the deserializer expected.

    Raised for unexpected tags, malformed primitive text and truncated
    documents. The whole operation call fails; no partial result is returned.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingParameterError(ValueError):
    """A request member needed to build the request was not set.

    Attributes:
        member_name: The member of the request shape that was ``None``.
        location: Where the member was going to be placed (``uri``, ...).
    """

    def __init__(self, member_name: str, location: str):
        self.member_name = member_name
        self.location = location
        super().__init__(
            f"Member '{member_name}' is required to build the request {location}"
        )


class ServiceError(Exception):
    """Structured error built from a non-200 response body.

    Each generated client module subclasses this once per service. The body
    is kept verbatim; ``code``, ``message`` and ``request_id`` are extracted
    from the usual ``<Error>`` / ``<Errors><Error>`` envelopes when present.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        request_id: str | None = None,
        body: str = '',
    ):
        self.message = message
        self.code = code
        self.request_id = request_id
        self.body = body
        super().__init__(message)

    @classmethod
    def from_body(cls, body: str) -> 'ServiceError':
        try:
            root = ET.fromstring(body.strip())
        except ET.ParseError:
            return cls(body or 'Unknown error', body=body)

        code = _find_text(root, 'Code')
        message = _find_text(root, 'Message')
        request_id = _find_text(root, 'RequestId') or _find_text(root, 'RequestID')
        return cls(
            message or code or 'Unknown error',
            code=code,
            request_id=request_id,
            body=body,
        )


def _find_text(root: ET.Element, local_name: str) -> str | None:
    for element in root.iter():
        if element.tag.rsplit('}', 1)[-1] == local_name:
            return (element.text or '').strip()
    return None
