"""Tools for reading XML responses as a peekable stream of tag events.

Generated deserializers walk an :class:`XmlResponse` with the helpers in this
module. Every helper either consumes exactly what it promises or raises
:class:`~shapegen.runtime.errors.XmlParseError`.

Whitespace-only text, comments, processing instructions and the document
start are insignificant between elements: :func:`start_element`,
:func:`end_element` and :func:`peek_at_name` step over them.

Request payloads go the other way: generated serializers build the content
of an element as plain dicts, lists and strings and :func:`render_xml` turns
it into text with :mod:`xmltodict`.
"""

from __future__ import annotations

import dataclasses
import io
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any
from xml.dom import pulldom
from xml.sax import SAXParseException

import xmltodict

from shapegen.runtime.errors import XmlParseError

__all__ = [
    'XmlEventKind',
    'XmlEvent',
    'XmlResponse',
    'start_element',
    'end_element',
    'characters',
    'peek_at_name',
    'skip_tree',
    'string_field',
    'optional_string_field',
    'parse_int',
    'parse_float',
    'parse_bool',
    'render_xml',
]


class XmlEventKind(Enum):
    START_DOCUMENT = 'start_document'
    END_DOCUMENT = 'end_document'
    START_ELEMENT = 'start_element'
    END_ELEMENT = 'end_element'
    CHARACTERS = 'characters'
    OTHER = 'other'


_PULLDOM_KINDS = {
    pulldom.START_DOCUMENT: XmlEventKind.START_DOCUMENT,
    pulldom.END_DOCUMENT: XmlEventKind.END_DOCUMENT,
    pulldom.START_ELEMENT: XmlEventKind.START_ELEMENT,
    pulldom.END_ELEMENT: XmlEventKind.END_ELEMENT,
    pulldom.CHARACTERS: XmlEventKind.CHARACTERS,
}


@dataclasses.dataclass(frozen=True)
class XmlEvent:
    kind: XmlEventKind
    local_name: str | None = None
    data: str = ''
    attributes: dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def is_start_element(self) -> bool:
        return self.kind is XmlEventKind.START_ELEMENT

    @property
    def is_end_element(self) -> bool:
        return self.kind is XmlEventKind.END_ELEMENT

    @property
    def is_characters(self) -> bool:
        return self.kind is XmlEventKind.CHARACTERS

    @property
    def is_insignificant(self) -> bool:
        if self.kind is XmlEventKind.CHARACTERS:
            return not self.data.strip()
        return self.kind in (XmlEventKind.START_DOCUMENT, XmlEventKind.OTHER)


def _convert(event: str, node) -> XmlEvent:
    kind = _PULLDOM_KINDS.get(event, XmlEventKind.OTHER)
    if kind in (XmlEventKind.START_ELEMENT, XmlEventKind.END_ELEMENT):
        attributes = {}
        if kind is XmlEventKind.START_ELEMENT and node.attributes:
            for index in range(node.attributes.length):
                attr = node.attributes.item(index)
                attributes[attr.localName or attr.name] = attr.value
        return XmlEvent(kind, local_name=node.localName or node.tagName, attributes=attributes)
    if kind is XmlEventKind.CHARACTERS:
        return XmlEvent(kind, data=node.data)
    return XmlEvent(kind)


def _pulldom_events(body: bytes) -> Iterator[XmlEvent]:
    try:
        for event, node in pulldom.parse(io.BytesIO(body)):
            yield _convert(event, node)
    except SAXParseException as e:
        raise XmlParseError(f'Malformed XML: {e}') from e


class XmlResponse:
    """A peekable stream of :class:`XmlEvent` values.

    Example:
        >>> stack = XmlResponse.from_body('<A><B>1</B></A>')
        >>> stack.next().kind
        <XmlEventKind.START_DOCUMENT: 'start_document'>
        >>> peek_at_name(stack)
        'A'
    """

    _UNSET = object()

    def __init__(self, events: Iterable[XmlEvent]):
        self._events = iter(events)
        self._peeked = self._UNSET

    @classmethod
    def from_body(cls, body: str | bytes) -> 'XmlResponse':
        """Build a stream over a response body.

        Leading whitespace is dropped so that an XML declaration preceded by
        blank lines is still accepted.
        """
        if isinstance(body, str):
            body = body.encode('utf-8')
        return cls(_pulldom_events(body.lstrip()))

    def peek(self) -> XmlEvent | None:
        """Return the next event without consuming it, ``None`` at the end."""
        if self._peeked is self._UNSET:
            self._peeked = next(self._events, None)
        return self._peeked

    def next(self) -> XmlEvent | None:
        """Consume and return the next event, ``None`` at the end."""
        event = self.peek()
        self._peeked = self._UNSET
        return event

    def __iter__(self) -> Iterator[XmlEvent]:
        return self

    def __next__(self) -> XmlEvent:
        event = self.next()
        if event is None:
            raise StopIteration
        return event


def _skip_insignificant(stack: XmlResponse) -> None:
    event = stack.peek()
    while event is not None and event.is_insignificant:
        stack.next()
        event = stack.peek()


def start_element(element_name: str, stack: XmlResponse) -> dict[str, str]:
    """Consume a start tag named ``element_name`` and return its attributes."""
    _skip_insignificant(stack)
    event = stack.next()
    if event is None or not event.is_start_element:
        raise XmlParseError(f'Expected StartElement {element_name} got {event}')
    if event.local_name != element_name:
        raise XmlParseError(
            f'START Expected {element_name} got {event.local_name}'
        )
    return dict(event.attributes)


def end_element(element_name: str, stack: XmlResponse) -> None:
    """Consume an end tag named ``element_name``."""
    _skip_insignificant(stack)
    event = stack.next()
    if event is None or not event.is_end_element:
        raise XmlParseError(f'Expected EndElement {element_name} got {event}')
    if event.local_name != element_name:
        raise XmlParseError(f'END Expected {element_name} got {event.local_name}')


def characters(stack: XmlResponse) -> str:
    """Consume the character content of the current element.

    Adjacent text events are joined. An element with no content yields an
    empty string; a child element where text was expected is an error.
    """
    chunks = []
    event = stack.peek()
    while event is not None and event.is_characters:
        chunks.append(event.data)
        stack.next()
        event = stack.peek()
    if event is not None and event.is_start_element:
        raise XmlParseError(f'Expected characters got StartElement {event.local_name}')
    return ''.join(chunks)


def peek_at_name(stack: XmlResponse) -> str:
    """Return the name of the next start tag, or ``''`` if the next event is not one."""
    _skip_insignificant(stack)
    event = stack.peek()
    if event is not None and event.is_start_element:
        return event.local_name
    return ''


def skip_tree(stack: XmlResponse) -> None:
    """Consume a start tag and everything up to and including its end tag."""
    depth = 0
    while True:
        event = stack.next()
        if event is None:
            break
        if event.is_start_element:
            depth += 1
        elif event.is_end_element:
            if depth > 1:
                depth -= 1
            else:
                break


def string_field(name: str, stack: XmlResponse) -> str:
    """Return the text of a ``<name>text</name>`` element."""
    start_element(name, stack)
    value = characters(stack)
    end_element(name, stack)
    return value


def optional_string_field(field_name: str, stack: XmlResponse) -> str | None:
    """Parse a string field if the next tag has the right name, otherwise ``None``."""
    if peek_at_name(stack) == field_name:
        return string_field(field_name, stack)
    return None


def parse_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise XmlParseError(f'Expected an integer, got {text!r}') from None


def parse_float(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        raise XmlParseError(f'Expected a number, got {text!r}') from None


def parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value == 'true':
        return True
    if value == 'false':
        return False
    raise XmlParseError(f'Expected a boolean, got {text!r}')


def render_xml(name: str, content: Any) -> str:
    """Render the element ``name`` holding serializer ``content`` as XML text.

    ``content`` is text, a dict of child tags, or a list of such values
    written as repeated ``name`` elements.
    """
    return xmltodict.unparse(
        {name: content},
        full_document=False,
        short_empty_elements=True,
    )
