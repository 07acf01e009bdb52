"""Shape-graph helpers shared by the type generator and both protocols.

Everything here resolves shapes by name through the service's shape
registry; nothing inlines or copies shapes, so mutually recursive shapes are
fine as long as the recursion passes through a structure.
"""

import ast
import threading
import weakref
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

from shapegen.codegen.ast_utils import _attr, _call, _name, _subscript
from shapegen.codegen.utils import capitalize_first, type_name
from shapegen.exceptions import CodeGenerationError, UnsupportedShapeError
from shapegen.model import Member, Service, Shape, ShapeType

__all__ = [
    'MemberFilter',
    'shape_type_name',
    'reserved_type_names',
    'annotation_for',
    'primitive_to_text',
    'text_to_primitive',
    'header_to_text',
    'header_from_text',
    'reachable_shapes',
    'query_wire_name',
    'list_element_tag',
    'map_entry_tags',
    'ServiceCache',
]

MemberFilter = Callable[[Shape, str, Member], bool]
T = TypeVar('T')

_NUMERIC_TYPES = (ShapeType.integer, ShapeType.long, ShapeType.float, ShapeType.double)

_PRIMITIVE_ANNOTATIONS = {
    ShapeType.string: 'str',
    ShapeType.integer: 'int',
    ShapeType.long: 'int',
    ShapeType.float: 'float',
    ShapeType.double: 'float',
    ShapeType.boolean: 'bool',
    ShapeType.blob: 'bytes',
}


def reserved_type_names(service: Service) -> frozenset[str]:
    """Class names the generated module defines besides the shape models."""
    names = {service.client_type_name, service.error_type_name}
    for operation in service.operations.values():
        names.add(operation.error_type_name(service))
    return frozenset(names)


def shape_type_name(service: Service, shape_name: str) -> str:
    return type_name(shape_name, reserved_type_names(service))


def _shape_kind(shape_name: str, shape: Shape, rule: str) -> ShapeType:
    if not isinstance(shape.shape_type, ShapeType):
        raise UnsupportedShapeError(shape_name, str(shape.shape_type), rule)
    return shape.shape_type


def annotation_for(
    service: Service,
    shape_name: str,
    timestamp_type: str,
    _seen: tuple[str, ...] = (),
) -> ast.expr:
    """Annotation expression for values of a shape.

    Structures are referenced by class name; lists, maps and primitives are
    spelled out (``list[Bucket]``, ``dict[str, str]``, ``int``).
    """
    shape = service.shape(shape_name)
    kind = _shape_kind(shape_name, shape, 'annotation')

    if kind is ShapeType.structure:
        return _name(shape_type_name(service, shape_name))

    if shape_name in _seen:
        raise CodeGenerationError(
            'Collection shapes reference each other without a structure in between',
            context=' -> '.join(_seen + (shape_name,)),
        )
    seen = _seen + (shape_name,)

    if kind is ShapeType.list:
        return _subscript(
            'list', annotation_for(service, shape.member.shape, timestamp_type, seen)
        )
    if kind is ShapeType.map:
        return _subscript(
            'dict',
            ast.Tuple(
                elts=[
                    annotation_for(service, shape.key.shape, timestamp_type, seen),
                    annotation_for(service, shape.value.shape, timestamp_type, seen),
                ],
                ctx=ast.Load(),
            ),
        )
    if kind is ShapeType.timestamp:
        return _name(timestamp_type)
    return _name(_PRIMITIVE_ANNOTATIONS[kind])


def primitive_to_text(shape_name: str, shape: Shape, value: ast.expr) -> ast.expr:
    """Expression rendering a primitive value as wire text."""
    kind = _shape_kind(shape_name, shape, 'primitive serializer')

    if kind in (ShapeType.string, ShapeType.timestamp):
        return value
    if kind in _NUMERIC_TYPES:
        return _call(_name('str'), [value])
    if kind is ShapeType.boolean:
        return ast.IfExp(
            test=value, body=ast.Constant('true'), orelse=ast.Constant('false')
        )
    if kind is ShapeType.blob:
        # Blobs travel as UTF-8 text, not as a binary-safe encoding.
        return _call(_attr(value, 'decode'), [ast.Constant('utf-8')])
    raise UnsupportedShapeError(shape_name, kind.value, 'primitive serializer')


def text_to_primitive(shape_name: str, shape: Shape, text: ast.expr) -> ast.expr:
    """Expression converting wire text into a primitive value."""
    kind = _shape_kind(shape_name, shape, 'primitive deserializer')

    if kind in (ShapeType.string, ShapeType.timestamp):
        return text
    if kind in (ShapeType.integer, ShapeType.long):
        return _call(_name('parse_int'), [text])
    if kind in (ShapeType.float, ShapeType.double):
        return _call(_name('parse_float'), [text])
    if kind is ShapeType.boolean:
        return _call(_name('parse_bool'), [text])
    if kind is ShapeType.blob:
        return _call(_attr(text, 'encode'), [ast.Constant('utf-8')])
    raise UnsupportedShapeError(shape_name, kind.value, 'primitive deserializer')


def _element_shape(service: Service, shape_name: str) -> tuple[str, Shape] | None:
    shape = service.shape(shape_name)
    if shape.shape_type is not ShapeType.list:
        return None
    element = shape.member.shape
    return element, service.shape(element)


def header_to_text(service: Service, shape_name: str, value: ast.expr) -> ast.expr:
    """Expression rendering a header or query string value as text.

    Lists travel as one comma-separated value.
    """
    element = _element_shape(service, shape_name)
    if element is None:
        return primitive_to_text(shape_name, service.shape(shape_name), value)

    text = primitive_to_text(*element, _name('element'))
    if isinstance(text, ast.Name):
        joined = value
    else:
        joined = ast.ListComp(
            elt=text,
            generators=[
                ast.comprehension(
                    target=ast.Name(id='element', ctx=ast.Store()),
                    iter=value,
                    ifs=[],
                    is_async=0,
                )
            ],
        )
    return _call(_attr(ast.Constant(','), 'join'), [joined])


def header_from_text(service: Service, shape_name: str, text: ast.expr) -> ast.expr:
    """Expression converting header text into a value, splitting lists on commas."""
    element = _element_shape(service, shape_name)
    if element is None:
        return text_to_primitive(shape_name, service.shape(shape_name), text)

    part = _call(_attr('part', 'strip'))
    return ast.ListComp(
        elt=text_to_primitive(*element, part),
        generators=[
            ast.comprehension(
                target=ast.Name(id='part', ctx=ast.Store()),
                iter=_call(_attr(text, 'split'), [ast.Constant(',')]),
                ifs=[],
                is_async=0,
            )
        ],
    )


def _include_all(shape: Shape, member_name: str, member: Member) -> bool:
    return True


def reachable_shapes(
    service: Service,
    roots: Iterable[str],
    member_filter: MemberFilter = _include_all,
) -> set[str]:
    """Names of every shape reachable from ``roots``.

    Deprecated members are never followed; ``member_filter`` can exclude
    more structure members (it is not applied to list or map members).
    """
    found: set[str] = set()
    pending = list(roots)
    while pending:
        name = pending.pop()
        if name in found:
            continue
        found.add(name)
        shape = service.shape(name)
        if shape.shape_type is ShapeType.structure:
            for member_name, member in shape.iter_members():
                if member_filter(shape, member_name, member):
                    pending.append(member.shape)
        elif shape.shape_type is ShapeType.list:
            pending.append(shape.member.shape)
        elif shape.shape_type is ShapeType.map:
            pending.extend([shape.key.shape, shape.value.shape])
    return found


def query_wire_name(member_name: str, member: Member) -> str:
    """Key segment of a structure member in query-protocol params."""
    return capitalize_first(member.tag_name(member_name))


def list_element_tag(shape: Shape) -> str:
    """Tag of the repeated element inside a list container."""
    return shape.member.tag_name(shape.member.shape)


def map_entry_tags(shape: Shape) -> tuple[str, str]:
    """Names of the key and value fields of a map entry."""
    return shape.key.tag_name('key'), shape.value.tag_name('value')


class ServiceCache(Generic[T]):
    """Memoizes a value derived from a service, shared between threads.

    Services are immutable but unhashable, so entries are keyed by identity.
    The cache holds no reference to the service; an entry is evicted when
    its service is garbage collected.
    """

    def __init__(self, factory: Callable[[Service], T]):
        self._factory = factory
        self._entries: dict[int, T] = {}
        # reentrant: an eviction can run from the garbage collector while
        # the same thread holds the lock
        self._lock = threading.RLock()

    def get(self, service: Service) -> T:
        key = id(service)
        with self._lock:
            if key not in self._entries:
                self._entries[key] = self._factory(service)
                weakref.finalize(service, self._evict, key)
            return self._entries[key]

    def _evict(self, key: int) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
