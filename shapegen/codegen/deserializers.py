"""Generation of XML deserializer classes.

For every shape an operation output can reach, a ``<Type>Deserializer`` class
with a single static ``deserialize(tag_name, stack)`` method is emitted. The
method consumes exactly the element named ``tag_name`` from the
:class:`~shapegen.runtime.xmlutil.XmlResponse` and returns the value.

Structure and list deserializers share one loop shape::

    while True:
        event = stack.peek()
        if event is None or event.is_end_element:
            break
        if event.is_start_element:
            ...dispatch on event.local_name, skip_tree() otherwise...
        else:
            stack.next()

Maps are read as repeated ``<tag><key/><value/></tag>`` entries.
"""

import ast

from shapegen.codegen.ast_utils import (
    _argument,
    _assign,
    _attr,
    _call,
    _class,
    _expr,
    _if,
    _is_none,
    _name,
    _return,
    _staticmethod,
)
from shapegen.codegen.shape_utils import (
    MemberFilter,
    annotation_for,
    list_element_tag,
    map_entry_tags,
    shape_type_name,
    text_to_primitive,
)
from shapegen.codegen.utils import field_name
from shapegen.exceptions import UnsupportedShapeError
from shapegen.model import Service, Shape, ShapeType

__all__ = ['XmlDeserializerGenerator', 'deserializer_name', 'DESERIALIZER_IMPORTS']

DESERIALIZER_IMPORTS = {
    'shapegen.runtime.xmlutil': {
        'XmlResponse',
        'characters',
        'end_element',
        'parse_bool',
        'parse_float',
        'parse_int',
        'peek_at_name',
        'skip_tree',
        'start_element',
    },
}


def deserializer_name(service: Service, shape_name: str) -> str:
    return f'{shape_type_name(service, shape_name)}Deserializer'


def _deserialize_call(service: Service, shape_name: str, tag: str) -> ast.Call:
    return _call(
        _attr(deserializer_name(service, shape_name), 'deserialize'),
        [ast.Constant(tag), _name('stack')],
    )


def _start(tag: ast.expr) -> ast.stmt:
    return _expr(_call(_name('start_element'), [tag, _name('stack')]))


def _end(tag: ast.expr) -> ast.stmt:
    return _expr(_call(_name('end_element'), [tag, _name('stack')]))


def _event_loop(dispatch: list[tuple[str, list[ast.stmt]]]) -> ast.While:
    """Build the peek loop dispatching start tags by local name."""
    local_name = _attr('event', 'local_name')

    # elif chain, innermost first; unknown elements fall through to skip_tree
    branches: list[ast.stmt] = [_expr(_call(_name('skip_tree'), [_name('stack')]))]
    for tag, body in reversed(dispatch):
        test = ast.Compare(
            left=local_name, ops=[ast.Eq()], comparators=[ast.Constant(tag)]
        )
        branches = [_if(test, body, branches)]

    return ast.While(
        test=ast.Constant(True),
        body=[
            _assign(_name('event'), _call(_attr('stack', 'peek'))),
            _if(
                ast.BoolOp(
                    op=ast.Or(),
                    values=[_is_none(_name('event')), _attr('event', 'is_end_element')],
                ),
                [ast.Break()],
            ),
            _if(
                _attr('event', 'is_start_element'),
                branches,
                [_expr(_call(_attr('stack', 'next')))],
            ),
        ],
        orelse=[],
    )


class XmlDeserializerGenerator:
    """Builds ``<Type>Deserializer`` classes for one service.

    Args:
        service: The service whose shapes are deserialized.
        timestamp_type: Annotation used for timestamp values.
        member_filter: Decides which structure members are read from the XML
            body. Members it rejects are skipped like unknown elements.
    """

    def __init__(
        self,
        service: Service,
        timestamp_type: str,
        member_filter: MemberFilter | None = None,
    ):
        self.service = service
        self.timestamp_type = timestamp_type
        self.member_filter = member_filter

    def generate(self, shape_name: str, shape: Shape) -> ast.ClassDef:
        kind = shape.shape_type
        if kind is ShapeType.structure:
            body = self._structure_body(shape_name, shape)
        elif kind is ShapeType.list:
            body = self._list_body(shape)
        elif kind is ShapeType.map:
            body = self._map_body(shape)
        elif isinstance(kind, ShapeType):
            body = self._primitive_body(shape_name, shape)
        else:
            raise UnsupportedShapeError(shape_name, str(kind), 'deserializer')

        method = _staticmethod(
            'deserialize',
            args=[_argument('tag_name', _name('str')), _argument('stack', _name('XmlResponse'))],
            body=body,
            returns=annotation_for(self.service, shape_name, self.timestamp_type),
        )
        return _class(deserializer_name(self.service, shape_name), [method])

    def _structure_body(self, shape_name: str, shape: Shape) -> list[ast.stmt]:
        type_name = shape_type_name(self.service, shape_name)
        tag = _name('tag_name')
        construct = _assign(_name('obj'), _call(_name(type_name)))

        dispatch = []
        for member_name, member in shape.iter_members():
            if self.member_filter and not self.member_filter(shape, member_name, member):
                continue
            wire_name = member.tag_name(member_name)
            dispatch.append(
                (
                    wire_name,
                    [
                        _assign(
                            _attr('obj', field_name(member_name)),
                            _deserialize_call(self.service, member.shape, wire_name),
                        )
                    ],
                )
            )

        return [
            _start(tag),
            construct,
            _event_loop(dispatch),
            _end(tag),
            _return(_name('obj')),
        ]

    def _list_body(self, shape: Shape) -> list[ast.stmt]:
        element_tag = list_element_tag(shape)
        append = _expr(
            _call(
                _attr('obj', 'append'),
                [_deserialize_call(self.service, shape.member.shape, element_tag)],
            )
        )
        tag = _name('tag_name')
        return [
            _assign(_name('obj'), ast.List(elts=[], ctx=ast.Load())),
            _start(tag),
            _event_loop([(element_tag, [append])]),
            _end(tag),
            _return(_name('obj')),
        ]

    def _map_body(self, shape: Shape) -> list[ast.stmt]:
        key_tag, value_tag = map_entry_tags(shape)
        tag = _name('tag_name')
        entry = [
            _start(tag),
            _assign(_name('key'), _deserialize_call(self.service, shape.key.shape, key_tag)),
            _assign(
                _name('value'),
                _deserialize_call(self.service, shape.value.shape, value_tag),
            ),
            _assign(
                ast.Subscript(value=_name('obj'), slice=_name('key'), ctx=ast.Store()),
                _name('value'),
            ),
            _end(tag),
        ]
        return [
            _assign(_name('obj'), ast.Dict(keys=[], values=[])),
            ast.While(
                test=ast.Compare(
                    left=_call(_name('peek_at_name'), [_name('stack')]),
                    ops=[ast.Eq()],
                    comparators=[tag],
                ),
                body=entry,
                orelse=[],
            ),
            _return(_name('obj')),
        ]

    def _primitive_body(self, shape_name: str, shape: Shape) -> list[ast.stmt]:
        tag = _name('tag_name')
        text = _call(_name('characters'), [_name('stack')])
        return [
            _start(tag),
            _assign(_name('obj'), text_to_primitive(shape_name, shape, text)),
            _end(tag),
            _return(_name('obj')),
        ]
