"""Generation of request serializer classes.

Two flavours exist, one per way a request carries structured data:

* :class:`QuerySerializerGenerator` flattens a value into a
  :class:`~shapegen.runtime.params.Params` container with dotted keys
  (``Filter.1.Name``, ``Tag.2.value``).
* :class:`XmlSerializerGenerator` turns a value into the element content
  ``xmltodict`` renders for a rest-xml payload, using the same tag names
  the XML deserializers read.
"""

import ast

from shapegen.codegen.ast_utils import (
    _argument,
    _assign,
    _attr,
    _call,
    _class,
    _expr,
    _fstring,
    _if,
    _is_not_none,
    _name,
    _return,
    _staticmethod,
)
from shapegen.codegen.quirks import LIST_INDEX_BASE
from shapegen.codegen.shape_utils import (
    MemberFilter,
    annotation_for,
    list_element_tag,
    map_entry_tags,
    primitive_to_text,
    query_wire_name,
    shape_type_name,
)
from shapegen.codegen.utils import field_name
from shapegen.exceptions import UnsupportedShapeError
from shapegen.model import Service, Shape, ShapeType

__all__ = [
    'QuerySerializerGenerator',
    'XmlSerializerGenerator',
    'serializer_name',
    'QUERY_SERIALIZER_IMPORTS',
    'XML_SERIALIZER_IMPORTS',
]

QUERY_SERIALIZER_IMPORTS = {'shapegen.runtime.params': {'Params'}}
XML_SERIALIZER_IMPORTS = {'shapegen.runtime.xmlutil': {'render_xml'}}


def serializer_name(service: Service, shape_name: str) -> str:
    return f'{shape_type_name(service, shape_name)}Serializer'


def _store(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Store())


def _comprehension(target: ast.expr, iterable: ast.expr) -> ast.comprehension:
    return ast.comprehension(target=target, iter=iterable, ifs=[], is_async=0)


def _enumerate(iterable: ast.expr) -> ast.Call:
    return _call(
        _name('enumerate'),
        [iterable],
        [ast.keyword(arg='start', value=ast.Constant(LIST_INDEX_BASE))],
    )


def _members(shape: Shape, member_filter: MemberFilter | None):
    for member_name, member in shape.iter_members():
        if member_filter and not member_filter(shape, member_name, member):
            continue
        yield member_name, member


class QuerySerializerGenerator:
    """Builds ``<Type>Serializer`` classes writing query-protocol params.

    Each class has one static method ``serialize(params, name, obj)`` that
    puts ``obj`` into ``params`` under keys starting with ``name``.
    """

    def __init__(self, service: Service, timestamp_type: str):
        self.service = service
        self.timestamp_type = timestamp_type

    def _serialize_call(
        self, shape_name: str, key: ast.expr, value: ast.expr
    ) -> ast.stmt:
        return _expr(
            _call(
                _attr(serializer_name(self.service, shape_name), 'serialize'),
                [_name('params'), key, value],
            )
        )

    def generate(self, shape_name: str, shape: Shape) -> ast.ClassDef:
        kind = shape.shape_type
        if kind is ShapeType.structure:
            body = self._structure_body(shape)
        elif kind is ShapeType.list:
            body = self._list_body(shape)
        elif kind is ShapeType.map:
            body = self._map_body(shape)
        elif isinstance(kind, ShapeType):
            body = [
                _expr(
                    _call(
                        _attr('params', 'put'),
                        [_name('name'), primitive_to_text(shape_name, shape, _name('obj'))],
                    )
                )
            ]
        else:
            raise UnsupportedShapeError(shape_name, str(kind), 'query serializer')

        method = _staticmethod(
            'serialize',
            args=[
                _argument('params', _name('Params')),
                _argument('name', _name('str')),
                _argument('obj', annotation_for(self.service, shape_name, self.timestamp_type)),
            ],
            body=body,
            returns=ast.Constant(None),
        )
        return _class(serializer_name(self.service, shape_name), [method])

    def _structure_body(self, shape: Shape) -> list[ast.stmt]:
        statements: list[ast.stmt] = []
        for member_name, member in _members(shape, None):
            value = _attr('obj', field_name(member_name))
            call = self._serialize_call(
                member.shape,
                _fstring(_name('prefix'), query_wire_name(member_name, member)),
                value,
            )
            if shape.required(member_name):
                statements.append(call)
            else:
                statements.append(_if(_is_not_none(value), [call]))

        if not statements:
            return [ast.Pass()]

        prefix = ast.IfExp(
            test=_name('name'),
            body=_fstring(_name('name'), '.'),
            orelse=ast.Constant(''),
        )
        return [_assign(_name('prefix'), prefix)] + statements

    def _list_body(self, shape: Shape) -> list[ast.stmt]:
        key = _fstring(_name('name'), '.', _name('index'))
        return [
            ast.For(
                target=ast.Tuple(elts=[_store('index'), _store('element')], ctx=ast.Store()),
                iter=_enumerate(_name('obj')),
                body=[self._serialize_call(shape.member.shape, key, _name('element'))],
                orelse=[],
            )
        ]

    def _map_body(self, shape: Shape) -> list[ast.stmt]:
        key_field, value_field = map_entry_tags(shape)
        entry = _fstring(_name('name'), '.', _name('index'))
        return [
            ast.For(
                target=ast.Tuple(
                    elts=[
                        _store('index'),
                        ast.Tuple(elts=[_store('key'), _store('value')], ctx=ast.Store()),
                    ],
                    ctx=ast.Store(),
                ),
                iter=_enumerate(_call(_attr('obj', 'items'))),
                body=[
                    _assign(_name('entry'), entry),
                    self._serialize_call(
                        shape.key.shape, _fstring(_name('entry'), f'.{key_field}'), _name('key')
                    ),
                    self._serialize_call(
                        shape.value.shape,
                        _fstring(_name('entry'), f'.{value_field}'),
                        _name('value'),
                    ),
                ],
                orelse=[],
            )
        ]


class XmlSerializerGenerator:
    """Builds ``<Type>Serializer`` classes for rest-xml payloads.

    Each class has one static method ``serialize(obj)`` returning the content
    of the element ``obj`` is written to, in the form ``xmltodict.unparse``
    takes: text for primitives, a dict of child tags for structures and
    lists, and a list of entries for maps, which are written as repeated
    elements. The caller picks the element's tag, so the payload is rendered
    once with :func:`~shapegen.runtime.xmlutil.render_xml`.

    Tag names follow the same rules as
    :class:`~shapegen.codegen.deserializers.XmlDeserializerGenerator`:
    member location name or member name, list element location name or
    element shape name, map ``key``/``value`` fields.

    Args:
        service: The service whose shapes are serialized.
        timestamp_type: Annotation used for timestamp values.
        member_filter: Decides which structure members belong in the body.
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

    def _serialize_call(self, shape_name: str, value: ast.expr) -> ast.Call:
        return _call(_attr(serializer_name(self.service, shape_name), 'serialize'), [value])

    def generate(self, shape_name: str, shape: Shape) -> ast.ClassDef:
        kind = shape.shape_type
        if kind is ShapeType.structure:
            body, returns = self._structure_body(shape), 'dict'
        elif kind is ShapeType.list:
            body, returns = self._list_body(shape), 'dict'
        elif kind is ShapeType.map:
            body, returns = self._map_body(shape), 'list'
        elif isinstance(kind, ShapeType):
            body = [_return(primitive_to_text(shape_name, shape, _name('obj')))]
            returns = 'str'
        else:
            raise UnsupportedShapeError(shape_name, str(kind), 'xml serializer')

        method = _staticmethod(
            'serialize',
            args=[
                _argument('obj', annotation_for(self.service, shape_name, self.timestamp_type)),
            ],
            body=body,
            returns=_name(returns),
        )
        return _class(serializer_name(self.service, shape_name), [method])

    def _structure_body(self, shape: Shape) -> list[ast.stmt]:
        statements: list[ast.stmt] = [
            _assign(_name('content'), ast.Dict(keys=[], values=[]))
        ]
        for member_name, member in _members(shape, self.member_filter):
            value = _attr('obj', field_name(member_name))
            # content['TagSet'] = TagSetSerializer.serialize(obj.tag_set)
            store = _assign(
                ast.Subscript(
                    value=_name('content'),
                    slice=ast.Constant(member.tag_name(member_name)),
                    ctx=ast.Store(),
                ),
                self._serialize_call(member.shape, value),
            )
            if shape.required(member_name):
                statements.append(store)
            else:
                statements.append(_if(_is_not_none(value), [store]))

        statements.append(_return(_name('content')))
        return statements

    def _list_body(self, shape: Shape) -> list[ast.stmt]:
        elements = ast.ListComp(
            elt=self._serialize_call(shape.member.shape, _name('element')),
            generators=[_comprehension(_store('element'), _name('obj'))],
        )
        return [
            _return(ast.Dict(keys=[ast.Constant(list_element_tag(shape))], values=[elements]))
        ]

    def _map_body(self, shape: Shape) -> list[ast.stmt]:
        key_tag, value_tag = map_entry_tags(shape)
        entry = ast.Dict(
            keys=[ast.Constant(key_tag), ast.Constant(value_tag)],
            values=[
                self._serialize_call(shape.key.shape, _name('key')),
                self._serialize_call(shape.value.shape, _name('value')),
            ],
        )
        entries = ast.ListComp(
            elt=entry,
            generators=[
                _comprehension(
                    ast.Tuple(elts=[_store('key'), _store('value')], ctx=ast.Store()),
                    _call(_attr('obj', 'items')),
                )
            ],
        )
        return [_return(entries)]
