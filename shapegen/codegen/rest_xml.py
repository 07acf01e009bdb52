"""REST-XML protocol generator.

REST-XML services (S3 and friends) place request members in the URI, in
headers, in the query string or in an XML or raw body, chosen per member by
its ``location``. Responses carry an XML document, a raw body, or nothing,
plus response headers mapped back onto output members.
"""

import ast
import dataclasses
import logging
import re
from pathlib import Path

from shapegen.codegen.ast_utils import (
    ImportCollector,
    _argument,
    _assign,
    _attr,
    _call,
    _docstring,
    _expr,
    _fstring,
    _func,
    _if,
    _is_none,
    _is_not_none,
    _name,
    _render,
    _return,
)
from shapegen.codegen.client import CLIENT_IMPORTS, indent_methods
from shapegen.codegen.deserializers import (
    DESERIALIZER_IMPORTS,
    XmlDeserializerGenerator,
    deserializer_name,
)
from shapegen.codegen.protocol import GenerateProtocol
from shapegen.codegen.quirks import REST_XML_ROOT_TAGS, RootTagTable
from shapegen.codegen.samples import (
    SAMPLE_TEST_IMPORTS,
    find_responses,
    responses_for,
    sample_data_dir,
    sample_test_function,
)
from shapegen.codegen.serializers import (
    XML_SERIALIZER_IMPORTS,
    XmlSerializerGenerator,
    serializer_name,
)
from shapegen.codegen.shape_utils import (
    ServiceCache,
    header_from_text,
    header_to_text,
    primitive_to_text,
    reachable_shapes,
    shape_type_name,
)
from shapegen.codegen.types import MODEL_IMPORTS
from shapegen.codegen.utils import clean_docstring, field_name, to_snake_case
from shapegen.exceptions import OperationGenerationError, UnsupportedShapeError
from shapegen.model import Location, Member, Operation, Service, Shape, ShapeType

logger = logging.getLogger(__name__)

__all__ = ['RestXmlGenerator', 'is_body_member']

_GREEDY_LABEL_RE = re.compile(r'\{([^}]+?)\+\}')

# Members in these locations never appear in an XML body.
_NON_BODY_LOCATIONS = frozenset(
    {
        Location.uri,
        Location.header,
        Location.headers,
        Location.querystring,
        Location.status_code,
    }
)


def is_body_member(shape: Shape, member_name: str, member: Member) -> bool:
    return member.location not in _NON_BODY_LOCATIONS


@dataclasses.dataclass(frozen=True)
class _Payload:
    """The member of an input or output shape that is the whole body."""

    member_name: str
    member: Member
    shape: Shape

    @property
    def is_raw(self) -> bool:
        """Raw payloads travel as the body bytes, without XML."""
        return (
            self.member.streaming
            or self.shape.streaming
            or self.shape.shape_type is not ShapeType.structure
        )

    @property
    def tag(self) -> str:
        return self.member.tag_name(self.member.shape)


def _payload(service: Service, shape: Shape | None) -> _Payload | None:
    if shape is None or not shape.payload:
        return None
    member = (shape.members or {}).get(shape.payload)
    if member is None:
        return None
    return _Payload(shape.payload, member, service.shape(member.shape))


@dataclasses.dataclass(frozen=True)
class _SupportShapes:
    serialized: frozenset[str]
    deserialized: frozenset[str]


def _support_shapes(service: Service) -> _SupportShapes:
    serialized_roots = []
    deserialized_roots = []
    for operation in service.operations.values():
        payload = _payload(service, service.input_shape(operation))
        if payload is not None and not payload.is_raw:
            serialized_roots.append(payload.member.shape)

        if operation.output is None:
            continue
        payload = _payload(service, service.output_shape(operation))
        if payload is None:
            deserialized_roots.append(operation.output.shape)
        elif not payload.is_raw:
            deserialized_roots.append(payload.member.shape)

    return _SupportShapes(
        serialized=frozenset(reachable_shapes(service, serialized_roots, is_body_member)),
        deserialized=frozenset(
            reachable_shapes(service, deserialized_roots, is_body_member)
        ),
    )


def _uri_template(request_uri: str) -> str:
    """Drop the greedy ``+`` marker: ``/{Bucket}/{Key+}`` -> ``/{Bucket}/{Key}``."""
    return _GREEDY_LABEL_RE.sub(r'{\1}', request_uri)


def _status_is_200() -> ast.Compare:
    return ast.Compare(
        left=_attr('result', 'status'), ops=[ast.Eq()], comparators=[ast.Constant(200)]
    )


class RestXmlGenerator(GenerateProtocol):
    """Generates clients for the ``rest-xml`` protocol.

    Args:
        root_tags: Root tag table used to find the response element of an
            operation. Defaults to
            :data:`~shapegen.codegen.quirks.REST_XML_ROOT_TAGS`.
        fixtures_dir: Directory of recorded responses for generated tests.
    """

    name = 'rest-xml'

    def __init__(
        self,
        root_tags: RootTagTable = REST_XML_ROOT_TAGS,
        fixtures_dir: str | Path | None = None,
    ):
        self.root_tags = root_tags
        self.fixtures_dir = fixtures_dir
        self._support = ServiceCache(_support_shapes)

    def generate_prelude(self, service: Service) -> str:
        collector = ImportCollector()
        collector.add_imports(MODEL_IMPORTS)
        collector.add_imports(CLIENT_IMPORTS)
        collector.add_imports(XML_SERIALIZER_IMPORTS)
        collector.add_imports(DESERIALIZER_IMPORTS)
        collector.add_import('shapegen.runtime.errors', 'MissingParameterError')
        collector.add_import('logging')

        logger_assign = _assign(
            _name('logger'), _call(_attr('logging', 'getLogger'), [_name('__name__')])
        )
        return _render(collector.to_ast() + [logger_assign])

    def generate_struct_attributes(self, type_name: str) -> str:
        return (
            f'model_config = ConfigDict(title={type_name!r}, extra=\'forbid\', '
            'protected_namespaces=(), ser_json_bytes=\'utf8\')'
        )

    def timestamp_type(self) -> str:
        return 'str'

    def generate_methods(self, service: Service) -> str:
        methods = []
        for operation in service.operations.values():
            try:
                methods.append(self._method(service, operation))
            except UnsupportedShapeError:
                raise
            except Exception as e:
                raise OperationGenerationError(
                    operation.name,
                    operation.http.method,
                    operation.http.request_uri,
                    cause=e,
                ) from e
            logger.debug(f'Generated rest-xml method for {operation.name}')
        return indent_methods(methods)

    def _method(self, service: Service, operation: Operation) -> ast.FunctionDef:
        args = [_argument('self')]
        body: list[ast.stmt] = []

        docstring = clean_docstring(operation.documentation)
        if docstring:
            body.append(_docstring(docstring))

        # params = Params()
        body.append(_assign(_name('params'), _call(_name('Params'))))
        # params.put('Action', 'GetObject')
        body.append(
            _expr(
                _call(
                    _attr('params', 'put'),
                    [ast.Constant('Action'), ast.Constant(operation.name)],
                )
            )
        )
        # request_uri = '/{Bucket}/{Key}'
        body.append(
            _assign(
                _name('request_uri'), ast.Constant(_uri_template(operation.http.request_uri))
            )
        )

        input_shape = service.input_shape(operation)
        if input_shape is not None:
            input_type = shape_type_name(service, operation.input.shape)
            args.append(_argument('request', _name(input_type)))
            body.extend(self._querystring(service, input_shape))
            body.extend(self._uri(service, input_shape))

        # http_request = SignedRequest('GET', 's3', self.region, request_uri)
        body.append(
            _assign(
                _name('http_request'),
                _call(
                    _name('SignedRequest'),
                    [
                        ast.Constant(operation.http.method),
                        ast.Constant(service.metadata.endpoint_prefix),
                        _attr('self', 'region'),
                        _name('request_uri'),
                    ],
                ),
            )
        )
        body.append(_expr(_call(_attr('http_request', 'set_params'), [_name('params')])))

        if input_shape is not None:
            body.extend(self._headers(service, input_shape))
            body.extend(self._request_payload(service, input_shape))

        body.extend(
            [
                _expr(
                    _call(
                        _attr('http_request', 'sign'),
                        [_call(_attr(_attr('self', 'credentials_provider'), 'credentials'))],
                    )
                ),
                _assign(
                    _name('result'),
                    _call(_attr(_attr('self', 'dispatcher'), 'dispatch'), [_name('http_request')]),
                ),
                _expr(
                    _call(
                        _attr('logger', 'debug'),
                        [_fstring(f'{operation.name} returned HTTP ', _attr('result', 'status'))],
                    )
                ),
            ]
        )

        if operation.output is not None:
            success = self._output(service, operation)
            returns = _name(shape_type_name(service, operation.output.shape))
        else:
            success = [_return(ast.Constant(None))]
            returns = ast.Constant(None)

        body.append(_if(_status_is_200(), success))
        body.append(
            ast.Raise(
                exc=_call(
                    _attr(operation.error_type_name(service), 'from_body'),
                    [_attr('result', 'body')],
                ),
                cause=None,
            )
        )

        return _func(to_snake_case(operation.name), args, body, returns=returns)

    def _members_at(self, shape: Shape, location: Location):
        for member_name, member in shape.iter_members():
            if member.location is location:
                yield member_name, member

    def _guarded(
        self, shape: Shape, member_name: str, statements: list[ast.stmt]
    ) -> list[ast.stmt]:
        if shape.required(member_name):
            return statements
        value = _attr('request', field_name(member_name))
        return [_if(_is_not_none(value), statements)]

    def _querystring(self, service: Service, shape: Shape) -> list[ast.stmt]:
        statements = []
        for member_name, member in self._members_at(shape, Location.querystring):
            value = _attr('request', field_name(member_name))
            text = header_to_text(service, member.shape, value)
            put = _expr(
                _call(
                    _attr('params', 'put'),
                    [ast.Constant(member.tag_name(member_name)), text],
                )
            )
            statements.extend(self._guarded(shape, member_name, [put]))
        return statements

    def _uri(self, service: Service, shape: Shape) -> list[ast.stmt]:
        statements = []
        for member_name, member in self._members_at(shape, Location.uri):
            value = _attr('request', field_name(member_name))
            placeholder = '{' + member.tag_name(member_name) + '}'
            if not shape.required(member_name):
                # an absent optional label cannot produce a valid URI
                statements.append(
                    _if(
                        _is_none(value),
                        [
                            ast.Raise(
                                exc=_call(
                                    _name('MissingParameterError'),
                                    [ast.Constant(member_name), ast.Constant('uri')],
                                ),
                                cause=None,
                            )
                        ],
                    )
                )
            text = primitive_to_text(member.shape, service.shape(member.shape), value)
            statements.append(
                _assign(
                    _name('request_uri'),
                    _call(
                        _attr('request_uri', 'replace'), [ast.Constant(placeholder), text]
                    ),
                )
            )
        return statements

    def _headers(self, service: Service, shape: Shape) -> list[ast.stmt]:
        statements = []
        for member_name, member in self._members_at(shape, Location.header):
            value = _attr('request', field_name(member_name))
            text = header_to_text(service, member.shape, value)
            add = _expr(
                _call(
                    _attr('http_request', 'add_header'),
                    [ast.Constant(member.tag_name(member_name)), text],
                )
            )
            statements.extend(self._guarded(shape, member_name, [add]))

        for member_name, member in self._members_at(shape, Location.headers):
            # for name, value in request.metadata.items(): add 'x-amz-meta-' + name
            value_shape = service.shape(service.shape(member.shape).value.shape)
            loop = ast.For(
                target=ast.Tuple(
                    elts=[
                        ast.Name(id='header_name', ctx=ast.Store()),
                        ast.Name(id='header_value', ctx=ast.Store()),
                    ],
                    ctx=ast.Store(),
                ),
                iter=_call(_attr(_attr('request', field_name(member_name)), 'items')),
                body=[
                    _expr(
                        _call(
                            _attr('http_request', 'add_header'),
                            [
                                _fstring(member.tag_name(member_name), _name('header_name')),
                                primitive_to_text(
                                    member.shape, value_shape, _name('header_value')
                                ),
                            ],
                        )
                    )
                ],
                orelse=[],
            )
            statements.extend(self._guarded(shape, member_name, [loop]))
        return statements

    def _request_payload(self, service: Service, shape: Shape) -> list[ast.stmt]:
        payload = _payload(service, shape)
        if payload is None:
            return []

        value = _attr('request', field_name(payload.member_name))
        if payload.is_raw:
            if payload.shape.shape_type is ShapeType.string:
                data = _call(_attr(value, 'encode'), [ast.Constant('utf-8')])
            else:
                data = value
        else:
            # render_xml('Tagging', TaggingSerializer.serialize(request.tagging)).encode('utf-8')
            content = _call(
                _attr(serializer_name(service, payload.member.shape), 'serialize'), [value]
            )
            xml = _call(_name('render_xml'), [ast.Constant(payload.tag), content])
            data = _call(_attr(xml, 'encode'), [ast.Constant('utf-8')])

        set_payload = _expr(_call(_attr('http_request', 'set_payload'), [data]))
        return self._guarded(shape, payload.member_name, [set_payload])

    def _output(self, service: Service, operation: Operation) -> list[ast.stmt]:
        output_shape = service.output_shape(operation)
        output_type = shape_type_name(service, operation.output.shape)
        payload = _payload(service, output_shape)
        construct = _assign(_name('obj'), _call(_name(output_type)))

        def parse(shape_name: str, tag: str) -> list[ast.stmt]:
            return [
                _assign(
                    _name('stack'),
                    _call(_attr('XmlResponse', 'from_body'), [_attr('result', 'body')]),
                ),
                # skip the start of the document
                _expr(_call(_attr('stack', 'next'))),
                _assign(
                    _name('parsed'),
                    _call(
                        _attr(deserializer_name(service, shape_name), 'deserialize'),
                        [ast.Constant(tag), _name('stack')],
                    ),
                ),
            ]

        has_body = _call(_attr(_attr('result', 'body'), 'strip'))
        statements: list[ast.stmt]
        if payload is None:
            root_tag = self.root_tags.resolve(operation.output.shape, operation.name)
            parsed = parse(operation.output.shape, root_tag)
            parsed.append(_assign(_name('obj'), _name('parsed')))
            statements = [_if(has_body, parsed, [construct])]
        elif payload.is_raw:
            body = _attr('result', 'body')
            if payload.shape.shape_type is not ShapeType.string:
                body = _call(_attr(body, 'encode'), [ast.Constant('utf-8')])
            statements = [
                construct,
                _assign(_attr('obj', field_name(payload.member_name)), body),
            ]
        else:
            parsed = parse(payload.member.shape, payload.tag)
            parsed.append(
                _assign(_attr('obj', field_name(payload.member_name)), _name('parsed'))
            )
            statements = [construct, _if(has_body, parsed)]

        statements.extend(self._output_headers(service, output_shape))
        statements.append(_return(_name('obj')))
        return statements

    def _output_headers(self, service: Service, shape: Shape) -> list[ast.stmt]:
        statements: list[ast.stmt] = []
        for member_name, member in shape.iter_members():
            target = _attr('obj', field_name(member_name))
            if member.location is Location.header:
                header = ast.Constant(member.tag_name(member_name).lower())
                lookup = ast.Subscript(
                    value=_attr('result', 'headers'), slice=header, ctx=ast.Load()
                )
                value = header_from_text(service, member.shape, lookup)
                statements.append(
                    _if(
                        ast.Compare(
                            left=header,
                            ops=[ast.In()],
                            comparators=[_attr('result', 'headers')],
                        ),
                        [_assign(target, value)],
                    )
                )
            elif member.location is Location.headers:
                # {name[len(prefix):]: value for name, value in result.headers.items() if ...}
                prefix = member.tag_name(member_name).lower()
                statements.append(
                    _assign(
                        target,
                        ast.DictComp(
                            key=ast.Subscript(
                                value=_name('header_name'),
                                slice=ast.Slice(lower=ast.Constant(len(prefix))),
                                ctx=ast.Load(),
                            ),
                            value=_name('header_value'),
                            generators=[
                                ast.comprehension(
                                    target=ast.Tuple(
                                        elts=[
                                            ast.Name(id='header_name', ctx=ast.Store()),
                                            ast.Name(id='header_value', ctx=ast.Store()),
                                        ],
                                        ctx=ast.Store(),
                                    ),
                                    iter=_call(_attr(_attr('result', 'headers'), 'items')),
                                    ifs=[
                                        _call(
                                            _attr('header_name', 'startswith'),
                                            [ast.Constant(prefix)],
                                        )
                                    ],
                                    is_async=0,
                                )
                            ],
                        ),
                    )
                )
            elif member.location is Location.status_code:
                statements.append(_assign(target, _attr('result', 'status')))
        return statements

    def generate_support_types(
        self, shape_name: str, shape: Shape, service: Service
    ) -> str | None:
        if not isinstance(shape.shape_type, ShapeType):
            raise UnsupportedShapeError(shape_name, str(shape.shape_type), 'support types')

        support = self._support.get(service)
        timestamp_type = self.timestamp_type()
        classes = []
        if shape_name in support.serialized:
            generator = XmlSerializerGenerator(service, timestamp_type, is_body_member)
            classes.append(generator.generate(shape_name, shape))
        if shape_name in support.deserialized:
            generator = XmlDeserializerGenerator(service, timestamp_type, is_body_member)
            classes.append(generator.generate(shape_name, shape))
        if not classes:
            return None
        return _render(classes)

    def generate_tests(self, service: Service) -> str | None:
        matched = responses_for(service, find_responses(self.fixtures_dir))
        if not matched:
            return None

        collector = ImportCollector()
        collector.add_imports(SAMPLE_TEST_IMPORTS)
        tests = []
        for response, operation in matched:
            # assert mock.requests[0].method == 'GET'
            method = _attr(
                ast.Subscript(
                    value=_attr('mock', 'requests'), slice=ast.Constant(0), ctx=ast.Load()
                ),
                'method',
            )
            checks: list[ast.stmt] = [
                ast.Assert(
                    test=ast.Compare(
                        left=method,
                        ops=[ast.Eq()],
                        comparators=[ast.Constant(operation.http.method)],
                    ),
                    msg=None,
                )
            ]
            if operation.output is not None:
                output_type = shape_type_name(service, operation.output.shape)
                checks.append(
                    ast.Assert(
                        test=_call(_name('isinstance'), [_name('result'), _name(output_type)]),
                        msg=None,
                    )
                )
            tests.append(sample_test_function(service, response, operation, checks))

        return _render(collector.to_ast() + [sample_data_dir(self.fixtures_dir)] + tests)
