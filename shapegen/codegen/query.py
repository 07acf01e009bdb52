"""Query protocol generator.

Query-protocol services (EC2 and friends) take every request as flat
``Key=Value`` params including ``Action`` and ``Version``, and answer with an
XML document whose root element is named after the operation.
"""

import ast
import dataclasses
import logging
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
from shapegen.codegen.quirks import QUERY_ROOT_TAGS, RootTagTable
from shapegen.codegen.samples import (
    SAMPLE_TEST_IMPORTS,
    find_responses,
    responses_for,
    sample_data_dir,
    sample_test_function,
)
from shapegen.codegen.serializers import (
    QUERY_SERIALIZER_IMPORTS,
    QuerySerializerGenerator,
    serializer_name,
)
from shapegen.codegen.shape_utils import (
    ServiceCache,
    reachable_shapes,
    shape_type_name,
)
from shapegen.codegen.types import MODEL_IMPORTS
from shapegen.codegen.utils import clean_docstring, to_snake_case
from shapegen.exceptions import OperationGenerationError, UnsupportedShapeError
from shapegen.model import Operation, Service, Shape, ShapeType

logger = logging.getLogger(__name__)

__all__ = ['QueryGenerator']


@dataclasses.dataclass(frozen=True)
class _SupportShapes:
    serialized: frozenset[str]
    deserialized: frozenset[str]


def _support_shapes(service: Service) -> _SupportShapes:
    inputs = [op.input.shape for op in service.operations.values() if op.input]
    outputs = [op.output.shape for op in service.operations.values() if op.output]
    return _SupportShapes(
        serialized=frozenset(reachable_shapes(service, inputs)),
        deserialized=frozenset(reachable_shapes(service, outputs)),
    )


class QueryGenerator(GenerateProtocol):
    """Generates clients for the ``query`` and ``ec2`` protocols.

    Args:
        root_tags: Root tag table used to find the response element of an
            operation. Defaults to :data:`~shapegen.codegen.quirks.QUERY_ROOT_TAGS`.
        fixtures_dir: Directory of recorded responses for generated tests.
    """

    name = 'query'

    def __init__(
        self,
        root_tags: RootTagTable = QUERY_ROOT_TAGS,
        fixtures_dir: str | Path | None = None,
    ):
        self.root_tags = root_tags
        self.fixtures_dir = fixtures_dir
        self._support = ServiceCache(_support_shapes)

    def generate_prelude(self, service: Service) -> str:
        collector = ImportCollector()
        collector.add_imports(MODEL_IMPORTS)
        collector.add_imports(CLIENT_IMPORTS)
        collector.add_imports(QUERY_SERIALIZER_IMPORTS)
        collector.add_imports(DESERIALIZER_IMPORTS)
        collector.add_import('logging')

        logger_assign = _assign(
            _name('logger'), _call(_attr('logging', 'getLogger'), [_name('__name__')])
        )
        return _render(collector.to_ast() + [logger_assign])

    def generate_struct_attributes(self, type_name: str) -> str:
        return _render(
            [
                _assign(
                    _name('model_config'),
                    _call(
                        _name('ConfigDict'),
                        keywords=[
                            ast.keyword(arg='title', value=ast.Constant(type_name)),
                            ast.keyword(arg='extra', value=ast.Constant('forbid')),
                            ast.keyword(
                                arg='protected_namespaces',
                                value=ast.Tuple(elts=[], ctx=ast.Load()),
                            ),
                        ],
                    ),
                )
            ]
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
            logger.debug(f'Generated query method for {operation.name}')
        return indent_methods(methods)

    def _method(self, service: Service, operation: Operation) -> ast.FunctionDef:
        args = [_argument('self')]
        body: list[ast.stmt] = []

        docstring = clean_docstring(operation.documentation)
        if docstring:
            body.append(_docstring(docstring))

        body.extend(
            [
                # http_request = SignedRequest('POST', 'ec2', self.region, '/')
                _assign(
                    _name('http_request'),
                    _call(
                        _name('SignedRequest'),
                        [
                            ast.Constant(operation.http.method),
                            ast.Constant(service.metadata.endpoint_prefix),
                            _attr('self', 'region'),
                            ast.Constant(operation.http.request_uri),
                        ],
                    ),
                ),
                # params = Params()
                _assign(_name('params'), _call(_name('Params'))),
                # params.put('Action', 'DescribeVolumes')
                _expr(
                    _call(
                        _attr('params', 'put'),
                        [ast.Constant('Action'), ast.Constant(operation.name)],
                    )
                ),
                # params.put('Version', '2016-11-15')
                _expr(
                    _call(
                        _attr('params', 'put'),
                        [ast.Constant('Version'), ast.Constant(service.metadata.api_version)],
                    )
                ),
            ]
        )

        if operation.input is not None:
            input_type = shape_type_name(service, operation.input.shape)
            args.append(_argument('request', _name(input_type)))
            # DescribeVolumesRequestSerializer.serialize(params, '', request)
            body.append(
                _expr(
                    _call(
                        _attr(serializer_name(service, operation.input.shape), 'serialize'),
                        [_name('params'), ast.Constant(''), _name('request')],
                    )
                )
            )

        body.extend(
            [
                _expr(_call(_attr('http_request', 'set_params'), [_name('params')])),
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
            output_type = shape_type_name(service, operation.output.shape)
            root_tag = self.root_tags.resolve(operation.output.shape, operation.name)
            success = [
                _assign(
                    _name('stack'),
                    _call(_attr('XmlResponse', 'from_body'), [_attr('result', 'body')]),
                ),
                # skip the start of the document
                _expr(_call(_attr('stack', 'next'))),
                _return(
                    _call(
                        _attr(deserializer_name(service, operation.output.shape), 'deserialize'),
                        [ast.Constant(root_tag), _name('stack')],
                    )
                ),
            ]
            returns = _name(output_type)
        else:
            success = [_return(ast.Constant(None))]
            returns = ast.Constant(None)

        body.append(
            _if(
                ast.Compare(
                    left=_attr('result', 'status'),
                    ops=[ast.Eq()],
                    comparators=[ast.Constant(200)],
                ),
                success,
            )
        )
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

    def generate_support_types(
        self, shape_name: str, shape: Shape, service: Service
    ) -> str | None:
        if not isinstance(shape.shape_type, ShapeType):
            raise UnsupportedShapeError(shape_name, str(shape.shape_type), 'support types')

        support = self._support.get(service)
        timestamp_type = self.timestamp_type()
        classes = []
        if shape_name in support.serialized:
            classes.append(
                QuerySerializerGenerator(service, timestamp_type).generate(shape_name, shape)
            )
        if shape_name in support.deserialized:
            classes.append(
                XmlDeserializerGenerator(service, timestamp_type).generate(shape_name, shape)
            )
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
            # assert mock.requests[0].params['Action'] == 'DescribeVolumes'
            action = ast.Subscript(
                value=_attr(
                    ast.Subscript(
                        value=_attr('mock', 'requests'),
                        slice=ast.Constant(0),
                        ctx=ast.Load(),
                    ),
                    'params',
                ),
                slice=ast.Constant('Action'),
                ctx=ast.Load(),
            )
            checks: list[ast.stmt] = [
                ast.Assert(
                    test=ast.Compare(
                        left=action, ops=[ast.Eq()], comparators=[ast.Constant(operation.name)]
                    ),
                    msg=None,
                )
            ]
            if operation.output is not None:
                checks.append(
                    ast.Assert(
                        test=_call(
                            _name('isinstance'),
                            [
                                _name('result'),
                                _name(shape_type_name(service, operation.output.shape)),
                            ],
                        ),
                        msg=None,
                    )
                )
            tests.append(sample_test_function(service, response, operation, checks))

        return _render(collector.to_ast() + [sample_data_dir(self.fixtures_dir)] + tests)
