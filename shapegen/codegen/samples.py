"""Recorded sample responses used to scaffold generated client tests.

A corpus directory holds one XML body per file, named
``<service>-<operation>.xml`` with the operation in kebab case, e.g.
``s3-list-buckets.xml`` or ``ec2-describe-volumes.xml``.
"""

import ast
import dataclasses
import logging
import re
from pathlib import Path

from shapegen.codegen.ast_utils import (
    _assign,
    _attr,
    _call,
    _func,
    _name,
)
from shapegen.codegen.shape_utils import shape_type_name
from shapegen.codegen.utils import to_snake_case
from shapegen.model import Operation, Service

logger = logging.getLogger(__name__)

__all__ = [
    'Response',
    'find_responses',
    'responses_for',
    'sample_test_function',
    'sample_data_dir',
    'SAMPLE_TEST_IMPORTS',
]

_RESPONSE_FILE_RE = re.compile(r'^(?P<service>[a-z0-9]+)-(?P<action>[a-z0-9-]+)\.xml$')

SAMPLE_TEST_IMPORTS = {
    'shapegen.runtime.mock': {
        'MockCredentialsProvider',
        'MockRequestDispatcher',
        'MockResponseReader',
    },
}


@dataclasses.dataclass(frozen=True)
class Response:
    """One recorded response file.

    Attributes:
        service: Lower-case service part of the file name, e.g. ``s3``.
        action: Kebab-case operation part of the file name, e.g. ``list-buckets``.
        file_name: The file name inside the corpus directory.
    """

    service: str
    action: str
    file_name: str


def find_responses(directory: str | Path | None) -> list[Response]:
    """List the recorded responses in ``directory``, sorted by file name.

    Files that do not follow the naming scheme are ignored. A missing
    directory yields no responses.
    """
    if directory is None:
        return []
    path = Path(directory)
    if not path.is_dir():
        logger.debug(f'Sample response directory {path} does not exist')
        return []

    responses = []
    for entry in sorted(path.iterdir()):
        match = _RESPONSE_FILE_RE.match(entry.name)
        if not match or not entry.is_file():
            continue
        responses.append(
            Response(
                service=match.group('service'),
                action=match.group('action'),
                file_name=entry.name,
            )
        )
    return responses


def _kebab(name: str) -> str:
    return to_snake_case(name).replace('_', '-')


def responses_for(
    service: Service, responses: list[Response]
) -> list[tuple[Response, Operation]]:
    """Pair each response recorded for ``service`` with its operation.

    The service part of a file name may be the endpoint prefix or the short
    service name; responses naming an unknown operation are dropped.
    """
    service_names = {
        service.metadata.endpoint_prefix.lower(),
        service.service_type_name.lower(),
    }
    operations = {_kebab(name): operation for name, operation in service.operations.items()}

    matched = []
    for response in responses:
        if response.service not in service_names:
            continue
        operation = operations.get(response.action)
        if operation is None:
            logger.warning(
                f'No operation matches sample response {response.file_name}'
            )
            continue
        matched.append((response, operation))
    return matched


def sample_test_function(
    service: Service,
    response: Response,
    operation: Operation,
    checks: list[ast.stmt],
) -> ast.FunctionDef:
    """Build ``test_parse_<service>_<operation>`` for one recorded response.

    The test reads the body from ``SAMPLE_DATA_DIR``, answers the call with
    it through a :class:`~shapegen.runtime.mock.MockRequestDispatcher` and
    runs ``checks``, which may refer to ``mock``, ``client`` and ``result``.
    """
    body = [
        _assign(
            _name('mock_response'),
            _call(
                _attr('MockResponseReader', 'read_response'),
                [_name('SAMPLE_DATA_DIR'), ast.Constant(response.file_name)],
            ),
        ),
        _assign(
            _name('mock'),
            _call(
                _attr(
                    _call(_attr('MockRequestDispatcher', 'with_status'), [ast.Constant(200)]),
                    'with_body',
                ),
                [_name('mock_response')],
            ),
        ),
        _assign(
            _name('client'),
            _call(
                _name(service.client_type_name),
                [_call(_name('MockCredentialsProvider')), ast.Constant('us-east-1')],
                [ast.keyword(arg='dispatcher', value=_name('mock'))],
            ),
        ),
    ]

    arguments = []
    if operation.input is not None:
        body.append(
            _assign(
                _name('request'),
                _call(_name(shape_type_name(service, operation.input.shape))),
            )
        )
        arguments.append(_name('request'))

    call = _call(_attr('client', to_snake_case(operation.name)), arguments)
    body.append(_assign(_name('result'), call))
    body.extend(checks)

    name = f'test_parse_{to_snake_case(service.service_type_name)}_{to_snake_case(operation.name)}'
    return _func(name, [], body)


def sample_data_dir(directory: str | Path) -> ast.Assign:
    return _assign(_name('SAMPLE_DATA_DIR'), ast.Constant(Path(directory).as_posix()))

