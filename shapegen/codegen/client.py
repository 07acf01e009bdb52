"""Client class generation module for shapegen.

This module generates the parts of a client module that do not depend on the
wire protocol: the per-service error classes and the client class shell
holding the credentials provider, the region and the request dispatcher. The
client methods themselves come from the protocol generator.
"""

import ast
import textwrap

from shapegen.codegen.ast_utils import (
    _argument,
    _assign,
    _attr,
    _call,
    _class,
    _docstring,
    _func,
    _is_not_none,
    _name,
    _render,
    _union_expr,
)
from shapegen.codegen.utils import clean_docstring
from shapegen.model import Service

__all__ = [
    'error_type_names',
    'CLIENT_IMPORTS',
    'generate_error_classes',
    'generate_client_class',
    'indent_methods',
]

# Type alias for import dictionaries
ImportDict = dict[str, set[str]]

CLIENT_IMPORTS: ImportDict = {
    'shapegen.runtime.errors': {'ServiceError'},
    'shapegen.runtime.params': {'Params'},
    'shapegen.runtime.request': {
        'CredentialsProvider',
        'HttpxDispatcher',
        'RequestDispatcher',
        'SignedRequest',
    },
}


def error_type_names(service: Service) -> list[str]:
    """Return the error class names of a service, the default one first."""
    names = [service.error_type_name]
    for operation in service.operations.values():
        name = operation.error_type_name(service)
        if name not in names:
            names.append(name)
    return names


def generate_error_classes(service: Service) -> list[ast.ClassDef]:
    """Generate one ``ServiceError`` subclass per error type of the service.

    Returns:
        AST ClassDefs, the service-wide error first, then any operation
        specific ones in operation order.
    """
    full_name = service.metadata.service_full_name or service.service_type_name
    return [
        _class(
            name,
            [_docstring(f'Error returned by {full_name}.')],
            bases=[_name('ServiceError')],
        )
        for name in error_type_names(service)
    ]


def _init_method() -> ast.FunctionDef:
    body = [
        # self.credentials_provider = credentials_provider
        _assign(_attr('self', 'credentials_provider'), _name('credentials_provider')),
        # self.region = region
        _assign(_attr('self', 'region'), _name('region')),
        # self.dispatcher = dispatcher if dispatcher is not None else HttpxDispatcher()
        _assign(
            _attr('self', 'dispatcher'),
            ast.IfExp(
                test=_is_not_none(_name('dispatcher')),
                body=_name('dispatcher'),
                orelse=_call(_name('HttpxDispatcher')),
            ),
        ),
    ]
    return _func(
        '__init__',
        args=[
            _argument('self'),
            _argument('credentials_provider', _name('CredentialsProvider')),
            _argument('region', _name('str')),
            _argument(
                'dispatcher',
                _union_expr([_name('RequestDispatcher'), ast.Constant(None)]),
            ),
        ],
        body=body,
        defaults=[ast.Constant(None)],
        returns=ast.Constant(None),
    )


def indent_methods(methods: list[ast.FunctionDef]) -> str:
    """Render methods as text indented for a class body."""
    rendered = [_render([method]) for method in methods]
    return textwrap.indent('\n\n'.join(rendered), '    ')


def generate_client_class(service: Service, methods_source: str) -> str:
    """Generate the client class.

    Args:
        service: The service the client talks to.
        methods_source: The protocol generator's method text, already
            indented for the class body.

    Returns:
        The source of the client class.
    """
    body: list[ast.stmt] = []
    docstring = clean_docstring(service.documentation)
    if docstring:
        body.append(_docstring(docstring))
    body.append(_init_method())

    source = _render([_class(service.client_type_name, body)])
    if methods_source.strip():
        source = f'{source}\n\n{methods_source}'
    return source
