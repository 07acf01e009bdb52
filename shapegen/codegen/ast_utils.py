"""AST utilities and import collection for code generation.

This module provides helper functions for building Python AST nodes and
rendering them to source text, plus a collector that deduplicates and sorts
the imports of a generated module.
"""

import ast
import sys
from collections.abc import Iterable

__all__ = [
    # AST helpers
    '_name',
    '_attr',
    '_subscript',
    '_union_expr',
    '_argument',
    '_assign',
    '_import',
    '_call',
    '_expr',
    '_return',
    '_if',
    '_is_none',
    '_is_not_none',
    '_fstring',
    '_func',
    '_staticmethod',
    '_class',
    '_docstring',
    '_all',
    '_render',
    # Import collection
    'ImportCollector',
]


def _name(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _attr(value: str | ast.expr, attr: str) -> ast.Attribute:
    return ast.Attribute(
        value=_name(value) if isinstance(value, str) else value,
        attr=attr,
        ctx=ast.Load(),
    )


def _subscript(generic: str, inner: ast.expr) -> ast.Subscript:
    return ast.Subscript(value=_name(generic), slice=inner, ctx=ast.Load())


def _union_expr(types: list[ast.expr]) -> ast.expr:
    # A | B | C (using pipe operator instead of Union[A, B, C])
    if not types:
        raise ValueError('_union_expr requires at least one type')
    result = types[0]
    for t in types[1:]:
        result = ast.BinOp(left=result, op=ast.BitOr(), right=t)
    return result


def _argument(name: str, value: ast.expr | None = None) -> ast.arg:
    return ast.arg(arg=name, annotation=value)


def _assign(target: ast.expr, value: ast.expr) -> ast.Assign:
    # Ensure target has Store context
    if isinstance(target, ast.Name):
        target = ast.Name(id=target.id, ctx=ast.Store())
    elif isinstance(target, ast.Attribute):
        # For attributes, only the outermost needs Store context
        target.ctx = ast.Store()
    return ast.Assign(targets=[target], value=value)


def _import(module: str, names: list[str]) -> ast.ImportFrom:
    return ast.ImportFrom(
        module=module,
        names=[ast.alias(name=name) for name in names],
        level=0,
    )


def _call(
    func: ast.expr,
    args: list[ast.expr] | None = None,
    keywords: list[ast.keyword] | None = None,
) -> ast.Call:
    return ast.Call(func=func, args=args or [], keywords=keywords or [])


def _expr(value: ast.expr) -> ast.Expr:
    return ast.Expr(value=value)


def _return(value: ast.expr | None = None) -> ast.Return:
    return ast.Return(value=value)


def _if(
    test: ast.expr, body: list[ast.stmt], orelse: list[ast.stmt] | None = None
) -> ast.If:
    return ast.If(test=test, body=body, orelse=orelse or [])


def _is_none(value: ast.expr) -> ast.Compare:
    return ast.Compare(left=value, ops=[ast.Is()], comparators=[ast.Constant(None)])


def _is_not_none(value: ast.expr) -> ast.Compare:
    return ast.Compare(
        left=value, ops=[ast.IsNot()], comparators=[ast.Constant(None)]
    )


def _fstring(*parts: str | ast.expr) -> ast.JoinedStr:
    """Build an f-string; ``str`` parts are literal text, expressions are formatted."""
    values = []
    for part in parts:
        if isinstance(part, str):
            if part:
                values.append(ast.Constant(value=part))
        else:
            values.append(ast.FormattedValue(value=part, conversion=-1))
    return ast.JoinedStr(values=values)


def _with_type_params(node_type: type, **fields) -> ast.AST:
    # type_params only exists on Python 3.12+
    if 'type_params' in node_type._fields:
        fields.setdefault('type_params', [])
    return node_type(**fields)


def _func(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    kwonlyargs: list[ast.arg] | None = None,
    kw_defaults: list[ast.expr] | None = None,
    defaults: list[ast.expr] | None = None,
    decorators: list[ast.expr] | None = None,
) -> ast.FunctionDef:
    return _with_type_params(
        ast.FunctionDef,
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=args,
            vararg=None,
            kwarg=None,
            kwonlyargs=kwonlyargs or [],
            kw_defaults=kw_defaults or [],
            defaults=defaults or [],
        ),
        body=body,
        decorator_list=decorators or [],
        returns=returns,
    )


def _staticmethod(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
) -> ast.FunctionDef:
    return _func(name, args, body, returns=returns, decorators=[_name('staticmethod')])


def _class(
    name: str, body: list[ast.stmt], bases: list[ast.expr] | None = None
) -> ast.ClassDef:
    return _with_type_params(
        ast.ClassDef,
        name=name,
        bases=bases or [],
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=[],
    )


def _docstring(text: str) -> ast.Expr:
    return ast.Expr(value=ast.Constant(value=text))


def _all(names: Iterable[str]) -> ast.Assign:
    return _assign(
        target=_name('__all__'),
        value=ast.List(
            elts=[ast.Constant(value=name) for name in names], ctx=ast.Load()
        ),
    )


def _render(nodes: list[ast.stmt]) -> str:
    """Unparse a list of statements into source text."""
    module = ast.Module(body=nodes, type_ignores=[])
    ast.fix_missing_locations(module)
    return ast.unparse(module)


# =============================================================================
# Import Collection
# =============================================================================


class ImportCollector:
    """Collects and manages imports for generated Python code.

    This class provides a centralized way to collect imports from various
    sources during code generation and convert them to AST import statements.
    It automatically deduplicates imports and sorts them for consistent output.

    Example:
        >>> collector = ImportCollector()
        >>> collector.add_imports({'shapegen.runtime.xmlutil': {'characters'}})
        >>> collector.add_import('logging')
        >>> imports = collector.to_ast()
    """

    def __init__(self):
        """Initialize an empty import collector."""
        self._imports: dict[str, set[str]] = {}
        self._modules: set[str] = set()

    def add_imports(self, imports: dict[str, Iterable[str]]) -> None:
        """Add imports from a dictionary mapping modules to sets of names.

        Args:
            imports: Dictionary mapping module names to imported names.
        """
        for module, names in imports.items():
            self._imports.setdefault(module, set()).update(names)

    def add_import(self, module: str, name: str | None = None) -> None:
        """Add a single import.

        Args:
            module: The module to import from, or to import as a whole.
            name: The name to import; ``None`` emits ``import module``.
        """
        if name is None:
            self._modules.add(module)
        else:
            self._imports.setdefault(module, set()).add(name)

    def _get_import_category(self, module: str) -> int:
        """Get the sort category for a module.

        Returns:
            0 for ``__future__``, 1 for standard library, 2 for third-party.
        """
        if module == '__future__':
            return 0
        if module.split('.')[0] in sys.stdlib_module_names:
            return 1
        return 2

    def to_ast(self) -> list[ast.stmt]:
        """Convert collected imports to sorted AST import statements.

        Imports are grouped as ``__future__``, standard library and
        third-party; within each group plain ``import`` statements come
        before ``from`` imports of the same module, and names are sorted.
        """
        entries = [(module, None) for module in self._modules] + [
            (module, names) for module, names in self._imports.items()
        ]
        entries.sort(
            key=lambda entry: (
                self._get_import_category(entry[0]),
                entry[0],
                entry[1] is not None,
            )
        )

        import_stmts: list[ast.stmt] = []
        for module, names in entries:
            if names is None:
                import_stmts.append(ast.Import(names=[ast.alias(name=module)]))
            else:
                import_stmts.append(_import(module, sorted(names)))
        return import_stmts

    def has_imports(self) -> bool:
        return bool(self._imports or self._modules)

    def clear(self) -> None:
        self._imports.clear()
        self._modules.clear()
