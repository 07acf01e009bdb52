"""Type definitions and generation for shapegen code generation.

This module provides:
- Type dataclass for representing a generated data type
- TypeGenerator for creating pydantic models from structure shapes

Only structure shapes become classes. Lists, maps and primitives are spelled
out inline wherever they are used (``list[Bucket]``, ``dict[str, str]``,
``int``), so the shape graph maps onto a flat set of models that reference
each other by name.
"""

import ast
import dataclasses

from pydantic import BaseModel, ConfigDict, Field

from shapegen.codegen.ast_utils import (
    _attr,
    _call,
    _class,
    _docstring,
    _expr,
    _name,
    _union_expr,
)
from shapegen.codegen.protocol import GenerateProtocol
from shapegen.codegen.shape_utils import annotation_for, shape_type_name
from shapegen.codegen.utils import clean_docstring, field_name
from shapegen.exceptions import UnsupportedShapeError
from shapegen.model import Service, Shape, ShapeType

__all__ = ['Type', 'TypeGenerator', 'MODEL_IMPORTS']

MODEL_IMPORTS = {
    '__future__': {'annotations'},
    BaseModel.__module__.split('.')[0]: {
        BaseModel.__name__,
        ConfigDict.__name__,
        Field.__name__,
    },
}

_BUILTIN_ANNOTATIONS = {'bool', 'bytes', 'dict', 'float', 'int', 'list', 'str'}

_ZERO_VALUES = {
    ShapeType.string: '',
    ShapeType.timestamp: '',
    ShapeType.integer: 0,
    ShapeType.long: 0,
    ShapeType.float: 0.0,
    ShapeType.double: 0.0,
    ShapeType.boolean: False,
    ShapeType.blob: b'',
}


@dataclasses.dataclass
class Type:
    """A generated pydantic model.

    Attributes:
        name: The Python class name.
        shape_name: The structure shape the class was generated from.
        implementation_ast: The class definition.
        dependencies: Class names referenced by the field annotations.
    """

    name: str
    shape_name: str
    implementation_ast: ast.ClassDef
    dependencies: set[str] = dataclasses.field(default_factory=set)


def _field_factory(factory: ast.expr) -> ast.Call:
    return _call(
        _name('Field'), keywords=[ast.keyword(arg='default_factory', value=factory)]
    )


def _lambda(body: ast.expr) -> ast.Lambda:
    return ast.Lambda(
        args=ast.arguments(
            posonlyargs=[],
            args=[],
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=[],
        ),
        body=body,
    )


class TypeGenerator:
    """Generates one pydantic model per structure shape of a service.

    Required members get the zero value of their type as default (``''``,
    ``0``, ``False``, empty containers or a default-constructed model), so a
    model can always be built empty and filled field by field. Optional
    members are ``X | None`` and default to ``None``.

    Args:
        service: The service to generate models for.
        protocol: Supplies the statements every model body starts with and
            the timestamp annotation.
    """

    def __init__(self, service: Service, protocol: GenerateProtocol):
        self.service = service
        self.protocol = protocol
        self.timestamp_type = protocol.timestamp_type()

    def generate(self) -> list[Type]:
        """Generate models for all structure shapes in declaration order."""
        types = []
        for shape_name, shape in self.service.shapes.items():
            if not isinstance(shape.shape_type, ShapeType):
                raise UnsupportedShapeError(
                    shape_name, str(shape.shape_type), 'data type'
                )
            if shape.is_structure:
                types.append(self.generate_model(shape_name, shape))
        return types

    def generate_model(self, shape_name: str, shape: Shape) -> Type:
        name = shape_type_name(self.service, shape_name)
        body: list[ast.stmt] = []

        docstring = clean_docstring(shape.documentation)
        if docstring:
            body.append(_docstring(docstring))
        body.extend(ast.parse(self.protocol.generate_struct_attributes(name)).body)

        dependencies = set()
        for member_name, member in shape.iter_members():
            annotation = annotation_for(self.service, member.shape, self.timestamp_type)
            dependencies.update(
                node.id for node in ast.walk(annotation) if isinstance(node, ast.Name)
            )

            if shape.required(member_name) and not self._required_cycle(
                shape_name, member.shape
            ):
                value = self.zero_value(member.shape)
            else:
                annotation = _union_expr([annotation, ast.Constant(None)])
                value = ast.Constant(None)

            body.append(
                ast.AnnAssign(
                    target=_name(field_name(member_name)),
                    annotation=annotation,
                    value=value,
                    simple=1,
                )
            )

        model = _class(name, body, bases=[_name('BaseModel')])
        dependencies -= _BUILTIN_ANNOTATIONS | {self.timestamp_type}
        return Type(
            name=name,
            shape_name=shape_name,
            implementation_ast=model,
            dependencies=dependencies,
        )

    def zero_value(self, shape_name: str) -> ast.expr:
        """Default expression for a required member of the given shape."""
        shape = self.service.shape(shape_name)
        kind = shape.shape_type
        if kind is ShapeType.structure:
            # lambda: the class may be defined further down the module
            model = _name(shape_type_name(self.service, shape_name))
            return _field_factory(_lambda(_call(model)))
        if kind is ShapeType.list:
            return _field_factory(_name('list'))
        if kind is ShapeType.map:
            return _field_factory(_name('dict'))
        if kind in _ZERO_VALUES:
            return ast.Constant(_ZERO_VALUES[kind])
        raise UnsupportedShapeError(shape_name, str(kind), 'default value')

    def _required_cycle(self, owner: str, target: str) -> bool:
        """Whether defaulting ``target`` would construct ``owner`` again.

        A required member chain leading back to its owner has no finite
        default; such members are generated as optional instead.
        """
        pending = [target]
        seen = set()
        while pending:
            name = pending.pop()
            if name == owner:
                return True
            if name in seen:
                continue
            seen.add(name)
            shape = self.service.shape(name)
            if not shape.is_structure:
                continue
            for member_name, member in shape.iter_members():
                if shape.required(member_name):
                    pending.append(member.shape)
        return False

    @staticmethod
    def model_rebuilds(types: list[Type]) -> list[ast.stmt]:
        """``Model.model_rebuild()`` for every model, resolving forward references."""
        return [_expr(_call(_attr(t.name, 'model_rebuild'))) for t in types]
