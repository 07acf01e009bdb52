"""Code emitter interfaces and implementations for code generation output.

This module provides the CodeEmitter interface and concrete implementations
for emitting generated code in different forms (Python files, strings).
"""

import ast
from abc import ABC, abstractmethod
from pathlib import Path

from upath import UPath

from shapegen.codegen.ast_utils import _all, _render
from shapegen.exceptions import CodeGenerationError, OutputError

__all__ = ['CodeEmitter', 'FileEmitter', 'StringEmitter']


def _validate_syntax(source: str, name: str) -> None:
    """Validate that source code has valid Python syntax.

    Raises:
        CodeGenerationError: If the source code is not valid Python.
    """
    try:
        ast.parse(source, filename=f'{name}.py')
    except SyntaxError as e:
        raise CodeGenerationError(
            'Generated code has invalid syntax', context=f'{name}.py', cause=e
        ) from e


def _init_source(exports: list[str] | None) -> str:
    if not exports:
        return ''
    return _render([_all(exports)]) + '\n'


class CodeEmitter(ABC):
    """Abstract base class for code emitters.

    A CodeEmitter takes the source text of a generated module and outputs
    it somewhere (files, strings, ...).
    """

    @abstractmethod
    def emit_module(self, source: str, name: str) -> str:
        """Emit a complete Python module.

        Args:
            source: The module source text.
            name: The module name (used for file naming or identification).

        Returns:
            The path to the emitted file, or the code string, depending
            on the implementation.
        """

    @abstractmethod
    def emit_init(self, exports: list[str] | None = None) -> str:
        """Emit the package ``__init__`` module.

        Args:
            exports: Optional list of names to include in ``__all__``.
        """


class FileEmitter(CodeEmitter):
    """Emits generated code to Python files on disk.

    This emitter writes generated code to files in a specified output
    directory, handling directory creation and syntax validation. Any
    ``universal_pathlib`` location is accepted as output directory.
    """

    def __init__(
        self,
        output_dir: str | Path | UPath,
        validate_syntax: bool = True,
        create_init: bool = True,
    ):
        """Initialize the file emitter.

        Args:
            output_dir: Directory where files will be written.
            validate_syntax: Whether to validate Python syntax before writing.
            create_init: Whether to create an ``__init__.py`` file.
        """
        self.output_dir = UPath(output_dir)
        self.validate_syntax = validate_syntax
        self.create_init = create_init
        self._written_files: list[str] = []

    def emit_module(self, source: str, name: str) -> str:
        if self.validate_syntax:
            _validate_syntax(source, name)
        return self._write_file(f'{name}.py', source)

    def emit_init(self, exports: list[str] | None = None) -> str:
        if not self.create_init:
            return ''
        return self._write_file('__init__.py', _init_source(exports))

    def _write_file(self, filename: str, content: str) -> str:
        """Write content to a file in the output directory.

        Returns:
            The path to the written file.
        """
        file_path = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), cause=e) from e

        self._written_files.append(str(file_path))
        return str(file_path)

    def get_written_files(self) -> list[str]:
        """Get list of all files written by this emitter."""
        return self._written_files.copy()


class StringEmitter(CodeEmitter):
    """Emits generated code as strings.

    This emitter is useful for testing or when you need to manipulate
    the generated code before writing it.
    """

    def __init__(self, validate_syntax: bool = True):
        self.validate_syntax = validate_syntax
        self._modules: dict[str, str] = {}

    def emit_module(self, source: str, name: str) -> str:
        if self.validate_syntax:
            _validate_syntax(source, name)
        self._modules[name] = source
        return source

    def emit_init(self, exports: list[str] | None = None) -> str:
        source = _init_source(exports)
        self._modules['__init__'] = source
        return source

    def get_module(self, name: str) -> str | None:
        """Get a previously emitted module by name."""
        return self._modules.get(name)

    def get_all_modules(self) -> dict[str, str]:
        """Get all emitted modules."""
        return self._modules.copy()
