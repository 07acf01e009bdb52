"""Service model loading.

This module provides utilities for:
- Loading botocore-style service descriptions from URLs or local files
  (JSON or YAML)
- Validating them into a :class:`~shapegen.model.Service`
- Checking the cross-references the generators rely on
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from shapegen.codegen.utils import is_url
from shapegen.exceptions import ModelLoadError, ModelValidationError
from shapegen.model import Location, Service, ShapeType

logger = logging.getLogger(__name__)

__all__ = ['ServiceLoader', 'check_references']


class ServiceLoader:
    """Loads service models from URLs or file paths.

    Example:
        >>> loader = ServiceLoader()
        >>> service = loader.load('models/s3-2006-03-01.json')
        >>> service.client_type_name
        'S3Client'
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
    ):
        """Initialize the service loader.

        Args:
            http_client: Optional HTTP client to use for URL requests.
            base_path: Base path for resolving relative file paths.
                Defaults to the current working directory.
        """
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, source: str) -> Service:
        """Load and validate a service model from a URL or file path.

        Args:
            source: URL or file path of the service description.

        Returns:
            The validated service model.

        Raises:
            ModelLoadError: If the source cannot be read or parsed.
            ModelValidationError: If the content is not a valid service model.
        """
        try:
            if is_url(source):
                content = self._load_from_url(source)
            else:
                content = self._load_from_file(source)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(source, cause=e)

        return self.load_dict(content, source)

    def load_dict(self, content: Any, source: str = '<dict>') -> Service:
        """Validate an already parsed service description.

        Operations without a ``name`` take it from their key.
        """
        if not isinstance(content, dict):
            raise ModelValidationError(source, ['service description must be a mapping'])

        operations = content.get('operations') or {}
        if isinstance(operations, dict):
            content = {
                **content,
                'operations': {
                    key: {'name': key, **value} if isinstance(value, dict) else value
                    for key, value in operations.items()
                },
            }

        try:
            service = Service.model_validate(content)
        except ValidationError as e:
            errors = [
                f'{".".join(str(part) for part in error["loc"])}: {error["msg"]}'
                for error in e.errors()
            ]
            raise ModelValidationError(source, errors) from e

        errors = check_references(service)
        if errors:
            raise ModelValidationError(source, errors)

        logger.info(
            f'Loaded {service.service_type_name} from {source}: '
            f'{len(service.operations)} operations, {len(service.shapes)} shapes'
        )
        return service

    def _load_from_url(self, url: str) -> Any:
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ModelLoadError(url, cause=e)

        content_type = response.headers.get('content-type', '')
        try:
            if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
                return yaml.safe_load(response.text)
            return json.loads(response.text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ModelLoadError(url, cause=e)

    def _load_from_file(self, file_path: str) -> Any:
        path = Path(file_path)
        if not path.is_absolute():
            path = self._base_path / path

        if not path.exists():
            raise ModelLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            content = path.read_text(encoding='utf-8')
            if path.suffix.lower() in ('.yaml', '.yml'):
                return yaml.safe_load(content)
            return json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ModelLoadError(str(file_path), cause=e)


def check_references(service: Service) -> list[str]:
    """Return the broken cross-references of a service, if any.

    Checks that every shape reference resolves, that lists and maps declare
    their element shapes, and that every URI placeholder of an operation has
    an input member located in the URI under that name.
    """
    errors = []
    shapes = service.shapes

    def check(shape_name: str, referrer: str) -> None:
        if shape_name not in shapes:
            errors.append(f"{referrer}: unknown shape '{shape_name}'")

    for name, shape in shapes.items():
        if shape.shape_type is ShapeType.structure:
            for member_name, member in (shape.members or {}).items():
                check(member.shape, f'{name}.{member_name}')
            if shape.payload and shape.payload not in (shape.members or {}):
                errors.append(f"{name}: payload member '{shape.payload}' does not exist")
        elif shape.shape_type is ShapeType.list:
            if shape.member is None:
                errors.append(f'{name}: list shape without member')
            else:
                check(shape.member.shape, f'{name}.member')
        elif shape.shape_type is ShapeType.map:
            if shape.key is None or shape.value is None:
                errors.append(f'{name}: map shape without key or value')
            else:
                check(shape.key.shape, f'{name}.key')
                check(shape.value.shape, f'{name}.value')

    for name, operation in service.operations.items():
        refs = [('input', operation.input), ('output', operation.output)]
        refs.extend(('errors', ref) for ref in operation.errors)
        for label, ref in refs:
            if ref is not None:
                check(ref.shape, f'{name}.{label}')

        placeholders = operation.http.placeholders()
        if not placeholders:
            continue
        input_shape = shapes.get(operation.input.shape) if operation.input else None
        uri_names = set()
        if input_shape is not None:
            uri_names = {
                member.tag_name(member_name)
                for member_name, member in (input_shape.members or {}).items()
                if member.location is Location.uri
            }
        for placeholder in placeholders:
            if placeholder not in uri_names:
                errors.append(
                    f"{name}: URI placeholder '{{{placeholder}}}' has no uri member"
                )

    return errors
