import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shapegen.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['shapegen.yaml', 'shapegen.yml']

_ENV_VAR_RE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')


class ServiceConfig(BaseModel):
    """Represents a single service model to generate a client for."""

    source: str = Field(..., description='Path or URL to the service model.')

    output: str = Field(..., description='Output directory for the generated code.')

    module_name: str = Field(
        'client', description='Module name (without .py) of the generated client.'
    )

    protocol: str | None = Field(
        None,
        description='Wire protocol to generate for; defaults to the protocol in the model metadata.',
    )

    fixtures_dir: str | None = Field(
        None,
        description='Directory of recorded sample responses used for generated tests.',
    )

    generate_tests: bool = Field(
        False, description='Whether to write a test module driven by the fixtures.'
    )

    root_tag_overrides: dict[str, str] = Field(
        default_factory=dict,
        description='Extra response root tag overrides, derived root tag -> wire tag.',
    )


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SHAPEGEN_')

    services: list[ServiceConfig] = Field(
        ..., description='List of service models to process.'
    )

    max_workers: int | None = Field(
        None,
        description='Threads used to generate serializers and deserializers; sequential when unset.',
        ge=1,
    )


def expand_env_vars(value: Any) -> Any:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in all strings of a config tree.

    Raises:
        ConfigurationError: If a variable without default is not set.
    """
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def replace(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        if name in os.environ:
            return os.environ[name]
        if default is not None:
            return default
        raise ConfigurationError(f'Environment variable {name} is not set')

    return _ENV_VAR_RE.sub(replace, value)


def load_yaml(path: str | Path) -> dict:
    import yaml

    return yaml.load(Path(path).read_text(), Loader=yaml.FullLoader)


def _validate(content: Any, path: Path) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(expand_env_vars(content or {}))
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f'Invalid configuration: {first["msg"]}',
            config_path=str(path),
            field='.'.join(str(part) for part in first['loc']),
        ) from e


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file, the working directory or pyproject.toml."""
    if path:
        if not Path(path).exists():
            raise FileNotFoundError(f'config not found: {path}')
        return _validate(load_yaml(path), Path(path))

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        path = Path(cwd) / filename
        if path.exists():
            return _validate(load_yaml(path), path)

    path = Path(os.getcwd()) / 'pyproject.toml'

    if path.exists():
        import tomllib

        pyproject = tomllib.loads(path.read_text())
        tools = pyproject.get('tool', {})

        if 'shapegen' in tools:
            return _validate(tools['shapegen'], path)

    raise FileNotFoundError('config not found')
