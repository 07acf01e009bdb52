"""Test configuration for shapegen package."""

from unittest.mock import patch

import pytest

from shapegen.config import (
    CodegenConfig,
    ServiceConfig,
    expand_env_vars,
    get_config,
)
from shapegen.exceptions import ConfigurationError


class TestServiceConfig:
    """Test ServiceConfig model."""

    def test_valid_service_config(self):
        """Test creating a valid ServiceConfig with defaults."""
        config = ServiceConfig(source='models/s3.json', output='./generated')
        assert config.source == 'models/s3.json'
        assert config.output == './generated'
        assert config.module_name == 'client'
        assert config.protocol is None
        assert config.fixtures_dir is None
        assert config.generate_tests is False
        assert config.root_tag_overrides == {}

    def test_service_config_with_optional_fields(self):
        """Test ServiceConfig with all optional fields."""
        config = ServiceConfig(
            source='models/ec2.json',
            output='./ec2',
            module_name='ec2',
            protocol='ec2',
            fixtures_dir='./sample-data',
            generate_tests=True,
            root_tag_overrides={'Volume': 'CreateVolumeResponse'},
        )
        assert config.module_name == 'ec2'
        assert config.protocol == 'ec2'
        assert config.generate_tests is True
        assert config.root_tag_overrides == {'Volume': 'CreateVolumeResponse'}

    def test_service_config_validation(self):
        """Test ServiceConfig validation."""
        with pytest.raises(ValueError):
            ServiceConfig()  # missing required fields


class TestCodegenConfig:
    """Test CodegenConfig model."""

    def test_valid_codegen_config(self):
        """Test creating a valid CodegenConfig."""
        config = CodegenConfig(
            services=[ServiceConfig(source='s3.json', output='./s3')]
        )
        assert len(config.services) == 1
        assert config.max_workers is None

    def test_codegen_config_validation(self):
        """Test CodegenConfig validation."""
        with pytest.raises(ValueError):
            CodegenConfig()  # missing required services field

    def test_max_workers_must_be_positive(self):
        """Test that max_workers below 1 is rejected."""
        with pytest.raises(ValueError):
            CodegenConfig(services=[], max_workers=0)

    def test_max_workers_from_environment(self, monkeypatch):
        """Test that SHAPEGEN_ environment variables fill settings."""
        monkeypatch.setenv('SHAPEGEN_MAX_WORKERS', '3')
        config = CodegenConfig(services=[])
        assert config.max_workers == 3


class TestExpandEnvVars:
    """Test environment variable expansion in config values."""

    def test_expands_nested_values(self, monkeypatch):
        """Test expansion inside dicts and lists."""
        monkeypatch.setenv('MODEL_DIR', '/models')
        result = expand_env_vars(
            {'services': [{'source': '${MODEL_DIR}/s3.json', 'generate_tests': True}]}
        )
        assert result == {
            'services': [{'source': '/models/s3.json', 'generate_tests': True}]
        }

    def test_default_value(self, monkeypatch):
        """Test that ${VAR:-default} falls back when VAR is unset."""
        monkeypatch.delenv('SHAPEGEN_TEST_UNSET', raising=False)
        assert expand_env_vars('${SHAPEGEN_TEST_UNSET:-./out}') == './out'

    def test_missing_variable(self, monkeypatch):
        """Test that an unset variable without default is an error."""
        monkeypatch.delenv('SHAPEGEN_TEST_UNSET', raising=False)
        with pytest.raises(ConfigurationError, match='SHAPEGEN_TEST_UNSET'):
            expand_env_vars('${SHAPEGEN_TEST_UNSET}')

    def test_plain_strings_untouched(self):
        """Test that strings without placeholders are returned unchanged."""
        assert expand_env_vars('$HOME is not expanded') == '$HOME is not expanded'


class TestGetConfig:
    """Test get_config function."""

    def test_get_config_with_yaml_file(self, tmp_path):
        """Test loading config from YAML file."""
        path = tmp_path / 'config.yaml'
        path.write_text(
            """
services:
  - source: "models/s3.json"
    output: "./generated"
    generate_tests: true
max_workers: 2
"""
        )

        config = get_config(str(path))

        assert len(config.services) == 1
        assert config.services[0].source == 'models/s3.json'
        assert config.services[0].generate_tests is True
        assert config.max_workers == 2

    def test_get_config_with_json_file(self, tmp_path):
        """Test loading config from JSON file."""
        path = tmp_path / 'config.json'
        path.write_text(
            '{"services": [{"source": "models/ec2.json", "output": "./ec2"}]}'
        )

        config = get_config(str(path))

        assert config.services[0].output == './ec2'

    def test_explicit_path_not_found(self, tmp_path):
        """Test that a missing explicit config path is reported."""
        with pytest.raises(FileNotFoundError, match='config not found'):
            get_config(str(tmp_path / 'missing.yaml'))

    def test_invalid_config(self, tmp_path):
        """Test that validation errors name the file and the field."""
        path = tmp_path / 'config.yaml'
        path.write_text('services:\n  - source: models/s3.json\n')

        with pytest.raises(ConfigurationError) as exc_info:
            get_config(str(path))

        assert exc_info.value.config_path == str(path)
        assert exc_info.value.field == 'services.0.output'

    def test_get_config_default_yaml(self, tmp_path, monkeypatch):
        """Test loading config from default shapegen.yaml file."""
        (tmp_path / 'shapegen.yaml').write_text(
            'services:\n  - source: s3.json\n    output: ./out\n'
        )
        monkeypatch.chdir(tmp_path)

        config = get_config()

        assert config.services[0].source == 's3.json'

    def test_get_config_from_pyproject_toml(self, tmp_path, monkeypatch):
        """Test loading config from pyproject.toml file."""
        (tmp_path / 'pyproject.toml').write_text(
            '[project]\nname = "example"\n\n'
            '[[tool.shapegen.services]]\nsource = "ec2.json"\noutput = "./ec2"\n'
        )
        monkeypatch.chdir(tmp_path)

        config = get_config()

        assert config.services[0].source == 'ec2.json'

    def test_pyproject_without_table(self, tmp_path, monkeypatch):
        """Test that a pyproject.toml without [tool.shapegen] is not a config."""
        (tmp_path / 'pyproject.toml').write_text('[project]\nname = "example"\n')
        monkeypatch.chdir(tmp_path)

        with pytest.raises(FileNotFoundError, match='config not found'):
            get_config()

    @patch('os.getcwd')
    @patch('pathlib.Path.exists')
    def test_get_config_file_not_found(self, mock_exists, mock_getcwd):
        """Test FileNotFoundError when no config file exists."""
        mock_getcwd.return_value = '/test/dir'
        mock_exists.return_value = False

        with pytest.raises(FileNotFoundError, match='config not found'):
            get_config()
