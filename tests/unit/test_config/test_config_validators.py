"""
Unit tests for configuration validation functionality.

Tests the validation of the host, build and run sections and of the
individual field validators they are built on.
"""

import pytest

from rebirth.config.validators import (
    validate_build_config,
    validate_host_config,
    validate_run_config,
)
from rebirth.models import DEFAULT_BUILD_COMMAND
from rebirth.validation import (
    ValidationError,
    validate_command_list,
    validate_command_template,
    validate_container_name,
    validate_env_mapping,
)


@pytest.mark.unit
class TestHostConfigValidation:
    """Test cases for the [host] section."""

    def test_missing_section_means_local(self):
        assert validate_host_config(None).docker == ""

    def test_empty_docker_means_local(self):
        assert validate_host_config({"docker": ""}).docker == ""

    def test_valid_container_name(self):
        assert validate_host_config({"docker": "my_app-1.dev"}).docker == "my_app-1.dev"

    def test_invalid_container_name(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_host_config({"docker": "bad name!"})

        assert exc_info.value.field_name == "host.docker"

    def test_section_must_be_table(self):
        with pytest.raises(ValidationError):
            validate_host_config(["app"])


@pytest.mark.unit
class TestBuildConfigValidation:
    """Test cases for the [build] section."""

    def test_defaults(self):
        build = validate_build_config(None)

        assert build.init == ()
        assert build.before == ()
        assert build.after == ()
        assert build.env == {}
        assert build.command == DEFAULT_BUILD_COMMAND
        assert build.source == "."

    def test_full_section(self, sample_config_data):
        build = validate_build_config(sample_config_data["build"])

        assert build.init == ("echo hi",)
        assert build.before == ("echo before",)
        assert build.after == ("echo after",)
        assert build.command == "cp {source}/app.sh {output}"
        assert build.source == "app"
        # Numbers are converted for the process environment
        assert build.env == {"CACHE_DIR": "~/.cache/app", "JOBS": "4"}

    def test_command_order_is_preserved(self):
        build = validate_build_config({"before": ["c", "a", "b"]})
        assert build.before == ("c", "a", "b")

    def test_init_must_be_list(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_build_config({"init": "go mod download"})

        assert "build.init" in str(exc_info.value)

    def test_empty_command_in_list(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_build_config({"after": ["echo ok", "  "]})

        assert exc_info.value.field_name == "build.after[1]"

    def test_command_template_needs_output(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_build_config({"command": "make"})

        assert "{output}" in str(exc_info.value)

    def test_unknown_keys_are_warned(self, caplog):
        validate_build_config({"befor": ["echo"]})
        assert "befor" in caplog.text


@pytest.mark.unit
class TestRunConfigValidation:
    """Test cases for the [run] section."""

    def test_env_mapping(self):
        run = validate_run_config({"env": {"PORT": 8080, "DEBUG": False}})
        assert run.env == {"PORT": "8080", "DEBUG": "false"}

    def test_missing_section(self):
        assert validate_run_config(None).env == {}


@pytest.mark.unit
class TestFieldValidators:
    """Test cases for the generic field validators."""

    def test_validate_command_list_none(self):
        assert validate_command_list(None) == ()

    def test_validate_command_list_strips(self):
        assert validate_command_list(["  go vet ./... "]) == ("go vet ./...",)

    def test_validate_env_mapping_rejects_bad_name(self):
        with pytest.raises(ValidationError):
            validate_env_mapping({"1ABC": "x"})

    def test_validate_env_mapping_rejects_nested(self):
        with pytest.raises(ValidationError):
            validate_env_mapping({"PATHS": ["a", "b"]})

    def test_validate_container_name_empty(self):
        with pytest.raises(ValidationError):
            validate_container_name("")

    def test_validate_command_template_unknown_placeholder(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_command_template("go build -o {output} {target}")

        assert "placeholder" in str(exc_info.value)
