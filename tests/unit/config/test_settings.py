"""Unit tests for ResolverSettings."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from clientconfig.config.locator import ResourceLocator
from clientconfig.config.settings import DEFAULT_ROOT_ELEMENT, ResolverSettings


def test_defaults():
    settings = ResolverSettings()

    assert settings.root_element == DEFAULT_ROOT_ELEMENT
    assert settings.import_element == "import"
    assert settings.resource_attribute == "resource"
    assert settings.classpath == ["clientconfig.resources"]
    assert settings.strict_placeholders is False
    assert settings.include_environment is True
    assert settings.config_location is None


def test_environment_overrides(monkeypatch, tmp_path):
    """Should read CLIENTCONFIG_* variables."""
    monkeypatch.setenv("CLIENTCONFIG_STRICT_PLACEHOLDERS", "true")
    monkeypatch.setenv("CLIENTCONFIG_CONFIG_LOCATION", "classpath:custom.xml")
    monkeypatch.setenv("CLIENTCONFIG_CLASSPATH", '["/opt/configs", "clientconfig.resources"]')
    monkeypatch.setenv("CLIENTCONFIG_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("CLIENTCONFIG_HTTP_TIMEOUT", "2.5")

    settings = ResolverSettings()

    assert settings.strict_placeholders is True
    assert settings.config_location == "classpath:custom.xml"
    assert settings.classpath == ["/opt/configs", "clientconfig.resources"]
    assert settings.base_dir == Path(tmp_path)
    assert settings.http_timeout == 2.5


def test_explicit_values_beat_environment(monkeypatch):
    monkeypatch.setenv("CLIENTCONFIG_INCLUDE_ENVIRONMENT", "true")

    assert ResolverSettings(include_environment=False).include_environment is False


@pytest.mark.parametrize("field", ["root_element", "import_element", "resource_attribute"])
def test_names_must_not_be_empty(field):
    with pytest.raises(ValidationError):
        ResolverSettings(**{field: "  "})


def test_names_are_stripped():
    assert ResolverSettings(root_element=" config ").root_element == "config"


@pytest.mark.parametrize("timeout", [0, -1.0])
def test_http_timeout_must_be_positive(timeout):
    with pytest.raises(ValidationError):
        ResolverSettings(http_timeout=timeout)


def test_locator_from_settings(tmp_path):
    settings = ResolverSettings(base_dir=tmp_path, classpath=[str(tmp_path)], http_timeout=3)

    locator = ResourceLocator.from_settings(settings)

    assert locator.base_dir == tmp_path
    assert locator.classpath == [str(tmp_path)]
    assert locator.timeout == 3
