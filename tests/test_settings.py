from pathlib import Path

import pytest

from factorygen.conf import CONFIG_ENVVAR, DEFAULTS, GeneratorConfig, Settings
from factorygen.exceptions import ConfigurationError


def test_defaults():
    config = GeneratorConfig.from_settings(Settings())

    assert config.output_dir == Path("generated")
    assert config.generated_package is None
    assert config.factory_suffix == "Factory"
    assert config.module_suffix == "_factory"
    assert config.fail_fast is False
    assert config.max_superclass_depth == 64
    assert config.runtime_module == "factorygen.runtime"


def test_layers_override_defaults_without_mutating_them():
    settings = Settings({"FAIL_FAST": True})
    settings["OUTPUT_DIR"] = "build/gen"

    assert settings["FAIL_FAST"] is True
    assert GeneratorConfig.from_settings(settings).output_dir == Path("build/gen")
    assert DEFAULTS["FAIL_FAST"] is False

    del settings["OUTPUT_DIR"]
    assert settings["OUTPUT_DIR"] == "generated"


def test_update_from_mapping_ignores_lowercase_keys():
    settings = Settings()
    settings.update_from_mapping({"FACTORY_SUFFIX": "Maker", "helper": object()})

    assert settings["FACTORY_SUFFIX"] == "Maker"
    assert "helper" not in settings


def test_update_from_object_with_namespace(tmp_path, monkeypatch):
    (tmp_path / "custom_settings.py").write_text(
        "FACTORYGEN_FAIL_FAST = True\nFACTORYGEN_MODULE_SUFFIX = '_maker'\nOTHER = 1\n", encoding="utf-8"
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    settings = Settings()
    settings.update_from_object("custom_settings", namespace="FACTORYGEN")

    assert settings["FAIL_FAST"] is True
    assert settings["MODULE_SUFFIX"] == "_maker"
    assert "OTHER" not in settings


def test_update_from_envvar(tmp_path, monkeypatch):
    (tmp_path / "custom_settings.py").write_text("GENERATED_PACKAGE = 'gen.factories'\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv(CONFIG_ENVVAR, "custom_settings")

    settings = Settings()
    settings.update_from_envvar()

    assert GeneratorConfig.from_settings(settings).generated_package == "gen.factories"


def test_missing_envvar_is_a_noop():
    settings = Settings()
    settings.update_from_envvar()

    assert settings.as_dict() == dict(DEFAULTS)


@pytest.mark.parametrize(
    "override",
    [
        {"MAX_SUPERCLASS_DEPTH": 0},
        {"GENERATED_PACKAGE": "not a package"},
        {"FACTORY_SUFFIX": "-Factory"},
        {"MODULE_SUFFIX": ".py"},
        {"ANNOTATION_NAMES": ()},
        {"UNKNOWN_SETTING": 1},
    ],
)
def test_invalid_settings_raise_configuration_error(override):
    with pytest.raises(ConfigurationError):
        GeneratorConfig.from_settings(Settings(override))


def test_config_is_frozen():
    config = GeneratorConfig.from_settings(Settings())

    with pytest.raises(Exception):
        config.fail_fast = True


def test_overrides_win_over_settings_module(tmp_path, monkeypatch):
    (tmp_path / "custom_settings.py").write_text("FACTORY_SUFFIX = 'Maker'\nFAIL_FAST = True\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv(CONFIG_ENVVAR, "custom_settings")

    settings = Settings.from_environment({"FACTORY_SUFFIX": "Builder"})

    assert settings["FACTORY_SUFFIX"] == "Builder"
    assert settings["FAIL_FAST"] is True
    assert [settings.origin(key) for key in ("FACTORY_SUFFIX", "FAIL_FAST", "ENCODING")] == [
        "override",
        "module",
        "default",
    ]

    del settings["FACTORY_SUFFIX"]
    assert settings["FACTORY_SUFFIX"] == "Maker"


def test_unimportable_settings_module_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv(CONFIG_ENVVAR, "custom_settings")

    with pytest.raises(ConfigurationError, match="custom_settings"):
        Settings.from_environment()
