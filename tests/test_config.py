import json
from pathlib import Path

from mindustry_manager.local.config import MergedSettings


def test_defaults_without_overrides(tmp_path):
    settings = MergedSettings(tmp_path / "overrides.json")

    assert settings.AUTOSAVE_INTERVAL_SECONDS == 5
    assert settings.GAME_MODE == "survival"
    assert settings.SAVE_EXTENSION == ".msav"
    assert settings.SAVES_DIR.parts[-2:] == ("config", "saves")


def test_only_modifiable_settings_are_overridden(tmp_path):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({
        "AUTOSAVE_INTERVAL_SECONDS": "30",
        "DEFAULT_MAP": "Frozen_Forest",
        "SERVER_JAR": "other.jar",
        "NOT_A_SETTING": 1,
    }))

    settings = MergedSettings(overrides)

    assert settings.AUTOSAVE_INTERVAL_SECONDS == 30
    assert settings.DEFAULT_MAP == "Frozen_Forest"
    assert settings.SERVER_JAR != "other.jar"
    assert not hasattr(settings, "NOT_A_SETTING")


def test_malformed_overrides_are_ignored(tmp_path, caplog):
    overrides = tmp_path / "overrides.json"
    overrides.write_text("{not json")

    settings = MergedSettings(overrides)

    assert settings.AUTOSAVE_INTERVAL_SECONDS == 5
    assert "Failed to load or parse overrides file" in caplog.text


def test_set_coerces_to_default_type(tmp_path):
    settings = MergedSettings(tmp_path / "overrides.json")
    settings.EXAMPLE_FLAG = False

    settings.set("WEB_SERVER_PORT", "9090")
    settings.set("SAVES_DIR", "/srv/saves")
    settings.set("EXAMPLE_FLAG", "yes")

    assert settings.WEB_SERVER_PORT == 9090
    assert settings.SAVES_DIR == Path("/srv/saves")
    assert settings.EXAMPLE_FLAG is True


def test_fractional_intervals_are_kept(tmp_path):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({
        "AUTOSAVE_INTERVAL_SECONDS": 2.5,
        "GRACEFUL_SHUTDOWN_TIMEOUT": "0.5",
    }))

    settings = MergedSettings(overrides)

    assert settings.AUTOSAVE_INTERVAL_SECONDS == 2.5
    assert settings.GRACEFUL_SHUTDOWN_TIMEOUT == 0.5


def test_unconvertible_override_keeps_default(tmp_path, caplog):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({
        "AUTOSAVE_INTERVAL_SECONDS": "every few seconds",
        "GRACEFUL_SHUTDOWN_TIMEOUT": None,
        "DEFAULT_MAP": "Frozen_Forest",
    }))

    settings = MergedSettings(overrides)

    assert settings.AUTOSAVE_INTERVAL_SECONDS == 5.0
    assert settings.GRACEFUL_SHUTDOWN_TIMEOUT == 10.0
    assert settings.DEFAULT_MAP == "Frozen_Forest"
    assert "Invalid value 'every few seconds' for setting 'AUTOSAVE_INTERVAL_SECONDS'" in caplog.text


def test_overrides_must_be_an_object(tmp_path, caplog):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps(["AUTOSAVE_INTERVAL_SECONDS", 1]))

    settings = MergedSettings(overrides)

    assert settings.AUTOSAVE_INTERVAL_SECONDS == 5.0
    assert "must contain a JSON object" in caplog.text
