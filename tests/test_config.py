import pytest
from pydantic import ValidationError

from config import HabitLifeConfig, StoreBackend


def test_defaults():
    cfg = HabitLifeConfig()
    assert cfg.AUTOSAVE_DELAY_MS == 450
    assert cfg.autosave_delay == pytest.approx(0.45)
    assert cfg.GOALS_TOP_N == 6
    assert cfg.STORE_BACKEND is StoreBackend.MEMORY


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("HABITLIFE_AUTOSAVE_DELAY_MS", "100")
    monkeypatch.setenv("HABITLIFE_STORE_BACKEND", "json")
    cfg = HabitLifeConfig()
    assert cfg.autosave_delay == pytest.approx(0.1)
    assert cfg.STORE_BACKEND is StoreBackend.JSON


def test_log_level_normalized():
    assert HabitLifeConfig(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("field, value", [
    ("LOG_LEVEL", "LOUD"),
    ("TIMEZONE", "Mars/Olympus"),
    ("DASHBOARD_PORT", 70000),
    ("AUTOSAVE_DELAY_MS", -1),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        HabitLifeConfig(**{field: value})


def test_log_file_only_when_enabled(tmp_path):
    assert HabitLifeConfig(LOG_TO_FILE=False).log_file is None
    cfg = HabitLifeConfig(LOG_TO_FILE=True, LOG_DIR=tmp_path / "logs", DATA_DIR=tmp_path / "data")
    cfg.ensure_directories()
    assert cfg.log_file == tmp_path / "logs" / "habitlife.log"
    assert (tmp_path / "data").is_dir()
