import pytest

from questlog import config


@pytest.fixture
def cfg(tmp_questlog_dir, monkeypatch):
    monkeypatch.setattr(config._config, "_data", {})
    return config._config


def test_week_start_defaults_to_monday(cfg):
    assert config.get_week_start() == 1


def test_week_start_round_trip(cfg, tmp_questlog_dir):
    config.set_week_start(7)
    assert config.get_week_start() == 7
    assert "week_start: 7" in (tmp_questlog_dir / "config.yaml").read_text()


def test_week_start_rejects_bad_value(cfg):
    with pytest.raises(ValueError):
        config.set_week_start(9)


def test_week_start_ignores_garbage_on_disk(cfg):
    cfg._data["week_start"] = "sunday"
    assert config.get_week_start() == 1


def test_reload_reads_yaml(cfg, tmp_questlog_dir):
    (tmp_questlog_dir / "config.yaml").write_text("refresh_workers: 4\nweek_start: 3\n")
    cfg.reload()
    assert config.get_refresh_workers() == 4
    assert config.get_week_start() == 3


def test_refresh_workers_floor(cfg):
    cfg._data["refresh_workers"] = 0
    assert config.get_refresh_workers() == 1
