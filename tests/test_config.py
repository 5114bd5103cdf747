import pytest
from pathlib import Path
from pydantic import ValidationError

from video_queue.config import env_overrides, load_yaml, merge_dicts, resolve_config
from video_queue.models import AppConfig, postgres_url


def test_default_config_loads():
    """Test defaults resolve without errors when no environment is set."""
    config = resolve_config(environ={})
    assert isinstance(config, AppConfig)
    assert config.discovery.videos_dir == "./videos"
    assert config.discovery.extensions == [".mp4"]
    assert config.pagination.default_page_size == 10
    assert config.pagination.max_page_size == 100
    assert config.server.api_prefix == "/api"


def test_database_url_env_override():
    config = resolve_config(environ={"DATABASE_URL": "sqlite:///./other.db"})
    assert config.database.url == "sqlite:///./other.db"


def test_discrete_db_env_builds_postgres_url():
    environ = {
        "DB_HOST": "db",
        "DB_PORT": "5432",
        "DB_USER": "postgres",
        "DB_PASSWORD": "secret",
        "DB_NAME": "videoqueue",
    }
    config = resolve_config(environ=environ)
    assert config.database.url == "postgresql://postgres:secret@db:5432/videoqueue"


def test_database_url_wins_over_discrete_vars():
    overrides = env_overrides({"DATABASE_URL": "sqlite:///./a.db", "DB_HOST": "db"})
    assert overrides["database"]["url"] == "sqlite:///./a.db"


def test_videos_dir_env_override():
    config = resolve_config(environ={"VIDEOS_DIR": "/srv/videos"})
    assert config.discovery.videos_dir == "/srv/videos"


def test_cli_override_beats_environment():
    config = resolve_config({"videos_dir": "/cli/videos"}, environ={"VIDEOS_DIR": "/env/videos"})
    assert config.discovery.videos_dir == "/cli/videos"


def test_cli_override_port():
    config = resolve_config({"port": 9000}, environ={})
    assert config.server.port == 9000


def test_postgres_url_without_credentials():
    assert postgres_url("localhost", None, None, None, "q") == "postgresql://localhost/q"


def test_extensions_are_normalized():
    config = AppConfig.from_dict({"discovery": {"extensions": ["MP4", ".Mov"]}})
    assert config.discovery.extensions == [".mov", ".mp4"]


def test_empty_extensions_rejected():
    with pytest.raises(ValidationError):
        AppConfig.from_dict({"discovery": {"extensions": []}})


def test_max_page_size_below_default_rejected():
    with pytest.raises(ValidationError):
        AppConfig.from_dict({"pagination": {"default_page_size": 50, "max_page_size": 20}})


def test_missing_yaml_returns_empty_dict():
    """Test graceful handling of missing config files."""
    result = load_yaml(Path("nonexistent.yaml"))
    assert result == {}


def test_merge_dicts_is_recursive():
    merged = merge_dicts({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}}

