import os
import yaml
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .models import AppConfig, postgres_url

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
LOCAL_CONFIG_PATH = Path("config/local.yaml")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def merge_dicts(base: Dict, override: Dict) -> Dict:
    """Recursive merge of two dictionaries."""
    result = base.copy()
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Translate environment variables into a config dict.

    DATABASE_URL wins over the discrete DB_HOST/DB_PORT/DB_USER/DB_PASSWORD/DB_NAME
    variables, which are only used when DB_HOST is set.
    """
    overrides: Dict[str, Any] = {}
    if environ.get("DATABASE_URL"):
        overrides["database"] = {"url": environ["DATABASE_URL"]}
    elif environ.get("DB_HOST"):
        overrides["database"] = {
            "url": postgres_url(
                environ["DB_HOST"],
                environ.get("DB_PORT"),
                environ.get("DB_USER"),
                environ.get("DB_PASSWORD"),
                environ.get("DB_NAME"),
            )
        }
    if environ.get("VIDEOS_DIR"):
        overrides["discovery"] = {"videos_dir": environ["VIDEOS_DIR"]}
    return overrides


def resolve_config(
    cli_args: Dict[str, Any] = None, environ: Optional[Mapping[str, str]] = None
) -> AppConfig:
    """
    Resolve config: Default < Local < Environment < CLI
    Returns validated Pydantic AppConfig model.
    """
    cli_args = cli_args or {}
    environ = os.environ if environ is None else environ

    # 1. Load default YAML
    config_data = load_yaml(DEFAULT_CONFIG_PATH)

    # 2. Merge local overrides
    config_data = merge_dicts(config_data, load_yaml(LOCAL_CONFIG_PATH))

    # 3. Merge environment
    config_data = merge_dicts(config_data, env_overrides(environ))

    # 4. Validate and apply CLI overrides
    config = AppConfig.from_dict(config_data)
    return config.merge_cli_overrides(cli_args)
