"""Read an ``AppConfig`` from YAML."""

from pathlib import Path

import yaml

from perspective_lens.config.models import AppConfig

_REPO_ROOT = Path(__file__).resolve().parents[3]


def load_config(path: Path | str) -> AppConfig:
    """Parse and validate the YAML file at ``path``.

    Keys left out of the file keep their model defaults; a blank file is the
    same as ``AppConfig()``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        pydantic.ValidationError: If a value fails validation.
    """
    text = Path(path).read_text()
    return AppConfig.model_validate(yaml.safe_load(text) or {})


def get_default_config_path() -> Path:
    return _REPO_ROOT / "configs" / "default.yaml"
