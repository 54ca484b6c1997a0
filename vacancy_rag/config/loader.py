"""YAML configuration loader layered under environment settings.

Configuration is resolved in layers (later layers win):

  1. ``config/config.yaml`` -- tuning defaults checked into the repo
  2. ``.env`` file          -- local developer overrides (not committed)
  3. Environment vars       -- set at deploy time

Only the tuning keys listed in ``_YAML_TO_SETTINGS`` are read from YAML;
credentials, provider choice and storage paths come from the environment.
"""

import os
from pathlib import Path
from typing import Any

import yaml

from vacancy_rag.config.settings import Settings

_DEFAULT_CONFIG_PATH = "config/config.yaml"

# YAML section/key -> Settings field name.
_YAML_TO_SETTINGS: dict[tuple[str, str], str] = {
    ("ingestion", "chunk_size"): "chunk_size",
    ("ingestion", "chunk_overlap"): "chunk_overlap",
    ("ingestion", "document_preview_chars"): "document_preview_chars",
    ("ingestion", "extraction_timeout_seconds"): "extraction_timeout_seconds",
    ("embedding", "max_chars"): "embedding_max_chars",
    ("synthesis", "enabled"): "synthesis_enabled",
    ("synthesis", "source_chars"): "synthesis_source_chars",
    ("synthesis", "summary_model"): "summary_model",
    ("synthesis", "questions_model"): "questions_model",
    ("synthesis", "summary_max_tokens"): "summary_max_tokens",
    ("synthesis", "questions_max_tokens"): "questions_max_tokens",
}


def _read_yaml(path: str) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def settings_from_config(path: str = _DEFAULT_CONFIG_PATH) -> Settings:
    """Build Settings, using YAML values for fields the environment leaves unset.

    Args:
        path: Path to the YAML configuration file. A missing file is not an
              error; Settings defaults apply.
    """
    yaml_config = _read_yaml(path)
    defaults: dict[str, Any] = {}
    for (section, key), field in _YAML_TO_SETTINGS.items():
        value = (yaml_config.get(section) or {}).get(key)
        if value is None or field.upper() in os.environ:
            continue
        defaults[field] = value
    return Settings(**defaults)
