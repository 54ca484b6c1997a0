"""Configuration module -- exports Settings and the YAML-backed builder."""

from vacancy_rag.config.loader import settings_from_config
from vacancy_rag.config.settings import Settings

__all__ = ["Settings", "settings_from_config"]
