from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, ProvidersConfig

__all__ = ["AppConfig", "EnvOverrides", "ProvidersConfig", "load_config"]
