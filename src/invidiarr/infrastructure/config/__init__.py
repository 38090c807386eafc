from __future__ import annotations

from .load import load_config
from .schema import AppConfig, CipherConfig, EnvOverrides, StreamConfig

__all__ = ["AppConfig", "CipherConfig", "EnvOverrides", "StreamConfig", "load_config"]
