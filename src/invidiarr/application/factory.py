"""Composition root: config -> logging -> plugin."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from invidiarr.application.plugin import InvidiousPlugin
from invidiarr.infrastructure.config import load_config
from invidiarr.infrastructure.logging.setup import configure_logging

log = structlog.get_logger(__name__)


def create_plugin(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    setup_logging: bool = True,
) -> InvidiousPlugin:
    """Load configuration and build a ready-to-use plugin.

    Pass ``setup_logging=False`` when the host already configured logging.
    """
    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        overrides=overrides,
    )
    if setup_logging:
        configure_logging(config)

    plugin = InvidiousPlugin(config)
    log.info(
        "plugin_initialized",
        plugin=plugin.name,
        instance=plugin.instance,
        environment=config.environment,
    )
    return plugin
