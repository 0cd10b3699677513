# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for brine."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("BRINE_LOG_LEVEL", "WARNING").upper()
HTTP_LOGGER_NAME = "brine.http"


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def enable_http_logging() -> None:
    """Let the traffic logger emit INFO records even when the root level is higher."""
    logger = logging.getLogger(HTTP_LOGGER_NAME)
    if logger.getEffectiveLevel() > logging.INFO:
        logger.setLevel(logging.INFO)


__all__ = ["HTTP_LOGGER_NAME", "enable_http_logging", "setup_logging"]
