"""Logging helpers shared by analyzers and the pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping

_ROOT = "docctx"
_CONSOLE_FORMAT = "[docctx] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ComponentLogger(logging.LoggerAdapter):
    """Prefixes records with the emitting component, e.g. ``LanguageDetector:``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        component = (self.extra or {}).get("component")
        if component:
            return f"{component}: {msg}", kwargs
        return msg, kwargs


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``docctx`` hierarchy."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def component_logger(module: str, component: str) -> ComponentLogger:
    """Logger for an analyzer-style component living in ``module``."""
    return ComponentLogger(get_logger(module), {"component": component})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optional file) handlers to the docctx logger."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(_ROOT)
    root.setLevel(level)
    root.propagate = False

    # repeated calls must not stack handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(sink)

    return root


__all__ = ["ComponentLogger", "component_logger", "configure_logging", "get_logger"]
