"""Layered JSON settings.

Two optional files are read: ``~/.fragpad/settings.json`` (global) and
``<cwd>/.fragpad/settings.json`` (project). The project file is merged over
the global one key by key; ``null`` values are ignored.

Recognised keys: ``format``, ``highlight``, ``scrollSpeed``, ``indentWidth``,
``highlightStyle`` and ``keybindings`` (action name to key id or list of key
ids).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".fragpad"
SETTINGS_FILE = "settings.json"

DEFAULT_SCROLL_SPEED = 10
DEFAULT_INDENT_WIDTH = 4
MAX_INDENT_WIDTH = 16
DEFAULT_HIGHLIGHT_STYLE = "monokai"


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge *overrides* over *base*, descending into nested objects."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge_settings(current, value)
        else:
            merged[key] = value
    return merged


class SettingsManager:
    """Typed access to the merged settings.

    Build one with :meth:`create` (files) or :meth:`in_memory` (tests).
    An unreadable file counts as empty and is reported via :attr:`load_error`.
    """

    def __init__(
        self,
        settings: dict[str, Any],
        *,
        sources: tuple[str, ...] = (),
        load_error: Exception | None = None,
    ) -> None:
        self._settings = settings
        self.sources = sources
        self._load_error = load_error

    @classmethod
    def create(cls, cwd: str, config_dir: str | None = None) -> SettingsManager:
        global_dir = config_dir or os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)
        paths = (
            os.path.join(global_dir, SETTINGS_FILE),
            os.path.join(cwd, CONFIG_DIR_NAME, SETTINGS_FILE),
        )
        merged: dict[str, Any] = {}
        first_error: Exception | None = None
        for path in paths:
            layer, error = _read_layer(path)
            merged = deep_merge_settings(merged, layer)
            first_error = first_error or error
        return cls(merged, sources=paths, load_error=first_error)

    @classmethod
    def in_memory(cls, settings: dict[str, Any] | None = None) -> SettingsManager:
        return cls(dict(settings or {}))

    @property
    def settings(self) -> dict[str, Any]:
        return self._settings

    @property
    def load_error(self) -> Exception | None:
        return self._load_error

    # -- Getters -----------------------------------------------------------------

    def get_format(self) -> bool:
        return bool(self._settings.get("format", True))

    def get_highlight(self) -> bool:
        return bool(self._settings.get("highlight", True))

    def get_scroll_speed(self) -> int:
        return max(1, _int_setting(self._settings.get("scrollSpeed"), DEFAULT_SCROLL_SPEED))

    def get_indent_width(self) -> int:
        width = _int_setting(self._settings.get("indentWidth"), DEFAULT_INDENT_WIDTH)
        return min(max(1, width), MAX_INDENT_WIDTH)

    def get_highlight_style(self) -> str:
        style = self._settings.get("highlightStyle")
        if isinstance(style, str) and style:
            return style
        return DEFAULT_HIGHLIGHT_STYLE

    def get_keybindings(self) -> dict[str, str | list[str]]:
        bindings = self._settings.get("keybindings")
        return dict(bindings) if isinstance(bindings, dict) else {}


def _read_layer(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Settings object stored at *path*; a missing file is an empty layer."""
    file = Path(path)
    if not file.exists():
        return {}, None
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}, e
    if not isinstance(data, dict):
        error = ValueError(f"{path}: top-level JSON value must be an object")
        logger.warning("Ignoring settings file %s: %s", path, error)
        return {}, error
    logger.debug("Loaded settings from %s", path)
    return data, None


def _int_setting(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value
