"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for routedoc:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.routedoc/`` on macOS and Windows. See :func:`get_cache_dir` and
  :func:`get_data_dir`.
* **Config files** -- a :class:`~routedoc.models.RoutedocConfig` read from
  JSON or YAML, either named explicitly or found in the working directory
  as ``routedoc.json`` / ``routedoc.yaml``.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project config file and defaults into the
  effective configuration.

Writes use a temp-file-then-rename strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from routedoc.exceptions import ConfigError
from routedoc.models import RoutedocConfig

_APP_NAME = "routedoc"
_PROJECT_CONFIG_FILENAMES = ("routedoc.json", "routedoc.yaml", "routedoc.yml")

ENV_CONFIG = "ROUTEDOC_CONFIG"
ENV_VIEW = "ROUTEDOC_VIEW"
ENV_CACHE_DIR = "ROUTEDOC_CACHE_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the extraction cache. Cached data can be safely deleted at any
    time.

    On Linux/BSD: ``$XDG_CACHE_HOME/routedoc/`` (default ``~/.cache/routedoc/``).
    On macOS/Windows: ``~/.routedoc/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/routedoc/`` (default ``~/.local/share/routedoc/``).
    On macOS/Windows: ``~/.routedoc/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure
    the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config files ---


def load_config_file(path: Path) -> RoutedocConfig:
    """Load and validate a JSON or YAML config file.

    Raises:
        ConfigError: If the file is missing, cannot be parsed, or fails
            validation.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
        return RoutedocConfig.model_validate(data)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        # pydantic's ValidationError and JSONDecodeError are ValueErrors
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: RoutedocConfig, path: Path) -> None:
    """Persist *config* atomically as JSON (or YAML for ``.yaml``/``.yml`` paths)."""
    data = config.model_dump(mode="json", exclude_none=True)
    if path.suffix.lower() in (".yaml", ".yml"):
        text = yaml.safe_dump(data, sort_keys=False)
    else:
        text = json.dumps(data, indent=2) + "\n"
    _atomic_write(path, text)


def find_project_config() -> Optional[Path]:
    """Return the first ``routedoc.json``/``routedoc.yaml`` in the working directory."""
    for name in _PROJECT_CONFIG_FILENAMES:
        path = Path.cwd() / name
        if path.is_file():
            return path
    return None


# --- Precedence resolution ---


def resolve_config(
    cli_config: Optional[str] = None,
    cli_view: Optional[str] = None,
    cli_cache_dir: Optional[str] = None,
    cli_no_cache: bool = False,
) -> RoutedocConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_config``, ``cli_view``, ``cli_cache_dir``,
           ``cli_no_cache``)
        2. Environment variables (``ROUTEDOC_CONFIG``, ``ROUTEDOC_VIEW``,
           ``ROUTEDOC_CACHE_DIR``)
        3. Project config (``./routedoc.json`` or ``./routedoc.yaml``)
        4. Defaults

    Raises:
        ConfigError: If the selected config file is invalid.
    """
    config_path: Optional[Path] = None
    env_config = os.environ.get(ENV_CONFIG)
    if cli_config is not None:
        config_path = Path(cli_config)
    elif env_config:
        config_path = Path(env_config)
    else:
        config_path = find_project_config()

    config = load_config_file(config_path) if config_path else RoutedocConfig()

    overrides: dict[str, Any] = {}
    view = cli_view or os.environ.get(ENV_VIEW)
    if view:
        overrides["default_view"] = view

    cache_updates: dict[str, Any] = {}
    cache_dir = cli_cache_dir or os.environ.get(ENV_CACHE_DIR)
    if cache_dir:
        cache_updates["directory"] = cache_dir
    if cli_no_cache:
        cache_updates["enabled"] = False
    if cache_updates:
        overrides["cache"] = config.cache.model_copy(update=cache_updates)

    if overrides:
        config = config.model_copy(update=overrides)
    return config
