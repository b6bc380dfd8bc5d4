"""Configuration with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.storefront/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir` and :func:`get_data_dir`.
* **Global config** -- a single :class:`~storefront.models.GlobalConfig`
  JSON file holding the API base URL, request, cache and locale settings.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project-local ``storefront.json`` and the
  global config into the effective configuration.

All file writes go through :func:`_atomic_write` (temp file, then rename).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from storefront.exceptions import ConfigError
from storefront.models import GlobalConfig

_APP_NAME = "storefront"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "storefront.json"

ENV_BASE_URL = "STOREFRONT_BASE_URL"
ENV_LOCALE = "STOREFRONT_LOCALE"
ENV_CSRF_TOKEN = "STOREFRONT_CSRF_TOKEN"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on Linux and the BSDs."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/storefront/`` (default ``~/.config/storefront/``).
    On macOS/Windows: ``~/.storefront/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory used by the CLI's disk cache, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/storefront/`` (default ``~/.cache/storefront/``).
    On macOS/Windows: ``~/.storefront/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/storefront/`` (default ``~/.local/share/storefront/``).
    On macOS/Windows: ``~/.storefront/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file in the same directory."""
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


# --- Global config ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./storefront.json`` if present.

    The file may override any top-level or nested key of the global
    config, e.g. ``{"base_url": "http://localhost:5000"}``.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_locale: Optional[str] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_locale``)
        2. Environment variables (``STOREFRONT_BASE_URL``,
           ``STOREFRONT_LOCALE``, ``STOREFRONT_CSRF_TOKEN``)
        3. Project config (``./storefront.json``)
        4. User config (``~/.config/storefront/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any config file is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        merged = _deep_merge(config.model_dump(mode="json"), project)
        try:
            config = GlobalConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        config.base_url = env_base_url
    env_locale = os.environ.get(ENV_LOCALE)
    if env_locale:
        config.errors.locale = env_locale
    env_csrf = os.environ.get(ENV_CSRF_TOKEN)
    if env_csrf:
        config.request.csrf_token = env_csrf

    if cli_base_url is not None:
        config.base_url = cli_base_url
    if cli_locale is not None:
        config.errors.locale = cli_locale

    return config
