"""Operator configuration loading with XDG paths and precedence resolution.

The operator configuration says *which* credentials, region, header values and
endpoint overrides a provider client uses. It is read once, validated into a
frozen :class:`~specdrive.models.ProviderConfig` and then passed explicitly
into the resolvers; nothing in the request path reads the environment.

* **Location** -- :func:`find_config_file` applies the precedence chain
  (explicit path, ``SPECDRIVE_CONFIG``, ``./specdrive.yaml``, XDG config dir).
* **Format** -- YAML or JSON, detected from the file extension with a
  content-based fallback.
* **Environment overrides** -- ``SPECDRIVE_REGION`` and
  ``SPECDRIVE_DESCRIPTION`` are applied on top of the file by
  :func:`load_provider_config`.
* **Credential resolution** -- :func:`resolve_credential` turns a source
  descriptor (``env:VAR``, ``file:/path`` or a literal) into a secret.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from specdrive.exceptions import ConfigurationError
from specdrive.models import ProviderConfig
from specdrive.output import debug

_APP_NAME = "specdrive"
_CONFIG_FILENAMES = ("config.yaml", "config.yml", "config.json")
_PROJECT_CONFIG_FILENAMES = ("specdrive.yaml", "specdrive.yml", "specdrive.json")

ENV_CONFIG = "SPECDRIVE_CONFIG"
ENV_REGION = "SPECDRIVE_REGION"
ENV_DESCRIPTION = "SPECDRIVE_DESCRIPTION"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specdrive/`` (default ``~/.config/specdrive/``).
    On macOS/Windows: ``~/.specdrive/``.

    The directory is not created; specdrive only ever reads from it.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return Path.home() / f".{_APP_NAME}"


# --- Locating the config file ---


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Locate the operator configuration file.

    Precedence (high to low):
        1. ``explicit`` (the ``--config`` CLI flag)
        2. ``SPECDRIVE_CONFIG`` environment variable
        3. ``./specdrive.yaml`` (or ``.yml`` / ``.json``)
        4. ``<config_dir>/config.yaml`` (or ``.yml`` / ``.json``)

    Returns:
        The path of the first candidate that exists, or ``None``.

    Raises:
        ConfigurationError: If an explicitly requested file (1 or 2) does
            not exist.
    """
    for requested, origin in ((explicit, "--config"), (os.environ.get(ENV_CONFIG), ENV_CONFIG)):
        if requested:
            path = Path(requested).expanduser()
            if not path.is_file():
                raise ConfigurationError(
                    f"configuration file not found: {path} (from {origin})"
                )
            return path

    for name in _PROJECT_CONFIG_FILENAMES:
        candidate = Path.cwd() / name
        if candidate.is_file():
            return candidate

    config_dir = get_config_dir()
    for name in _CONFIG_FILENAMES:
        candidate = config_dir / name
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            # YAML is a superset of JSON, so this also covers extensionless files.
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"invalid configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"configuration file {path} must contain a mapping (got {type(data).__name__})"
        )
    return data


def load_provider_config(
    path: Optional[str] = None,
    region: Optional[str] = None,
    description: Optional[str] = None,
) -> ProviderConfig:
    """Load, override and freeze the operator configuration.

    Precedence for ``region`` and ``description``: explicit argument, then
    ``SPECDRIVE_REGION`` / ``SPECDRIVE_DESCRIPTION``, then the file.

    Args:
        path: Explicit configuration file path. When ``None`` the file is
            located with :func:`find_config_file`; a missing file yields the
            default (empty) configuration.
        region: Region override (``--region``).
        description: Description source override (``--description``).

    Returns:
        A frozen :class:`~specdrive.models.ProviderConfig`.

    Raises:
        ConfigurationError: If the file is unreadable, malformed, or fails
            validation.
    """
    config_path = find_config_file(path)
    data: dict[str, Any] = {}
    if config_path is not None:
        debug(f"Loading operator configuration from {config_path}")
        data = _read_config_file(config_path)

    env_region = os.environ.get(ENV_REGION)
    if region:
        data["region"] = region
    elif env_region:
        data["region"] = env_region

    env_description = os.environ.get(ENV_DESCRIPTION)
    if description:
        data["description"] = description
    elif env_description:
        data["description"] = env_description

    try:
        return ProviderConfig.model_validate(data)
    except ValidationError as exc:
        origin = config_path or "defaults"
        raise ConfigurationError(f"invalid operator configuration ({origin}): {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used verbatim as the secret value

    Raises:
        ConfigurationError: If the environment variable is unset or the file
            cannot be read. The message names the source, never the value.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc

    return source
