"""ACMEPA configuration loader.

Lifecycle::

    # 1. CLI creates the singleton (once, at startup)
    PAConfig(config_file="/etc/acmepa/config.yaml")

    # 2. Any module retrieves it afterwards
    from acmepa.config import get_config
    cfg = get_config()
    cfg.settings.policy.max_labels  # typed access

    # 3. Dynamic access
    cfg.get("policy.hostname_policy_file")
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft7Validator

from acmepa.config.settings import PASettings, build_settings
from acmepa.core.types import ChallengeType

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

_KNOWN_CHALLENGE_TYPES = frozenset(t.value for t in ChallengeType)

# RFC 1035 name limit once the length octet and root label are removed.
_MAX_DNS_NAME_LENGTH = 253

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singleton reference
# ---------------------------------------------------------------------------
_instance: PAConfig | None = None


def get_config() -> PAConfig:
    """Return the initialised configuration singleton.

    Raises :class:`RuntimeError` if :class:`PAConfig` has not been
    created yet (i.e. the CLI entry point has not run).
    """
    if _instance is None:
        msg = (
            "Configuration not initialised. "
            "PAConfig must be created with config_file= before calling get_config()."
        )
        raise RuntimeError(
            msg,
        )
    return _instance


# ---------------------------------------------------------------------------
# Validation error collector
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """Raised when schema or cross-field validation finds problems."""

    def __init__(self, errors: list[str]) -> None:
        """Store *errors* and build a human-readable message."""
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _resolve_value(value: str, path: str) -> str:
    """Replace ``${VAR}`` or ``${VAR:-default}`` with env var value."""
    match = _ENV_RE.match(value)
    if match is None:
        return value
    var_name = match.group(1)
    fallback = match.group(2)
    resolved = os.environ.get(var_name)
    if resolved is not None:
        return resolved
    if fallback is not None:
        return fallback
    raise ConfigValidationError(
        [
            f"Environment variable '${{{var_name}}}' referenced "
            f"at '{path}' is not set and has no default",
        ],
    )


def _resolve_env_vars(
    data: Any,  # noqa: ANN401
    path: str = "",
) -> None:
    """Walk *data* in-place and resolve ``${VAR}``/``${VAR:-default}`` strings."""
    if isinstance(data, dict):
        for key in data:
            child_path = f"{path}.{key}" if path else key
            if isinstance(data[key], str):
                data[key] = _resolve_value(data[key], child_path)
            elif isinstance(data[key], (dict, list)):
                _resolve_env_vars(data[key], child_path)
    elif isinstance(data, list):
        for idx, item in enumerate(data):
            child_path = f"{path}[{idx}]"
            if isinstance(item, str):
                data[idx] = _resolve_value(item, child_path)
            elif isinstance(item, (dict, list)):
                _resolve_env_vars(item, child_path)


def _read_file(path: Path) -> dict:
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) if path.suffix in (".yaml", ".yml") else json.load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError([f"{path}: top level must be a mapping"])
    return data


# ---------------------------------------------------------------------------
# Config class
# ---------------------------------------------------------------------------


class PAConfig:
    """Central configuration for the policy authority.

    The JSON schema is bundled at ``config/schema.json``; users supply
    only ``config_file``.  After construction the typed settings tree
    is available at :pyattr:`settings` and the raw dict via
    :pyattr:`data` / :pymeth:`get`.
    """

    def __init__(self, *, config_file: str | Path) -> None:
        global _instance  # noqa: PLW0603

        self._data = self._load(Path(config_file))
        self._validate_schema()
        self.additional_checks()
        self._settings: PASettings = build_settings(self._data)
        _instance = self

    # -- lifecycle ----------------------------------------------------------

    @staticmethod
    def _load(path: Path) -> dict:
        """Load the config file then resolve ``${VAR}`` env-var references.

        Env-var resolution runs **before** schema validation so that
        substituted values (e.g. ``${LOG_LEVEL:-INFO}``) are checked
        against enum constraints in the schema.
        """
        data = _read_file(path)
        _resolve_env_vars(data)
        data["_source"] = str(path)
        return data

    def _validate_schema(self) -> None:
        schema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
        validator = Draft7Validator(schema)
        errors = [
            f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
            for err in sorted(validator.iter_errors(self._data), key=lambda e: list(e.path))
        ]
        if errors:
            raise ConfigValidationError(errors)

    # -- access -------------------------------------------------------------

    @property
    def data(self) -> dict:
        """Raw, env-resolved configuration dict."""
        return self._data

    @property
    def settings(self) -> PASettings:
        """Fully-typed, frozen settings tree."""
        return self._settings

    def get(self, dotted: str, default: Any = None) -> Any:  # noqa: ANN401
        """Look up a value by dot-path, e.g. ``"policy.max_labels"``."""
        node: Any = self._data
        for part in dotted.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    # -- cross-field validation ---------------------------------------------

    def additional_checks(self) -> None:
        """Semantic & cross-field validation.

        Called **after** schema validation passes.  Errors are collected
        and raised together; warnings are logged.
        """
        errors: list[str] = []
        warnings: list[str] = []

        policy = self._data.get("policy") or {}
        challenges = self._data.get("challenges") or {}

        # -- Policy --
        max_len = policy.get("max_dns_identifier_length", 230)
        if max_len > _MAX_DNS_NAME_LENGTH:
            errors.append(
                f"policy.max_dns_identifier_length ({max_len}) must be <= "
                f"{_MAX_DNS_NAME_LENGTH}",
            )

        for key in ("hostname_policy_file", "challenges_whitelist_file"):
            path = policy.get(key)
            if path and not Path(path).is_file():
                errors.append(f"policy.{key} '{path}' does not exist")

        if not policy.get("hostname_policy_file"):
            warnings.append(
                "policy.hostname_policy_file is not set; every identifier "
                "will be refused until a hostname policy is loaded",
            )

        # -- Challenges --
        enabled = challenges.get("enabled") or {}
        for ctype in enabled:
            if ctype not in _KNOWN_CHALLENGE_TYPES:
                errors.append(
                    f"challenges.enabled contains unknown type '{ctype}'. "
                    f"Known types: {sorted(_KNOWN_CHALLENGE_TYPES)}",
                )

        if enabled and not enabled.get(ChallengeType.DNS_01.value):
            warnings.append(
                "challenges.enabled does not enable dns-01; wildcard "
                "identifiers will only be offered challenges for "
                "allow-listed accounts",
            )

        for w in warnings:
            log.warning("Config warning: %s", w)

        if errors:
            raise ConfigValidationError(errors)

    # -- helpers ------------------------------------------------------------

    def reload_settings(self) -> PASettings:
        """Re-read the config file and rebuild settings.

        Does not reset the singleton.  Returns a fresh
        :class:`PASettings` tree.
        """
        source_file = self._data.get("_source", "")
        if not source_file:
            msg = "Cannot reload: no source file recorded"
            raise RuntimeError(msg)
        return build_settings(self._load(Path(source_file)))

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton -- testing only."""
        global _instance  # noqa: PLW0603
        _instance = None

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        source = self._data.get("_source", "?")
        return f"<PAConfig config_file={source}>"
