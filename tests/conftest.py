"""Root conftest for the ACMEPA test suite."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest
import yaml

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from acmepa.policy.suffix import NoPublicSuffixError  # noqa: E402

# ---------------------------------------------------------------------------
# Collaborator stubs
# ---------------------------------------------------------------------------

DEFAULT_SUFFIXES = frozenset({"com", "net", "org", "jp", "uk", "co.uk", "xn--p1ai"})


class FakeSuffixLookup:
    """In-memory public suffix table; longest listed suffix wins."""

    def __init__(self, suffixes=DEFAULT_SUFFIXES):
        self.suffixes = frozenset(suffixes)
        self.calls: list[str] = []

    def extract_suffix(self, domain: str) -> str:
        self.calls.append(domain)
        labels = domain.split(".")
        for i in range(len(labels)):
            candidate = ".".join(labels[i:])
            if candidate in self.suffixes:
                return candidate
        raise NoPublicSuffixError(domain)


HOSTNAME_POLICY = {
    "Blacklist": ["blocked.com", "bad.example.net"],
    "ExactBlacklist": ["highvalue.example.org", "a.b.example.co.uk"],
}


def dump_policy(doc: dict) -> bytes:
    return yaml.safe_dump(doc, sort_keys=False).encode("utf-8")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def suffixes() -> FakeSuffixLookup:
    return FakeSuffixLookup()


@pytest.fixture()
def make_suffixes():
    """Factory for a suffix table with custom entries."""
    return FakeSuffixLookup


@pytest.fixture()
def policy_doc() -> dict:
    return {key: list(value) for key, value in HOSTNAME_POLICY.items()}


@pytest.fixture()
def policy_bytes(policy_doc: dict) -> bytes:
    return dump_policy(policy_doc)


@pytest.fixture()
def dump():
    """Serialise a policy document to YAML bytes."""
    return dump_policy


@pytest.fixture()
def minimal_config_data() -> dict:
    """Return a dict containing a small but complete configuration."""
    return {
        "challenges": {
            "enabled": {"http-01": True, "dns-01": True, "tls-alpn-01": True},
        },
        "logging": {"level": "DEBUG", "format": "text"},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, minimal_config_data: dict) -> Path:
    """Write *minimal_config_data* to a temp YAML file and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        yaml.safe_dump(minimal_config_data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return cfg


# ---------------------------------------------------------------------------
# Singleton and logger cleanup: autouse so every test gets a fresh slate
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def fresh_config():
    """Reset the PAConfig singleton before and after every test."""
    from acmepa.config.pa_config import PAConfig

    PAConfig.reset()
    yield
    PAConfig.reset()


@pytest.fixture(autouse=True)
def restore_loggers():
    """Undo configure_logging() so caplog keeps seeing acmepa records."""
    yield
    root = logging.getLogger("acmepa")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    audit = logging.getLogger("acmepa.audit")
    for handler in audit.handlers:
        handler.close()
    audit.handlers.clear()
    audit.disabled = False
    audit.setLevel(logging.NOTSET)
