"""Fixtures shared by the policy tests."""

from __future__ import annotations

import pytest

from acmepa.policy.authority import PolicyAuthority


@pytest.fixture()
def authority(suffixes, policy_bytes) -> PolicyAuthority:
    """Authority with HTTP-01, DNS-01 and TLS-ALPN-01 enabled and a policy loaded."""
    pa = PolicyAuthority(
        {"http-01": True, "dns-01": True, "tls-alpn-01": True, "tls-sni-01": False},
        suffixes=suffixes,
    )
    pa.load_hostname_policy(policy_bytes)
    return pa


@pytest.fixture()
def unloaded_authority(suffixes) -> PolicyAuthority:
    """Authority that has never seen a hostname policy."""
    return PolicyAuthority({"http-01": True, "dns-01": True}, suffixes=suffixes)
