"""ACMEPA: policy authority for an ACME certificate issuer.

Decides whether the CA is willing to issue for a DNS identifier and
which challenges the requester must complete.

Public API::

    from acmepa import PolicyAuthority

    pa = PolicyAuthority({"http-01": True, "dns-01": True})
    pa.load_hostname_policy(policy_bytes)
    pa.willing_to_issue(Identifier(IdentifierType.DNS, "example.com"))
"""

from acmepa.policy.authority import PolicyAuthority

__version__ = "1.0.0"

__all__ = ["PolicyAuthority", "__version__"]
