"""Logging subsystem for ACMEPA.

Public API::

    from acmepa.logging import configure_logging

    configure_logging(settings.logging)
"""

from acmepa.logging.setup import configure_logging

__all__ = ["configure_logging"]
