"""Identifier value object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from acmepa.core.types import IdentifierType


@dataclass(frozen=True)
class Identifier:
    """ACME identifier: a typed name a certificate is requested for.

    ``value`` is expected to be lowercased by the caller.
    """

    type: IdentifierType
    value: str
