"""Public suffix lookup.

The validators only need ``extract_suffix(domain) -> str``; anything
with that method can be passed to :class:`~acmepa.PolicyAuthority`.
The default implementation uses ``tldextract`` with the public suffix
list snapshot bundled in the package, so lookups never touch the
network.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import tldextract

if TYPE_CHECKING:
    from collections.abc import Iterable


class NoPublicSuffixError(LookupError):
    """The domain does not end in a known public suffix."""


class SuffixLookup(Protocol):
    def extract_suffix(self, domain: str) -> str:
        """Return the public suffix of *domain* or raise :class:`NoPublicSuffixError`."""
        ...


class TldextractSuffixLookup:
    """ICANN public suffix lookup backed by ``tldextract``.

    Parameters
    ----------
    include_private:
        Also treat the PSL private section (e.g. ``github.io``) as
        public suffixes.
    extra_suffixes:
        Additional suffixes to treat as public.

    """

    def __init__(
        self,
        *,
        include_private: bool = False,
        extra_suffixes: Iterable[str] = (),
    ) -> None:
        self._extract = tldextract.TLDExtract(
            suffix_list_urls=(),
            include_psl_private_domains=include_private,
            extra_suffixes=tuple(extra_suffixes),
        )

    def extract_suffix(self, domain: str) -> str:
        suffix = self._extract(domain).suffix
        if not suffix:
            raise NoPublicSuffixError(domain)
        return suffix
