"""urikit.domain
Locating the registrable domain in a hostname, and reading or replacing whatever subdomain sits in front of it.
The suffix table is always passed in; DEFAULT_TLDS and public_suffix_table() are two tables you can pass.
"""

import functools
import logging

from typing import AbstractSet

import tldextract

from .errors import UnknownTld

logger = logging.getLogger(__name__)

DEFAULT_TLDS: frozenset[str] = frozenset(
    (
        "com", "org", "net", "int", "edu", "gov", "mil",
        "co.uk", "org.uk", "gov.uk", "ltd.uk", "plc.uk", "me.uk",
        "com.au", "net.au", "org.au",
        "de", "ca", "us", "eu", "es", "it", "fr", "nl", "be", "at", "dk", "ch", "se", "no", "fi",
        "jp", "cn", "in", "ru", "br", "au",
        "info", "name", "io", "xxx", "id", "me", "mobi", "cc", "ws", "fm", "tv", "tk", "nu",
    )
)


@functools.cache
def public_suffix_table(include_private: bool = False) -> frozenset[str]:
    """The suffixes of the Public Suffix List snapshot that ships with tldextract.
    Nothing is fetched over the network. Wildcard ("*.ck") and exception ("!www.ck") rules are left out,
    since a plain suffix table can't express them.
    """
    extractor: tldextract.TLDExtract = tldextract.TLDExtract(
        cache_dir=None,
        suffix_list_urls=(),
        fallback_to_snapshot=True,
        include_psl_private_domains=include_private,
    )
    suffixes: frozenset[str] = frozenset(s.lower() for s in extractor.tlds if not s.startswith(("*", "!")))
    logger.debug("loaded %d public suffixes (include_private=%s)", len(suffixes), include_private)
    return suffixes


def _domain_start(labels: list[str], tlds: AbstractSet[str]) -> int | None:
    """Returns the index of the first label of the registrable domain (second-level domain + suffix).
    Trailing joins are tried longest first, so "co.uk" wins over "uk" when the table has both.
    """
    for i in range(len(labels)):
        suffix: str = ".".join(labels[i:])
        if suffix.lower() in tlds:
            logger.debug("matched suffix %r", suffix)
            return max(i - 1, 0)
    return None


def _split(host: str, tlds: AbstractSet[str]) -> tuple[list[str], list[str]]:
    labels: list[str] = host.split(".")
    start: int | None = _domain_start(labels, tlds)
    if start is None:
        logger.debug("no suffix of %r is in a table of %d entries", host, len(tlds))
        raise UnknownTld(host)
    return labels[:start], labels[start:]


def get_subdomain(host: str, tlds: AbstractSet[str]) -> str:
    """Returns everything in front of the registrable domain, or "" if there's nothing there.
    get_subdomain("a.b.example.co.uk", {"co.uk"}) == "a.b"
    """
    subdomain, _ = _split(host, tlds)
    return ".".join(subdomain)


def registrable_domain(host: str, tlds: AbstractSet[str]) -> str:
    """registrable_domain("a.b.example.co.uk", {"co.uk"}) == "example.co.uk" """
    _, domain = _split(host, tlds)
    return ".".join(domain)


def set_subdomain(host: str, subdomain: str, tlds: AbstractSet[str]) -> str:
    """Replaces everything in front of the registrable domain with subdomain.
    An empty subdomain removes it, along with its dot.
    """
    domain: str = registrable_domain(host, tlds)
    if len(subdomain) == 0:
        return domain
    return f"{subdomain}.{domain}"
