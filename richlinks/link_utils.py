"""Utilities for validating and extracting links."""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlsplit

from .errors import InvalidURLError
from .models.links import ParsedURL

_URL_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*://[^\s<>()\"']+")
_TRAILING_PUNCT_RE = re.compile(r"[)\],.?!:;]+$")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_HOST_LABEL_RE = re.compile(r"^(?!-)[\w-]+(?<!-)$")
_AFTER_IPV6_RE = re.compile(r"^(:\d*)?$")
_MAX_HOST_LENGTH = 253


def clean_url_candidate(url: str) -> str:
    """Strip whitespace and trailing sentence punctuation from a URL found in prose."""
    return _TRAILING_PUNCT_RE.sub("", url.strip())


def extract_urls_from_text(text: str | None) -> list[str]:
    """Extract absolute URLs from text, in order, without duplicates."""
    found = (clean_url_candidate(m.group(0)) for m in _URL_RE.finditer(text or ""))
    # dict keeps first-seen order
    return list(dict.fromkeys(url for url in found if url))


def _is_valid_host(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host.split("%", 1)[0])
        except ValueError:
            return False
        return True
    if len(host) > _MAX_HOST_LENGTH:
        return False
    labels = host[:-1].split(".") if host.endswith(".") else host.split(".")
    return all(label and _HOST_LABEL_RE.match(label) for label in labels)


def parse_url(raw: str | None) -> ParsedURL:
    """
    Parse a raw link into a ParsedURL.

    Only absolute URLs with a scheme and a non-empty authority host are
    accepted. Raises InvalidURLError naming the first problem found; never
    touches the network.
    """
    candidate = (raw or "").strip()
    if not candidate:
        raise InvalidURLError("empty link")
    if not _SCHEME_RE.match(candidate):
        raise InvalidURLError("missing scheme")
    if any(ch.isspace() or not ch.isprintable() for ch in candidate):
        raise InvalidURLError("whitespace or control characters")

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as e:
        raise InvalidURLError(str(e)) from e

    host = parts.hostname
    if not host:
        raise InvalidURLError("missing host")
    # Brackets are only legal around IPv6 literals.
    if not _is_valid_host(host) or ("[" in parts.netloc and ":" not in host):
        raise InvalidURLError(f"invalid host {host!r}")
    hostport = parts.netloc.rpartition("@")[2]
    if hostport.startswith("[") and not _AFTER_IPV6_RE.match(hostport.partition("]")[2]):
        raise InvalidURLError(f"unexpected text after host in {parts.netloc!r}")

    userinfo = None
    if "@" in parts.netloc:
        userinfo = parts.netloc.rpartition("@")[0]

    return ParsedURL(
        scheme=parts.scheme.lower(),
        host=host,
        port=port,
        userinfo=userinfo,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
    )


def validate_url(raw: str | None) -> ParsedURL | None:
    """Like parse_url, but returns None for an invalid link."""
    try:
        return parse_url(raw)
    except InvalidURLError:
        return None


def is_valid_url(raw: str | None) -> bool:
    return validate_url(raw) is not None


def domain_for(url: str) -> str:
    """Lower-cased host of a raw URL, or an empty string."""
    parsed = validate_url(url)
    return parsed.host if parsed else ""
