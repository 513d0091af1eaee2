"""citation marker normalization and grouping."""

import logging
import re
from collections.abc import Iterator
from typing import Optional
from urllib.parse import quote, unquote

from chatrender.core.models import CitationMarker

logger = logging.getLogger(__name__)

TEXT_FRAGMENT_PREFIX = "#:~:text="

# characters left unescaped when encoding a payload; parentheses are escaped
# so a normalized marker never contains a raw ")"
_SAFE_CHARS = "-_.!~*'"
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _prefix_pattern(scheme: str) -> re.Pattern[str]:
    return re.compile(rf"\[(\d+)\]\({re.escape(scheme)}:")


def _strict_unquote(text: str) -> str:
    """percent-decodes text, raising ValueError on malformed escapes."""
    if _MALFORMED_ESCAPE.search(text):
        raise ValueError(f"malformed percent-escape in {text!r}")
    # UnicodeDecodeError is a ValueError
    return unquote(text, errors="strict")


def encode_citation_payload(raw: str) -> str:
    """
    percent-encodes a citation payload.

    Already-encoded payloads are decoded first so encoding is idempotent;
    payloads that fail to decode are encoded as they are.

    Args:
        raw: payload text between the scheme and the closing parenthesis

    Returns:
        percent-encoded payload
    """
    trimmed = raw.strip()
    try:
        decoded = _strict_unquote(trimmed)
    except ValueError as e:
        logger.debug("citation payload not decodable, encoding as is: %s", e)
        return quote(trimmed, safe=_SAFE_CHARS)
    return quote(decoded, safe=_SAFE_CHARS)


def decode_citation(encoded: str) -> str:
    """
    decodes an encoded citation payload.

    Args:
        encoded: percent-encoded payload

    Returns:
        decoded text, or the input unchanged if it cannot be decoded
    """
    try:
        return _strict_unquote(encoded)
    except ValueError as e:
        logger.warning("failed to decode citation text: %s", e)
        return encoded


def extract_citation_text(href: str, scheme: str = "cite") -> Optional[str]:
    """returns the decoded citation text of href, or None for other links."""
    prefix = f"{scheme}:"
    if not href or not href.startswith(prefix):
        return None
    return decode_citation(href[len(prefix) :])


def citation_fragment_href(payload: str) -> str:
    """returns a scroll-to-text fragment URL for decoded citation text."""
    return TEXT_FRAGMENT_PREFIX + quote(payload, safe=_SAFE_CHARS)


def _find_payload_end(text: str, start: int) -> int:
    """
    returns the index of the parenthesis closing a marker opened before start.

    Returns -1 when a newline or the end of text comes first.
    """
    depth = 1
    for pos in range(start, len(text)):
        char = text[pos]
        if char == "\n":
            return -1
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos
    return -1


def find_citations(
    text: str, scheme: str = "cite"
) -> Iterator[tuple[int, int, CitationMarker]]:
    """
    yields (start, end, marker) for each well-formed citation marker.

    Payloads may contain balanced parentheses. A candidate whose payload is
    not closed before a newline or the end of text is skipped and scanning
    resumes right after its prefix.

    Args:
        text: text to scan
        scheme: citation link scheme

    Yields:
        span of the marker in text and the parsed marker
    """
    prefix = _prefix_pattern(scheme)
    cursor = 0
    while True:
        match = prefix.search(text, cursor)
        if match is None:
            return
        end = _find_payload_end(text, match.end())
        if end == -1:
            cursor = match.end()
            continue
        marker = CitationMarker(
            number=int(match.group(1)),
            raw_payload=text[match.end() : end],
            scheme=scheme,
        )
        yield match.start(), end + 1, marker
        cursor = end + 1


def normalize_citations(text: str, scheme: str = "cite") -> str:
    """
    re-encodes the payload of every citation marker in text.

    Args:
        text: text with citation markers
        scheme: citation link scheme

    Returns:
        text with each marker rewritten as [n](scheme:encoded-payload)
    """
    pieces: list[str] = []
    last = 0
    for start, end, marker in find_citations(text, scheme):
        pieces.append(text[last:start])
        normalized = CitationMarker(
            marker.number, encode_citation_payload(marker.raw_payload), scheme
        )
        pieces.append(normalized.render())
        last = end
    if not pieces:
        return text
    pieces.append(text[last:])
    return "".join(pieces)


def group_citations(text: str, scheme: str = "cite", separator: str = "｜") -> str:
    """
    joins runs of two or more adjacent normalized markers with separator.

    Markers may be separated by spaces or tabs; whitespace after the run,
    including newlines, is left where it is.

    Args:
        text: text with normalized citation markers
        scheme: citation link scheme
        separator: string placed between grouped markers

    Returns:
        text with citation runs joined
    """
    marker = rf"\[\d+\]\({re.escape(scheme)}:[^()\s]*\)"
    marker_pattern = re.compile(marker)
    run_pattern = re.compile(rf"{marker}(?:[^\S\n]*{marker})+")

    def join_run(match: re.Match[str]) -> str:
        return separator.join(marker_pattern.findall(match.group(0)))

    return run_pattern.sub(join_run, text)
