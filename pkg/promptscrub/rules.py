"""Sanitization rules for untrusted platform-authored text.

Each rule is a pure ``str -> str`` transform that removes one hiding
technique. Rules only delete characters or substitute shorter text, never
expand, so a pipeline of them can be re-run until it settles.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable

MAX_CODE_POINT = 0x10FFFF

DEFAULT_HIDDEN_ATTRIBUTES = frozenset({"alt", "title", "aria-label", "placeholder"})
DEFAULT_HIDDEN_ATTRIBUTE_PREFIXES = ("data-",)

REDACTED_TOKEN = "[REDACTED_GITHUB_TOKEN]"


@dataclass(frozen=True)
class SanitizationRule:
    """A named, stateless text transform."""

    name: str
    apply: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.apply(text)


# --- Numeric character references ---

_NUMERIC_ENTITY_RE = re.compile(r"&#(?:([0-9]+)|[xX]([0-9a-fA-F]+));")
_REFERENCE_TAIL_RE = re.compile(r"#(?:([0-9]+)|[xX]([0-9a-fA-F]+));")


def _code_point(digits: str, base: int) -> int | None:
    digits = digits.lstrip("0") or "0"
    # Longer runs are out of range anyway; keeps int() off huge inputs.
    if len(digits) > 8:
        return None
    value = int(digits, base)
    if value == 0 or value > MAX_CODE_POINT or 0xD800 <= value <= 0xDFFF:
        return None
    return value


def _decode_entity(match: re.Match[str]) -> str:
    decimal, hexadecimal = match.group(1), match.group(2)
    if decimal is not None:
        value = _code_point(decimal, 10)
    else:
        value = _code_point(hexadecimal, 16)
    return "" if value is None else chr(value)


def decode_numeric_entities(text: str) -> str:
    """Replace ``&#NN;`` / ``&#xHH;`` with the character they name.

    Invalid references (NUL, surrogates, beyond U+10FFFF) are dropped.
    Named references such as ``&amp;`` are left untouched. An ``&`` produced
    by decoding is read together with the text after it, so nested forms
    like ``&#38;#38;#72;`` decode fully in one linear scan.
    """
    parts: list[str] = []
    pos = 0
    while True:
        match = _NUMERIC_ENTITY_RE.search(text, pos)
        if match is None:
            parts.append(text[pos:])
            return "".join(parts)
        parts.append(text[pos:match.start()])
        decoded = _decode_entity(match)
        pos = match.end()
        while decoded == "&":
            tail = _REFERENCE_TAIL_RE.match(text, pos)
            if tail is None:
                break
            decoded = _decode_entity(tail)
            pos = tail.end()
        parts.append(decoded)


# --- Invisible and control characters ---

INVISIBLE_CHARACTERS = frozenset(
    "\u00ad"  # soft hyphen
    "\u061c"  # arabic letter mark
    "\u200b\u200c\u200d"  # zero-width space, non-joiner, joiner
    "\u200e\u200f"  # LRM, RLM
    "\u202a\u202b\u202c\u202d\u202e"  # embeddings, pop, overrides
    "\u2060\u2061\u2062\u2063\u2064"  # word joiner, invisible operators
    "\u2066\u2067\u2068\u2069"  # isolates
    "\ufeff"  # zero-width no-break space
)

# Tab, LF and CR survive; every other C0/C1 control goes.
_INVISIBLE_RE = re.compile(
    "[\u00ad\u061c\u200b-\u200f\u202a-\u202e\u2060-\u2064\u2066-\u2069\ufeff"
    "\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]"
)


def strip_invisible_characters(text: str) -> str:
    """Delete zero-width, bidi-control and non-whitespace control characters."""
    return _INVISIBLE_RE.sub("", text)


# --- HTML comments ---

_HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")


def strip_html_comments(text: str) -> str:
    return _HTML_COMMENT_RE.sub("", text)


# --- Markdown ---

_MARKDOWN_IMAGE_ALT_RE = re.compile(r"!\[[^\]]*\]\(")
_MARKDOWN_LINK_TITLE_RE = re.compile(
    r"""(\[[^\]]*\]\(\s*[^\s()]+)\s+(?:"[^"]*"|'[^']*'|\([^()]*\))\s*\)"""
)


def strip_markdown_image_alt(text: str) -> str:
    """``![alt](url)`` -> ``![](url)``."""
    return _MARKDOWN_IMAGE_ALT_RE.sub("![](", text)


def strip_markdown_link_titles(text: str) -> str:
    """``[text](url "title")`` -> ``[text](url)``, also for ``'title'`` and ``(title)``."""
    return _MARKDOWN_LINK_TITLE_RE.sub(r"\1)", text)


# --- HTML attributes ---

_ATTR_NAME = r"""[^\s"'<>/=]+"""
_ATTR_VALUE = r"""(?:"[^"]*"|'[^']*'|[^\s>]+)"""
# Browsers also start a new attribute straight after a closing quote.
_ATTRIBUTE_RE = re.compile(rf"""([\s/]+|(?<=["']))({_ATTR_NAME})(\s*=\s*{_ATTR_VALUE}?)?""")
# Read the way a browser reads it: up to the next unquoted ">", or cut short
# by "<" or the end of the text. Stray tokens inside do not end the tag.
_START_TAG_RE = re.compile(r"""<([A-Za-z][A-Za-z0-9:-]*)((?:"[^"]*"|'[^']*'|[^<>])*)(>?)""")


def make_attribute_filter(
    *,
    denylist: Iterable[str] = DEFAULT_HIDDEN_ATTRIBUTES,
    denylist_prefixes: Iterable[str] = DEFAULT_HIDDEN_ATTRIBUTE_PREFIXES,
    allowlist: Iterable[str] | None = None,
) -> Callable[[str], bool]:
    """Return a predicate telling whether an attribute must be removed.

    With an ``allowlist`` every attribute outside it is removed and the
    denylist is ignored.
    """
    if allowlist is not None:
        allowed = frozenset(name.lower() for name in allowlist)
        return lambda name: name.lower() not in allowed

    denied = frozenset(name.lower() for name in denylist)
    prefixes = tuple(prefix.lower() for prefix in denylist_prefixes)

    def is_hidden(name: str) -> bool:
        lowered = name.lower()
        return lowered in denied or lowered.startswith(prefixes)

    return is_hidden


def make_attribute_stripper(is_hidden: Callable[[str], bool]) -> Callable[[str], str]:
    """Build a transform that removes matching attributes from start tags.

    Tags where nothing matches are returned byte for byte. A tag left with
    no attributes renders as ``<name>``. Malformed tags (stray tokens,
    unbalanced quotes, no closing ``>``) are still stripped.
    """

    def strip_tag(match: re.Match[str]) -> str:
        name, attrs, end = match.groups()

        def strip_attribute(attr: re.Match[str]) -> str:
            if not is_hidden(attr.group(2)):
                return attr.group(0)
            # An unclosed tag may run on into prose; there only valued attributes go.
            if not end and attr.group(3) is None:
                return attr.group(0)
            return ""

        cleaned = _ATTRIBUTE_RE.sub(strip_attribute, attrs)
        if cleaned == attrs:
            return match.group(0)
        if end and not cleaned.strip():
            cleaned = ""
        return f"<{name}{cleaned}{end}"

    def strip_attributes(text: str) -> str:
        return _START_TAG_RE.sub(strip_tag, text)

    return strip_attributes


_strip_default_attributes = make_attribute_stripper(make_attribute_filter())


def strip_hidden_attributes(text: str) -> str:
    """Remove ``alt``, ``title``, ``aria-label``, ``placeholder`` and ``data-*``."""
    return _strip_default_attributes(text)


# --- Credentials ---

_GITHUB_TOKEN_RE = re.compile(
    r"\b(?:gh[pousr]_[A-Za-z0-9]{36,255}|github_pat_[A-Za-z0-9_]{22,255})\b"
)


def redact_github_tokens(text: str) -> str:
    return _GITHUB_TOKEN_RE.sub(REDACTED_TOKEN, text)


DEFAULT_RULES: tuple[SanitizationRule, ...] = (
    SanitizationRule("decode_numeric_entities", decode_numeric_entities),
    SanitizationRule("strip_invisible_characters", strip_invisible_characters),
    SanitizationRule("strip_html_comments", strip_html_comments),
    SanitizationRule("strip_markdown_image_alt", strip_markdown_image_alt),
    SanitizationRule("strip_markdown_link_titles", strip_markdown_link_titles),
    SanitizationRule("strip_hidden_attributes", strip_hidden_attributes),
    SanitizationRule("redact_github_tokens", redact_github_tokens),
)
