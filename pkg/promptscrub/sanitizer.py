"""Ordered sanitization pipeline for untrusted prompt content."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .config import SanitizerConfig
from .rules import (
    DEFAULT_RULES,
    SanitizationRule,
    decode_numeric_entities,
    make_attribute_filter,
    make_attribute_stripper,
    redact_github_tokens,
    strip_html_comments,
    strip_invisible_characters,
    strip_markdown_image_alt,
    strip_markdown_link_titles,
)

MAX_PASSES = 8

_DROP_MARKUP_OPENERS = str.maketrans("", "", "&<")


def _require_text(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Sanitizer:
    """Applies rules in order, repeating the pass until the text settles.

    Every rule shortens the text whenever it changes it, so the loop always
    ends; ordinary content settles after one or two passes. Input that is
    still unwinding after ``max_passes`` changing passes is nested on
    purpose: every ``&`` and ``<`` is dropped from it, which leaves no
    reference, comment or tag to expose, and the loop then settles quickly.
    """

    rules: Sequence[SanitizationRule] = DEFAULT_RULES
    max_passes: int = MAX_PASSES

    @classmethod
    def from_config(cls, config: SanitizerConfig) -> "Sanitizer":
        attrs = config.attributes
        if attrs.policy == "allowlist":
            is_hidden = make_attribute_filter(allowlist=attrs.allowlist)
        else:
            is_hidden = make_attribute_filter(
                denylist=attrs.denylist,
                denylist_prefixes=attrs.denylist_prefixes,
            )

        rules = [
            SanitizationRule("decode_numeric_entities", decode_numeric_entities),
            SanitizationRule("strip_invisible_characters", strip_invisible_characters),
        ]
        if config.strip_html_comments:
            rules.append(SanitizationRule("strip_html_comments", strip_html_comments))
        rules.extend(
            [
                SanitizationRule("strip_markdown_image_alt", strip_markdown_image_alt),
                SanitizationRule("strip_markdown_link_titles", strip_markdown_link_titles),
                SanitizationRule("strip_hidden_attributes", make_attribute_stripper(is_hidden)),
            ]
        )
        if config.redact_github_tokens:
            rules.append(SanitizationRule("redact_github_tokens", redact_github_tokens))
        return cls(rules=tuple(rules))

    def apply_once(self, text: str) -> str:
        """Run each rule a single time, in order."""
        for rule in self.rules:
            text = rule(text)
        return text

    def sanitize(self, text: str) -> str:
        """Return ``text`` with every enumerated hiding technique removed."""
        current = _require_text(text)
        passes = 0
        while True:
            cleaned = self.apply_once(current)
            if cleaned == current:
                return cleaned
            passes += 1
            if passes == self.max_passes:
                cleaned = cleaned.translate(_DROP_MARKUP_OPENERS)
            current = cleaned


DEFAULT_SANITIZER = Sanitizer()


def sanitize_content(text: str, *, sanitizer: Sanitizer | None = None) -> str:
    """Sanitize one untrusted text blob with the default (or given) pipeline.

    Raises:
        TypeError: ``text`` is not a ``str``.
    """
    return (sanitizer or DEFAULT_SANITIZER).sanitize(text)
