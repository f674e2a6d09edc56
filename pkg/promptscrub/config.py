"""Typed loader for the sanitizer policy file (defaults/sanitizer.yml).

Missing keys fall back to the built-in policy, so an empty file is valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .rules import DEFAULT_HIDDEN_ATTRIBUTE_PREFIXES, DEFAULT_HIDDEN_ATTRIBUTES

ATTRIBUTE_POLICIES = ("denylist", "allowlist")

DEFAULT_ALLOWED_ATTRIBUTES = (
    "src",
    "href",
    "type",
    "width",
    "height",
    "align",
    "colspan",
    "rowspan",
    "open",
    "checked",
    "disabled",
    "name",
    "id",
)


class ConfigError(RuntimeError):
    """Sanitizer config file is missing or invalid."""


@dataclass(frozen=True)
class AttributePolicy:
    """Which HTML attributes are removed from start tags."""
    policy: str = "denylist"
    denylist: tuple[str, ...] = tuple(sorted(DEFAULT_HIDDEN_ATTRIBUTES))
    denylist_prefixes: tuple[str, ...] = DEFAULT_HIDDEN_ATTRIBUTE_PREFIXES
    allowlist: tuple[str, ...] = DEFAULT_ALLOWED_ATTRIBUTES


@dataclass(frozen=True)
class SanitizerConfig:
    attributes: AttributePolicy = field(default_factory=AttributePolicy)
    strip_html_comments: bool = True
    redact_github_tokens: bool = True


def _require_mapping(value: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"{ctx}: expected mapping")
    return value


def _require_str(value: Any, ctx: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{ctx}: expected string")
    s = value.strip()
    if not s:
        raise ConfigError(f"{ctx}: must be non-empty")
    return s


def _require_str_tuple(value: Any, ctx: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigError(f"{ctx}: expected list")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_require_str(item, f"{ctx}[{idx}]").lower())
    return tuple(dict.fromkeys(out))


def _require_bool(value: Any, ctx: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{ctx}: expected boolean")
    return value


def _load_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"missing config file: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e


def parse_sanitizer_config(raw: Any) -> SanitizerConfig:
    """Validate an already-parsed YAML document."""
    if raw is None:
        return SanitizerConfig()
    cfg = _require_mapping(raw, "config")

    attributes = AttributePolicy()
    attributes_raw = cfg.get("attributes")
    if attributes_raw is not None:
        attrs_cfg = _require_mapping(attributes_raw, "config.attributes")
        policy = attributes.policy
        if "policy" in attrs_cfg:
            policy = _require_str(attrs_cfg.get("policy"), "config.attributes.policy").lower()
            if policy not in ATTRIBUTE_POLICIES:
                raise ConfigError(
                    f"config.attributes.policy: must be one of {', '.join(ATTRIBUTE_POLICIES)}"
                )
        denylist = attributes.denylist
        if "denylist" in attrs_cfg:
            denylist = _require_str_tuple(attrs_cfg.get("denylist"), "config.attributes.denylist")
        prefixes = attributes.denylist_prefixes
        if "denylist_prefixes" in attrs_cfg:
            prefixes = _require_str_tuple(
                attrs_cfg.get("denylist_prefixes"), "config.attributes.denylist_prefixes"
            )
        allowlist = attributes.allowlist
        if "allowlist" in attrs_cfg:
            allowlist = _require_str_tuple(
                attrs_cfg.get("allowlist"), "config.attributes.allowlist"
            )
        attributes = AttributePolicy(
            policy=policy,
            denylist=denylist,
            denylist_prefixes=prefixes,
            allowlist=allowlist,
        )

    strip_comments = True
    redact_tokens = True
    rules_raw = cfg.get("rules")
    if rules_raw is not None:
        rules_cfg = _require_mapping(rules_raw, "config.rules")
        strip_comments = _require_bool(
            rules_cfg.get("strip_html_comments", True), "config.rules.strip_html_comments"
        )
        redact_tokens = _require_bool(
            rules_cfg.get("redact_github_tokens", True), "config.rules.redact_github_tokens"
        )

    return SanitizerConfig(
        attributes=attributes,
        strip_html_comments=strip_comments,
        redact_github_tokens=redact_tokens,
    )


def load_sanitizer_config(path: Path) -> SanitizerConfig:
    """Load and validate a sanitizer policy file."""
    return parse_sanitizer_config(_load_yaml(path))
