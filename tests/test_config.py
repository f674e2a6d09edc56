"""Tests for the sanitizer policy loader."""

from pathlib import Path

import pytest

from pkg.promptscrub.config import (
    AttributePolicy,
    ConfigError,
    SanitizerConfig,
    load_sanitizer_config,
    parse_sanitizer_config,
)

REPO_ROOT = Path(__file__).parent.parent
DEFAULTS = REPO_ROOT / "defaults" / "sanitizer.yml"


def _write(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "sanitizer.yml"
    p.write_text(content)
    return p


class TestLoadSanitizerConfig:
    def test_shipped_defaults_match_builtin_policy(self):
        assert load_sanitizer_config(DEFAULTS) == SanitizerConfig()

    def test_empty_file_is_defaults(self, tmp_path):
        assert load_sanitizer_config(_write(tmp_path, "")) == SanitizerConfig()

    def test_allowlist_policy(self, tmp_path):
        cfg = load_sanitizer_config(_write(tmp_path, """
attributes:
  policy: allowlist
  allowlist: [SRC, href, src]
"""))
        assert cfg.attributes.policy == "allowlist"
        assert cfg.attributes.allowlist == ("src", "href")
        assert cfg.attributes.denylist == AttributePolicy().denylist

    def test_rule_toggles(self, tmp_path):
        cfg = load_sanitizer_config(_write(tmp_path, """
rules:
  strip_html_comments: false
"""))
        assert cfg.strip_html_comments is False
        assert cfg.redact_github_tokens is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="missing config file"):
            load_sanitizer_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_sanitizer_config(_write(tmp_path, "attributes: [unclosed\n"))


class TestParseSanitizerConfig:
    def test_none_is_defaults(self):
        assert parse_sanitizer_config(None) == SanitizerConfig()

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError, match="config: expected mapping"):
            parse_sanitizer_config(["attributes"])

    def test_unknown_policy(self):
        with pytest.raises(ConfigError, match="config.attributes.policy: must be one of denylist, allowlist"):
            parse_sanitizer_config({"attributes": {"policy": "blocklist"}})

    def test_denylist_must_be_list(self):
        with pytest.raises(ConfigError, match="config.attributes.denylist: expected list"):
            parse_sanitizer_config({"attributes": {"denylist": "alt"}})

    def test_denylist_entries_must_be_non_empty(self):
        with pytest.raises(ConfigError, match=r"config.attributes.denylist\[1\]: must be non-empty"):
            parse_sanitizer_config({"attributes": {"denylist": ["alt", "  "]}})

    def test_prefix_entries_must_be_strings(self):
        with pytest.raises(ConfigError, match=r"config.attributes.denylist_prefixes\[0\]: expected string"):
            parse_sanitizer_config({"attributes": {"denylist_prefixes": [3]}})

    def test_rule_toggle_must_be_bool(self):
        with pytest.raises(ConfigError, match="config.rules.redact_github_tokens: expected boolean"):
            parse_sanitizer_config({"rules": {"redact_github_tokens": "yes"}})

    def test_rules_must_be_mapping(self):
        with pytest.raises(ConfigError, match="config.rules: expected mapping"):
            parse_sanitizer_config({"rules": ["strip_html_comments"]})

    def test_names_normalised(self):
        cfg = parse_sanitizer_config({"attributes": {"denylist": [" ALT ", "Title"]}})
        assert cfg.attributes.denylist == ("alt", "title")
