"""Hidden-content sanitization for untrusted text embedded in agent prompts."""

from .config import AttributePolicy, ConfigError, SanitizerConfig, load_sanitizer_config
from .formatter import (
    ChangedFile,
    Comment,
    ContextData,
    FormattedComment,
    Review,
    ReviewComment,
    format_body,
    format_changed_files,
    format_comments,
    format_context,
    format_review_comments,
    render_comments,
)
from .rules import DEFAULT_RULES, SanitizationRule
from .sanitizer import Sanitizer, sanitize_content

__all__ = [
    "AttributePolicy",
    "ChangedFile",
    "Comment",
    "ConfigError",
    "ContextData",
    "DEFAULT_RULES",
    "FormattedComment",
    "Review",
    "ReviewComment",
    "SanitizationRule",
    "Sanitizer",
    "SanitizerConfig",
    "format_body",
    "format_changed_files",
    "format_comments",
    "format_context",
    "format_review_comments",
    "load_sanitizer_config",
    "render_comments",
    "sanitize_content",
]
