#!/usr/bin/env python3
"""Render issue / PR context as prompt-ready markdown with hidden content removed.

Usage:
    format-context.py <context-json> [--image-map <json>] [--config <yml>] [--output <md>]

<context-json> is the output of `gh pr view --json ...` or `gh issue view --json ...`.
<image-map> is a JSON object mapping original image URLs to downloaded copies.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from lib.context_loader import LoadedContext, load_context, load_image_map
from pkg.promptscrub.config import ConfigError, load_sanitizer_config
from pkg.promptscrub.formatter import (
    format_body,
    format_changed_files,
    format_comments,
    format_context,
    format_review_comments,
    render_comments,
)
from pkg.promptscrub.sanitizer import DEFAULT_SANITIZER, Sanitizer


def render_context_markdown(
    loaded: LoadedContext,
    image_url_map: dict[str, str] | None = None,
    *,
    sanitizer: Sanitizer | None = None,
) -> str:
    """Assemble the sections embedded in the agent prompt."""
    context = loaded.context
    body = format_body(loaded.body, image_url_map, sanitizer=sanitizer)
    comments = render_comments(
        format_comments(loaded.comments, image_url_map, sanitizer=sanitizer)
    )

    sections = [
        "## Context",
        format_context(context, sanitizer=sanitizer),
        "",
        "## PR Description" if context.is_pr else "## Issue Description",
        body or "No description provided",
        "",
        "## Comments",
        comments or "No comments",
    ]
    if context.is_pr:
        reviews = format_review_comments(loaded.reviews, image_url_map, sanitizer=sanitizer)
        sections.extend(
            [
                "",
                "## Review Comments",
                reviews or "No review comments",
                "",
                "## Changed Files",
                format_changed_files(context.changed_files) or "No files changed",
            ]
        )
    return "\n".join(sections) + "\n"


def _removed_characters(loaded: LoadedContext, sanitizer: Sanitizer) -> int:
    texts = [loaded.context.title, loaded.body]
    texts.extend(c.body for c in loaded.comments)
    for review in loaded.reviews:
        texts.append(review.body)
        texts.extend(c.body for c in review.comments)
    return sum(len(t) - len(sanitizer.sanitize(t)) for t in texts)


def main(argv: list[str]) -> int:
    """Main."""
    parser = argparse.ArgumentParser(description="Format untrusted issue/PR context for a prompt")
    parser.add_argument("context_json", type=Path, help="gh issue/pr view JSON")
    parser.add_argument("--image-map", type=Path, default=None, help="JSON {original: resolved}")
    parser.add_argument("--config", type=Path, default=None, help="sanitizer policy YAML")
    parser.add_argument("--output", type=Path, default=None, help="write markdown here")
    args = parser.parse_args(argv)

    if not args.context_json.exists():
        print(f"context file not found: {args.context_json}", file=sys.stderr)
        return 2

    sanitizer = DEFAULT_SANITIZER
    if args.config is not None:
        try:
            sanitizer = Sanitizer.from_config(load_sanitizer_config(args.config))
        except ConfigError as e:
            print(f"::error::sanitizer config error: {e}", file=sys.stderr)
            return 2

    try:
        loaded = load_context(args.context_json)
        image_url_map = load_image_map(args.image_map) if args.image_map else None
    except (OSError, ValueError) as exc:
        print(f"::error::{exc}", file=sys.stderr)
        return 1

    rendered = render_context_markdown(loaded, image_url_map, sanitizer=sanitizer)

    removed = _removed_characters(loaded, sanitizer)
    if removed > 0:
        print(f"::notice::removed {removed} characters of hidden content", file=sys.stderr)

    if args.output is not None:
        args.output.write_text(rendered, encoding="utf-8")
    else:
        sys.stdout.write(rendered)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
