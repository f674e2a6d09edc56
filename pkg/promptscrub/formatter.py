"""Prompt-ready formatting of issue/PR bodies, comments and reviews.

Every author-controlled string passes through the sanitizer exactly once
before it is formatted. Image references are rewritten afterwards from a
map produced by the asset-resolution step, which is trusted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .sanitizer import Sanitizer, sanitize_content

ImageUrlMap = Mapping[str, str]


@dataclass(frozen=True)
class Comment:
    id: str
    author: str
    created_at: str
    body: str


@dataclass(frozen=True)
class FormattedComment:
    """A comment as embedded in the prompt: sanitized body, original order."""
    author: str
    created_at: str
    body: str

    def render(self) -> str:
        return f"[{self.author} at {self.created_at}]: {self.body}"


@dataclass(frozen=True)
class ReviewComment:
    path: str
    line: int | None
    body: str


@dataclass(frozen=True)
class Review:
    author: str
    submitted_at: str
    state: str
    body: str = ""
    comments: tuple[ReviewComment, ...] = ()


@dataclass(frozen=True)
class ChangedFile:
    path: str
    change_type: str
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class ContextData:
    """Issue or pull request metadata shown ahead of the body."""
    title: str
    author: str
    state: str
    is_pr: bool = False
    head_branch: str = ""
    base_branch: str = ""
    additions: int = 0
    deletions: int = 0
    commit_count: int = 0
    changed_files: tuple[ChangedFile, ...] = field(default_factory=tuple)


def rewrite_image_urls(text: str, image_url_map: ImageUrlMap | None) -> str:
    """Replace every original image reference with its resolved URL.

    One left-to-right scan, longest reference first, so a key found inside
    a longer key never rewrites part of it and resolved URLs are never
    rewritten again.
    """
    originals = sorted((k for k in image_url_map or () if k), key=len, reverse=True)
    if not originals:
        return text
    pattern = re.compile("|".join(re.escape(original) for original in originals))
    return pattern.sub(lambda m: image_url_map[m.group(0)], text)


def _clean(text: str, sanitizer: Sanitizer | None) -> str:
    return sanitize_content(text, sanitizer=sanitizer)


def format_body(
    body: str,
    image_url_map: ImageUrlMap | None,
    *,
    sanitizer: Sanitizer | None = None,
) -> str:
    """Sanitize an issue or PR body, then resolve its image references."""
    return rewrite_image_urls(_clean(body, sanitizer), image_url_map)


def format_comments(
    comments: Iterable[Comment],
    image_url_map: ImageUrlMap | None = None,
    *,
    sanitizer: Sanitizer | None = None,
) -> list[FormattedComment]:
    """One formatted record per comment, in the order given.

    Comments with an empty body still produce a record.
    """
    return [
        FormattedComment(
            author=comment.author,
            created_at=comment.created_at,
            body=rewrite_image_urls(_clean(comment.body, sanitizer), image_url_map),
        )
        for comment in comments
    ]


def render_comments(records: Sequence[FormattedComment]) -> str:
    return "\n\n".join(record.render() for record in records)


def format_review_comments(
    reviews: Iterable[Review],
    image_url_map: ImageUrlMap | None = None,
    *,
    sanitizer: Sanitizer | None = None,
) -> str:
    """Render reviews with their inline comments, sanitized, in order."""
    blocks: list[str] = []
    for review in reviews:
        lines = [f"[Review by {review.author} at {review.submitted_at}]: {review.state}"]
        if review.body.strip():
            lines.append(rewrite_image_urls(_clean(review.body, sanitizer), image_url_map))
        for comment in review.comments:
            body = rewrite_image_urls(_clean(comment.body, sanitizer), image_url_map)
            line = comment.line if comment.line is not None else "?"
            lines.append(f"  [Comment on {comment.path}:{line}]: {body}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_changed_files(files: Iterable[ChangedFile]) -> str:
    return "\n".join(
        f"- {f.path} ({f.change_type}) +{f.additions}/-{f.deletions}" for f in files
    )


def format_context(context: ContextData, *, sanitizer: Sanitizer | None = None) -> str:
    """Header lines describing the issue or pull request."""
    title = _clean(context.title, sanitizer)
    if not context.is_pr:
        return "\n".join(
            [
                f"Issue Title: {title}",
                f"Issue Author: {context.author}",
                f"Issue State: {context.state}",
            ]
        )
    return "\n".join(
        [
            f"PR Title: {title}",
            f"PR Author: {context.author}",
            f"PR Branch: {context.head_branch} -> {context.base_branch}",
            f"PR State: {context.state}",
            f"PR Additions: {context.additions}",
            f"PR Deletions: {context.deletions}",
            f"Total Commits: {context.commit_count}",
            f"Changed Files: {len(context.changed_files)} files",
        ]
    )
