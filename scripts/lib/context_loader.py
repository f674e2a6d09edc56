"""Load issue / PR context exported by the gh CLI.

The workflow runs ``gh pr view --json ...`` (or ``gh issue view``) and hands
the file to us, so both the REST-ish gh shape (plain lists) and the GraphQL
shape (``{"nodes": [...]}``) are accepted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pkg.promptscrub.formatter import ChangedFile, Comment, ContextData, Review, ReviewComment


@dataclass(frozen=True)
class LoadedContext:
    context: ContextData
    body: str
    comments: tuple[Comment, ...] = ()
    reviews: tuple[Review, ...] = ()


def _login(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("login", "")
    return str(value or "")


def _nodes(value: Any, ctx: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, dict):
        value = value.get("nodes") or []
    if not isinstance(value, list):
        raise ValueError(f"{ctx}: expected list")
    return [item for item in value if isinstance(item, dict)]


def _int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _commit_count(value: Any) -> int:
    if isinstance(value, list):
        return len(value)
    if isinstance(value, dict):
        return _int(value.get("totalCount"))
    return 0


def _line(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def _comment(raw: dict) -> Comment:
    return Comment(
        id=str(raw.get("id", "") or ""),
        author=_login(raw.get("author")),
        created_at=str(raw.get("createdAt", "") or ""),
        body=str(raw.get("body", "") or ""),
    )


def _review(raw: dict, idx: int) -> Review:
    comments = tuple(
        ReviewComment(
            path=str(item.get("path", "") or ""),
            line=_line(item.get("line")),
            body=str(item.get("body", "") or ""),
        )
        for item in _nodes(raw.get("comments"), f"reviews[{idx}].comments")
    )
    return Review(
        author=_login(raw.get("author")),
        submitted_at=str(raw.get("submittedAt", "") or ""),
        state=str(raw.get("state", "") or ""),
        body=str(raw.get("body", "") or ""),
        comments=comments,
    )


def parse_context(ctx: Any) -> LoadedContext:
    """Build the aggregator data model from a decoded gh JSON document."""
    if not isinstance(ctx, dict):
        raise ValueError("expected object")

    is_pr = "headRefName" in ctx or "baseRefName" in ctx
    files = tuple(
        ChangedFile(
            path=str(item.get("path", "") or ""),
            change_type=str(item.get("changeType", "") or "CHANGED"),
            additions=_int(item.get("additions")),
            deletions=_int(item.get("deletions")),
        )
        for item in _nodes(ctx.get("files"), "files")
    )
    context = ContextData(
        title=str(ctx.get("title", "") or ""),
        author=_login(ctx.get("author")),
        state=str(ctx.get("state", "") or ""),
        is_pr=is_pr,
        head_branch=str(ctx.get("headRefName", "") or ""),
        base_branch=str(ctx.get("baseRefName", "") or ""),
        additions=_int(ctx.get("additions")),
        deletions=_int(ctx.get("deletions")),
        commit_count=_commit_count(ctx.get("commits")),
        changed_files=files,
    )
    comments = tuple(_comment(item) for item in _nodes(ctx.get("comments"), "comments"))
    reviews = tuple(
        _review(item, idx) for idx, item in enumerate(_nodes(ctx.get("reviews"), "reviews"))
    )
    return LoadedContext(
        context=context,
        body=str(ctx.get("body", "") or ""),
        comments=comments,
        reviews=reviews,
    )


def load_context(path: Path) -> LoadedContext:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OSError(f"unable to read context JSON {path}: {exc}") from exc
    try:
        ctx = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON in context file {path}: {exc}") from exc
    try:
        return parse_context(ctx)
    except ValueError as exc:
        raise ValueError(f"invalid context JSON in {path}: {exc}") from exc


def load_image_map(path: Path) -> dict[str, str]:
    """Read ``{original: resolved}`` written by the asset-download step."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise OSError(f"unable to read image map {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON in image map {path}: {exc}") from exc
    if not isinstance(raw, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
    ):
        raise ValueError(f"invalid image map in {path}: expected object of strings")
    return raw
