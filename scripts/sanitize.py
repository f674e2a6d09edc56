#!/usr/bin/env python3
"""Strip hidden content from untrusted text read on stdin.

Usage:
    sanitize.py [--config defaults/sanitizer.yml] < body.md > body.clean.md
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pkg.promptscrub.config import ConfigError, load_sanitizer_config
from pkg.promptscrub.sanitizer import DEFAULT_SANITIZER, Sanitizer


def main(argv: list[str], stdin=None, stdout=None) -> int:
    """Main."""
    parser = argparse.ArgumentParser(prog="sanitize.py")
    parser.add_argument("--config", type=Path, default=None, help="sanitizer policy YAML")
    args = parser.parse_args(argv)

    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    sanitizer = DEFAULT_SANITIZER
    if args.config is not None:
        try:
            sanitizer = Sanitizer.from_config(load_sanitizer_config(args.config))
        except ConfigError as e:
            print(f"::error::sanitizer config error: {e}", file=sys.stderr)
            return 2

    raw = stdin.read()
    cleaned = sanitizer.sanitize(raw)
    stdout.write(cleaned)
    removed = len(raw) - len(cleaned)
    if removed:
        print(f"::notice::removed {removed} characters of hidden content", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
