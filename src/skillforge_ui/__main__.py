"""CLI entrypoint for the SkillForge UI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata

from .app import SkillForgeApp
from .config import ensure_config_dir, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillforge-ui",
        description="SkillForge - terminal study assistant and course companion",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Override the chat backend base URL",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("skillforge-ui")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"skillforge-ui {version}")
        return

    ensure_config_dir()
    config = load_config()
    if args.base_url:
        config["chat"]["base_url"] = args.base_url.rstrip("/")

    app = SkillForgeApp(config)
    app.run()


if __name__ == "__main__":
    main()
