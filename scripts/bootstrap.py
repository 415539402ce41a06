"""Prepare a checkout for running serp-check.

Installs the package with its test extra, downloads the browser the checks
launch (the bundled Chromium, or the branded channel named by
``SERPCHECK_CHROMIUM_CHANNEL``) and seeds ``.env`` from ``.env.example``.
"""
from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parent.parent
BROWSERS = ("chromium", "chrome", "msedge")


def run(cmd: list[str], *, dry_run: bool = False) -> None:
    print(f"$ {' '.join(cmd)}")
    if not dry_run:
        subprocess.run(cmd, check=True, cwd=ROOT)


def default_browser() -> str:
    channel = os.environ.get("SERPCHECK_CHROMIUM_CHANNEL", "").strip()
    return channel if channel in BROWSERS else "chromium"


def install_command(browser: str, with_deps: bool) -> list[str]:
    cmd = [sys.executable, "-m", "playwright", "install", browser]
    if with_deps:
        cmd.append("--with-deps")
    return cmd


def seed_env(root: Path = ROOT) -> Optional[Path]:
    """Copy ``.env.example`` to ``.env`` unless one already exists."""
    target = root / ".env"
    example = root / ".env.example"
    if target.exists() or not example.exists():
        return None
    shutil.copyfile(example, target)
    return target


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bootstrap a serp-check checkout")
    parser.add_argument(
        "--browser",
        choices=BROWSERS,
        default=None,
        help="Browser to install (default: SERPCHECK_CHROMIUM_CHANNEL or chromium)",
    )
    parser.add_argument(
        "--with-deps",
        action="store_true",
        help="Also install the OS packages the browser needs (Linux CI)",
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Skip pip install -e .[test] if the package is already installed",
    )
    parser.add_argument("--no-env", action="store_true", help="Do not create .env from .env.example")
    parser.add_argument("--dry-run", action="store_true", help="Print commands without running them")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.skip_install:
        run([sys.executable, "-m", "pip", "install", "-e", ".[test]"], dry_run=args.dry_run)

    run(install_command(args.browser or default_browser(), args.with_deps), dry_run=args.dry_run)

    if not args.no_env and not args.dry_run:
        seeded = seed_env()
        if seeded:
            print(f"Created {seeded} from .env.example")
    print("Bootstrap complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
