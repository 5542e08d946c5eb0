#!/usr/bin/env python3
"""
Dependency Verification Script

Reads the requirements jobflow declares in its installed metadata (runtime
plus the ``test`` extra) and checks that each one imports. Run after
``pip install -e '.[test]'``.
"""

import re
import sys
from importlib import import_module
from importlib.metadata import PackageNotFoundError, requires, version
from typing import Optional

PROJECT = "jobflow"
INSTALL_HINT = "pip install -e '.[test]'"

# Distributions whose import name differs from the normalized project name
IMPORT_NAMES = {
    "python-dotenv": "dotenv",
}

_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_EXTRA = re.compile(r"""extra\s*==\s*["']([^"']+)["']""")


def parse_requirement(requirement: str) -> tuple[str, Optional[str]]:
    """Split a metadata requirement into (distribution name, extra or None).

    >>> parse_requirement('pytest-asyncio>=0.23; extra == "test"')
    ('pytest-asyncio', 'test')
    """
    match = _NAME.match(requirement)
    if match is None:
        raise ValueError(f"Unparseable requirement: {requirement!r}")
    _, _, marker = requirement.partition(";")
    extra = _EXTRA.search(marker)
    return match.group(1), extra.group(1) if extra else None


def import_name(distribution: str) -> str:
    key = distribution.lower()
    return IMPORT_NAMES.get(key, key.replace("-", "_").replace(".", "_"))


def declared_dependencies(extras: tuple[str, ...] = ("test",)) -> list[tuple[str, str]]:
    """(distribution, import name) pairs for runtime deps and the given extras.

    Raises:
        PackageNotFoundError: If jobflow itself is not installed
    """
    pairs = []
    for requirement in requires(PROJECT) or []:
        distribution, extra = parse_requirement(requirement)
        if extra is None or extra in extras:
            pairs.append((distribution, import_name(distribution)))
    return pairs


def verify_imports(extras: tuple[str, ...] = ("test",)) -> int:
    """Import every declared dependency; returns the process exit code."""
    try:
        dependencies = declared_dependencies(extras)
    except PackageNotFoundError:
        print(f"[ERROR] {PROJECT} is not installed. Install it with: {INSTALL_HINT}")
        return 1

    failed = []
    print(f"Verifying {len(dependencies)} dependencies declared by {PROJECT}...\n")

    for distribution, module_name in dependencies:
        try:
            import_module(module_name)
        except ImportError as e:
            print(f"[FAILED] {distribution}: {e}")
            failed.append(distribution)
            continue
        try:
            installed = version(distribution)
        except PackageNotFoundError:
            installed = "unknown version"
        print(f"[OK] {distribution} ({installed})")

    print(f"\n{'=' * 60}")

    if failed:
        print(f"[ERROR] {len(failed)} dependencies failed:")
        for name in failed:
            print(f"   - {name}")
        print(f"\nInstall them with: {INSTALL_HINT}")
        return 1

    print("[SUCCESS] All dependencies verified successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(verify_imports())
