#!/usr/bin/env python3
"""
Code quality checker for the Career Guide chat API.

Runs Ruff for linting (including import sorting) and for the formatting
check. Settings live under ``[tool.ruff]`` in pyproject.toml.

For CI/CD integration, run: python quality_check.py
To apply fixes locally, run: python quality_check.py --fix
"""

import subprocess
import sys
from pathlib import Path

SOURCE_DIRS = ["app/", "models/", "migrations/", "tests/"]


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return True if successful."""
    print(f"\n{'='*60}")
    print(f"🔍 {description}")
    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        print(f"💥 Error running {description}: {e}")
        print("Run: pip install -e '.[dev]'")
        return False

    if result.stdout:
        print("STDOUT:", result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)

    if result.returncode == 0:
        print(f"✅ {description} - PASSED")
        return True
    print(f"❌ {description} - FAILED (exit code: {result.returncode})")
    return False


def main():
    """Run all quality checks."""
    fix = "--fix" in sys.argv[1:]
    print("🚀 Running Career Guide Chat API Quality Checks")
    print(f"Project root: {Path(__file__).parent}")

    lint_cmd = ["ruff", "check", *SOURCE_DIRS]
    format_cmd = ["ruff", "format", *SOURCE_DIRS]
    if fix:
        lint_cmd.append("--fix")
    else:
        format_cmd.append("--check")

    checks = [
        (lint_cmd, "Ruff - Import sorting and linting"),
        (format_cmd, "Ruff - Code formatting"),
    ]

    results = [(description, run_command(cmd, description)) for cmd, description in checks]

    # Summary
    print(f"\n{'='*60}")
    print("📊 QUALITY CHECK SUMMARY")
    print("=" * 60)

    for description, success in results:
        status = "✅ PASSED" if success else "❌ FAILED"
        print(f"{description}: {status}")

    passed = sum(1 for _, success in results if success)
    print(f"\nOverall: {passed}/{len(results)} checks passed")

    if passed == len(results):
        print("🎉 All quality checks passed!")
        sys.exit(0)
    print("⚠️  Some quality checks failed. Please review and fix.")
    sys.exit(1)


if __name__ == "__main__":
    main()
