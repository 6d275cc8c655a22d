#!/usr/bin/env python3
"""Run the formatters, linters and the test suite in one go.

Checks run in order (black, isort, ruff, pylint, pytest) and every result is
collected into a single summary. Pass `--fix` to let black, isort and ruff
rewrite files instead of only checking them.
"""

import argparse
from pathlib import Path
import subprocess
import sys

PACKAGES = ["app", "core", "infrastructure", "main.py"]
ROOT = Path(__file__).parent


def build_commands(fix: bool) -> list[tuple[list[str], str]]:
    black = ["python", "-m", "black", "."] + ([] if fix else ["--check"])
    isort = ["python", "-m", "isort", "."] + ([] if fix else ["--check-only"])
    ruff = ["python", "-m", "ruff", "check", "."] + (["--fix"] if fix else [])
    return [
        (black, "black formatting"),
        (isort, "isort import order"),
        (ruff, "ruff lint"),
        (["python", "-m", "pylint", *PACKAGES], "pylint analysis"),
        (["python", "-m", "pytest", "-q"], "pytest suite"),
    ]


def run_command(cmd: list[str], description: str) -> tuple[bool, str]:
    """Run one command from the repo root; return (passed, combined output)."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as e:
        print(f"FAILED to start: {e}")
        return False, str(e)

    success = result.returncode == 0
    output = result.stdout + result.stderr
    print("OK" if success else "FAILED")
    print(f"\nOutput:\n{output}" if output.strip() else "(no output)")
    return success, output


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--fix", action="store_true", help="apply formatter and ruff fixes")
    args = parser.parse_args()

    results = [(desc, *run_command(cmd, desc)) for cmd, desc in build_commands(args.fix)]

    print(f"\n{'='*60}")
    print("Summary")
    print("=" * 60)
    for description, success, _ in results:
        print(f"{description}: {'passed' if success else 'FAILED'}")

    failed = [(d, out) for d, ok, out in results if not ok]
    print(f"\nOverall: {'all passed' if not failed else f'{len(failed)} failed'}")
    for description, output in failed:
        if output.strip():
            print(f"\n--- {description} ---")
            print(output)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
