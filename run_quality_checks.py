#!/usr/bin/env python
"""Local quality checks and test runner for the exporter.

Usage:
    python run_quality_checks.py                    # Run all checks (no fixes)
    python run_quality_checks.py --fix              # Apply black/isort fixes first
    python run_quality_checks.py --skip lint type   # Skip selected checks
"""

import argparse
import subprocess
import sys
from typing import Callable, Optional

PACKAGE_DIR = "usbioboard"
TESTS_DIR = "tests"
DIRS_TO_CHECK = [PACKAGE_DIR, TESTS_DIR]


class CheckRunner:
    """Runs each tool in turn and collects pass/fail results."""

    def __init__(self, fix: bool = False, verbose: bool = False, skip_checks: Optional[list[str]] = None):
        self.fix = fix
        self.verbose = verbose
        self.skip_checks = skip_checks or []
        self.failed_checks: list[str] = []
        self.passed_checks: list[str] = []

    def run_command(self, cmd: list[str], name: str) -> bool:
        print(f"\n{'=' * 70}\n> {name}: {' '.join(cmd)}\n{'=' * 70}")
        try:
            if self.verbose:
                result = subprocess.run(cmd, check=False)
            else:
                result = subprocess.run(cmd, check=False, capture_output=True, text=True)
                if result.returncode != 0:
                    print(result.stdout)
                    print(result.stderr)
        except FileNotFoundError as e:
            print(f"error: {e}")
            print("   Install the tools with: pip install -e .[test,dev]")
            self.failed_checks.append(name)
            return False

        if result.returncode == 0:
            print(f"{name} passed")
            self.passed_checks.append(name)
            return True
        print(f"{name} FAILED")
        self.failed_checks.append(name)
        return False

    def formatting(self) -> bool:
        cmd = ["black", *DIRS_TO_CHECK] if self.fix else ["black", "--check", *DIRS_TO_CHECK]
        return self.run_command(cmd, "black")

    def imports(self) -> bool:
        cmd = ["isort", *DIRS_TO_CHECK] if self.fix else ["isort", "--check-only", *DIRS_TO_CHECK]
        return self.run_command(cmd, "isort")

    def lint(self) -> bool:
        return self.run_command(["pylint", PACKAGE_DIR], "pylint")

    def type(self) -> bool:
        return self.run_command(["mypy", PACKAGE_DIR], "mypy")

    def deadcode(self) -> bool:
        return self.run_command(["vulture", PACKAGE_DIR, "--min-confidence", "80"], "vulture")

    def complexity(self) -> bool:
        return self.run_command(["radon", "cc", PACKAGE_DIR, "-a"], "radon")

    def tests(self) -> bool:
        return self.run_command(
            ["pytest", f"--cov={PACKAGE_DIR}", "--cov-report=term-missing", TESTS_DIR],
            "pytest",
        )

    def run_all(self) -> int:
        checks: list[tuple[str, Callable[[], bool]]] = [
            ("formatting", self.formatting),
            ("imports", self.imports),
            ("lint", self.lint),
            ("type", self.type),
            ("deadcode", self.deadcode),
            ("complexity", self.complexity),
            ("tests", self.tests),
        ]
        for name, check in checks:
            if name in self.skip_checks:
                print(f"skipping {name}")
                continue
            check()

        print(f"\n{'=' * 70}")
        print(f"passed: {', '.join(self.passed_checks) or '-'}")
        print(f"failed: {', '.join(self.failed_checks) or '-'}")
        return 0 if not self.failed_checks else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Run local quality checks and tests")
    parser.add_argument("--fix", "--apply", action="store_true", dest="fix", help="Apply black and isort fixes")
    parser.add_argument("--verbose", "-v", action="store_true", help="Stream tool output")
    parser.add_argument(
        "--skip",
        nargs="+",
        default=[],
        help="Skip checks (formatting, imports, lint, type, deadcode, complexity, tests)",
    )
    args = parser.parse_args()
    return CheckRunner(fix=args.fix, verbose=args.verbose, skip_checks=args.skip).run_all()


if __name__ == "__main__":
    sys.exit(main())
