#!/usr/bin/env python3
"""
End-to-end test runner for struct-tetris.

Runs the tool on every tests/e2e/test_*.go fixture (in dry-run mode, so the
fixtures are never rewritten) and checks exit codes and output against the
fixture metadata:
- 0: Success (no errors, no warnings)
- 1: Success with warnings
- 2: Errors in the struct declaration

Usage:
    python tests/run_tests.py
    python tests/run_tests.py --verbose
    python tests/run_tests.py --filter err
"""

import argparse
import json
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm

from test_metadata import check_output, get_expected_exit_code, parse_test_metadata

PROJECT_ROOT = Path(__file__).parent.parent
E2E_DIR = PROJECT_ROOT / "tests" / "e2e"


def run_single_test(test_file: Path) -> tuple[str, bool, int, int, str]:
    """Run a single fixture and return (name, passed, expected, actual, output)."""
    metadata = parse_test_metadata(test_file)
    expected_exit_code = get_expected_exit_code(test_file, metadata)

    cmd = [sys.executable, "-m", "struct_tetris", "--no-banner", "--dry-run",
           *metadata.cmd_args, str(test_file)]
    try:
        result = subprocess.run(
            cmd,
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=60,
        )
    except subprocess.TimeoutExpired:
        return test_file.name, False, expected_exit_code, -1, "TEST TIMEOUT"

    problems = check_output(metadata, result.stdout, result.stderr)
    passed = result.returncode == expected_exit_code and not problems

    output = ""
    if problems:
        output += "PROBLEMS:\n" + "\n".join(problems) + "\n"
    if result.stdout:
        output += f"STDOUT:\n{result.stdout}\n"
    if result.stderr:
        output += f"STDERR:\n{result.stderr}\n"

    return test_file.name, passed, expected_exit_code, result.returncode, output


def main() -> int:
    parser = argparse.ArgumentParser(description="Run struct-tetris end-to-end tests")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show detailed output for each test")
    parser.add_argument("-j", "--jobs", type=int, default=4,
                        help="Number of parallel test jobs (default: 4)")
    parser.add_argument("--filter", type=str,
                        help="Only run tests whose file name contains this pattern")
    parser.add_argument("--json", action="store_true",
                        help="Output results in JSON format")
    args = parser.parse_args()

    test_files = sorted(E2E_DIR.glob("test_*.go"))
    if args.filter:
        test_files = [f for f in test_files if args.filter in f.name]

    if not test_files:
        if not args.json:
            print("No test files found!")
        return 1

    if not args.json:
        print(f"Running {len(test_files)} tests with {args.jobs} parallel jobs...")
        print()

    start_time = time.time()

    results = []
    show_progress = not args.json and not args.verbose
    with ThreadPoolExecutor(max_workers=args.jobs) as executor:
        futures = {executor.submit(run_single_test, f): f for f in test_files}
        pbar = tqdm(total=len(test_files), desc="Running tests", unit="test",
                    bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
                    disable=not show_progress)
        for future in as_completed(futures):
            results.append(future.result())
            pbar.update(1)
        pbar.close()

    end_time = time.time()

    passed_tests = []
    failed_tests = []
    for test_name, passed, expected, actual, output in sorted(results):
        if passed:
            passed_tests.append(test_name)
            if args.verbose and not args.json:
                print(f"✓ {test_name} (expected: {expected}, actual: {actual})")
        else:
            failed_tests.append((test_name, expected, actual, output))
            if not args.json:
                print(f"✗ {test_name} (expected: {expected}, actual: {actual})")
                if args.verbose and output:
                    print(f"  Output: {output}")

    if args.json:
        print(json.dumps({
            "total_tests": len(results),
            "passed": len(passed_tests),
            "failed": len(failed_tests),
            "duration_seconds": round(end_time - start_time, 2),
            "failed_tests": [
                {"name": name, "expected_exit_code": expected, "actual_exit_code": actual}
                for name, expected, actual, _ in failed_tests
            ],
        }, indent=2))
        return 1 if failed_tests else 0

    print()
    print(f"Test Results ({end_time - start_time:.2f}s):")
    print(f"  Passed: {len(passed_tests)}")
    print(f"  Failed: {len(failed_tests)}")
    print(f"  Total:  {len(results)}")

    return 1 if failed_tests else 0


if __name__ == "__main__":
    sys.exit(main())
