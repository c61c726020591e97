#!/usr/bin/env python3
"""Coverage report for the recurring-task engine modules"""
import subprocess
import sys

CORE_MODULES = [
    "todo_groups.utils.dates",
    "todo_groups.services.recurrence_service",
    "todo_groups.services.materializer_service",
    "todo_groups.services.generation_service",
    "todo_groups.services.pending_count_service",
]


def run_coverage(modules):
    """Run the unit tests with branch coverage for the given modules"""
    cmd = [sys.executable, '-m', 'pytest', 'tests/unit', '-q', '--tb=short', '--cov-branch',
           '--cov-report=term-missing:skip-covered']
    cmd += [f'--cov={m}' for m in modules]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=300)
    except subprocess.TimeoutExpired:
        print("Timeout running tests")
        return 1

    print(result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)
    return result.returncode


if __name__ == "__main__":
    modules = sys.argv[1:] or CORE_MODULES
    print(f"Getting coverage for {', '.join(modules)}...\n")
    sys.exit(run_coverage(modules))
