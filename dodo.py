import subprocess
import sys

from doit.task import Task


def task_format() -> Task:
    """
    Run formatters.
    """

    autoflake_args = ["autoflake", "src", "test", "dodo.py"]
    isort_args = ["isort", "src", "test", "dodo.py"]
    docformatter_args = ["docformatter", "src", "test"]
    black_args = ["black", "src", "test", "dodo.py"]
    toml_sort_args = ["toml-sort", "-i", "pyproject.toml"]

    return Task(
        "format",
        actions=[
            (_run, (autoflake_args,)),
            (_run, (isort_args,)),
            # docformatter returns 3 if it changed anything
            (_run, (docformatter_args, {0, 3})),
            (_run, (black_args,)),
            (_run, (toml_sort_args,)),
        ],
        targets=[],
        file_dep=[],
    )


def task_test() -> Task:
    """
    Run unit tests.
    """

    pytest_args = [sys.executable, "-m", "pytest", "test"]

    return Task(
        "test",
        actions=[(_run, (pytest_args,))],
        targets=[],
        file_dep=[],
        verbosity=2,
    )


def _run(cmd: list[str], expect_rc: int | set[int] = 0):
    expect_rcs = expect_rc if isinstance(expect_rc, set) else {expect_rc}
    print(f"=== Running: {' '.join(cmd)}")
    rc = subprocess.call(cmd)
    if rc not in expect_rcs:
        sys.exit(f"Command failed: rc={rc}, cmd={cmd}")
