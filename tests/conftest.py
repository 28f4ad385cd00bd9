"""Shared fixtures for covcomment tests."""

from __future__ import annotations

import pytest

from covcomment.config import ReportOptions

JEST_COVERAGE_TXT = """\
PASS src/index.test.ts
-----------|---------|----------|---------|---------|-------------------
File       | % Stmts | % Branch | % Funcs | % Lines | Uncovered Line #s
-----------|---------|----------|---------|---------|-------------------
All files  |      80 |       70 |      90 |      80 |
 src       |   83.33 |       50 |     100 |   83.33 |
  index.ts |   83.33 |       50 |     100 |   83.33 | 12-15,20
 src/utils |     100 |      100 |     100 |     100 |
  math.ts  |     100 |      100 |     100 |     100 |
-----------|---------|----------|---------|---------|-------------------
Test Suites: 1 passed, 1 total
"""

BASELINE_COVERAGE_TXT = """\
-----------|---------|----------|---------|---------|-------------------
File       | % Stmts | % Branch | % Funcs | % Lines | Uncovered Line #s
-----------|---------|----------|---------|---------|-------------------
All files  |      75 |       70 |      90 |      75 |
 src       |   83.33 |       50 |     100 |   83.33 |
  index.ts |   83.33 |       50 |     100 |   83.33 | 12-15,20
 src/utils |      90 |      100 |     100 |      90 |
  math.ts  |      90 |      100 |     100 |      90 | 7
-----------|---------|----------|---------|---------|-------------------
"""


@pytest.fixture
def coverage_txt() -> str:
    """Jest stdout containing a coverage table with two folders."""
    return JEST_COVERAGE_TXT


@pytest.fixture
def baseline_txt() -> str:
    """Coverage table from a previous run of the same project."""
    return BASELINE_COVERAGE_TXT


@pytest.fixture
def options() -> ReportOptions:
    """Report options pointing links at a fixed repository and commit."""
    return ReportOptions(
        coverage_file="coverage.txt",
        repository="owner/repo",
        commit="abc123",
    )
