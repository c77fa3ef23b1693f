"""
Shared pytest fixtures for the onetime test suite.

Usage in tests:
    def test_something(lint_factory):
        path = lint_factory.write("app.js", "const a = 1;\\nuse(a);\\n")
        cli = lint_factory.create_cli()

    def test_engine(rule):
        findings = rule.check("const a = 1; use(a);")
"""

import pytest

from tests.factories import LintTestFactory


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """
    Keep ONETIME_* variables and the real home directory out of every test.

    The user config layer is read from ~/.onetime, so HOME points into
    tmp_path for the duration of the test.
    """
    for name in ("ONETIME_IGNORED_VARIABLES", "ONETIME_FORMAT", "ONETIME_SYMBOLS",
                 "ONETIME_PROJECT_PATH", "ONETIME_ASCII_ONLY", "ONETIME_UNICODE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def lint_factory(tmp_path):
    """
    Create an empty LintTestFactory.

    Example:
        def test_check_reports(lint_factory):
            lint_factory.write("src/a.js", "const a = 1;\\nuse(a);\\n")
            cli = lint_factory.create_cli()
    """
    return LintTestFactory(tmp_path)


@pytest.fixture
def rule():
    """A OneTimeVarsRule with default options."""
    from onetime.core.engine import OneTimeVarsRule
    return OneTimeVarsRule()


@pytest.fixture
def ascii_symbols():
    """ASCII symbol set, so rendered output is stable across terminals."""
    from onetime.presentation.symbols import ASCII
    return ASCII
