"""
Unit tests for the dependency verification script.
"""

import importlib.util
from importlib.metadata import PackageNotFoundError
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "verify_dependencies.py"

METADATA = [
    "httpx>=0.27",
    "python-dotenv>=1.0",
    "email-validator>=2.0",
    'pytest-asyncio>=0.23; extra == "test"',
    "sphinx>=7; extra == 'docs'",
]


@pytest.fixture
def verify_module():
    """Load scripts/verify_dependencies.py as a module."""
    spec = importlib.util.spec_from_file_location("verify_dependencies", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def declared(verify_module, mocker):
    """Pretend jobflow's installed metadata lists METADATA."""
    mocker.patch.object(verify_module, "requires", return_value=METADATA)
    mocker.patch.object(verify_module, "version", return_value="1.0")
    return verify_module


class TestRequirementParsing:
    """Tests for parse_requirement() and import_name()."""

    @pytest.mark.parametrize(
        "requirement,expected",
        [
            ("httpx>=0.27", ("httpx", None)),
            ('pytest-mock>=3.12; extra == "test"', ("pytest-mock", "test")),
            ("rich", ("rich", None)),
        ],
    )
    def test_parse_requirement(self, verify_module, requirement, expected):
        assert verify_module.parse_requirement(requirement) == expected

    def test_import_names(self, verify_module):
        assert verify_module.import_name("python-dotenv") == "dotenv"
        assert verify_module.import_name("email-validator") == "email_validator"
        assert verify_module.import_name("pytest-asyncio") == "pytest_asyncio"

    def test_declared_dependencies_skip_other_extras(self, declared):
        """Runtime requirements and the test extra are checked; other extras are not."""
        # Act
        pairs = declared.declared_dependencies()

        # Assert
        assert pairs == [
            ("httpx", "httpx"),
            ("python-dotenv", "dotenv"),
            ("email-validator", "email_validator"),
            ("pytest-asyncio", "pytest_asyncio"),
        ]


class TestVerifyImports:
    """Tests for verify_imports()."""

    def test_returns_zero_when_everything_imports(self, declared, mocker, capsys):
        # Arrange
        mocker.patch.object(declared, "import_module", return_value=object())

        # Act
        code = declared.verify_imports()

        # Assert
        output = capsys.readouterr().out
        assert code == 0
        assert output.count("[OK]") == 4
        assert "[OK] python-dotenv (1.0)" in output
        assert "[SUCCESS]" in output

    def test_returns_one_and_names_missing_package(self, declared, mocker, capsys):
        """A failing import -> exit code 1 and the distribution listed as failed."""
        # Arrange
        def fake_import(name):
            if name == "dotenv":
                raise ImportError("No module named 'dotenv'")
            return object()

        mocker.patch.object(declared, "import_module", side_effect=fake_import)

        # Act
        code = declared.verify_imports()

        # Assert
        output = capsys.readouterr().out
        assert code == 1
        assert "[FAILED] python-dotenv" in output
        assert "[ERROR] 1 dependencies failed" in output

    def test_project_not_installed(self, verify_module, mocker, capsys):
        # Arrange
        mocker.patch.object(
            verify_module, "requires", side_effect=PackageNotFoundError("jobflow")
        )

        # Act
        code = verify_module.verify_imports()

        # Assert
        assert code == 1
        assert "jobflow is not installed" in capsys.readouterr().out
