"""CLI tests — click's CliRunner against the test database.

Learn: These tests are synchronous on purpose: the commands call
asyncio.run() themselves, which can't happen inside a running loop.
Usernames are randomized because init-db never drops existing rows.
"""

import uuid

from click.testing import CliRunner

from laika import __version__
from laika.cli.main import main


def _name() -> str:
    return f"root-{uuid.uuid4().hex[:8]}"


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_create_admin_then_promote():
    runner = CliRunner()
    assert runner.invoke(main, ["init-db"]).exit_code == 0

    name = _name()
    result = runner.invoke(
        main, ["create-admin", name, f"{name}@laika.gallery", "--password", "pw"]
    )
    assert result.exit_code == 0, result.output
    assert "created" in result.output

    result = runner.invoke(
        main, ["create-admin", name, f"{name}@laika.gallery", "--password", "pw"]
    )
    assert result.exit_code == 0, result.output
    assert "Promoted" in result.output


def test_create_admin_duplicate_email():
    runner = CliRunner()
    assert runner.invoke(main, ["init-db"]).exit_code == 0

    first = _name()
    email = f"{first}@laika.gallery"
    assert runner.invoke(main, ["create-admin", first, email, "--password", "pw"]).exit_code == 0

    result = runner.invoke(main, ["create-admin", _name(), email, "--password", "pw"])
    assert result.exit_code == 1
    assert "email" in result.output
