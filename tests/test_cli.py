"""
Tests for the dnsconsole command line.
"""

from unittest.mock import patch

from click.testing import CliRunner

from dnsconsole.cli import main
from dnsconsole.modules.auth import verify_password


def test_hash_password_prompts_twice():
    result = CliRunner().invoke(main, ["hash-password"], input="hunter22\nhunter22\n")

    assert result.exit_code == 0
    encoded = result.output.strip().splitlines()[-1]
    assert verify_password("hunter22", encoded)


def test_hash_password_option():
    result = CliRunner().invoke(main, ["hash-password", "--password", "s3cret"])

    assert result.exit_code == 0
    assert verify_password("s3cret", result.output.strip())


def test_serve_runs_app_factory(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("API_PORT=4100\nAPI_PREFIX=/console\n")

    with patch("dnsconsole.cli.uvicorn.run") as run, patch("dnsconsole.cli.log_config.dictConfig"):
        result = CliRunner().invoke(main, ["serve", "--env-file", str(env_file), "--host", "127.0.0.1"],
                                    env={"API_PORT": None, "API_PREFIX": None})

    assert result.exit_code == 0, result.output
    args, kwargs = run.call_args
    assert args == ("dnsconsole.main:create_app",)
    assert kwargs["factory"] is True
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 4100
    filters = kwargs["log_config"]["filters"]["health_check_filter"]
    assert filters["path"] == "/console/health"
