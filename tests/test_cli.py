"""
Tests for the reflex-user-table command line.
"""

import json

import polars as pl
from typer.testing import CliRunner

from reflex_user_table.cli import _build_app_code, app

from conftest import make_user, make_users

runner = CliRunner()


def _write_users(tmp_path, users):
    path = tmp_path / "users.json"
    path.write_text(json.dumps(users), encoding="utf-8")
    return path


class TestReport:
    def test_summary(self, tmp_path):
        users = make_users(4)
        users[2] = make_user(2, email="broken")
        path = _write_users(tmp_path, users)

        result = runner.invoke(app, ["report", str(path)])
        assert result.exit_code == 0
        assert "4 users, 1 with validation problems, 1 problems total" in result.output

    def test_output_file(self, tmp_path):
        users = make_users(3)
        users[0] = make_user(0, name="7")
        path = _write_users(tmp_path, users)
        output = tmp_path / "problems.csv"

        result = runner.invoke(app, ["report", str(path), "--output", str(output)])
        assert result.exit_code == 0
        assert pl.read_csv(output)["index"].to_list() == [0]

    def test_non_object_elements_are_reported(self, tmp_path):
        path = _write_users(tmp_path, [make_user(0), None, 42])

        result = runner.invoke(app, ["report", str(path)])
        assert result.exit_code == 0
        assert "3 users, 2 with validation problems, 8 problems total" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["report", str(tmp_path / "missing.json")])
        assert result.exit_code == 1

    def test_bad_output_extension(self, tmp_path):
        path = _write_users(tmp_path, make_users(1))
        result = runner.invoke(app, ["report", str(path), "--output", str(tmp_path / "x.txt")])
        assert result.exit_code == 1


class TestBuildAppCode:
    def test_embeds_path_and_title(self, tmp_path):
        path = _write_users(tmp_path, [])
        code = _build_app_code(path, 'My "users"')
        assert str(path.resolve()) in code
        assert 'rx.heading("My \\"users\\""' in code
        assert "__SAFE_PATH__" not in code
        compile(code, "viewer_app.py", "exec")
