"""Tests for the command line interface, run against the sample dataset."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from conftest import MAX_DIRECTORY_ID, QUALITY_CHECK_ID, REVISION_ID, SUBMITTED_ID, make_token

from ideenpool.cli import main

_ENV = (
    "IDEENPOOL_HOME",
    "DATAVERSE_URL",
    "DATAVERSE_ACCESS_TOKEN",
    "IDEENPOOL_DEMO_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def demo(runner: CliRunner, tmp_path: Path):
    def _invoke(*args: str):
        return runner.invoke(main, ["--home", str(tmp_path), "--demo", *args])

    return _invoke


def test_list_json(demo) -> None:
    result = demo("list", "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["count"] == 4
    assert data["ideas"][0]["id"] == SUBMITTED_ID


def test_list_filters(demo) -> None:
    result = demo("list", "--json", "--phase", "Analyse & Bewertung")
    data = json.loads(result.stdout)
    assert [i["title"] for i in data["ideas"]] == ["Automatisierte Rechnungsverarbeitung"]

    result = demo("list", "--json", "--search", "protokoll")
    data = json.loads(result.stdout)
    assert [i["id"] for i in data["ideas"]] == [REVISION_ID]


def test_list_table(demo) -> None:
    result = demo("list")
    assert result.exit_code == 0, result.output
    assert "Initialisierung" in result.stdout
    assert "Demo mode" in result.stderr


def test_list_nothing_found(demo) -> None:
    result = demo("list", "--person", "Niemand")
    assert result.exit_code == 0
    assert "No ideas found" in result.stdout


def test_show_json(demo) -> None:
    result = demo("show", REVISION_ID, "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["editable"] == ["description"]
    assert data["sections"]["Grunddaten"]["title"] == "Digitales Sitzungsprotokoll"
    assert "Initialprüfung" in data["sections"]
    assert "Detailanalyse" not in data["sections"]


def test_show_not_found(demo) -> None:
    result = demo("show", "00000000-0000-0000-0000-000000000000")
    assert result.exit_code == 1
    assert "not found" in result.stderr


def test_submit(demo) -> None:
    result = demo(
        "submit",
        "--title", "Digitale Zeiterfassung",
        "--description", "Zeiterfassung per App erfassen",
    )
    assert result.exit_code == 0, result.output
    assert "Idea Submitted" in result.stdout
    assert "Eingereicht" in result.stdout


def test_submit_invalid(demo) -> None:
    result = demo("submit", "--title", "App", "--description", "Zu kurz")
    assert result.exit_code == 1
    assert "Error:" in result.stderr
    assert "mindestens" in result.stderr


def test_edit_own_revision(demo) -> None:
    result = demo("edit", REVISION_ID, "--description", "Pendenzen sollen für alle sichtbar sein.")
    assert result.exit_code == 0, result.output
    assert "Description updated" in result.stdout


def test_edit_someone_elses_idea(demo) -> None:
    result = demo("edit", QUALITY_CHECK_ID, "--description", "Das ist nicht meine eigene Idee.")
    assert result.exit_code == 1
    assert "Only the submitter" in result.stderr


def test_subscribe_and_unsubscribe(demo) -> None:
    result = demo("subscribe", QUALITY_CHECK_ID)
    assert result.exit_code == 0, result.output
    assert "Subscribed to Digitale Zeiterfassung per App" in result.stdout

    result = demo("unsubscribe", SUBMITTED_ID)
    assert result.exit_code == 1
    assert "Submitters cannot unsubscribe" in result.stderr


def test_revisions(demo) -> None:
    result = demo("revisions")
    assert result.exit_code == 0, result.output
    assert "Digitales Sitzungsprotokoll" in result.stdout


def test_fields(demo) -> None:
    result = demo("fields", "--status", "eingereicht")
    assert result.exit_code == 0, result.output
    assert "Beschreibung" in result.stdout
    assert "✎" in result.stdout


def test_token_lifecycle(demo) -> None:
    result = demo("token", "status")
    assert result.exit_code == 1
    assert "Not signed in" in result.stdout

    token = make_token(MAX_DIRECTORY_ID, name="Max Muster", email="max@example.com")
    result = demo("token", "set", token)
    assert result.exit_code == 0, result.output
    assert "Max Muster" in result.stdout

    result = demo("token", "status")
    assert result.exit_code == 0
    assert "Signed in as Max Muster <max@example.com>" in result.stdout

    # The stored token now decides who acts
    result = demo("edit", QUALITY_CHECK_ID, "--description", "Die Idee gehört jetzt Max Muster.")
    assert result.exit_code == 1
    assert "cannot be edited" in result.stderr

    result = demo("token", "clear")
    assert "Token removed" in result.stdout
    result = demo("token", "clear")
    assert "No stored token" in result.stdout


def test_token_set_expired(demo) -> None:
    result = demo("token", "set", make_token(exp_minutes=-5))
    assert result.exit_code == 1
    assert "expired" in result.stderr


def test_missing_configuration(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(main, ["--home", str(tmp_path), "list"])
    assert result.exit_code == 1
    assert "DATAVERSE_URL" in result.stderr
