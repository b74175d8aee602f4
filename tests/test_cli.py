"""CLI tests with a scripted provider (no network)."""
from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from pei.agents.invoker import AIInvoker
from pei.cli.main import app

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch, invoker, required_values):
    monkeypatch.setattr(AIInvoker, "from_settings", classmethod(lambda cls, settings, audit=None: invoker))
    form_path = tmp_path / "form.json"
    form_path.write_text(json.dumps(required_values, ensure_ascii=False), encoding="utf-8")
    store_path = tmp_path / "store.json"
    return {"form": str(form_path), "store": str(store_path)}


def test_fields_lists_sections():
    result = runner.invoke(app, ["fields"])
    assert result.exit_code == 0
    assert "1. Identificação do Aluno" in result.output
    assert "aluno-nome" in result.output


def test_suggest_and_approve_writes_form(cli_env, provider):
    provider.queue("Pistas visuais.")
    result = runner.invoke(app, [
        "--store", cli_env["store"],
        "suggest", "est-metodologias", "--form", cli_env["form"], "--approve",
    ])
    assert result.exit_code == 0, result.output
    data = json.loads(open(cli_env["form"], encoding="utf-8").read())
    assert data["est-metodologias"] == "Pistas visuais."


def test_suggest_blocked_by_validation(tmp_path, cli_env, provider):
    empty = tmp_path / "empty.json"
    empty.write_text("{}", encoding="utf-8")
    result = runner.invoke(app, ["--store", cli_env["store"], "suggest", "revisao", "--form", str(empty)])
    assert result.exit_code == 1
    assert provider.calls == []


def test_activities_save_then_list(cli_env, provider, activities_json):
    provider.queue(activities_json)
    result = runner.invoke(app, [
        "--store", cli_env["store"],
        "activities", "atividades-content", "--form", cli_env["form"], "--save",
    ])
    assert result.exit_code == 0, result.output
    assert "2 atividades foram salvas" in result.output


def test_generate_save_and_list(cli_env, provider):
    provider.queue("# PEI")
    result = runner.invoke(app, [
        "--store", cli_env["store"], "generate", "--form", cli_env["form"], "--save",
    ])
    assert result.exit_code == 0, result.output
    listing = runner.invoke(app, ["--store", cli_env["store"], "list"])
    assert "Ana Souza" in listing.output
