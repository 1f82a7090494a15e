import json
from unittest.mock import patch

from typer.testing import CliRunner

from src.cli.main import app

runner = CliRunner()


def test_translate():
    result = runner.invoke(app, ["translate", "title: {Moby Dick} AND author: {Melville}"])
    assert result.exit_code == 0
    assert "t:(Moby Dick) AND a:(Melville)" in result.output
    assert "t%3A%28Moby+Dick%29" in result.output


def test_translate_filtered():
    result = runner.invoke(app, ["translate", "keyword: {cats} AND filter: {FilterFormat.Book}"])
    assert result.exit_code == 0
    assert "filtered" in result.output


def test_translate_unsupported():
    result = runner.invoke(app, ["translate", "date: {1851}"])
    assert result.exit_code == 1
    assert "Date queries are not supported" in result.output


def test_translate_identifier_policy():
    result = runner.invoke(
        app, ["translate", "identifier: {123}", "--identifier-policy", "barcode_or_call_number"]
    )
    assert result.exit_code == 0
    assert "(b:(123) OR c:(123))" in result.output


def test_translate_unknown_policy():
    result = runner.invoke(app, ["translate", "keyword: {cats}", "--identifier-policy", "guess"])
    assert result.exit_code == 2


def test_normalize_bib(tmp_path, bib_data):
    path = tmp_path / "bib.json"
    path.write_text(json.dumps(bib_data), encoding="utf-8")

    result = runner.invoke(app, ["normalize", str(path)])
    assert result.exit_code == 0
    assert "Bib 1234567" in result.output
    assert "availability" in result.output


def test_normalize_search_page(tmp_path, bib_data, var_field):
    untitled = dict(bib_data, id="7654321", varFields=[var_field("100", ("a", "Nobody"))])
    page = {"count": 2, "total": 2, "start": 0, "entries": [{"bib": bib_data}, {"bib": untitled}]}
    path = tmp_path / "page.json"
    path.write_text(json.dumps(page), encoding="utf-8")

    result = runner.invoke(app, ["normalize", str(path)])
    assert result.exit_code == 0
    assert "Bib 1234567" in result.output
    assert "7654321 skipped" in result.output


def test_normalize_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["normalize", str(path)])
    assert result.exit_code == 1
    assert "Invalid JMRL response" in result.output


@patch("src.server_entry.main")
def test_serve(mock_main):
    result = runner.invoke(app, ["serve", "--host", "127.0.0.1", "--port", "9090"])
    assert result.exit_code == 0
    mock_main.assert_called_once_with(["--host", "127.0.0.1", "--port", "9090"])
