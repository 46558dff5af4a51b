"""Integration tests for the metrika command line."""

import argparse
import csv
import json
import pytest
from datetime import datetime
from unittest.mock import patch

from PIL import Image

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from metrika import __version__
from metrika.exceptions import UnsupportedFormatError
from metrika.main import determine_output_format, main, positive_int, prompt_confirmation
from metrika.models import QuantityType
from metrika.store import JsonHealthStore

OCR_PATH = "metrika.recognition.tesseract.pytesseract.image_to_string"
EPOCH = datetime(2000, 1, 1)
FAR_FUTURE = datetime(2100, 1, 1)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "health.json"


@pytest.fixture
def run(store_path, capsys):
    """Run the CLI against a temporary store, returning (exit code, stdout)."""

    def _run(*argv):
        code = main(["--store", str(store_path), *argv])
        return code, capsys.readouterr().out

    return _run


@pytest.fixture
def scale_image(tmp_path):
    path = tmp_path / "balanca.png"
    Image.new("RGB", (80, 40), "white").save(path)
    return path


def _stored(store_path, quantity_type):
    store = JsonHealthStore(store_path)
    store.request_authorization(list(QuantityType), [])
    return store.samples(quantity_type, EPOCH, FAR_FUTURE)


class TestHelpers:
    """Tests for argument helpers."""

    @pytest.mark.parametrize(
        "path,override,expected",
        [
            ("out.json", None, "json"),
            ("out.CSV", None, "csv"),
            ("out", None, "json"),
            (None, None, "json"),
            ("out.json", "csv", "csv"),
        ],
    )
    def test_determine_output_format(self, path, override, expected):
        assert determine_output_format(path, override) == expected

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            determine_output_format("out.xlsx", None)
        assert exc_info.value.format_name == "xlsx"

    def test_positive_int(self):
        assert positive_int("7") == 7
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int("0")
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int("sete")

    @pytest.mark.parametrize("answer,expected", [("s", True), ("Sim", True), ("n", False), ("", False)])
    def test_prompt_confirmation(self, answer, expected):
        with patch("builtins.input", return_value=answer):
            assert prompt_confirmation("72.5") is expected

    def test_prompt_confirmation_eof(self):
        with patch("builtins.input", side_effect=EOFError):
            assert prompt_confirmation("72.5") is False


class TestExtractCommand:
    """Tests for `metrika extract`."""

    def test_prints_token(self, run):
        assert run("extract", "BALANÇA", "72,5 kg") == (0, "72.5\n")

    def test_leftmost_match_of_first_line(self, run):
        assert run("extract", "72.5/80.1", "65,0") == (0, "72.5\n")

    def test_whitespace_collapse_joins_tokens(self, run):
        # "peso 72.5 80.1" becomes "peso72.580.1"; a digit follows "72.5"
        assert run("extract", "peso 72.5 80.1") == (0, "72\n")

    def test_not_found(self, run):
        assert run("extract", "kg", "7") == (1, "")

    def test_no_lines(self, run):
        assert run("extract") == (1, "")

    def test_plausibility(self, run):
        assert run("extract", "999") == (0, "999\n")
        assert run("extract", "--check-plausibility", "999") == (1, "")

    def test_does_not_create_store(self, run, store_path):
        run("extract", "72,5")
        assert not store_path.exists()


class TestWeightCommand:
    """Tests for `metrika weight`."""

    def test_latest_empty(self, run):
        code, out = run("weight", "latest")
        assert code == 0
        assert out.splitlines() == ["--- kg", "Nenhum registo encontrado"]

    def test_add_then_latest(self, run, store_path):
        code, out = run("weight", "add", "72,5")
        assert code == 0
        assert out.splitlines()[0] == "72.5 kg"

        code, out = run("weight", "latest")
        assert out.splitlines()[0] == "72.5 kg"
        assert len(_stored(store_path, QuantityType.BODY_MASS)) == 1

    @pytest.mark.parametrize("value", ["abc", "0"])
    def test_add_invalid(self, run, store_path, value):
        assert run("weight", "add", value) == (1, "")
        assert not store_path.exists()


class TestWaterCommand:
    """Tests for `metrika water`."""

    def test_add_ml(self, run):
        assert run("water", "add", "--ml", "500") == (0, "0.5L de 2L\n")

    def test_presets_accumulate(self, run, store_path):
        run("water", "add", "--preset", "cup")
        code, out = run("water", "add", "--preset", "bottle")

        assert code == 0
        assert out == "1.0L de 2L\n"
        assert len(_stored(store_path, QuantityType.DIETARY_WATER)) == 2

    @pytest.mark.parametrize("amount", ["0", "-250", "muito"])
    def test_invalid_amount(self, run, store_path, amount):
        assert run("water", "add", "--ml", amount) == (1, "")
        assert not store_path.exists()

    def test_amount_required(self, run):
        with pytest.raises(SystemExit):
            run("water", "add")

    def test_unknown_preset(self, run):
        with pytest.raises(SystemExit):
            run("water", "add", "--preset", "bucket")


class TestSummaryCommand:
    """Tests for `metrika summary`."""

    def test_empty(self, run):
        code, out = run("summary")
        assert code == 0
        assert out.splitlines() == [
            "Peso: --- kg (Nenhum registo encontrado)",
            "Hidratação: 0.0L de 2L",
            "Exercício: 0 min",
            "Calorias ativas: 0 kcal",
        ]

    def test_json(self, run):
        run("weight", "add", "72.5")
        run("water", "add", "--ml", "500")

        code, out = run("summary", "--json")
        data = json.loads(out)

        assert code == 0
        assert data["weight"]["value_text"] == "72.5"
        assert data["hydration"]["label"] == "0.5L de 2L"
        assert data["activity"]["workouts"] == []


class TestReportCommand:
    """Tests for `metrika report`."""

    def test_stdout_json(self, run):
        run("weight", "add", "72.5")

        code, out = run("report", "--days", "7")
        data = json.loads(out)

        assert code == 0
        assert len(data["water_series"]) == 7
        assert data["weight_series"][0]["value_kg"] == 72.5
        assert data["has_water_data"] is False

    def test_stdout_csv(self, run):
        code, out = run("report", "--days", "2", "-f", "csv")
        assert code == 0
        assert out.splitlines()[0] == "date,weight_kg,water_liters"
        assert len(out.splitlines()) == 3

    def test_output_file_by_extension(self, run, tmp_path):
        target = tmp_path / "history.csv"
        run("water", "add", "--preset", "cup")

        assert run("report", "--days", "1", "-o", str(target)) == (0, "")

        with open(target, newline="", encoding="utf-8-sig") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["water_liters"] == "0.25"

    def test_output_json_file(self, run, tmp_path):
        target = tmp_path / "history.json"
        assert run("report", "-o", str(target)) == (0, "")
        assert len(json.loads(target.read_text(encoding="utf-8"))["water_series"]) == 30

    def test_unsupported_extension(self, run, tmp_path):
        target = tmp_path / "history.xlsx"
        assert run("report", "-o", str(target)) == (1, "")
        assert not target.exists()

    def test_invalid_days(self, run):
        with pytest.raises(SystemExit):
            run("report", "--days", "0")


class TestActivityCommand:
    """Tests for `metrika activity`."""

    def test_empty(self, run):
        code, out = run("activity")
        assert code == 0
        assert out.splitlines()[-1] == "Nenhuma atividade registrada na última semana."

    def test_json(self, run):
        code, out = run("activity", "--json", "--days", "3")
        assert code == 0
        assert json.loads(out)["minutes_text"] == "0"


class TestScanCommand:
    """Tests for `metrika scan` with the OCR engine mocked."""

    def test_scan_confirmed(self, run, scale_image, store_path):
        with patch(OCR_PATH, return_value="BALANÇA\n72,5 kg\n"):
            code, out = run("scan", str(scale_image), "--yes")

        assert (code, out) == (0, "72.5 kg\n")
        assert _stored(store_path, QuantityType.BODY_MASS)[0].value == 72.5

    def test_scan_prompt_declined(self, run, scale_image, store_path):
        with patch(OCR_PATH, return_value="72,5"), patch("builtins.input", return_value="n"):
            assert run("scan", str(scale_image)) == (1, "")
        assert not store_path.exists()

    def test_scan_prompt_accepted(self, run, scale_image):
        with patch(OCR_PATH, return_value="72,5"), patch("builtins.input", return_value="sim"):
            assert run("scan", str(scale_image)) == (0, "72.5 kg\n")

    def test_scan_no_weight(self, run, scale_image):
        with patch(OCR_PATH, return_value="BALANÇA"):
            assert run("scan", str(scale_image), "--yes") == (1, "")

    def test_scan_missing_image(self, run, tmp_path):
        assert run("scan", str(tmp_path / "missing.jpg"), "--yes") == (1, "")


class TestStoreErrors:
    """Tests for store and settings failures at startup."""

    def test_corrupt_store(self, run, store_path):
        store_path.write_text("not json", encoding="utf-8")
        assert run("weight", "latest") == (1, "")

    def test_store_with_invalid_utf8(self, run, store_path):
        store_path.write_bytes(b'{"samples": [\xff\xfe]}')
        assert run("weight", "latest") == (1, "")

    def test_store_path_is_directory(self, tmp_path):
        assert main(["--store", str(tmp_path), "weight", "latest"]) == 1

    @pytest.mark.parametrize(
        "name,value",
        [("METRIKA_WORKOUT_DAYS", "40"), ("METRIKA_HISTORY_DAYS", "0")],
    )
    def test_invalid_environment(self, run, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        assert run("weight", "latest") == (1, "")

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
