"""Tests for the asyncapi-polyglot command line."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from asyncapi_polyglot.generate import build_parser, main

pytestmark = pytest.mark.usefixtures("clean_settings")


@pytest.fixture
def spec_file(tmp_path: Path, orders_document: dict[str, Any]) -> Path:
    path = tmp_path / "orders.yaml"
    path.write_text(yaml.safe_dump(orders_document, sort_keys=False))
    return path


@pytest.fixture
def broken_spec_file(tmp_path: Path, minimal_document: dict[str, Any]) -> Path:
    minimal_document["operations"][0]["channel"] = "nowhere"
    path = tmp_path / "broken.yaml"
    path.write_text(yaml.safe_dump(minimal_document, sort_keys=False))
    return path


class TestValidateCommand:
    """Tests for `validate`."""

    def test_valid_spec(self, spec_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["validate", str(spec_file)]) == 0
        out = capsys.readouterr().out
        assert "Spec 'Orders API' v1.0.0 is valid" in out

    def test_invalid_spec(
        self, broken_spec_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["validate", str(broken_spec_file)]) == 1
        err = capsys.readouterr().err
        assert "Validation failed [unresolved] at operations.orderCreated.channel" in err

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["validate", str(tmp_path / "absent.yaml")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestGenerateCommand:
    """Tests for `generate`."""

    def test_generate_one_language(
        self, spec_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_dir = tmp_path / "out"
        code = main(["generate", str(spec_file), "-o", str(out_dir), "-l", "python"])

        assert code == 0
        out = capsys.readouterr().out
        assert "  ✓ schema/types.capnp" in out
        assert "  ✓ python/orders_api/event_bus.py" in out
        assert "✓ Generated 20 files" in out
        assert (out_dir / "python/orders_api/event_bus.py").is_file()
        assert not (out_dir / "rust").exists()

    def test_repeated_language_is_deduplicated(self, spec_file: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        argv = ["generate", str(spec_file), "-o", str(out_dir), "-l", "rust", "-l", "rust"]
        assert main(argv) == 0
        assert (out_dir / "rust/Cargo.toml").is_file()

    def test_output_dir_from_environment(
        self, spec_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("POLYGLOT_OUTPUT_DIR", str(tmp_path / "env-out"))
        monkeypatch.setenv("POLYGLOT_LANGUAGES", "typescript")
        assert main(["generate", str(spec_file)]) == 0
        assert (tmp_path / "env-out/typescript/src/event_bus.ts").is_file()

    def test_invalid_spec_writes_nothing(
        self, broken_spec_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_dir = tmp_path / "out"
        assert main(["generate", str(broken_spec_file), "-o", str(out_dir)]) == 1
        assert "Error: validation failed:" in capsys.readouterr().err
        assert not out_dir.exists()

    def test_workers_must_be_positive(self, spec_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", str(spec_file), "--workers", "0"])
        assert exc_info.value.code == 2

    def test_unknown_language(self, spec_file: Path) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate", str(spec_file), "-l", "cobol"])
