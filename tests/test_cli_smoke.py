from __future__ import annotations

import json
import re
import subprocess
import sys

from vocabscan import cli


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, *args],
        check=False,
        capture_output=True,
        text=True,
    )


def test_import_version() -> None:
    import vocabscan

    assert isinstance(vocabscan.__version__, str)
    assert re.match(r"^\d+\.\d+\.\d+$", vocabscan.__version__)


def test_vocabscan_help() -> None:
    proc = _run("-m", "vocabscan", "--help")
    assert proc.returncode == 0
    assert "--images" in proc.stdout


def test_cli_with_mocks_writes_exports(tmp_path, capsys) -> None:
    image = tmp_path / "list.png"
    image.write_bytes(b"not-decoded-by-mocks")
    csv_path = tmp_path / "out.csv"
    pdf_path = tmp_path / "out.pdf"

    cli.main(
        [
            "--images",
            str(image),
            "--use-mocks",
            "--fill-meanings",
            "--csv",
            str(csv_path),
            "--pdf",
            str(pdf_path),
            "--layout",
            "flash",
        ]
    )

    payload = json.loads(capsys.readouterr().out)
    assert [(e["word"], e["meaning_ko"]) for e in payload["entries"]] == [("apple", "사과"), ("banana", "바나나")]
    assert csv_path.read_text(encoding="utf-8-sig").startswith('"word","correctedWord"')
    assert pdf_path.read_bytes().startswith(b"%PDF")


def test_cli_ai_engine_with_mocks(tmp_path) -> None:
    image = tmp_path / "list.jpg"
    image.write_bytes(b"jpeg")
    out = tmp_path / "result.json"

    cli.main(["--images", str(image), "--use-mocks", "--engine", "ai", "--out", str(out)])

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["state"] == "recheck-complete"
    assert [e["corrected_word"] for e in payload["entries"]] == ["apple", "the"]
