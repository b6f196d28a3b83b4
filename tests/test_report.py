from __future__ import annotations

import json
from pathlib import Path

import pytest

import report
from errors import LoadError

SAMPLE_DOCUMENT = {
    "generatedAt": "2026-02-22T12:00:00.000Z",
    "totals": {"contacts": 1234},
    "datasets": {
        "per_lista_ids": [{"label": str(i), "count": 100 - i} for i in range(12)],
        "distribuzione_atenei": [
            {"label": "Bari Aldo Moro", "count": 40},
            {"label": "Altro (k<5)", "count": 9},
        ],
        "distribuzione_corsi": [],
        "distribuzione_anno_nascita": [{"label": "1998", "count": 12}],
    },
}


def test_load_document_absent_is_loading_state(tmp_path: Path) -> None:
    assert report.load_document(str(tmp_path / "missing.json")) is None


def test_load_document_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "datasets.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(LoadError, match="Invalid JSON"):
        report.load_document(str(path))


def test_load_document_wrong_shape(tmp_path: Path) -> None:
    path = tmp_path / "datasets.json"
    path.write_text(json.dumps({"totals": {}}), encoding="utf-8")

    with pytest.raises(LoadError, match="Unexpected artifact shape"):
        report.load_document(str(path))


def test_load_document_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "datasets.json"
    path.write_text(json.dumps(SAMPLE_DOCUMENT), encoding="utf-8")

    assert report.load_document(str(path)) == SAMPLE_DOCUMENT


def test_render_summary_shows_top_n() -> None:
    text = report.render_summary(SAMPLE_DOCUMENT, top_n=10)

    assert "Total contacts: 1234" in text
    assert "List 0: 100" in text
    assert "List 9: 91" in text
    assert "List 10:" not in text
    assert "Bari Aldo Moro: 40" in text
    assert "Altro (k<5): 9" in text


def test_load_document_not_utf8(tmp_path: Path) -> None:
    path = tmp_path / "datasets.json"
    path.write_bytes(b'{"generatedAt": "\xff\xfe"}')

    with pytest.raises(LoadError, match="Could not read"):
        report.load_document(str(path))
