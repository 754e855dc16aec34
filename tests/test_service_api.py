import json

import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient  # noqa: E402

from vocabscan.cli import build_session  # noqa: E402
from vocabscan.config import Settings  # noqa: E402
from vocabscan.extraction import MockTextRecognizer, MockVisionAnalyzer, WordbookSession  # noqa: E402
from vocabscan.service.app import create_app  # noqa: E402

PNG = ("list.png", b"fake-png-bytes", "image/png")


def _client(settings=None, *, session_factory=None, analyzer=None):
    settings = settings or Settings()
    factory = session_factory or (lambda: build_session(settings, use_mocks=True))
    app = create_app(settings, session_factory=factory, analyzer=analyzer or MockVisionAnalyzer())
    return TestClient(app)


def test_healthz_reports_limits():
    resp = _client(Settings(max_upload_mb=3)).get("/healthz")
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["limits"]["max_upload_mb"] == 3
    assert body["ai"]["configured"] is False


def test_request_id_is_echoed():
    resp = _client().get("/healthz", headers={"X-Request-ID": "req-42"})
    assert resp.headers["X-Request-ID"] == "req-42"
    assert _client().get("/healthz").headers["X-Request-ID"]


def test_analyze_proxy_returns_items():
    resp = _client().post("/api/analyze", files=[("images", PNG), ("images", PNG)])
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [item["word"] for item in items] == ["apple", "teh", "apple", "teh"]
    assert items[0]["meaning_ko"] == "사과"


def test_analyze_proxy_accepts_legacy_field_names():
    resp = _client().post("/api/analyze", files={"file": PNG})
    assert resp.status_code == 200
    assert resp.json()["items"]


def test_analyze_proxy_recheck_mode():
    analyzer = MockVisionAnalyzer()
    resp = _client(analyzer=analyzer).post(
        "/api/analyze?mode=recheck",
        files={"image": PNG},
        data={"lowWords": json.dumps(["teh"])},
    )
    assert resp.status_code == 200
    assert resp.json()["items"] == [{"word": "teh", "corrected_word": "the", "confidence": 0.95}]
    assert analyzer.recheck_calls[0]["words"] == ["teh"]


def test_analyze_proxy_requires_images():
    resp = _client().post("/api/analyze", data={"mode": "analyze"})
    assert resp.status_code == 400


def test_analyze_proxy_maps_adapter_errors_to_502():
    resp = _client(analyzer=MockVisionAnalyzer(failing=[0])).post("/api/analyze", files={"image": PNG})
    assert resp.status_code == 502


def test_rejects_oversize_upload():
    payload = b"x" * (1024 * 1024 + 1)
    resp = _client(Settings(max_upload_mb=1)).post("/v1/extract", files={"image": ("big.png", payload, "image/png")})
    assert resp.status_code == 413


def test_extract_runs_session():
    resp = _client().post("/v1/extract", files={"images": PNG})
    assert resp.status_code == 200
    body = resp.json()
    assert [(e["word"], e["meaning_ko"]) for e in body["entries"]] == [("apple", "사과"), ("banana", None)]
    assert body["state"] == "initial-pass-complete"


def test_extract_ai_engine_with_backfill():
    resp = _client().post("/v1/extract?engine=ai&fill_meanings=true&meaning_lang=en", files={"images": PNG})
    assert resp.status_code == 200
    body = resp.json()
    assert [e["corrected_word"] for e in body["entries"]] == ["apple", "the"]
    assert body["state"] == "recheck-complete"


def test_extract_rejects_unknown_options():
    assert _client().post("/v1/extract?engine=magic", files={"images": PNG}).status_code == 400
    assert _client().post("/v1/extract?case_mode=title", files={"images": PNG}).status_code == 400


def test_extract_reports_total_failure_as_422():
    factory = lambda: WordbookSession(text_recognizer=MockTextRecognizer(failing=[0]))  # noqa: E731
    resp = _client(session_factory=factory).post("/v1/extract", files={"images": PNG})
    assert resp.status_code == 422


def test_export_csv():
    resp = _client().post("/v1/export/csv", json={"entries": [{"word": "apple", "meaning_ko": "사과", "confidence": 0.9}]})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="wordbook.csv"' in resp.headers["content-disposition"]
    assert resp.text.splitlines()[1] == '"apple","apple","사과","0.90"'


@pytest.mark.parametrize("layout", ["list", "flash", "worksheet"])
def test_export_pdf(layout):
    resp = _client().post(f"/v1/export/pdf?layout={layout}", json={"entries": [{"word": "apple", "meaning_ko": "사과"}]})
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")


def test_export_rejects_bad_input():
    client = _client()
    assert client.post("/v1/export/pdf?layout=poster", json={"entries": [{"word": "a"}]}).status_code == 400
    assert client.post("/v1/export/csv", json={"entries": []}).status_code == 400


def test_export_clamps_out_of_range_confidence():
    resp = _client().post("/v1/export/csv", json={"entries": [{"word": "apple", "confidence": 2}]})
    assert resp.status_code == 200
    assert resp.text.splitlines()[1] == '"apple","apple","","1.00"'


def test_analyze_proxy_recheck_merges_duplicate_words():
    analyzer = MockVisionAnalyzer()
    resp = _client(analyzer=analyzer).post(
        "/api/analyze?mode=recheck",
        files={"image": PNG},
        data={"lowWords": json.dumps(["teh", "TEH", " teh ", "wrod", ""])},
    )
    assert resp.status_code == 200
    assert analyzer.recheck_calls[0]["words"] == ["teh", "wrod"]
