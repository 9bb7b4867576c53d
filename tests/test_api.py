# Data Quality Analyzer - API Tests
# End-to-end requests through the FastAPI application

import sys
import os

# Add parent to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tests.sample_data import SampleDataFactory

BASE = "/api/v1/quality"


def _upload(client, filename, content, **form):
    return client.post(
        f"{BASE}/analyze",
        files={"file": (filename, content, "application/octet-stream")},
        data=form
    )


def test_health(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_analyze_csv_upload(api_client):
    response = _upload(api_client, "customers.csv", SampleDataFactory().customers_csv().encode())

    assert response.status_code == 200
    body = response.json()
    assert body["fileName"] == "customers.csv"
    assert body["totalRows"] == 6
    assert body["overallScore"] == 90
    assert [c["name"] for c in body["columns"]] == ["id", "name", "email", "city", "age"]


def test_analyze_with_format_hint(api_client):
    response = _upload(api_client, "export.txt", b'[{"a": 1}, {"a": 2}]', format="json")

    assert response.status_code == 200
    assert response.json()["totalRows"] == 2


def test_analyze_errors(api_client):
    unsupported = _upload(api_client, "notes.txt", b"hello")
    assert unsupported.status_code == 415
    assert unsupported.json()["error_code"] == "E4002"

    bad_json = _upload(api_client, "data.json", b'{"a": ')
    assert bad_json.status_code == 422
    assert bad_json.json()["error_type"] == "DecodeException"

    empty = _upload(api_client, "empty.csv", b"id,name\n")
    assert empty.status_code == 422
    assert empty.json()["message"] == "No data found in file"


def test_insights_rule_based(api_client):
    analysis = _upload(api_client, "customers.csv", SampleDataFactory().customers_csv().encode()).json()

    response = api_client.post(f"{BASE}/insights", json={"analysis": analysis})

    assert response.status_code == 200
    insights = response.json()["insights"]
    assert insights[0]["userId"] == "3"
    assert insights[0]["affectedColumns"] == ["email", "city"]
    assert insights[1]["issue"] == "ID 4: Missing email"
    assert [i["priority"] for i in insights[2:]] == ["High", "Medium"]


def test_insights_requires_analysis(api_client):
    missing = api_client.post(f"{BASE}/insights", json={})
    assert missing.status_code == 422

    malformed = api_client.post(f"{BASE}/insights", json={"analysis": {"fileName": "x"}})
    assert malformed.status_code == 400
    assert malformed.json()["error_code"] == "E1001"


def test_report_download(api_client):
    analysis = _upload(api_client, "customers.csv", SampleDataFactory().customers_csv().encode()).json()
    insights = api_client.post(f"{BASE}/insights", json={"analysis": analysis}).json()["insights"]

    csv_report = api_client.post(
        f"{BASE}/report",
        json={"analysis": analysis, "insights": insights, "format": "csv"}
    )
    assert csv_report.status_code == 200
    assert csv_report.headers["content-type"].startswith("text/csv")
    assert csv_report.headers["content-disposition"].startswith('attachment; filename="data-quality-report-')
    assert csv_report.text.startswith("Data Quality Analysis Report")

    json_report = api_client.post(f"{BASE}/report", json={"analysis": analysis})
    assert json_report.status_code == 200
    assert json_report.json()["metrics"]["overall"] == 90
    assert json_report.json()["insights"] == []
