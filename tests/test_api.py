"""Tests for the HTTP functions."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from verdant.api.app import create_app
from verdant.config import Settings
from verdant.services import Services

BASE = "/functions/v1"


@pytest.fixture
def client(settings: Settings, services: Services) -> TestClient:
    return TestClient(create_app(settings, services))


def _error(resp) -> dict:
    assert resp.status_code == 500
    return resp.json()["error"]


def test_preflight_is_ok(client: TestClient) -> None:
    resp = client.options(f"{BASE}/content-approval-system")

    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "authorization" in resp.headers["Access-Control-Allow-Headers"]


def test_health(client: TestClient) -> None:
    resp = client.get("/health")

    assert resp.json()["status"] == "healthy"
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_orchestrator_generate_content(client: TestClient) -> None:
    resp = client.post(
        f"{BASE}/agent-task-orchestrator",
        json={"action": "generate_content", "niche": "Zero Waste", "contentType": "article"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["next_step"] == "manual_approval_required"
    assert body["data"]["content_details"]["status"] == "pending_approval"


def test_orchestrator_action_from_query(client: TestClient) -> None:
    resp = client.get(f"{BASE}/agent-task-orchestrator", params={"action": "status"})

    assert resp.status_code == 200
    assert resp.json()["data"]["total_agents"] == 3


def test_orchestrator_unknown_action(client: TestClient) -> None:
    error = _error(client.post(f"{BASE}/agent-task-orchestrator", json={"action": "dance"}))

    assert error["code"] == "ORCHESTRATOR_ERROR"
    assert error["type"] == "invalid_parameter"
    assert error["message"] == "Invalid action: dance"
    assert "timestamp" in error


def test_content_creation_requires_niche(client: TestClient) -> None:
    error = _error(client.post(f"{BASE}/content-creation-agent", json={}))

    assert error["code"] == "CONTENT_CREATION_FAILED"
    assert error["type"] == "invalid_parameter"


def test_approval_round_trip(client: TestClient) -> None:
    created = client.post(
        f"{BASE}/content-creation-agent", json={"niche": "Renewable Energy"}
    ).json()["data"]

    pending = client.get(f"{BASE}/content-approval-system", params={"action": "list"}).json()
    assert [row["id"] for row in pending["data"]] == [created["workflow_id"]]

    approved = client.post(
        f"{BASE}/content-approval-system",
        json={"action": "approve", "workflowId": created["workflow_id"], "reviewNotes": "ok"},
    )
    assert approved.json()["data"]["content_status"] == "published"

    again = client.post(
        f"{BASE}/content-approval-system",
        json={"action": "reject", "workflowId": created["workflow_id"]},
    )
    error = _error(again)
    assert error["code"] == "APPROVAL_SYSTEM_ERROR"
    assert error["type"] == "invalid_state_transition"


def test_seo_endpoint_missing_content(client: TestClient) -> None:
    error = _error(client.post(f"{BASE}/seo-optimization-agent", json={"contentId": 77}))

    assert error["code"] == "SEO_OPTIMIZATION_FAILED"
    assert error["type"] == "content_not_found"


def test_daily_generator(client: TestClient) -> None:
    resp = client.post(f"{BASE}/daily-content-generator")

    data = resp.json()["data"]
    assert data["daily_generation_completed"] is True
    assert data["successful_generations"] == 3


def test_text_generation_uses_legacy_envelope(client: TestClient) -> None:
    resp = client.post(
        f"{BASE}/enhanced-text-generation",
        json={"topic": "Heat pumps", "ai_provider": "gemini", "word_count": 800},
    )

    body = resp.json()
    assert resp.status_code == 200
    assert "success" not in body
    assert body["data"]["success"] is True
    assert body["data"]["content"]["topic"] == "Heat pumps"


def test_text_generation_rejects_word_count(client: TestClient) -> None:
    error = _error(
        client.post(f"{BASE}/enhanced-text-generation", json={"topic": "x", "word_count": 20000})
    )

    assert error["code"] == "TEXT_GENERATION_FAILED"
    assert error["type"] == "invalid_parameter"


def test_program_management(client: TestClient) -> None:
    listing = client.get(f"{BASE}/awin-program-management").json()["data"]
    assert listing["summary"]["total"] == 6

    applied = client.post(
        f"{BASE}/awin-program-management",
        json={"action": "apply_to_program", "program_id": 1003},
    ).json()["data"]
    assert applied["program"]["status"] == "pending"


def test_program_management_unknown_program(client: TestClient) -> None:
    error = _error(
        client.post(
            f"{BASE}/awin-program-management",
            json={"action": "reject_program", "program_id": 5},
        )
    )

    assert error["code"] == "AWIN_PROGRAM_ERROR"
    assert error["type"] == "program_not_found"


def test_malformed_json_body(client: TestClient) -> None:
    resp = client.post(
        f"{BASE}/content-creation-agent",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    error = _error(resp)
    assert error["code"] == "INVALID_REQUEST"
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
