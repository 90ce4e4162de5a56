from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ed_tracker.core.config import Settings
from ed_tracker.main import create_app


@pytest.fixture
def client():
    app = create_app(Settings(ENV="local", SEED_DEMO_DATA=False))
    with TestClient(app) as c:
        yield c


def _receive_initial(ws) -> list[dict]:
    init = ws.receive_json()
    alert = ws.receive_json()
    assert init["event"] == "init_data"
    assert alert == {"event": "update_alert_mode", "data": False}
    return init["data"]


ADMISSION = {"rut": "15.111.222-3", "name": "Pedro Pascal", "category": "C4", "admissionReason": "Gastroenteritis aguda"}


def test_health(client) -> None:
    assert client.get("/api/v1/health").json() == {"status": "ok"}


def test_new_connection_gets_snapshot_and_alert_flag(client) -> None:
    with client.websocket_connect("/ws") as ws:
        assert _receive_initial(ws) == []


def test_mutation_from_one_client_reaches_all_clients(client) -> None:
    with client.websocket_connect("/ws") as staff, client.websocket_connect("/api/v1/ws") as display:
        _receive_initial(staff)
        _receive_initial(display)

        staff.send_json({"event": "add_patient", "data": ADMISSION})

        for ws in (staff, display):
            msg = ws.receive_json()
            assert msg["event"] == "update_patients"
            assert [p["name"] for p in msg["data"]] == ["Pedro Pascal"]
            assert msg["data"][0]["id"] == 1


def test_update_and_delete_over_the_socket(client) -> None:
    with client.websocket_connect("/ws") as ws:
        _receive_initial(ws)
        ws.send_json({"event": "add_patient", "data": ADMISSION})
        ws.receive_json()

        ws.send_json({"event": "update_patient", "data": {"id": 1, "updates": {"stage": "waiting", "status": "EN SALA DE ESPERA"}}})
        row = ws.receive_json()["data"][0]
        assert (row["stage"], row["status"], row["category"]) == ("waiting", "EN SALA DE ESPERA", "C4")

        ws.send_json({"event": "delete_patient", "data": 1})
        assert ws.receive_json() == {"event": "update_patients", "data": []}


def test_bad_frames_do_not_break_the_session(client) -> None:
    with client.websocket_connect("/ws") as ws:
        _receive_initial(ws)

        ws.send_text("not json")
        ws.send_json({"event": "add_patient", "data": {"name": "Sin RUT"}})
        err = ws.receive_json()
        assert err["event"] == "error"
        assert err["data"]["event"] == "add_patient"

        ws.send_json({"event": "toggle_alert", "data": True})
        assert ws.receive_json() == {"event": "update_alert_mode", "data": True}


def test_binary_frames_are_skipped(client) -> None:
    with client.websocket_connect("/ws") as ws:
        _receive_initial(ws)

        ws.send_bytes(b"\x00\x01")
        ws.send_json({"event": "toggle_alert", "data": True})
        assert ws.receive_json() == {"event": "update_alert_mode", "data": True}


def test_reconnecting_client_gets_a_fresh_snapshot(client) -> None:
    with client.websocket_connect("/ws") as ws:
        _receive_initial(ws)

    client.post("/api/v1/patients", json=ADMISSION)
    client.post("/api/v1/patients", json={**ADMISSION, "rut": "18.444.555-6", "name": "Laura Bozzo"})

    with client.websocket_connect("/ws") as ws:
        assert [p["name"] for p in _receive_initial(ws)] == ["Pedro Pascal", "Laura Bozzo"]


def test_rest_mutations_are_broadcast(client) -> None:
    with client.websocket_connect("/ws") as ws:
        _receive_initial(ws)

        res = client.post("/api/v1/patients", json={**ADMISSION, "code": "EX-112"})
        assert res.status_code == 201
        created = res.json()
        assert created["code"] == "EX-112"
        assert created["stage"] == "admission"
        assert ws.receive_json()["data"][0]["code"] == "EX-112"

        res = client.patch(f"/api/v1/patients/{created['id']}", json={"comment": "Dolor abdominal leve."})
        assert res.status_code == 200
        assert res.json()["comment"] == "Dolor abdominal leve."
        assert ws.receive_json()["data"][0]["comment"] == "Dolor abdominal leve."

        assert client.put("/api/v1/alert", json={"enabled": True}).json() == {"enabled": True}
        assert ws.receive_json() == {"event": "update_alert_mode", "data": True}

        assert client.delete(f"/api/v1/patients/{created['id']}").status_code == 204
        assert ws.receive_json() == {"event": "update_patients", "data": []}


def test_rest_errors(client) -> None:
    assert client.patch("/api/v1/patients/99", json={"status": "X"}).status_code == 404
    assert client.delete("/api/v1/patients/99").status_code == 404
    assert client.get("/api/v1/patients/99").status_code == 404
    assert client.post("/api/v1/patients", json={"name": "Sin RUT"}).status_code == 422

    client.post("/api/v1/patients", json={**ADMISSION, "code": "AX-381"})
    dup = client.post("/api/v1/patients", json={**ADMISSION, "code": "AX-381"})
    assert dup.status_code == 409


def test_patch_can_clear_admission_reason_but_not_blank_the_code(client) -> None:
    created = client.post("/api/v1/patients", json={**ADMISSION, "code": "AX-381"}).json()

    res = client.patch(f"/api/v1/patients/{created['id']}", json={"admissionReason": None})
    assert res.status_code == 200
    assert res.json()["admissionReason"] is None

    assert client.patch(f"/api/v1/patients/{created['id']}", json={"code": "   "}).status_code == 422
    assert client.get(f"/api/v1/patients/{created['id']}").json()["code"] == "AX-381"


def test_patient_lookup(client) -> None:
    client.post("/api/v1/patients", json={**ADMISSION, "code": "DX-991"})

    found = client.post("/api/v1/patients/lookup", json={"code": "dx-991", "rut": "15.111.222-3"})
    assert found.status_code == 200
    assert found.json()["name"] == "Pedro Pascal"

    wrong = client.post("/api/v1/patients/lookup", json={"code": "DX-991", "rut": "1-9"})
    assert wrong.status_code == 404


def test_queue_lists_waiting_patients_by_priority(client) -> None:
    for rut, category, stage in [("1-1", "C3", "waiting"), ("2-2", "C1", "waiting"), ("3-3", "C1", "waiting"), ("4-4", "C2", "box")]:
        client.post("/api/v1/patients", json={**ADMISSION, "rut": rut, "category": category, "stage": stage})

    body = client.get("/api/v1/queue").json()

    assert body["alert_mode"] is False
    assert body["display"] == {"page_size": 3, "rotation_seconds": 8.0}
    assert [p["id"] for p in body["columns"]["waiting"]] == [2, 3, 1]
    assert [p["id"] for p in body["columns"]["box"]] == [4]
    assert body["columns"]["exams"] == []


def test_vocabularies(client) -> None:
    stages = client.get("/api/v1/stages").json()
    assert [s["id"] for s in stages] == ["admission", "triage", "waiting", "box", "exams", "discharge"]

    categories = client.get("/api/v1/categories").json()
    assert categories[0] == {"id": "C1", "label": "C1 - Emergencia Vital", "color": "red"}
    assert len(categories) == 5


def test_any_origin_is_allowed(client) -> None:
    res = client.get("/api/v1/patients", headers={"Origin": "http://192.168.1.20:5173"})

    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "*"


def test_demo_seed_is_opt_in() -> None:
    app = create_app(Settings(SEED_DEMO_DATA=True))
    with TestClient(app) as c:
        patients = c.get("/api/v1/patients").json()
    assert len(patients) == 7
    assert patients[0]["code"] == "VG-200"
