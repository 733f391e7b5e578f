"""
/api/sessions and /api/questions endpoints.
"""

from __future__ import annotations

import asyncio

SESSION_BODY = {
    "role": "Data Engineer",
    "experience": "4",
    "topicsToFocus": "Spark, Airflow",
    "description": "Prep for onsite",
    "questions": [
        {"question": "What is a DAG?", "answer": "A directed acyclic graph."},
        {"question": "What is a shuffle?", "answer": "Data redistribution."},
    ],
}


def _create(client) -> dict:
    resp = client.post("/api/sessions", json=SESSION_BODY)
    assert resp.status_code == 201
    return resp.json()["session"]


def test_create_session(client) -> None:
    session = _create(client)

    assert session["role"] == "Data Engineer"
    assert session["topicsToFocus"] == "Spark, Airflow"
    assert session["questionCount"] == 2
    assert {q["question"] for q in session["questions"]} == {"What is a DAG?", "What is a shuffle?"}
    assert all(q["sessionId"] == session["id"] for q in session["questions"])
    assert all(q["isPinned"] is False for q in session["questions"])


def test_create_session_missing_fields(client) -> None:
    resp = client.post("/api/sessions", json={"role": "Data Engineer"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Missing required fields"


def test_list_and_get_session(client) -> None:
    created = _create(client)

    listed = client.get("/api/sessions").json()["sessions"]
    assert [s["id"] for s in listed] == [created["id"]]
    assert listed[0]["questionCount"] == 2

    fetched = client.get(f"/api/sessions/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["session"]["description"] == "Prep for onsite"


def test_get_unknown_session(client) -> None:
    resp = client.get("/api/sessions/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["detail"] == {"message": "Session not found"}


def test_delete_session(client) -> None:
    created = _create(client)

    resp = client.delete(f"/api/sessions/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Session deleted successfully"}
    assert client.get(f"/api/sessions/{created['id']}").status_code == 404
    assert client.delete(f"/api/sessions/{created['id']}").status_code == 404


def test_add_questions(client) -> None:
    created = _create(client)

    resp = client.post(
        "/api/questions/add",
        json={"sessionId": created["id"], "questions": [{"question": "What is Parquet?", "answer": "A columnar format."}]},
    )

    assert resp.status_code == 201
    assert resp.json()["questions"][0]["question"] == "What is Parquet?"
    session = client.get(f"/api/sessions/{created['id']}").json()["session"]
    assert session["questionCount"] == 3


def test_add_questions_validation(client) -> None:
    assert client.post("/api/questions/add", json={"questions": [{"question": "Q"}]}).status_code == 400
    assert client.post("/api/questions/add", json={"sessionId": "x", "questions": []}).status_code == 400
    resp = client.post("/api/questions/add", json={"sessionId": "x", "questions": [{"question": "Q"}]})
    assert resp.status_code == 404


def test_pin_and_note(client) -> None:
    created = _create(client)
    qid = created["questions"][1]["id"]

    pinned = client.post(f"/api/questions/{qid}/pin")
    assert pinned.status_code == 200
    assert pinned.json()["question"]["isPinned"] is True

    session = client.get(f"/api/sessions/{created['id']}").json()["session"]
    assert session["questions"][0]["id"] == qid

    noted = client.post(f"/api/questions/{qid}/note", json={"note": "revisit"})
    assert noted.json()["question"]["note"] == "revisit"

    unpinned = client.post(f"/api/questions/{qid}/pin")
    assert unpinned.json()["question"]["isPinned"] is False


def test_pin_and_note_unknown_question(client) -> None:
    assert client.post("/api/questions/missing/pin").status_code == 404
    assert client.post("/api/questions/missing/note", json={"note": "x"}).status_code == 404


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_session_queries_run_off_the_event_loop(client, question_service, monkeypatch) -> None:
    original = question_service.list_sessions
    loop_running = []

    def list_sessions():
        try:
            asyncio.get_running_loop()
            loop_running.append(True)
        except RuntimeError:
            loop_running.append(False)
        return original()

    monkeypatch.setattr(question_service, "list_sessions", list_sessions)

    assert client.get("/api/sessions").status_code == 200
    assert loop_running == [False]
