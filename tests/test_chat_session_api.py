"""
Chat session, medical report, user stats and doctor suggestion endpoint tests.
"""

from fakes import AUTH_HEADERS, OTHER_AUTH_HEADERS

DOCTOR = {"name": "Dr. Ibrahim Musa", "specialty": "Cardiologist", "voiceId": "idera"}


def open_session(client, notes="Chest pain when walking", headers=AUTH_HEADERS):
    return client.post(
        "/api/chat-session",
        json={"notes": notes, "selectedDoctor": DOCTOR, "language": "hausa"},
        headers=headers,
    )


def test_create_session(client, session_repo):
    response = open_session(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    session = session_repo.sessions[body["sessionId"]]
    assert session.note == "Chest pain when walking"
    assert session.language == "hausa"
    assert session.conversation == []


def test_create_session_requires_notes_and_doctor(client):
    no_notes = client.post("/api/chat-session", json={"selectedDoctor": DOCTOR}, headers=AUTH_HEADERS)
    no_doctor = client.post("/api/chat-session", json={"notes": "Cough"}, headers=AUTH_HEADERS)

    assert no_notes.status_code == 400
    assert no_doctor.status_code == 400
    assert no_doctor.json()["message"] == "Notes and doctor required"


def test_create_session_rejects_oversized_notes(client):
    response = open_session(client, notes="x" * 5001)

    assert response.status_code == 400


def test_first_voice_turn_on_created_session_is_greeting(client):
    session_id = open_session(client).json()["sessionId"]

    response = client.post(
        "/api/voice-chat",
        json={"sessionId": session_id, "userMessage": "Hello", "doctorProfile": DOCTOR},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["data"]["isNewConsultation"] is True
    assert response.json()["data"]["language"] == "hausa"


def test_get_one_and_all_sessions(client):
    first = open_session(client).json()["sessionId"]
    open_session(client, headers=OTHER_AUTH_HEADERS)

    one = client.get("/api/chat-session", params={"sessionId": first}, headers=AUTH_HEADERS)
    everything = client.get("/api/chat-session", params={"sessionId": "all"}, headers=AUTH_HEADERS)

    assert one.json()["data"]["note"] == "Chest pain when walking"
    assert [s["sessionId"] for s in everything.json()["data"]] == [first]


def test_get_requires_session_id(client):
    assert client.get("/api/chat-session", headers=AUTH_HEADERS).status_code == 400


def test_delete_session(client, session_repo):
    session_id = open_session(client).json()["sessionId"]

    deleted = client.delete("/api/chat-session", params={"sessionId": session_id}, headers=AUTH_HEADERS)
    again = client.delete("/api/chat-session", params={"sessionId": session_id}, headers=AUTH_HEADERS)

    assert deleted.status_code == 200
    assert again.status_code == 404
    assert session_repo.sessions == {}


def test_delete_is_scoped_to_owner(client, session_repo):
    session_id = open_session(client).json()["sessionId"]

    response = client.delete("/api/chat-session", params={"sessionId": session_id}, headers=OTHER_AUTH_HEADERS)

    assert response.status_code == 404
    assert session_id in session_repo.sessions


def test_delete_requires_session_id(client):
    assert client.delete("/api/chat-session", headers=AUTH_HEADERS).status_code == 400


def report_body(session_id):
    return {
        "sessionId": session_id,
        "sessionParams": {"selectedDoctor": DOCTOR, "userName": "Musa"},
        "messages": [
            {"role": "assistant", "content": "Sannu, me ke damun ka?"},
            {
                "role": "user",
                "content": "Kirji na yana ciwo",
                "natlasData": {"keywords": ["chest pain"], "severity": "severe"},
            },
        ],
    }


def test_medical_report_closes_session(client, session_repo, completion_service):
    session_id = open_session(client).json()["sessionId"]

    response = client.post("/api/medical-report", json=report_body(session_id), headers=AUTH_HEADERS)

    assert response.status_code == 200
    report = response.json()["data"]
    assert report["sessionId"] == session_id
    assert report["agent"] == "Dr. Ibrahim Musa, Specialty: Cardiologist"
    assert report["user"] == "Musa"
    assert report["severity"] == "severe"
    assert report["symptoms"] == ["headache", "fatigue"]
    assert session_repo.sessions[session_id].is_closed
    assert "USER: Kirji na yana ciwo" in completion_service.json_calls[0]["user_prompt"]


def test_medical_report_twice_is_conflict(client):
    session_id = open_session(client).json()["sessionId"]
    client.post("/api/medical-report", json=report_body(session_id), headers=AUTH_HEADERS)

    response = client.post("/api/medical-report", json=report_body(session_id), headers=AUTH_HEADERS)

    assert response.status_code == 409
    assert response.json()["error"] == "SESSION_CLOSED"


def test_turn_after_report_is_conflict(client):
    session_id = open_session(client).json()["sessionId"]
    client.post("/api/medical-report", json=report_body(session_id), headers=AUTH_HEADERS)

    response = client.post(
        "/api/voice-chat",
        json={"sessionId": session_id, "userMessage": "One more thing", "doctorProfile": DOCTOR},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 409


def test_medical_report_requires_messages(client):
    session_id = open_session(client).json()["sessionId"]

    response = client.post(
        "/api/medical-report", json={"sessionId": session_id, "messages": []}, headers=AUTH_HEADERS
    )

    assert response.status_code == 400


def test_medical_report_invalid_structure(client, completion_service):
    completion_service.report = '{"summary": "Only a summary"}'
    session_id = open_session(client).json()["sessionId"]

    response = client.post("/api/medical-report", json=report_body(session_id), headers=AUTH_HEADERS)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "INVALID_REPORT"
    assert "mainComplaint" in body["details"]["invalid_fields"]


def test_medical_report_generation_failure_is_502(client, completion_service):
    completion_service.report = "not json"
    session_id = open_session(client).json()["sessionId"]

    response = client.post("/api/medical-report", json=report_body(session_id), headers=AUTH_HEADERS)

    assert response.status_code == 502
    assert response.json()["error"] == "REPORT_GENERATION_FAILED"


def test_user_stats(client):
    assert client.get("/api/user-stats", headers=AUTH_HEADERS).json()["data"] == {
        "totalConsultations": 0,
        "lastConsultation": None,
        "patientHistoryCount": 0,
    }

    open_session(client, notes="Older visit")
    latest = open_session(client, notes="Newest visit").json()["sessionId"]

    stats = client.get("/api/user-stats", headers=AUTH_HEADERS).json()["data"]

    assert stats["totalConsultations"] == 2
    assert stats["patientHistoryCount"] == 2
    assert stats["lastConsultation"]["sessionId"] == latest
    assert stats["lastConsultation"]["selectedDoctor"] == {"name": "Dr. Ibrahim Musa", "specialty": "Cardiologist"}


def test_suggested_doctors(client, completion_service):
    completion_service.reply = '["Dr. Ibrahim Musa", "Dr. Adaeze Okafor"]'

    response = client.post(
        "/api/suggested-doctors",
        json={"notes": "Chest pain and high blood pressure", "language": "english"},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [d["name"] for d in data["doctors"]] == ["Dr. Adaeze Okafor", "Dr. Ibrahim Musa"]
    assert data["doctors"][0]["voiceId"] == "idera"
    assert data["fallbackUsed"] is False
    assert data["natlasEnhancement"]["detectedSymptoms"] == ["headache"]


def test_suggested_doctors_requires_notes(client):
    response = client.post("/api/suggested-doctors", json={"notes": ""}, headers=AUTH_HEADERS)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid notes"
