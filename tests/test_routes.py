from pathlib import Path

import anyio
import pytest
from fastapi.testclient import TestClient

from assessment_api.app import app
from assessment_api.config import COURSES_PATH, LESSONS_PATH, PURCHASES_PATH
from assessment_api.dependencies import (
    get_course_catalog,
    get_purchase_provider,
    get_sessions_adapter,
    get_state_adapter,
)
from assessment_api.services.providers import StoreCourseCatalog, StorePurchaseProvider
from assessment_api.storage import (
    AssessmentsStateAdapter,
    JsonFileKeyValueStore,
    MemoryDocumentStore,
    SessionsAdapter,
)
from factories import COURSE_ID, STUDENT_ID, TEACHER_ID


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore(
        {
            COURSES_PATH: [{"id": COURSE_ID, "title": "Math"}],
            LESSONS_PATH: [
                {"id": "l2", "courseId": COURSE_ID, "title": "Decimals", "order": 2},
                {"id": "l1", "courseId": COURSE_ID, "title": "Fractions", "order": 1},
                {"id": "other", "courseId": "course-2", "order": 1},
            ],
            PURCHASES_PATH: [],
        }
    )


@pytest.fixture
def client(store: MemoryDocumentStore, tmp_path: Path):
    legacy = JsonFileKeyValueStore(tmp_path / "legacy")
    state = AssessmentsStateAdapter(store, legacy)
    sessions = SessionsAdapter(store, legacy)
    app.dependency_overrides[get_state_adapter] = lambda: state
    app.dependency_overrides[get_sessions_adapter] = lambda: sessions
    app.dependency_overrides[get_course_catalog] = lambda: StoreCourseCatalog(store)
    app.dependency_overrides[get_purchase_provider] = lambda: StorePurchaseProvider(store)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _template_payload(**fields) -> dict:
    payload = {
        "title": "Fractions check",
        "durationMinutes": 15,
        "assessmentKind": "credit",
        "createdByTeacherId": TEACHER_ID,
        "status": "draft",
        "questions": [
            {
                "id": "q1",
                "prompt": {"text": "1/2 as a decimal?"},
                "topicId": "fractions",
                "answerSpec": {"expected": "0.5"},
                "feedback": {
                    "explanation": "Divide 1 by 2.",
                    "recommendations": [{"text": "Repeat lesson 1"}],
                },
            },
            {
                "id": "q2",
                "prompt": {"text": "Name of 1/4?"},
                "answerSpec": {"type": "text", "expected": ["quarter", "one quarter"]},
                "feedback": {"explanation": "A quarter."},
            },
        ],
    }
    payload.update(fields)
    return payload


def _create_published_template(client: TestClient) -> dict:
    response = client.post("/api/templates", json=_template_payload())
    assert response.status_code == 200
    template = response.json()
    response = client.post(
        f"/api/templates/{template['id']}/publish", json={"teacherId": TEACHER_ID}
    )
    assert response.status_code == 200
    return response.json()


def test_health(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_template_lifecycle(client: TestClient) -> None:
    template = _create_published_template(client)
    assert template["status"] == "published"
    assert template["questions"][0]["answerSpec"]["type"] == "number"

    listed = client.get("/api/templates", params={"teacherId": TEACHER_ID}).json()
    assert [item["id"] for item in listed] == [template["id"]]

    response = client.get(f"/api/templates/{template['id']}")
    assert response.json()["title"] == "Fractions check"

    response = client.post(
        f"/api/templates/{template['id']}/duplicate", json={"teacherId": "teacher-2"}
    )
    assert response.json()["title"] == "Fractions check (copy)"

    response = client.delete(
        f"/api/templates/{template['id']}", params={"teacherId": TEACHER_ID}
    )
    assert response.status_code == 200
    assert response.json()["deletedAt"]
    assert client.get("/api/templates", params={"teacherId": TEACHER_ID}).json() == []


def test_template_errors(client: TestClient) -> None:
    response = client.post("/api/templates", json=_template_payload(title="", status="published"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Enter the test title."

    assert client.get("/api/templates/missing").status_code == 404

    template = client.post("/api/templates", json=_template_payload()).json()
    response = client.post(
        f"/api/templates/{template['id']}/publish", json={"teacherId": "intruder"}
    )
    assert response.status_code == 403


def test_course_content_flow(client: TestClient) -> None:
    template = _create_published_template(client)

    content = client.get(f"/api/courses/{COURSE_ID}/content").json()
    assert [item["lessonId"] for item in content] == ["l1", "l2"]

    response = client.post(
        f"/api/courses/{COURSE_ID}/content/tests", json={"templateId": template["id"]}
    )
    assert response.status_code == 200
    test_item = response.json()[-1]
    assert test_item["type"] == "test"
    assert test_item["order"] == 3

    response = client.post(
        f"/api/courses/{COURSE_ID}/content/move", json={"fromIndex": 2, "toIndex": 1}
    )
    assert [item["id"] for item in response.json()] == [
        "lesson-item-l1",
        test_item["id"],
        "lesson-item-l2",
    ]

    response = client.post(
        f"/api/courses/{COURSE_ID}/content/move", json={"fromIndex": 0, "toIndex": 9}
    )
    assert response.status_code == 400

    blocks = client.get(f"/api/courses/{COURSE_ID}/blocks").json()
    assert len(blocks) == 1


def test_unknown_course_content(client: TestClient) -> None:
    assert client.get("/api/courses/nope/content").status_code == 404


def test_attempt_and_progress_flow(client: TestClient) -> None:
    template = _create_published_template(client)
    items = client.post(
        f"/api/courses/{COURSE_ID}/content/tests", json={"templateId": template["id"]}
    ).json()
    test_item_id = items[-1]["id"]

    response = client.put(
        f"/api/courses/{COURSE_ID}/sessions/{test_item_id}",
        json={"studentId": STUDENT_ID, "templateId": template["id"], "answers": {"q1": "0,5"}},
    )
    assert response.status_code == 200
    session = client.get(
        f"/api/courses/{COURSE_ID}/sessions/{test_item_id}", params={"studentId": STUDENT_ID}
    ).json()
    assert session["answers"] == {"q1": "0,5"}

    response = client.post(
        f"/api/courses/{COURSE_ID}/attempts",
        json={
            "studentId": STUDENT_ID,
            "courseId": COURSE_ID,
            "testItemId": test_item_id,
            "answers": {"q1": "0,5", "q2": "Half"},
            "timeSpentSeconds": 42,
        },
    )
    assert response.status_code == 200
    result = response.json()
    assert result["attempt"]["score"] == {"correct": 1, "total": 2, "percent": 50}
    assert [item["reason"] for item in result["checked"]] == ["correct", "incorrect"]

    session = client.get(
        f"/api/courses/{COURSE_ID}/sessions/{test_item_id}", params={"studentId": STUDENT_ID}
    ).json()
    assert session is None

    attempts = client.get(
        f"/api/courses/{COURSE_ID}/attempts", params={"studentId": STUDENT_ID}
    ).json()
    assert len(attempts) == 1
    latest = client.get(
        f"/api/courses/{COURSE_ID}/attempts/latest", params={"studentId": STUDENT_ID}
    ).json()
    assert list(latest) == [test_item_id]
    best = client.get(
        f"/api/courses/{COURSE_ID}/attempts/best", params={"studentId": STUDENT_ID}
    ).json()
    assert best[test_item_id]["score"]["percent"] == 50

    progress = client.get(
        f"/api/courses/{COURSE_ID}/progress", params={"studentId": STUDENT_ID}
    ).json()
    assert progress["course"] == {"totalTests": 1, "completedTests": 1, "averageLatestPercent": 50}
    assert progress["knowledge"]["averageBestPercent"] == 50


def test_submit_with_mismatched_course(client: TestClient) -> None:
    response = client.post(
        f"/api/courses/{COURSE_ID}/attempts",
        json={"studentId": STUDENT_ID, "courseId": "course-2", "testItemId": "t1"},
    )
    assert response.status_code == 400


def test_submit_unknown_item(client: TestClient) -> None:
    response = client.post(
        f"/api/courses/{COURSE_ID}/attempts",
        json={"studentId": STUDENT_ID, "courseId": COURSE_ID, "testItemId": "missing"},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Test is not part of this course."


def test_delete_template_used_by_purchased_course(
    client: TestClient, store: MemoryDocumentStore
) -> None:
    template = _create_published_template(client)
    client.post(f"/api/courses/{COURSE_ID}/content/tests", json={"templateId": template["id"]})
    anyio.run(
        store.put, PURCHASES_PATH, [{"id": "p1", "userId": STUDENT_ID, "courseId": COURSE_ID}]
    )

    response = client.delete(
        f"/api/templates/{template['id']}", params={"teacherId": TEACHER_ID}
    )
    assert response.status_code == 409

    response = client.post(
        f"/api/templates/{template['id']}/hide", json={"teacherId": TEACHER_ID}
    )
    assert response.status_code == 200


def test_delete_course_content(client: TestClient) -> None:
    client.get(f"/api/courses/{COURSE_ID}/content")
    response = client.delete(f"/api/courses/{COURSE_ID}/content")
    assert response.json() == {"status": "deleted", "courseId": COURSE_ID}


def test_clear_session_is_idempotent(client: TestClient) -> None:
    for _ in range(2):
        response = client.delete(
            f"/api/courses/{COURSE_ID}/sessions/t1", params={"studentId": STUDENT_ID}
        )
        assert response.status_code == 200
