import pytest

from patient_api.modules.consultation.domain.catalog import CONSULTATION_MODULES, SUMMARY_ROUTE
from patient_api.modules.consultation.domain.services.greene_scale import (
    GREENE_SCALE_ITEMS,
    calculate_greene_scale,
    score_answer,
)
from patient_api.modules.consultation.domain.services.progress_service import derive_progress

HOT_FLUSHES_SEVERE = "Severe hot flushes that are having a serious impact on my life"


@pytest.mark.parametrize("index", range(len(CONSULTATION_MODULES)))
def test_every_module_route_maps_to_its_position(index):
    module = CONSULTATION_MODULES[index]

    progress = derive_progress(module.route)

    assert progress is not None
    assert progress.module_id == module.id
    assert progress.step == index + 1
    assert progress.total_steps == len(CONSULTATION_MODULES)
    assert progress.percentage == round((index + 1) / len(CONSULTATION_MODULES) * 100, 2)


@pytest.mark.parametrize("path", [None, "", "/", "/dashboard", "/consultation", "/consultation/module-7", "/consultation/summary"])
def test_paths_outside_the_modules_have_no_progress(path):
    assert derive_progress(path) is None


def test_progress_neighbours_and_trailing_slash():
    first = derive_progress("/consultation/module-1")
    last = derive_progress("/consultation/module-6/")

    assert first.previous_route is None
    assert first.next_route == "/consultation/module-2a"
    assert last.step == len(CONSULTATION_MODULES)
    assert last.percentage == 100.0
    assert last.next_route == SUMMARY_ROUTE


def test_greene_scale_scores_options_by_position():
    assert score_answer("hot_flushes", HOT_FLUSHES_SEVERE) == 3
    assert score_answer("hot_flushes", "No hot flushes at all") == 0
    assert score_answer("hot_flushes", None) == 0


def test_greene_scale_falls_back_to_severity_keywords():
    assert score_answer("mood_fluctuations", "Severe mood fluctuations compared to normal") == 3
    assert score_answer("backaches", "Some occasional backache") == 1
    assert score_answer("backaches", "Regular backache") == 2
    assert score_answer("backaches", "Nothing unusual") == 0


def test_greene_scale_totals():
    result = calculate_greene_scale({"hot_flushes": HOT_FLUSHES_SEVERE, "headaches": "mild"})

    assert result.total_score == 4
    assert result.max_score == 3 * len(GREENE_SCALE_ITEMS)
    assert [item.question_id for item in result.items] == [question_id for question_id, _ in GREENE_SCALE_ITEMS]


def test_module_list_is_public(client):
    response = client.get("/api/v1/consultation/modules")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == len(CONSULTATION_MODULES)
    assert body["modules"][0]["id"] == "module_1"
    assert body["modules"][-1]["informational"] is True


def test_progress_endpoint(client):
    response = client.get("/api/v1/consultation/progress", params={"path": "/consultation/module-2a"})

    assert response.status_code == 200
    body = response.json()
    assert body["visible"] is True
    assert body["progress"]["step"] == 2
    assert body["progress"]["previous_route"] == "/consultation/module-1"

    hidden = client.get("/api/v1/consultation/progress", params={"path": "/payment"}).json()
    assert hidden["visible"] is False
    assert hidden["progress"] is None


def test_module_content_requires_authentication(client):
    response = client.get("/api/v1/consultation/modules/module_1")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"


def test_module_content_requires_subscription(client, auth_headers):
    response = client.get("/api/v1/consultation/modules/module_1", headers=auth_headers("user-unpaid"))

    assert response.status_code == 402
    error = response.json()["error"]
    assert error["code"] == "SUBSCRIPTION_ERROR"
    assert error["details"]["feature"] == "consultation"


def test_save_and_read_back_module_responses(client, subscriber_headers):
    response = client.put(
        "/api/v1/consultation/modules/module_2a/responses",
        headers=subscriber_headers,
        json={"responses": {"chronic_disease": "  Asthma  ", "supplements": "   ", "current_medications": None}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["responses"] == {"chronic_disease": "Asthma"}
    assert body["next_route"] == "/consultation/module-2b"
    assert body["completed_at"] is not None

    detail = client.get("/api/v1/consultation/modules/module_2a", headers=subscriber_headers).json()
    assert detail["responses"] == {"chronic_disease": "Asthma"}
    assert detail["completed"] is True
    assert detail["progress"]["step"] == 2


def test_saving_replaces_the_previous_answer_set(client, subscriber_headers):
    url = "/api/v1/consultation/modules/module_2a/responses"
    client.put(url, headers=subscriber_headers, json={"responses": {"chronic_disease": "Asthma"}})
    client.put(url, headers=subscriber_headers, json={"responses": {"current_medications": "None"}})

    all_responses = client.get("/api/v1/consultation/responses", headers=subscriber_headers).json()

    assert all_responses["responses"] == {"module_2a": {"current_medications": "None"}}


def test_responses_are_private_to_each_user(client, subscriber_headers, auth_headers):
    client.put(
        "/api/v1/consultation/modules/module_3/responses",
        headers=subscriber_headers,
        json={"responses": {"investigation_questions": "Should I have blood tests?"}},
    )
    other = auth_headers("user-other")
    client.post("/api/v1/payments/create-payment", headers=other, json={"amount": 0})

    response = client.get("/api/v1/consultation/responses", headers=other)

    assert response.json()["responses"] == {}


def test_unanswered_required_questions_are_reported(client, subscriber_headers):
    response = client.put(
        "/api/v1/consultation/modules/module_1/responses",
        headers=subscriber_headers,
        json={"responses": {"hot_flushes": HOT_FLUSHES_SEVERE}},
    )

    assert response.status_code == 200
    unanswered = response.json()["unanswered_required"]
    assert "hot_flushes" not in unanswered
    assert "headaches" in unanswered


@pytest.mark.parametrize(
    "responses",
    [
        {"hot_flushes": "Sometimes"},
        {"not_a_question": "value"},
        {"top_three_symptoms": "x" * 501},
    ],
)
def test_invalid_answers_are_rejected(client, subscriber_headers, responses):
    response = client.put(
        "/api/v1/consultation/modules/module_1/responses",
        headers=subscriber_headers,
        json={"responses": responses},
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    stored = client.get("/api/v1/consultation/modules/module_1", headers=subscriber_headers).json()
    assert stored["responses"] == {}


def test_unknown_module_is_not_found(client, subscriber_headers):
    response = client.get("/api/v1/consultation/modules/module_9", headers=subscriber_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_summary_includes_greene_scale(client, subscriber_headers):
    client.put(
        "/api/v1/consultation/modules/module_1/responses",
        headers=subscriber_headers,
        json={"responses": {"hot_flushes": HOT_FLUSHES_SEVERE}},
    )

    response = client.get("/api/v1/consultation/summary", headers=subscriber_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["greene_scale"]["total_score"] == 3
    assert body["completed_modules"] == 1
    assert body["total_modules"] == len(CONSULTATION_MODULES)
