# =============================================================================
# HTTP API
# =============================================================================

import json


class TestBankEndpoints:
    def test_list_questions(self, client):
        response = client.get("/api/questions")

        assert response.status_code == 200
        assert len(response.json()["questions"]) == 5

    def test_overview(self, client):
        body = client.get("/api/bank/overview").json()

        assert body["count"] == 5
        assert body["modules"] == ["M1", "M2"]

    def test_add_question(self, client):
        candidate = {
            "module": "M3",
            "topic": "Trees",
            "prompt": "Is a heap a complete binary tree?",
            "type": "true_false",
            "answer": True,
        }

        response = client.post("/api/questions", json={"question": candidate})

        assert response.status_code == 201
        assert response.json()["question"]["id"].startswith("m3-trees-")
        assert len(client.get("/api/questions").json()["questions"]) == 6

    def test_add_question_validation_errors(self, client):
        response = client.post("/api/questions", json={"question": {"type": "true_false"}})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Invalid question payload"
        assert "Missing field: module" in body["details"]

    def test_add_question_requires_object(self, client):
        response = client.post("/api/questions", json={"nothing": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "Body must contain a question object"

    def test_add_question_invalid_json(self, client):
        response = client.post(
            "/api/questions",
            content=b"{oops",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400


class TestQuizFlow:
    def test_start_returns_first_question(self, client):
        response = client.post("/api/quiz/start", json={"requested_count": 3})

        assert response.status_code == 200
        view = response.json()
        assert view["title"] == "Question 1 of 3"
        assert view["meta"] == "M1 • Sorting • Multiple choice • Difficulty: Easy"
        assert view["has_previous"] is False
        assert view["is_last"] is False
        assert view["progress"] == "0/3 questions answered"
        assert view["input"] is None

    def test_hidden_module(self, client):
        view = client.post("/api/quiz/start", json={"requested_count": 1, "hide_module_info": True}).json()

        assert view["meta"] == "Sorting • Multiple choice • Difficulty: Easy"

    def test_navigation_redisplays_answers(self, client, clock):
        client.post("/api/quiz/start", json={"requested_count": 3})

        view = client.post("/api/quiz/next", json={"input": "b"}).json()
        assert view["index"] == 1
        assert view["input"] is None

        view = client.post("/api/quiz/prev", json={"input": "false"}).json()
        assert view["index"] == 0
        assert view["input"] == "b"
        assert view["progress"] == "2/3 questions answered"

        view = client.post("/api/quiz/next", json={"input": "b"}).json()
        assert view["input"] == "false"

    def test_finish_summary_and_report(self, client, clock):
        client.post("/api/quiz/start", json={"requested_count": 3})
        clock.advance(2_000)
        client.post("/api/quiz/next", json={"input": "b"})
        client.post("/api/quiz/next", json={"input": "true"})
        clock.advance(500)

        summary = client.post("/api/quiz/finish", json={"input": " paris "}).json()

        assert summary["totals"] == {"count": 3, "correct_count": 3, "total_time_ms": 2_500}
        assert summary["meta"] == "3 questions · 3 correct · 2s"
        assert [row["result"] for row in summary["rows"]] == ["Correct"] * 3

        assert client.get("/api/quiz/summary").json() == summary

        report = client.get("/api/quiz/report")
        assert report.status_code == 200
        assert report.headers["content-type"] == "application/pdf"
        assert "quiz-summary-" in report.headers["content-disposition"]
        assert report.content.startswith(b"%PDF-1.4")

    def test_timer_tick_does_not_persist(self, client, clock):
        client.post("/api/quiz/start", json={"requested_count": 2})
        clock.advance(61_000)

        for _ in range(3):
            tick = client.get("/api/quiz/timer").json()
        assert tick == {"index": 0, "elapsed_ms": 61_000, "display": "01:01"}

        summary = client.post("/api/quiz/finish", json={}).json()
        assert summary["totals"]["total_time_ms"] == 61_000

    def test_reset(self, client):
        client.post("/api/quiz/start", json={"requested_count": 2})

        response = client.post("/api/quiz/reset")

        assert response.json() == {"phase": "building"}
        assert client.get("/api/quiz/current").status_code == 409


class TestQuizErrors:
    def test_no_matching_questions(self, client):
        response = client.post("/api/quiz/start", json={"requested_count": 2, "modules": ["M9"]})

        assert response.status_code == 409
        assert response.json()["detail"] == "no_matching_questions"

    def test_empty_bank(self, client, bank_file):
        bank_file.write_text(json.dumps({"questions": []}), encoding="utf-8")

        response = client.post("/api/quiz/start", json={"requested_count": 2})

        assert response.status_code == 409
        assert response.json()["detail"] == "empty_bank"

    def test_double_start(self, client):
        client.post("/api/quiz/start", json={"requested_count": 2})

        response = client.post("/api/quiz/start", json={"requested_count": 2})

        assert response.json()["detail"] == "session_in_progress"

    def test_navigation_without_session(self, client):
        response = client.post("/api/quiz/next", json={"input": "a"})

        assert response.status_code == 409
        assert response.json()["detail"] == "session_not_active"

    def test_report_before_finish(self, client):
        client.post("/api/quiz/start", json={"requested_count": 2})

        assert client.get("/api/quiz/report").status_code == 409
        assert client.get("/api/quiz/summary").status_code == 409

    def test_invalid_criteria(self, client):
        response = client.post("/api/quiz/start", json={"requested_count": 0})

        assert response.status_code == 422
