from __future__ import annotations

import json
import logging
import sys

from fastapi.testclient import TestClient


class _JsonCapture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[dict] = []

    def emit(self, record):
        from api.observability import JsonFormatter

        self.records.append(json.loads(JsonFormatter().format(record)))


class FakeClient:
    def __init__(self, payload: dict):
        self.payload = payload
        self.calls = 0

    def generate_structured(self, prompt, output_model):
        self.calls += 1
        return output_model.model_validate(self.payload)


def _reset_runtime_caches():
    from tripace.config import get_settings

    get_settings.cache_clear()


def _purge_api_modules() -> None:
    for name in [
        "api.main",
        "api.routes",
        "api.ratelimit",
    ]:
        sys.modules.pop(name, None)


def _build_client(monkeypatch, env_overrides: dict[str, str] | None = None, genai_client=None) -> TestClient:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173")
    for name in ("GENAI_API_KEY", "SPLIT_STRATEGY", "PACE_PLAN_STRATEGY", "RATE_LIMIT_ENABLED", "GENERATION_RATE_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    if env_overrides:
        for key, value in env_overrides.items():
            monkeypatch.setenv(key, value)

    _reset_runtime_caches()
    _purge_api_modules()

    from api.deps import get_genai_client
    from api.main import create_app

    app = create_app()
    if genai_client is not None:
        app.dependency_overrides[get_genai_client] = lambda: genai_client
    return TestClient(app)


GOAL_BODY = {
    "totalTime": {"h": 12, "m": 0, "s": 0},
    "distance": "full",
    "courseProfile": "rolling",
    "athleteBias": 50,
}

SPRINT_PLAN_BODY = {
    "distance": "sprint",
    "bikeTime": {"h": 0, "m": 40, "s": 0},
    "runTime": {"h": 0, "m": 25, "s": 0},
    "negativeSplit": False,
}


def test_health_echoes_or_generates_request_id_header(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-test-123"})
        assert resp.status_code == 200, resp.text
        assert resp.headers["X-Request-ID"] == "req-test-123"
        body = resp.json()
        assert body["status"] == "ok"
        assert body["splitStrategy"] == "table"
        assert body["genaiConfigured"] is False

        generated = client.get("/api/v1/health")
        assert generated.headers.get("X-Request-ID")


def test_distances_lists_every_class(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.get("/api/v1/distances")
        assert resp.status_code == 200
        rows = {row["key"]: row for row in resp.json()}
        assert set(rows) == {"full", "half", "olympic", "sprint"}
        assert rows["full"]["bikeKm"] == 180


def test_distribute_goal_time_full_twelve_hours(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/goal-time/distribute", json=GOAL_BODY)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["strategy"] == "table"
        assert body["totalSeconds"] == 43200
        assert body["t1Time"] == {"h": 0, "m": 10, "s": 48}
        assert body["t2Time"] == {"h": 0, "m": 7, "s": 12}
        assert body["swimTime"] == {"h": 1, "m": 17, "s": 13}
        assert body["runTime"] == {"h": 4, "m": 12, "s": 43}


def test_distribute_rejects_bad_input(monkeypatch):
    with _build_client(monkeypatch) as client:
        assert client.post("/api/v1/goal-time/distribute", json={**GOAL_BODY, "athleteBias": 150}).status_code == 422
        assert client.post("/api/v1/goal-time/distribute", json={**GOAL_BODY, "distance": "ultra"}).status_code == 422
        negative = {**GOAL_BODY, "totalTime": {"h": -1, "m": 0, "s": 0}}
        assert client.post("/api/v1/goal-time/distribute", json=negative).status_code == 422


def test_distribute_zero_goal_is_all_zero(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/goal-time/distribute", json={**GOAL_BODY, "totalTime": {"h": 0, "m": 0, "s": 0}})
        assert resp.status_code == 200
        assert resp.json()["bikeTime"] == {"h": 0, "m": 0, "s": 0}


def test_pace_plan_sprint_even_bike(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/pace-plan", json=SPRINT_PLAN_BODY)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert [s["targetTime"] for s in body["bikePlan"]] == ["00:10:00"] * 4
        assert body["bikePlan"][0]["segment"] == "0-5 km"
        assert body["bikePlan"][0]["targetPace"] == "30.0 km/h"
        assert len(body["runPlan"]) == 5
        assert body["runPlan"][-1]["tip"]


def test_pace_plan_csv_attachment(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/pace-plan/csv", json=SPRINT_PLAN_BODY)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="pace-plan-sprint.csv"' in resp.headers["content-disposition"]
        lines = resp.text.splitlines()
        assert lines[0] == '"Discipline","Segment","Target Time","Target Pace/Speed","Tip"'
        assert len(lines) == 10


def test_race_summary(monkeypatch):
    payload = {
        "distance": "full",
        "swim": {"h": 1, "m": 3, "s": 20},
        "t1": {"h": 0, "m": 5, "s": 0},
        "bike": {"h": 5, "m": 0, "s": 0},
        "t2": {"h": 0, "m": 3, "s": 0},
        "run": {"h": 3, "m": 30, "s": 0},
    }
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/race/summary", json=payload)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["totalDisplay"] == "09:41:20"
        assert body["paces"]["swimPace"] == "01:40 min/100m"
        assert body["paces"]["swimSecPer100m"] == 100
        assert body["paces"]["bikeSpeed"] == "36.0 km/h"
        assert body["totalPosition"]["label"] == "9.5-10h"
        assert body["swimPosition"]["label"] == "60-65"


def test_race_summary_empty_legs_have_no_position(monkeypatch):
    with _build_client(monkeypatch) as client:
        zero = {"h": 0, "m": 0, "s": 0}
        body = client.post("/api/v1/race/summary", json={"distance": "sprint", "t1": zero, "t2": zero}).json()
        assert body["totalPosition"] is None
        assert body["paces"]["runPace"] == "n/a"


def test_race_summary_defaults_missing_transitions(monkeypatch):
    payload = {
        "distance": "full",
        "swim": {"h": 1, "m": 3, "s": 20},
        "bike": {"h": 5, "m": 0, "s": 0},
        "run": {"h": 3, "m": 30, "s": 0},
    }
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/race/summary", json=payload)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["totalDisplay"] == "09:41:20"
        assert body["totalTime"] == {"h": 9, "m": 41, "s": 20}


def test_discipline_times_from_paces(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post(
            "/api/v1/race/discipline-times",
            json={"distance": "full", "swimSecPer100m": 100, "bikeKmh": 36, "runSecPerKm": 0},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["swimTime"] == {"h": 1, "m": 3, "s": 20}
        assert body["bikeTime"] == {"h": 5, "m": 0, "s": 0}
        assert body["runTime"] == {"h": 0, "m": 0, "s": 0}


def test_pro_comparison(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post(
            "/api/v1/race/pro-comparison",
            json={"distance": "full", "bike": {"h": 12, "m": 0, "s": 0}, "pro": "blummenfelt"},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["proName"] == "Kristian Blummenfelt"
        assert body["userTime"] == "12:08:00"
        assert "slower" in body["message"]


def test_nutrition(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/nutrition", json={"bikeTime": {"h": 5}, "runTime": {"h": 3, "m": 30}})
        assert resp.status_code == 200, resp.text
        assert resp.json()["totalGels"] == 31
        bad = client.post("/api/v1/nutrition", json={"bikeTime": {"h": 5}, "runTime": {"h": 3}, "carbsPerHour": 200})
        assert bad.status_code == 422


def test_insights_without_service_is_bad_gateway(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/insights", json={"distance": "half", "run": {"h": 2}})
        assert resp.status_code == 502
        assert resp.json()["detail"]["code"] == "GENERATION_FAILED"


def test_insights_with_service(monkeypatch):
    fake = FakeClient({"insight": "Your run is the biggest opportunity."})
    with _build_client(monkeypatch, genai_client=fake) as client:
        resp = client.post("/api/v1/insights", json={"distance": "half", "run": {"h": 2}})
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"insight": "Your run is the biggest opportunity."}


def test_insights_without_times_is_invalid_input(monkeypatch):
    fake = FakeClient({"insight": "x"})
    with _build_client(monkeypatch, genai_client=fake) as client:
        resp = client.post("/api/v1/insights", json={"distance": "half"})
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_INPUT"
        assert fake.calls == 0


def test_generative_split_strategy_unconfigured(monkeypatch):
    with _build_client(monkeypatch, env_overrides={"SPLIT_STRATEGY": "generative"}) as client:
        resp = client.post("/api/v1/goal-time/distribute", json=GOAL_BODY)
        assert resp.status_code == 502
        assert "not configured" in resp.json()["detail"]["message"]


def test_generative_split_strategy_with_service(monkeypatch):
    fake = FakeClient({
        "swimTime": {"h": 1, "m": 10, "s": 0},
        "bikeTime": {"h": 6, "m": 0, "s": 0},
        "runTime": {"h": 4, "m": 0, "s": 0},
    })
    env = {"SPLIT_STRATEGY": "generative"}
    with _build_client(monkeypatch, env_overrides=env, genai_client=fake) as client:
        resp = client.post("/api/v1/goal-time/distribute", json=GOAL_BODY)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["strategy"] == "generative"
        assert body["totalSeconds"] == 43200
        assert fake.calls == 1


def test_generative_pace_plan_bad_output_is_bad_gateway(monkeypatch):
    fake = FakeClient({"bikePlan": [], "runPlan": []})
    env = {"PACE_PLAN_STRATEGY": "generative"}
    with _build_client(monkeypatch, env_overrides=env, genai_client=fake) as client:
        resp = client.post("/api/v1/pace-plan", json=SPRINT_PLAN_BODY)
        assert resp.status_code == 502
        assert resp.json()["detail"]["code"] == "GENERATION_FAILED"


def test_generation_rate_limit_returns_429_when_enabled(monkeypatch):
    env = {
        "APP_ENV": "dev",
        "RATE_LIMIT_ENABLED": "true",
        "GENERATION_RATE_LIMIT": "2/minute",
    }
    with _build_client(monkeypatch, env_overrides=env) as client:
        for _ in range(2):
            resp = client.post("/api/v1/pace-plan", json=SPRINT_PLAN_BODY)
            assert resp.status_code == 200, resp.text
        limited = client.post("/api/v1/pace-plan", json=SPRINT_PLAN_BODY)
        assert limited.status_code == 429, limited.text
        assert limited.json()["detail"]["code"] == "RATE_LIMITED"


def test_request_log_line_carries_distance_and_strategy(monkeypatch):
    capture = _JsonCapture()
    main_logger = logging.getLogger("api.main")
    previous_level = main_logger.level
    main_logger.addHandler(capture)
    main_logger.setLevel(logging.INFO)
    try:
        with _build_client(monkeypatch) as client:
            resp = client.post("/api/v1/pace-plan", json=SPRINT_PLAN_BODY)
            assert resp.status_code == 200, resp.text
    finally:
        main_logger.removeHandler(capture)
        main_logger.setLevel(previous_level)

    request_lines = [r for r in capture.records if r["message"] == "http_request"]
    assert request_lines
    assert request_lines[-1]["path"] == "/api/v1/pace-plan"
    assert request_lines[-1]["distance"] == "sprint"
    assert request_lines[-1]["strategy"] == "table"
