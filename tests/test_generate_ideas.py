import pytest
from fastapi.testclient import TestClient

from vibes_served.ai import DummyAiClient, create_ai_client
from vibes_served.config import Settings
from vibes_served.main import INVALID_COUNT_ERROR, create_app

client = TestClient(create_app(Settings()))


def test_generate_three_ideas():
    r = client.get("/api/v1/generate-ideas", params={"count": 3})
    assert r.status_code == 200
    ideas = r.json()
    assert [i["id"] for i in ideas] == ["idea-1", "idea-2", "idea-3"]
    rest = [{k: v for k, v in i.items() if k != "id"} for i in ideas]
    assert rest[0] == rest[1] == rest[2]
    assert rest[0] == {
        "title": "Dummy Idea",
        "summary": "A placeholder idea for development and testing.",
        "objective": "Demonstrate the API contract for idea generation.",
        "tags": ["ideation", "dummy", "v0"],
    }


def test_generate_defaults_to_one():
    r = client.get("/api/v1/generate-ideas")
    assert r.status_code == 200
    assert len(r.json()) == 1
    assert r.json()[0]["id"] == "idea-1"


def test_generate_upper_bound():
    r = client.get("/api/v1/generate-ideas", params={"count": 12})
    assert r.status_code == 200
    assert len(r.json()) == 12


@pytest.mark.parametrize("count", ["13", "0", "-1", "abc", "2.5", ""])
def test_generate_rejects_invalid_count(count):
    r = client.get("/api/v1/generate-ideas", params={"count": count})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid 'count'. Must be an integer between 1 and 12."}
    assert r.json()["error"] == INVALID_COUNT_ERROR


def test_factory_falls_back_to_dummy():
    assert isinstance(create_ai_client("dummy"), DummyAiClient)
    assert isinstance(create_ai_client("DUMMY"), DummyAiClient)
    assert isinstance(create_ai_client("openai"), DummyAiClient)
    assert isinstance(create_ai_client(None), DummyAiClient)
