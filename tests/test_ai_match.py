import json
from types import SimpleNamespace

import pytest
from conftest import auth, create_user

from bartr.api.ai_match import SkillMatcher, fallback_scores, parse_llm_json


class FakeModel:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.prompts = []

    def invoke(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return SimpleNamespace(content=self.content)


def provider(user_id, name, offered):
    return {"id": user_id, "name": name, "bio": None, "skillsOffered": offered}


PROVIDERS = [
    provider("u-1", "One", ["Python", "SQL", "Docker"]),
    provider("u-2", "Two", ["python"]),
    provider("u-3", "Three", ["Knitting"]),
]


def test_fallback_scores_overlap_case_insensitively():
    results = fallback_scores(["Python", "SQL"], PROVIDERS)
    assert [(r["userId"], r["relevance_score"]) for r in results] == [("u-1", 4), ("u-2", 2)]
    assert results[0]["bio"] == ""
    assert results[0]["skills_offered"] == ["Python", "SQL", "Docker"]


def test_fallback_scores_are_capped():
    many = [f"skill-{i}" for i in range(8)]
    results = fallback_scores(many, [provider("u-9", "Nine", many)])
    assert results[0]["relevance_score"] == 10


def test_fallback_limits_result_count():
    providers = [provider(f"u-{i}", f"P{i}", ["Python"]) for i in range(30)]
    assert len(fallback_scores(["Python"], providers)) == 20


def test_parse_llm_json_handles_fences_and_repairs():
    fenced = SimpleNamespace(content='```json\n[{"userId": "u-1"}]\n```')
    assert parse_llm_json(fenced) == [{"userId": "u-1"}]

    trailing_comma = SimpleNamespace(content='[{"userId": "u-1",}]')
    assert parse_llm_json(trailing_comma) == [{"userId": "u-1"}]


def test_model_answer_is_used_when_valid():
    answer = [
        {"userId": "u-2", "name": "Two", "bio": "", "skills_offered": ["python"], "relevance_score": 9},
    ]
    model = FakeModel(content=json.dumps(answer))
    results = SkillMatcher(model=model).rank("me", ["Python"], PROVIDERS)
    assert results == answer
    assert '"skills_needed"' in model.prompts[0]


@pytest.mark.parametrize(
    "model",
    [
        FakeModel(error=RuntimeError("quota exceeded")),
        FakeModel(content="I could not find anyone, sorry."),
        FakeModel(content="[]"),
        FakeModel(content='{"userId": "u-1"}'),
        FakeModel(content='[{"userId": "u-1", "name": "One", "relevance_score": 42}]'),
    ],
)
def test_unusable_model_output_falls_back(model):
    results = SkillMatcher(model=model).rank("me", ["Python", "SQL"], PROVIDERS)
    assert [r["userId"] for r in results] == ["u-1", "u-2"]


def test_nothing_to_match_returns_empty_list():
    matcher = SkillMatcher(model=FakeModel(content="[]"))
    assert matcher.rank("me", [], PROVIDERS) == []
    assert matcher.rank("me", ["Python"], []) == []


def test_endpoint_uses_fallback_without_api_key(client):
    alice = create_user("Alice", needed=["Guitar"])
    bob = create_user("Bob", offered=["guitar", "Singing"], bio="Musician")
    create_user("Carol")

    response = client.post("/api/aiMatch", headers=auth(alice))
    assert response.status_code == 200
    assert response.json() == [
        {
            "userId": str(bob),
            "name": "Bob",
            "bio": "Musician",
            "skills_offered": ["guitar", "Singing"],
            "relevance_score": 2,
        }
    ]
