"""
AI-assisted skill matching.

Ranks potential collaborators for a member by asking the chat model to score
how well each provider's offered skills cover the member's needs. Whenever
the model is not configured, fails, returns something that is not a JSON
array of valid results, or returns an empty list, a deterministic
overlap-count score is used instead.
"""

import json
import logging
import re
from typing import List

from json_repair import repair_json
from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import TypeAdapter, ValidationError

from bartr.api.models import AiMatchResult
from bartr.database.config.config import settings

logger = logging.getLogger(__name__)

MAX_FALLBACK_RESULTS = 20

MATCH_PROMPT = PromptTemplate.from_template(
    """You are an expert skill-matching engine for a skill-exchange platform. Your goal is to find the best
potential collaborators for a user based on their needs and others' offerings.

Requester information:
{requester}

Potential providers:
{providers}

Task:
1. Analyze the requester's needed skills.
2. Evaluate each provider by how well their offered skills align with those needs. Skill match is primary,
   the bio may add context.
3. Assign a relevance_score from 1 to 10 to each provider (10 = near-perfect match, 1 = tangential overlap).
4. Rank providers by relevance_score, highest first.
5. Return only the top 10 providers with a relevance_score >= 3.

Respond only with a JSON array of objects shaped like
{{"userId": "string", "name": "string", "bio": "string", "skills_offered": ["string"], "relevance_score": number}}.
If there is no suitable match return []. No explanations before or after the JSON."""
)

_results_adapter = TypeAdapter(List[AiMatchResult])


def lc_text_from_content(content) -> str:
    """
    Normalize LangChain message content to plain text.

    - If str → return as-is.
    - If list of content parts → concatenates only 'text' parts.
    - Else → str(content).
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(p.get("text", "") for p in content if isinstance(p, dict) and p.get("type") == "text")
    return str(content)


def parse_llm_json(resp):
    """Parse a model response into JSON with optional repair.

    Steps:
        1) Extract text from LangChain message (handling code fences).
        2) Try `json.loads`.
        3) Fallback: `json_repair.repair_json` then `json.loads`.

    Raises:
        ValueError with first 500 chars of raw text if parsing still fails.
    """
    raw = lc_text_from_content(resp.content).strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*\n", "", raw)
        raw = re.sub(r"\n?```$", "", raw)

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        try:
            return json.loads(repair_json(raw))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise ValueError(f"Failed to parse LLM JSON: {e}\nRAW:\n{raw[:500]}") from e


def fallback_scores(needed_skills: List[str], providers: List[dict]) -> List[dict]:
    """
    Overlap-count ranking.

    Each provider scores ``min(10, max(1, 2 * matched))`` where ``matched`` is
    the number of its offered skills that appear (case-insensitively) among
    the needed skills. Scores of 1 (no overlap) are dropped; the rest are
    sorted descending and capped.
    """
    needed = {skill.strip().lower() for skill in needed_skills}
    results = []
    for provider in providers:
        offered = provider["skillsOffered"]
        matched = sum(1 for skill in offered if skill.strip().lower() in needed)
        score = min(10, max(1, matched * 2))
        if score > 1:
            results.append(
                {
                    "userId": provider["id"],
                    "name": provider["name"],
                    "bio": provider.get("bio") or "",
                    "skills_offered": list(offered),
                    "relevance_score": score,
                }
            )
    results.sort(key=lambda r: r["relevance_score"], reverse=True)
    return results[:MAX_FALLBACK_RESULTS]


class SkillMatcher:
    """
    Chat-model ranking with the overlap fallback.

    Args:
        model: A LangChain chat model. When omitted one is built from
            `settings.OPEN_AI_MODEL` / `settings.API_KEY`, or left unset if no
            key is configured.
    """

    def __init__(self, model=None):
        if model is None and settings.API_KEY:
            model = ChatOpenAI(model=settings.OPEN_AI_MODEL, api_key=settings.API_KEY, temperature=0.7)
        self.model = model

    def ask_model(self, user_id: str, needed_skills: List[str], providers: List[dict]) -> List[dict]:
        """Run the prompt and validate the answer. Raises on any failure."""
        requester = json.dumps({"userId": user_id, "skills_needed": needed_skills}, indent=2)
        provider_payload = json.dumps(
            [
                {
                    "userId": p["id"],
                    "name": p["name"],
                    "bio": p.get("bio") or "",
                    "skills_offered": p["skillsOffered"],
                }
                for p in providers
            ],
            indent=2,
        )
        response = self.model.invoke(MATCH_PROMPT.format(requester=requester, providers=provider_payload))
        parsed = parse_llm_json(response)
        if not isinstance(parsed, list):
            raise ValueError("Model response is not a JSON array")
        return [result.model_dump() for result in _results_adapter.validate_python(parsed)]

    def rank(self, user_id: str, needed_skills: List[str], providers: List[dict]) -> List[dict]:
        """
        Ranked providers for `needed_skills`.

        Returns an empty list when there is nothing to match.
        """
        if not needed_skills or not providers:
            return []

        matches = []
        if self.model is None:
            logger.warning("AI matching not configured; using overlap fallback")
        else:
            try:
                matches = self.ask_model(user_id, needed_skills, providers)
                logger.info("Model returned %d matches for user %s", len(matches), user_id)
            except (ValueError, ValidationError) as e:
                logger.warning("Unusable model response for user %s: %s", user_id, e)
            except Exception:
                logger.exception("AI match call failed for user %s", user_id)

        if not matches:
            return fallback_scores(needed_skills, providers)
        return matches
