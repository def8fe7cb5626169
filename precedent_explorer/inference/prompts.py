"""Prompt builders for the four precedent stages."""

import json
from typing import Any, Dict, List, Sequence

from ..config import SUPPORTED_LANGUAGES
from ..pipeline.models import ConflictReport, PrecedentMatch, ScenarioProfile

SYSTEM_PROMPT = """You are a research assistant specialised in Islamic jurisprudence (fiqh).
You compare new scenarios against classical Nawazil and contemporary fatwa resolutions,
identify the operative cause ('Illah) behind each ruling, and describe where scholars diverge.

Answer only with the JSON structure requested. Do not add commentary or markdown."""


def _language_clause(language: str) -> str:
    name = SUPPORTED_LANGUAGES.get(language, SUPPORTED_LANGUAGES["en"])
    return (
        f"Write every descriptive text value in {name}. "
        "Keep JSON keys and enumerated values (era, significance, consensusLevel) in English."
    )


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def _messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def build_profile_messages(query: str, language: str) -> List[Dict[str, str]]:
    prompt = f"""Analyze the following legal scenario: "{query}".
Extract its core legal attributes, domain (e.g., Finance, Family), risk categories, and operative elements.

{_language_clause(language)}

Output JSON in this format:
{{
    "topic": "{query}",
    "domain": "Domain Name",
    "legalAttributes": ["Attr 1", "Attr 2"],
    "riskCategories": ["Risk 1", "Risk 2"],
    "operativeElements": ["Element 1", "Element 2"]
}}

Return as valid JSON only, no markdown formatting."""
    return _messages(prompt)


def build_retrieval_messages(
    profile: ScenarioProfile, language: str
) -> List[Dict[str, str]]:
    prompt = f"""Find 3-4 Islamic legal precedents (classical Nawazil or modern resolutions) relevant to: "{profile.topic}".

SCENARIO PROFILE:
{_dump(profile.to_dict())}

For each precedent provide the title, source, era (Classical/Contemporary), ruling, reasoning,
madhhab, operative cause ('Illah) and a similarity score breakdown. All scores are integers 0-100.

{_language_clause(language)}

Output JSON in this format:
[
    {{
        "id": "PREC-001",
        "title": "Case Title",
        "source": "Source Name",
        "era": "Classical" | "Contemporary",
        "ruling": "The Ruling",
        "reasoning": "Why this ruling",
        "madhhab": "School Name",
        "operativeCause": "The 'Illah",
        "similarity": {{
            "total": 0,
            "breakdown": {{"surface": 0, "structural": 0, "illah": 0, "maqasid": 0}}
        }},
        "dissentingView": "Optional dissenting view"
    }}
]

Return as valid JSON only, no markdown formatting."""
    return _messages(prompt)


def build_conflict_messages(
    profile: ScenarioProfile, matches: Sequence[PrecedentMatch], language: str
) -> List[Dict[str, str]]:
    prompt = f"""Analyze the retrieved precedents for "{profile.topic}" and detect any conflicts or divergences.
Identify points of disagreement and their significance.

PRECEDENTS:
{_dump([match.to_dict() for match in matches])}

{_language_clause(language)}

Output JSON in this format:
{{
    "hasConflict": true | false,
    "divergencePoints": [
        {{
            "point": "Point of contention",
            "viewA": "View A",
            "viewB": "View B",
            "significance": "High" | "Medium" | "Low"
        }}
    ],
    "evolutionNote": "Note on how the ruling evolved over time"
}}

If there is no conflict, set "hasConflict" to false and return an empty "divergencePoints" list.
Return as valid JSON only, no markdown formatting."""
    return _messages(prompt)


def build_trend_messages(
    profile: ScenarioProfile,
    matches: Sequence[PrecedentMatch],
    conflicts: ConflictReport,
    language: str,
) -> List[Dict[str, str]]:
    prompt = f"""Map the jurisprudential trends for "{profile.topic}" based on the precedents.
Identify the majority view, minority view, and consensus level.

PRECEDENTS:
{_dump([match.to_dict() for match in matches])}

CONFLICT ANALYSIS:
{_dump(conflicts.to_dict())}

{_language_clause(language)}

Output JSON in this format:
{{
    "majorityView": "Summary of majority",
    "minorityView": "Summary of minority",
    "historicalShift": "Description of any shift",
    "consensusLevel": "Ijma" | "Jumhur" | "Khilaf" | "Shadh"
}}

Return as valid JSON only, no markdown formatting."""
    return _messages(prompt)
