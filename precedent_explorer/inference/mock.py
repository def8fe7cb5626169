"""Deterministic collaborator for offline runs and tests."""

import asyncio
from typing import Any, Sequence

from ..pipeline.cancellation import CancellationToken
from ..pipeline.collaborator import InferenceCollaborator
from ..pipeline.models import ConflictReport, PrecedentMatch, ScenarioProfile

MOCK_PROFILE = {
    "domain": "Finance",
    "legalAttributes": ["Contract of exchange", "Deferred return", "Pooled ownership"],
    "riskCategories": ["Riba (interest)", "Gharar (excessive uncertainty)"],
    "operativeElements": ["Lock-up of principal", "Variable reward", "Custodial agent"],
}

MOCK_MATCHES = [
    {
        "id": "PREC-001",
        "title": "Mudarabah with pooled capital",
        "source": "Al-Mughni, Ibn Qudamah",
        "madhhab": "Hanbali",
        "era": "Classical",
        "ruling": "Permissible when profit is shared by ratio, not fixed amount",
        "reasoning": "Return is tied to the venture's actual outcome",
        "operativeCause": "Shared risk in a productive venture",
        "similarity": {
            "breakdown": {"surface": 62, "structural": 80, "illah": 78, "maqasid": 72},
        },
    },
    {
        "id": "PREC-002",
        "title": "AAOIFI Shariah Standard on digital tokens",
        "source": "AAOIFI Shariah Standards",
        "madhhab": "Multi-madhhab",
        "era": "Contemporary",
        "ruling": "Tokens representing real assets may be traded at market value",
        "reasoning": "The token is a claim on an identifiable underlying asset",
        "operativeCause": "Ownership of a real, identifiable asset",
        "similarity": {
            "total": 81,
            "breakdown": {"surface": 85, "structural": 78, "illah": 80, "maqasid": 81},
        },
        "dissentingView": "Some scholars hold that network validation is a service, not an asset",
    },
    {
        "id": "PREC-003",
        "title": "Wadi'ah deposit with a guaranteed gift",
        "source": "Fatawa al-Hindiyyah",
        "madhhab": "Hanafi",
        "era": "Classical",
        "ruling": "A stipulated return on a guaranteed deposit is riba",
        "reasoning": "Guarantee of principal turns the deposit into a loan",
        "operativeCause": "Conditional benefit on a guaranteed loan",
        "similarity": {
            "total": 58,
            "breakdown": {"surface": 55, "structural": 60, "illah": 61, "maqasid": 56},
        },
    },
]

MOCK_CONFLICTS = {
    "hasConflict": True,
    "divergencePoints": [
        {
            "point": "Nature of the staking reward",
            "viewA": "Wage (ujrah) for validation work",
            "viewB": "Conditional return on locked capital",
            "significance": "High",
        },
        {
            "point": "Slashing risk",
            "viewA": "Acceptable commercial risk",
            "viewB": "Excessive uncertainty in the contract",
            "significance": "Medium",
        },
    ],
    "evolutionNote": "Early fatwas treated crypto assets as speculative; later standards focus on the underlying utility.",
}

MOCK_TRENDS = {
    "majorityView": "Permissible when the reward is a wage for validation and no principal is guaranteed",
    "minorityView": "Impermissible while slashing and lock-up make the return resemble a conditional loan",
    "historicalShift": "From blanket caution toward case-by-case assessment of the protocol",
    "consensusLevel": "Jumhur",
}


class MockCollaborator(InferenceCollaborator):
    """
    Returns canned payloads for any scenario.

    ``delay`` seconds are spent before each answer, raced against the
    token so a cancel interrupts the wait.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    async def _pause(self, token: CancellationToken) -> None:
        await token.guard(asyncio.sleep(self.delay))

    async def profile_scenario(
        self, query: str, language: str, token: CancellationToken
    ) -> Any:
        await self._pause(token)
        return {"topic": query, **MOCK_PROFILE}

    async def retrieve_precedents(
        self, profile: ScenarioProfile, language: str, token: CancellationToken
    ) -> Any:
        await self._pause(token)
        return [dict(match) for match in MOCK_MATCHES]

    async def analyze_conflicts(
        self,
        profile: ScenarioProfile,
        matches: Sequence[PrecedentMatch],
        language: str,
        token: CancellationToken,
    ) -> Any:
        await self._pause(token)
        return dict(MOCK_CONFLICTS)

    async def map_trends(
        self,
        profile: ScenarioProfile,
        matches: Sequence[PrecedentMatch],
        conflicts: ConflictReport,
        language: str,
        token: CancellationToken,
    ) -> Any:
        await self._pause(token)
        return dict(MOCK_TRENDS)
