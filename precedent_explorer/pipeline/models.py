"""Structured payloads produced by the precedent pipeline stages.

Every model accepts untrusted input: missing or malformed fields fall
back to neutral defaults instead of failing validation, so a partial
stage result is always renderable. Attributes are snake_case; the wire
form (and ``model_dump(by_alias=True)``) is camelCase.
"""

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

BREAKDOWN_KEYS = ("surface", "structural", "illah", "maqasid")


class Era(str, Enum):
    CLASSICAL = "Classical"
    CONTEMPORARY = "Contemporary"


class Significance(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ConsensusLevel(str, Enum):
    IJMA = "Ijma"
    JUMHUR = "Jumhur"
    KHILAF = "Khilaf"
    SHADH = "Shadh"


# ========================================
# Coercion helpers
# ========================================

def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_text(v) for v in value if v is not None)
    return str(value).strip()


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _labels(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [label for label in (_text(v) for v in value) if label]
    label = _text(value)
    return [label] if label else []


def _score(value: Any) -> int:
    """Clamp a score to 0-100; anything non-numeric counts as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(round(min(max(number, 0.0), 100.0)))


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _choice(value: Any, enum_cls, default, aliases: dict | None = None):
    if isinstance(value, enum_cls):
        return value
    key = _text(value).lower()
    for member in enum_cls:
        if member.value.lower() == key:
            return member
    if aliases and key in aliases:
        return aliases[key]
    return default


# ========================================
# Models
# ========================================

class PayloadModel(BaseModel):
    """Immutable, lenient base for stage payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @classmethod
    def from_payload(cls, payload: Any):
        """Build an instance from untrusted data, defaulting on any defect."""
        if isinstance(payload, cls):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        if not isinstance(payload, dict):
            logger.warning(
                f"Expected an object for {cls.__name__}, got {type(payload).__name__}; using defaults"
            )
            return cls()
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Invalid {cls.__name__} payload, using defaults: {e}")
            return cls()

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ScenarioProfile(PayloadModel):
    topic: str = ""
    domain: str = ""
    legal_attributes: Tuple[str, ...] = ()
    risk_categories: Tuple[str, ...] = ()
    operative_elements: Tuple[str, ...] = ()

    @field_validator("topic", "domain", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return _text(value)

    @field_validator("legal_attributes", "risk_categories", "operative_elements", mode="before")
    @classmethod
    def _coerce_labels(cls, value):
        return _labels(value)


class SimilarityBreakdown(PayloadModel):
    surface: int = 0
    structural: int = 0
    illah: int = 0
    maqasid: int = 0

    @field_validator(*BREAKDOWN_KEYS, mode="before")
    @classmethod
    def _coerce_score(cls, value):
        return _score(value)


class SimilarityScore(PayloadModel):
    """Overall similarity plus its breakdown; ``total`` is derived when missing."""

    total: int = 0
    breakdown: SimilarityBreakdown = Field(default_factory=SimilarityBreakdown)

    @model_validator(mode="before")
    @classmethod
    def _derive_total(cls, data):
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if isinstance(data, (int, float, str)) and not isinstance(data, bool):
            return {"total": data}
        if not isinstance(data, dict):
            return {}

        data = dict(data)
        breakdown = data.get("breakdown")
        if isinstance(breakdown, BaseModel):
            breakdown = breakdown.model_dump()
        if not isinstance(breakdown, dict):
            data.pop("breakdown", None)
            breakdown = None

        if data.get("total") is None and breakdown:
            scores = [_score(breakdown.get(key)) for key in BREAKDOWN_KEYS]
            data["total"] = round(sum(scores) / len(scores))
        return data

    @field_validator("total", mode="before")
    @classmethod
    def _coerce_total(cls, value):
        return _score(value)


class PrecedentMatch(PayloadModel):
    id: str = ""
    title: str = ""
    source: str = ""
    madhhab: str = ""
    era: Era = Era.CLASSICAL
    ruling: str = ""
    reasoning: str = ""
    operative_cause: str = ""
    dissenting_view: Optional[str] = None
    similarity: SimilarityScore = Field(default_factory=SimilarityScore)

    @field_validator(
        "id", "title", "source", "madhhab", "ruling", "reasoning", "operative_cause",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value):
        return _text(value)

    @field_validator("dissenting_view", mode="before")
    @classmethod
    def _coerce_dissent(cls, value):
        return _optional_text(value)

    @field_validator("era", mode="before")
    @classmethod
    def _coerce_era(cls, value):
        return _choice(value, Era, Era.CLASSICAL, aliases={"modern": Era.CONTEMPORARY})

    @field_validator("similarity", mode="before")
    @classmethod
    def _coerce_similarity(cls, value):
        if value is None or isinstance(value, bool):
            return {}
        return value


class DivergencePoint(PayloadModel):
    point: str = ""
    view_a: str = ""
    view_b: str = ""
    significance: Significance = Significance.MEDIUM

    @field_validator("point", "view_a", "view_b", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return _text(value)

    @field_validator("significance", mode="before")
    @classmethod
    def _coerce_significance(cls, value):
        return _choice(value, Significance, Significance.MEDIUM)


class ConflictReport(PayloadModel):
    """Divergences among the retrieved precedents.

    ``divergence_points`` is always empty when ``has_conflict`` is false.
    A missing ``hasConflict`` flag is inferred from the presence of points.
    """

    has_conflict: bool = False
    divergence_points: Tuple[DivergencePoint, ...] = ()
    evolution_note: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _enforce_consistency(cls, data):
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, dict):
            return {}

        data = dict(data)
        points = data.pop("divergencePoints", data.pop("divergence_points", None))
        if isinstance(points, (list, tuple)):
            points = [p for p in points if isinstance(p, (dict, DivergencePoint))]
        else:
            points = []

        flag = data.pop("hasConflict", data.pop("has_conflict", None))
        has_conflict = bool(points) if flag is None else _flag(flag)

        data["has_conflict"] = has_conflict
        data["divergence_points"] = points if has_conflict else []
        return data

    @field_validator("evolution_note", mode="before")
    @classmethod
    def _coerce_note(cls, value):
        return _optional_text(value)


class TrendSummary(PayloadModel):
    majority_view: str = ""
    minority_view: str = ""
    historical_shift: str = ""
    consensus_level: ConsensusLevel = ConsensusLevel.KHILAF

    @field_validator("majority_view", "minority_view", "historical_shift", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return _text(value)

    @field_validator("consensus_level", mode="before")
    @classmethod
    def _coerce_consensus(cls, value):
        return _choice(value, ConsensusLevel, ConsensusLevel.KHILAF)


# ========================================
# Match list helpers
# ========================================

def rank_matches(matches: Iterable[PrecedentMatch]) -> Tuple[PrecedentMatch, ...]:
    """Order by similarity total, highest first; ties keep input order."""
    return tuple(sorted(matches, key=lambda match: -match.similarity.total))


def _unique_id(position: int, seen: set) -> str:
    candidate = f"PREC-{position:03d}"
    while candidate in seen:
        position += 1
        candidate = f"PREC-{position:03d}"
    return candidate


def coerce_matches(payload: Any) -> Tuple[PrecedentMatch, ...]:
    """
    Turn an untrusted match list into ranked ``PrecedentMatch`` objects.

    Accepts a bare list, an object wrapping the list under ``matches``,
    ``precedents`` or ``results``, or a single match object. Non-object
    entries are dropped; missing or duplicate ids are replaced so ids stay
    unique within the run.
    """
    if isinstance(payload, dict):
        for key in ("matches", "precedents", "results"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            payload = [payload] if payload else []

    if not isinstance(payload, (list, tuple)):
        logger.warning(f"Expected a list of matches, got {type(payload).__name__}")
        return ()

    matches: List[PrecedentMatch] = []
    seen: set = set()
    for position, item in enumerate(payload, start=1):
        if not isinstance(item, (dict, PrecedentMatch)):
            logger.warning(f"Dropping non-object match entry at position {position}")
            continue
        match = PrecedentMatch.from_payload(item)
        if not match.id or match.id in seen:
            match = match.model_copy(update={"id": _unique_id(position, seen)})
        seen.add(match.id)
        matches.append(match)

    return rank_matches(matches)
