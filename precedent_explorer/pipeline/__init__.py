"""Staged, cancellable precedent analysis pipeline."""

from .base import Pipeline, Stage
from .cancellation import CancellationToken, PipelineCancelled
from .collaborator import CollaboratorError, InferenceCollaborator
from .context import PipelineContext, ContextKey
from .controller import PipelineController, PipelineSession
from .events import (
    ConflictsEvent,
    HaltEvent,
    LogEvent,
    MatchesEvent,
    PipelineEvent,
    ProfileEvent,
    StepEvent,
    TrendsEvent,
    event_from_dict,
)
from .models import (
    ConflictReport,
    ConsensusLevel,
    DivergencePoint,
    Era,
    PrecedentMatch,
    ScenarioProfile,
    Significance,
    SimilarityBreakdown,
    SimilarityScore,
    TrendSummary,
    coerce_matches,
    rank_matches,
)
from .precedent_pipeline import PrecedentPipeline
from .state import PipelineState, PipelineStatus, fold_events, reduce_state

__all__ = [
    "Pipeline",
    "Stage",
    "CancellationToken",
    "PipelineCancelled",
    "CollaboratorError",
    "InferenceCollaborator",
    "PipelineContext",
    "ContextKey",
    "PipelineController",
    "PipelineSession",
    "ConflictsEvent",
    "HaltEvent",
    "LogEvent",
    "MatchesEvent",
    "PipelineEvent",
    "ProfileEvent",
    "StepEvent",
    "TrendsEvent",
    "event_from_dict",
    "ConflictReport",
    "ConsensusLevel",
    "DivergencePoint",
    "Era",
    "PrecedentMatch",
    "ScenarioProfile",
    "Significance",
    "SimilarityBreakdown",
    "SimilarityScore",
    "TrendSummary",
    "coerce_matches",
    "rank_matches",
    "PrecedentPipeline",
    "PipelineState",
    "PipelineStatus",
    "fold_events",
    "reduce_state",
]
