"""Pipeline stages for the precedent explorer."""

from .profiling import ScenarioProfilingStage, SCENARIO_PROFILE
from .retrieval import PrecedentRetrievalStage, PRECEDENT_MATCHES
from .conflicts import ConflictAnalysisStage, CONFLICT_REPORT
from .trends import TrendMappingStage, TREND_SUMMARY

__all__ = [
    "ScenarioProfilingStage",
    "PrecedentRetrievalStage",
    "ConflictAnalysisStage",
    "TrendMappingStage",
    "SCENARIO_PROFILE",
    "PRECEDENT_MATCHES",
    "CONFLICT_REPORT",
    "TREND_SUMMARY",
]
