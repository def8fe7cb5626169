"""Inference collaborators for the precedent pipeline."""

from .llm_collaborator import LLMCollaborator
from .mock import MockCollaborator
from .parsing import extract_json

__all__ = ["LLMCollaborator", "MockCollaborator", "extract_json"]
