"""Shared test fixtures and sample data for Precedent Explorer tests.

This package provides:
- Sample stage payloads (raw, as a model would return them)
- A scripted collaborator with failure and gating hooks
"""

__all__ = [
    "sample_payloads",
    "scripted_collaborator",
]
