"""Precedent Explorer - staged, cancellable precedent analysis pipeline."""

__version__ = "0.1.0"
