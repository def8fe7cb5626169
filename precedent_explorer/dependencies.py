"""Controller construction and FastAPI dependency injection utilities."""

import logging

from fastapi import HTTPException, Request, status

from . import config
from .inference import LLMCollaborator, MockCollaborator
from .pipeline import InferenceCollaborator, PipelineController, PrecedentPipeline
from .providers import create_provider
from .settings import load_inference_settings

logger = logging.getLogger(__name__)


def build_collaborator(mock: bool | None = None) -> InferenceCollaborator:
    """
    Create the inference collaborator for this process.

    ``mock`` defaults to ``USE_MOCK_INFERENCE``.
    """
    use_mock = config.USE_MOCK_INFERENCE if mock is None else mock
    if use_mock:
        logger.info("Using mock inference collaborator")
        return MockCollaborator()

    settings = load_inference_settings()
    provider = create_provider(settings)
    logger.info(f"Using {settings.provider} inference provider")
    return LLMCollaborator(provider, settings)


def build_controller(mock: bool | None = None) -> PipelineController:
    return PipelineController(PrecedentPipeline(build_collaborator(mock)))


def get_controller(request: Request) -> PipelineController:
    """
    FastAPI dependency for the app's single pipeline controller.

    Raises:
        HTTPException: 503 Service Unavailable if the app has not started
    """
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        logger.error("Pipeline controller not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pipeline controller not initialized",
        )
    return controller
