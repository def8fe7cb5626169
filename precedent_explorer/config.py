"""Configuration for the Precedent Explorer."""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Inference Configuration
# ============================================================================

# Provider selection (INFERENCE_PROVIDER) and API keys (OPENROUTER_API_KEY,
# REQUESTY_API_KEY) are read per request by settings.py

# Serve canned payloads instead of calling a provider (offline demos)
USE_MOCK_INFERENCE = os.getenv("USE_MOCK_INFERENCE", "false").lower() == "true"

# Path to the stage/provider YAML (defaults to the packaged models.yaml)
PRECEDENT_CONFIG_PATH = os.getenv("PRECEDENT_CONFIG_PATH")

# Supported answer languages (tag -> name used in prompts)
SUPPORTED_LANGUAGES = {
    "en": "English",
    "ar": "Arabic",
    "ur": "Urdu",
}

DEFAULT_LANGUAGE = "en"

# Sample scenarios offered by the explorer
PRESETS = [
    "Digital asset staking in decentralized finance platforms",
    "Use of Zakat funds for infrastructure projects",
    "Copyright protection for AI-generated calligraphy",
    "Biometric data privacy rights in Islamic law",
]

# ============================================================================
# Logging
# ============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the app and CLI."""
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# ============================================================================
# Port Configuration
# ============================================================================

def get_port(env_var: str, default: int) -> int:
    """Get port from environment or return default."""
    try:
        return int(os.getenv(env_var, default))
    except ValueError:
        print(f"Warning: Invalid {env_var}, using default {default}")
        return default

# Backend API server port
BACKEND_PORT = get_port("PORT_BACKEND", 8300)

# Frontend dev server port
FRONTEND_PORT = get_port("PORT_FRONTEND", 4173)


def get_cors_origins():
    """Generate CORS allowed origins based on port configuration."""
    extra = [o.strip() for o in os.getenv("CORS_EXTRA_ORIGINS", "").split(",") if o.strip()]
    return [
        f"http://localhost:{FRONTEND_PORT}",
        f"http://127.0.0.1:{FRONTEND_PORT}",
    ] + extra
