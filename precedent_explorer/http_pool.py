"""HTTP client pool management using httpx with connection pooling.

This module provides a shared httpx.AsyncClient for calls to the inference
provider. Connection pooling avoids a TCP handshake and TLS negotiation on
every stage request.

Usage:
    # In FastAPI lifespan startup
    await init_http_client()

    # In provider code
    client = get_inference_client()  # None when the pool is not initialized

    # In FastAPI lifespan shutdown
    await close_http_client()

Environment Variables:
    HTTP_MAX_CONNECTIONS: Max connections (default: 50)
    HTTP_MAX_KEEPALIVE_CONNECTIONS: Max keepalive connections (default: 10)
    HTTP_KEEPALIVE_EXPIRY: Keepalive expiry in seconds (default: 5.0)
    HTTP_CONNECT_TIMEOUT: Connection timeout in seconds (default: 10.0)
    HTTP_READ_TIMEOUT: Read timeout in seconds (default: 120.0)
    HTTP_WRITE_TIMEOUT: Write timeout in seconds (default: 30.0)
    HTTP_POOL_TIMEOUT: Pool acquire timeout in seconds (default: 10.0)
"""

import os
import logging
from typing import Optional
import httpx
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class HttpClientConfig:
    """Configuration for the pooled httpx.AsyncClient, read from the environment."""

    def __init__(self):
        self.max_connections = int(os.getenv("HTTP_MAX_CONNECTIONS", "50"))
        self.max_keepalive_connections = int(
            os.getenv("HTTP_MAX_KEEPALIVE_CONNECTIONS", "10")
        )
        self.keepalive_expiry = float(os.getenv("HTTP_KEEPALIVE_EXPIRY", "5.0"))

        # LLM completions are slow, so the read timeout is generous
        self.connect_timeout = float(os.getenv("HTTP_CONNECT_TIMEOUT", "10.0"))
        self.read_timeout = float(os.getenv("HTTP_READ_TIMEOUT", "120.0"))
        self.write_timeout = float(os.getenv("HTTP_WRITE_TIMEOUT", "30.0"))
        self.pool_timeout = float(os.getenv("HTTP_POOL_TIMEOUT", "10.0"))

    def get_limits(self) -> dict:
        return {
            "max_connections": self.max_connections,
            "max_keepalive_connections": self.max_keepalive_connections,
            "keepalive_expiry": self.keepalive_expiry,
        }

    def get_timeout(self) -> dict:
        return {
            "connect": self.connect_timeout,
            "read": self.read_timeout,
            "write": self.write_timeout,
            "pool": self.pool_timeout,
        }

    def __repr__(self) -> str:
        return (
            f"HttpClientConfig("
            f"max_connections={self.max_connections}, "
            f"max_keepalive={self.max_keepalive_connections}, "
            f"connect_timeout={self.connect_timeout}s, "
            f"read_timeout={self.read_timeout}s)"
        )


_inference_client: Optional[httpx.AsyncClient] = None
_config: Optional[HttpClientConfig] = None


async def init_http_client() -> httpx.AsyncClient:
    """
    Initialize the shared inference HTTP client.

    Safe to call multiple times; returns the existing client if already
    initialized.
    """
    global _inference_client, _config

    if _inference_client is not None:
        logger.info("HTTP client already initialized, returning existing client")
        return _inference_client

    _config = HttpClientConfig()
    logger.info(f"Initializing HTTP client with config: {_config}")

    try:
        _inference_client = httpx.AsyncClient(
            limits=httpx.Limits(**_config.get_limits()),
            timeout=httpx.Timeout(**_config.get_timeout()),
            follow_redirects=True,
        )
        logger.info("✓ HTTP client initialized successfully")
        return _inference_client

    except Exception as e:
        logger.error(f"✗ Failed to initialize HTTP client: {e}", exc_info=True)
        _inference_client = None
        _config = None
        raise


def get_inference_client() -> Optional[httpx.AsyncClient]:
    """Get the shared inference client, or None if the pool is not initialized."""
    return _inference_client


async def close_http_client() -> None:
    """Close the shared client. No-op if it was never initialized."""
    global _inference_client, _config

    if _inference_client is None:
        logger.info("HTTP client not initialized, nothing to close")
        return

    try:
        await _inference_client.aclose()
        logger.info("✓ HTTP client closed successfully")
    except Exception as e:
        logger.error(f"✗ Error closing HTTP client: {e}", exc_info=True)
    finally:
        _inference_client = None
        _config = None


def check_http_client_health() -> dict:
    """Report whether the shared client is open."""
    if _inference_client is None:
        return {"status": "unavailable", "error": "HTTP client not initialized"}

    status = "unavailable" if _inference_client.is_closed else "healthy"
    return {
        "status": status,
        "max_connections": _config.max_connections if _config else None,
    }
