"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from tweetboard.service import Service

# Global Service instance (initialized on app startup)
_service: Service | None = None


def init_service(service: Service) -> None:
    """Initialize the global Service instance."""
    global _service  # noqa: PLW0603
    _service = service


def close_service() -> None:
    """Drop the global Service instance."""
    global _service  # noqa: PLW0603
    _service = None


def get_service() -> Generator[Service, None, None]:
    """Dependency that provides the Service instance."""
    if _service is None:
        raise RuntimeError("Service not initialized. Call init_service() first.")
    yield _service


# Type alias for dependency injection
ServiceDep = Annotated[Service, Depends(get_service)]
