"""FastAPI dependencies: configuration, orchestrator and bearer auth."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from guest_knows.config import GuestKnowsConfig
from guest_knows.logging import get_logger
from guest_knows.orchestrator import IngestionOrchestrator

__all__ = [
    "get_config",
    "get_orchestrator",
    "require_ingest_token",
]

logger = get_logger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request) -> GuestKnowsConfig:
    return request.app.state.config


def get_orchestrator(request: Request) -> IngestionOrchestrator:
    return request.app.state.orchestrator


def _accepted_tokens(config: GuestKnowsConfig) -> list[str]:
    tokens = []
    for secret in (config.api.ingest_token, config.api.ingest_token_old):
        if secret is not None and secret.get_secret_value():
            tokens.append(secret.get_secret_value())
    return tokens


async def require_ingest_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    config: Annotated[GuestKnowsConfig, Depends(get_config)],
) -> None:
    """Check the bearer token against the current and previous ingest tokens."""
    presented = credentials.credentials if credentials is not None else ""
    for token in _accepted_tokens(config):
        if presented and secrets.compare_digest(presented.encode(), token.encode()):
            return
    logger.warning("unauthorized_request", has_credentials=credentials is not None)
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
