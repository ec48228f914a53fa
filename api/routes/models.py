"""Request/response models and envelope helpers shared by the routes."""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Uniform envelope: ``{success, data}`` or ``{success, message}``."""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None


class ReadResourceRequest(BaseModel):
    """Request to read a resource by URI."""
    uri: Optional[str] = None


class GetPromptRequest(BaseModel):
    """Request to render a prompt."""
    arguments: Dict[str, Any] = Field(default_factory=dict)


def ok(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    body = ApiResponse(success=True, data=data, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def fail(status_code: int, message: str) -> JSONResponse:
    body = ApiResponse(success=False, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def is_privileged(request: Request) -> bool:
    """Whether the caller may mutate the registry.

    Set by the upstream authentication layer on ``request.state.is_admin``.
    """
    return bool(getattr(request.state, "is_admin", False))


FORBIDDEN_MESSAGE = "Admin privileges required"
