"""Built-in prompt CRUD routes. Thin: every decision is the registry's."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from content_registry.errors import BACKEND_FAILURES, DuplicateKeyError
from content_registry.models import to_document
from content_registry.registry import PromptRegistry, get_prompt_registry

from .models import FORBIDDEN_MESSAGE, fail, is_privileged, ok

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_MESSAGE = "Built-in prompt not found"


@router.get("")
async def list_builtin_prompts(registry: PromptRegistry = Depends(get_prompt_registry)):
    """List all built-in prompts, enabled or not."""
    try:
        prompts = await registry.find_all()
    except BACKEND_FAILURES as e:
        logger.error(f"Error listing built-in prompts: {e}")
        return fail(500, str(e) or "Failed to list built-in prompts")
    return ok([to_document(p) for p in prompts])


@router.get("/{prompt_id}")
async def get_builtin_prompt(
    prompt_id: str,
    registry: PromptRegistry = Depends(get_prompt_registry),
):
    try:
        prompt = await registry.find_by_id(prompt_id)
    except BACKEND_FAILURES as e:
        logger.error(f"Error getting built-in prompt: {e}")
        return fail(500, str(e) or "Failed to get built-in prompt")
    if prompt is None:
        return fail(404, NOT_FOUND_MESSAGE)
    return ok(to_document(prompt))


@router.post("")
async def create_builtin_prompt(
    payload: Dict[str, Any] = Body(...),
    privileged: bool = Depends(is_privileged),
    registry: PromptRegistry = Depends(get_prompt_registry),
):
    """Create a built-in prompt. ``name`` and ``template`` are required."""
    if not privileged:
        return fail(403, FORBIDDEN_MESSAGE)
    if not payload.get("name") or not payload.get("template"):
        return fail(400, "name and template are required")

    data = dict(payload)
    data["enabled"] = payload.get("enabled") is not False
    try:
        prompt = await registry.create(data)
    except DuplicateKeyError as e:
        return fail(409, str(e))
    except ValidationError as e:
        return fail(400, str(e))
    except BACKEND_FAILURES as e:
        logger.error(f"Error creating built-in prompt: {e}")
        return fail(500, str(e) or "Failed to create built-in prompt")
    return ok(to_document(prompt), status_code=201)


@router.put("/{prompt_id}")
async def update_builtin_prompt(
    prompt_id: str,
    payload: Dict[str, Any] = Body(...),
    privileged: bool = Depends(is_privileged),
    registry: PromptRegistry = Depends(get_prompt_registry),
):
    """Apply a partial update. Only fields present in the body change."""
    if not privileged:
        return fail(403, FORBIDDEN_MESSAGE)

    try:
        prompt = await registry.update(prompt_id, payload)
    except DuplicateKeyError as e:
        return fail(409, str(e))
    except ValidationError as e:
        return fail(400, str(e))
    except BACKEND_FAILURES as e:
        logger.error(f"Error updating built-in prompt: {e}")
        return fail(500, str(e) or "Failed to update built-in prompt")
    if prompt is None:
        return fail(404, NOT_FOUND_MESSAGE)
    return ok(to_document(prompt))


@router.delete("/{prompt_id}")
async def delete_builtin_prompt(
    prompt_id: str,
    privileged: bool = Depends(is_privileged),
    registry: PromptRegistry = Depends(get_prompt_registry),
):
    if not privileged:
        return fail(403, FORBIDDEN_MESSAGE)

    try:
        deleted = await registry.delete(prompt_id)
    except BACKEND_FAILURES as e:
        logger.error(f"Error deleting built-in prompt: {e}")
        return fail(500, str(e) or "Failed to delete built-in prompt")
    if not deleted:
        return fail(404, NOT_FOUND_MESSAGE)
    return ok(message="Built-in prompt deleted")
