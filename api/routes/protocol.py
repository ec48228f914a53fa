"""Protocol-facing listings: built-in entries merged with external ones.

This service has no external providers of its own, so the listings here
contain only built-in entries. Hosts that aggregate other providers call
``content_registry.aggregation`` directly with their entries.
"""

import logging

from fastapi import APIRouter, Depends

from content_registry.aggregation import get_prompt, list_prompts, list_resources
from content_registry.errors import BACKEND_FAILURES, PromptArgumentError
from content_registry.registry import (
    PromptRegistry,
    ResourceRegistry,
    get_prompt_registry,
    get_resource_registry,
)

from .models import GetPromptRequest, fail, ok

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/prompts")
async def list_protocol_prompts(registry: PromptRegistry = Depends(get_prompt_registry)):
    try:
        return ok(await list_prompts(registry=registry))
    except BACKEND_FAILURES as e:
        logger.error(f"Error listing prompts: {e}")
        return fail(500, str(e) or "Failed to list prompts")


@router.post("/prompts/{name}")
async def get_protocol_prompt(
    name: str,
    request: GetPromptRequest,
    registry: PromptRegistry = Depends(get_prompt_registry),
):
    """Render a built-in prompt with the supplied arguments."""
    try:
        result = await get_prompt(name, request.arguments, registry=registry)
    except PromptArgumentError as e:
        return fail(400, str(e))
    except BACKEND_FAILURES as e:
        logger.error(f"Error getting prompt: {e}")
        return fail(500, str(e) or "Failed to get prompt")
    if result is None:
        return fail(404, f"Prompt '{name}' not found")
    return ok(result)


@router.get("/resources")
async def list_protocol_resources(registry: ResourceRegistry = Depends(get_resource_registry)):
    try:
        return ok(await list_resources(registry=registry))
    except BACKEND_FAILURES as e:
        logger.error(f"Error listing resources: {e}")
        return fail(500, str(e) or "Failed to list resources")
