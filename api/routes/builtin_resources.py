"""Built-in resource CRUD routes, plus reading a resource by URI."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from content_registry.aggregation import read_resource
from content_registry.errors import BACKEND_FAILURES, DuplicateKeyError
from content_registry.models import to_document
from content_registry.registry import ResourceRegistry, get_resource_registry

from .models import FORBIDDEN_MESSAGE, ReadResourceRequest, fail, is_privileged, ok

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_MESSAGE = "Built-in resource not found"


@router.get("")
async def list_builtin_resources(registry: ResourceRegistry = Depends(get_resource_registry)):
    """List all built-in resources, enabled or not."""
    try:
        resources = await registry.find_all()
    except BACKEND_FAILURES as e:
        logger.error(f"Error listing built-in resources: {e}")
        return fail(500, str(e) or "Failed to list built-in resources")
    return ok([to_document(r) for r in resources])


@router.post("/read")
async def read_builtin_resource(
    request: ReadResourceRequest,
    registry: ResourceRegistry = Depends(get_resource_registry),
):
    """Read the content of an enabled built-in resource."""
    if not request.uri:
        return fail(400, "uri is required")

    try:
        result = await read_resource(request.uri, registry=registry)
    except BACKEND_FAILURES as e:
        logger.error(f"Error reading resource: {e}")
        return fail(500, str(e) or "Failed to read resource")
    if result is None:
        return fail(404, f"Resource not found: {request.uri}")
    return ok(result)


@router.get("/{resource_id}")
async def get_builtin_resource(
    resource_id: str,
    registry: ResourceRegistry = Depends(get_resource_registry),
):
    try:
        resource = await registry.find_by_id(resource_id)
    except BACKEND_FAILURES as e:
        logger.error(f"Error getting built-in resource: {e}")
        return fail(500, str(e) or "Failed to get built-in resource")
    if resource is None:
        return fail(404, NOT_FOUND_MESSAGE)
    return ok(to_document(resource))


@router.post("")
async def create_builtin_resource(
    payload: Dict[str, Any] = Body(...),
    privileged: bool = Depends(is_privileged),
    registry: ResourceRegistry = Depends(get_resource_registry),
):
    """Create a built-in resource. ``uri`` and ``content`` are required.

    ``mimeType`` defaults to text/plain here, at the HTTP edge; the registry
    itself stores whatever it is given.
    """
    if not privileged:
        return fail(403, FORBIDDEN_MESSAGE)
    if not payload.get("uri") or not payload.get("content"):
        return fail(400, "uri and content are required")

    data = dict(payload)
    data["mimeType"] = payload.get("mimeType") or "text/plain"
    data["enabled"] = payload.get("enabled") is not False
    try:
        resource = await registry.create(data)
    except DuplicateKeyError as e:
        return fail(409, str(e))
    except ValidationError as e:
        return fail(400, str(e))
    except BACKEND_FAILURES as e:
        logger.error(f"Error creating built-in resource: {e}")
        return fail(500, str(e) or "Failed to create built-in resource")
    return ok(to_document(resource), status_code=201)


@router.put("/{resource_id}")
async def update_builtin_resource(
    resource_id: str,
    payload: Dict[str, Any] = Body(...),
    privileged: bool = Depends(is_privileged),
    registry: ResourceRegistry = Depends(get_resource_registry),
):
    """Apply a partial update. Only fields present in the body change."""
    if not privileged:
        return fail(403, FORBIDDEN_MESSAGE)

    try:
        resource = await registry.update(resource_id, payload)
    except DuplicateKeyError as e:
        return fail(409, str(e))
    except ValidationError as e:
        return fail(400, str(e))
    except BACKEND_FAILURES as e:
        logger.error(f"Error updating built-in resource: {e}")
        return fail(500, str(e) or "Failed to update built-in resource")
    if resource is None:
        return fail(404, NOT_FOUND_MESSAGE)
    return ok(to_document(resource))


@router.delete("/{resource_id}")
async def delete_builtin_resource(
    resource_id: str,
    privileged: bool = Depends(is_privileged),
    registry: ResourceRegistry = Depends(get_resource_registry),
):
    if not privileged:
        return fail(403, FORBIDDEN_MESSAGE)

    try:
        deleted = await registry.delete(resource_id)
    except BACKEND_FAILURES as e:
        logger.error(f"Error deleting built-in resource: {e}")
        return fail(500, str(e) or "Failed to delete built-in resource")
    if not deleted:
        return fail(404, NOT_FOUND_MESSAGE)
    return ok(message="Built-in resource deleted")
