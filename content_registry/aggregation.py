"""Protocol-facing listings of built-in and externally supplied entries.

Downstream consumers validate listings against a fixed schema in which the
optional fields must still be present and string (or list) typed. Every
entry, whether it came from the registry or from another provider, is run
through the per-kind default table below. A field counts as missing when it
is absent or ``None``.

Registry entries come first, external entries follow in the order given.
Entries are not de-duplicated across sources: a key exposed by both the
registry and an external provider is listed twice.

Usage:
    result = await list_prompts(external_prompts=server_prompts)
    result["prompts"]  # [{"name", "title", "description", "arguments"}, ...]
"""

import logging
import re
from typing import Any, Callable, Iterable, Mapping, Optional

from .errors import PromptArgumentError
from .models import BuiltinPrompt, BuiltinResource
from .registry import (
    PromptRegistry,
    ResourceRegistry,
    get_prompt_registry,
    get_resource_registry,
)

logger = logging.getLogger(__name__)

Entry = Mapping[str, Any]
DefaultTable = Mapping[str, Callable[[Mapping[str, Any]], Any]]

# Field -> factory for its default; factories see the partially built entry
PROMPT_DEFAULTS: DefaultTable = {
    "title": lambda entry: entry.get("name") or "",
    "description": lambda entry: "",
    "arguments": lambda entry: [],
}

RESOURCE_DEFAULTS: DefaultTable = {
    "name": lambda entry: "",
    "description": lambda entry: "",
    "mimeType": lambda entry: "",
}

_PLACEHOLDER = re.compile(r"\{\{\s*([\w.-]+)\s*\}\}")


def normalize_entry(entry: Entry, defaults: DefaultTable) -> dict[str, Any]:
    """Fill every missing optional field from ``defaults``.

    Keys outside the table are passed through unchanged.
    """
    result = dict(entry)
    for field, default in defaults.items():
        if result.get(field) is None:
            result[field] = default(result)
    return result


def prompt_entry(prompt: BuiltinPrompt) -> dict[str, Any]:
    """Project a stored prompt onto the protocol's prompt shape."""
    return {
        "name": prompt.name,
        "title": prompt.title,
        "description": prompt.description,
        "arguments": (
            [arg.model_dump(exclude_none=True) for arg in prompt.arguments]
            if prompt.arguments is not None
            else None
        ),
    }


def resource_entry(resource: BuiltinResource) -> dict[str, Any]:
    """Project a stored resource onto the protocol's resource shape."""
    return {
        "uri": resource.uri,
        "name": resource.name,
        "description": resource.description,
        "mimeType": resource.mime_type,
    }


async def list_prompts(
    external_prompts: Iterable[Entry] = (),
    registry: Optional[PromptRegistry] = None,
) -> dict[str, list[dict[str, Any]]]:
    """List enabled built-in prompts followed by externally supplied ones."""
    registry = registry or get_prompt_registry()
    builtin = [prompt_entry(p) for p in await registry.find_enabled()]
    external = list(external_prompts)

    prompts = [normalize_entry(e, PROMPT_DEFAULTS) for e in builtin + external]
    logger.debug(f"Listing {len(builtin)} builtin and {len(external)} external prompts")
    return {"prompts": prompts}


async def list_resources(
    external_resources: Iterable[Entry] = (),
    registry: Optional[ResourceRegistry] = None,
) -> dict[str, list[dict[str, Any]]]:
    """List enabled built-in resources followed by externally supplied ones."""
    registry = registry or get_resource_registry()
    builtin = [resource_entry(r) for r in await registry.find_enabled()]
    external = list(external_resources)

    resources = [normalize_entry(e, RESOURCE_DEFAULTS) for e in builtin + external]
    logger.debug(f"Listing {len(builtin)} builtin and {len(external)} external resources")
    return {"resources": resources}


def render_template(template: str, arguments: Mapping[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders. Unknown placeholders are kept."""

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key in arguments and arguments[key] is not None:
            return str(arguments[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


async def get_prompt(
    name: str,
    arguments: Optional[Mapping[str, Any]] = None,
    registry: Optional[PromptRegistry] = None,
) -> Optional[dict[str, Any]]:
    """Render an enabled built-in prompt.

    Returns:
        ``{"description", "messages"}`` in protocol shape, or None when no
        enabled built-in prompt has this name (the caller then asks the
        external providers).

    Raises:
        PromptArgumentError: A required argument was not supplied.
    """
    registry = registry or get_prompt_registry()
    prompt = await registry.find_by_name(name)
    if prompt is None or prompt.enabled is False:
        return None

    arguments = arguments or {}
    missing = [
        arg.name
        for arg in prompt.arguments or []
        if arg.required and arguments.get(arg.name) is None
    ]
    if missing:
        raise PromptArgumentError(name, missing)

    text = render_template(prompt.template, arguments)
    return {
        "description": prompt.description or "",
        "messages": [
            {"role": "user", "content": {"type": "text", "text": text}},
        ],
    }


async def read_resource(
    uri: str,
    registry: Optional[ResourceRegistry] = None,
) -> Optional[dict[str, Any]]:
    """Read an enabled built-in resource.

    Returns:
        ``{"contents": [{"uri", "mimeType", "text"}]}``, or None when no
        enabled built-in resource has this URI.
    """
    registry = registry or get_resource_registry()
    resource = await registry.find_by_uri(uri)
    if resource is None or resource.enabled is False:
        return None

    return {
        "contents": [
            {
                "uri": resource.uri,
                "mimeType": resource.mime_type or "text/plain",
                "text": resource.content,
            }
        ]
    }
