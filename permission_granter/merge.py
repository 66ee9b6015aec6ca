import logging
from typing import Any, Dict, Iterable, List

from .models import ResourceAccess

logger = logging.getLogger(__name__)


def merge_resource_access(
    existing: Iterable[ResourceAccess], new: Iterable[ResourceAccess]
) -> List[ResourceAccess]:
    """
    Existing entries first, then new ones; one entry per id, first seen wins.

    A new entry whose id is already present with a different type is dropped
    and logged, the existing declaration is kept.
    """
    merged: Dict[str, ResourceAccess] = {}
    for item in list(existing) + list(new):
        kept = merged.get(item.id)
        if kept is None:
            merged[item.id] = item
        elif kept.type != item.type:
            logger.warning(
                "Permission %s already declared as %s, ignoring %s",
                item.id,
                kept.type,
                item.type,
            )
    return list(merged.values())


def apply_resource_access(
    required_resource_access: List[Dict[str, Any]],
    resource_app_id: str,
    new: Iterable[ResourceAccess],
) -> List[Dict[str, Any]]:
    """
    Build the full requiredResourceAccess list to send back.

    Only the block for ``resource_app_id`` changes; every other resource block
    is carried through as read: Graph replaces the whole array on PATCH.
    """
    result = []
    found = False
    for block in required_resource_access:
        if block.get("resourceAppId") != resource_app_id or found:
            result.append(block)
            continue
        found = True
        existing = [ResourceAccess.from_graph(ra) for ra in block.get("resourceAccess") or []]
        merged = merge_resource_access(existing, new)
        result.append(
            {
                **block,
                "resourceAccess": [ra.to_graph() for ra in merged],
            }
        )

    if not found:
        result.append(
            {
                "resourceAppId": resource_app_id,
                "resourceAccess": [
                    ra.to_graph() for ra in merge_resource_access([], new)
                ],
            }
        )
    return result
