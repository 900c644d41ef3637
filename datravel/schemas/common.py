from typing import Any, Optional

from datravel.crud.base import Page


def success(data: Any = None, message: Optional[str] = None) -> dict:
    """Standard ``{"success": true, ...}`` envelope."""
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def paged(page: Page, schema, **extra) -> dict:
    """Envelope for a paginated list, items serialized with ``schema``."""
    data = {
        "items": [schema.model_validate(item) for item in page.items],
        "pagination": page.pagination,
    }
    data.update(extra)
    return success(data)
