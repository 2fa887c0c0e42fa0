from typing import Any, Optional, Dict
from fastapi.responses import JSONResponse


def success_response(
    message: str = "Success",
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """
    Success envelope: {"success": true, "message": ..., "data": ...}

    `data` must already be JSON-serializable (see app.utils.serializers).
    """
    content = {
        "success": True,
        "message": message
    }

    if data is not None:
        content["data"] = data

    return JSONResponse(content=content, status_code=status_code)


def error_response(
    message: str = "Error",
    status_code: int = 400,
    extra: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """
    Error envelope: {"success": false, "message": ...}

    Args:
        message: Error message
        status_code: HTTP status code (default: 400)
        extra: Diagnostic fields merged into the body, e.g. the caller's role on 403

    Returns:
        JSONResponse with error format
    """
    content = {
        "success": False,
        "message": message
    }

    if extra:
        content.update(extra)

    return JSONResponse(content=content, status_code=status_code)


def validation_error_response(
    message: str = "Validation error",
    errors: Optional[Any] = None
) -> JSONResponse:
    """Request body/query failed schema validation (422)"""
    content = {
        "success": False,
        "message": message
    }

    if errors:
        content["errors"] = errors

    return JSONResponse(content=content, status_code=422)


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    """Pagination block shared by paged listings"""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit
    }
