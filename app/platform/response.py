from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[dict] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Single source of truth for ALL API responses.

    Success bodies are ``{"success": true, "message": ..., **data}``;
    anything >= 400 is rendered as ``{"error": message}``.
    """
    if status_code >= 400:
        content: dict[str, Any] = {"error": message}
    else:
        content = {"success": True, "message": message}
        if data:
            content.update(jsonable_encoder(data))

    return JSONResponse(status_code=status_code, content=content)
