"""
Success response envelope.
Wraps every successful JSON response as {"success": true, "data": ...} and adds
"count" when the payload is a list or a paginated page.
"""

import json
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware


# Key for skipping the interceptor on specific routes
SKIP_INTERCEPTOR_KEY = "skip_interceptor"

EXCLUDED_PATHS = {"/openapi.json", "/docs", "/redoc", "/health"}


def wrap_payload(payload) -> dict:
    wrapped = {"success": True, "data": payload}
    if isinstance(payload, list):
        wrapped["count"] = len(payload)
    elif isinstance(payload, dict) and isinstance(payload.get("items"), list):
        wrapped["count"] = len(payload["items"])
    return wrapped


class SuccessResponseInterceptor(BaseHTTPMiddleware):
    """
    Middleware that wraps 2xx JSON responses in the standard envelope.
    Routes decorated with @skip_interceptor are passed through untouched.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if request.url.path in EXCLUDED_PATHS:
            return response

        if not (200 <= response.status_code < 300):
            return response

        if getattr(request.state, SKIP_INTERCEPTOR_KEY, False):
            return response

        if "application/json" not in response.headers.get("content-type", ""):
            return response

        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        try:
            original_data = json.loads(response_body.decode())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return Response(
                content=response_body,
                status_code=response.status_code,
                headers=dict(response.headers),
            )

        # Content-Length is recalculated by JSONResponse
        headers = dict(response.headers)
        headers.pop("content-length", None)

        return JSONResponse(
            content=wrap_payload(original_data),
            status_code=response.status_code,
            headers=headers,
        )


def skip_interceptor(func: Callable) -> Callable:
    """
    Decorator to skip the success response envelope on specific routes.

    Usage:
        @router.delete("/{item_id}")
        @skip_interceptor
        async def delete_item():
            return {"message": "deleted"}
    """
    setattr(func, SKIP_INTERCEPTOR_KEY, True)
    return func


class CustomAPIRoute(APIRoute):
    """
    API route that copies the skip_interceptor flag from the endpoint
    onto the request state, where the middleware can see it.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            if getattr(self.endpoint, SKIP_INTERCEPTOR_KEY, False):
                setattr(request.state, SKIP_INTERCEPTOR_KEY, True)
            return await original_route_handler(request)

        return custom_route_handler
