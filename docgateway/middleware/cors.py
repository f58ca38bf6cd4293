# ABOUTME: CORS middleware for browser and server callers
# ABOUTME: Answers every OPTIONS preflight with 204 and adds open CORS headers to all responses

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-api-key",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


class OpenCORSMiddleware(BaseHTTPMiddleware):
    """
    Open CORS policy.

    OPTIONS requests on any path short-circuit with an empty 204 before
    routing or authentication.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
