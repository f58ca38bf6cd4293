# ABOUTME: Error response models and OpenAPI response examples
# ABOUTME: Pydantic model for API error bodies and shared response fragments for route decorators

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format. Typed fields appear only where they apply."""
    code: str
    error: str
    message: str | None = None
    used: int | None = None
    limit: int | None = None
    upgrade_url: str | None = None
    available_endpoints: list[str] | None = None


def _error_example(code: str, error: str, **extra) -> dict:
    """Builds a single OpenAPI response entry with an error example."""
    return {"content": {"application/json": {"example": {"code": code, "error": error, **extra}}}}


# Reusable OpenAPI response fragments for route decorators
INVALID_REQUEST = {
    400: {
        "description": "Malformed request body, identifier, or API key",
        **_error_example("INVALID_REQUEST", "Invalid document ID format"),
    }
}

AUTH_REQUIRED = {
    401: {
        "description": "API key missing or invalid",
        **_error_example("INVALID_API_KEY", "Invalid API key"),
    }
}

QUOTA_ERRORS = {
    403: {
        "description": "Organization is not on the Pro plan",
        **_error_example("PLAN_UPGRADE_REQUIRED", "API access requires Pro plan",
                         upgrade_url="/settings/subscription"),
    },
    429: {
        "description": "Monthly API call budget exhausted, or AI provider rate limited",
        **_error_example("RATE_LIMITED", "API rate limit exceeded", used=1000, limit=1000),
    },
}

NOT_FOUND = {
    404: {
        "description": "Requested resource not found",
        **_error_example("NOT_FOUND", "Document not found"),
    }
}

ANALYZE_ERRORS = {
    **INVALID_REQUEST,
    **AUTH_REQUIRED,
    **QUOTA_ERRORS,
    402: {
        "description": "AI provider credits exhausted",
        **_error_example("AI_CREDITS_EXHAUSTED", "AI credits exhausted. Please add credits."),
    },
    500: {
        "description": "AI service not configured or upstream failure",
        **_error_example("AI_FAILURE", "AI analysis failed"),
    },
}
