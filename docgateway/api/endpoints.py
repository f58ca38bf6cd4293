# ABOUTME: Static table of public API endpoints
# ABOUTME: Source of the available_endpoints hint returned for unmatched routes

from typing import NamedTuple


class Endpoint(NamedTuple):
    method: str
    path: str
    purpose: str

    def describe(self) -> str:
        return f"{self.method} {self.path} - {self.purpose}"


PUBLIC_ENDPOINTS = (
    Endpoint("POST", "/analyze", "Analyze text content"),
    Endpoint("GET", "/documents", "List all documents"),
    Endpoint("GET", "/documents/{id}", "Get document with analysis"),
)


def available_endpoints() -> list[str]:
    """One-line descriptions of every public endpoint."""
    return [endpoint.describe() for endpoint in PUBLIC_ENDPOINTS]
