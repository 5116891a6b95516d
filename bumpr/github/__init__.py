"""GitHub REST API transport."""

from .http import HttpClient, HttpError, MockCall, MockHttpClient, RealHttpClient

__all__ = [
    "HttpClient",
    "HttpError",
    "MockCall",
    "MockHttpClient",
    "RealHttpClient",
]
