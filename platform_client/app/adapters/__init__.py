"""
Adapters package for the platform client.

Contains the HTTP transport wrapper for the platform API. It
encapsulates:

- Base URL, bearer auth and JSON:API headers
- Bracket-notation query parameters
- Response interceptors used to prime the resource cache

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .transport import PlatformTransport, JSON_API_CONTENT_TYPE
from .params import flatten_params

__all__ = [
    "PlatformTransport",
    "JSON_API_CONTENT_TYPE",
    "flatten_params",
]
