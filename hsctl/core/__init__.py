"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses matching the HubSpot CRM v3 wire format
- Low-level HTTP client with auth and error handling
"""

from hsctl.core.client import (
    APIClient,
    APIError,
    CLIError,
    DecodingError,
    EncodingError,
    TransportError,
    ValidationError,
)
from hsctl.core.types import (
    Contact,
    ContactPage,
    Property,
    PropertyOption,
    PropertyValue,
)

__all__ = [
    "APIClient",
    "APIError",
    "CLIError",
    "Contact",
    "ContactPage",
    "DecodingError",
    "EncodingError",
    "Property",
    "PropertyOption",
    "PropertyValue",
    "TransportError",
    "ValidationError",
]
