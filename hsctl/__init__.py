"""
hsctl - Command-line client for HubSpot contacts.

Layers:
- core: Raw types and HTTP client
- sdk: High-level HubSpotClient with typed operations
- cli: Opinionated command-line interface
"""

from hsctl.sdk import HubSpotClient

__version__ = "0.1.0"
__all__ = ["HubSpotClient"]
