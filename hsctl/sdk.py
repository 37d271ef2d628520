"""
HubSpot SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for the contacts endpoints.
Built on top of the core APIClient.
"""

import builtins
import urllib.parse
from collections.abc import Iterator
from typing import Any

from hsctl.core.client import DEFAULT_TIMEOUT, APIClient, DecodingError
from hsctl.core.types import Contact, ContactPage, Property, PropertyValue, validate_properties

CONTACTS_PATH = "/crm/v3/objects/contacts"
PROPERTIES_PATH = "/crm/v3/properties/contacts"

# hs_lead_status is requested but never shown in table output.
CONTACT_PROPERTIES = ["email", "firstname", "lastname", "hs_lead_status", "lifecyclestage"]
DEFAULT_LIMIT = 100


class HubSpotClient:
    """
    High-level HubSpot API client with typed methods.

    Example:
        client = HubSpotClient(api_key="pat-...")

        page = client.contacts.list(limit=10)
        contact = client.contacts.create({"email": "a@b.com"})
        client.contacts.update(contact.id, {"lifecyclestage": "customer"})

    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the HubSpot client.

        Args:
            api_key: HubSpot private app token (or HUBSPOT_API_KEY env var)
            base_url: API base URL (or HUBSPOT_BASE_URL env var)
            timeout: Request timeout in seconds

        """
        self._client = APIClient(api_key=api_key, base_url=base_url, timeout=timeout)

        self.contacts = ContactOperations(self._client)
        self.properties = PropertyOperations(self._client)

    @property
    def base_url(self) -> str:
        """Get the API base URL."""
        return self._client.base_url


# =============================================================================
# Search Query Parsing
# =============================================================================


def build_filter_groups(query: str) -> list[dict[str, Any]]:
    """
    Turn a free-text query into a single search filter group.

    "property=value" becomes an EQ filter on that property (split on the
    first "="); anything else is a CONTAINS_TOKEN match on email.
    """
    if "=" in query:
        name, value = query.split("=", 1)
        search_filter = {"propertyName": name.strip(), "operator": "EQ", "value": value.strip()}
    else:
        search_filter = {"propertyName": "email", "operator": "CONTAINS_TOKEN", "value": query.strip()}
    return [{"filters": [search_filter]}]


# =============================================================================
# Contact Operations
# =============================================================================


class ContactOperations:
    """Operations for contacts."""

    def __init__(self, client: APIClient):
        self._client = client

    @staticmethod
    def _contact_path(contact_id: str) -> str:
        return f"{CONTACTS_PATH}/{urllib.parse.quote(str(contact_id), safe='')}"

    def list(self, limit: int = DEFAULT_LIMIT, after: str | None = None) -> ContactPage:
        """
        Fetch one page of contacts.

        Args:
            limit: Page size
            after: Cursor from a previous page's ``after``

        Returns:
            ContactPage with results and the next cursor, if any

        """
        result = self._client.get(
            CONTACTS_PATH,
            {"limit": limit, "after": after or None, "properties": ",".join(CONTACT_PROPERTIES)},
        )
        return ContactPage.from_dict(result)

    def iter_all(self, limit: int = DEFAULT_LIMIT) -> Iterator[Contact]:
        """Iterate through every contact, following cursors page by page."""
        after = None
        while True:
            page = self.list(limit=limit, after=after)
            yield from page.results
            if not page.has_more:
                break
            after = page.after

    def list_all(self, limit: int = DEFAULT_LIMIT) -> builtins.list[Contact]:
        """
        Fetch all contacts.

        A failure on any page propagates; no partial list is returned.
        """
        return list(self.iter_all(limit=limit))

    def get(self, contact_id: str) -> Contact:
        """Get a contact by ID."""
        result = self._client.get(
            self._contact_path(contact_id),
            {"properties": ",".join(CONTACT_PROPERTIES)},
        )
        return Contact.from_dict(result)

    def create(self, properties: dict[str, PropertyValue]) -> Contact:
        """
        Create a contact.

        Args:
            properties: Property name to value map

        Returns:
            The created contact, with server-assigned id and timestamps

        """
        result = self._client.post(CONTACTS_PATH, {"properties": validate_properties(properties)})
        return Contact.from_dict(result)

    def update(self, contact_id: str, properties: dict[str, PropertyValue]) -> Contact:
        """Update a contact. Only the given properties change."""
        result = self._client.patch(
            self._contact_path(contact_id),
            {"properties": validate_properties(properties)},
        )
        return Contact.from_dict(result)

    def delete(self, contact_id: str) -> None:
        """Delete a contact."""
        self._client.delete(self._contact_path(contact_id))

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> ContactPage:
        """
        Search contacts.

        Args:
            query: "property=value" for an exact match, or a bare value to
                match against email
            limit: Maximum number of results

        Returns:
            ContactPage with the matching contacts

        """
        result = self._client.post(
            f"{CONTACTS_PATH}/search",
            {
                "filterGroups": build_filter_groups(query),
                "limit": limit,
                "properties": list(CONTACT_PROPERTIES),
            },
        )
        return ContactPage.from_dict(result)


# =============================================================================
# Property Operations
# =============================================================================


class PropertyOperations:
    """Operations for contact property definitions."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> list[Property]:
        """List all contact properties."""
        result = self._client.get(PROPERTIES_PATH)
        results = result.get("results") or []
        if not isinstance(results, builtins.list):
            raise DecodingError("Failed to unmarshal properties response: results is not an array")
        return [Property.from_dict(p) for p in results]
