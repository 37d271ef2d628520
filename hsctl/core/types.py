"""
Core types for the HubSpot CRM v3 contacts API.

These dataclasses provide type safety and IDE support for API responses.
"""

from dataclasses import dataclass, field
from typing import Any

from hsctl.core.client import DecodingError, EncodingError

# =============================================================================
# Property Values
# =============================================================================


# Scalar JSON value stored in a contact property. The concrete type is decided
# by the CRM schema, not by this client.
PropertyValue = str | int | float | bool | None

_SCALAR_TYPES = (str, int, float, bool, type(None))


def is_property_value(value: Any) -> bool:
    """Check whether a value fits the PropertyValue union."""
    return isinstance(value, _SCALAR_TYPES)


def validate_properties(properties: dict[str, Any]) -> dict[str, PropertyValue]:
    """Reject property maps that cannot be sent as a flat JSON object."""
    if not isinstance(properties, dict):
        raise EncodingError(f"properties must be a mapping, got {type(properties).__name__}")
    for name, value in properties.items():
        if not isinstance(name, str):
            raise EncodingError(f"property name must be a string, got {name!r}")
        if not is_property_value(value):
            raise EncodingError(f"property '{name}' has unsupported value type {type(value).__name__}")
    return properties


def format_value(value: PropertyValue) -> str:
    """Render a property value as display text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _require_dict(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodingError(f"Failed to unmarshal {what}: expected object, got {type(data).__name__}")
    return data


def _require_list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise DecodingError(f"Failed to unmarshal {what}: expected array, got {type(data).__name__}")
    return data


# =============================================================================
# Contact Types
# =============================================================================


@dataclass
class Contact:
    """A HubSpot contact."""

    id: str
    properties: dict[str, PropertyValue] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    def get_str(self, name: str) -> str:
        """Get a property as display text (empty when missing)."""
        return format_value(self.properties.get(name))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contact":
        """Create from API response dict."""
        data = _require_dict(data, "contact")
        properties = _require_dict(data.get("properties") or {}, "contact properties")
        for name, value in properties.items():
            if not is_property_value(value):
                raise DecodingError(f"Failed to unmarshal contact: property '{name}' is not a scalar")

        contact_id = data.get("id")
        if contact_id is None:
            raise DecodingError("Failed to unmarshal contact: missing 'id'")

        return cls(
            id=str(contact_id),
            properties=dict(properties),
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the API wire shape."""
        return {
            "id": self.id,
            "properties": dict(self.properties),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class ContactPage:
    """One page of contacts from a list or search call."""

    results: list[Contact]
    after: str | None = None

    @property
    def has_more(self) -> bool:
        """Check if the server returned a cursor for another page."""
        return self.after is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContactPage":
        """Create from API response dict."""
        data = _require_dict(data, "contacts response")
        results = [Contact.from_dict(item) for item in _require_list(data.get("results"), "results")]

        after = None
        paging = data.get("paging")
        if paging:
            next_page = _require_dict(paging, "paging").get("next")
            if next_page:
                after = _require_dict(next_page, "paging.next").get("after")

        return cls(results=results, after=str(after) if after is not None else None)


# =============================================================================
# Property Types
# =============================================================================


@dataclass
class PropertyOption:
    """A choice of an enumerated property."""

    label: str
    value: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertyOption":
        """Create from API response dict."""
        data = _require_dict(data, "property option")
        return cls(label=data.get("label") or "", value=data.get("value") or "")


@dataclass
class Property:
    """A contact property definition."""

    name: str
    label: str = ""
    type: str = ""
    field_type: str = ""
    description: str = ""
    options: list[PropertyOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Property":
        """Create from API response dict."""
        data = _require_dict(data, "property")
        return cls(
            name=data.get("name") or "",
            label=data.get("label") or "",
            type=data.get("type") or "",
            field_type=data.get("fieldType") or "",
            description=data.get("description") or "",
            options=[PropertyOption.from_dict(o) for o in _require_list(data.get("options"), "options")],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the API wire shape."""
        result: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "fieldType": self.field_type,
            "description": self.description,
        }
        if self.options:
            result["options"] = [{"label": o.label, "value": o.value} for o in self.options]
        return result
