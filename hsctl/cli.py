"""
hsctl - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- Credential and config-file resolution
- Table formatting for human output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import os
import platform
import sys
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from hsctl import __version__
from hsctl.core.client import CLIError, ValidationError
from hsctl.core.types import Contact, Property, PropertyValue
from hsctl.sdk import DEFAULT_LIMIT, HubSpotClient

DEFAULT_CONFIG_PATH = Path.home() / ".hsctl.env"


# =============================================================================
# Configuration
# =============================================================================


def load_config(path: str | Path | None) -> dict[str, str]:
    """
    Read settings from a dotenv-style config file.

    An explicit path that does not exist is an error; the default path is
    optional.
    """
    if path is None:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.is_file():
            return {}
    else:
        config_path = Path(path).expanduser()
        if not config_path.is_file():
            raise ValidationError(f"Config file not found: {config_path}")

    print(f"Using config file: {config_path}", file=sys.stderr)
    return {k: v for k, v in dotenv_values(config_path).items() if v is not None}


def resolve_setting(flag_value: str | None, name: str, config: dict[str, str]) -> str | None:
    """Resolve a setting: command-line flag, then environment, then config file."""
    return flag_value or os.environ.get(name) or config.get(name) or None


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG with --verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: CLIError) -> None:
    """Print error to stderr and exit."""
    print(json.dumps(error.to_dict(), default=str), file=sys.stderr)
    sys.exit(1)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v).ljust(w) for v, w in zip(row, widths)))


def print_contacts(contacts: list[Contact], output_format: str) -> None:
    """Print contacts as a table or JSON."""
    if output_format == "json":
        json_output([c.to_dict() for c in contacts], pretty=True)
        return

    table_output(
        ["ID", "Email", "First Name", "Last Name", "Lifecycle Stage"],
        [
            [
                c.id,
                c.get_str("email"),
                c.get_str("firstname"),
                c.get_str("lastname"),
                c.get_str("lifecyclestage"),
            ]
            for c in contacts
        ],
        [20, 40, 20, 20, 20],
    )
    print(f"\nTotal: {len(contacts)} contact(s)")


def print_properties(properties: list[Property], output_format: str) -> None:
    """Print property definitions as a table or JSON."""
    if output_format == "json":
        json_output([p.to_dict() for p in properties], pretty=True)
        return

    table_output(
        ["Name", "Label", "Type", "Field Type"],
        [[p.name, p.label, p.type, p.field_type] for p in properties],
        [30, 30, 20, 15],
    )
    print(f"\nTotal: {len(properties)} property(ies)")


# =============================================================================
# Input Helpers
# =============================================================================


def parse_property_pairs(text: str) -> dict[str, PropertyValue]:
    """Parse "key1=value1,key2=value2" into a property map."""
    properties: dict[str, PropertyValue] = {}
    for pair in text.split(","):
        if not pair.strip():
            continue
        if "=" not in pair:
            raise ValidationError(f"Invalid property '{pair.strip()}', expected key=value")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise ValidationError(f"Invalid property '{pair.strip()}', missing key")
        properties[key] = value.strip()
    return properties


def collect_properties(args: argparse.Namespace) -> dict[str, PropertyValue]:
    """Build the property map for create/update from command-line flags."""
    properties: dict[str, PropertyValue] = {}
    for flag, name in (
        ("email", "email"),
        ("firstname", "firstname"),
        ("lastname", "lastname"),
        ("lifecycle_stage", "lifecyclestage"),
    ):
        value = getattr(args, flag, None)
        if value:
            properties[name] = value

    if args.properties:
        properties.update(parse_property_pairs(args.properties))
    return properties


def resolve_limit(limit: int) -> int:
    """Treat a zero limit as the default page size; negative limits are rejected."""
    if limit < 0:
        raise ValidationError(f"limit must not be negative, got {limit}")
    return limit or DEFAULT_LIMIT


def confirm(prompt: str) -> bool:
    """Ask a yes/no question on the terminal; anything but y/yes is no."""
    try:
        response = input(prompt)
    except EOFError:
        return False
    return response.strip().lower() in ("y", "yes")


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_contacts_list(client: HubSpotClient, args: argparse.Namespace) -> None:
    """List contacts, optionally following every page."""
    try:
        limit = resolve_limit(args.limit)
        if args.all:
            contacts = client.contacts.list_all(limit=limit)
        else:
            contacts = client.contacts.list(limit=limit).results
        print_contacts(contacts, args.format)
    except CLIError as e:
        error_output(e)


def cmd_contacts_get(client: HubSpotClient, args: argparse.Namespace) -> None:
    """Get a contact by ID."""
    try:
        contact = client.contacts.get(args.contact_id)
        print_contacts([contact], args.format)
    except CLIError as e:
        error_output(e)


def cmd_properties_list(client: HubSpotClient, args: argparse.Namespace) -> None:
    """List contact property definitions."""
    try:
        print_properties(client.properties.list(), args.format)
    except CLIError as e:
        error_output(e)


def cmd_contacts_create(client: HubSpotClient, args: argparse.Namespace) -> None:
    """Create a contact."""
    try:
        properties = collect_properties(args)
        if not properties:
            raise ValidationError("at least one property is required to create a contact")

        contact = client.contacts.create(properties)
        print("Contact created successfully:")
        print_contacts([contact], "table")
    except CLIError as e:
        error_output(e)


def cmd_contacts_update(client: HubSpotClient, args: argparse.Namespace) -> None:
    """Update a contact's properties."""
    try:
        properties = collect_properties(args)
        if not properties:
            raise ValidationError("at least one property is required to update a contact")

        contact = client.contacts.update(args.contact_id, properties)
        print("Contact updated successfully:")
        print_contacts([contact], "table")
    except CLIError as e:
        error_output(e)


def cmd_contacts_delete(client: HubSpotClient, args: argparse.Namespace) -> None:
    """Delete a contact, asking for confirmation unless --force is given."""
    try:
        if not args.force:
            contact = client.contacts.get(args.contact_id)
            email = contact.get_str("email") or "N/A"
            if not confirm(f"Are you sure you want to delete contact {args.contact_id} (email: {email})? [y/N]: "):
                print("Deletion cancelled.")
                return

        client.contacts.delete(args.contact_id)
        print(f"Contact {args.contact_id} deleted successfully.")
    except CLIError as e:
        error_output(e)


def cmd_contacts_query(client: HubSpotClient, args: argparse.Namespace) -> None:
    """Search contacts."""
    try:
        page = client.contacts.search(args.query, limit=resolve_limit(args.limit))
        print_contacts(page.results, args.format)
    except CLIError as e:
        error_output(e)


def cmd_version(_client: HubSpotClient | None, _args: argparse.Namespace) -> None:
    """Print version and platform information."""
    print(f"hsctl version {__version__}")
    print(f"Python Version: {platform.python_version()}")
    print(f"Platform: {sys.platform}/{platform.machine()}")


# =============================================================================
# Main CLI
# =============================================================================


def _add_format_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        "-f",
        default="table",
        choices=["table", "json"],
        help="Output format (table, json)",
    )


def _add_property_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--email", "-e", help="Email address")
    parser.add_argument("--firstname", "-f", help="First name")
    parser.add_argument("--lastname", "-l", help="Last name")
    parser.add_argument("--lifecycle-stage", help="Lifecycle stage (e.g., lead, customer)")
    parser.add_argument("--properties", "-p", help="Additional properties (format: key1=value1,key2=value2)")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hsctl",
        description="hsctl - A CLI tool for managing HubSpot contacts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials:
  --api-key flag, then HUBSPOT_API_KEY env var, then HUBSPOT_API_KEY
  in the config file (default ~/.hsctl.env).

Examples:
  hsctl contacts list --all --format json
  hsctl contacts create --email alice@example.com --firstname Alice
  hsctl contacts query "lifecyclestage=customer"
  hsctl contacts delete 12345 --force
""",
    )
    parser.add_argument("--api-key", help="HubSpot API key (or set HUBSPOT_API_KEY env var)")
    parser.add_argument("--config", help=f"Config file (default is {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--base-url", help="API base URL (or set HUBSPOT_BASE_URL env var)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Contacts ==========
    contacts = subparsers.add_parser("contacts", help="Manage HubSpot contacts")
    contacts.set_defaults(func=lambda _c, _a: contacts.print_help())
    contacts_sub = contacts.add_subparsers(dest="subcommand")

    c_list = contacts_sub.add_parser("list", help="List contacts")
    c_list.add_argument("--limit", "-l", type=int, default=DEFAULT_LIMIT, help="Maximum number of contacts per page")
    c_list.add_argument("--all", "-a", action="store_true", help="Retrieve all contacts (paginate through all pages)")
    _add_format_flag(c_list)
    c_list.set_defaults(func=cmd_contacts_list)

    c_get = contacts_sub.add_parser("get", help="Get a contact")
    c_get.add_argument("contact_id", help="Contact ID")
    _add_format_flag(c_get)
    c_get.set_defaults(func=cmd_contacts_get)

    c_props = contacts_sub.add_parser("properties", help="List all contact properties")
    _add_format_flag(c_props)
    c_props.set_defaults(func=cmd_properties_list)

    c_create = contacts_sub.add_parser("create", help="Create a new contact")
    _add_property_flags(c_create)
    c_create.set_defaults(func=cmd_contacts_create)

    c_update = contacts_sub.add_parser("update", help="Update a contact")
    c_update.add_argument("contact_id", help="Contact ID")
    _add_property_flags(c_update)
    c_update.set_defaults(func=cmd_contacts_update)

    c_delete = contacts_sub.add_parser("delete", help="Delete a contact")
    c_delete.add_argument("contact_id", help="Contact ID")
    c_delete.add_argument("--force", action="store_true", help="Skip confirmation prompt")
    c_delete.set_defaults(func=cmd_contacts_delete)

    c_query = contacts_sub.add_parser("query", help="Search for contacts")
    c_query.add_argument("query", help='Search query: "property=value" or a value to match in email')
    c_query.add_argument("--limit", "-l", type=int, default=DEFAULT_LIMIT, help="Maximum number of results")
    _add_format_flag(c_query)
    c_query.set_defaults(func=cmd_contacts_query)

    # ========== Version ==========
    version = subparsers.add_parser("version", help="Print version information")
    version.set_defaults(func=cmd_version)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    configure_logging(args.verbose)

    # Help and version need no credentials
    if args.command == "version" or (args.command == "contacts" and not args.subcommand):
        args.func(None, args)
        return

    try:
        config = load_config(args.config)
        api_key = resolve_setting(args.api_key, "HUBSPOT_API_KEY", config)
        if not api_key:
            raise ValidationError("API key is required. Set HUBSPOT_API_KEY env var or use --api-key flag")
        base_url = resolve_setting(args.base_url, "HUBSPOT_BASE_URL", config)
    except CLIError as e:
        error_output(e)

    client = HubSpotClient(api_key=api_key, base_url=base_url)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
