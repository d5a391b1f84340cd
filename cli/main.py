#!/usr/bin/env python3
"""
ComplaintDesk CLI - Main Entry Point

Usage:
    complaintdesk signup                      # Create an account
    complaintdesk login                       # Sign in
    complaintdesk list                        # Your complaints (all, for admins)
    complaintdesk new                         # File a complaint
    complaintdesk status ID "In Progress"     # Move a complaint (admins)
    complaintdesk --help                      # Show help
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from cli.auth import SessionStore
from cli.client import APIError, ComplaintAPI, NotAuthenticatedError, SessionExpiredError
from cli.config import CLIConfig


CATEGORIES = ["Technical", "Billing", "Service", "Product", "Other"]
STATUSES = ["Pending", "In Progress", "Resolved"]

STATUS_STYLES = {
    "Pending": "yellow",
    "In Progress": "cyan",
    "Resolved": "green",
}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="complaintdesk",
        description="ComplaintDesk - file and track complaints from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  complaintdesk signup                         Create an account
  complaintdesk login                          Login to your account
  complaintdesk new -t "Router down" -c Technical -d "No signal since Monday"
  complaintdesk edit ID --title "New title"    Change your complaint
  complaintdesk status ID Resolved             Admins only
  complaintdesk delete ID                      Remove a complaint
        """
    )

    parser.add_argument(
        "--server-url",
        type=str,
        default=None,
        help="Backend API URL (default: $COMPLAINTDESK_API_URL or http://localhost:8000/api/v1)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    for name, help_text in (("signup", "Create an account"), ("login", "Login to ComplaintDesk")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--email", "-e", help="Account email")
        sub.add_argument("--password", "-p", help="Password (prompted when omitted)")

    subparsers.add_parser("logout", help="Logout from ComplaintDesk")
    subparsers.add_parser("whoami", help="Show current account")
    subparsers.add_parser("list", help="List complaints")

    show_parser = subparsers.add_parser("show", help="Show one complaint")
    show_parser.add_argument("id", help="Complaint ID")

    new_parser = subparsers.add_parser("new", help="File a complaint")
    new_parser.add_argument("--title", "-t", help="Short title (max 100 characters)")
    new_parser.add_argument("--description", "-d", help="What happened")
    new_parser.add_argument("--category", "-c", choices=CATEGORIES, help="Category")

    edit_parser = subparsers.add_parser("edit", help="Edit a complaint")
    edit_parser.add_argument("id", help="Complaint ID")
    edit_parser.add_argument("--title", "-t", help="New title")
    edit_parser.add_argument("--description", "-d", help="New description")
    edit_parser.add_argument("--category", "-c", choices=CATEGORIES, help="New category")
    edit_parser.add_argument("--status", "-s", choices=STATUSES, help="New status (admins only)")

    status_parser = subparsers.add_parser("status", help="Change complaint status (admins)")
    status_parser.add_argument("id", help="Complaint ID")
    status_parser.add_argument("status", choices=STATUSES, help="New status")

    delete_parser = subparsers.add_parser("delete", help="Delete a complaint")
    delete_parser.add_argument("id", help="Complaint ID")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    return parser


# ========== Rendering ==========

def _status_text(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def _date(value: Optional[str]) -> str:
    return (value or "")[:10]


def render_complaints(console: Console, complaints: List[Dict[str, Any]], show_owner: bool) -> None:
    if not complaints:
        console.print("[dim]No complaints found.[/dim]")
        return

    table = Table(title=f"Complaints ({len(complaints)})", show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Category")
    table.add_column("Status")
    if show_owner:
        table.add_column("Owner")
    table.add_column("Created")

    for c in complaints:
        row = [c["id"], c["title"], c["category"], _status_text(c["status"])]
        if show_owner:
            row.append(c.get("owner_email") or c.get("owner_id", ""))
        row.append(_date(c.get("created_at")))
        table.add_row(*row)

    console.print(table)


def render_complaint(console: Console, c: Dict[str, Any]) -> None:
    body = (
        f"[bold]{c['title']}[/bold]\n\n"
        f"{c['description']}\n\n"
        f"Category: {c['category']}\n"
        f"Status:   {_status_text(c['status'])}\n"
        f"Owner:    {c.get('owner_email') or c.get('owner_id', '')}\n"
        f"Created:  {c.get('created_at', '')}\n"
        f"Updated:  {c.get('updated_at', '')}"
    )
    console.print(Panel(body, title=f"Complaint {c['id']}", border_style="cyan"))


def render_account(console: Console, user: Dict[str, Any]) -> None:
    role = user.get("role", "user")
    console.print(Panel(
        f"Email: [bold]{user.get('email', '')}[/bold]\n"
        f"Role:  {'[magenta]admin[/magenta]' if role == 'admin' else role}\n"
        f"ID:    {user.get('id', '')}",
        title="Account",
        border_style="green",
    ))


# ========== Commands ==========

def _credentials(args: argparse.Namespace) -> tuple:
    email = args.email or Prompt.ask("Email")
    password = args.password or Prompt.ask("Password", password=True)
    return email, password


async def run_command(args: argparse.Namespace, api: ComplaintAPI, console: Console) -> int:
    """Dispatch one subcommand; returns the process exit code"""
    command = args.command

    if command in ("signup", "login"):
        email, password = _credentials(args)
        if command == "signup":
            user = await api.signup(email, password)
            console.print(f"[green]✓ Account created for {user['email']}[/green]")
        else:
            user = await api.login(email, password)
            console.print(f"[green]✓ Logged in as {user['email']}[/green]")
        return 0

    if command == "logout":
        if not api.session.is_authenticated:
            console.print("[dim]Not logged in.[/dim]")
            return 0
        await api.logout()
        console.print("[green]Logged out successfully[/green]")
        return 0

    if command == "whoami":
        render_account(console, await api.profile())
        return 0

    if command == "list":
        complaints = await api.list_complaints()
        show_owner = api.session.session is not None and api.session.session.is_admin
        render_complaints(console, complaints, show_owner=show_owner)
        return 0

    if command == "show":
        render_complaint(console, await api.get_complaint(args.id))
        return 0

    if command == "new":
        title = args.title or Prompt.ask("Title")
        description = args.description or Prompt.ask("Description")
        category = args.category or Prompt.ask("Category", choices=CATEGORIES, default="Other")
        complaint = await api.create_complaint(title, description, category)
        console.print(f"[green]✓ Complaint filed:[/green] {complaint['id']}")
        return 0

    if command == "edit":
        fields = {
            "title": args.title,
            "description": args.description,
            "category": args.category,
            "status": args.status,
        }
        if all(v is None for v in fields.values()):
            console.print("[yellow]Nothing to change. Pass --title, --description, --category or --status.[/yellow]")
            return 1
        render_complaint(console, await api.update_complaint(args.id, **fields))
        return 0

    if command == "status":
        complaint = await api.update_status(args.id, args.status)
        console.print(f"[green]✓ {complaint['id']} is now {_status_text(complaint['status'])}[/green]")
        return 0

    if command == "delete":
        if not args.yes and not Confirm.ask(f"Delete complaint {args.id}?", default=False):
            console.print("[dim]Cancelled.[/dim]")
            return 1
        result = await api.delete_complaint(args.id)
        console.print(f"[green]✓ {result.get('message', 'Complaint removed')}[/green]")
        return 0

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    console = Console()
    config = CLIConfig.load_default()
    if args.server_url:
        config.api_base_url = args.server_url.rstrip("/")

    session = SessionStore(config.credentials_path)
    api = ComplaintAPI(config, session)

    try:
        return asyncio.run(run_command(args, api, console))
    except NotAuthenticatedError:
        console.print("\n[red]✗ Authentication required[/red]")
        console.print("Please login first:  [cyan]complaintdesk login[/cyan]")
        return 1
    except SessionExpiredError as e:
        console.print(f"\n[red]✗ {e.message}[/red]")
        console.print("Run [cyan]complaintdesk login[/cyan] to start a new session.")
        return 1
    except APIError as e:
        label = f" ({e.status_code})" if e.status_code else ""
        console.print(f"[red]✗ Error{label}: {e.message}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
