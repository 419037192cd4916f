"""Status display functionality for CLI"""

from datetime import datetime

from rich.console import Console
from rich.table import Table

from codex_oauth import CodexTokenStore


def _format_time(value) -> str:
    if not value:
        return "N/A"
    return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S UTC")


def show_token_status(storage: CodexTokenStore, console: Console) -> int:
    """
    Display Codex authentication status

    Args:
        storage: CodexTokenStore instance
        console: Rich console for output

    Returns:
        Process exit code
    """
    status = storage.get_status()

    if not status["has_tokens"]:
        console.print("[yellow]Codex is not configured. Run: codex-oauth login[/yellow]")
        return 0

    table = Table(title="Codex Authentication")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Status", "Expired" if status["is_expired"] else "Active")
    table.add_row("Email", status["email"] or "N/A")
    table.add_row("Account ID", status["account_id"] or "N/A")
    table.add_row("Token Expires", _format_time(status["expires_at"]))
    table.add_row("Time Until Expiry", status["time_until_expiry"] or "N/A")
    table.add_row("Valid", "Needs refresh" if status["needs_refresh"] else "Yes")
    table.add_row("Last Updated", _format_time(status["updated_at"]))
    table.add_row("Token File", str(storage.token_file))

    console.print(table)
    return 0
