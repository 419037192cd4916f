"""Authentication handlers for CLI"""

import asyncio

from rich.console import Console

from codex_oauth import CodexOAuthManager, DeviceAuthSession, LoginFlow, LoginResult


def _report_success(result: LoginResult, console: Console) -> None:
    console.print("[green][OK][/green] Authenticated successfully!")
    if result.email:
        console.print(f"  Account: {result.email}")
    if result.account_id:
        console.print(f"  Account ID: {result.account_id}")


def browser_login(manager: CodexOAuthManager, port: int, console: Console, flow: LoginFlow = None) -> int:
    """
    Run the browser PKCE login with a local callback listener

    Args:
        manager: OAuth manager that receives the tokens
        port: Local callback port
        console: Rich console for output
        flow: Login flow override (tests)

    Returns:
        Process exit code
    """
    flow = flow or LoginFlow(manager)

    def show_url(url: str) -> None:
        console.print("Opening browser for ChatGPT login...")
        console.print("If the browser doesn't open, visit:\n")
        console.print(f"  {url}\n", soft_wrap=True)
        console.print(f"Waiting for callback on port {port}...")

    result = asyncio.run(flow.browser_login(port, on_url=show_url))

    if not result.success:
        console.print(f"[red]Authentication failed:[/red] {result.error}")
        return 1

    _report_success(result, console)
    return 0


def device_login(manager: CodexOAuthManager, console: Console, flow: LoginFlow = None) -> int:
    """
    Run the device authorization login (headless)

    Args:
        manager: OAuth manager that receives the tokens
        console: Rich console for output
        flow: Login flow override (tests)

    Returns:
        Process exit code
    """
    flow = flow or LoginFlow(manager)

    def show_code(device: DeviceAuthSession, verification_url: str) -> None:
        console.print()
        console.print(f"  Your code: [bold]{device.user_code}[/bold]")
        console.print()
        console.print(f"  Visit: {verification_url}")
        console.print("  Enter the code above and authorize access.")
        console.print()
        console.print("Polling for authorization...")

    def show_pending() -> None:
        console.print(".", end="")

    console.print("Initiating device authorization flow...")
    result = asyncio.run(flow.device_login(on_user_code=show_code, on_pending=show_pending))
    console.print()

    if not result.success:
        console.print(f"[red]{result.error}[/red]")
        return 1

    _report_success(result, console)
    return 0


def logout(manager: CodexOAuthManager, console: Console) -> int:
    """Remove stored Codex tokens"""
    if not manager.is_configured():
        console.print("[yellow]Codex is not configured; nothing to remove.[/yellow]")
        return 0

    manager.logout()
    console.print("[green][OK][/green] Codex tokens removed.")
    return 0
