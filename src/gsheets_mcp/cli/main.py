"""Command-line interface for mcp-google-sheets."""

import asyncio
import sys

import click

from gsheets_mcp.__version__ import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mcp-google-sheets")
def main() -> None:
    """Google Sheets MCP Server - Connect an agent to Google Sheets.

    Provides 8 tools: read, write, append and clear ranges, create
    spreadsheets, inspect spreadsheet metadata, add sheets, and send raw
    batch updates.
    """
    pass


def _load_config_or_exit():
    from gsheets_mcp.config import ConfigError, load_config

    try:
        return load_config()
    except ConfigError as e:
        click.echo(f"❌ Error: {e}", err=True)
        click.echo("", err=True)
        click.echo("Set environment variables:", err=True)
        click.echo("  export GOOGLE_OAUTH_CLIENT_ID='your-client-id'", err=True)
        click.echo("  export GOOGLE_OAUTH_CLIENT_SECRET='your-client-secret'", err=True)
        sys.exit(1)


@main.command()
@click.option(
    "--open-browser/--no-open-browser",
    default=True,
    help="Open the consent page in a local browser",
)
def setup(open_browser: bool) -> None:
    """Set up Google OAuth authentication.

    This will:
    1. Print (and optionally open) the Google consent URL
    2. Wait for the redirect on the local callback listener
    3. Store the token at ~/.config/mcp-google-sheets/token.json

    Requires GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET, or an
    oauth_credentials.json client secrets file.
    """
    from gsheets_mcp.auth import AuthError, AuthorizationFlow, OAuthManager

    config = _load_config_or_exit()
    manager = OAuthManager(
        config,
        flow_factory=lambda cfg: AuthorizationFlow(cfg, open_browser=open_browser),
    )

    if manager.has_valid_tokens():
        click.echo("✓ Already authenticated!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")

        if not click.confirm("Re-authenticate?"):
            return

    click.echo("Starting OAuth authentication flow...")
    click.echo("")

    try:
        asyncio.run(manager.authenticate())
    except AuthError as e:
        click.echo(f"❌ Authentication failed: {e}")
        sys.exit(1)

    click.echo("✓ Authentication successful!")
    click.echo(f"Token stored at: {manager.token_path}")


@main.command()
def mcp() -> None:
    """Start the MCP server on stdio.

    If no token is stored yet, the browser authorization flow runs first
    and the consent URL is printed to stderr.
    """
    from gsheets_mcp.auth import AuthError, OAuthManager
    from gsheets_mcp.server import GoogleSheetsServer

    config = _load_config_or_exit()
    server = GoogleSheetsServer(OAuthManager(config))

    try:
        click.echo("Starting Google Sheets MCP server...", err=True)
        asyncio.run(server.run())
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except AuthError as e:
        click.echo(f"❌ Failed to obtain credentials: {e}", err=True)
        sys.exit(1)


@main.command()
def doctor() -> None:
    """Check configuration and authentication status."""
    from gsheets_mcp.auth import OAuthManager, TokenStatus

    click.echo("Google Sheets MCP Status:")
    click.echo("")

    config = _load_config_or_exit()
    click.echo("Configuration:")
    click.echo(f"  ✓ OAuth client: {config.client_id}")
    click.echo(f"  Redirect URI: {config.redirect_uri}")
    click.echo("")

    manager = OAuthManager(config)
    status, record = manager.get_status()

    click.echo("Authentication:")
    click.echo(f"  Token file: {manager.token_path}")

    if status == TokenStatus.MISSING:
        click.echo("  ❌ Not authenticated")
        click.echo("")
        click.echo("Run 'mcp-google-sheets setup' to authenticate.")
        sys.exit(1)
    elif status == TokenStatus.INVALID:
        click.echo("  ❌ Token file corrupted")
        click.echo("")
        click.echo(f"Delete {manager.token_path} and run 'mcp-google-sheets setup'.")
        sys.exit(1)
    elif status == TokenStatus.EXPIRED:
        click.echo("  ⚠️  Token expired (will refresh automatically on use)")
    else:
        click.echo("  ✓ Authenticated")
        if record and record.expiry:
            click.echo(f"  Token expires: {record.expiry.strftime('%Y-%m-%d %H:%M:%S %Z')}")

    click.echo("")
    click.echo("✓ Ready to use!")


if __name__ == "__main__":
    main()
