"""Render domain errors for the condogest CLI."""

import click

from condogest.domain.errors import DomainError


def handle_domain_error(
    ctx: click.Context, error: DomainError | ValueError, exit_code: int = 1
) -> None:
    """Print ``Error: <message>`` on stderr and stop the command.

    Login uses a distinct ``exit_code`` for deactivated accounts.
    """
    click.echo(f"Error: {error}", err=True)
    ctx.exit(exit_code)
