"""Custom Click command with automatic help display on usage errors.

Unknown flags and bad values print the error followed by the full usage
text, then exit with Click's usage error code (2).
"""

import sys
from typing import Any

import click

EXIT_INTERRUPTED = 130


class PrepareCommand(click.Command):
    """Click command that shows its help when the command line is wrong."""

    def main(self, *args: Any, **kwargs: Any) -> Any:
        """Run non-standalone so usage errors and aborts can be handled here."""
        kwargs["standalone_mode"] = False
        try:
            return super().main(*args, **kwargs)
        except (
            click.exceptions.UsageError,
            click.exceptions.BadParameter,
            click.exceptions.MissingParameter,
        ) as e:
            click.echo(f"Error: {e.format_message()}", err=True)
            ctx = e.ctx if hasattr(e, "ctx") and e.ctx else None
            if ctx:
                click.echo("", err=True)
                click.echo(ctx.get_help(), err=True)
            sys.exit(e.exit_code if hasattr(e, "exit_code") else 2)
        except click.exceptions.Abort as e:
            click.echo("Aborted!", err=True)
            sys.exit(EXIT_INTERRUPTED if isinstance(e.__cause__, KeyboardInterrupt) else 1)
        except click.exceptions.ClickException as e:
            e.show()
            sys.exit(e.exit_code)
