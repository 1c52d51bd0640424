"""Hide secrets in commands before they are logged."""

from .compose import escape_double_quoted, escape_single_quoted
from .context import ExecutionContext

REDACTED = "***REDACTED***"


def redact(command: str, secrets) -> str:
    """Replace every secret value in ``command`` for display."""
    # longest first so a secret containing another is hidden whole
    for secret in sorted(secrets, key=len, reverse=True):
        command = command.replace(secret, REDACTED)
    return command


def display_secrets(context: ExecutionContext) -> list[str]:
    """Every form a context secret can take in a composed command."""
    # a secret can appear escaped for up to three nested shells
    secrets = set()
    for secret in context.secrets():
        variants = {secret, escape_double_quoted(secret)}
        for _ in range(2):
            variants |= {escape_single_quoted(v) for v in variants}
        secrets |= variants
    return list(secrets)


def display_command(command: str, context: ExecutionContext) -> str:
    """The form of ``command`` that is safe to log."""
    return redact(command, display_secrets(context))
