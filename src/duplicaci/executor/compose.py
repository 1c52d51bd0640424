"""Command composition.

A duplicacy invocation is turned into one shell string by a fixed pipeline
of pure stages::

    base -> cd -> exports -> container wrap -> remote wrap

Every stage takes and returns a command string. The container and remote
stages are also used on their own for commands that are not duplicacy
invocations (binary discovery, stats files).
"""

from .context import ExecutionContext

SSH_OPTIONS = ("-o", "StrictHostKeyChecking=no", "-o", "LogLevel=ERROR")


def escape_double_quoted(value: str) -> str:
    """Escape a value for use inside a double-quoted shell string."""
    # backslash must go first
    for char in ("\\", '"', "$", "`"):
        value = value.replace(char, "\\" + char)
    return value


def escape_single_quoted(value: str) -> str:
    """Escape a value for use inside a single-quoted shell string."""
    return value.replace("'", "'\"'\"'")


def storage_env_name(storage: str, suffix: str) -> str:
    """Environment variable duplicacy reads for a named storage."""
    return f"DUPLICACY_{storage.replace('-', '_').upper()}_{suffix}"


def build_base(binary: str, args) -> str:
    return " ".join([binary, *args])


def with_workdir(command: str, context: ExecutionContext) -> str:
    workdir = context.working_directory
    if not workdir:
        return command
    return f"cd {workdir} && {command}"


def export_statements(context: ExecutionContext, storage: str = "") -> list[str]:
    """Build the export statements for the storage credentials.

    The token export comes first, then the generic password, then the
    storage-specific password.
    """
    exports = []
    if context.gcd_token and storage:
        token = escape_double_quoted(context.gcd_token)
        exports.append(f'export {storage_env_name(storage, "GCD_TOKEN")}="{token}"')

    password = context.resolve_password(storage)
    if password:
        escaped = escape_double_quoted(password)
        exports.append(f'export DUPLICACY_PASSWORD="{escaped}"')
        if storage:
            exports.append(
                f'export {storage_env_name(storage, "PASSWORD")}="{escaped}"'
            )
    return exports


def with_exports(command: str, exports: list[str]) -> str:
    if not exports:
        return command
    return " && ".join([*exports, command])


def wrap_container(
    command: str, context: ExecutionContext, needs_shell: bool = True
) -> str:
    """Run ``command`` inside the configured container, if any.

    Compound commands need an interpreting shell inside the container;
    simple ones are passed to ``exec`` as they are.
    """
    if not context.container:
        return command
    prefix = f"{context.container_runtime} exec {context.container}"
    if needs_shell:
        return f"{prefix} sh -c '{escape_single_quoted(command)}'"
    return f"{prefix} {command}"


def wrap_remote(command: str, context: ExecutionContext) -> str:
    """Run ``command`` on the configured remote host, if any."""
    if not context.ssh_host:
        return command
    options = " ".join(SSH_OPTIONS)
    command = f"ssh {options} {context.ssh_host} '{escape_single_quoted(command)}'"
    if context.ssh_password:
        password = escape_single_quoted(context.ssh_password)
        command = f"sshpass -p '{password}' {command}"
    return command


def compose_command(
    context: ExecutionContext, binary: str, args, storage: str = ""
) -> str:
    """Compose the full shell command for one duplicacy invocation.

    Args:
        context: Execution context supplying the wrapping layers
        binary: Resolved duplicacy binary path
        args: Arguments passed to duplicacy
        storage: Storage name used for credential lookup (may be empty)

    Returns:
        A single string to be interpreted by a POSIX shell
    """
    command = with_workdir(build_base(binary, args), context)
    exports = export_statements(context, storage)
    command = with_exports(command, exports)
    needs_shell = bool(context.working_directory or exports)
    command = wrap_container(command, context, needs_shell=needs_shell)
    return wrap_remote(command, context)
