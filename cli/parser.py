"""Command parser for CLI input."""

import shlex

from cli.models import (
    ClearRangeCommand,
    CommandRequest,
    DownloadCommand,
    MakeDirectoryCommand,
    MakeShareCommand,
    PropertiesCommand,
    RangesCommand,
    RemoveCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "mkshare":
        return _parse_mkshare(tokens[1:])
    elif command_name == "mkdir":
        return _parse_mkdir(tokens[1:])
    elif command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "download":
        return _parse_download(tokens[1:])
    elif command_name == "ranges":
        share, path = _parse_single_target("ranges", tokens[1:])
        return RangesCommand(share=share, remote_path=path)
    elif command_name == "clear-range":
        return _parse_clear_range(tokens[1:])
    elif command_name == "props":
        share, path = _parse_single_target("props", tokens[1:])
        return PropertiesCommand(share=share, remote_path=path)
    elif command_name == "rm":
        share, path = _parse_single_target("rm", tokens[1:])
        return RemoveCommand(share=share, remote_path=path)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _split_target(target: str) -> tuple[str, str]:
    """Split '<share>/<path>' into (share, path)."""
    share, _, path = target.strip('/').partition('/')
    if not share or not path:
        raise ParseError(f"Remote target must look like <share>/<path>, got '{target}'")
    return share, path


def _parse_int(value: str, what: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ParseError(f"{what} must be an integer, got '{value}'")
    if number < 0:
        raise ParseError(f"{what} must be non-negative, got {number}")
    return number


def _parse_single_target(name: str, args: list[str]) -> tuple[str, str]:
    if len(args) != 1:
        raise ParseError(f"{name} requires exactly 1 argument: <share>/<path>")
    return _split_target(args[0])


def _parse_mkshare(args: list[str]) -> MakeShareCommand:
    """Parse 'mkshare <share>' command."""
    if len(args) != 1:
        raise ParseError("mkshare requires exactly 1 argument: <share>")
    return MakeShareCommand(share=args[0])


def _parse_mkdir(args: list[str]) -> MakeDirectoryCommand:
    """Parse 'mkdir <share> <dir>' command."""
    if len(args) != 2:
        raise ParseError("mkdir requires exactly 2 arguments: <share> <dir>")
    share, directory = args
    return MakeDirectoryCommand(share=share, directory=directory.strip('/'))


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <local> <share>/<path> [--md5] [--parallel N]' command."""
    positional = []
    store_md5 = False
    parallelism = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--md5":
            store_md5 = True
        elif arg == "--parallel":
            if i + 1 >= len(args):
                raise ParseError("--parallel requires a number")
            parallelism = _parse_int(args[i + 1], "--parallel")
            if parallelism < 1:
                raise ParseError("--parallel must be at least 1")
            i += 1
        elif arg.startswith("--"):
            raise ParseError(f"Unknown option for upload: {arg}")
        else:
            positional.append(arg)
        i += 1

    if len(positional) != 2:
        raise ParseError("upload requires 2 arguments: <local> <share>/<path>")

    share, path = _split_target(positional[1])
    return UploadCommand(
        local_path=positional[0],
        share=share,
        remote_path=path,
        store_md5=store_md5,
        parallelism=parallelism,
    )


def _parse_range(value: str) -> tuple[int, int | None]:
    """Parse 'start-end' or 'start-' / 'start'."""
    start_text, _, end_text = value.partition('-')
    start = _parse_int(start_text, "Range start")
    end = _parse_int(end_text, "Range end") if end_text else None
    if end is not None and end < start:
        raise ParseError(f"Range end {end} is before start {start}")
    return start, end


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <share>/<path> <local> [--range start[-end]] [--no-verify]' command."""
    positional = []
    range_start = None
    range_end = None
    verify = True

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--no-verify":
            verify = False
        elif arg == "--range":
            if i + 1 >= len(args):
                raise ParseError("--range requires start[-end]")
            range_start, range_end = _parse_range(args[i + 1])
            i += 1
        elif arg.startswith("--"):
            raise ParseError(f"Unknown option for download: {arg}")
        else:
            positional.append(arg)
        i += 1

    if len(positional) != 2:
        raise ParseError("download requires 2 arguments: <share>/<path> <local>")

    share, path = _split_target(positional[0])
    return DownloadCommand(
        share=share,
        remote_path=path,
        local_path=positional[1],
        range_start=range_start,
        range_end=range_end,
        verify=verify,
    )


def _parse_clear_range(args: list[str]) -> ClearRangeCommand:
    """Parse 'clear-range <share>/<path> <start> <end>' command."""
    if len(args) != 3:
        raise ParseError("clear-range requires exactly 3 arguments: <share>/<path> <start> <end>")
    share, path = _split_target(args[0])
    start = _parse_int(args[1], "start")
    end = _parse_int(args[2], "end")
    if end < start:
        raise ParseError(f"Range end {end} is before start {start}")
    return ClearRangeCommand(share=share, remote_path=path, start=start, end=end)
