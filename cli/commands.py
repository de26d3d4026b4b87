"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.config import Config
from cli.constants import CONFIG_PATH_PARTS
from cli.models import (
    ClearRangeCommand,
    DownloadCommand,
    MakeDirectoryCommand,
    MakeShareCommand,
    PropertiesCommand,
    RangesCommand,
    RemoveCommand,
    UploadCommand,
)
from cli.transfer_cli import TransferCli

logger = get_logger(__name__)


_cli: Optional[TransferCli] = None


def get_cli() -> TransferCli:
    """
    Get or create global TransferCli instance.

    Returns:
        TransferCli instance
    """
    global _cli
    if _cli is None:
        logger.debug("Creating new TransferCli instance")
        config = Config(Path.home().joinpath(*CONFIG_PATH_PARTS))
        _cli = TransferCli(config)
    return _cli


def handle_mkshare(cmd: MakeShareCommand, cli: Optional[TransferCli] = None) -> str:
    """
    Handle 'mkshare' command.

    Args:
        cmd: MakeShareCommand with share name
        cli: Optional TransferCli for dependency injection (testing)

    Returns:
        Success or error message
    """
    if cli is None:
        cli = get_cli()
    return cli.make_share(cmd.share)


def handle_mkdir(cmd: MakeDirectoryCommand, cli: Optional[TransferCli] = None) -> str:
    if cli is None:
        cli = get_cli()
    return cli.make_directory(cmd.share, cmd.directory)


def handle_upload(cmd: UploadCommand, cli: Optional[TransferCli] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with local path, remote target and options
        cli: Optional TransferCli for dependency injection (testing)

    Returns:
        Success or error message with transfer summary
    """
    logger.info(f"Executing upload command: {cmd.local_path} -> {cmd.share}/{cmd.remote_path}")
    if cli is None:
        cli = get_cli()
    result = cli.upload(cmd.local_path, cmd.share, cmd.remote_path, cmd.store_md5, cmd.parallelism)
    logger.debug("Upload command completed")
    return result


def handle_download(cmd: DownloadCommand, cli: Optional[TransferCli] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with remote target, local path and range
        cli: Optional TransferCli for dependency injection (testing)

    Returns:
        Success or error message with transfer summary
    """
    logger.info(f"Executing download command: {cmd.share}/{cmd.remote_path} -> {cmd.local_path}")
    if cli is None:
        cli = get_cli()
    result = cli.download(
        cmd.share, cmd.remote_path, cmd.local_path, cmd.range_start, cmd.range_end, cmd.verify
    )
    logger.debug("Download command completed")
    return result


def handle_ranges(cmd: RangesCommand, cli: Optional[TransferCli] = None) -> str:
    if cli is None:
        cli = get_cli()
    return cli.list_ranges(cmd.share, cmd.remote_path)


def handle_clear_range(cmd: ClearRangeCommand, cli: Optional[TransferCli] = None) -> str:
    if cli is None:
        cli = get_cli()
    return cli.clear_range(cmd.share, cmd.remote_path, cmd.start, cmd.end)


def handle_props(cmd: PropertiesCommand, cli: Optional[TransferCli] = None) -> str:
    if cli is None:
        cli = get_cli()
    return cli.show_properties(cmd.share, cmd.remote_path)


def handle_rm(cmd: RemoveCommand, cli: Optional[TransferCli] = None) -> str:
    if cli is None:
        cli = get_cli()
    return cli.remove(cmd.share, cmd.remote_path)
