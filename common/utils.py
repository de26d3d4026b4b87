"""Formatting helpers shared by the transfer engine and the CLI."""


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.
    
    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).
    
    Args:
        size_bytes: File size in bytes
        
    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    
    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0
    
    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    
    return f"{size:.2f} PiB"


def format_speed(bytes_per_second: float) -> str:
    """Format a transfer rate as '<size>/s'."""
    return f"{format_file_size(int(bytes_per_second))}/s"


def split_remote_path(path: str) -> tuple[str, str]:
    """
    Split 'dir/sub/name' into ('dir/sub', 'name').

    A bare name lives in the share root, returned as ('', name).
    """
    path = path.strip('/')
    if '/' not in path:
        return '', path
    directory, name = path.rsplit('/', 1)
    return directory, name


def join_remote_path(directory: str, name: str) -> str:
    directory = directory.strip('/')
    return f"{directory}/{name}" if directory else name
