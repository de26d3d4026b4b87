"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "mkshare", "mkdir", "upload", "download", "ranges", "clear-range",
    "props", "rm", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#F45935 bold",
        "command": "#0088ff bold",
    }
)

RED_ORANGE = "\033[38;2;244;89;53m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{RED_ORANGE}
 ██████╗ ███████╗██████╗  ██████╗██╗      ██████╗ ██╗   ██╗██████╗
 ██╔══██╗██╔════╝██╔══██╗██╔════╝██║     ██╔═══██╗██║   ██║██╔══██╗
 ██████╔╝█████╗  ██║  ██║██║     ██║     ██║   ██║██║   ██║██║  ██║
 ██╔══██╗██╔══╝  ██║  ██║██║     ██║     ██║   ██║██║   ██║██║  ██║
 ██║  ██║███████╗██████╔╝╚██████╗███████╗╚██████╔╝╚██████╔╝██████╔╝
 ╚═╝  ╚═╝╚══════╝╚═════╝  ╚═════╝╚══════╝ ╚═════╝  ╚═════╝ ╚═════╝
{RESET}"""

WELCOME_TITLE = "RedCloud Transfer - chunked file transfer client"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "transfer> "

CONFIG_PATH_PARTS = (".redcloud", "transfer.json")

HELP_TEXT = """Available commands:
  mkshare <share>                                    Create a share
  mkdir <share> <dir>                                Create a directory (parent must exist)
  upload <local> <share>/<path> [--md5] [--parallel N]
                                                     Upload a local file, optionally storing its MD5
  download <share>/<path> <local> [--range start[-end]] [--no-verify]
                                                     Download a file or a byte range of it
  ranges <share>/<path>                              List written byte ranges
  clear-range <share>/<path> <start> <end>           Zero a byte range
  props <share>/<path>                               Show file properties
  rm <share>/<path>                                  Delete a file
  clear                                              Clear screen and redisplay welcome message
  help                                               Show this help
  exit                                               Exit REPL

Examples:
  mkshare photos
  mkdir photos 2024
  upload ./beach.jpg photos/2024/beach.jpg --md5 --parallel 4
  download photos/2024/beach.jpg ./copy.jpg
  download photos/2024/beach.jpg ./head.bin --range 0-1023
  ranges photos/2024/beach.jpg"""
