"""CLI constants and configuration."""

from pathlib import Path

from prompt_toolkit.styles import Style

COMMANDS = ["create-store", "list", "insert", "get", "delete", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#3AAA35 bold",
        "command": "#0088ff bold",
    }
)

CONFIG_PATH = Path.home() / ".dlfilestore" / "config.json"

GREEN = "\033[38;2;58;170;53m"
RESET = "\033[0m"

LOGO = f"""{GREEN}
 ██████╗ ██╗     ███████╗███████╗
 ██╔══██╗██║     ██╔════╝██╔════╝
 ██║  ██║██║     █████╗  ███████╗
 ██║  ██║██║     ██╔══╝  ╚════██║
 ██████╔╝███████╗██║     ███████║
 ╚═════╝ ╚══════╝╚═╝     ╚══════╝
{RESET}"""

WELCOME_TITLE = "DLFS - Data Layer File Store"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "dlfs> "

HELP_TEXT = """Available commands:
  create-store [fee]                          Create a new data store
  list <store_id>                             List files stored in a data store
  insert <store_id> <file_path> [fee]         Insert (or resume inserting) a file
  get <store_id> <file_name> [output_path]    Retrieve a file (defaults to ./<file_name>)
  delete <store_id> <file_name> [fee]         Delete a file's key
  clear                                       Clear screen and redisplay welcome message
  help                                        Show this help
  exit                                        Exit REPL

Press Ctrl-C during insert or get to cancel. An interrupted insert resumes
where it stopped when the same file is inserted again.
Examples:
  create-store
  insert 8f3a...c2 videos/intro.mp4
  list 8f3a...c2
  get 8f3a...c2 intro.mp4 downloads/intro.mp4
  delete 8f3a...c2 intro.mp4"""
