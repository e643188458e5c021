"""ANSI colour helpers for terminal output."""

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
MAGENTA = "\033[35m"
BOLD_CYAN = "\033[1;36m"
BOLD_GREEN = "\033[1;32m"


def header(label: str, count: int) -> str:
    """A section banner with an item count."""
    return f"\n{BOLD_CYAN}━━━ {label} ({count}) ━━━{RESET}\n"


def section(name: str) -> str:
    """A bold bracketed section name."""
    return f"  {BOLD}[{name}]{RESET}"


def item(name: str) -> str:
    """A bulleted list item."""
    return f"    {DIM}•{RESET} {name}"


def numbered(n: int, name: str, extra: str = "") -> str:
    """A numbered entry, with optional dimmed extra text."""
    line = f"  {DIM}{n}.{RESET} {BOLD}{name}{RESET}"
    if extra:
        line += f" {DIM}{extra}{RESET}"
    return line


def success(msg: str) -> str:
    return f"{GREEN}✓{RESET} {msg}"


def warn(msg: str) -> str:
    return f"{YELLOW}⚠{RESET} {msg}"


def err(msg: str) -> str:
    return f"{RED}✗{RESET} {msg}"


def arrow(msg: str) -> str:
    return f"{CYAN}→{RESET} {msg}"


def done_msg(msg: str) -> str:
    return f"\n{BOLD_GREEN}✓ {msg}{RESET}\n"


def err_msg(msg: str) -> str:
    return f"\n{RED}✗ {msg}{RESET}\n"