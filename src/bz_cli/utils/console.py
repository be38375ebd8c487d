"""Console utility functions for formatting and output.

Everything is written to stderr so the stdout of a wrapped command stays clean.
"""

import click
import os
from typing import Optional, Any

# Rich library imports with fallbacks
try:
    from rich.console import Console
    from rich.panel import Panel
    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False
    Console = Any
    Panel = Any

# Colorama imports for fallback
try:
    from colorama import Fore, Style, init
    init(autoreset=True)
    COLORAMA_AVAILABLE = True
except ImportError:
    COLORAMA_AVAILABLE = False
    Fore = None
    Style = None


# Status symbols for consistent iconography
STATUS_SYMBOLS = {
    'success': '✨',
    'running': '🚀',
    'download': '📦',
    'info': '💡',
    'warning': '⚠️',
    'error': '❌',
    'check': '✅',
    'tree': '🌳',
    'lock': '🔒',
    'debug': '🔍',
}

_console = None


def _get_console() -> Optional[Any]:
    """Get the shared Rich stderr console if available."""
    global _console
    if _console is None and RICH_AVAILABLE:
        try:
            _console = Console(stderr=True)
        except Exception:
            _console = None
    return _console


def is_debug_enabled() -> bool:
    """Debug output is on when BZ_DEBUG (or DEBUG) is set to a truthy value."""
    value = os.environ.get("BZ_DEBUG") or os.environ.get("DEBUG") or ""
    return value not in ("", "0") and value.lower() != "false"


def _rich_echo(message: str, color: str = "white", style: str = None, bold: bool = False, symbol: str = None):
    """Echo message with Rich formatting or colorama fallback."""
    if style is not None:
        color = style

    if symbol and symbol in STATUS_SYMBOLS:
        message = f"{STATUS_SYMBOLS[symbol]} {message}"

    console = _get_console()
    if console:
        try:
            style_str = f"bold {color}" if bold else color
            console.print(message, style=style_str, markup=False, highlight=False)
            return
        except Exception:
            pass

    # Colorama fallback
    if COLORAMA_AVAILABLE and Fore:
        color_map = {
            'red': Fore.RED,
            'green': Fore.GREEN,
            'yellow': Fore.YELLOW,
            'blue': Fore.BLUE,
            'cyan': Fore.CYAN,
            'white': Fore.WHITE,
            'magenta': Fore.MAGENTA,
            'dim': Fore.WHITE,
        }
        color_code = color_map.get(color, Fore.WHITE)
        style_code = Style.BRIGHT if bold else ""
        click.echo(f"{color_code}{style_code}{message}{Style.RESET_ALL}", err=True)
    else:
        click.echo(message, err=True)


def _rich_success(message: str, symbol: str = None):
    """Display success message with green color and bold styling."""
    _rich_echo(message, color="green", symbol=symbol, bold=True)


def _rich_error(message: str, symbol: str = None):
    """Display error message with red color."""
    _rich_echo(message, color="red", symbol=symbol)


def _rich_warning(message: str, symbol: str = None):
    """Display warning message with yellow color."""
    _rich_echo(message, color="yellow", symbol=symbol)


def _rich_info(message: str, symbol: str = None):
    """Display info message with blue color."""
    _rich_echo(message, color="blue", symbol=symbol)


def _rich_debug(message: str):
    """Display a dim debug message when debug output is enabled."""
    if is_debug_enabled():
        _rich_echo(f"[D] {message}", color="dim")


def _rich_panel(content: str, title: str = None, style: str = "cyan"):
    """Display content in a Rich panel with fallback."""
    console = _get_console()
    if console and RICH_AVAILABLE:
        try:
            console.print(Panel(content, title=title, border_style=style))
            return
        except Exception:
            pass

    # Fallback to simple text display
    if title:
        click.echo(f"\n--- {title} ---", err=True)
    click.echo(content, err=True)
    if title:
        click.echo("-" * (len(title) + 8), err=True)
