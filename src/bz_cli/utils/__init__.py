"""Utility modules for bz."""

from .console import (
    _rich_success,
    _rich_error,
    _rich_warning,
    _rich_info,
    _rich_debug,
    _rich_echo,
    _rich_panel,
    _get_console,
    STATUS_SYMBOLS
)

__all__ = [
    '_rich_success',
    '_rich_error',
    '_rich_warning',
    '_rich_info',
    '_rich_debug',
    '_rich_echo',
    '_rich_panel',
    '_get_console',
    'STATUS_SYMBOLS'
]
