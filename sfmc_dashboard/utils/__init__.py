#!/usr/bin/env python3
"""
Dashboard utilities package.
"""

from .timezone_utils import (
    get_system_timezone,
    get_display_timezone,
    now_in_timezone,
    format_for_display,
    to_api_timestamp
)

__all__ = [
    'get_system_timezone',
    'get_display_timezone',
    'now_in_timezone',
    'format_for_display',
    'to_api_timestamp'
]
