#!/usr/bin/env python3
"""
Timezone utilities for consistent time handling across the dashboard.
Provides centralized timezone conversion and formatting functions.
"""

import datetime
import pytz
from typing import Optional

from ..config import config

def get_system_timezone() -> pytz.BaseTzInfo:
    """Get the configured system timezone."""
    return pytz.timezone(config.DEFAULT_TIMEZONE)

def get_display_timezone() -> pytz.BaseTzInfo:
    """Get the configured display timezone."""
    return pytz.timezone(config.DISPLAY_TIMEZONE)

def now_in_timezone(timezone: Optional[str] = None) -> datetime.datetime:
    """Get current time in specified timezone."""
    tz = pytz.timezone(timezone) if timezone else get_system_timezone()
    return datetime.datetime.now(tz)

def format_for_display(dt: datetime.datetime, timezone: Optional[str] = None) -> str:
    """Format datetime for display in configured timezone."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)

    display_tz = pytz.timezone(timezone) if timezone else get_display_timezone()
    local_dt = dt.astimezone(display_tz)
    return local_dt.strftime('%Y-%m-%d %H:%M:%S %Z')

def to_api_timestamp(dt: datetime.datetime) -> str:
    """Format datetime as the UTC ISO-8601 string SFMC filters and the frontend expect."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)

    return dt.astimezone(pytz.utc).strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"
