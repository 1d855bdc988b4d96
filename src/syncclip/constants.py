#!/usr/bin/env python3
"""Timing and retry constants for the syncclip client.

The polling and confirmation windows mirror the engine's desktop front end
so that the terminal view converges at the same pace.
"""

# History refresh cadence while a view is mounted, in seconds.
REFRESH_INTERVAL: float = 2.0

# How long a copy confirmation stays visible, in seconds.
COPY_CONFIRM_WINDOW: float = 2.0

# How long the "saved" status of a config save stays visible, in seconds.
SAVE_STATUS_WINDOW: float = 3.0

# Retry parameters for waiting on the engine at startup (--wait).
# Initial delay between connection attempts in seconds.
INITIAL_WAIT: float = 1.0

# Maximum delay between connection attempts in seconds.
MAX_WAIT: float = 60.0

# Multiplier for exponential backoff (delay = initial * multiplier^attempt).
WAIT_MULTIPLIER: float = 2.0

# Timeout for one-shot CLI commands, in seconds. Mounted views use none.
ONE_SHOT_TIMEOUT: float = 30.0

# Timeout for fetching a stored resource over HTTP, in seconds.
RESOURCE_TIMEOUT: float = 5.0
