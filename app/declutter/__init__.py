"""declutter - find and reclaim disk space from stale directory trees."""

__version__ = "0.3.0"
