"""
Small diagnostic tools for Slackware: a sound subsystem check and an installed package lister.
"""

__all__ = ["diagnostics", "packages", "system_state", "cli"]
__version__ = "0.1.0"
