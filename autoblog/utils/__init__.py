"""
Shared utilities for autoblog.
"""
