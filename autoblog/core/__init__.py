"""
Core pipeline stages and decision logic for autoblog.
"""
