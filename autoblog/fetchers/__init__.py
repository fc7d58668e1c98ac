"""
Upstream data sources (trend feeds, Hacker News).
"""
