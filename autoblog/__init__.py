"""
autoblog - Unattended Blog Post Pipeline

Selects a topic, gathers verified sources, drafts an article, runs it through
a quality gate and publishes it as a Markdown file, retrying within a bounded
attempt budget until the requested number of posts is published.
"""

__version__ = "0.1.0"
__author__ = "Keith Teare"
__email__ = "keith@teare.com"
