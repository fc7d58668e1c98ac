"""
Markdown rendering for drafts and published posts.
"""
