"""backlogmd: async client and CLI for Backlog projects that use Markdown.

Exposes project validation, paginated issue retrieval and single-item
fetch/update for issues and wikis, with a fixed-delay retry for
rate-limited calls.
"""

__version__ = "0.1.0"
