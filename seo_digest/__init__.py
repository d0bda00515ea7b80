"""SEO Digest: multi-project analytics, search and authority reporting."""

__version__ = "1.0.0"
