"""Video processing queue: discovery, deduplication and a paginated queue view."""

__version__ = "0.1.0"
