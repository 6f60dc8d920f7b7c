"""Link canonicalization and thumbnail resolution for a video-bookmarking service."""

__version__ = "0.1.0"
