"""Control plane for a locally hosted OpenAI-compatible proxy service."""

__version__ = "0.1.0"
