"""Next.js SSR build orchestrator."""

__version__ = "1.0.0"
