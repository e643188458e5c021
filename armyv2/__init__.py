"""Manifest-driven manager for Claude Code plugins and skills: catalog, manifest, sync, health checks and a setup wizard."""

__version__ = "0.1.0"