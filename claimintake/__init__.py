"""Claim intake package."""

__all__ = [
    "cli",
    "config",
    "forms",
    "intake",
    "logging",
    "preflight",
    "results",
    "schemas",
    "static_files",
    "storage",
    "web_app",
    "webhook",
]
