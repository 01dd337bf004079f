"""
Shared cross-cutting concerns.

Logging setup lives here so every entry point configures it the same way.
"""
