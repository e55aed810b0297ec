"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Header names, status codes, terminal statuses
- exceptions: Custom exception hierarchy
"""
