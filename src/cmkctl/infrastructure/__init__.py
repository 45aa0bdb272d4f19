"""Infrastructure layer — subprocesses, filesystem, and the Actions host.

This layer depends on stdlib and third-party libs (structlog).
It may import error types from domain, never from services, commands, or output.
"""
