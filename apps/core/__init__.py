"""
Core app for the Newsroom.

Provides the document repository, the saga runner, the error taxonomy,
request-ID tracing, the editor session gate and health checks.
"""
