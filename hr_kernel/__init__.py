"""
HR Kernel - shared infrastructure for the back-office HR core

Provides the pieces every other layer leans on:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock
- SQLAlchemy declarative base, portable column types and session management
"""

__version__ = "0.1.0"
