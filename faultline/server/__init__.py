"""HTTP results browser."""

from .app import app, configure, main

__all__ = ['app', 'configure', 'main']
