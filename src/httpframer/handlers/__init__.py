"""
Request handlers.

A handler is any callable taking a ParsedMessage and returning an
HTTPResponse. Exceptions raised by a handler become a 500 response.
"""

from .echo import echo_handler

__all__ = ["echo_handler"]
