"""
Parse error types.

Only *invalid* input is an exception. "Not enough bytes yet" is a normal
outcome of framing and is returned as a value (see framer.Incomplete),
never raised.
"""


class HTTPParseError(Exception):
    """
    Raised when request bytes cannot be turned into a request.

    Carries the HTTP status code that should go back to the client:

        400 Bad Request       - malformed start line / header line
        413 Payload Too Large - frame exceeds the configured size limit
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class InvalidMessageError(HTTPParseError):
    """The buffered bytes can never become a valid request."""


class IncompleteMessageError(HTTPParseError):
    """
    Data ended before the request did.

    Only raised by the one-shot parse_request() helper. The incremental
    framer reports this case as an Incomplete result instead.
    """
