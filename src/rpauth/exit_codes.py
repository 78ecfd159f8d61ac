"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~rpauth.exceptions.RpauthError` subclass.
Shell wrappers can inspect the exit code to tell a rejected authorization
code apart from an unreachable provider without parsing stderr.

Example::

    $ rpauth exchange --code abc123
    $ echo $?
    3   # EXIT_PROVIDER_ERROR -- the provider rejected the code
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified or configuration error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_PROVIDER_ERROR = 3
"""The token endpoint answered with an OAuth2 error response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_RESPONSE_PARSE_ERROR = 7
"""The token endpoint response could not be parsed."""

EXIT_URI_SYNTAX_ERROR = 8
"""The callback URL is not a well-formed absolute URI."""
