"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~routedoc.exceptions.RoutedocError` subclass.
Build scripts can inspect the exit code to tell a broken declaration apart
from an unreadable route manifest without parsing stderr.

Example::

    $ routedoc dump routes.yaml
    $ echo $?
    7   # EXIT_INVALID_INPUT -- a declaration or type directive is malformed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unknown format."""

EXIT_INVALID_INPUT = 7
"""A documentation declaration or collection directive is malformed."""

EXIT_MANIFEST_ERROR = 8
"""The route manifest could not be loaded or parsed."""
