"""Exception hierarchy for routedoc.

All exceptions inherit from :class:`RoutedocError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`routedoc.exit_codes`.
The top-level error handler in :func:`routedoc.app.main` catches
``RoutedocError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    RoutedocError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- InvalidInputError          (exit 7)
    |   +-- MalformedDirectiveError
    |   +-- InvalidDeclarationError
    +-- ManifestError              (exit 8)
    +-- ConfigError                (exit 1)
"""

from routedoc.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_INPUT,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_ERROR,
)


class RoutedocError(Exception):
    """Base exception for all routedoc errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`routedoc.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RoutedocError):
    """Raised for invalid CLI arguments such as an unsupported output format."""

    exit_code = EXIT_INVALID_USAGE


class InvalidInputError(RoutedocError, ValueError):
    """Raised when documentation input is rejected before extraction proceeds."""

    exit_code = EXIT_INVALID_INPUT


class MalformedDirectiveError(InvalidInputError):
    """Raised for a type reference that starts with ``array<`` but does not match the collection grammar."""


class InvalidDeclarationError(InvalidInputError):
    """Raised when a filter, parameter, header or requirement entry lacks its mandatory keys."""


class ManifestError(RoutedocError):
    """Raised when a route manifest cannot be read, fetched or parsed."""

    exit_code = EXIT_MANIFEST_ERROR


class ConfigError(RoutedocError):
    """Raised for configuration problems (invalid config file, unknown naming strategy)."""

    exit_code = EXIT_GENERIC_FAILURE
