"""
Standard exit codes for regsweep commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# sysexits.h codes
DATA_ERROR = 65          # Store metadata missing or malformed
IO_ERROR = 74            # Deleting an image failed
CONFIG_ERROR = 78        # Configuration file error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'LoadError': DATA_ERROR,
    'StoreNotFoundError': DATA_ERROR,
    'StoreCorruptError': DATA_ERROR,
    'DeleteError': IO_ERROR,
    'ConfigError': CONFIG_ERROR,
    'RetentionParseError': USAGE_ERROR,
    'PermissionError': IO_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class MissingStoreRootError(CommandError):
    """Raised when no store root is given on the command line or in config."""
    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "No store root given (pass STORE_ROOT or set store.root in config)",
            USAGE_ERROR,
        )
