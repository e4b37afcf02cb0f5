"""
Exit codes for the tasktree CLI.

Semantic exit codes let scripts tell a bad argument from a missing task or an
unreachable backend without parsing the error text.
"""

from tasktree.exceptions import (
    DecodeError,
    IntegrityError,
    NotFoundError,
    StorageError,
    TaskTreeError,
    ValidationError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments, validation error or undecodable import
ERROR_INVALID_ARGS = 2

# Storage backend unreachable or rejected the operation
ERROR_STORAGE = 4

# Task not found
ERROR_NOT_FOUND = 5

# Parent reference unresolvable or would create a cycle
ERROR_INTEGRITY = 6


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_STORAGE: "ERROR_STORAGE",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_INTEGRITY: "ERROR_INTEGRITY",
    }
    return code_names.get(code, f"UNKNOWN({code})")


# Most specific class first: the lookup walks this in order.
_ERROR_CODES: list[tuple[type[TaskTreeError], int]] = [
    (NotFoundError, ERROR_NOT_FOUND),
    (IntegrityError, ERROR_INTEGRITY),
    (StorageError, ERROR_STORAGE),
    (ValidationError, ERROR_INVALID_ARGS),
    (DecodeError, ERROR_INVALID_ARGS),
]


def exit_code_for(error: BaseException) -> int:
    """Map an exception to its semantic exit code."""
    for error_cls, code in _ERROR_CODES:
        if isinstance(error, error_cls):
            return code
    return ERROR_GENERAL
