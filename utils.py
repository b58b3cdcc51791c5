"""
General utility functions for the CLI application.
"""

from rich.console import Console

console: Console = Console()
err_console: Console = Console(stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    """Turn ``debug`` output on or off for the rest of the process."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose


def debug(
    *values: object,
    sep: str = " ",
    end: str = "\n",
) -> None:
    """
    Print debug message with orange bold formatting.

    Messages are only shown after ``set_verbose(True)`` (the ``--verbose``
    flag). They go to stderr so they never mix with ``--list`` output.

    Args:
        *values: Variable number of objects to print. All values are converted to strings.
        sep: Separator string between values. Defaults to a single space.
        end: String appended after the last value. Defaults to newline.

    Returns:
        None: This function only prints to console and returns nothing.
    """
    if not _verbose:
        return

    if not values:
        err_console.print(end=end)
        return

    # Convert all values to strings
    str_values = [str(v) for v in values]

    # Join with separator
    message = sep.join(str_values)

    # Print with formatting
    err_console.print(f"DEBUG: {message}", end=end, style="orange1", markup=False)
