class DactylError(Exception):
    """
    Base class for errors raised while generating a keyboard.
    """


class ConfigurationError(DactylError, ValueError):
    """
    The parameter set is invalid, or a configuration file names an unknown key.
    """


class KeyAddressError(DactylError, IndexError):
    """
    A column outside a per-column lookup table was requested.
    """

    def __init__(self, table: str, column: int, size: int):
        super().__init__(f"column {column} is outside {table} (0..{size - 1})")
        self.table = table
        self.column = column
        self.size = size

    def __reduce__(self):
        # rebuilt from its fields when sent back from a build worker
        return self.__class__, (self.table, self.column, self.size)


class DegenerateHullError(DactylError, ValueError):
    """
    A hull was requested over fewer than 3 posts, or over posts that are all collinear.
    """


class BuildError(DactylError):
    """
    One or more output targets failed to build.

    Raised after every target has been attempted; `failures` maps target names to the
    exception each one raised and `results` holds the targets that succeeded.
    """

    def __init__(self, failures: dict, results: list):
        names = ", ".join(sorted(failures))
        super().__init__(f"{len(failures)} target(s) failed: {names}")
        self.failures = failures
        self.results = results
