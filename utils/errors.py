"""
Exceptions raised by the punch clock.
"""


class PunchError(Exception):
    """Base exception for the punch clock"""
    pass


class StorageError(PunchError):
    """Raised when the punch log cannot be read, parsed or written"""
    pass


class StateError(PunchError):
    """Raised when a punch does not fit the current clock state"""
    pass


class AlreadyPunchedIn(StateError):
    pass


class AlreadyPunchedOut(StateError):
    pass


class UsageError(PunchError):
    """Raised when the command line cannot be parsed"""
    pass
