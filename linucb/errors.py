class LinUCBError(Exception):
    """Base class for errors raised by the linucb package."""


class InvalidInput(LinUCBError, ValueError):
    """Bad context, reward, candidate set or configuration."""


class SingularMatrix(LinUCBError, ArithmeticError):
    """An arm's design matrix could not be inverted to a usable estimate."""
