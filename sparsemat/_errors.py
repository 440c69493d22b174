class FormatError(ValueError):
    """
    Raised when a matrix description cannot be parsed.

    Parameters
    ----------
    message : str
        What is wrong with the input.
    lineno : int, optional
        The 1-based line of the input the problem was found on.
    """

    def __init__(self, message, lineno=None):
        self.message = message
        self.lineno = lineno
        if lineno is not None:
            message = f"{message} at line {lineno}"
        super().__init__(message)


class DimensionError(ValueError):
    """Raised when the shapes of two operands do not fit the operation."""


class DimensionMismatchError(DimensionError):
    pass


class IncompatibleDimensionsError(DimensionError):
    pass


class MatrixIOError(OSError):
    """An :obj:`OSError` raised while reading or writing a matrix file."""


class SkippedEntriesWarning(RuntimeWarning):
    pass
