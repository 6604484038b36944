"""
Human-readable rendering of pynumerics errors.

The numerical code only raises tagged errors; this table is the single
place where they become text.
"""

from .exceptions import ErrorKind, NumericsError


TEMPLATES = {
    ErrorKind.DIMENSION_MISMATCH: "dimension mismatch: expected {expected}, got {actual}",
    ErrorKind.NOT_POSITIVE_DEFINITE: "matrix is not positive definite (failed at row {row})",
    ErrorKind.NON_SYMMETRIC_MATRIX: "matrix is not symmetric at ({row}, {column})",
    ErrorKind.SINGULAR_MATRIX: "matrix is singular",
    ErrorKind.NO_BRACKETING: (
        "function values at endpoints do not have different signs: "
        "f({lo})={f_lo}, f({hi})={f_hi}"
    ),
    ErrorKind.INVALID_INTERVAL: "endpoints do not specify an interval: [{lower}, {upper}]",
    ErrorKind.DEGENERATE_SIMPLEX: "equal vertices in simplex at indices {indices}",
    ErrorKind.INVALID_ITERATION_BOUNDS: (
        "invalid iteration limits: min={min_iterations}, max={max_iterations}"
    ),
    ErrorKind.MAX_ITERATIONS_EXCEEDED: "maximal count ({iterations}) exceeded",
    ErrorKind.NO_DATA: "no result available",
}


def render(error: NumericsError) -> str:
    """
    Format an error for display.

    Parameters
    ----------
    error : NumericsError
        Error to format

    Returns
    -------
    str
        Message built from the error's kind and numeric context
    """
    template = TEMPLATES.get(error.kind)
    if template is None:
        return error.kind.value
    return template.format(**error.context)
