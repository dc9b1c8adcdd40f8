"""
Exceptions raised by the pycr2res processing functions.

Each processing unit (detector, order, trace) fails on its own, so the
callers can catch these, log them and carry on with the next unit.
"""


class Cr2resError(Exception):
    """Base class of all pycr2res errors"""


class InvalidInput(Cr2resError, ValueError):
    """Malformed or out of range arguments

    e.g. an empty polynomial, a non-positive gain, mismatched lengths
    """


class NotFound(Cr2resError, LookupError):
    """The requested data does not exist

    e.g. no surviving clusters, no samples above threshold, missing trace
    """


class ComputeFailure(Cr2resError, RuntimeError):
    """A fit or transform did not produce a finite result for valid input"""
