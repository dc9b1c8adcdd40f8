"""
Trace tables

A trace table has one row per trace, identified by the order number and
the trace number within that order. The trace geometry and the
wavelength solution are stored as polynomial coefficient arrays
(increasing powers, zero padded) in the detector coordinate system,
i.e. the first pixel is at x = 1, y = 1.
"""

from __future__ import annotations

import logging

import numpy as np
from astropy.table import Column, Table
from numpy.polynomial.polynomial import Polynomial

from .errors import ComputeFailure, InvalidInput, NotFound
from .polynomial import array_to_poly, poly_to_array, polynomial_eval_vector

logger = logging.getLogger(__name__)

COL_ORDER = "Order"
COL_TRACENB = "TraceNb"
COL_ALL = "All"
COL_UPPER = "Upper"
COL_LOWER = "Lower"
COL_WAVELENGTH = "Wavelength"

POLY_COLUMNS = (COL_ALL, COL_UPPER, COL_LOWER, COL_WAVELENGTH)


def new_trace_table(ncoeffs: int = 5) -> Table:
    """Create an empty trace table

    Parameters
    ----------
    ncoeffs : int, optional
        number of coefficients stored for each polynomial (default: 5)

    Returns
    -------
    table : Table
        table with the columns Order, TraceNb, All, Upper, Lower, Wavelength
    """
    if ncoeffs <= 0:
        raise InvalidInput(f"Expected a positive number of coefficients, got {ncoeffs}")
    columns = [
        Column(name=COL_ORDER, dtype=int, length=0),
        Column(name=COL_TRACENB, dtype=int, length=0),
    ]
    columns += [
        Column(name=name, dtype=float, shape=(ncoeffs,), length=0)
        for name in POLY_COLUMNS
    ]
    return Table(columns)


def _as_poly(poly):
    if isinstance(poly, Polynomial):
        return poly
    return array_to_poly(poly)


def add_trace(
    table: Table,
    order: int,
    trace_nb: int,
    center,
    upper,
    lower,
    wave=None,
) -> int:
    """Append a trace to the table

    Parameters
    ----------
    table : Table
        trace table, as created by new_trace_table
    order : int
        order number
    trace_nb : int
        trace number within the order
    center, upper, lower : Polynomial or array
        trace center and edges
    wave : Polynomial or array, optional
        wavelength solution (default: None, all zero)

    Returns
    -------
    index : int
        row index of the new trace
    """
    if trace_nb < 1:
        raise InvalidInput(f"Trace numbers start at 1, but got {trace_nb}")
    if get_trace_table_index(table, order, trace_nb) != -1:
        raise InvalidInput(f"Order {order} / Trace {trace_nb} is already in the table")

    ncoeffs = table[COL_ALL].shape[1]
    row = {COL_ORDER: order, COL_TRACENB: trace_nb}
    for name, poly in zip(POLY_COLUMNS, (center, upper, lower, wave)):
        if poly is None:
            row[name] = np.zeros(ncoeffs)
            continue
        poly = _as_poly(poly)
        if np.any(poly.coef[ncoeffs:] != 0):
            logger.warning(
                "Polynomial %s of order %i / trace %i is truncated to %i coefficients",
                name,
                order,
                trace_nb,
                ncoeffs,
            )
        row[name] = poly_to_array(poly, ncoeffs)

    table.add_row(row)
    return len(table) - 1


def validate_trace_table(table: Table) -> None:
    """Check that the table has the order and trace columns,
    and that each (order, trace) pair exists only once

    Raises
    ------
    InvalidInput
        if the table is not a valid trace table
    """
    for name in (COL_ORDER, COL_TRACENB):
        if name not in table.colnames:
            raise InvalidInput(f"Trace table is missing the column {name}")

    pairs = list(zip(table[COL_ORDER], table[COL_TRACENB]))
    if len(set(pairs)) != len(pairs):
        raise InvalidInput("Trace table contains duplicate (Order, TraceNb) pairs")


def get_trace_table_index(table: Table, order: int, trace_nb: int) -> int:
    """Row index of the trace, or -1 if it is not in the table"""
    match = (table[COL_ORDER] == order) & (table[COL_TRACENB] == trace_nb)
    idx = np.flatnonzero(match)
    if idx.size == 0:
        return -1
    return int(idx[0])


def get_trace_table_orders(table: Table) -> np.ndarray:
    """The different orders in the table, in the order they appear"""
    orders = np.asarray(table[COL_ORDER], dtype=int)
    _, first = np.unique(orders, return_index=True)
    return orders[np.sort(first)]


def get_trace_wave_poly(table: Table, column: str, order: int, trace_nb: int):
    """Get one of the polynomials of a trace

    Parameters
    ----------
    table : Table
        trace table
    column : str
        one of "All", "Upper", "Lower", "Wavelength"
    order : int
        order number
    trace_nb : int
        trace number

    Returns
    -------
    poly : Polynomial
        the polynomial stored in that column
    """
    if column not in POLY_COLUMNS or column not in table.colnames:
        raise InvalidInput(f"Not a polynomial column of the trace table: {column}")
    idx = get_trace_table_index(table, order, trace_nb)
    if idx == -1:
        raise NotFound(f"Order {order} / Trace {trace_nb} is not in the trace table")
    return array_to_poly(table[column][idx])


def trace_get_ycen(table: Table, order: int, trace_nb: int, size: int) -> np.ndarray:
    """Trace center in the detector columns 1 to size"""
    poly = get_trace_wave_poly(table, COL_ALL, order, trace_nb)
    return polynomial_eval_vector(poly, np.arange(1, size + 1))


def trace_get_height(table: Table, order: int, trace_nb: int, size: int) -> int:
    """Average distance between the upper and lower edge of the trace, in pixels"""
    x = np.arange(1, size + 1)
    upper = polynomial_eval_vector(
        get_trace_wave_poly(table, COL_UPPER, order, trace_nb), x
    )
    lower = polynomial_eval_vector(
        get_trace_wave_poly(table, COL_LOWER, order, trace_nb), x
    )
    height = np.mean(upper - lower)
    if not np.isfinite(height) or round(height) < 1:
        raise ComputeFailure(
            f"Order {order} / Trace {trace_nb} has an invalid height {height}"
        )
    return int(round(height))
