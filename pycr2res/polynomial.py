"""
Conversion between coefficient arrays and polynomials

Trace and wavelength polynomials are stored as plain coefficient arrays
in the trace tables, with the coefficient of x**i at index i.
This module also contains the mapping of signed order numbers onto the
small non-negative indices used for storing them.
"""

import logging

import numpy as np
from numpy.polynomial.polynomial import Polynomial

from .errors import InvalidInput

logger = logging.getLogger(__name__)

# Valid order numbers are -49 to 50, stored as indices 0 to 99
ORDER_MIN = -49
ORDER_MAX = 50


def array_to_poly(coeffs):
    """Convert a coefficient array into a polynomial

    Parameters
    ----------
    coeffs : array[n]
        polynomial coefficients, coeffs[i] belongs to x**i

    Returns
    -------
    poly : Polynomial
        polynomial of degree n - 1

    Raises
    ------
    InvalidInput
        if the array is empty, not 1 dimensional or not finite
    """
    coeffs = np.asarray(coeffs, dtype=float)
    if coeffs.ndim != 1:
        raise InvalidInput(f"Expected 1D coefficient array, got shape {coeffs.shape}")
    if coeffs.size == 0:
        raise InvalidInput("Cannot create a polynomial from an empty array")
    if not np.all(np.isfinite(coeffs)):
        raise InvalidInput(f"Polynomial coefficients must be finite, got {coeffs}")
    # Polynomial copies the coefficients and does not trim trailing zeros
    return Polynomial(coeffs)


def poly_to_array(poly, size):
    """Convert a polynomial into a coefficient array of fixed size

    Coefficients beyond the degree of the polynomial are zero,
    coefficients of powers >= size are dropped.

    Parameters
    ----------
    poly : Polynomial
        input polynomial
    size : int
        length of the output array

    Returns
    -------
    arr : array[size]
        coefficients, arr[i] belongs to x**i
    """
    size = int(size)
    if size <= 0:
        raise InvalidInput(f"Expected a positive array size, but got {size}")

    coef = np.asarray(poly.coef, dtype=float)
    arr = np.zeros(size)
    n = min(size, coef.size)
    arr[:n] = coef[:n]
    return arr


def polynomial_eval_vector(poly, xs):
    """Evaluate a polynomial at every element of xs

    Parameters
    ----------
    poly : Polynomial
        polynomial to evaluate
    xs : array[n]
        positions

    Returns
    -------
    ys : array[n]
        poly(xs)
    """
    xs = np.asarray(xs, dtype=float)
    return np.asarray(poly(xs), dtype=float)


def convert_order_to_idx(order):
    """Convert an order number (-49 to 50) to its index (0 to 99)

    Returns -1 for order numbers outside of the valid range
    """
    order = int(order)
    if 0 <= order <= ORDER_MAX:
        return order
    if ORDER_MIN <= order < 0:
        return order + 100
    return -1


def convert_idx_to_order(idx):
    """Convert an order index back to the order number

    Indices 0 to 50 are the order itself, 51 to 98 the negative orders.
    Index 99 is rejected like negative indices, even though
    convert_order_to_idx(-1) produces it. Returns -1 for invalid indices.
    """
    idx = int(idx)
    if 0 <= idx <= ORDER_MAX:
        return idx
    if ORDER_MAX < idx < 99:
        return idx - 100
    return -1


def wlestimate_compute(wmin, wmax, npix=2048):
    """Linear wavelength solution from the first and last pixel wavelengths

    Detector columns count from 1, so that wl(1) = wmin and wl(npix) = wmax.

    Parameters
    ----------
    wmin : float
        wavelength of the first pixel
    wmax : float
        wavelength of the last pixel
    npix : int, optional
        number of pixels along the dispersion direction (default: 2048)

    Returns
    -------
    poly : Polynomial
        the wavelength solution [c0, c1]
    """
    if wmin < 0 or wmax < 0:
        raise InvalidInput(f"Wavelengths must be positive, got {wmin}, {wmax}")
    if wmin >= wmax:
        raise InvalidInput(f"Expected wmin < wmax, but got {wmin} >= {wmax}")
    if npix < 2:
        raise InvalidInput(f"Expected at least 2 pixels, but got {npix}")

    slope = (wmax - wmin) / (npix - 1)
    return Polynomial([wmin - slope, slope])
