# -*- coding: utf-8 -*-
"""
Rectification of curved orders

cut_rectify straightens the strip of an image around a curve ycen,
insert_rect puts such a straight strip back onto the curve.

The curve ycen uses detector coordinates, where the center of the
first pixel row is at 1, i.e. the value y belongs to the array row
floor(y) - 1. Array row 0 is the bottom of the detector.
"""

import logging

import numpy as np

from .errors import InvalidInput

logger = logging.getLogger(__name__)


def _strip_rows(ycen, height, interpolate):
    """Image rows and interpolation weights of each pixel in the strip

    Parameters
    ----------
    ycen : array[ncol]
        center of the strip in each column, in detector coordinates
    height : int
        number of rows in the strip
    interpolate : bool
        if False only whole pixels are used, otherwise the fractional
        part of ycen is the weight of the next row

    Returns
    -------
    rows : array[height, ncol](int)
        array row of the lower pixel
    frac : array[height, ncol]
        weight of the upper pixel (rows + 1)
    """
    offsets = np.arange(height) - height // 2
    y = ycen[None, :] + offsets[:, None]
    y0 = np.floor(y)
    if interpolate:
        frac = y - y0
    else:
        frac = np.zeros_like(y)
    rows = y0.astype(int) - 1
    return rows, frac


def _check_ycen(ycen, ncol):
    ycen = np.asarray(ycen, dtype=float)
    if ycen.ndim != 1:
        raise InvalidInput(f"Ycen must be 1 dimensional, but got shape {ycen.shape}")
    if ycen.size != ncol:
        raise InvalidInput(
            f"Image and Ycen shapes are incompatible, got {ncol} columns and {ycen.size} ycen values"
        )
    if not np.all(np.isfinite(ycen)):
        raise InvalidInput("Ycen must be finite")
    return ycen


def cut_rectify(img, ycen, height, interpolate=False):
    """Cut out a straightened strip of height rows centered on ycen

    Strip row r of column x is taken from the detector row
    ycen[x] - height // 2 + r. Pixels outside of the image are 0.

    Parameters
    ----------
    img : array[nrow, ncol]
        input image
    ycen : array[ncol]
        center of the strip in each column, in detector coordinates
    height : int
        number of rows of the strip
    interpolate : bool, optional
        if True, linearly interpolate between the two nearest rows,
        otherwise ycen is truncated to whole pixels (default: False)

    Returns
    -------
    strip : array[height, ncol]
        the rectified strip, a new array
    """
    img = np.asarray(img)
    if img.ndim != 2:
        raise InvalidInput(f"Image must be 2 dimensional, but got shape {img.shape}")
    height = int(height)
    if height < 1:
        raise InvalidInput(f"Expected height >= 1, but got {height}")
    nrow, ncol = img.shape
    ycen = _check_ycen(ycen, ncol)

    rows, frac = _strip_rows(ycen, height, interpolate)
    cols = np.broadcast_to(np.arange(ncol), rows.shape)

    strip = np.zeros((height, ncol))
    valid = (rows >= 0) & (rows < nrow)
    strip[valid] += (1 - frac[valid]) * img[rows[valid], cols[valid]]
    if interpolate:
        valid = (rows + 1 >= 0) & (rows + 1 < nrow)
        strip[valid] += frac[valid] * img[rows[valid] + 1, cols[valid]]

    outside = np.all((rows + 1 < 0) | (rows >= nrow), axis=0)
    if np.any(outside):
        logger.debug("%i columns of the strip are outside the image", outside.sum())

    return strip


def insert_rect(strip, ycen, img_out, interpolate=False):
    """Add a rectified strip back into an image, along the curve ycen

    This is the adjoint of cut_rectify: each strip pixel is added to the
    image pixels it would have been read from. Rows that fall outside of
    img_out are dropped, so flux is lost where the curve leaves the image.

    The addition is done in place and not undone on later failures,
    so repeated calls accumulate in img_out.

    Parameters
    ----------
    strip : array[height, ncol]
        rectified strip
    ycen : array[ncol]
        center of the strip in each column, in detector coordinates
    img_out : array[nrow, ncol]
        image to add the strip to, modified in place
    interpolate : bool, optional
        if True, split each value between the two nearest rows,
        otherwise ycen is truncated to whole pixels (default: False)

    Returns
    -------
    img_out : array[nrow, ncol]
        the same array as the input img_out
    """
    strip = np.asarray(strip)
    if strip.ndim != 2:
        raise InvalidInput(f"Strip must be 2 dimensional, but got shape {strip.shape}")
    if not isinstance(img_out, np.ndarray) or img_out.ndim != 2:
        raise InvalidInput("Output image must be a 2 dimensional numpy array")
    height, ncol = strip.shape
    nrow, ncol_out = img_out.shape
    ycen = _check_ycen(ycen, ncol)
    if ncol_out != ncol:
        raise InvalidInput(
            f"Strip and output image widths differ, got {ncol} and {ncol_out}"
        )

    rows, frac = _strip_rows(ycen, height, interpolate)
    cols = np.broadcast_to(np.arange(ncol), rows.shape)

    valid = (rows >= 0) & (rows < nrow)
    if interpolate:
        np.add.at(
            img_out,
            (rows[valid], cols[valid]),
            (1 - frac[valid]) * strip[valid],
        )
        valid = (rows + 1 >= 0) & (rows + 1 < nrow)
        np.add.at(
            img_out,
            (rows[valid] + 1, cols[valid]),
            frac[valid] * strip[valid],
        )
    else:
        np.add.at(img_out, (rows[valid], cols[valid]), strip[valid])

    return img_out
