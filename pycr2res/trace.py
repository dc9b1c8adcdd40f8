"""
Find clusters of pixels with signal and fit polynomial traces.

Note on terminology:
- "cluster": A connected group of pixels above the local background
- "trace": The polynomial fits to the center and the edges of one cluster

The main function `trace` detects the clusters and turns them into a
trace table. The individual steps are available as `detect_order_mask`,
`cluster` and `fit_trace`.
"""

import logging

import matplotlib.pyplot as plt
import numpy as np
from numpy.polynomial.polynomial import Polynomial
from scipy.ndimage import (
    binary_opening,
    generate_binary_structure,
    label,
    uniform_filter1d,
)

from .errors import ComputeFailure, InvalidInput, NotFound
from .polynomial import polynomial_eval_vector
from .trace_table import add_trace, new_trace_table

logger = logging.getLogger(__name__)


def detect_order_mask(img, ordersep, smooth=1.0, noise=0, opening=True):
    """Select the pixels that are brighter than their local background

    The background is a boxcar average along each column, with a length
    of ordersep * smooth pixels.

    Parameters
    ----------
    img : array[nrow, ncol]
        order definition image, e.g. a flat field
    ordersep : float
        typical separation between orders in pixels
    smooth : float, optional
        length of the smoothing kernel, relative to ordersep (default: 1)
    noise : float, optional
        signal must be at least this much above the background (default: 0)
    opening : bool, optional
        if True, remove single pixels and thin lines with a binary opening
        (default: True)

    Returns
    -------
    mask : array[nrow, ncol](bool)
        True for the pixels with signal
    """
    img = np.asarray(img, dtype=float)
    if img.ndim != 2:
        raise InvalidInput(f"Image must be 2 dimensional, but got shape {img.shape}")
    size = int(round(ordersep * smooth))
    if size < 1:
        raise InvalidInput(
            f"Smoothing kernel must be at least one pixel, but got {ordersep} * {smooth}"
        )

    background = uniform_filter1d(img, size, axis=0, mode="nearest")
    mask = img > background + noise
    if opening:
        struct = np.full((2, 2), 1)
        mask = binary_opening(mask, struct)

    logger.debug("Order mask contains %i pixels", np.count_nonzero(mask))
    return mask


def mask_to_pixels(mask):
    """Coordinates of the pixels in the mask

    The pixels are listed column by column, i.e. sorted by x first and y second

    Returns
    -------
    xs, ys : array(int), array(int)
        column and row of each pixel
    """
    mask = np.asarray(mask, dtype=bool)
    xs, ys = np.nonzero(mask.T)
    return xs, ys


def cluster(xs, ys, nx, ny, min_cluster, connectivity=2):
    """Group pixels into connected clusters

    Parameters
    ----------
    xs : array[n](int)
        column of each pixel
    ys : array[n](int)
        row of each pixel
    nx : int
        number of columns of the frame
    ny : int
        number of rows of the frame
    min_cluster : int
        clusters with fewer pixels are removed
    connectivity : int, optional
        1 for 4 connected, 2 for 8 connected neighbours (default: 2)

    Returns
    -------
    labels : array[n](int)
        cluster number of each pixel, 0 if the pixel was removed.
        Clusters are numbered 1 to nclusters in the order their first
        pixel appears in the input
    nclusters : int
        number of clusters
    """
    xs = np.asarray(xs, dtype=int)
    ys = np.asarray(ys, dtype=int)
    if xs.ndim != 1 or xs.shape != ys.shape:
        raise InvalidInput(
            f"Expected x and y coordinates of the same length, got {xs.shape} and {ys.shape}"
        )
    if nx <= 0 or ny <= 0:
        raise InvalidInput(f"Invalid frame size {nx} x {ny}")
    if min_cluster < 0:
        raise InvalidInput(f"Expected min_cluster >= 0, but got {min_cluster}")
    if connectivity not in (1, 2):
        raise InvalidInput(f"Connectivity must be 1 or 2, but got {connectivity}")
    if xs.size > 0 and (
        xs.min() < 0 or xs.max() >= nx or ys.min() < 0 or ys.max() >= ny
    ):
        raise InvalidInput(f"Pixel coordinates outside of the {nx} x {ny} frame")

    mask = np.zeros((ny, nx), dtype=bool)
    mask[ys, xs] = True
    structure = generate_binary_structure(2, connectivity)
    clusters, nlabels = label(mask, structure=structure)
    labels = clusters[ys, xs]

    # remove small clusters
    sizes = np.bincount(clusters.ravel(), minlength=nlabels + 1)
    keep = sizes >= min_cluster
    keep[0] = False  # This is the background
    labels = np.where(keep[labels], labels, 0)

    # number the clusters in the order they are first encountered
    survivors = labels[labels != 0]
    unique, first = np.unique(survivors, return_index=True)
    unique = unique[np.argsort(first)]
    mapping = np.zeros(nlabels + 1, dtype=int)
    mapping[unique] = np.arange(1, unique.size + 1)
    labels = mapping[labels]
    nclusters = unique.size

    logger.debug(
        "Found %i clusters, %i of them with at least %i pixels",
        nlabels,
        nclusters,
        min_cluster,
    )
    if nclusters == 0:
        logger.warning("No cluster with at least %i pixels found", min_cluster)
    return labels, nclusters


def _polyfit(x, y, degree):
    try:
        fit = Polynomial.fit(x, y, deg=degree, domain=[])
    except np.linalg.LinAlgError as ex:
        raise ComputeFailure(f"Polynomial fit failed: {ex}") from ex
    coef = fit.coef
    if not np.all(np.isfinite(coef)):
        raise ComputeFailure("Polynomial fit did not converge")
    return Polynomial(coef)


def fit_trace(xs, ys, degree):
    """Fit the center, upper, and lower edge of a cluster

    The fits use detector coordinates, i.e. the pixel xs=0, ys=0 is at
    (1, 1).

    Parameters
    ----------
    xs : array[n](int)
        columns of the cluster pixels
    ys : array[n](int)
        rows of the cluster pixels
    degree : int
        polynomial degree

    Returns
    -------
    center : Polynomial
        fit to all pixels
    upper : Polynomial
        fit to the highest pixel in each column
    lower : Polynomial
        fit to the lowest pixel in each column
    """
    x = np.asarray(xs, dtype=int) + 1
    y = np.asarray(ys, dtype=int) + 1
    if degree < 0:
        raise InvalidInput(f"Expected a non-negative degree, but got {degree}")

    idx = np.argsort(x, kind="stable")
    x, y = x[idx], y[idx]
    starts = np.flatnonzero(np.r_[True, np.diff(x) != 0])
    if starts.size < degree + 1:
        raise InvalidInput(
            f"Need at least {degree + 1} columns for a fit of degree {degree}, but got {starts.size}"
        )
    columns = x[starts]
    y_upper = np.maximum.reduceat(y, starts)
    y_lower = np.minimum.reduceat(y, starts)

    center = _polyfit(x, y, degree)
    upper = _polyfit(columns, y_upper, degree)
    lower = _polyfit(columns, y_lower, degree)
    return center, upper, lower


def plot_traces(img, trace_wave, title=None):  # pragma: no cover
    """Plot the image and the trace polynomials"""
    nrow, ncol = img.shape
    x = np.arange(1, ncol + 1)

    bot, top = np.percentile(img, (1, 99))
    plt.imshow(img, origin="lower", vmin=bot, vmax=top)
    for row in trace_wave:
        for name, style in (("All", "r-"), ("Upper", "g--"), ("Lower", "g--")):
            y = polynomial_eval_vector(Polynomial(row[name]), x)
            plt.plot(x - 1, y - 1, style)
    plt.xlabel("x [pixel]")
    plt.ylabel("y [pixel]")
    plt.ylim([0, nrow])
    if title is not None:
        plt.title(title)
    plt.show()


def trace(
    img,
    min_cluster,
    degree=4,
    smooth=1.0,
    ordersep=180,
    noise=0,
    opening=True,
    connectivity=2,
    plot=False,
    plot_title=None,
):
    """Identify and trace orders

    Parameters
    ----------
    img : array[nrow, ncol]
        order definition image
    min_cluster : int
        minimum cluster size in pixels
    degree : int, optional
        polynomial degree of the trace fits (default: 4)
    smooth : float, optional
        length of the background kernel, relative to ordersep (default: 1)
    ordersep : float, optional
        typical separation between orders in pixels (default: 180)
    noise : float, optional
        minimum signal above the background (default: 0)
    opening : bool, optional
        remove small structures from the mask (default: True)
    connectivity : int, optional
        1 for 4 connected, 2 for 8 connected clusters (default: 2)
    plot : bool, optional
        wether to plot the traces (default: False)

    Returns
    -------
    trace_wave : Table
        trace table, orders numbered 1 to n from the bottom of the detector

    Raises
    ------
    NotFound
        if no trace could be found
    """
    img = np.asarray(img, dtype=float)
    nrow, ncol = img.shape

    mask = detect_order_mask(img, ordersep, smooth=smooth, noise=noise, opening=opening)
    xs, ys = mask_to_pixels(mask)
    labels, nclusters = cluster(xs, ys, ncol, nrow, min_cluster, connectivity)
    if nclusters == 0:
        raise NotFound("No clusters found in the order definition image")

    fits = []
    for k in range(1, nclusters + 1):
        select = labels == k
        try:
            fits.append(fit_trace(xs[select], ys[select], degree))
        except (InvalidInput, ComputeFailure) as ex:
            logger.warning("Cannot fit cluster %i: %s", k, ex)

    if len(fits) == 0:
        raise NotFound("None of the clusters could be fitted")

    # sort from bottom to top, using the center column
    middle = np.array([(ncol + 1) / 2])
    position = [polynomial_eval_vector(f[0], middle)[0] for f in fits]
    fits = [fits[i] for i in np.argsort(position)]

    trace_wave = new_trace_table(degree + 1)
    for i, (center, upper, lower) in enumerate(fits):
        add_trace(trace_wave, i + 1, 1, center, upper, lower)
    logger.info("Found %i traces", len(trace_wave))

    if plot:  # pragma: no cover
        plot_traces(img, trace_wave, title=plot_title)

    return trace_wave
