# -*- coding: utf-8 -*-
import numpy as np
import pytest

# Stop matplotlib from crashing if interactive plotting does not work
import matplotlib as mpl

mpl.use("agg")


@pytest.fixture
def reference_image():
    """Small image, with the rows given from top to bottom"""
    data = [
        [1, 2, 3, 2, 1],
        [1, 2, 9, 2, 9],
        [1, 9, 3, 9, 1],
        [9, 2, 3, 2, 1],
    ]
    # array row 0 is the bottom of the detector
    return np.flipud(np.array(data, dtype=float))


@pytest.fixture
def order_centers():
    """Array row of each order at x = 0"""
    return [20, 50, 80]


@pytest.fixture
def flat(order_centers):
    """Flat field with three slightly inclined orders of gaussian profile"""
    nrow, ncol = 100, 200
    y, x = np.indices((nrow, ncol))
    img = np.zeros((nrow, ncol))
    for center in order_centers:
        ycen = center + 0.02 * x
        img += 100 * np.exp(-((y - ycen) ** 2) / (2 * 2.0**2))
    return img
