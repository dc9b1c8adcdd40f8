import numpy as np
import pytest
from astropy.table import Table

from pycr2res.errors import ComputeFailure, InvalidInput, NotFound
from pycr2res.trace_table import (
    COL_ALL,
    COL_ORDER,
    COL_TRACENB,
    COL_WAVELENGTH,
    add_trace,
    get_trace_table_index,
    get_trace_table_orders,
    get_trace_wave_poly,
    new_trace_table,
    trace_get_height,
    trace_get_ycen,
    validate_trace_table,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def table():
    """Orders 1 to 10, where order 7 only has a second trace"""
    table = new_trace_table(3)
    trace_nbs = [1, 1, 1, 1, 1, 1, 2, 1, 1, 1]
    for order, trace_nb in zip(range(1, 11), trace_nbs):
        add_trace(
            table,
            order,
            trace_nb,
            [10.0 * order, 0.1],
            [10.0 * order + 3, 0.1],
            [10.0 * order - 3, 0.1],
            wave=[1.1, 2.2, 3.3],
        )
    return table


def test_new_trace_table():
    table = new_trace_table(4)
    assert len(table) == 0
    assert table.colnames == [
        "Order",
        "TraceNb",
        "All",
        "Upper",
        "Lower",
        "Wavelength",
    ]
    assert table[COL_ALL].shape == (0, 4)

    with pytest.raises(InvalidInput):
        new_trace_table(0)


def test_index(table):
    assert get_trace_table_index(table, 5, 1) == 4
    assert get_trace_table_index(table, 7, 2) == 6
    assert get_trace_table_index(table, 7, 1) == -1
    assert get_trace_table_index(table, -10, 1) == -1


def test_orders():
    table = new_trace_table(2)
    for order, trace_nb in [(3, 1), (1, 1), (3, 2), (2, 1)]:
        add_trace(table, order, trace_nb, [1, 0], [2, 0], [0, 0])

    assert list(get_trace_table_orders(table)) == [3, 1, 2]


def test_add_trace():
    table = new_trace_table(2)

    idx = add_trace(table, 1, 1, [1.0, 2.0, 3.0], [2.0], [0.0])

    assert idx == 0
    # truncated to the number of coefficients
    assert list(table[COL_ALL][0]) == [1.0, 2.0]
    assert list(table["Upper"][0]) == [2.0, 0.0]
    assert list(table[COL_WAVELENGTH][0]) == [0.0, 0.0]

    with pytest.raises(InvalidInput):
        add_trace(table, 1, 1, [1.0], [2.0], [0.0])
    with pytest.raises(InvalidInput):
        add_trace(table, 2, 0, [1.0], [2.0], [0.0])
    assert len(table) == 1


def test_wave_poly(table):
    poly = get_trace_wave_poly(table, COL_WAVELENGTH, 3, 1)
    assert np.allclose(poly.coef, [1.1, 2.2, 3.3])

    with pytest.raises(InvalidInput):
        get_trace_wave_poly(table, "Foo", 3, 1)
    with pytest.raises(NotFound):
        get_trace_wave_poly(table, COL_WAVELENGTH, 7, 1)


def test_ycen():
    table = new_trace_table(2)
    add_trace(table, 1, 1, [1.0, 2.0], [10.0, 0.5], [4.0, 0.5])

    ycen = trace_get_ycen(table, 1, 1, 3)

    assert np.allclose(ycen, [3, 5, 7])
    assert trace_get_height(table, 1, 1, 3) == 6


def test_height_invalid():
    table = new_trace_table(2)
    add_trace(table, 1, 1, [5.0], [5.0], [5.0])

    with pytest.raises(ComputeFailure):
        trace_get_height(table, 1, 1, 10)


def test_validate(table):
    validate_trace_table(table)

    with pytest.raises(InvalidInput):
        validate_trace_table(Table({COL_ORDER: [1, 2]}))

    duplicate = Table({COL_ORDER: [1, 1], COL_TRACENB: [1, 1]})
    with pytest.raises(InvalidInput):
        validate_trace_table(duplicate)
