"""Tests for the GridArray container."""

import numpy as np
import pytest

from accavity.grid import GridArray


class TestGridArray:
    def test_allocates_zeros(self):
        grid = GridArray(4, 5, 3)
        assert grid.shape == (4, 5, 3)
        assert grid.data.dtype == np.float64
        assert np.all(grid.data == 0.0)
        assert grid.data.flags["C_CONTIGUOUS"]

    def test_rejects_1d_shape(self):
        with pytest.raises(ValueError):
            GridArray(10)

    def test_element_access(self):
        grid = GridArray(3, 3)
        grid[1, 2] = 7.0
        assert grid[1, 2] == 7.0
        assert grid.data[1, 2] == 7.0

    def test_checked_rejects_out_of_range(self):
        grid = GridArray(3, 3, checked=True)
        with pytest.raises(IndexError):
            grid[3, 0]
        with pytest.raises(IndexError):
            grid[0, -1] = 1.0

    def test_unchecked_follows_numpy(self):
        grid = GridArray(3, 3, checked=False)
        grid[-1, -1] = 2.0
        assert grid.data[2, 2] == 2.0

    def test_slices_are_not_checked(self):
        grid = GridArray(4, 4, checked=True)
        grid[1:-1, 1:-1] = 1.0
        assert grid.data.sum() == 4.0

    def test_swap_exchanges_buffers(self):
        a = GridArray.from_array(np.ones((3, 3)))
        b = GridArray(3, 3)
        a_buffer, b_buffer = a.data, b.data

        a.swap(b)

        assert a.data is b_buffer
        assert b.data is a_buffer
        assert np.all(b.data == 1.0)

    def test_copy_from_keeps_buffers_distinct(self):
        a = GridArray(3, 3)
        b = GridArray.from_array(np.full((3, 3), 2.0))
        a.copy_from(b)
        b.fill(0.0)
        assert np.all(a.data == 2.0)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            GridArray(3, 3).copy_from(GridArray(3, 4))
        with pytest.raises(ValueError):
            GridArray(3, 3).swap(GridArray(3, 3, 3))
