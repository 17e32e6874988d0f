"""Dense grid containers for nodal fields.

A ``GridArray`` owns one contiguous C-ordered numpy buffer of shape
``(nx, ny)`` for scalar grids or ``(nx, ny, neq)`` for the primitive
variable vector ``[p, u, v]``. The last index varies fastest.

Two buffers can exchange ownership in O(1) with :meth:`GridArray.swap`,
which is how the point-Jacobi scheme turns the freshly written field into
the current one without copying.

Set ``ACCAVITY_DEBUG=1`` (or pass ``checked=True``) to turn out-of-range
integer indices into ``IndexError``, including negative indices that numpy
would silently wrap around.
"""

import os

import numpy as np

DEBUG = os.environ.get("ACCAVITY_DEBUG", "0") == "1"


class GridArray:
    """Contiguous 2-D or 3-D array of float64 values.

    Parameters
    ----------
    *shape : int
        Grid dimensions, e.g. ``GridArray(nx, ny)`` or ``GridArray(nx, ny, 3)``.
    checked : bool, optional
        Validate integer indices on element access. Defaults to the
        ``ACCAVITY_DEBUG`` environment setting.
    """

    def __init__(self, *shape: int, checked: bool = None):
        if len(shape) not in (2, 3):
            raise ValueError(f"GridArray must be 2-D or 3-D, got shape {shape}")
        self._data = np.zeros(shape, dtype=np.float64)
        self.checked = DEBUG if checked is None else checked

    @classmethod
    def from_array(cls, values: np.ndarray, checked: bool = None) -> "GridArray":
        """Create a container holding a copy of ``values``."""
        grid = cls(*np.shape(values), checked=checked)
        grid._data[...] = values
        return grid

    @property
    def data(self) -> np.ndarray:
        """Underlying buffer (kernels operate on this directly)."""
        return self._data

    @property
    def shape(self) -> tuple:
        return self._data.shape

    def _check_key(self, key):
        if not isinstance(key, tuple):
            key = (key,)
        for axis, idx in enumerate(key):
            if isinstance(idx, (int, np.integer)):
                if axis >= self._data.ndim or not 0 <= idx < self._data.shape[axis]:
                    raise IndexError(
                        f"index {idx} out of range for axis {axis} of grid with shape {self.shape}"
                    )

    def __getitem__(self, key):
        if self.checked:
            self._check_key(key)
        return self._data[key]

    def __setitem__(self, key, value):
        if self.checked:
            self._check_key(key)
        self._data[key] = value

    def _require_same_shape(self, other: "GridArray"):
        if other.shape != self.shape:
            raise ValueError(f"Grid shape mismatch: {self.shape} vs {other.shape}")

    def copy_from(self, other: "GridArray"):
        """Copy values from ``other`` into this container's buffer."""
        self._require_same_shape(other)
        np.copyto(self._data, other._data)

    def swap(self, other: "GridArray"):
        """Exchange buffer ownership with ``other`` (no data is copied)."""
        self._require_same_shape(other)
        self._data, other._data = other._data, self._data

    def fill(self, value: float):
        self._data.fill(value)

    def __repr__(self):
        return f"GridArray(shape={self.shape}, checked={self.checked})"
