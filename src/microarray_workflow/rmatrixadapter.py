"""
RMatrixAdapter: a numpy array-compatible view of an R matrix.

Expression values produced by RMA stay in R; the adapter lets a BiocPy
SummarizedExperiment hold them as an assay and lets numpy / pandas code read
them without an explicit conversion step.

The array contract implemented here:
- __array__, __array_ufunc__, __array_function__
- shape, ndim, size, dtype, T
- __getitem__ (2D slicing done in R), __len__, __iter__
- row / column reductions computed in R (sum, mean, min, max)
"""

from __future__ import annotations
from typing import Any, Optional, Sequence, Union
import numpy as np
import pandas as pd
from numpy.typing import NDArray

IndexLike = Union[slice, int, Sequence[int], Sequence[bool], NDArray[Any]]


def _get_r_environment():
    from bioc2ri.lazy_r_env import get_r_environment
    return get_r_environment()


def _r_dim(rmat: Any) -> tuple[int, ...]:
    from bioc2ri.rutils import r_dim
    return tuple(int(x) for x in r_dim(rmat))


def _to_r_index(idx: IndexLike, n: int, r: Any) -> Any:
    """Convert a Python index into a 1-based R index vector."""
    if isinstance(idx, slice):
        start, stop, step = idx.indices(n)
        return r.IntVector(list(range(start + 1, stop + 1, step)))

    if isinstance(idx, (int, np.integer)):
        idx = int(idx)
        if idx < 0:
            idx = n + idx
        if not 0 <= idx < n:
            raise IndexError(f"index {idx} is out of bounds for axis with size {n}")
        return r.IntVector([idx + 1])

    idx_arr = np.asarray(idx)
    if idx_arr.dtype == bool:
        if len(idx_arr) != n:
            raise IndexError(
                f"boolean index has length {len(idx_arr)}, expected {n}"
            )
        return r.BoolVector(idx_arr.tolist())
    idx_arr = np.where(idx_arr < 0, idx_arr + n, idx_arr)
    return r.IntVector((idx_arr + 1).tolist())


class RMatrixAdapter:
    """
    Numpy-compatible wrapper around an R numeric matrix.

    Rows are probes / probesets and columns are samples for every matrix the
    workflow produces. Slicing is done in R and returns a new adapter;
    arithmetic materialises to numpy.

    Example:
        >>> adapter = RMatrixAdapter(exprs_r)
        >>> adapter.shape
        (12625, 12)
        >>> adapter[:10, :3]
        <RMatrixAdapter shape=(10, 3) dtype=float64>
        >>> adapter.mean(axis=1)  # average expression per probe
    """

    __slots__ = ("_rmat", "_shape", "_r", "_dtype_cache")

    __array_priority__ = 10.0

    def __init__(self, rmat: Any, r_manager: Optional[Any] = None) -> None:
        self._rmat = rmat
        self._r = r_manager if r_manager is not None else _get_r_environment()
        self._shape = _r_dim(rmat)
        self._dtype_cache: Optional[np.dtype] = None

    @property
    def rmat(self) -> Any:
        """The underlying R matrix (read-only)."""
        return self._rmat

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return int(np.prod(self._shape))

    @property
    def dtype(self) -> np.dtype:
        if self._dtype_cache is None:
            self._dtype_cache = self.to_numpy().dtype
        return self._dtype_cache

    @property
    def T(self) -> "RMatrixAdapter":
        """Transposed matrix (computed in R)."""
        return RMatrixAdapter(self._r.ro.baseenv["t"](self._rmat), self._r)

    # Conversion

    def to_numpy(self) -> NDArray[Any]:
        """Return a dense numpy copy of the matrix."""
        with self._r.localconverter(
            self._r.default_converter + self._r.numpy2ri.converter
        ):
            return np.asarray(self._r.get_conversion().rpy2py(self._rmat))

    def to_dataframe(self) -> pd.DataFrame:
        """Return the matrix as a DataFrame labelled with the R dimnames."""
        return pd.DataFrame(
            self.to_numpy(),
            index=self.get_rownames(),
            columns=self.get_colnames(),
        )

    def __array__(self, dtype: Any = None, copy: Any = None) -> NDArray[Any]:
        arr = self.to_numpy()
        if dtype is not None:
            arr = arr.astype(dtype, copy=False)
        return arr

    def __array_ufunc__(self, ufunc: np.ufunc, method: str, *inputs, **kwargs) -> Any:
        inputs = tuple(
            inp.to_numpy() if isinstance(inp, RMatrixAdapter) else inp
            for inp in inputs
        )
        return getattr(ufunc, method)(*inputs, **kwargs)

    def __array_function__(self, func, types, args, kwargs):
        def convert(x):
            return x.to_numpy() if isinstance(x, RMatrixAdapter) else x

        return func(
            *(convert(arg) for arg in args),
            **{k: convert(v) for k, v in kwargs.items()},
        )

    # Indexing

    def __getitem__(
        self, key: Union[IndexLike, tuple[IndexLike, ...]]
    ) -> Union["RMatrixAdapter", float]:
        """Subset in R. Two integer indices return a scalar, anything else an adapter."""
        if isinstance(key, tuple):
            if len(key) != 2:
                raise IndexError("Use 2D indexing: [rows, cols]")
            rows, cols = key
        else:
            rows, cols = key, slice(None)

        r = self._r
        nrow, ncol = self._shape
        ridx = _to_r_index(rows, nrow, r)
        cidx = _to_r_index(cols, ncol, r)
        bracket = r.ro.baseenv["["]

        if isinstance(rows, (int, np.integer)) and isinstance(cols, (int, np.integer)):
            return float(bracket(self._rmat, ridx, cidx)[0])
        return RMatrixAdapter(bracket(self._rmat, ridx, cidx, drop=False), r)

    def __len__(self) -> int:
        return self._shape[0]

    def __iter__(self):
        for i in range(len(self)):
            yield self[i, :]

    # Arithmetic / comparison materialise to numpy

    def __add__(self, other):
        return self.to_numpy() + np.asarray(other)

    def __radd__(self, other):
        return np.asarray(other) + self.to_numpy()

    def __sub__(self, other):
        return self.to_numpy() - np.asarray(other)

    def __rsub__(self, other):
        return np.asarray(other) - self.to_numpy()

    def __mul__(self, other):
        return self.to_numpy() * np.asarray(other)

    def __rmul__(self, other):
        return np.asarray(other) * self.to_numpy()

    def __truediv__(self, other):
        return self.to_numpy() / np.asarray(other)

    def __rtruediv__(self, other):
        return np.asarray(other) / self.to_numpy()

    def __pow__(self, other):
        return self.to_numpy() ** np.asarray(other)

    def __neg__(self):
        return -self.to_numpy()

    def __eq__(self, other):  # type: ignore[override]
        return self.to_numpy() == np.asarray(other)

    def __ne__(self, other):  # type: ignore[override]
        return self.to_numpy() != np.asarray(other)

    def __lt__(self, other):
        return self.to_numpy() < np.asarray(other)

    def __le__(self, other):
        return self.to_numpy() <= np.asarray(other)

    def __gt__(self, other):
        return self.to_numpy() > np.asarray(other)

    def __ge__(self, other):
        return self.to_numpy() >= np.asarray(other)

    __hash__ = None  # type: ignore[assignment]

    # Reductions computed in R

    def _reduce(self, total: str, by_col: str, by_row: str, axis: Optional[int]):
        base = self._r.ro.baseenv
        if axis is None:
            return float(base[total](self._rmat)[0])
        if axis == 0:
            return np.asarray(base[by_col](self._rmat))
        if axis == 1:
            return np.asarray(base[by_row](self._rmat))
        raise ValueError(f"Invalid axis {axis} for 2D array")

    def sum(self, axis: Optional[int] = None, **kwargs) -> Union[float, np.ndarray]:
        return self._reduce("sum", "colSums", "rowSums", axis)

    def mean(self, axis: Optional[int] = None, **kwargs) -> Union[float, np.ndarray]:
        return self._reduce("mean", "colMeans", "rowMeans", axis)

    def _apply(self, fname: str, axis: Optional[int]):
        base = self._r.ro.baseenv
        if axis is None:
            return float(base[fname](self._rmat)[0])
        if axis in (0, 1):
            margin = 2 if axis == 0 else 1
            return np.asarray(base["apply"](self._rmat, margin, base[fname]))
        raise ValueError(f"Invalid axis {axis} for 2D array")

    def min(self, axis: Optional[int] = None, **kwargs) -> Union[float, np.ndarray]:
        return self._apply("min", axis)

    def max(self, axis: Optional[int] = None, **kwargs) -> Union[float, np.ndarray]:
        return self._apply("max", axis)

    def copy(self) -> "RMatrixAdapter":
        return RMatrixAdapter(self._r.ro.baseenv["as.matrix"](self._rmat), self._r)

    def astype(self, dtype, copy: bool = True) -> np.ndarray:
        return self.to_numpy().astype(dtype, copy=copy)

    # Dimnames

    def _dimnames(self, fname: str) -> Optional[list[str]]:
        r = self._r
        names = r.ro.baseenv[fname](self._rmat)
        if names is r.ro.NULL or names == r.ro.NULL:
            return None
        return [str(x) for x in names]

    def get_rownames(self) -> Optional[list[str]]:
        """Probe identifiers stored on the R matrix, if any."""
        return self._dimnames("rownames")

    def get_colnames(self) -> Optional[list[str]]:
        """Sample identifiers stored on the R matrix, if any."""
        return self._dimnames("colnames")

    def __repr__(self) -> str:
        return f"<RMatrixAdapter shape={self._shape} dtype={self.dtype}>"

    def __bool__(self) -> bool:
        if self.size > 1:
            raise ValueError(
                "The truth value of an array with more than one element is ambiguous. "
                "Use a.any() or a.all()"
            )
        return bool(self.to_numpy().item())
