"""Grid construction, searching and interpolation helpers."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def _check_grid(arr: Sequence[float]) -> int:
    n = len(arr)
    if n < 2:
        raise ValueError("a grid needs at least two points")
    return n


def binary_search(arr: Sequence[float], value: float) -> int:
    """Index ``i`` of an ascending grid with ``arr[i] <= value < arr[i+1]``.

    Values outside the grid map to the first or the last interval.
    """
    klo, khi = 0, _check_grid(arr) - 1
    while khi - klo > 1:
        mid = (khi + klo) // 2
        if arr[mid] > value:
            khi = mid
        else:
            klo = mid
    return klo


def inv_binary_search(arr: Sequence[float], value: float) -> int:
    """Index ``i`` of a descending grid with ``arr[i] >= value > arr[i+1]``."""
    klo, khi = 0, _check_grid(arr) - 1
    while khi - klo > 1:
        mid = (khi + klo) // 2
        if arr[mid] < value:
            khi = mid
        else:
            klo = mid
    return klo


def interp_lin_1d(ifac: float, lo: float, hi: float) -> float:
    """Linear interpolation between ``lo`` (ifac=0) and ``hi`` (ifac=1)."""
    return (1.0 - ifac) * lo + ifac * hi


def interp_log_1d(ifac: float, lo: float, hi: float) -> float:
    """Logarithmic interpolation; falls back to linear for non-positive values."""
    if lo <= 0.0 or hi <= 0.0:
        return interp_lin_1d(ifac, lo, hi)
    return math.exp((1.0 - ifac) * math.log(lo) + ifac * math.log(hi))


def _ring_weight(re: Sequence[float], index: int, sign: float) -> float:
    n = _check_grid(re)
    if not 0 <= index < n:
        raise IndexError(f"index {index} outside grid of {n} points")
    if index == 0:
        dr = 0.5 * (re[index] - re[index + 1])
    elif index == n - 1:
        dr = 0.5 * (re[index - 1] - re[index])
    else:
        dr = 0.5 * (re[index - 1] - re[index + 1])
    return re[index] * sign * dr * math.pi


def trapez_integ_single(re: Sequence[float], index: int) -> float:
    """Area weight ``pi * r * dr`` of one zone of a descending radial grid."""
    return _ring_weight(re, index, 1.0)


def trapez_integ_single_rad_ascending(re: Sequence[float], index: int) -> float:
    """Area weight ``pi * r * dr`` of one zone of an ascending radial grid."""
    return _ring_weight(re, index, -1.0)


def get_log_grid(lo: float, hi: float, n: int) -> np.ndarray:
    """Logarithmically spaced grid of ``n`` points from ``lo`` to ``hi``."""
    if n < 2:
        raise ValueError("a logarithmic grid needs at least two points")
    steps = np.arange(n) / (n - 1)
    return np.exp(steps * (math.log(hi) - math.log(lo)) + math.log(lo))


def get_fine_radial_grid(rin: float, rout: float, n: int) -> np.ndarray:
    """Radial grid from ``rout`` down to ``rin``, equally spaced in 1/sqrt(r)."""
    if n < 2:
        raise ValueError("a radial grid needs at least two points")
    r1 = 1.0 / math.sqrt(rout)
    r2 = 1.0 / math.sqrt(rin)
    grid = (1.0 / (np.arange(n) * (r2 - r1) / (n - 1) + r1)) ** 2
    if np.any(grid <= 1.0):
        raise ValueError("radial grid must lie above r = 1")
    return grid


def get_ipol_factor(value: float, grid: Sequence[float]) -> tuple[int, float]:
    """Return the bin index in an ascending grid and the interpolation factor."""
    ind = binary_search(grid, value)
    ifac = (value - grid[ind]) / (grid[ind + 1] - grid[ind])
    return ind, ifac


def get_gfac_grid(gmin: float, gmax: float, ng: int) -> np.ndarray:
    """Linear grid of ``ng`` energy shift values from ``gmin`` to ``gmax``."""
    if ng < 2:
        raise ValueError("an energy shift grid needs at least two points")
    return gmin + (gmax - gmin) * (np.arange(ng) / (ng - 1))