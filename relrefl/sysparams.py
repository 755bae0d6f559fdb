"""Relativistic system parameters interpolated from the line transfer table."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Integral

import numpy as np

from .emisprofile import RELTABLE_MAX_R, EmisProfile, GridError
from .numerics import binary_search, get_fine_radial_grid, interp_lin_1d, inv_binary_search
from .physics import kerr_rms

# precision to calculate gstar from [H:1-H] instead of [0:1]
GFAC_H = 5e-3


@dataclass
class RelTableEntry:
    """Transfer function table for one spin and one inclination.

    ``r`` is descending; the transfer arrays are indexed [radius][gstar].
    """

    r: np.ndarray
    gmin: np.ndarray
    gmax: np.ndarray
    trff1: np.ndarray
    trff2: np.ndarray
    cosne1: np.ndarray
    cosne2: np.ndarray

    def __post_init__(self) -> None:
        for name in ("r", "gmin", "gmax", "trff1", "trff2", "cosne1", "cosne2"):
            setattr(self, name, np.asarray(getattr(self, name), dtype=float))
        n_r = len(self.r)
        if len(self.gmin) != n_r or len(self.gmax) != n_r:
            raise ValueError("gmin and gmax need one value per radius")
        shape = self.trff1.shape
        if shape[0] != n_r or any(
            getattr(self, name).shape != shape for name in ("trff2", "cosne1", "cosne2")
        ):
            raise ValueError("transfer function arrays must share the shape [radius][gstar]")

    @property
    def stacked_trff(self) -> np.ndarray:
        return np.stack((self.trff1, self.trff2), axis=-1)

    @property
    def stacked_cosne(self) -> np.ndarray:
        return np.stack((self.cosne1, self.cosne2), axis=-1)


@dataclass
class RelTable:
    """Transfer function table on a grid of spin and cosine of inclination."""

    a: np.ndarray
    mu0: np.ndarray
    arr: list[list[RelTableEntry]]  # [ind_a][ind_mu0]

    def __post_init__(self) -> None:
        self.a = np.asarray(self.a, dtype=float)
        self.mu0 = np.asarray(self.mu0, dtype=float)
        if len(self.arr) != len(self.a) or any(len(row) != len(self.mu0) for row in self.arr):
            raise ValueError("table entries must match the spin and inclination grids")

    @property
    def n_a(self) -> int:
        return len(self.a)

    @property
    def n_mu0(self) -> int:
        return len(self.mu0)

    @property
    def n_r(self) -> int:
        return len(self.arr[0][0].r)

    @property
    def n_g(self) -> int:
        return self.arr[0][0].trff1.shape[1]


def new_gstar_grid(ng: int) -> tuple[np.ndarray, np.ndarray]:
    """The fixed gstar grid within [H, 1-H] and the width of each of its bins."""
    if ng < 2:
        raise ValueError("the gstar grid needs at least two points")
    gstar = GFAC_H + (1.0 - 2 * GFAC_H) / (ng - 1) * np.arange(ng)
    step = gstar[1] - gstar[0]
    d_gstar = np.full(ng, step)
    d_gstar[0] = d_gstar[-1] = 0.5 * step + GFAC_H
    return gstar, d_gstar


@dataclass
class RelSysPar:
    """Transfer functions on a fine radial grid for the current parameters."""

    re: np.ndarray
    gmin: np.ndarray
    gmax: np.ndarray
    trff: np.ndarray  # [radius][gstar][2]
    cosne: np.ndarray  # [radius][gstar][2]
    gstar: np.ndarray
    d_gstar: np.ndarray
    emis: EmisProfile | None = None
    limb_law: int = 0

    @property
    def nr(self) -> int:
        return len(self.re)

    @property
    def ng(self) -> int:
        return len(self.gstar)

    @classmethod
    def empty(cls, nr: int, ng: int) -> RelSysPar:
        """Zero-filled parameters for ``nr`` radii and ``ng`` gstar values."""
        gstar, d_gstar = new_gstar_grid(ng)
        return cls(
            re=np.zeros(nr),
            gmin=np.zeros(nr),
            gmax=np.zeros(nr),
            trff=np.zeros((nr, ng, 2)),
            cosne=np.zeros((nr, ng, 2)),
            gstar=gstar,
            d_gstar=d_gstar,
        )


def _interp_2d(ifac1, ifac2, v11, v21, v12, v22):
    return (
        (1 - ifac1) * (1 - ifac2) * v11
        + ifac1 * (1 - ifac2) * v21
        + (1 - ifac1) * ifac2 * v12
        + ifac1 * ifac2 * v22
    )


def _ifac(grid: np.ndarray, value: float) -> tuple[int, float]:
    ind = binary_search(grid, value)
    ifac = (value - grid[ind]) / (grid[ind + 1] - grid[ind])
    if not 0.0 <= ifac <= 1.0:
        raise ValueError(f"value {value} outside the table range [{grid[0]}, {grid[-1]}]")
    return ind, float(ifac)


def interpol_rel_table(
    table: RelTable, a: float, incl: float, rin: float, rout: float, fine_grid
) -> RelSysPar:
    """Interpolate the table for spin ``a`` and inclination ``incl`` (radians).

    ``fine_grid`` is either the number of points of the fine radial grid
    from ``rout`` down to ``rin`` or the (descending) grid itself.
    """
    rms = kerr_rms(a)
    if not rout > rin:
        raise ValueError("outer radius must be larger than the inner radius")
    if rin < rms:
        raise ValueError(f"inner radius {rin} below the ISCO {rms}")
    if rout > RELTABLE_MAX_R:
        raise ValueError(f"outer radius {rout} above {RELTABLE_MAX_R}")

    mu0 = math.cos(incl)
    ind_a, ifac_a = _ifac(table.a, a)
    ind_mu0, ifac_mu0 = _ifac(table.mu0, mu0)

    corners = (
        table.arr[ind_a][ind_mu0],
        table.arr[ind_a + 1][ind_mu0],
        table.arr[ind_a][ind_mu0 + 1],
        table.arr[ind_a + 1][ind_mu0 + 1],
    )

    def plane(getter):
        return _interp_2d(ifac_a, ifac_mu0, *(getter(entry) for entry in corners))

    # the radial grid only changes with spin
    re_tab = np.array(interp_lin_1d(ifac_a, corners[0].r, corners[1].r), dtype=float)
    if re_tab[-1] > rms and (re_tab[-1] - rms) / re_tab[-1] < 1e-3:
        re_tab[-1] = rms

    gmin_tab = plane(lambda e: e.gmin)
    gmax_tab = plane(lambda e: e.gmax)
    trff_tab = plane(lambda e: e.stacked_trff)
    cosne_tab = plane(lambda e: e.stacked_cosne)

    ind_rmin = inv_binary_search(re_tab, rin)
    ind_rmax = inv_binary_search(re_tab, rout)

    if isinstance(fine_grid, Integral):
        re = get_fine_radial_grid(rin, rout, int(fine_grid))
    else:
        re = np.array(fine_grid, dtype=float)

    # the table does not hold rmax=1000 exactly, only values close to it
    if re_tab[ind_rmax] < RELTABLE_MAX_R and re_tab[ind_rmax] * 1.01 > RELTABLE_MAX_R:
        re_tab[ind_rmax] = RELTABLE_MAX_R

    if (
        ind_rmin <= 0
        or not re_tab[ind_rmin + 1] <= rin <= re_tab[ind_rmin]
        or not re_tab[ind_rmax + 1] <= rout <= re_tab[ind_rmax]
        or ind_rmax > ind_rmin
    ):
        raise GridError("disk radii are not covered by the radial grid of the table")

    sys_par = RelSysPar.empty(len(re), table.n_g)
    sys_par.re = re

    ind_tabr = ind_rmin
    for ii in reversed(range(len(re))):
        radius = re[ii]
        while radius >= re_tab[ind_tabr]:
            ind_tabr -= 1
            if ind_tabr < 0:
                if radius - RELTABLE_MAX_R <= 1e-6:
                    ind_tabr = 0
                    break
                raise GridError(
                    f"radius {radius:.4e} above the maximal possible radius "
                    f"of {RELTABLE_MAX_R:.4e}"
                )

        lo, hi = ind_tabr + 1, ind_tabr
        ifac_r = (radius - re_tab[lo]) / (re_tab[hi] - re_tab[lo])
        # extrapolation is only allowed for the last bin
        if ifac_r > 1.0 and ind_tabr > 0:
            raise GridError(
                f"radius {radius:.4e} not found in [{re_tab[lo]:.4e},{re_tab[hi]:.4e}]"
            )

        sys_par.trff[ii] = interp_lin_1d(ifac_r, trff_tab[lo], trff_tab[hi])
        sys_par.cosne[ii] = interp_lin_1d(ifac_r, cosne_tab[lo], cosne_tab[hi])
        sys_par.gmin[ii] = interp_lin_1d(ifac_r, gmin_tab[lo], gmin_tab[hi])
        sys_par.gmax[ii] = interp_lin_1d(ifac_r, gmax_tab[lo], gmax_tab[hi])

    return sys_par