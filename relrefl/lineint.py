"""Integration of the relativistic line transfer function over energy bins."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .numerics import binary_search
from .sysparams import GFAC_H

CACHE_LIMIT = 1e-8

_ROMBERG_PREC = 0.02
_ROMBERG_ITERMIN = 0
_ROMBERG_ITERMAX = 5
_ROMBERG_MAXITER = 6


def gstar2ener(gstar: float, gmin: float, gmax: float, line_energy: float) -> float:
    """Energy belonging to the normalised shift ``gstar`` in [0, 1]."""
    return (gstar * (gmax - gmin) + gmin) * line_energy


@dataclass
class RelbFunc:
    """Transfer function of one radial zone, to be integrated over energy.

    ``trff`` and ``cosne`` are indexed [gstar][k] with k = 0, 1 for the two
    branches of the transfer function.
    """

    gstar: np.ndarray
    trff: np.ndarray
    cosne: np.ndarray
    re: float
    gmin: float
    gmax: float
    emis: float
    limb_law: int = 0
    save_g_ind: int = 0
    cache_bin_ener: float = -1.0
    cache_rad_relb_fun: float = -1.0
    cached_relbf: bool = False
    cache_val_relb_func: list[float] = field(default_factory=lambda: [0.0, 0.0])

    def __post_init__(self) -> None:
        self.gstar = np.asarray(self.gstar, dtype=float)
        self.trff = np.asarray(self.trff, dtype=float)
        self.cosne = np.asarray(self.cosne, dtype=float)
        if self.trff.shape != (len(self.gstar), 2) or self.cosne.shape != self.trff.shape:
            raise ValueError("trff and cosne must have the shape [gstar][2]")
        if not self.gmax > self.gmin:
            raise ValueError("gmax must be larger than gmin")

    @property
    def ng(self) -> int:
        return len(self.gstar)

    @property
    def del_g(self) -> float:
        return 1.0 / (self.gmax - self.gmin)

    def value(self, eg: float, k: int) -> float:
        """Transfer function at the energy shift ``eg`` for branch ``k``."""
        egstar = (eg - self.gmin) * self.del_g
        gstar = self.gstar
        ind = self.save_g_ind
        if not gstar[ind] <= egstar < gstar[ind + 1]:
            ind = binary_search(gstar, egstar)
            self.save_g_ind = ind

        inte = (egstar - gstar[ind]) / (gstar[ind + 1] - gstar[ind])
        inte1 = 1.0 - inte
        ftrf = inte * self.trff[ind][k] + inte1 * self.trff[ind + 1][k]

        arg = egstar - egstar * egstar
        if arg < 0.0:
            return math.nan
        denom = (self.gmax - self.gmin) * math.sqrt(arg)
        numer = eg**3 * ftrf * self.emis
        if denom == 0.0:
            val = math.nan if numer == 0.0 else math.copysign(math.inf, numer)
        else:
            val = numer / denom

        if self.limb_law == 0:  # isotropic limb law (Svoboda 2009)
            return val
        fmu0 = inte * self.cosne[ind][k] + inte1 * self.cosne[ind + 1][k]
        limb = 1.0
        if self.limb_law == 1:  # Laor (1991)
            limb = 1.0 + 2.06 * fmu0
        elif self.limb_law == 2:  # Haardt (1993)
            limb = math.log(1.0 + 1.0 / fmu0)
        return val * limb


def romberg_integration(a: float, b: float, k: int, func: RelbFunc) -> float:
    """Romberg integral of branch ``k`` of ``func`` from ``a`` to ``b``."""
    t = [[0.0] * (_ROMBERG_MAXITER + 1) for _ in range(_ROMBERG_MAXITER + 1)]
    itermax = min(_ROMBERG_ITERMAX, _ROMBERG_MAXITER)

    r = func.cache_val_relb_func[k] if func.cached_relbf else func.value(a, k)
    func.cache_val_relb_func[k] = func.value(b, k)
    func.cache_rad_relb_fun = func.re

    ta = (r + func.cache_val_relb_func[k]) / 2.0
    pas = b - a
    t[0][0] = ta * pas
    obtprec = 1.0
    niter = 0
    while niter < _ROMBERG_ITERMIN or (obtprec > _ROMBERG_PREC and niter <= itermax):
        niter += 1
        pas /= 2.0
        s = ta + sum(func.value(a + pas * ii, k) for ii in range(1, 2**niter))
        t[0][niter] = s * pas
        r = 1.0
        for ii in range(1, niter + 1):
            r *= 4.0
            jj = niter - ii
            t[ii][jj] = (r * t[ii - 1][jj + 1] - t[ii - 1][jj]) / (r - 1.0)
        diff = abs(t[niter][0] - t[niter - 1][0])
        if t[niter][0] == 0.0:
            obtprec = 0.0 if diff == 0.0 else math.inf
        else:
            obtprec = diff / abs(t[niter][0]) if t[niter][0] > 0 else diff / t[niter][0]
    return t[niter][0]


def int_edge(blo: float, bhi: float, h: float, func: RelbFunc, line_energy: float) -> float:
    """Approximate integral within [0, H] or [1-H, 1] of gstar, where the profile diverges."""
    if blo <= 0.5:
        hex_ = h
        lo, hi = blo, bhi
    else:
        # the transformation x -> 1 - x maps the upper edge onto the lower one
        hex_ = 1.0 - h
        lo, hi = 1.0 - bhi, 1.0 - blo

    energy = gstar2ener(hex_, func.gmin, func.gmax, line_energy)
    norm = sum(func.value(energy, k) for k in range(2))
    norm *= math.sqrt(h)
    return 2 * norm * (math.sqrt(hi) - math.sqrt(lo)) * line_energy * (func.gmax - func.gmin)


def int_romb(lo: float, hi: float, func: RelbFunc, line_energy: float) -> float:
    """Integral of both branches over [lo, hi].

    The smooth red wing (below 0.95 times the line energy) is integrated with
    a single trapezoid, everything above with Romberg's method.
    """
    if lo >= line_energy * 0.95:
        return sum(romberg_integration(lo, hi, k, func) for k in range(2))
    mid = (hi + lo) / 2.0
    return sum(func.value(mid, k) * (hi - lo) for k in range(2))


def _clip01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def integ_relline_bin(func: RelbFunc, rlo0: float, rhi0: float) -> float:
    """Line flux in the energy bin [rlo0, rhi0] (see Dauser+2010)."""
    line_ener = 1.0
    flu = 0.0

    gblo = _clip01((rlo0 / line_ener - func.gmin) * func.del_g)
    gbhi = _clip01((rhi0 / line_ener - func.gmin) * func.del_g)
    if gbhi == 0:
        return 0.0

    rlo = rlo0
    rhi = rhi0

    # lower edge approximation
    if gblo <= GFAC_H:
        hlo = gblo
        hhi = GFAC_H
        rlo = gstar2ener(GFAC_H, func.gmin, func.gmax, line_ener)
        if gbhi <= GFAC_H:
            hhi = gbhi
            rlo = -1.0
        flu += int_edge(hlo, hhi, GFAC_H, func, line_ener)

    # upper edge approximation
    if gbhi >= 1.0 - GFAC_H:
        hhi = gbhi
        hlo = 1.0 - GFAC_H
        rhi = gstar2ener(1 - GFAC_H, func.gmin, func.gmax, line_ener)
        if gblo >= 1.0 - GFAC_H:
            hlo = gblo
            rhi = -1.0
        flu += int_edge(hlo, hhi, GFAC_H, func, line_ener)

    if rhi >= 0 and rlo >= 0:
        func.cached_relbf = (
            abs(rlo - func.cache_bin_ener) < CACHE_LIMIT
            and abs(func.re - func.cache_rad_relb_fun) < CACHE_LIMIT
        )
        flu += int_romb(rlo, rhi, func, line_ener)

    return flu