"""Emissivity of radiation returning to the disk for a corona irradiation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .emisprofile import EmisProfile, GridError, rebin_emisprofile_on_radial_grid
from .numerics import binary_search, get_gfac_grid

_log = logging.getLogger(__name__)


@dataclass
class TabulatedReturnFractions:
    """Returning radiation fractions of one spin, on the full table radial grid."""

    rlo: np.ndarray
    rhi: np.ndarray
    gmin: np.ndarray  # [ind_ro][ind_re]
    gmax: np.ndarray  # [ind_ro][ind_re]
    frac_g: np.ndarray  # [ind_ro][ind_re][ig]
    f_ret: np.ndarray  # [ind_re]

    def __post_init__(self) -> None:
        for name in ("rlo", "rhi", "gmin", "gmax", "frac_g", "f_ret"):
            setattr(self, name, np.asarray(getattr(self, name), dtype=float))

    @property
    def nrad(self) -> int:
        return len(self.rlo)

    @property
    def ng(self) -> int:
        return self.frac_g.shape[-1]


@dataclass
class ReturningFractions:
    """Returning fractions restricted to the disk zones of the current model."""

    rlo: np.ndarray
    rhi: np.ndarray
    tf_r: np.ndarray  # [i_rad_incident][i_rad_emitted]
    tab_data: TabulatedReturnFractions
    a: float = 0.0
    rad: np.ndarray | None = None
    irad: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.rlo = np.asarray(self.rlo, dtype=float)
        self.rhi = np.asarray(self.rhi, dtype=float)
        self.tf_r = np.asarray(self.tf_r, dtype=float)
        if self.rad is None:
            self.rad = 0.5 * (self.rlo + self.rhi)
        else:
            self.rad = np.asarray(self.rad, dtype=float)
        if self.irad is None:
            self.irad = np.arange(len(self.rlo))
        else:
            self.irad = np.asarray(self.irad, dtype=int)

    @property
    def nrad(self) -> int:
        return len(self.rlo)


@dataclass
class RradCorrFactors:
    """Flux and energy shift correction factors per radial zone."""

    rgrid: np.ndarray  # n_zones + 1 bin edges
    corrfac_flux: np.ndarray = field(default=None)
    corrfac_gshift: np.ndarray = field(default=None)

    def __post_init__(self) -> None:
        self.rgrid = np.asarray(self.rgrid, dtype=float)
        n = len(self.rgrid) - 1
        if n < 1:
            raise GridError("a correction factor grid needs at least one zone")
        self.corrfac_flux = (
            np.ones(n) if self.corrfac_flux is None else np.array(self.corrfac_flux, dtype=float)
        )
        self.corrfac_gshift = (
            np.ones(n)
            if self.corrfac_gshift is None
            else np.array(self.corrfac_gshift, dtype=float)
        )

    @property
    def n_zones(self) -> int:
        return len(self.rgrid) - 1

    @classmethod
    def from_bins(cls, rlo, rhi) -> RradCorrFactors:
        """Factors on the zones given by their lower and upper radii."""
        rlo = np.asarray(rlo, dtype=float)
        rhi = np.asarray(rhi, dtype=float)
        return cls(rgrid=np.append(rlo, rhi[-1]))

    @classmethod
    def from_grid(cls, rgrid) -> RradCorrFactors:
        """Factors on the zones given by the bin edges ``rgrid``."""
        return cls(rgrid=np.array(rgrid, dtype=float))


def corrected_gshift_fluxboost_factor(xill_gshift_fac: float, g: float, gamma: float) -> float:
    """Flux boost for energy shift ``g``, corrected by the reflection spectrum factor.

    Never boosts for g < 1 and never returns a negative factor.
    """
    g0 = 2.0 / 3
    if xill_gshift_fac < 1:  # parabola with f(g=0)=0
        a = (xill_gshift_fac / g0 - 1) / (g0 - 1)
        b = 1 - a
        corr = 1.0 / g * (1.0 / g * a + b) if g >= 1 else g * (g * a + b)
    else:  # linear interpolation
        alin = (xill_gshift_fac - 1) / (g0 - 1)
        blin = 1 - alin
        corr = (1.0 / g * alin + blin) if g >= 1 else (g * alin + blin)

    factor = g**gamma * corr

    if g < 1 and factor > 1:
        if factor > 1.1:
            _log.debug("gshift-fluxboost factor %.4f > 1 for g=%.4f, resetting to 1", factor, g)
        factor = 1.0

    if factor < 0:
        factor = 0.0

    return factor


def _calc_rrad_emis_zone(
    tab: TabulatedReturnFractions, ind_ro: int, ind_re: int, gamma: float, corrfac_gshift: float
) -> float:
    g = get_gfac_grid(tab.gmin[ind_ro][ind_re], tab.gmax[ind_ro][ind_re], tab.ng)
    frac = tab.frac_g[ind_ro][ind_re]
    if abs(corrfac_gshift - 1) > 1e-3:
        factors = np.array(
            [corrected_gshift_fluxboost_factor(corrfac_gshift, gi, gamma) / gi for gi in g]
        )
    else:
        factors = np.where(np.abs(g - 1) > 1e-3, g ** (gamma - 1), 1.0)
    return float(np.sum(frac * factors))


def calc_rrad_emis_corona(
    fractions: ReturningFractions,
    corr_factors: RradCorrFactors | None,
    emis_input: EmisProfile,
    gamma: float,
) -> EmisProfile:
    """Returning radiation emissivity on the ascending zone grid of ``fractions``."""
    nrad = fractions.nrad
    if emis_input.nr != nrad:
        raise GridError("emissivity must be given on the grid of the returning fractions")

    result = EmisProfile(re=fractions.rad)
    for i_inc in range(nrad):
        ind_ro = fractions.irad[i_inc]
        total = 0.0
        for i_emit in range(nrad):
            ind_re = fractions.irad[i_emit]
            corr_g = corr_factors.corrfac_gshift[i_emit] if corr_factors is not None else 1.0
            total += (
                _calc_rrad_emis_zone(fractions.tab_data, ind_ro, ind_re, gamma, corr_g)
                * fractions.tf_r[i_inc][i_emit]
                * emis_input.emis[i_emit]
            )
        if corr_factors is not None:
            total *= corr_factors.corrfac_flux[i_inc]
        result.emis[i_inc] = total
    return result


def determine_rlo_rhi(profile: EmisProfile) -> tuple[float, float]:
    """Lowest and highest radius of an emissivity profile."""
    if profile.is_ascending():
        rlo, rhi = profile.re[0], profile.re[-1]
    else:
        rlo, rhi = profile.re[-1], profile.re[0]
    if not rlo < rhi:
        raise GridError("emissivity radial grid does not span a range")
    return float(rlo), float(rhi)


def _rebin_to_grid(rmean, rgrid0, value0) -> np.ndarray:
    n0 = len(value0)
    out = np.empty(len(rmean))
    for ii, r in enumerate(rmean):
        if r < rgrid0[0]:
            ind = 0
        else:
            ind = min(binary_search(rgrid0, r), n0 - 1)
        out[ii] = value0[ind]
    return out


def rebin_corrfactors_to_rradtable_grid(
    corr_factors: RradCorrFactors | None, fractions: ReturningFractions
) -> RradCorrFactors | None:
    """Assign correction factors to the zones of the returning fractions."""
    if corr_factors is None:
        return None
    result = RradCorrFactors.from_bins(fractions.rlo, fractions.rhi)
    result.corrfac_flux = _rebin_to_grid(
        fractions.rad, corr_factors.rgrid, corr_factors.corrfac_flux
    )
    result.corrfac_gshift = _rebin_to_grid(
        fractions.rad, corr_factors.rgrid, corr_factors.corrfac_gshift
    )
    return result


def _rebin_mean(re, emis, fractions: ReturningFractions) -> np.ndarray:
    order = np.argsort(re)
    re_asc = np.asarray(re, dtype=float)[order]
    emis_asc = np.asarray(emis, dtype=float)[order]
    out = np.empty(fractions.nrad)
    for ii in range(fractions.nrad):
        mask = (re_asc >= fractions.rlo[ii]) & (re_asc < fractions.rhi[ii])
        if np.any(mask):
            out[ii] = float(np.mean(emis_asc[mask]))
        else:
            out[ii] = float(np.interp(fractions.rad[ii], re_asc, emis_asc))
    return out


def get_rrad_emis_corona(
    emis_input: EmisProfile,
    fractions: ReturningFractions,
    gamma: float,
    corr_factors: RradCorrFactors | None = None,
) -> EmisProfile:
    """Returning radiation emissivity on the (descending) grid of ``emis_input``."""
    determine_rlo_rhi(emis_input)

    rebinned_input = EmisProfile(
        re=fractions.rad, emis=_rebin_mean(emis_input.re, emis_input.emis, fractions)
    )
    table_corr = rebin_corrfactors_to_rradtable_grid(corr_factors, fractions)
    emis_return = calc_rrad_emis_corona(fractions, table_corr, rebinned_input, gamma)

    target = EmisProfile(re=emis_input.re)
    return rebin_emisprofile_on_radial_grid(target, emis_return)