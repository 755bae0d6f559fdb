"""Emissivity profiles on radial grids and the photon fate fractions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .numerics import (
    binary_search,
    interp_lin_1d,
    interp_log_1d,
    inv_binary_search,
    trapez_integ_single,
    trapez_integ_single_rad_ascending,
)
from .physics import calc_fluxboost_source_disk, relat_abberation

RELTABLE_MAX_R = 1000.0


class GridError(ValueError):
    """A radial grid is not ordered or not covered as required."""


@dataclass
class PhotonFateFractions:
    """Fractions of primary photons hitting the black hole, the disk or escaping."""

    refl_frac: float = 0.0
    f_inf: float = 0.0
    f_inf_rest: float = 0.0
    f_ad: float = 0.0
    f_bh: float = 0.0

    def add_weighted(self, other: PhotonFateFractions, fraction: float) -> None:
        """Add ``other`` scaled by ``fraction`` (``f_inf`` is left untouched)."""
        self.refl_frac += other.refl_frac * fraction
        self.f_ad += other.f_ad * fraction
        self.f_inf_rest += other.f_inf_rest * fraction
        self.f_bh += other.f_bh * fraction


@dataclass
class EmisProfile:
    """Emissivity, emission and incidence angles on a radial grid."""

    re: np.ndarray
    emis: np.ndarray | None = None
    del_emit: np.ndarray | None = None
    del_inc: np.ndarray | None = None
    norm_factor_prim_spec: float = 0.0
    photon_fate_fractions: PhotonFateFractions | None = field(default=None)

    def __post_init__(self) -> None:
        self.re = np.asarray(self.re, dtype=float)
        n = len(self.re)
        for name in ("emis", "del_emit", "del_inc"):
            value = getattr(self, name)
            if value is None:
                setattr(self, name, np.zeros(n))
            else:
                arr = np.array(value, dtype=float)
                if len(arr) != n:
                    raise GridError(f"{name} has {len(arr)} values for {n} radii")
                setattr(self, name, arr)

    @property
    def nr(self) -> int:
        return len(self.re)

    def is_ascending(self) -> bool:
        """True if the radial grid increases with index."""
        return bool(self.re[0] < self.re[-1])

    def reversed(self) -> EmisProfile:
        """A copy with the order of all radial arrays inverted."""
        return EmisProfile(
            re=self.re[::-1].copy(),
            emis=self.emis[::-1].copy(),
            del_emit=self.del_emit[::-1].copy(),
            del_inc=self.del_inc[::-1].copy(),
            norm_factor_prim_spec=self.norm_factor_prim_spec,
            photon_fate_fractions=self.photon_fate_fractions,
        )


def norm_emis_profile(re, emis) -> np.ndarray:
    """Emissivity normalised such that its integral over the disk area is one."""
    re = np.asarray(re, dtype=float)
    emis = np.asarray(emis, dtype=float)
    weight = trapez_integ_single if re[1] < re[0] else trapez_integ_single_rad_ascending
    delta_area = np.array([weight(re, ii) * 2 for ii in range(len(re))])
    return emis / float(np.sum(emis * delta_area))


def get_emis_bkn(re, index1: float, index2: float, rbr: float) -> np.ndarray:
    """Normalised broken power law emissivity with break radius ``rbr``."""
    re = np.asarray(re, dtype=float)
    alpha = np.where(re > rbr, index2, index1)
    return norm_emis_profile(re, (re / rbr) ** (-alpha))


def _ipol_factor_radius(rlo: float, rhi: float, del_inci: float, radius: float) -> float:
    if math.degrees(del_inci) <= 60.0:
        return (radius - rlo) / (rhi - rlo)
    return (math.log(radius) - math.log(rlo)) / (math.log(rhi) - math.log(rlo))


def rebin_emisprofile_on_radial_grid(
    target: EmisProfile, table_profile: EmisProfile
) -> EmisProfile:
    """Interpolate an ascending table profile onto the descending grid of ``target``."""
    if target.is_ascending():
        raise GridError("output radial grid of the emissivity must be descending")
    if not table_profile.is_ascending():
        raise GridError("input emissivity grid must be ascending in radius")

    re = target.re
    re_tab = table_profile.re
    nr_tab = table_profile.nr

    kk = binary_search(re_tab, re[-1])
    for ii in reversed(range(target.nr)):
        radius = re[ii]
        while radius >= re_tab[kk + 1]:
            kk += 1
            if kk >= nr_tab - 1:
                if radius - RELTABLE_MAX_R <= 1e-6:
                    kk = nr_tab - 2
                    break
                raise GridError(
                    f"radius {radius:.4e} above the maximal possible radius "
                    f"of {RELTABLE_MAX_R:.4e}"
                )

        ifac = _ipol_factor_radius(
            re_tab[kk], re_tab[kk + 1], table_profile.del_emit[kk], radius
        )
        target.emis[ii] = interp_log_1d(
            ifac, table_profile.emis[kk], table_profile.emis[kk + 1]
        )
        target.del_emit[ii] = interp_lin_1d(
            ifac, table_profile.del_emit[kk], table_profile.del_emit[kk + 1]
        )
        target.del_inc[ii] = interp_lin_1d(
            ifac, table_profile.del_inc[kk], table_profile.del_inc[kk + 1]
        )
    return target


def calc_refl_frac(
    profile: EmisProfile,
    rin: float,
    rout: float,
    del_emit_ad_max: float,
    beta: float,
) -> PhotonFateFractions:
    """Reflection fraction and photon fates for a descending emissivity profile."""
    del_bh = profile.del_emit[inv_binary_search(profile.re, rin)]
    del_ad = profile.del_emit[inv_binary_search(profile.re, rout)]

    # photons may not cross the disk plane
    del_emit_ad_max = max(del_emit_ad_max, math.pi / 2.0)

    if beta > 1e-6:
        del_bh = relat_abberation(del_bh, -beta)
        del_ad = relat_abberation(del_ad, -beta)

    fractions = PhotonFateFractions(
        f_bh=0.5 * (1.0 - math.cos(del_bh)),
        f_ad=0.5 * (math.cos(del_bh) - math.cos(del_ad)),
        f_inf_rest=0.5 * (1.0 + math.cos(del_emit_ad_max)),
    )
    if beta > 1e-6:
        fractions.f_inf = 0.5 * (1.0 + math.cos(relat_abberation(del_emit_ad_max, -beta)))
    else:
        fractions.f_inf = fractions.f_inf_rest

    if fractions.f_inf + fractions.f_ad >= 1.0:
        raise ValueError("photon fractions reaching disk and infinity exceed unity")

    fractions.refl_frac = fractions.f_ad / fractions.f_inf
    return fractions


def apply_emis_fluxboost_source_disk(
    profile: EmisProfile, a: float, height: float, gamma: float, beta: float
) -> EmisProfile:
    """Multiply the emissivity by the flux boost from the source to the disk."""
    for ii in range(profile.nr):
        profile.emis[ii] *= calc_fluxboost_source_disk(
            profile.re[ii], profile.del_emit[ii], a, height, gamma, beta
        )
    return profile