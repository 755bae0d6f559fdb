"""Relativistic physics around a Kerr black hole and disk properties."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import numpy as np


class EmisType(IntEnum):
    """Kind of emissivity profile irradiating the disk."""

    LP = 1
    BKN = 2
    ALPHA = 3
    CONST = 4


class TProfile(IntEnum):
    """Kind of disk temperature profile."""

    ALPHA = 1
    DISKBB = 2


def kerr_rms(a: float) -> float:
    """Radius of marginal stability (ISCO) for spin ``a``."""
    sign = -1.0 if a < 0 else 1.0
    z1 = 1.0 + (1.0 - a * a) ** (1.0 / 3.0) * (
        (1.0 + a) ** (1.0 / 3.0) + (1.0 - a) ** (1.0 / 3.0)
    )
    z2 = math.sqrt(3.0 * a * a + z1 * z1)
    return 3.0 + z2 - sign * math.sqrt((3.0 - z1) * (3.0 + z1 + 2.0 * z2))


def kerr_rplus(a: float) -> float:
    """Radius of the event horizon for spin ``a``."""
    return 1.0 + math.sqrt(1.0 - a * a)


@dataclass
class RelParams:
    """Parameters of the relativistic model; angles in radians."""

    a: float = 0.998
    incl: float = math.radians(30.0)
    rin: float | None = None
    rout: float = 400.0
    emis_type: EmisType = EmisType.LP
    height: float = 3.0
    htop: float = 0.0
    beta: float = 0.0
    gamma: float = 2.0
    emis1: float = 3.0
    emis2: float = 3.0
    rbr: float = 15.0
    limb: int = 0
    return_rad: int = 0
    num_zones: int = 1
    rrad_corr_factors: Any = None

    def __post_init__(self) -> None:
        if self.rin is None:
            self.rin = kerr_rms(self.a)


def ut_disk(r: float, a: float) -> float:
    """u^t component of the four-velocity of a thin disk (Bardeen+72)."""
    sr = math.sqrt(r)
    return (r * sr + a) / (sr * math.sqrt(r * r - 3 * r + 2 * a * sr))


def calc_proper_area_ring(rlo: float, rhi: float, a: float) -> float:
    """Proper area of a disk ring between ``rlo`` and ``rhi``."""
    if not -1 <= a < 1:
        raise ValueError(f"spin {a} outside [-1, 1)")
    rmean = 0.5 * (rlo + rhi)
    rho2 = rmean * rmean + a * a
    delta = rmean * rmean - 2 * rmean + a * a
    area = 2 * math.pi / math.sqrt(delta)
    area *= math.sqrt(rho2 * rho2 - a * a * delta)
    return area * (rhi - rlo)


def bbody_spec(ener, temperature: float, gfac: float) -> np.ndarray:
    """Black body photon spectrum at the bin centres of ``ener`` (n+1 edges)."""
    edges = np.asarray(ener, dtype=float)
    emean = 0.5 * (edges[:-1] + edges[1:])
    shifted = emean / gfac
    return shifted**2 / np.expm1(shifted / temperature)


def _disk_temperature_alpha(r: float, rin: float) -> float:
    return (r / rin) ** (-3.0 / 4) * (1 - math.sqrt(rin / r)) ** (1.0 / 4)


def _disk_temperature_diskbb(r: float, rin: float, tin: float) -> float:
    return (tin * (r / rin)) ** (-3.0 / 4)


def _zone_means(rlo, rhi) -> np.ndarray:
    return 0.5 * (np.asarray(rlo, dtype=float) + np.asarray(rhi, dtype=float))


def disk_tprofile_alpha(rlo, rhi, rin: float, tin: float) -> np.ndarray:
    """Shakura-Sunyaev temperature profile with ``tin`` as the maximum temperature."""
    rmax = 1.5 ** (4.0 / 5) * rin
    norm = tin / _disk_temperature_alpha(rmax, rin)
    rmean = _zone_means(rlo, rhi)
    if rmean[0] < rin:
        raise ValueError("radial grid starts inside the inner disk radius")
    return np.array([norm * _disk_temperature_alpha(r, rin) for r in rmean])


def disk_tprofile_diskbb(rlo, rhi, tin: float) -> np.ndarray:
    """Temperature profile as used by the diskbb model."""
    rmean = _zone_means(rlo, rhi)
    rin = rmean[0]
    return np.array([_disk_temperature_diskbb(r, rin, tin) for r in rmean])


def get_tprofile(rlo, rhi, rin: float, tin: float, profile_type) -> np.ndarray:
    """Temperature profile of the requested type."""
    if profile_type == TProfile.ALPHA:
        return disk_tprofile_alpha(rlo, rhi, rin, tin)
    if profile_type == TProfile.DISKBB:
        return disk_tprofile_diskbb(rlo, rhi, tin)
    raise ValueError(f"temperature profile type {profile_type!r} is unknown")


def density_ss73_zone_a(radius: float, rms: float) -> float:
    """Radial density dependence of zone A (Shakura & Sunyaev 1973), unity-scaled."""
    return (radius / rms) ** 1.5 * (1 - math.sqrt(rms / radius)) ** -2


def relat_abberation(delta: float, beta: float) -> float:
    """Relativistic aberration of an angle for velocity ``beta``."""
    cos_d = math.cos(delta)
    return math.acos((cos_d - beta) / (1 - beta * cos_d))


def calc_g_inf(height: float, a: float) -> float:
    """Energy shift from a lamp post source at ``height`` to infinity."""
    return math.sqrt(1.0 - 2 * height / (height * height + a * a))


def doppler_factor(delta: float, beta: float) -> float:
    """Doppler factor of a moving primary source."""
    return math.sqrt(1.0 - beta * beta) / (1.0 + beta * math.cos(delta))


def gi_potential_lp(r: float, a: float, h: float, beta: float, delta: float) -> float:
    """Energy shift g = E/E_i from the lamp post at ``h`` to the disk at ``r``."""
    ut_h = math.sqrt((h * h + a * a) / (h * h - 2 * h + a * a))
    gi = ut_disk(r, a) / ut_h
    if abs(beta) < 1e-6:
        return gi

    gam = 1.0 / math.sqrt(1.0 - beta * beta)
    sign = -1.0 if delta > math.pi / 2 else 1.0
    hh = h * h + a * a
    delta_eq = h * h - 2 * h + a * a
    q2 = math.sin(delta) ** 2 * (hh**2 / delta_eq) - a * a
    beta_fac = math.sqrt(hh**2 - delta_eq * (q2 + a * a))
    beta_fac = gam * (1.0 + sign * beta_fac / hh * beta)
    return gi / beta_fac


def doppler_factor_source_obs(params: RelParams) -> float:
    """Doppler factor from the source to the observer (light bending ignored)."""
    delta_obs = math.pi - params.incl
    if not math.pi / 2 < delta_obs < math.pi:
        raise ValueError(f"inclination {params.incl} rad outside (0, pi/2)")
    return doppler_factor(delta_obs, params.beta)


def energy_shift_source_obs(params: RelParams | None) -> float:
    """Energy shift from the lamp post to the observer; 1 without LP geometry."""
    if params is None or params.emis_type != EmisType.LP:
        return 1.0
    g_inf = calc_g_inf(params.height, params.a)
    if params.beta < 1e-4:
        return g_inf
    return g_inf * doppler_factor_source_obs(params)


def energy_shift_source_disk(
    params: RelParams | None, radius_disk: float, del_emit: float
) -> float:
    """Energy shift from the lamp post to the disk; 1 without LP geometry."""
    if params is None or params.emis_type != EmisType.LP:
        return 1.0
    return gi_potential_lp(radius_disk, params.a, params.height, params.beta, del_emit)


def calc_lp_emissivity_newton(h: float, r: float) -> float:
    """Newtonian lamp post emissivity at radius ``r`` for source height ``h``."""
    emis = (1.0 / ((r / h) ** 2 + 1)) ** 1.5
    return emis / (2 * math.pi * h * h)


def calc_fluxboost_source_disk(
    rad: float, del_emit: float, a: float, height: float, gamma: float, beta: float
) -> float:
    """Flux boost g^Gamma times the squared Doppler factor for a moving source."""
    boost = gi_potential_lp(rad, a, height, beta, del_emit) ** gamma
    if beta > 1e-6:
        boost *= doppler_factor(del_emit, beta) ** 2
    return boost