"""Normalisation helpers for black body radiation returning to the disk."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

LOWEST_MODEL_VALUE = 1e-8


@dataclass
class ReturnSpec2D:
    """Returning and primary spectra (counts per bin) of every disk zone."""

    ener: np.ndarray  # n_ener + 1 edges
    rlo: np.ndarray
    rhi: np.ndarray
    spec_ret: np.ndarray  # [zone][energy bin]
    spec_pri: np.ndarray  # [zone][energy bin]

    def __post_init__(self) -> None:
        self.ener = np.asarray(self.ener, dtype=float)
        self.rlo = np.asarray(self.rlo, dtype=float)
        self.rhi = np.asarray(self.rhi, dtype=float)
        self.spec_ret = np.asarray(self.spec_ret, dtype=float)
        self.spec_pri = np.asarray(self.spec_pri, dtype=float)
        shape = (len(self.rlo), len(self.ener) - 1)
        if len(self.rhi) != len(self.rlo):
            raise ValueError("rlo and rhi must have the same length")
        if self.spec_ret.shape != shape or self.spec_pri.shape != shape:
            raise ValueError(f"spectra must have the shape {shape}")

    @property
    def nrad(self) -> int:
        return len(self.rlo)

    @property
    def n_ener(self) -> int:
        return len(self.ener) - 1


def radial_grid_from_return_spec(spec: ReturnSpec2D) -> np.ndarray:
    """The nrad + 1 radii bounding the zones of ``spec``."""
    return np.append(spec.rlo, spec.rhi[-1])


def zone_incident_return_flux(return_spec: ReturnSpec2D, boost: float, izone: int) -> np.ndarray:
    """Returning flux of a zone scaled by |boost|, plus the primary flux if boost >= 0."""
    flux = return_spec.spec_ret[izone] * abs(boost)
    if boost >= 0:
        flux = flux + return_spec.spec_pri[izone]
    return flux


def calc_sum_in_energy_band(spec, ener, elo: float, ehi: float) -> float:
    """Sum of the bins that lie completely within [elo, ehi]."""
    edges = np.asarray(ener, dtype=float)
    inside = (edges[:-1] >= elo) & (edges[1:] <= ehi)
    return float(np.sum(np.asarray(spec, dtype=float)[inside]))


def norm_factor_retrad_to_bbody_high_energy(
    kt_bb: float, spec_in, spec_bb, ener, emax: float
) -> float:
    """Ratio of returning to black body flux above 4 kT_bb (up to ``emax``)."""
    elo = 4 * kt_bb
    norm_return = calc_sum_in_energy_band(spec_in, ener, elo, emax)
    norm_bbody = calc_sum_in_energy_band(spec_bb, ener, elo, emax)
    if norm_bbody == 0.0:
        raise ValueError("black body spectrum has no flux in the high energy band")
    return norm_return / norm_bbody


def set_low_values_to_zero(spec) -> np.ndarray:
    """Copy of ``spec`` with values below 1e-8 of its maximum set to zero."""
    out = np.array(spec, dtype=float)
    max_val = max(0.0, float(np.max(out))) if out.size else 0.0
    out[out < max_val * LOWEST_MODEL_VALUE] = 0.0
    return out


def set_values_outside_to_zero(spec, ener, emin: float, emax: float) -> np.ndarray:
    """Copy of ``spec`` with bins reaching outside [emin, emax] set to zero."""
    out = np.array(spec, dtype=float)
    edges = np.asarray(ener, dtype=float)
    out[(edges[:-1] < emin) | (edges[1:] > emax)] = 0.0
    return out