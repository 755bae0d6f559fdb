"""Black body spectra of disk zones, directly emitted and returning to the disk."""

from __future__ import annotations

import math

import numpy as np

from .corona import ReturningFractions
from .numerics import get_gfac_grid
from .physics import TProfile, bbody_spec, get_tprofile

# difference between gmin and gmax above which the energy shift is taken into account
LIM_GFAC_RR_BBODY = 0.001


def normalize_flux_rrad(ener, specs) -> np.ndarray:
    """Convert spectra per energy into counts per bin by multiplying with bin widths."""
    widths = np.diff(np.asarray(ener, dtype=float))
    return np.asarray(specs, dtype=float) * widths


def get_bbody_specs(ener, temperature, emin: float, emax: float) -> np.ndarray:
    """Black body spectrum of every zone in counts per bin, zero outside [emin, emax]."""
    edges = np.asarray(ener, dtype=float)
    outside = (edges[:-1] < emin) | (edges[1:] > emax)
    specs = np.array([bbody_spec(edges, temp, 1.0) for temp in temperature])
    specs[:, outside] = 0.0
    return normalize_flux_rrad(edges, specs)


def calc_rr_bbspec_gzone(ener, temperature: float, gfac, frac_g) -> np.ndarray:
    """Black body spectrum summed over energy shifts ``gfac`` with weights ``frac_g``."""
    edges = np.asarray(ener, dtype=float)
    spec = np.zeros(len(edges) - 1)
    for g, frac in zip(gfac, frac_g):
        spec += bbody_spec(edges, temperature, g) * frac
    return spec


def calc_rr_bbspec_ring(ener, irad: int, temperature, fractions: ReturningFractions) -> np.ndarray:
    """Spectrum returning to zone ``irad`` from all emitting zones (per energy)."""
    edges = np.asarray(ener, dtype=float)
    tab = fractions.tab_data
    spec = np.zeros(len(edges) - 1)
    for ii in range(fractions.nrad):
        gmin = tab.gmin[irad][ii]
        gmax = tab.gmax[irad][ii]
        if abs(gmax - gmin) > LIM_GFAC_RR_BBODY:
            gfac = get_gfac_grid(gmin, gmax, tab.ng)
            spec_r = calc_rr_bbspec_gzone(edges, temperature[ii], gfac, tab.frac_g[irad][ii])
        else:
            spec_r = bbody_spec(edges, temperature[ii], gmin)
        spec += spec_r * tab.f_ret[ii] * fractions.tf_r[irad][ii]
    return spec


def get_returnrad_specs(ener, fractions: ReturningFractions, temperature) -> np.ndarray:
    """Returning black body spectrum of every zone in counts per bin."""
    specs = np.array(
        [calc_rr_bbspec_ring(ener, ii, temperature, fractions) for ii in range(fractions.nrad)]
    )
    return normalize_flux_rrad(ener, specs)


def spec_diskbb(ener, tin: float, fractions: ReturningFractions, emin: float, emax: float) -> np.ndarray:
    """Multi-temperature disk black body spectrum in counts per bin."""
    rlo = fractions.rlo
    rhi = fractions.rhi
    if not rhi[0] > rlo[0]:
        raise ValueError("radial zones must have rhi > rlo")
    temperature = get_tprofile(rlo, rhi, 0.5 * (rlo[0] + rhi[0]), tin, TProfile.DISKBB)
    specs = get_bbody_specs(ener, temperature, emin, emax)
    ring_area = math.pi * (rhi**2 - rlo**2)
    specs = specs * ring_area[:, np.newaxis]
    return specs.sum(axis=0)