import math

import numpy as np
import pytest

from relrefl.numerics import get_fine_radial_grid
from relrefl.physics import kerr_rms
from relrefl.sysparams import (
    GFAC_H,
    RelSysPar,
    RelTable,
    RelTableEntry,
    interpol_rel_table,
    new_gstar_grid,
)

SPINS = [0.5, 0.998]
MU0 = [0.1, 0.5, 1.0]
NR = 40
NG = 20


def make_entry(a, mu0):
    r = get_fine_radial_grid(kerr_rms(a), 1000.0, NR)
    gmin = np.full(NR, 0.4 + 0.2 * mu0)
    gmax = np.full(NR, 1.3)
    trff = np.full((NR, NG), 2.0)
    cosne = np.full((NR, NG), mu0)
    return RelTableEntry(r=r, gmin=gmin, gmax=gmax, trff1=trff, trff2=trff,
                         cosne1=cosne, cosne2=cosne)


def make_table():
    return RelTable(a=SPINS, mu0=MU0, arr=[[make_entry(a, m) for m in MU0] for a in SPINS])


def test_gstar_grid_edges_and_widths():
    gstar, d_gstar = new_gstar_grid(NG)
    assert gstar[0] == pytest.approx(GFAC_H)
    assert gstar[-1] == pytest.approx(1 - GFAC_H)
    assert float(np.sum(d_gstar)) == pytest.approx(1.0)
    np.testing.assert_allclose(d_gstar[1:-1], gstar[1] - gstar[0])


def test_gstar_grid_needs_two_points():
    with pytest.raises(ValueError):
        new_gstar_grid(1)


def test_empty_sys_par():
    sp = RelSysPar.empty(30, 10)
    assert sp.nr == 30
    assert sp.ng == 10
    assert sp.trff.shape == (30, 10, 2)
    assert sp.emis is None
    assert sp.limb_law == 0
    np.testing.assert_allclose(sp.gstar, new_gstar_grid(10)[0])


def test_table_properties():
    table = make_table()
    assert (table.n_a, table.n_mu0, table.n_r, table.n_g) == (2, 3, NR, NG)


def test_table_shape_checked():
    with pytest.raises(ValueError):
        RelTable(a=SPINS, mu0=MU0, arr=[[make_entry(0.5, 0.1)]])


def test_interpolation_of_constant_values():
    sp = interpol_rel_table(make_table(), 0.7, math.radians(45.0), 6.0, 400.0, 50)
    assert sp.re[0] == pytest.approx(400.0)
    assert sp.re[-1] == pytest.approx(6.0)
    assert sp.trff.shape == (50, NG, 2)
    np.testing.assert_allclose(sp.gmax, 1.3)
    np.testing.assert_allclose(sp.trff, 2.0)


def test_interpolation_linear_in_inclination():
    incl = math.radians(45.0)
    sp = interpol_rel_table(make_table(), 0.7, incl, 6.0, 400.0, 50)
    np.testing.assert_allclose(sp.gmin, 0.4 + 0.2 * math.cos(incl))
    np.testing.assert_allclose(sp.cosne, math.cos(incl))


def test_explicit_fine_grid_is_used():
    grid = get_fine_radial_grid(8.0, 300.0, 25)
    sp = interpol_rel_table(make_table(), 0.7, math.radians(60.0), 8.0, 300.0, grid)
    np.testing.assert_allclose(sp.re, grid)
    np.testing.assert_allclose(sp.gstar, new_gstar_grid(NG)[0])


def test_inner_radius_below_isco_rejected():
    with pytest.raises(ValueError):
        interpol_rel_table(make_table(), 0.7, math.radians(45.0), 2.0, 400.0, 50)


def test_outer_radius_must_exceed_inner():
    with pytest.raises(ValueError):
        interpol_rel_table(make_table(), 0.7, math.radians(45.0), 20.0, 10.0, 50)


def test_inclination_outside_table_rejected():
    with pytest.raises(ValueError):
        interpol_rel_table(make_table(), 0.7, math.radians(89.9), 6.0, 400.0, 50)