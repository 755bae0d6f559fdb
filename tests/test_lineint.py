import math

import numpy as np
import pytest

from relrefl.lineint import (
    RelbFunc,
    gstar2ener,
    int_edge,
    int_romb,
    integ_relline_bin,
    romberg_integration,
)
from relrefl.sysparams import GFAC_H, new_gstar_grid


def make_func(limb_law=0, emis=1.0, ng=20):
    gstar, _ = new_gstar_grid(ng)
    trff = np.ones((ng, 2))
    cosne = np.full((ng, 2), 0.5)
    return RelbFunc(
        gstar=gstar, trff=trff, cosne=cosne, re=10.0, gmin=0.5, gmax=1.5,
        emis=emis, limb_law=limb_law,
    )


def test_gstar2ener_limits():
    assert gstar2ener(0.0, 0.5, 1.5, 2.0) == pytest.approx(1.0)
    assert gstar2ener(1.0, 0.5, 1.5, 2.0) == pytest.approx(3.0)


def test_value_linear_in_emissivity():
    f1 = make_func(emis=1.0)
    f2 = make_func(emis=2.0)
    assert f2.value(1.1, 0) == pytest.approx(2 * f1.value(1.1, 0))


def test_limb_laws_scale_isotropic_value():
    iso = make_func(limb_law=0).value(1.1, 1)
    laor = make_func(limb_law=1).value(1.1, 1)
    haardt = make_func(limb_law=2).value(1.1, 1)
    assert laor / iso == pytest.approx(1.0 + 2.06 * 0.5)
    assert haardt / iso == pytest.approx(math.log(1.0 + 1.0 / 0.5))


def test_invalid_shapes_raise():
    with pytest.raises(ValueError):
        RelbFunc(
            gstar=np.linspace(0, 1, 5), trff=np.ones((4, 2)), cosne=np.ones((4, 2)),
            re=10.0, gmin=0.5, gmax=1.5, emis=1.0,
        )


def test_romberg_is_additive():
    func = make_func()
    whole = romberg_integration(1.0, 1.2, 0, func)
    parts = romberg_integration(1.0, 1.1, 0, func) + romberg_integration(1.1, 1.2, 0, func)
    assert whole > 0
    assert whole == pytest.approx(parts, rel=0.03)


def test_romberg_caches_upper_value():
    func = make_func()
    romberg_integration(1.0, 1.2, 1, func)
    assert func.cache_val_relb_func[1] == pytest.approx(make_func().value(1.2, 1))
    assert func.cache_rad_relb_fun == func.re


def test_int_romb_blue_wing_uses_romberg():
    assert int_romb(1.0, 1.2, make_func(), 1.0) == pytest.approx(
        romberg_integration(1.0, 1.2, 0, make_func())
        + romberg_integration(1.0, 1.2, 1, make_func())
    )


def test_int_romb_red_wing_uses_midpoint():
    ref = make_func()
    expected = sum(ref.value(0.8, k) * 0.2 for k in range(2))
    assert int_romb(0.7, 0.9, make_func(), 1.0) == pytest.approx(expected)


def test_int_edge_scales_with_sqrt():
    full = int_edge(0.0, GFAC_H, GFAC_H, make_func(), 1.0)
    quarter = int_edge(0.0, GFAC_H / 4, GFAC_H, make_func(), 1.0)
    assert full / quarter == pytest.approx(2.0)
    assert int_edge(0.2, 0.2, GFAC_H, make_func(), 1.0) == 0.0


def test_bins_outside_profile_are_empty():
    assert integ_relline_bin(make_func(), 0.1, 0.4) == 0.0
    assert integ_relline_bin(make_func(), 1.6, 2.0) == 0.0


def test_bin_within_lower_edge_uses_edge_approximation():
    lo = gstar2ener(0.001, 0.5, 1.5, 1.0)
    hi = gstar2ener(0.003, 0.5, 1.5, 1.0)
    expected = int_edge(0.001, 0.003, GFAC_H, make_func(), 1.0)
    assert integ_relline_bin(make_func(), lo, hi) == pytest.approx(expected)


def test_integ_relline_bin_additive_in_blue_wing():
    whole = integ_relline_bin(make_func(), 1.0, 1.2)
    parts = integ_relline_bin(make_func(), 1.0, 1.1) + integ_relline_bin(make_func(), 1.1, 1.2)
    assert whole > 0
    assert whole == pytest.approx(parts, rel=0.03)