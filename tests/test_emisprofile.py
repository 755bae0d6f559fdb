import math

import numpy as np
import pytest

from relrefl.emisprofile import (
    EmisProfile,
    GridError,
    PhotonFateFractions,
    apply_emis_fluxboost_source_disk,
    calc_refl_frac,
    get_emis_bkn,
    norm_emis_profile,
    rebin_emisprofile_on_radial_grid,
)


def _desc_grid(n=30, lo=2.0, hi=800.0):
    return np.geomspace(hi, lo, n)


def test_norm_is_scale_invariant():
    re = _desc_grid()
    emis = re**-3.0
    np.testing.assert_allclose(norm_emis_profile(re, emis), norm_emis_profile(re, 7.0 * emis))


def test_bkn_ascending_matches_descending():
    re = _desc_grid()
    desc = get_emis_bkn(re, 3.0, 2.0, 20.0)
    asc = get_emis_bkn(re[::-1], 3.0, 2.0, 20.0)
    np.testing.assert_allclose(asc, desc[::-1])


def test_bkn_power_law_ratio():
    re = _desc_grid()
    emis = get_emis_bkn(re, 3.0, 3.0, re[0])
    assert emis[5] / emis[10] == pytest.approx((re[5] / re[10]) ** -3.0)


def test_bkn_break_changes_slope():
    re = _desc_grid()
    emis = get_emis_bkn(re, 4.0, 2.0, 20.0)
    outer = [i for i in range(len(re) - 1) if re[i + 1] > 20.0]
    i = outer[0]
    assert emis[i] / emis[i + 1] == pytest.approx((re[i] / re[i + 1]) ** -2.0)


def _table(n=40):
    re = np.geomspace(1.5, 1000.0, n)
    return EmisProfile(re=re, emis=re**-3.0, del_emit=np.linspace(0.2, 0.9, n))


def test_rebin_reproduces_table_points():
    table = _table()
    target = EmisProfile(re=table.re[5:35][::-1].copy())
    rebin_emisprofile_on_radial_grid(target, table)
    np.testing.assert_allclose(target.emis, table.emis[5:35][::-1], rtol=1e-9)
    np.testing.assert_allclose(target.del_emit, table.del_emit[5:35][::-1], rtol=1e-9)


def test_rebin_at_outer_table_edge():
    table = _table()
    target = EmisProfile(re=np.array([1000.0, 500.0, 10.0]))
    rebin_emisprofile_on_radial_grid(target, table)
    assert target.emis[0] == pytest.approx(table.emis[-1])


def test_rebin_rejects_ascending_target():
    table = _table()
    with pytest.raises(GridError):
        rebin_emisprofile_on_radial_grid(EmisProfile(re=np.array([2.0, 5.0, 9.0])), table)


def test_rebin_rejects_descending_table():
    table = _table().reversed()
    with pytest.raises(GridError):
        rebin_emisprofile_on_radial_grid(EmisProfile(re=np.array([9.0, 5.0, 2.0])), table)


def test_rebin_rejects_radius_beyond_maximum():
    re = np.geomspace(1.5, 500.0, 20)
    table = EmisProfile(re=re, emis=re**-3.0)
    target = EmisProfile(re=np.array([1200.0, 100.0, 3.0]))
    with pytest.raises(GridError):
        rebin_emisprofile_on_radial_grid(target, table)


def _angle_profile():
    re = _desc_grid(20)
    return EmisProfile(re=re, del_emit=np.linspace(1.4, 0.3, 20))


def test_refl_frac_clamps_escape_angle():
    prof = _angle_profile()
    frac = calc_refl_frac(prof, prof.re[-1], prof.re[0], 0.5, 0.0)
    assert frac.f_inf == 0.5
    assert frac.f_inf_rest == frac.f_inf
    assert frac.refl_frac == pytest.approx(frac.f_ad / frac.f_inf)


def test_refl_frac_partition():
    prof = _angle_profile()
    frac = calc_refl_frac(prof, prof.re[-1], prof.re[0], 2.0, 0.0)
    del_ad = prof.del_emit[0]
    assert frac.f_bh + frac.f_ad == pytest.approx(0.5 * (1 - math.cos(del_ad)))


def test_refl_frac_rejects_unphysical():
    re = _desc_grid(10)
    prof = EmisProfile(re=re, del_emit=np.linspace(math.pi, 0.0, 10))
    with pytest.raises(ValueError):
        calc_refl_frac(prof, re[-1], re[0], 0.0, 0.0)


def test_fluxboost_gamma_zero_is_identity():
    prof = _angle_profile()
    prof.emis[:] = 2.0
    apply_emis_fluxboost_source_disk(prof, 0.9, 5.0, 0.0, 0.0)
    np.testing.assert_allclose(prof.emis, 2.0)


def test_fluxboost_scales_with_gamma():
    p1 = _angle_profile()
    p1.emis[:] = 1.0
    p2 = _angle_profile()
    p2.emis[:] = 1.0
    apply_emis_fluxboost_source_disk(p1, 0.9, 5.0, 1.0, 0.0)
    apply_emis_fluxboost_source_disk(p2, 0.9, 5.0, 2.0, 0.0)
    np.testing.assert_allclose(p2.emis, p1.emis**2)


def test_add_weighted():
    total = PhotonFateFractions()
    single = PhotonFateFractions(refl_frac=2.0, f_inf=0.4, f_inf_rest=0.4, f_ad=0.3, f_bh=0.2)
    total.add_weighted(single, 0.5)
    total.add_weighted(single, 0.5)
    assert total.refl_frac == pytest.approx(2.0)
    assert total.f_ad == pytest.approx(0.3)
    assert total.f_bh == pytest.approx(0.2)
    assert total.f_inf == 0.0


def test_reversed_roundtrip_and_ascending():
    prof = _angle_profile()
    assert not prof.is_ascending()
    rev = prof.reversed()
    assert rev.is_ascending()
    np.testing.assert_array_equal(rev.reversed().del_emit, prof.del_emit)


def test_length_mismatch_raises():
    with pytest.raises(GridError):
        EmisProfile(re=np.array([3.0, 2.0]), emis=np.array([1.0]))