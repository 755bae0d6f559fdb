# relrefl

Building blocks for modelling relativistic reflection from accretion disks
around Kerr black holes. Everything works on plain numpy arrays; the tables
the calculations need (transfer functions, returning radiation fractions)
are passed in by the caller.

## Modules

- `relrefl.numerics` – grid searches (`binary_search` for ascending,
  `inv_binary_search` for descending grids), linear and logarithmic
  interpolation (`interp_lin_1d`, `interp_log_1d`), ring area weights
  (`trapez_integ_single`, `trapez_integ_single_rad_ascending`) and grid
  construction (`get_log_grid`, `get_fine_radial_grid`, `get_gfac_grid`,
  `get_ipol_factor`).
- `relrefl.physics` – Kerr metric helpers (`kerr_rms`, `kerr_rplus`,
  `ut_disk`, `calc_proper_area_ring`), lamp-post energy shifts
  (`gi_potential_lp`, `calc_g_inf`, `energy_shift_source_obs`,
  `energy_shift_source_disk`), Doppler factors and aberration, the flux boost
  from source to disk (`calc_fluxboost_source_disk`), the Newtonian lamp-post
  emissivity, disk temperature profiles (`get_tprofile` with `TProfile.ALPHA`
  or `TProfile.DISKBB`), the SS73 zone-A density and black body spectra
  (`bbody_spec`). Model parameters are held in the `RelParams` dataclass; the
  emissivity kind is an `EmisType`.
- `relrefl.emisprofile` – the `EmisProfile` dataclass (emissivity, emission
  and incidence angles on a radial grid), `PhotonFateFractions`, the
  normalised broken power law (`get_emis_bkn`, `norm_emis_profile`),
  rebinning of an ascending table profile onto a descending grid
  (`rebin_emisprofile_on_radial_grid`), the reflection fraction
  (`calc_refl_frac`) and `apply_emis_fluxboost_source_disk`.
- `relrefl.corona` – returning radiation emissivity for a corona:
  `TabulatedReturnFractions`, `ReturningFractions`, correction factors
  (`RradCorrFactors.from_bins`, `RradCorrFactors.from_grid`,
  `rebin_corrfactors_to_rradtable_grid`), `corrected_gshift_fluxboost_factor`,
  `calc_rrad_emis_corona` and `get_rrad_emis_corona`, which returns the
  returning emissivity on the grid of the input profile.
- `relrefl.sysparams` – a transfer function table (`RelTableEntry`,
  `RelTable`) and its interpolation for spin, inclination and disk radii onto
  a fine radial grid (`interpol_rel_table` returning a `RelSysPar`);
  `new_gstar_grid` builds the fixed gstar grid.
- `relrefl.lineint` – integration of one radial zone's transfer function
  (`RelbFunc`) over an energy bin: `integ_relline_bin`, with edge
  approximations (`int_edge`), Romberg integration (`romberg_integration`,
  `int_romb`) and `gstar2ener`.
- `relrefl.bbspec` – black body spectra of disk zones in counts per bin
  (`get_bbody_specs`), spectra returning to each zone
  (`calc_rr_bbspec_gzone`, `calc_rr_bbspec_ring`, `get_returnrad_specs`) and a
  multi-temperature disk spectrum (`spec_diskbb`).
- `relrefl.bbnorm` – `ReturnSpec2D` holding returning and primary zone
  spectra, `radial_grid_from_return_spec`, `zone_incident_return_flux`,
  band sums and the high-energy normalisation factor
  (`calc_sum_in_energy_band`, `norm_factor_retrad_to_bbody_high_energy`) and
  spectrum clean-up (`set_low_values_to_zero`, `set_values_outside_to_zero`).

Invalid input (an unsuitably ordered or uncovered radial grid, values outside
a table, an unknown profile type) raises `ValueError`; grid problems raise
its subclass `GridError` from `relrefl.emisprofile`.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np
from relrefl.physics import kerr_rms, gi_potential_lp
from relrefl.emisprofile import get_emis_bkn
from relrefl.sysparams import new_gstar_grid
from relrefl.lineint import RelbFunc, integ_relline_bin

spin = 0.998
rin = kerr_rms(spin)
radii = np.geomspace(1000.0, rin, 200)        # descending radial grid
emis = get_emis_bkn(radii, 3.0, 3.0, 15.0)   # normalised over the disk area
g = gi_potential_lp(10.0, spin, 3.0, 0.0, 0.0)

gstar, _ = new_gstar_grid(20)
zone = RelbFunc(
    gstar=gstar,
    trff=np.ones((20, 2)),
    cosne=np.full((20, 2), 0.5),
    re=10.0, gmin=0.8, gmax=1.1, emis=1.0,
)
flux = integ_relline_bin(zone, 0.9, 0.95)
```

## What the package does not do

- It reads no table files. Transfer function and returning radiation tables
  must be built by the caller as `RelTable` and `TabulatedReturnFractions` /
  `ReturningFractions`.
- It has no lamp-post table interpolation and no single entry point that
  picks an emissivity profile from `RelParams.emis_type`; the broken power
  law is available directly, lamp-post profiles must be supplied as
  `EmisProfile` objects.
- It integrates line profiles per radial zone and energy bin, but does not
  assemble a complete multi-zone line spectrum, convolve it with a
  reflection spectrum, or provide any command-line tool.