import numpy as np
import pytest
import pathlib
import sys

# Add the root directory to the Python path
parent_dir = pathlib.Path(__file__).resolve().parent
sys.path.insert(0, str(parent_dir.parent))

from pyJX import (
    cos_solar_zenith_angle, CosineScaledFlux, PhotolysisKernel, PhotolysisChannel,
    TemperatureTable, SpectralDataStore, MissingSpectrumError, default_store, load_fastjx_store,
    calibrate
)

def noon_flux(t=12*3600., lat=30., lon=0.):
    """
    Fast-JX box-model flux on 1970-01-01 at 30N, 0E.
    """
    cos_sza = cos_solar_zenith_angle(t, lat, lon)
    return CosineScaledFlux().flux_vector(cos_sza)

def raw_rates(name, temperatures, flux):
    kernel = PhotolysisKernel(default_store().get(name))
    return [kernel.raw_rate(T, flux) for T in temperatures]

def test_O3_O1D_fixture():
    flux = noon_flux()
    expected = [
        1.8101452673074732e15, 1.826603407114214e15, 3.058563926067911e15, 3.6580860457380195e15
    ]
    assert np.allclose(raw_rates('O3_O1D', [100., 220., 300., 400.], flux), expected, rtol=1e-6, atol=0)

def test_H2O2_fixture():
    flux = noon_flux()
    expected = [5.750403366146315e-5, 5.887584133606186e-5, 6.024764962089199e-5]
    assert np.allclose(raw_rates('H2O2', [150., 250., 350.], flux), expected, rtol=1e-6, atol=0)

def test_CH2O_fixtures():
    flux = noon_flux()

    expected_a = [5.200743895500182e-5, 5.20050010722231e-5, 5.200066705839427e-5]
    assert np.allclose(raw_rates('CH2O_a', [200., 250., 300.], flux), expected_a, rtol=1e-6, atol=0)

    expected_b = [4.4408142733768658e-5, 4.4432171720179984e-5, 4.4474889918244559e-5]
    assert np.allclose(raw_rates('CH2O_b', [200., 250., 300.], flux), expected_b, rtol=1e-6, atol=0)

def test_CH3OOH_fixture():
    """
    Temperature-independent, and zero when the sun is down.
    """
    j = [
        raw_rates('CH3OOH', [200.], noon_flux(t=hour*3600.))[0] for hour in [6., 12., 18.]
    ]
    assert j[0] == 0. and j[2] == 0.
    assert np.isclose(j[1], 3.2971571798761734e-5, rtol=1e-6, atol=0)

    # Same rate at any temperature
    assert np.allclose(raw_rates('CH3OOH', [150., 250., 400.], noon_flux()), j[1], rtol=1e-12)

def test_NO2_fixture():
    flux = noon_flux()
    expected = [0.005079427910534251, 0.005301842146596118, 0.005497566674330561]
    assert np.allclose(raw_rates('NO2', [150., 250., 300.], flux), expected, rtol=1e-6, atol=0)

def test_linearity_and_zero_flux():
    """
    Rates scale linearly with the flux and vanish without it.
    """
    flux = noon_flux()
    zeros = np.zeros_like(flux)

    store = default_store()
    for name in store.names:
        kernel = PhotolysisKernel(store.get(name))
        for T in [180., 250., 330.]:
            j = kernel.raw_rate(T, flux)
            assert j >= 0.
            assert np.isclose(kernel.raw_rate(T, 3.7*flux), 3.7*j, rtol=1e-12, atol=0)
            assert np.isclose(kernel.raw_rate(T, 0.5*flux), 0.5*j, rtol=1e-12, atol=0)
            assert kernel.raw_rate(T, zeros) == 0.

def test_calibration():
    """
    Calibration is a pure post-multiplication.
    """
    flux = noon_flux()
    channel = default_store().get('O3_O1D')

    raw = PhotolysisKernel(channel).raw_rate(220., flux)
    assert PhotolysisKernel(channel, calibration=1.).j_rate(220., flux) == raw

    f = 1e-21
    calibrated = PhotolysisKernel(channel, calibration=f).j_rate(220., flux)
    assert np.isclose(calibrated, 1.826603407114214e15*f, rtol=1e-6)
    assert np.isclose(calibrated/f, raw, rtol=1e-14)
    assert np.isclose(calibrate(calibrate(raw, f), 1/f), raw, rtol=1e-14)

    # Tables are untouched
    assert PhotolysisKernel(channel).raw_rate(220., flux) == raw

    kernel = PhotolysisKernel(channel).with_calibration(f)
    assert kernel.j_rate(220., flux) == calibrated

def test_branching_channels():
    """
    Both O3 channels share one cross-section, their yields add up to one.
    """
    store = default_store()
    O3P, O1D = store.get('O3_O3P'), store.get('O3_O1D_abs')
    assert O3P.cross_section is O1D.cross_section

    flux = noon_flux()
    total = PhotolysisKernel(PhotolysisChannel('O3', O3P.cross_section)).raw_rate(220., flux)
    assert np.isclose(total, 0.0051799995255018454, rtol=1e-6)

    kernels = [PhotolysisKernel(O3P), PhotolysisKernel(O1D)]
    j = [kernel.raw_rate(220., flux) for kernel in kernels]
    assert np.isclose(sum(j), total, rtol=1e-12)
    assert j[1] > j[0] > 0

    # The shared absorbed flux gives the same rates
    absorbed = kernels[0].absorbed_flux(220., flux)
    for kernel, j_i in zip(kernels, j):
        assert np.isclose(kernel.rate_from_absorbed(220., absorbed), j_i, rtol=1e-12)

def test_proxy_aliases():
    """
    Hydroperoxides without a spectrum borrow the CH3OOH spectrum.
    """
    store = default_store()
    for name in ['MP', 'ETP', 'RA3P', 'RB3P', 'R4P', 'PP', 'RP', 'PRPN', 'MAP']:
        assert store.resolve(name) == 'CH3OOH'
        assert store.get(name) is store.get('CH3OOH')

def test_temperature_table():
    table = TemperatureTable([200., 300.], [[1., 2.], [3., 6.]], name='test')

    assert np.allclose(table.interpolate(250.), [2., 4.])
    assert np.allclose(table.interpolate(100.), [1., 2.]) # Clamped
    assert np.allclose(table.interpolate(400.), [3., 6.])

    out = np.empty(2)
    assert table.interpolate(225., out=out) is out
    assert np.allclose(out, [1.5, 3.])
    assert np.isclose(table.weighted_sum(225., [2., 1.]), 6.)
    assert table.is_temperature_dependent
    assert np.allclose(table.complement().values, [[0., -1.], [-2., -5.]])
    assert np.allclose(table.clipped(0., 2.).values, [[1., 2.], [2., 2.]])

    with pytest.raises(ValueError):
        table.values[0,0] = 5. # Read-only
    with pytest.raises(ValueError):
        TemperatureTable([300., 200.], [[1., 2.], [3., 6.]])
    with pytest.raises(ValueError):
        TemperatureTable([200., 300.], [[1., 2.]])

def test_store():
    store = load_fastjx_store(freeze=False)
    assert store.n_bins == 18
    assert store.absorbers == ['CH2O_a', 'CH2O_b', 'CH3OOH', 'H2O2', 'NO2', 'O2', 'O3', 'O3_O1D']
    assert not store.get('CH3OOH').cross_section.is_temperature_dependent
    assert store.wavelengths[0] == 187 and store.wavelengths[-1] == 574

    with pytest.raises(MissingSpectrumError):
        store.get('HNO3')
    with pytest.raises(KeyError):
        store.alias('HNO4', 'HNO3')
    with pytest.raises(ValueError):
        store.register(PhotolysisChannel('short', TemperatureTable([298.], np.ones(17))))
    with pytest.raises(ValueError):
        store.alias('NO2', 'H2O2') # Already registered

    # Negative cross-sections and yields outside [0,1]
    with pytest.raises(ValueError):
        PhotolysisChannel('HNO3', TemperatureTable([298.], np.full(18, -1e-20)))
    with pytest.raises(ValueError):
        PhotolysisChannel(
            'HNO3', TemperatureTable([298.], np.full(18, 1e-20)),
            quantum_yield=TemperatureTable([298.], np.full(18, 1.5))
            )
    with pytest.raises(ValueError):
        PhotolysisChannel(
            'HNO3', TemperatureTable([298.], np.full(18, 1e-20)),
            quantum_yield=TemperatureTable([298.], np.full(18, -0.1))
            )
    assert 'HNO3' not in store

    store.register(PhotolysisChannel('HNO3', TemperatureTable([298.], np.full(18, 1e-20))))
    store.alias('HNO4', 'HNO3')
    assert store.resolve('HNO4') == 'HNO3'

    store.freeze()
    with pytest.raises(RuntimeError):
        store.alias('N2O5', 'HNO3')

def test_default_store_is_shared():
    assert default_store() is default_store()
    assert default_store().frozen

    empty = SpectralDataStore(wavelengths=np.arange(18))
    assert len(empty) == 0 and 'NO2' not in empty

if __name__ == '__main__':
    # Run the tests
    test_O3_O1D_fixture()
    test_H2O2_fixture()
    test_CH2O_fixtures()
    test_CH3OOH_fixture()
    test_NO2_fixture()
    test_linearity_and_zero_flux()
    test_calibration()
    test_branching_channels()
    test_proxy_aliases()
    test_temperature_table()
    test_store()
    test_default_store_is_shared()
