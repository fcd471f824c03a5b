import numpy as np
import pytest
import pathlib
import shutil
import sys
import os

from concurrent.futures import ThreadPoolExecutor

# Add the root directory to the Python path
parent_dir = pathlib.Path(__file__).resolve().parent
sys.path.insert(0, str(parent_dir.parent))

from pyJX import (
    utils, RateSetEvaluator, CosineScaledFlux, ActinicFluxTable, default_flux_table,
    MissingSpectrumError, o1d_to_oh_fraction,
    SUPERFAST, GEOSCHEM, get_mechanism
)
from pyJX.rate_set import load_flux_model
from pyJX.main import main

output_data_dir = parent_dir / 'output_data'

# Local noon on 1970-01-01 at 30N, 0E
noon = dict(t=12*3600., lat=30., lon=0., pressure=101325.)

def cosine_evaluator(**kwargs):
    return RateSetEvaluator(flux_model=CosineScaledFlux(), **kwargs)

def test_default_names():
    evaluator = cosine_evaluator()

    for name in ['O2', 'O3_O3P', 'O3_O1D_abs', 'O3_O1D', 'H2O2', 'CH2O_a', 'CH2O_b', 'CH3OOH', 'NO2']:
        assert name in evaluator.names
    for name in ['MP', 'ETP', 'PRPN', 'MAP', 'O3_2OH']:
        assert name in evaluator.names

    rates = evaluator.evaluate(temperature=220., **noon)
    assert list(rates) == list(evaluator.names)
    assert all(j >= 0. for j in rates.values())

    # Aliases share the kernel of their spectrum
    assert rates['MP'] == rates['CH3OOH'] == rates['PRPN']
    assert len(evaluator.kernels) == 9

def test_box_model_rates():
    """
    The evaluator reproduces the single-kernel rates.
    """
    evaluator = cosine_evaluator(channels=['O3_O1D', 'H2O2', 'NO2', 'CH3OOH'])
    assert evaluator.names == ('O3_O1D', 'H2O2', 'NO2', 'CH3OOH')

    rates = evaluator(temperature=220., **noon)
    assert np.isclose(rates['O3_O1D'], 1.826603407114214e15, rtol=1e-6)
    assert np.isclose(rates['CH3OOH'], 3.2971571798761734e-5, rtol=1e-6)

    rates = evaluator(temperature=250., **noon)
    assert np.isclose(rates['H2O2'], 5.887584133606186e-5, rtol=1e-6)
    assert np.isclose(rates['NO2'], 0.005301842146596118, rtol=1e-6)

    # Dark at 06:00 UTC
    rates = evaluator(t=6*3600., lat=30., lon=0., temperature=250., pressure=101325.)
    assert all(j == 0. for j in rates.values())

def test_shared_absorber():
    """
    Both O3 channels are computed from one absorbed-flux vector.
    """
    evaluator = cosine_evaluator(channels=['O3_O3P', 'O3_O1D_abs', 'NO2'])
    assert len(evaluator._shared_groups) == 1
    assert len(evaluator._shared_groups[0]) == 2

    rates = evaluator(temperature=220., **noon)
    assert np.isclose(rates['O3_O3P'] + rates['O3_O1D_abs'], 0.0051799995255018454, rtol=1e-6)

def test_calibration_and_t_ref():
    plain = cosine_evaluator(channels=['O3_O1D', 'NO2'])
    calibrated = cosine_evaluator(channels=['O3_O1D', 'NO2'], calibration={'O3_O1D': 1e-21})

    rates = plain(temperature=220., **noon)
    rates_calibrated = calibrated(temperature=220., **noon)
    assert np.isclose(rates_calibrated['O3_O1D'], 1e-21*rates['O3_O1D'], rtol=1e-14)
    assert rates_calibrated['NO2'] == rates['NO2']

    # Times are counted from t_ref
    shifted = cosine_evaluator(channels=['O3_O1D', 'NO2'], t_ref=6*3600.)
    rates_shifted = shifted(t=6*3600., lat=30., lon=0., temperature=220., pressure=101325.)
    assert rates_shifted == rates

def test_missing_spectra():
    """
    Unknown names are reported when the evaluator is set up.
    """
    with pytest.raises(MissingSpectrumError):
        cosine_evaluator(channels=['NO2', 'HNO3'])
    with pytest.raises(MissingSpectrumError):
        cosine_evaluator(channels=['NO2'], calibration={'O3_O1D': 1e-21})
    with pytest.raises(ValueError):
        RateSetEvaluator(flux_model=CosineScaledFlux(reference_flux=np.ones(5), wavelengths=np.arange(5)))

    # Same number of bins in a different order
    reference = CosineScaledFlux()
    reversed_bins = CosineScaledFlux(
        reference_flux=reference.reference_flux[::-1], wavelengths=reference.wavelengths[::-1]
        )
    with pytest.raises(ValueError):
        RateSetEvaluator(flux_model=reversed_bins)

def test_o1d_to_oh_fraction():
    assert o1d_to_oh_fraction(298., 101325., 0.) == 0.
    assert np.isclose(o1d_to_oh_fraction(298., 101325., 4e17), 9.0357645538036949e-2, rtol=1e-6)

    for T, P, H2O in [(200., 1e3, 1e12), (260., 5e4, 1e17), (310., 1e5, 1e18)]:
        assert 0. < o1d_to_oh_fraction(T, P, H2O) < 1.

    # More water vapour, more OH
    assert o1d_to_oh_fraction(260., 5e4, 1e17) > o1d_to_oh_fraction(260., 5e4, 1e16)

    # Non-positive pressures stay within [0,1]
    assert o1d_to_oh_fraction(260., -1., 1e17) == 1.
    assert o1d_to_oh_fraction(260., 0., 1e17) == 1.
    assert o1d_to_oh_fraction(260., -1., 0.) == 0.

def test_O3_2OH():
    evaluator = cosine_evaluator(channels=['O3_O1D', 'O3_2OH'])
    assert len(evaluator.kernels) == 1

    rates = evaluator(temperature=298., humidity=4e17, **noon)
    fraction = o1d_to_oh_fraction(298., 101325., 4e17)
    assert np.isclose(rates['O3_2OH'], fraction*rates['O3_O1D'], rtol=1e-14)

    rates = evaluator(temperature=298., **noon)
    assert rates['O3_2OH'] == 0.

def test_mechanisms():
    superfast = SUPERFAST.evaluator(flux_model=CosineScaledFlux())
    rates = superfast(temperature=220., **noon)

    assert list(rates) == ['jO31D', 'jH2O2', 'jNO2', 'jCH2Oa', 'jCH2Ob', 'jCH3OOH']
    assert np.isclose(rates['jO31D'], 1.826603407114214e15, rtol=1e-6)

    geoschem = GEOSCHEM.evaluator(flux_model=CosineScaledFlux())
    rates = geoschem(temperature=220., **noon)

    assert len(rates) == 16
    assert np.isclose(rates['j_3'], 1.826603407114214e15*1e-21, rtol=1e-6)
    assert rates['j_10'] == rates['j_80'] == rates['j_99']
    assert np.isclose(rates['j_10'], 3.2971571798761734e-5, rtol=1e-6)
    assert np.isclose(rates['j_1'], 2.0543341485076826e-9, rtol=1e-6)

    # Binding checks the available rates
    with pytest.raises(MissingSpectrumError):
        GEOSCHEM.bind(cosine_evaluator(channels=['O3_O1D', 'NO2']))

    assert get_mechanism('GEOS-Chem') is GEOSCHEM
    assert get_mechanism(SUPERFAST) is SUPERFAST
    with pytest.raises(ValueError):
        get_mechanism('mozart')

def test_default_flux_table_is_shared():
    """
    Evaluators without a flux model share one direct-beam table.
    """
    first = RateSetEvaluator(channels=['NO2'])
    second = SUPERFAST.evaluator().evaluator

    assert isinstance(first.flux_model, ActinicFluxTable)
    assert first.flux_model is second.flux_model
    assert first.flux_model is default_flux_table()
    assert first.store is second.store

def test_concurrent_evaluation():
    """
    One evaluator gives the same rates when shared between threads.
    """
    evaluator = cosine_evaluator()

    rng = np.random.default_rng(2)
    samples = [
        dict(
            t=rng.uniform(0, 86400), lat=rng.uniform(-60, 60), lon=rng.uniform(-180, 180),
            temperature=rng.uniform(200, 300), pressure=rng.uniform(1e3, 1e5),
            humidity=rng.uniform(0, 1e17),
            )
        for _ in range(64)
    ]
    serial = [evaluator.evaluate(**sample) for sample in samples]

    with ThreadPoolExecutor(max_workers=8) as executor:
        parallel = list(executor.map(lambda sample: evaluator.evaluate(**sample), samples))

    assert parallel == serial

def test_from_config():
    import examples.superfast_box.superfast_box as config

    evaluator = RateSetEvaluator.from_config(config)
    assert isinstance(evaluator.flux_model, CosineScaledFlux)
    assert evaluator.names == tuple(SUPERFAST.channels)

    rates = evaluator(
        config.time, config.lat, config.lon, config.temperature, config.pressure, config.humidity
        )
    assert np.isclose(rates['O3_O1D'], 1.826603407114214e15, rtol=1e-6)

    # Command-line style overrides
    config = utils.update_config_with_args(
        None, flux_model='cosine', channels=['NO2'], calibration={'NO2': 2.}
        )
    evaluator = RateSetEvaluator.from_config(config)
    rates = evaluator(temperature=250., **noon)
    assert np.isclose(rates['NO2'], 2*0.005301842146596118, rtol=1e-6)

    config = utils.update_config_with_args(None, flux_model='two_stream')
    with pytest.raises(ValueError):
        load_flux_model(config)

def test_direct_beam_config():
    """
    The direct-beam table is built once and then read from its cache file.
    """
    file = output_data_dir / 'direct_beam_flux.hdf5'
    config = utils.update_config_with_args(
        None, flux_model='direct_beam', flux_table_file=str(file), channels=['NO2', 'O3_O1D']
        )

    evaluator = RateSetEvaluator.from_config(config)
    assert file.is_file()
    cached = RateSetEvaluator.from_config(config)
    shutil.rmtree(output_data_dir, ignore_errors=True)

    rates = evaluator(temperature=250., **noon)
    assert rates == cached(temperature=250., **noon)

    # Less attenuation higher up
    rates_top = evaluator(12*3600., 30., 0., temperature=250., pressure=1e2)
    assert 0. < rates['NO2'] < rates_top['NO2']
    assert 0. < rates['O3_O1D'] < rates_top['O3_O1D']

def test_main():
    # Configuration files are given relative to the working directory
    cwd = os.getcwd()
    os.chdir(parent_dir.parent)
    try:
        rates = main(['examples/superfast_box/superfast_box.py', '-T', '250'])
    finally:
        os.chdir(cwd)

    assert np.isclose(rates['NO2'], 0.005301842146596118, rtol=1e-6)
    assert 'jNO2' not in rates

if __name__ == '__main__':
    # Run the tests
    test_default_names()
    test_box_model_rates()
    test_shared_absorber()
    test_calibration_and_t_ref()
    test_missing_spectra()
    test_o1d_to_oh_fraction()
    test_O3_2OH()
    test_mechanisms()
    test_default_flux_table_is_shared()
    test_concurrent_evaluation()
    test_from_config()
    test_direct_beam_config()
    test_main()
