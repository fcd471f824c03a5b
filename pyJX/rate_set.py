import numpy as np

import math
import warnings

from pyJX import sc
from .solar_geometry import cos_solar_zenith_angle
from .spectra import default_store, MissingSpectrumError
from .actinic_flux import ActinicFluxTable, CosineScaledFlux, default_flux_table
from .photolysis import PhotolysisKernel, calibrate

def o1d_to_oh_fraction(T, P, H2O):
    """
    Fraction of O(1D) that reacts with water vapour instead of being quenched.

        f = k_H2O[H2O] / (k_H2O[H2O] + k_N2[N2] + k_O2[O2])

    Parameters:
    T (float): Temperature [K].
    P (float): Pressure [Pa].
    H2O (float): Water-vapour number density [molecules cm^-3].

    Returns:
    float: Fraction within [0,1].
    """
    M = max(P, 0.) / (sc.k*T) * 1e-6 # [m^-3] -> [cm^-3]

    # Rate coefficients [cm^3 molecule^-1 s^-1]
    k_O2  = 3.3e-11 * math.exp(55./T)
    k_N2  = 2.15e-11 * math.exp(110./T)
    k_H2O = 1.63e-10 * math.exp(60./T)

    loss_H2O = k_H2O * max(H2O, 0.)
    total = loss_H2O + k_N2*0.7808*M + k_O2*0.2095*M
    if total <= 0.:
        return 0.
    return min(loss_H2O / total, 1.)

# Rates derived from another channel: name -> (source channel, factor function)
derived_rates = {
    'O3_2OH': ('O3_O1D', o1d_to_oh_fraction),
}

def load_flux_model(config):
    """
    Flux model selected by the configuration.

    Parameters:
    config (object): Configuration with the optional attributes 'flux_model'
        ('direct_beam' or 'cosine'), 'flux_table_file', 'overwrite' and
        'show_progress_bar'.

    Returns:
    ActinicFlux: The flux model.

    Raises:
    ValueError: If the flux model is not recognised.
    """
    flux_model = getattr(config, 'flux_model', 'direct_beam').lower()

    if flux_model == 'cosine':
        return CosineScaledFlux()
    elif flux_model == 'direct_beam':
        return ActinicFluxTable.load_or_build(
            file=getattr(config, 'flux_table_file', None),
            overwrite=getattr(config, 'overwrite', False),
            cos_sza_grid=getattr(config, 'cos_sza_grid', None),
            show_progress_bar=getattr(config, 'show_progress_bar', False),
            )

    raise ValueError(f'Flux model \"{flux_model}\" not recognised, use \"direct_beam\" or \"cosine\".')


class RateSetEvaluator:
    """
    Named set of photolysis rates for one time, location and atmospheric state.

    The solar zenith angle and the actinic-flux vector are computed once per
    call and shared by all channels. All tables are read-only after
    initialisation, so one evaluator can be used from several threads.
    """

    def __init__(self, channels=None, store=None, flux_model=None, calibration=None, t_ref=0.):
        """
        Initialize the RateSetEvaluator object.

        Parameters:
        channels (list): Names of the rates to compute, defaults to all channels and
            aliases of the store plus the derived rates.
        store (SpectralDataStore): Spectral data, defaults to the shared Fast-JX store.
        flux_model (ActinicFlux): Actinic-flux model, defaults to the tabulated direct beam.
        calibration (dict): Calibration factor per rate name.
        t_ref (float): Reference Unix time [s], added to the time of each call.

        Raises:
        MissingSpectrumError: If a requested rate or calibrated rate has no spectrum.
        ValueError: If the flux model and the store use different wavelength-bins.
        """
        if store is None:
            store = default_store()
        if flux_model is None:
            flux_model = default_flux_table()

        if flux_model.n_bins != store.n_bins:
            raise ValueError(
                f'Flux model has {flux_model.n_bins} wavelength-bins, spectral data has {store.n_bins}.'
                )
        if not np.array_equal(flux_model.wavelengths, store.wavelengths):
            raise ValueError('Flux model and spectral data use differently ordered wavelength-bins.')

        self.store = store
        self.flux_model = flux_model
        self.t_ref = float(t_ref)

        if channels is None:
            channels = store.names + [
                name for name, (source, _) in derived_rates.items() if source in store
                ]
        if isinstance(channels, str):
            channels = [channels]
        self.names = tuple(dict.fromkeys(channels)) # Unique, ordered

        calibration = dict(calibration or {})
        unknown = [name for name in calibration if name not in self.names]
        if len(unknown) > 0:
            raise MissingSpectrumError(unknown[0], available=self.names)
        self.calibration = {name: float(calibration.get(name, 1.)) for name in self.names}

        self._setup_kernels()

    def _setup_kernels(self):
        """
        Resolve the requested names into kernels, grouped by absorber.
        """
        self._outputs = [] # (name, kernel name, derived factor function)
        kernels = {}
        for name in self.names:
            factor = None
            source = name
            if name in derived_rates and name not in self.store:
                source, factor = derived_rates[name]

            # Raises a MissingSpectrumError at setup
            canonical = self.store.resolve(source)
            if canonical not in kernels:
                kernels[canonical] = PhotolysisKernel(self.store.get(canonical))
            self._outputs.append((name, canonical, factor))

        self.kernels = kernels

        # Channels of one absorber share the absorbed flux
        groups = {}
        for kernel in kernels.values():
            groups.setdefault(kernel.channel.absorber, []).append(kernel)
        self._shared_groups = [
            group for group in groups.values()
            if len(group) > 1 or not group[0].channel.has_constant_yield
        ]
        self._single_kernels = [
            group[0] for group in groups.values()
            if len(group) == 1 and group[0].channel.has_constant_yield
        ]

    @classmethod
    def from_config(cls, config, store=None):
        """
        Build an evaluator from a configuration object.

        Parameters:
        config (object): Configuration with the optional attributes 'channels',
            'mechanism', 'calibration', 't_ref' and those of load_flux_model().
        store (SpectralDataStore): Spectral data, defaults to the shared Fast-JX store.

        Returns:
        RateSetEvaluator: The evaluator.
        """
        print('\nSetting up the photolysis rate set')

        channels = getattr(config, 'channels', None)
        mechanism = getattr(config, 'mechanism', None)
        if mechanism is not None:
            from .mechanisms import get_mechanism
            mechanism = get_mechanism(mechanism)
            if channels is not None:
                warnings.warn(
                    f'Both \"channels\" and \"mechanism\" are given, adding the channels of {mechanism.name}.'
                    )
                channels = list(channels) + mechanism.channels
            else:
                channels = mechanism.channels

        evaluator = cls(
            channels=channels, store=store, flux_model=load_flux_model(config),
            calibration=getattr(config, 'calibration', None), t_ref=getattr(config, 't_ref', 0.),
            )
        print(f'  {len(evaluator.names)} rates, {len(evaluator.kernels)} spectra')
        return evaluator

    def __repr__(self):
        return (
            f'RateSetEvaluator(n_rates={len(self.names)}, '
            f'flux_model={type(self.flux_model).__name__}, t_ref={self.t_ref:g})'
        )

    def cos_sza(self, t, lat, lon):
        """
        Cosine of the solar zenith angle at time t after t_ref.
        """
        return cos_solar_zenith_angle(t + self.t_ref, lat, lon)

    def flux_vector(self, t, lat, lon, pressure, out=None):
        """
        Actinic-flux vector at time t after t_ref [photons cm^-2 s^-1].
        """
        return self.flux_model.flux_vector(self.cos_sza(t, lat, lon), pressure, out=out)

    def raw_rates(self, temperature, flux):
        """
        Uncalibrated rates of all resolved spectra for a given flux vector.

        Parameters:
        temperature (float): Temperature [K].
        flux (numpy.ndarray): Actinic flux per bin [photons cm^-2 s^-1].

        Returns:
        dict: Raw rate [s^-1] per spectrum name.
        """
        raw = {}
        for kernel in self._single_kernels:
            raw[kernel.name] = kernel.raw_rate(temperature, flux)

        if len(self._shared_groups) > 0:
            absorbed = np.empty(self.store.n_bins)
            for group in self._shared_groups:
                group[0].absorbed_flux(temperature, flux, out=absorbed)
                for kernel in group:
                    raw[kernel.name] = kernel.rate_from_absorbed(temperature, absorbed)
        return raw

    def evaluate(self, t, lat, lon, temperature, pressure, humidity=0.):
        """
        Photolysis rates for one sample.

        Parameters:
        t (float): Time since t_ref [s].
        lat (float): Latitude [deg].
        lon (float): Longitude [deg].
        temperature (float): Temperature [K].
        pressure (float): Pressure [Pa].
        humidity (float): Water-vapour number density [molecules cm^-3].

        Returns:
        dict: Photolysis rate [s^-1] per name.
        """
        flux = self.flux_vector(t, lat, lon, pressure)
        raw = self.raw_rates(temperature, flux)

        rates = {}
        for name, canonical, factor in self._outputs:
            j = raw[canonical]
            if factor is not None:
                j = j * factor(temperature, pressure, humidity)
            rates[name] = calibrate(j, self.calibration[name])
        return rates

    def __call__(self, *args, **kwargs):
        return self.evaluate(*args, **kwargs)
