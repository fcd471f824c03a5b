import numpy as np
from tqdm import tqdm

import math
import functools
import warnings
import pathlib
import datetime

from pyJX import utils
from pyJX.spectra import TemperatureTable
from .flux import ActinicFlux
from .atmosphere import ReferenceAtmosphere
from .direct_beam import DirectBeam

class ActinicFluxTable(ActinicFlux):
    """
    Actinic flux tabulated on a grid of pressures and solar zenith angles.

    Look-ups interpolate bilinearly in log-pressure and cos(SZA), queries
    outside the grid use the nearest edge of the table.
    """

    # Steps of 0.01 from -0.2 to 1
    default_cos_sza_grid = np.round(np.linspace(-0.2, 1.0, 121), 2)

    def __init__(self, pressure, cos_sza, flux, **kwargs):
        """
        Initialises the ActinicFluxTable object.

        Args:
            pressure (array-like): Pressure levels of the table [Pa], in any order.
            cos_sza (array-like): Ascending grid of cos(SZA).
            flux (array-like): Actinic flux with shape (n_pressure, n_cos_sza, n_bins).
            **kwargs: Arguments passed to ActinicFlux.
        """
        super().__init__(**kwargs)

        pressure = np.asarray(pressure, dtype=np.float64)
        cos_sza  = np.asarray(cos_sza, dtype=np.float64)
        flux = np.asarray(flux, dtype=np.float64)

        if flux.shape != (len(pressure), len(cos_sza), self.n_bins):
            raise ValueError(
                f'Flux table has shape {flux.shape}, expected '
                f'({len(pressure)}, {len(cos_sza)}, {self.n_bins}).'
                )
        if len(pressure) < 2 or len(cos_sza) < 2:
            raise ValueError('Flux table needs at least two pressures and two values of cos(SZA).')
        if np.any(pressure <= 0):
            raise ValueError('Pressures of the flux table should be positive.')
        if np.any(np.diff(cos_sza) <= 0):
            raise ValueError('Grid of cos(SZA) should be strictly increasing.')
        if np.any(flux < 0) or not np.all(np.isfinite(flux)):
            raise ValueError('Actinic fluxes should be finite and non-negative.')

        # Sort by ascending pressure
        idx = np.argsort(pressure)
        if np.any(np.diff(pressure[idx]) == 0):
            raise ValueError('Pressure levels of the flux table should be unique.')

        self.pressure = utils.read_only(pressure[idx])
        self.cos_sza  = utils.read_only(cos_sza)
        self.table = utils.read_only(flux[idx])

        # Plain floats for the bisection
        self._log_P = tuple(math.log(P) for P in self.pressure)
        self._cos_sza = tuple(float(mu) for mu in self.cos_sza)

    def __repr__(self):
        return (
            f'ActinicFluxTable(P=[{self.pressure[0]:.3g}, {self.pressure[-1]:.3g}] Pa, '
            f'cos_sza=[{self.cos_sza[0]:g}, {self.cos_sza[-1]:g}], n_bins={self.n_bins})'
        )

    @classmethod
    def from_direct_beam(
            cls, atmosphere=None, cos_sza_grid=None, show_progress_bar=False, **kwargs
            ):
        """
        Tabulate the attenuated direct solar beam on the levels of a reference atmosphere.

        Args:
            atmosphere (ReferenceAtmosphere): Column to attenuate the beam, defaults to
                the GEOS-Chem 72-layer reference column.
            cos_sza_grid (array-like): Ascending grid of cos(SZA), defaults to -0.2..1 in steps of 0.01.
            show_progress_bar (bool): Whether to show a progress bar.
            **kwargs: Arguments passed to ActinicFlux.

        Returns:
            ActinicFluxTable: The table.
        """
        print('\nTabulating the direct solar beam')

        if atmosphere is None:
            atmosphere = ReferenceAtmosphere.from_csv()
        if cos_sza_grid is None:
            cos_sza_grid = cls.default_cos_sza_grid

        rayleigh = cls.wavelength_bins['rayleigh'].to_numpy()
        sigma_O2 = TemperatureTable.from_csv('cross_sections/O2.csv')
        sigma_O3 = TemperatureTable.from_csv('cross_sections/O3.csv')
        optical_depth = atmosphere.optical_depth(rayleigh, sigma_O2, sigma_O3)

        beam = DirectBeam(atmosphere, optical_depth)

        reference = ActinicFlux(**kwargs).reference_flux

        cos_sza_grid = np.asarray(cos_sza_grid, dtype=np.float64)
        flux = np.zeros((atmosphere.n_levels, len(cos_sza_grid), len(reference)))

        # Make a nice progress bar
        pbar_kwargs = dict(
            total=atmosphere.n_levels, disable=(not show_progress_bar),
            bar_format='{l_bar}{bar:20}{r_bar}{bar:-20b}',
        )
        with tqdm(**pbar_kwargs) as pbar:
            for level, P in enumerate(atmosphere.pressure):
                pbar.set_postfix(P='{:.0e} Pa'.format(P), refresh=False)
                flux[level] = beam.transmission(cos_sza_grid, level) * reference[None,:]
                pbar.update(1)

        print(f'  {atmosphere.n_levels} pressure levels, {len(cos_sza_grid)} values of cos(SZA)')
        return cls(atmosphere.pressure, cos_sza_grid, flux, **kwargs)

    @classmethod
    def from_hdf5(cls, file):
        """
        Read a table written by save().

        Args:
            file (str): Path to the HDF5 file.

        Returns:
            ActinicFluxTable: The table.
        """
        print(f'\nReading actinic-flux table from \"{file}\"')

        keys = ['P', 'cos_sza', 'flux', 'reference_flux', 'wave']
        datasets = utils.read_from_hdf5(file, keys_to_read=keys)

        missing = [key for key in keys if key not in datasets]
        if len(missing) > 0:
            raise ValueError(f'Datasets {missing} not found in \"{file}\".')

        return cls(
            datasets['P'], datasets['cos_sza'], datasets['flux'],
            reference_flux=datasets['reference_flux'], wavelengths=datasets['wave'],
            )

    @classmethod
    def load_or_build(cls, file=None, overwrite=False, **kwargs):
        """
        Read a cached table, or tabulate the direct beam and cache it.

        Args:
            file (str): Cache file, no caching if None.
            overwrite (bool): Whether to rebuild an existing cache file.
            **kwargs: Arguments passed to from_direct_beam().

        Returns:
            ActinicFluxTable: The table.
        """
        if file is not None and pathlib.Path(file).is_file() and not overwrite:
            table = cls.from_hdf5(file)

            cos_sza_grid = kwargs.get('cos_sza_grid', None)
            if cos_sza_grid is not None and not np.array_equal(table.cos_sza, np.asarray(cos_sza_grid, dtype=np.float64)):
                warnings.warn(
                    f'Grid of cos(SZA) in \"{file}\" differs from the requested grid, '
                    'use overwrite=True (--overwrite) to rebuild the table.'
                    )
            return table

        table = cls.from_direct_beam(**kwargs)
        if file is not None:
            table.save(file)
        return table

    def save(self, file):
        """
        Save the table to an HDF5 file.

        Args:
            file (str): Path to the output file.
        """
        print(f'  Saving actinic-flux table to \"{file}\"')

        data = {
            'P': self.pressure, 'cos_sza': self.cos_sza, 'flux': self.table,
            'reference_flux': self.reference_flux, 'wave': self.wavelengths,
        }
        attrs = {
            'P': {'units': 'Pa'},
            'cos_sza': {'units': 'cos(SZA)'},
            'flux': {
                'units': 'photons cm^-2 s^-1', 'axes': 'P, cos_sza, bin',
                'date_ID': datetime.datetime.now(datetime.timezone.utc).strftime('%Y%m%d'),
            },
            'reference_flux': {'units': 'photons cm^-2 s^-1'},
            'wave': {'units': 'nm'},
        }
        utils.save_to_hdf5(file, data=data, attrs=attrs)

    def _weights(self, cos_sza, pressure):
        """
        Indices and weights of the bracketing table entries.
        """
        # Clamp before the logarithm, non-positive pressures use the lowest level
        P = min(max(float(pressure), self.pressure[0]), self.pressure[-1])
        i, w_P = utils.bracket(self._log_P, math.log(P))
        j, w_mu = utils.bracket(self._cos_sza, float(cos_sza))
        return i, j, w_P, w_mu

    def flux_vector(self, cos_sza, pressure, out=None):
        """
        Args:
            cos_sza (float): Cosine of the solar zenith angle.
            pressure (float): Pressure [Pa].
            out (numpy.ndarray): Optional output array of length n_bins.

        Returns:
            numpy.ndarray: Actinic flux per bin [photons cm^-2 s^-1].
        """
        if out is None:
            out = np.empty(self.n_bins)

        i, j, w_P, w_mu = self._weights(cos_sza, pressure)
        lower, upper = self.table[i], self.table[i+1]

        np.multiply(lower[j], (1-w_P)*(1-w_mu), out=out)
        if w_mu > 0.:
            out += ((1-w_P)*w_mu) * lower[j+1]
        if w_P > 0.:
            out += (w_P*(1-w_mu)) * upper[j]
            if w_mu > 0.:
                out += (w_P*w_mu) * upper[j+1]
        return out

    def flux(self, cos_sza, pressure, bin_index):
        """
        Args:
            cos_sza (float): Cosine of the solar zenith angle.
            pressure (float): Pressure [Pa].
            bin_index (int): Index of the wavelength-bin.

        Returns:
            float: Actinic flux [photons cm^-2 s^-1].
        """
        i, j, w_P, w_mu = self._weights(cos_sza, pressure)
        t = self.table
        return float(
            (1-w_P)*((1-w_mu)*t[i,j,bin_index] + w_mu*t[i,j+1,bin_index])
            + w_P*((1-w_mu)*t[i+1,j,bin_index] + w_mu*t[i+1,j+1,bin_index])
            )

@functools.lru_cache(maxsize=None)
def default_flux_table():
    """
    Direct-beam table of the reference column, built on the first call and shared afterwards.
    """
    return ActinicFluxTable.from_direct_beam()
