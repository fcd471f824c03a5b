import numpy as np

from pyJX import utils

class TemperatureTable:
    """
    Per-bin values tabulated at a few temperatures.

    Values are linearly interpolated in temperature for each wavelength-bin
    and clamped at the outermost tabulated temperatures.
    """

    def __init__(self, temperatures, values, name=None):
        """
        Parameters:
        temperatures (array-like): Tabulated temperatures [K], strictly increasing.
        values (array-like): Values with shape (n_temperatures, n_bins).
        name (str): Label used in error messages.
        """
        self.name = name

        temperatures = np.atleast_1d(np.asarray(temperatures, dtype=np.float64))
        values = np.asarray(values, dtype=np.float64)
        if values.ndim == 1:
            values = values[None,:]

        if values.ndim != 2 or values.shape[0] != len(temperatures):
            raise ValueError(
                f'Table \"{name}\" has shape {values.shape}, expected ({len(temperatures)}, n_bins).'
                )
        if np.any(np.diff(temperatures) <= 0):
            raise ValueError(f'Temperatures of table \"{name}\" are not strictly increasing.')
        if not np.all(np.isfinite(values)):
            raise ValueError(f'Table \"{name}\" contains non-finite values.')

        self.temperatures = utils.read_only(temperatures)
        self.values = utils.read_only(values)

        # Plain floats for the bisection
        self._T = tuple(float(T) for T in temperatures)

    @classmethod
    def from_csv(cls, file, name=None):
        """
        Read a table with one row per wavelength-bin and one column per temperature.

        Parameters:
        file (str): CSV file, relative to the pyJX data directory or an absolute path.
        name (str): Label of the table, defaults to the file name.

        Returns:
        TemperatureTable: The table.
        """
        df = utils.read_data_table(file)
        if name is None:
            name = str(file).split('/')[-1].replace('.csv', '')

        try:
            temperatures = df.columns.astype(np.float64)
        except (TypeError, ValueError):
            raise ValueError(
                f'Column names of \"{file}\" should be temperatures, got {list(df.columns)}.'
                )
        return cls(temperatures, df.to_numpy().T, name=name)

    def __repr__(self):
        return f'TemperatureTable({self.name!r}, T={list(self._T)}, n_bins={self.n_bins})'

    @property
    def n_bins(self):
        return self.values.shape[1]

    @property
    def is_temperature_dependent(self):
        return len(self._T) > 1

    def bracket(self, T):
        """
        Index of the lower bracketing temperature and the weight of the upper one.
        """
        if len(self._T) == 1:
            return 0, 0.
        return utils.bracket(self._T, T)

    def interpolate(self, T, out=None):
        """
        Interpolate the table to a temperature.

        Parameters:
        T (float): Temperature [K].
        out (numpy.ndarray): Optional output array of length n_bins.

        Returns:
        numpy.ndarray: Interpolated values for each wavelength-bin.
        """
        if out is None:
            out = np.empty(self.n_bins)

        i, w = self.bracket(T)
        np.multiply(self.values[i], 1.-w, out=out)
        if w > 0.:
            out += w * self.values[i+1]
        return out

    def weighted_sum(self, T, weights):
        """
        Sum over bins of weights times the interpolated values.

        Evaluated from the two bracketing rows, without building the
        interpolated vector.

        Parameters:
        T (float): Temperature [K].
        weights (array-like): Per-bin weights (e.g. an actinic-flux vector).

        Returns:
        float: The weighted sum.
        """
        i, w = self.bracket(T)
        total = (1.-w) * np.dot(self.values[i], weights)
        if w > 0.:
            total += w * np.dot(self.values[i+1], weights)
        return float(total)

    def complement(self, name=None):
        """
        New table holding 1 minus the values, e.g. for the other branch of a quantum yield.
        """
        return TemperatureTable(self.temperatures, 1.-self.values, name=name or f'1-{self.name}')

    def clipped(self, lower=0., upper=1., name=None):
        """
        New table with values clipped to [lower,upper].
        """
        return TemperatureTable(
            self.temperatures, np.clip(self.values, lower, upper), name=name or self.name
            )


class PhotolysisChannel:
    """
    Spectral data of one photolysis channel: cross-section times quantum yield.

    Channels of the same molecule share a single cross-section table and
    differ only in their quantum yields.
    """

    def __init__(self, name, cross_section, quantum_yield=1., absorber=None, description=''):
        """
        Parameters:
        name (str): Name of the channel (e.g. 'NO2').
        cross_section (TemperatureTable): Absorption cross-section [cm^2 molecule^-1].
        quantum_yield (float or TemperatureTable): Probability of this channel's products.
        absorber (str): Name of the absorbing molecule, defaults to the channel name.
        description (str): Reaction, e.g. 'NO2 + hv -> NO + O'.
        """
        self.name = name
        self.absorber = absorber if absorber is not None else name
        self.description = description

        if not isinstance(cross_section, TemperatureTable):
            cross_section = TemperatureTable([298.], cross_section, name=name)
        if np.any(cross_section.values < 0):
            raise ValueError(f'Cross-section of \"{name}\" contains negative values.')
        self.cross_section = cross_section

        if isinstance(quantum_yield, TemperatureTable):
            if quantum_yield.n_bins != cross_section.n_bins:
                raise ValueError(
                    f'Quantum yield of \"{name}\" has {quantum_yield.n_bins} bins, '
                    f'cross-section has {cross_section.n_bins}.'
                    )
            if np.any(quantum_yield.values < 0) or np.any(quantum_yield.values > 1):
                raise ValueError(f'Quantum yield of \"{name}\" should be within [0,1].')
        else:
            quantum_yield = float(quantum_yield)
            if not (0. <= quantum_yield <= 1.):
                raise ValueError(f'Quantum yield of \"{name}\" should be within [0,1], got {quantum_yield}.')
        self.quantum_yield = quantum_yield

    def __repr__(self):
        return f'PhotolysisChannel({self.name!r}, absorber={self.absorber!r})'

    @property
    def n_bins(self):
        return self.cross_section.n_bins

    @property
    def has_constant_yield(self):
        return not isinstance(self.quantum_yield, TemperatureTable)
