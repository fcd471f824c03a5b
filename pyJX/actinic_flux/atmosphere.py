import numpy as np

from pyJX import utils, sc

class ReferenceAtmosphere:
    """
    Column on the hybrid sigma-pressure grid, used to attenuate the solar beam.

    Level i is the bottom edge of layer i, pressures decrease with index.
    """

    def __init__(self, Ap, Bp, T, O3_vmr, P_surface=sc.atm):
        """
        Parameters:
        Ap (array-like): Hybrid-grid pressure offsets of the level edges [hPa].
        Bp (array-like): Hybrid-grid sigma coefficients of the level edges.
        T (array-like): Temperature of each layer [K].
        O3_vmr (array-like): O3 volume-mixing ratio of each layer.
        P_surface (float): Surface pressure [Pa].
        """
        Ap, Bp = np.asarray(Ap, dtype=np.float64), np.asarray(Bp, dtype=np.float64)
        T, O3_vmr = np.asarray(T, dtype=np.float64), np.asarray(O3_vmr, dtype=np.float64)

        if not (len(Ap) == len(Bp) == len(T) == len(O3_vmr)):
            raise ValueError('Ap, Bp, T and O3_vmr should have the same length.')

        self.pressure = utils.read_only(Ap*1e2 + Bp*P_surface) # [hPa] -> [Pa]
        if np.any(np.diff(self.pressure) >= 0):
            raise ValueError('Pressure levels should decrease monotonically.')

        self.temperature = utils.read_only(T)
        self.O3_vmr = utils.read_only(O3_vmr)

        self.column_density = utils.read_only(self.path_density())
        self.heights = utils.read_only(self.edge_heights())

    @classmethod
    def from_csv(cls, file='reference_atmosphere.csv', **kwargs):
        """
        Read the columns 'Ap' [hPa], 'Bp', 'T' [K] and 'O3' [vmr] from a CSV file.
        """
        df = utils.read_data_table(file)
        missing = [key for key in ['Ap', 'Bp', 'T', 'O3'] if key not in df.columns]
        if len(missing) > 0:
            raise ValueError(f'Columns {missing} not found in \"{file}\".')

        return cls(
            Ap=df['Ap'].to_numpy(), Bp=df['Bp'].to_numpy(),
            T=df['T'].to_numpy(), O3_vmr=df['O3'].to_numpy(), **kwargs
            )

    @property
    def n_levels(self):
        return len(self.pressure)

    def path_density(self):
        """
        Column density of air in each layer [molecules cm^-2].

        The uppermost layer holds all air above the top level.
        """
        P = self.pressure
        N = np.empty_like(P)
        N[:-1] = sc.MASFAC * (P[:-1]-P[1:])
        N[-1]  = sc.MASFAC * P[-1]
        return N

    def edge_heights(self, top_increment=5e5):
        """
        Heights of the level edges above the surface [cm], from the hypsometric equation.

        Parameters:
        top_increment (float): Thickness added above the top level [cm].

        Returns:
        numpy.ndarray: n_levels+1 heights, the last one being the top of the atmosphere.
        """
        P = self.pressure
        # [J K^-1] -> [Pa cm^3 K^-1]
        scale_height = sc.k * 1e6 * sc.MASFAC * self.temperature[:-1] # [cm]

        Z = np.zeros(self.n_levels+1)
        Z[1:-1] = np.cumsum(-np.log(P[1:]/P[:-1]) * scale_height)
        Z[-1] = Z[-2] + top_increment
        return Z

    def optical_depth(self, rayleigh, sigma_O2, sigma_O3, O2_vmr=0.20948):
        """
        Optical depth of each layer for the direct beam.

        Parameters:
        rayleigh (array-like): Rayleigh-scattering cross-section per bin [cm^2].
        sigma_O2 (TemperatureTable): O2 absorption cross-section [cm^2 molecule^-1].
        sigma_O3 (TemperatureTable): O3 absorption cross-section [cm^2 molecule^-1].
        O2_vmr (float): O2 volume-mixing ratio.

        Returns:
        numpy.ndarray: Optical depth with shape (n_levels+1, n_bins), the
            last row (top of the atmosphere) is zero.
        """
        rayleigh = np.asarray(rayleigh, dtype=np.float64)

        dtau = np.zeros((self.n_levels+1, len(rayleigh)))
        for i, (N_i, T_i, O3_i) in enumerate(zip(self.column_density, self.temperature, self.O3_vmr)):
            dtau[i] = N_i * (
                rayleigh + sigma_O2.interpolate(T_i)*O2_vmr + sigma_O3.interpolate(T_i)*O3_i
                )
        return dtau
