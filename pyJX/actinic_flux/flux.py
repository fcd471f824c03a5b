import numpy as np

from pyJX import utils

class ActinicFlux:
    """
    Base class for actinic fluxes in the Fast-JX wavelength-bins.
    """

    wavelength_bins = utils.read_data_table('wavelength_bins.csv')

    def __init__(self, reference_flux=None, wavelengths=None):
        """
        Initialize the ActinicFlux object.

        Parameters:
        reference_flux (array-like): Top-of-atmosphere actinic flux per bin [photons cm^-2 s^-1].
        wavelengths (array-like): Effective wavelength of each bin [nm].
        """
        if reference_flux is None:
            reference_flux = self.wavelength_bins['actinic_flux'].to_numpy()
        if wavelengths is None:
            wavelengths = self.wavelength_bins['wavelength'].to_numpy()

        self.reference_flux = utils.read_only(reference_flux)
        self.wavelengths = utils.read_only(wavelengths)

        if len(self.reference_flux) != len(self.wavelengths):
            raise ValueError(
                f'Got {len(self.reference_flux)} reference fluxes for {len(self.wavelengths)} wavelength-bins.'
                )
        if np.any(self.reference_flux < 0):
            raise ValueError('Reference actinic fluxes should be non-negative.')

    @property
    def n_bins(self):
        return len(self.wavelengths)

    def flux_vector(self, cos_sza, pressure, out=None):
        """
        Actinic flux in all bins.

        Raises:
        NotImplementedError: This method should be implemented in a subclass.
        """
        raise NotImplementedError("This method should be implemented in the subclass.")

    def flux(self, cos_sza, pressure, bin_index):
        """
        Actinic flux in a single bin.

        Raises:
        NotImplementedError: This method should be implemented in a subclass.
        """
        raise NotImplementedError("This method should be implemented in the subclass.")
