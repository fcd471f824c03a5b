import numpy as np

from .flux import ActinicFlux

class CosineScaledFlux(ActinicFlux):
    """
    Reference flux scaled with the cosine of the solar zenith angle.

    The Fast-JX box-model flux: no attenuation by the overlying column, so
    the pressure is ignored, and zero in all bins once the sun sets.
    """

    def __init__(self, **kwargs):
        """
        Initialises the CosineScaledFlux object.

        Args:
            **kwargs: Arguments passed to ActinicFlux.
        """
        super().__init__(**kwargs)

    def flux_vector(self, cos_sza, pressure=None, out=None):
        """
        Args:
            cos_sza (float): Cosine of the solar zenith angle.
            pressure (float): Ignored [Pa].
            out (numpy.ndarray): Optional output array of length n_bins.

        Returns:
            numpy.ndarray: Actinic flux per bin [photons cm^-2 s^-1].
        """
        if out is None:
            out = np.empty(self.n_bins)
        return np.multiply(self.reference_flux, max(float(cos_sza), 0.), out=out)

    def flux(self, cos_sza, pressure, bin_index):
        """
        Args:
            cos_sza (float): Cosine of the solar zenith angle.
            pressure (float): Ignored [Pa].
            bin_index (int): Index of the wavelength-bin.

        Returns:
            float: Actinic flux [photons cm^-2 s^-1].
        """
        return float(self.reference_flux[bin_index]) * max(float(cos_sza), 0.)
