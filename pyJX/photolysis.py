import numpy as np

from .spectra import PhotolysisChannel

def calibrate(j, factor=1.):
    """
    Apply a calibration factor to a raw photolysis rate [s^-1].
    """
    return j * factor

class PhotolysisKernel:
    """
    Photolysis rate of one channel for a given actinic-flux vector.

        j = sum_bins flux * cross_section(T) * quantum_yield(T)

    The rate is linear in the flux. A calibration factor is only applied
    afterwards, the spectral tables are never modified.
    """

    def __init__(self, channel, calibration=1.):
        """
        Parameters:
        channel (PhotolysisChannel): Spectral data of the channel.
        calibration (float): Factor applied to the raw rate.
        """
        if not isinstance(channel, PhotolysisChannel):
            raise TypeError(f'Expected a PhotolysisChannel, got {type(channel).__name__}.')

        self.channel = channel
        self.calibration = float(calibration)

    def __repr__(self):
        return f'PhotolysisKernel({self.channel.name!r}, calibration={self.calibration:g})'

    @property
    def name(self):
        return self.channel.name

    def with_calibration(self, calibration):
        """
        Kernel of the same channel with another calibration factor.
        """
        return PhotolysisKernel(self.channel, calibration=calibration)

    def absorbed_flux(self, T, flux, out=None):
        """
        Flux absorbed per molecule in each bin, flux * cross_section(T).

        Parameters:
        T (float): Temperature [K].
        flux (numpy.ndarray): Actinic flux per bin [photons cm^-2 s^-1].
        out (numpy.ndarray): Optional output array of length n_bins.

        Returns:
        numpy.ndarray: Absorbed flux per bin [s^-1].
        """
        out = self.channel.cross_section.interpolate(T, out=out)
        out *= flux
        return out

    def rate_from_absorbed(self, T, absorbed):
        """
        Raw rate from a pre-computed absorbed flux, shared between branching channels.

        Parameters:
        T (float): Temperature [K].
        absorbed (numpy.ndarray): Output of absorbed_flux() for this channel's absorber.

        Returns:
        float: Raw photolysis rate [s^-1].
        """
        quantum_yield = self.channel.quantum_yield
        if self.channel.has_constant_yield:
            return quantum_yield * float(np.sum(absorbed))
        return quantum_yield.weighted_sum(T, absorbed)

    def raw_rate(self, T, flux, work=None):
        """
        Raw photolysis rate, without calibration.

        Parameters:
        T (float): Temperature [K].
        flux (numpy.ndarray): Actinic flux per bin [photons cm^-2 s^-1].
        work (numpy.ndarray): Optional scratch array of length n_bins.

        Returns:
        float: Photolysis rate [s^-1].
        """
        if self.channel.has_constant_yield:
            # Dot products with the bracketing rows
            return self.channel.quantum_yield * self.channel.cross_section.weighted_sum(T, flux)

        absorbed = self.absorbed_flux(T, flux, out=work)
        return self.rate_from_absorbed(T, absorbed)

    def j_rate(self, T, flux, work=None):
        """
        Calibrated photolysis rate [s^-1].

        Parameters:
        T (float): Temperature [K].
        flux (numpy.ndarray): Actinic flux per bin [photons cm^-2 s^-1].
        work (numpy.ndarray): Optional scratch array of length n_bins.

        Returns:
        float: Photolysis rate [s^-1].
        """
        return calibrate(self.raw_rate(T, flux, work=work), self.calibration)
