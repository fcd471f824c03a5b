import numpy as np

from pyJX import sc

def fine_grid_radii(heights, R_earth=sc.R_earth):
    """
    Radii of the level edges and of the mid-points between them [cm].

    Parameters:
    heights (array-like): Heights of the n level edges [cm].
    R_earth (float): Radius of the Earth [cm].

    Returns:
    numpy.ndarray: 2n-1 radii, even indices are edges.
    """
    RZ = R_earth + np.asarray(heights, dtype=np.float64)

    RZ2 = np.empty(2*len(RZ)-1)
    RZ2[0::2] = RZ
    RZ2[1::2] = 0.5 * (RZ[:-1] + RZ[1:])
    return RZ2

def shadow_radius(cos_sza, surface_radius):
    """
    Radius below which the Earth blocks the sun, zero if the sun is above the horizon.
    """
    cos_sza = np.asarray(cos_sza, dtype=np.float64)
    with np.errstate(divide='ignore'):
        return np.where(cos_sza < 0., surface_radius / np.sqrt(1.-cos_sza**2), 0.)

def air_mass_factors(cos_sza, radii, index):
    """
    Air-mass factors of the fine-grid layers for the beam reaching a given radius.

    The path upwards from the point is traced through the spherical shells. When
    the sun is below the horizon, the path first descends to its tangent point and
    crosses the layers below the point twice. Points in the Earth's shadow get no
    direct beam.

    Parameters:
    cos_sza (float or array-like): Cosine of the solar zenith angle.
    radii (array-like): Fine-grid radii, from fine_grid_radii() [cm].
    index (int): Fine-grid index of the point.

    Returns:
    numpy.ndarray: Air-mass factors with shape (n_cos_sza, n_fine).
    """
    U0 = np.atleast_1d(np.asarray(cos_sza, dtype=np.float64))
    RZ2 = np.asarray(radii, dtype=np.float64)
    n_fine = len(RZ2)

    AMF = np.zeros((len(U0), n_fine))

    # Ascending path, identical for day and twilight
    mu_1 = np.abs(U0)
    for i in range(index, n_fine-1):
        RQ2 = (RZ2[i]/RZ2[i+1])**2
        mu_2 = np.sqrt(1. - RQ2*(1.-mu_1**2))
        AMF[:,i] = (RZ2[i+1]*mu_2 - RZ2[i]*mu_1) / (RZ2[i+1]-RZ2[i])
        mu_1 = mu_2
    AMF[:,-1] = 1.

    # Descending path, only when the sun is below the horizon
    active = (U0 < 0.)
    mu_1 = np.abs(U0)
    for i in range(index-1, -1, -1):
        if not np.any(active):
            break

        RQ2 = (RZ2[i]/RZ2[i+1])**2
        diff = RZ2[i+1] - RZ2[i]

        # Negative if the tangent point lies below this layer
        DIFF = RZ2[i+1]*np.sqrt(1.-mu_1**2) - RZ2[i]
        if i == 0:
            DIFF = np.maximum(DIFF, 0.)
        crosses = active & (DIFF < 0.)
        turns   = active & ~crosses

        mu_2 = np.sqrt(np.clip(1. - (1.-mu_1**2)/RQ2, 0., None))
        AMF[crosses,i] = 2. * np.abs(RZ2[i+1]*mu_1[crosses] - RZ2[i]*mu_2[crosses]) / diff
        AMF[turns,i]   = 2. * RZ2[i+1]*mu_1[turns] / diff

        mu_1 = np.where(crosses, mu_2, mu_1)
        active = crosses

    in_shadow = (RZ2[index] < shadow_radius(U0, RZ2[0]))
    AMF[in_shadow] = 0.
    return AMF

def direct_transmission(optical_depth, AMF, index, threshold=76.):
    """
    Transmission of the direct solar beam (Beer-Lambert law along the slant path).

    Parameters:
    optical_depth (numpy.ndarray): Optical depth per layer, shape (n_layers+1, n_bins).
    AMF (numpy.ndarray): Air-mass factors, shape (n_cos_sza, 2*n_layers+1).
    index (int): Fine-grid index of the point.
    threshold (float): Slant optical depths above this value transmit nothing.

    Returns:
    numpy.ndarray: Transmission with shape (n_cos_sza, n_bins).
    """
    n_fine = AMF.shape[1]
    # Each layer covers two fine-grid layers
    fine_optical_depth = np.repeat(optical_depth, 2, axis=0)[:n_fine]

    tau = 0.5 * (AMF @ fine_optical_depth)
    transmission = np.where(tau < threshold, np.exp(-np.minimum(tau, threshold)), 0.)

    # No beam where the point itself is not illuminated
    transmission[AMF[:,index] <= 0.] = 0.
    return transmission


class DirectBeam:
    """
    Attenuation of the direct solar beam in a spherical atmosphere.
    """

    def __init__(self, atmosphere, optical_depth, threshold=76.):
        """
        Parameters:
        atmosphere (ReferenceAtmosphere): Column providing the level heights.
        optical_depth (numpy.ndarray): Optical depth per layer, shape (n_levels+1, n_bins).
        threshold (float): Slant optical depths above this value transmit nothing.
        """
        self.atmosphere = atmosphere
        self.optical_depth = np.asarray(optical_depth, dtype=np.float64)
        if self.optical_depth.shape[0] != atmosphere.n_levels+1:
            raise ValueError(
                f'Optical depth should have {atmosphere.n_levels+1} rows, got {self.optical_depth.shape[0]}.'
                )
        self.threshold = threshold
        self.radii = fine_grid_radii(atmosphere.heights)

    def transmission(self, cos_sza, level):
        """
        Direct-beam transmission at a pressure level.

        Parameters:
        cos_sza (float or array-like): Cosine of the solar zenith angle.
        level (int): Index of the pressure level (0 is the surface).

        Returns:
        numpy.ndarray: Transmission with shape (n_cos_sza, n_bins).
        """
        index = 2*level # Level edges are the even fine-grid points
        AMF = air_mass_factors(cos_sza, self.radii, index)
        return direct_transmission(self.optical_depth, AMF, index, threshold=self.threshold)
