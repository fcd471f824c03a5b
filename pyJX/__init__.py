# Initialize the package
__version__ = '1.0.0'

from . import utils
from .utils import sc
from .solar_geometry import cos_solar_zenith_angle
from .spectra import (
    TemperatureTable, PhotolysisChannel, SpectralDataStore, MissingSpectrumError,
    load_fastjx_store, default_store
)
from .actinic_flux import (
    ActinicFlux, ActinicFluxTable, CosineScaledFlux, ReferenceAtmosphere, DirectBeam, default_flux_table
)
from .photolysis import PhotolysisKernel, calibrate
from .rate_set import RateSetEvaluator, o1d_to_oh_fraction
from .mechanisms import MechanismBinding, SUPERFAST, GEOSCHEM, get_mechanism

__all__ = [
    'utils',
    'sc',
    'cos_solar_zenith_angle',
    'TemperatureTable',
    'PhotolysisChannel',
    'SpectralDataStore',
    'MissingSpectrumError',
    'load_fastjx_store',
    'default_store',
    'ActinicFlux',
    'ActinicFluxTable',
    'default_flux_table',
    'CosineScaledFlux',
    'ReferenceAtmosphere',
    'DirectBeam',
    'PhotolysisKernel',
    'calibrate',
    'RateSetEvaluator',
    'o1d_to_oh_fraction',
    'MechanismBinding',
    'SUPERFAST',
    'GEOSCHEM',
    'get_mechanism',
]
