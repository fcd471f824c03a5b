from .flux import ActinicFlux
from .flux_cosine import CosineScaledFlux
from .flux_table import ActinicFluxTable, default_flux_table
from .atmosphere import ReferenceAtmosphere
from .direct_beam import DirectBeam

__all__ = ['ActinicFlux', 'CosineScaledFlux', 'ActinicFluxTable', 'default_flux_table', 'ReferenceAtmosphere', 'DirectBeam']
