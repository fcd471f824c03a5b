from .spectrum import TemperatureTable, PhotolysisChannel
from .store import SpectralDataStore, MissingSpectrumError, load_fastjx_store, default_store

__all__ = [
    'TemperatureTable', 'PhotolysisChannel', 'SpectralDataStore', 
    'MissingSpectrumError', 'load_fastjx_store', 'default_store'
]
