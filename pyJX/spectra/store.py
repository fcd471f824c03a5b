import functools

from pyJX import utils
from .spectrum import TemperatureTable, PhotolysisChannel

class MissingSpectrumError(KeyError):
    """
    Raised when a photolysis channel has no registered spectrum.
    """

    def __init__(self, name, available=()):
        self.name = name
        self.available = tuple(available)
        super().__init__(name)

    def __str__(self):
        message = f'No spectrum registered for \"{self.name}\".'
        if self.available:
            message += ' Available: ' + ', '.join(self.available)
        return message


class SpectralDataStore:
    """
    Registry of photolysis channels, shared read-only after freeze().

    Every channel must have as many wavelength-bins as the store. Names
    can be aliased to other channels, for molecules that borrow the
    spectrum of a similar molecule.
    """

    def __init__(self, wavelengths):
        """
        Parameters:
        wavelengths (array-like): Effective wavelength of each bin [nm].
        """
        self.wavelengths = utils.read_only(wavelengths)
        self.channels = {}
        self.aliases = {}
        self.frozen = False

    def __repr__(self):
        return (
            f'SpectralDataStore(n_bins={self.n_bins}, channels={len(self.channels)}, '
            f'aliases={len(self.aliases)}, frozen={self.frozen})'
        )

    def __contains__(self, name):
        return (name in self.channels) or (name in self.aliases)

    def __len__(self):
        return len(self.channels) + len(self.aliases)

    @property
    def n_bins(self):
        return len(self.wavelengths)

    @property
    def names(self):
        """
        Names of all channels and aliases, in order of registration.
        """
        return list(self.channels) + list(self.aliases)

    @property
    def absorbers(self):
        return sorted({channel.absorber for channel in self.channels.values()})

    def _check_not_frozen(self):
        if self.frozen:
            raise RuntimeError('SpectralDataStore is frozen, no more channels can be added.')

    def register(self, channel):
        """
        Add a photolysis channel.

        Parameters:
        channel (PhotolysisChannel): Channel to add.

        Returns:
        PhotolysisChannel: The registered channel.
        """
        self._check_not_frozen()

        if channel.name in self:
            raise ValueError(f'Channel \"{channel.name}\" is already registered.')
        if channel.n_bins != self.n_bins:
            raise ValueError(
                f'Channel \"{channel.name}\" has {channel.n_bins} wavelength-bins, expected {self.n_bins}.'
                )

        # Branching channels should share one cross-section
        for other in self.channels.values():
            if other.absorber == channel.absorber and other.cross_section is not channel.cross_section:
                raise ValueError(
                    f'Channels \"{other.name}\" and \"{channel.name}\" of absorber '
                    f'\"{channel.absorber}\" use different cross-sections.'
                    )

        self.channels[channel.name] = channel
        return channel

    def alias(self, name, target):
        """
        Let a name use the spectrum of another channel.

        Parameters:
        name (str): New name (e.g. a hydroperoxide without its own spectrum).
        target (str): Registered channel or alias to borrow the spectrum from.
        """
        self._check_not_frozen()

        if name in self:
            raise ValueError(f'Name \"{name}\" is already registered.')
        self.aliases[name] = self.resolve(target)

    def resolve(self, name):
        """
        Name of the channel that holds the spectrum for a (possibly aliased) name.

        Raises:
        MissingSpectrumError: If the name is unknown.
        """
        name = self.aliases.get(name, name)
        if name not in self.channels:
            raise MissingSpectrumError(name, available=self.names)
        return name

    def get(self, name):
        """
        Photolysis channel for a (possibly aliased) name.

        Raises:
        MissingSpectrumError: If the name is unknown.
        """
        return self.channels[self.resolve(name)]

    def freeze(self):
        """
        Stop accepting new channels. Calling it again has no effect.
        """
        self.frozen = True
        return self


# Molecules without a Fast-JX spectrum that use the CH3OOH cross-section
hydroperoxide_proxies = ['MP', 'ETP', 'RA3P', 'RB3P', 'R4P', 'PP', 'RP', 'PRPN', 'MAP']

def load_fastjx_store(freeze=True):
    """
    Build a store with the Fast-JX spectra shipped in pyJX/data.

    Parameters:
    freeze (bool): Whether to freeze the store before returning it.

    Returns:
    SpectralDataStore: The store.
    """
    print('\nLoading Fast-JX spectral data')

    bins = utils.read_data_table('wavelength_bins.csv')
    store = SpectralDataStore(wavelengths=bins['wavelength'].to_numpy())

    tables = {}
    for name in ['O2', 'O3', 'O3_O1D', 'H2O2', 'CH2O_a', 'CH2O_b', 'CH3OOH', 'NO2']:
        tables[name] = TemperatureTable.from_csv(f'cross_sections/{name}.csv', name=name)
        print(f'  {tables[name]}')

    # O2 and O3 absorb in the hard UV
    store.register(PhotolysisChannel(
        'O2', tables['O2'], description='O2 + hv -> O + O'
        ))

    # The Fast-JX O(1D) record holds the quantum yield of O3 photolysis
    q_O1D = tables['O3_O1D'].clipped(0., 1., name='q_O1D')
    store.register(PhotolysisChannel(
        'O3_O3P', tables['O3'], quantum_yield=q_O1D.complement(name='q_O3P'),
        absorber='O3', description='O3 + hv -> O2 + O'
        ))
    store.register(PhotolysisChannel(
        'O3_O1D_abs', tables['O3'], quantum_yield=q_O1D,
        absorber='O3', description='O3 + hv -> O2 + O(1D)'
        ))

    # Kernel used by the SuperFast and GEOS-Chem couplings (calibrated by the consumer)
    store.register(PhotolysisChannel(
        'O3_O1D', tables['O3_O1D'], absorber='O3_O1D',
        description='O3 + hv -> O2 + O(1D), Fast-JX record'
        ))

    store.register(PhotolysisChannel(
        'H2O2', tables['H2O2'], description='H2O2 + hv -> OH + OH'
        ))
    store.register(PhotolysisChannel(
        'CH2O_a', tables['CH2O_a'], absorber='CH2O_a', description='CH2O + hv -> H + HO2 + CO'
        ))
    store.register(PhotolysisChannel(
        'CH2O_b', tables['CH2O_b'], absorber='CH2O_b', description='CH2O + hv -> H2 + CO'
        ))
    store.register(PhotolysisChannel(
        'CH3OOH', tables['CH3OOH'], description='CH3OOH + hv -> OH + HO2 + CH2O'
        ))
    store.register(PhotolysisChannel(
        'NO2', tables['NO2'], description='NO2 + hv -> NO + O'
        ))

    for name in hydroperoxide_proxies:
        store.alias(name, 'CH3OOH')

    print(f'  Registered {len(store.channels)} channels and {len(store.aliases)} aliases')

    if freeze:
        store.freeze()
    return store

@functools.lru_cache(maxsize=None)
def default_store():
    """
    Frozen Fast-JX store, built on the first call and shared afterwards.
    """
    return load_fastjx_store(freeze=True)
