from .spectra import MissingSpectrumError
from .photolysis import calibrate

class MechanismBinding:
    """
    Maps the photolysis-rate names of a kinetics mechanism onto pyJX rates.

    Each mechanism rate refers to one rate of a RateSetEvaluator, optionally
    with a calibration factor that matches the mechanism's convention.
    """

    def __init__(self, name, rates, description=''):
        """
        Parameters:
        name (str): Name of the mechanism.
        rates (dict): Mechanism rate name -> pyJX rate name, or (pyJX rate name, calibration).
        description (str): Short description.
        """
        self.name = name
        self.description = description

        self.rates = {}
        for key, value in rates.items():
            if isinstance(value, str):
                value = (value, 1.)
            channel, factor = value
            self.rates[key] = (channel, float(factor))

    def __repr__(self):
        return f'MechanismBinding({self.name!r}, n_rates={len(self.rates)})'

    @property
    def channels(self):
        """
        pyJX rates needed by the mechanism, without duplicates.
        """
        return list(dict.fromkeys(channel for channel, _ in self.rates.values()))

    def evaluator(self, **kwargs):
        """
        RateSetEvaluator that computes only the rates of this mechanism.

        Parameters:
        **kwargs: Arguments passed to RateSetEvaluator.

        Returns:
        BoundMechanism: The mechanism bound to a new evaluator.
        """
        from .rate_set import RateSetEvaluator
        return self.bind(RateSetEvaluator(channels=self.channels, **kwargs))

    def bind(self, evaluator):
        """
        Bind the mechanism to an existing evaluator.

        Parameters:
        evaluator (RateSetEvaluator): Evaluator that should provide the rates.

        Returns:
        BoundMechanism: Callable returning the mechanism's rates.

        Raises:
        MissingSpectrumError: If the evaluator does not compute a required rate.
        """
        for channel in self.channels:
            if channel not in evaluator.names:
                raise MissingSpectrumError(channel, available=evaluator.names)
        return BoundMechanism(self, evaluator)

    def convert(self, rates):
        """
        Rename (and calibrate) the output of RateSetEvaluator.evaluate().

        Parameters:
        rates (dict): Photolysis rates [s^-1] per pyJX name.

        Returns:
        dict: Photolysis rates per mechanism name.
        """
        return {
            key: calibrate(rates[channel], factor) for key, (channel, factor) in self.rates.items()
        }


class BoundMechanism:
    """
    Mechanism binding attached to an evaluator, validated at setup.
    """

    def __init__(self, mechanism, evaluator):
        self.mechanism = mechanism
        self.evaluator = evaluator

    def __repr__(self):
        return f'BoundMechanism({self.mechanism.name!r}, {self.evaluator!r})'

    def __call__(self, t, lat, lon, temperature, pressure, humidity=0.):
        rates = self.evaluator.evaluate(t, lat, lon, temperature, pressure, humidity)
        return self.mechanism.convert(rates)


SUPERFAST = MechanismBinding(
    'SuperFast',
    rates={
        'jO31D': 'O3_O1D', # The mechanism scales jO31D by 1e-21 itself
        'jH2O2': 'H2O2',
        'jNO2': 'NO2',
        'jCH2Oa': 'CH2O_a',
        'jCH2Ob': 'CH2O_b',
        'jCH3OOH': 'CH3OOH',
    },
    description='Simplified tropospheric O3-NOx-HOx-CH4-CO chemistry',
)

GEOSCHEM = MechanismBinding(
    'GEOS-Chem',
    rates={
        'j_1': 'O2',
        'j_2': 'O3_O3P',
        'j_3': ('O3_O1D', 1e-21),
        'j_7': 'CH2O_a',
        'j_8': 'CH2O_b',
        'j_9': 'H2O2',
        'j_10': 'MP',
        'j_11': 'NO2',
        'j_79': 'PRPN',
        'j_80': 'ETP',
        'j_81': 'RA3P',
        'j_82': 'RB3P',
        'j_83': 'R4P',
        'j_84': 'PP',
        'j_85': 'RP',
        'j_99': 'MAP',
    },
    description='GEOS-Chem full-chemistry photolysis reactions with Fast-JX spectra',
)

mechanisms = {
    'superfast': SUPERFAST,
    'geoschem': GEOSCHEM,
}

def get_mechanism(mechanism):
    """
    Look up a mechanism binding by name (case-insensitive).

    Raises:
    ValueError: If the mechanism is not recognised.
    """
    if isinstance(mechanism, MechanismBinding):
        return mechanism

    key = str(mechanism).lower().replace('-', '').replace('_', '')
    if key not in mechanisms:
        raise ValueError(
            f'Mechanism \"{mechanism}\" not recognised, choose from {list(mechanisms)}.'
            )
    return mechanisms[key]
