import argparse
import pathlib
import sys

from pyJX import utils
from pyJX.rate_set import RateSetEvaluator
from pyJX.mechanisms import get_mechanism

def load_config(config_file):
    """
    Import a configuration file (e.g. examples/superfast_box/superfast_box.py) as a module.
    """
    if not pathlib.Path(config_file).is_file():
        raise FileNotFoundError(f'Configuration file \"{config_file}\" not found.')

    # Import relative to the working directory
    sys.path.insert(0, str(pathlib.Path.cwd()))
    config_string = str(config_file).replace('.py', '').replace('/', '.').strip('.')
    return __import__(config_string, fromlist=[''])

def print_rates(rates, title='Photolysis rates'):
    """
    Print a table of photolysis rates.
    """
    print(f'\n{title}')
    print('-'*60)
    for name, j in rates.items():
        print(f'  {name:<20s} {j:.6e} s^-1')
    print('-'*60)

def main(argv=None):

    time_start = utils.display_welcome_message()

    # Instantiate the parser
    parser = argparse.ArgumentParser()

    parser.add_argument(
        'config_file', type=str, help='Configuration file (e.g. path/to/config.py)'
        )
    parser.add_argument(
        '--overwrite', '-o', action='store_true', help='Rebuild an existing actinic-flux table.'
        )
    parser.add_argument(
        '--progress_bar', '-pbar', action='store_true', default=False,
        help='Show progress bar while tabulating the actinic flux.'
        )

    # Overwrite some parameters from the configuration file
    parser.add_argument('--time', type=float, default=None, help='Time since t_ref [s].')
    parser.add_argument('--lat', type=float, default=None, help='Latitude [deg].')
    parser.add_argument('--lon', type=float, default=None, help='Longitude [deg].')
    parser.add_argument('--temperature', '-T', type=float, default=None, help='Temperature [K].')
    parser.add_argument('--pressure', '-P', type=float, default=None, help='Pressure [Pa].')
    parser.add_argument(
        '--humidity', type=float, default=None, help='Water-vapour number density [molecules cm^-3].'
        )
    parser.add_argument(
        '--flux_model', type=str, default=None, choices=['direct_beam', 'cosine'],
        help='Actinic-flux model.'
        )
    parser.add_argument(
        '--mechanism', '-m', type=str, default=None,
        help='Print the rates under the names of a mechanism (e.g. superfast, geoschem).'
        )

    args = parser.parse_args(argv)

    # Import input file as 'config'
    config = load_config(args.config_file)

    # Overwrite some configuration parameters with command line arguments
    config = utils.update_config_with_args(
        config,
        time=args.time, lat=args.lat, lon=args.lon,
        temperature=args.temperature, pressure=args.pressure, humidity=args.humidity,
        flux_model=args.flux_model, mechanism=args.mechanism,
        overwrite=(args.overwrite or None), show_progress_bar=(args.progress_bar or None),
        )
    utils.warn_about_units(config)

    evaluator = RateSetEvaluator.from_config(config)

    sample = dict(
        t=getattr(config, 'time', 0.),
        lat=getattr(config, 'lat', 0.),
        lon=getattr(config, 'lon', 0.),
        temperature=getattr(config, 'temperature', 298.),
        pressure=getattr(config, 'pressure', 101325.),
        humidity=getattr(config, 'humidity', 0.),
    )
    print(f'\ncos(SZA) = {float(evaluator.cos_sza(sample["t"], sample["lat"], sample["lon"])):.6f}')
    rates = evaluator.evaluate(**sample)

    mechanism = getattr(config, 'mechanism', None)
    if mechanism is not None:
        mechanism = get_mechanism(mechanism)
        print_rates(mechanism.convert(rates), title=f'Photolysis rates of {mechanism.name}')
    else:
        print_rates(rates)

    utils.display_finish_message(time_start)
    return rates

if __name__ == '__main__':
    main()
