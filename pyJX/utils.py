import numpy as np

import warnings
import pathlib
import h5py
import time
import datetime

from pandas import read_csv

import scipy.constants as sc
sc.N_A = sc.physical_constants['Avogadro constant'][0] # [mol^-1]
sc.M_air = 28.97 # Molecular weight of dry air [g mol^-1]
sc.g0 = 9.80665 # Standard gravity [m s^-2]
sc.R_earth = 6375.0e5 # Earth radius used for the spherical shells [cm]

# Column mass factor, [Pa] -> [molecules cm^-2]
sc.MASFAC = sc.N_A / (sc.M_air*sc.g0*10)

data_dir = pathlib.Path(__file__).resolve().parent / 'data'

def read_data_table(file, index_col=0):
    """
    Read a comma-separated table shipped with pyJX (or given by the user).

    Parameters:
    file (str): File name, relative to the pyJX data directory or an absolute path.
    index_col (int): Column to use as the row labels.

    Returns:
    pandas.DataFrame: The table.

    Raises:
    FileNotFoundError: If the file does not exist.
    """
    file = pathlib.Path(file)
    if not file.is_absolute():
        file = data_dir / file

    if not file.is_file():
        raise FileNotFoundError(f'Data table \"{file}\" not found.')

    return read_csv(file, index_col=index_col, comment='#')

def save_to_hdf5(file, data, attrs, compression='gzip', **kwargs):
    """
    Save data to an HDF5 file.

    Parameters:
    file (str): Path to the output file.
    data (dict): Dictionary containing the data to save.
    attrs (dict): Dictionary containing the attributes to save.
    """
    # Make sure the output directory exists
    pathlib.Path(file).parent.mkdir(parents=True, exist_ok=True)

    with h5py.File(file, 'w') as f:
        for key, value in data.items():

            value = np.atleast_1d(value)
            if value.dtype.kind in {'U', 'S'}:
                value = value.astype('S') # Convert unicode to bytes

            dat_i = f.create_dataset(
                name=key, data=value, compression=compression, **kwargs
                )

            attrs_i = attrs.get(key, None)
            if attrs_i is None:
                continue
            for key_j, value_j in dict(attrs_i).items():
                dat_i.attrs[key_j] = value_j

def read_from_hdf5(file, keys_to_read, return_attrs=False):
    """
    Read data from an HDF5 file.

    Parameters:
    file (str): Path to the input file.
    keys_to_read (list): Datasets to read, missing keys are skipped.
    return_attrs (bool): Whether to also return the attributes of each dataset.

    Returns:
    dict: Dictionary containing the data.
    """
    if not pathlib.Path(file).is_file():
        raise FileNotFoundError(f'HDF5 file \"{file}\" not found.')

    datasets, datasets_attrs = {}, {}
    with h5py.File(file, 'r') as f:
        for key_i in keys_to_read:
            if key_i not in f.keys():
                continue
            datasets[key_i] = f[key_i][:]
            datasets_attrs[key_i] = dict(f[key_i].attrs)

    if return_attrs:
        return datasets, datasets_attrs

    return datasets

def read_only(array, dtype=np.float64):
    """
    Return a contiguous copy of an array that cannot be written to.
    """
    array = np.array(array, dtype=dtype, copy=True, order='C')
    array.setflags(write=False)
    return array

def display_welcome_message():
    """
    Display a welcome message.
    """
    print('\n'+'='*80)
    print('  Welcome to pyJX: Photolysis J-values for Python')
    print('='*80+'\n')

    return time.time()

def display_finish_message(time_start):
    """
    Display a finish message and the elapsed time.

    Parameters:
    time_start (float): Start time of the process.
    """
    time_finish = time.time()
    time_elapsed = time_finish - time_start

    print('\nTime elapsed: {}'.format(str(datetime.timedelta(seconds=time_elapsed))))
    print('='*80+'\n')

def update_config_with_args(config=None, **kwargs):
    """
    Update the configuration object with command-line arguments.

    Parameters:
    config (object): Configuration object to update.
    kwargs (dict): Keyword arguments representing the parameters to update.

    Returns:
    object: Updated configuration object.
    """
    print('\nUpdating configuration with new parameters')

    if config is None:
        class Config:
            pass
        config = Config()

    for key, value in kwargs.items():
        if value is None:
            continue # Parameter not given

        new_value = value
        if isinstance(value, str):
            new_value = f'\"{new_value}\"'

        # Different warning messages
        if hasattr(config, key):
            old_value = getattr(config, key)
            warnings.warn(f'Overwriting parameter \"{key}\" from {old_value} to {new_value}.')
        else:
            warnings.warn(f'Adding parameter \"{key}\" as {new_value}.')

        # Update or add the parameter
        setattr(config, key, value)
    print()

    return config

def warn_about_units(config):
    """
    Display a warning message about expected units for specific parameters.

    Parameters:
    config (object): Configuration object containing parameter definitions.

    Returns:
    list: (parameter, unit) pairs that were found in the configuration.
    """
    default_units = {
        'time': 's (Unix time)',
        't_ref': 's (Unix time)',
        'lat': 'deg',
        'lon': 'deg',
        'temperature': 'K',
        'pressure': 'Pa',
        'humidity': 'molecules cm^-3',
        'P_grid': 'Pa',
        'cos_sza_grid': 'cos(SZA)',
    }

    keys_units_to_warn = []
    for key in dir(config):
        unit = default_units.get(key, None)
        if unit is None:
            continue

        keys_units_to_warn.append((key, unit))

    if len(keys_units_to_warn) == 0:
        return keys_units_to_warn

    warnings.warn('Please make sure that the following parameters are given in the expected units:')
    for key, unit in keys_units_to_warn:
        print(f'  - {key} [{unit}]')
    print()

    return keys_units_to_warn

def bracket(grid, x):
    """
    Find the interval of an ascending grid that holds x.

    Parameters:
    grid (sequence): Ascending grid with at least two points.
    x (float): Value to locate, clamped to the grid ends.

    Returns:
    tuple: Index i of the lower node and the weight of node i+1.
    """
    if x <= grid[0]:
        return 0, 0.
    n = len(grid)
    if x >= grid[n-1]:
        return n-2, 1.

    # Bisection, grids are small
    lo, hi = 0, n-1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if grid[mid] <= x:
            lo = mid
        else:
            hi = mid
    return lo, float((x - grid[lo]) / (grid[lo+1] - grid[lo]))
