# GEOS-Chem photolysis rates from the attenuated direct solar beam
mechanism = 'geoschem'
flux_model = 'direct_beam'

# Also compute the O(1D) + H2O -> 2OH rate
channels = ['O3_2OH']

# Cache of the tabulated direct beam, rebuilt with --overwrite
flux_table_file = './output_data/direct_beam_flux.hdf5'
show_progress_bar = True

import numpy as np
# Grid of cos(SZA) for the table
cos_sza_grid = np.round(np.arange(-0.2, 1.0+1e-9, 0.01), 2)

# Reference time, 2019-07-01T00:00:00 UTC
t_ref = 1561939200. # [s]

# Sample: mid-morning over Champaign, Illinois, mid-troposphere
time = 15*3600. # [s]
lat = 40.11  # [deg]
lon = -88.24 # [deg]
temperature = 260. # [K]
pressure = 5e4 # [Pa]
humidity = 1e17 # [molecules cm^-3]
