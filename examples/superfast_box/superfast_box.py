# Box-model photolysis for the SuperFast mechanism, as in the Fast-JX box model
mechanism = 'superfast'

# Reference flux scaled by cos(SZA), no attenuation by the overlying column
flux_model = 'cosine'

# Reference time, 1970-01-01T00:00:00 UTC
t_ref = 0. # [s]

# Sample: local noon at 30N, 0E
time = 12*3600. # [s]
lat = 30.  # [deg]
lon = 0.   # [deg]
temperature = 220. # [K]
pressure = 101325. # [Pa]
humidity = 0. # [molecules cm^-3]
