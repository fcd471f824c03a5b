import numpy as np

seconds_per_day = 86400.

def year_and_day_of_year(days):
    """
    Convert days since 1970-01-01 into the calendar year and day of the year.

    Uses the proleptic Gregorian calendar with floor-divisions only, so that
    scalars and arrays of any floating-point precision are handled alike.

    Parameters:
    days (float or array-like): Whole days since the Unix epoch.

    Returns:
    tuple: Calendar year and day of the year (1 on January 1st).
    """
    z = days + 719468. # Days since 0000-03-01
    era = np.floor_divide(z, 146097.)
    day_of_era = z - era*146097.

    year_of_era = np.floor_divide(
        day_of_era - np.floor_divide(day_of_era, 1460.)
        + np.floor_divide(day_of_era, 36524.) - np.floor_divide(day_of_era, 146096.),
        365.
        )
    # Day within a year that starts on March 1st
    day_of_march_year = day_of_era - (
        365.*year_of_era + np.floor_divide(year_of_era, 4.) - np.floor_divide(year_of_era, 100.)
        )
    year = year_of_era + era*400.

    # January and February belong to the next calendar year
    in_next_year = (day_of_march_year >= 306.)
    year = year + in_next_year

    is_leap = ((np.mod(year, 4.) == 0) & (np.mod(year, 100.) != 0)) | (np.mod(year, 400.) == 0)
    day_of_year = np.where(
        in_next_year, day_of_march_year - 305., day_of_march_year + 60. + is_leap
        )
    return year, day_of_year

def equation_of_time(gamma):
    """
    Equation of time [min] for the fractional year gamma [rad].
    """
    return 229.18 * (
        0.000075 + 0.001868*np.cos(gamma) - 0.032077*np.sin(gamma)
        - 0.014615*np.cos(2*gamma) - 0.040849*np.sin(2*gamma)
        )

def declination(day_of_year):
    """
    Solar declination [rad] on a given day of the year.
    """
    return np.arcsin(
        np.sin(np.deg2rad(-23.44)) * np.cos(np.deg2rad(
            360/365.24*(day_of_year+10) + 360/np.pi*0.0167*np.sin(np.deg2rad(360/365.24*(day_of_year-2)))
            ))
        )

def cos_solar_zenith_angle(t, lat, lon):
    """
    Cosine of the solar zenith angle.

        cos(SZA) = sin(LAT)*sin(DEC) + cos(LAT)*cos(DEC)*cos(AHR)

    with LAT the latitude, DEC the solar declination and AHR the hour
    angle. Negative values mean the sun is below the horizon.

    Parameters:
    t (float or array-like): Unix time [s].
    lat (float or array-like): Latitude [deg], positive on the northern hemisphere.
    lon (float or array-like): Longitude [deg], positive east of Greenwich.

    Returns:
    float or numpy.ndarray: Cosine of the solar zenith angle, within [-1,1].
    """
    days = np.floor(t / seconds_per_day)
    hours = (t - days*seconds_per_day) / 3600. # UTC [h]
    year, day_of_year = year_and_day_of_year(days)

    # Fractional year [rad]
    days_in_year = np.where(np.mod(year, 4.) == 0, 366., 365.)
    gamma = 2*np.pi / days_in_year * (day_of_year - 1 + (hours-12)/24)

    # True solar time
    timezone = np.floor(lon / 15.) # [h]
    time_offset = equation_of_time(gamma) + 4*(lon - 15*timezone) # [min]
    local_hours = np.mod(t + timezone*3600., seconds_per_day) / 3600.
    true_solar_time = local_hours + time_offset/60 # [h]

    hour_angle = np.deg2rad(15.) * (true_solar_time - 12) # [rad]
    lat = np.deg2rad(lat)
    dec = declination(day_of_year)

    cos_sza = np.sin(lat)*np.sin(dec) + np.cos(lat)*np.cos(dec)*np.cos(hour_angle)
    return np.clip(cos_sza, -1., 1.)
