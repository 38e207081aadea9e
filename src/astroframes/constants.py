"""
The `constants` module defines the mathematical, time and Earth constants used by the frame engine.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Constant to convert arcseconds to radians. Equal to 2pi/(360*3600). Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

"""
Constant to convert radians to arcseconds. Equal to (360*3600)/(2pi). Units: *as/rad*
"""
RAD2AS = 360.0 * 3600.0 / PI / 2.0

"""
Constant to convert milliarcseconds to radians. Units: *rad/mas*
"""
MAS2RAD = AS2RAD * 1.0e-3

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5  # Offset between Julian Date and Modified Julian Date

"""
Modified Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
MJD2000 = 51544.5

"""
Length of a Julian day. Units: *s*
"""
JULIAN_DAY = 86400.0

"""
Length of a Julian year (365.25 days). Units: *s*
"""
JULIAN_YEAR = 365.25 * JULIAN_DAY

"""
Days per Julian century. Units: *days*
"""
JULIAN_CENTURY_DAYS = 36525.0

# Earth Constants
"""
Earth axial rotation rate. [rad/s]

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5  # [rad/s] Taken from Vallado 4th Ed page 222

"""
Ratio of the Earth rotation angle rate to the UT1 day (IAU 2000). [dimensionless]

References:

1. G. Petit and B. Luzum, *IERS Technical Note 36*, 2010, eq. 5.15
"""
ERA_RATE_RATIO = 1.00273781191135448

"""
Mean obliquity of the ecliptic at J2000, IAU 2006 value. Units: *arcsec*
"""
OBLIQUITY_J2000 = 84381.406
