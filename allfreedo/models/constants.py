"""Constants for Allfreedo.

This module centralizes all magic numbers and default values used throughout the application.
"""

import string


# Task / template importance
MIN_WEIGHT = 1
MAX_WEIGHT = 5
DEFAULT_WEIGHT = 1

# Ratings (stars). One canonical range for every call path.
MIN_RATING = 1
MAX_RATING = 5

# Room access codes
ACCESS_CODE_LENGTH = 6
ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_CODE_MAX_ATTEMPTS = 10

# Recurrence
DEFAULT_INTERVAL = 1
