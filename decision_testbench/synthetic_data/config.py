"""Configuration constants for scenario generation.

Bounds the size of every generated value space so that synthesis stays
cheap regardless of how many fields a rule declares.
"""

# Representative values produced per field
SAMPLE_SIZE = 10

# Default number of scenarios requested from the combination engine
DEFAULT_SCENARIO_COUNT = 10

# Above this many exact combinations, fall back to random sampling
MAX_COMBINATIONS = 10_000

# Integer/date ranges this small are enumerated instead of sampled
EXHAUSTIVE_RANGE_LIMIT = 5

# Items per generated object-array instance
MIN_ARRAY_ITEMS = 1
MAX_ARRAY_ITEMS = 4

# Width of a numeric range when only one bound is declared
DEFAULT_NUMBER_SPAN = 20

# Width of a date range (days) when only one bound is declared
DEFAULT_DATE_SPAN_DAYS = 365

# Length of synthesized free-text values
TEXT_LENGTH = 8
