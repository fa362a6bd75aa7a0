VERBOSE = 3

# tip age tables
FOUR_DATE_COLUMNS = ['fad_older', 'fad_younger', 'lad_older', 'lad_younger']
ALLOWED_AGE_COLUMNS = (1, 2, 4)
AGE_ORDER_TOLERANCE = 1e-4      # slack for rounding in the first appearance bounds
NAME_COLUMNS = ['name', 'taxon', 'taxa', 'species', 'genus']

# MrBayes tip calibrations
APPEARANCES = ('first', 'last')
FIXED_EARLIER = "fixedDateEarlier"
FIXED_LATTER = "fixedDateLatter"
FIXED_RANDOM = "fixedDateRandom"
UNIFORM_RANGE = "uniformRange"
CALIBRATION_TYPES = (FIXED_EARLIER, FIXED_LATTER, FIXED_RANDOM, UNIFORM_RANGE)
MIN_TREE_AGE_TOLERANCE = 1.0001
AGE_FORMAT = "%.15g"

# edge matrix
TREE_FORMATS = ('newick', 'nexus', 'phyloxml', 'nexml')

#
SUCCESS = 0
ERROR = 1
