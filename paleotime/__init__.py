version="0.3.0"
## Here we define an error class for paleotime errors. InvalidTree, InvalidTimeData and InvalidOption
## errors are all due to input that does not fit the assumptions of the edge-matrix tree format
## or of the MrBayes tip-dating block. Wrong argument types raise the builtin TypeError.
class PaleoTimeError(Exception):
    """
    PaleoTimeError class
    Parent class for more specific errors
    Raised when paleotime is called with data or options it cannot work with
    """
    pass

class InvalidTreeError(PaleoTimeError):
    """InvalidTreeError class raised when the edge matrix of a tree is inconsistent"""
    pass

class InvalidTimeDataError(PaleoTimeError):
    """InvalidTimeDataError class raised when tip ages are malformed or misordered"""
    pass

class InvalidOptionError(PaleoTimeError):
    """InvalidOptionError class raised when a calibration option has an unsupported value"""
    pass


from .edge_tree import EdgeTree, validate_edge_matrix, edge_matrix_problems, clean_tree
from .tree_io import edge_tree_to_phylo, phylo_to_edge_tree, read_edge_tree, write_edge_tree
from .time_data import TimeList, time_list_to_four_date, as_tip_time_table, parse_tip_times, parse_time_list
from .calibrations import TipCalibration, create_mrbayes_tip_calibrations, plot_tip_ages
from .argument_parser import make_parser
