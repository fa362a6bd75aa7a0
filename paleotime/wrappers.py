import sys
from contextlib import redirect_stdout
from textwrap import fill
from . import PaleoTimeError
from . import config as ptconf
from .calibrations import TipCalibration
from .edge_tree import edge_matrix_problems, clean_tree
from .time_data import parse_tip_times, parse_time_list
from .CLI_io import get_outdir, read_tree_input, export_tree, plot_calibrations


def load_tip_times(params):
    """
    read tip ages either from a table of ages or from a timeList
    given as an interval and a taxon table
    """
    if params.ages:
        return parse_tip_times(params.ages, name_col=params.name_column)
    if not params.taxon_ranges:
        raise PaleoTimeError("a table of intervals (--intervals) requires the taxon ranges (--taxon-ranges)")
    return parse_time_list(params.intervals, params.taxon_ranges, name_col=params.name_column)


def tip_calibrations(params):
    """
    implementing paleotime calibrate
    """
    if params.anchor_taxon:
        anchor_taxon = params.anchor_taxon
    else:
        anchor_taxon = not params.no_anchor

    # without an outfile stdout only carries the calibration block
    progress = sys.stdout if params.outfile else sys.stderr
    try:
        with redirect_stdout(progress):
            tip_times = load_tip_times(params)
            calibration = TipCalibration(tip_times, params.calibration_type, params.tree_age_offset,
                                         which_appearance=params.appearance, min_tree_age=params.min_tree_age,
                                         collapse_uniform=not params.no_collapse_uniform,
                                         anchor_taxon=anchor_taxon, rng_seed=params.rng_seed,
                                         verbose=params.verbose)
    except PaleoTimeError as e:
        print("\nERROR: %s\n"%e, file=sys.stderr)
        print("Construction of the tip calibrations failed.", file=sys.stderr)
        return ptconf.ERROR

    if params.outfile:
        calibration.write(params.outfile)
        print("\n--- MrBayes tip calibrations saved to \n\t%s\n"%params.outfile)
    else:
        print("\n".join(calibration.block()))

    if params.plot:
        with redirect_stdout(progress):
            plot_calibrations(calibration, params.plot)

    return ptconf.SUCCESS


def check_tree(params):
    """
    implementing paleotime check-tree
    """
    try:
        tree = read_tree_input(params)
    except PaleoTimeError as e:
        print("\nERROR: %s\n"%e, file=sys.stderr)
        return ptconf.ERROR

    problems = edge_matrix_problems(tree)
    if problems:
        print("\nThe edge matrix has %d problem(s):"%len(problems))
        for p in problems:
            print(fill(p, initial_indent='\t- ', subsequent_indent='\t  '))
        print("\nRun 'paleotime clean-tree' to rebuild the edge matrix.\n")
        return ptconf.ERROR

    print("\nThe edge matrix is consistent: %d tips, %d internal nodes, %d edges.\n"
          %(tree.n_tip, tree.n_node, tree.n_edge))
    return ptconf.SUCCESS


def repair_tree(params):
    """
    implementing paleotime clean-tree
    """
    try:
        tree = read_tree_input(params)
        cleaned = clean_tree(tree, verbose=params.verbose)
    except PaleoTimeError as e:
        print("\nERROR: %s\n"%e, file=sys.stderr)
        print("The edge matrix could not be repaired.", file=sys.stderr)
        return ptconf.ERROR

    outdir = get_outdir(params, '_clean_tree')
    export_tree(cleaned, outdir)
    return ptconf.SUCCESS
