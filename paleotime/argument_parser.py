#!/usr/bin/env python
import argparse
from paleotime import config as ptconf
from paleotime.wrappers import tip_calibrations, check_tree, repair_tree
import paleotime


paleotime_description = \
    "paleotime: utilities for paleobiological phylogenetics\n\n"
subcommand_description = \
    "paleotime implements the following sub-commands:\n\n"\
    "\t calibrate\twrite MrBayes tip age calibrations from fossil occurrence ages.\n"\
    "\t check-tree\ttest the edge matrix of a tree for inconsistencies.\n"\
    "\t clean-tree\trenumber and reorder the edge matrix of a tree.\n\n"\
    "To print a description and argument list of the individual sub-commands, type:\n\n"\
    "\t paleotime <subcommand> -h\n\n"

ref_msg = \
    "Tip-dating calibrations follow"\
    "\n\n\tZhang et al. Total-Evidence Dating under the Fossilized Birth-Death Process."\
    "\n\tSystematic Biology 65(2):228-249, 2016\n"

calibrate_description = \
    "Constructs a block of tip age calibrations for tip-dating analyses in MrBayes "\
    "from fossil occurrence ages. Calibrations are given as 'calibrate' commands, "\
    "followed by an offset exponential prior on the tree age. The block is printed "\
    "to stdout unless --outfile is given.\n\n"

ages_description = "csv or tsv file with a column of taxon names and 1, 2 or 4 columns of ages: "\
    "a precise point occurrence, bounds on a single occurrence, or bounds on the first and "\
    "last occurrence, always ordered from older to younger."

calibration_type_description = "how tip ages are calibrated: 'fixedDateEarlier' fixes tips at the "\
    "older bound of the selected appearance, 'fixedDateLatter' at the younger bound, 'fixedDateRandom' "\
    "at an age drawn uniformly between the bounds and 'uniformRange' places a uniform prior between the bounds."

tree_description = "Name of file containing the tree in "\
    "newick, nexus, phyloxml or nexml format."

edges_description = "csv or tsv file with the edge matrix of a tree, one row per edge with the "\
    "columns parent, child and optionally length. Nodes are numbered from 1, tips first."

check_tree_description = \
    "Reads the edge matrix of a tree and reports inconsistencies: node numbering, "\
    "the number of internal nodes, the position of the root, nodes with several parents "\
    "and nodes detached from the root. "\
    "Returns with exit code 1 if problems are found."

clean_tree_description = \
    "Rebuilds the edge matrix of a tree: tips and internal nodes are renumbered in "\
    "preorder, edges are listed cladewise and the node count is recomputed. "\
    "The cleaned tree is written in newick format and as an edge table."


def add_tree_arguments(parser):
    tree_group = parser.add_mutually_exclusive_group(required=True)
    tree_group.add_argument('--tree', type=str, help=tree_description)
    tree_group.add_argument('--edges', type=str, help=edges_description)
    parser.add_argument('--tips', type=str, help="file with the tip labels, one per line in the order "
                                                 "of the tip numbers. Required with --edges.")
    parser.add_argument('--n-node', type=int, help="number of internal nodes of the edge table, defaults "
                                                   "to the highest node number minus the number of tips")
    parser.add_argument('--tree-format', default='newick', choices=ptconf.TREE_FORMATS,
                        help="format of the tree file, default newick")


def add_common_args(parser):
    parser.add_argument('--verbose', default=1, type=int,  help='verbosity of output 0-6')


def make_parser():
    parser = argparse.ArgumentParser(description = paleotime_description+subcommand_description,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)

    subparsers = parser.add_subparsers()

    def toplevel(params):
        print(paleotime_description+subcommand_description)
        return ptconf.ERROR

    parser.set_defaults(func=toplevel)

    ## TIP CALIBRATIONS
    c_parser = subparsers.add_parser('calibrate', description=calibrate_description+ref_msg,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    age_group = c_parser.add_mutually_exclusive_group(required=True)
    age_group.add_argument('--ages', type=str, help=ages_description)
    age_group.add_argument('--intervals', type=str,
                           help="csv or tsv file with the older and younger bound of each interval of a "
                                "timeList, optionally preceded by a column of interval ids. Requires --taxon-ranges.")
    c_parser.add_argument('--taxon-ranges', type=str,
                          help="csv or tsv file with taxon names and the ids of their first and last intervals")
    c_parser.add_argument('--name-column', type=str, help="column with the taxon names")
    c_parser.add_argument('--calibration-type', required=True, choices=ptconf.CALIBRATION_TYPES,
                          help=calibration_type_description)
    c_parser.add_argument('--appearance', default='first', choices=ptconf.APPEARANCES,
                          help="use the first or the last appearance of each taxon, default first")
    c_parser.add_argument('--tree-age-offset', required=True, type=float,
                          help="the expected tree age is the minimum tree age plus this offset")
    c_parser.add_argument('--min-tree-age', type=float,
                          help="minimum tree age, defaults to the oldest tip age used")
    c_parser.add_argument('--no-collapse-uniform', action='store_true', default=False,
                          help="keep uniform priors for tips whose bounds are identical")
    anchor_group = c_parser.add_mutually_exclusive_group()
    anchor_group.add_argument('--anchor-taxon', type=str,
                              help="taxon that gets a fixed age with --calibration-type uniformRange")
    anchor_group.add_argument('--no-anchor', action='store_true', default=False,
                              help="don't fix the age of any taxon with --calibration-type uniformRange")
    c_parser.add_argument('--rng-seed', type=int, help="random seed for --calibration-type fixedDateRandom")
    c_parser.add_argument('--outfile', type=str, help="file to write the calibration block to")
    c_parser.add_argument('--plot', type=str,
                          help = "filename to save a plot of the tip ages to. Suffix will determine format"
                                 " (choices pdf, png, svg)")
    add_common_args(c_parser)
    c_parser.set_defaults(func=tip_calibrations)

    ## CHECK TREE
    t_parser = subparsers.add_parser('check-tree', description=check_tree_description)
    add_tree_arguments(t_parser)
    add_common_args(t_parser)
    t_parser.set_defaults(func=check_tree)

    ## CLEAN TREE
    r_parser = subparsers.add_parser('clean-tree', description=clean_tree_description)
    add_tree_arguments(r_parser)
    r_parser.add_argument('--outdir', type=str,  help='directory to write the output to')
    add_common_args(r_parser)
    r_parser.set_defaults(func=repair_tree)

    # make a version subcommand
    v_parser = subparsers.add_parser('version', description='print version')
    v_parser.set_defaults(func=lambda x: print(paleotime.version))

    return parser
