import os, sys
from .tree_io import read_edge_tree, read_edge_table, write_edge_tree, write_edge_table
from . import InvalidTreeError


def get_outdir(params, suffix='_paleotime'):
    if params.outdir:
        if os.path.exists(params.outdir):
            if os.path.isdir(params.outdir):
                return params.outdir.rstrip('/') + '/'
            else:
                print("designated output location %s is not a directory"%params.outdir, file=sys.stderr)
        else:
            os.makedirs(params.outdir)
            return params.outdir.rstrip('/') + '/'

    from datetime import datetime
    outdir_stem = datetime.now().date().isoformat()
    outdir = outdir_stem + suffix.rstrip('/')+'/'
    count = 1
    while os.path.exists(outdir):
        outdir = outdir_stem + '-%04d'%count + suffix.rstrip('/')+'/'
        count += 1

    os.makedirs(outdir)
    return outdir


def read_tree_input(params):
    """
    read the tree given either as a tree file (--tree) or as an
    edge table with tip labels (--edges, --tips)
    """
    if params.tree:
        return read_edge_tree(params.tree, params.tree_format)
    if not params.tips:
        raise InvalidTreeError("an edge table (--edges) requires the tip labels (--tips)")
    return read_edge_table(params.edges, params.tips, n_node=params.n_node)


def export_tree(tree, basename):
    outtree_name = basename + 'cleaned_tree.nwk'
    write_edge_tree(tree, outtree_name, 'newick')
    print("--- tree saved in newick format as  \n\t %s\n"%outtree_name)

    edges_name = basename + 'cleaned_edges.csv'
    tips_name = basename + 'cleaned_tips.txt'
    write_edge_table(tree, edges_name, tips_name)
    print("--- edge matrix saved as  \n\t %s\n--- tip labels saved as  \n\t %s\n"%(edges_name, tips_name))


def plot_calibrations(calibration, fname):
    from .calibrations import plot_tip_ages
    plot_tip_ages(calibration)

    from matplotlib import pyplot as plt
    plt.savefig(fname)
    print("--- tip age plot saved to  \n\t"+fname)
