import os
from io import StringIO
from collections import defaultdict
import numpy as np
import pandas as pd
from Bio import Phylo
from Bio.Phylo.BaseTree import Tree, Clade
from Bio.Phylo.NewickIO import NewickError
from Bio.Nexus.Nexus import NexusError
from Bio.Nexus.Trees import TreeError
from paleotime import InvalidTreeError
from .edge_tree import EdgeTree


def _integer_edges(edge):
    edge = np.asarray(edge)
    if edge.ndim!=2 or edge.shape[1]!=2:
        raise InvalidTreeError("edge must be a matrix with two columns, got shape %s"%(edge.shape,))
    try:
        values = edge.astype(float)
    except (TypeError, ValueError):
        raise InvalidTreeError("edge matrix must contain numeric node numbers")
    if not np.all(np.isfinite(values)) or np.any(values!=np.round(values)):
        raise InvalidTreeError("edge matrix must contain whole, non-missing node numbers")
    if np.any(values<1):
        raise InvalidTreeError("node numbers must be positive")
    return values.astype(int)


def edge_tree_to_phylo(tree):
    """
    Convert an EdgeTree into a Bio.Phylo tree.

    Only the minimal structure needed to build a tree is required: a single
    root, at most one parent per node and all edges connected to the root.
    Node numbering does not need to follow the edge-matrix convention.

    Parameters
    ----------

     tree : EdgeTree
        tree to convert

    Returns
    -------

     phylo_tree : Bio.Phylo.BaseTree.Tree
        rooted tree, tips are named by tip_label and internal nodes by node_label

    """
    if not isinstance(tree, EdgeTree):
        raise TypeError("tree must be an EdgeTree, got %s"%type(tree).__name__)
    edge = _integer_edges(tree.edge)
    n_tip = tree.n_tip

    lengths = None
    if tree.edge_length is not None:
        lengths = np.asarray(tree.edge_length, dtype=float)
        if len(lengths)!=len(edge):
            raise InvalidTreeError("edge_length has %d entries for %d edges"%(len(lengths), len(edge)))

    offspring = defaultdict(list)
    parent_edge = {}
    for ei, (p, c) in enumerate(edge):
        if c in parent_edge:
            raise InvalidTreeError("node %d has more than one parent"%c)
        parent_edge[c] = ei
        offspring[p].append(ei)

    roots = sorted(set(offspring).difference(parent_edge))
    if len(roots)!=1:
        raise InvalidTreeError("tree needs exactly one root, found %d: %s"
                               %(len(roots), ", ".join(map(str, roots))))

    def node_name(number):
        if number<=n_tip:
            return tree.tip_label[number-1]
        ni = number - n_tip - 1
        if tree.node_label is not None and ni<len(tree.node_label) and tree.node_label[ni] not in [None, ""]:
            return tree.node_label[ni]
        if number not in offspring:
            # internal node without descendants, it will end up as a tip
            return "node%d"%number
        return None

    root_number = roots[0]
    root = Clade(branch_length=tree.root_edge, name=node_name(root_number))
    stack = [(root_number, root)]
    n_attached = 0
    while stack:
        number, clade = stack.pop()
        for ei in offspring.get(number, []):
            c = edge[ei,1]
            bl = None
            if lengths is not None and np.isfinite(lengths[ei]):
                bl = float(lengths[ei])
            child = Clade(branch_length=bl, name=node_name(c))
            clade.clades.append(child)
            stack.append((c, child))
            n_attached += 1

    if n_attached!=len(edge):
        raise InvalidTreeError("%d edges are not connected to the root"%(len(edge)-n_attached))

    return Tree(root=root, rooted=True)


def phylo_to_edge_tree(tree):
    """
    Convert a Bio.Phylo tree into an EdgeTree.

    Tips are numbered 1..n_tip in preorder, the root is n_tip+1 and the
    other internal nodes follow in preorder. Edges are listed cladewise.

    Parameters
    ----------

     tree : Bio.Phylo.BaseTree.Tree
        tree to convert, needs at least one internal node

    Returns
    -------

     edge_tree : EdgeTree
        tree in edge-matrix form. edge_length is None if no branch has a
        length, missing lengths are NaN otherwise.

    """
    if isinstance(tree, Clade):
        tree = Tree(root=tree, rooted=True)
    root = tree.root
    if root.is_terminal():
        raise InvalidTreeError("tree has no internal nodes")

    terminals = tree.get_terminals()
    internals = tree.get_nonterminals()
    number = {}
    for i, clade in enumerate(terminals):
        number[id(clade)] = i + 1
    for i, clade in enumerate(internals):
        number[id(clade)] = len(terminals) + i + 1

    parent = {}
    for clade in internals:
        for child in clade.clades:
            parent[id(child)] = clade

    edges, lengths = [], []
    for clade in tree.find_clades(order='preorder'):
        if clade is root:
            continue
        edges.append((number[id(parent[id(clade)])], number[id(clade)]))
        lengths.append(np.nan if clade.branch_length is None else float(clade.branch_length))

    def label(clade):
        if clade.name is not None:
            return clade.name
        if getattr(clade, 'confidence', None) is not None:
            return format(clade.confidence, 'g')
        return None

    tip_label = [c.name if c.name is not None else "" for c in terminals]
    node_label = [label(c) for c in internals]
    if all(x is None for x in node_label):
        node_label = None
    else:
        node_label = [x if x is not None else "" for x in node_label]

    edge_length = np.array(lengths, dtype=float)
    if np.all(np.isnan(edge_length)):
        edge_length = None

    return EdgeTree(np.array(edges, dtype=int).reshape(-1, 2), tip_label, len(internals),
                    edge_length=edge_length, node_label=node_label,
                    root_edge=root.branch_length)


def read_edge_tree(source, fmt='newick'):
    """
    Read a tree and return it as an EdgeTree.

    Parameters
    ----------

     source : str, Bio.Phylo.BaseTree.Tree
        file name, tree string in format *fmt*, or a Biopython tree

     fmt : str
        any tree format understood by Bio.Phylo

    """
    if isinstance(source, (Tree, Clade)):
        return phylo_to_edge_tree(source)
    if not isinstance(source, str):
        raise TypeError("tree source must be a file name, a tree string or a Bio.Phylo tree")

    is_file = os.path.isfile(source)
    if not is_file:
        if not source.strip():
            raise InvalidTreeError("tree string is empty")
        if '(' not in source and ';' not in source:
            raise InvalidTreeError("file %s does not exist"%source)

    handle = source if is_file else StringIO(source)
    try:
        phylo_tree = Phylo.read(handle, fmt)
    except (ValueError, NewickError, TreeError, NexusError) as e:
        raise InvalidTreeError("could not read tree from %s: %s"%(source if is_file else "string", e))
    return phylo_to_edge_tree(phylo_tree)


def write_edge_tree(tree, handle, fmt='newick'):
    """write an EdgeTree to a file name or handle via Bio.Phylo"""
    return Phylo.write(edge_tree_to_phylo(tree), handle, fmt)


def edge_tree_to_newick(tree):
    out = StringIO()
    write_edge_tree(tree, out, 'newick')
    return out.getvalue().strip()


_LENGTH_COLUMNS = ['length', 'edge_length', 'branch_length']


def read_edge_table(edges_file, tips_file, n_node=None):
    """
    Read an edge matrix that was written or edited as a table.

    Parameters
    ----------

     edges_file : str
        csv or tsv file with the columns 'parent' and 'child' (or else the
        first two columns) and optionally 'length', 'edge_length' or 'branch_length'

     tips_file : str
        tip labels, one per line in the order of the tip numbers

     n_node : int, optional
        number of internal nodes, defaults to the highest node number minus
        the number of tips

    Returns
    -------

     tree : EdgeTree
        the tree exactly as read, it is not validated

    """
    for fname in [edges_file, tips_file]:
        if not os.path.isfile(fname):
            raise InvalidTreeError("file %s does not exist"%fname)
    full_sep = '\t' if edges_file.endswith('.tsv') else r'\s*,\s*'
    try:
        df = pd.read_csv(edges_file, sep=full_sep, engine='python', index_col=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise InvalidTreeError("could not read edge table %s: %s"%(edges_file, e))
    columns = {str(c).lower():c for c in df.columns}
    if 'parent' in columns and 'child' in columns:
        node_cols = [columns['parent'], columns['child']]
    elif df.shape[1]>=2:
        node_cols = list(df.columns[:2])
    else:
        raise InvalidTreeError("edge table %s needs a parent and a child column"%edges_file)
    length_cols = [columns[c] for c in _LENGTH_COLUMNS if c in columns]

    with open(tips_file, encoding='utf-8') as fh:
        tip_label = [line.strip() for line in fh if line.strip()]

    edge = df[node_cols].apply(pd.to_numeric, errors='coerce').to_numpy()
    if n_node is None and edge.size and not np.all(np.isnan(edge)):
        n_node = int(np.nanmax(edge)) - len(tip_label)
    edge_length = None
    if length_cols:
        edge_length = pd.to_numeric(df[length_cols[0]], errors='coerce').to_numpy()

    return EdgeTree(edge, tip_label, n_node, edge_length=edge_length)


def write_edge_table(tree, edges_file, tips_file):
    """write the edge matrix of a tree as a csv table and its tip labels as a list"""
    df = pd.DataFrame(np.asarray(tree.edge), columns=['parent', 'child'])
    if tree.edge_length is not None:
        df['length'] = tree.edge_length
    df.to_csv(edges_file, index=False)
    with open(tips_file, 'w', encoding='utf-8') as fh:
        for label in tree.tip_label:
            fh.write("%s\n"%label)
