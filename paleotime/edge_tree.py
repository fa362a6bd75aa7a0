from collections import defaultdict, deque
import numpy as np
from paleotime import config as ptconf
from paleotime import InvalidTreeError
from .utils import logger


class EdgeTree(object):
    """
    Tree stored as an edge matrix in the layout of the ape 'phylo' class.

    Nodes are numbered from 1: tips are 1..n_tip, the root is n_tip+1
    and the remaining internal nodes run up to n_tip+n_node. Each row of
    the edge matrix is a (parent, child) pair.
    """

    def __init__(self, edge, tip_label, n_node, edge_length=None, node_label=None, root_edge=None):
        """
        Parameters
        ----------

         edge : array-like
            (n_edge, 2) matrix of parent and child node numbers

         tip_label : list
            names of the tips, tip i is tip_label[i-1]

         n_node : int
            number of internal nodes (including the root)

         edge_length : array-like, None
            branch length for each row of the edge matrix

         node_label : list, None
            names of the internal nodes, node n_tip+i is node_label[i-1]

         root_edge : float, None
            length of the branch subtending the root

        """
        self.edge = np.asarray(edge)
        self.tip_label = list(tip_label)
        self.n_node = n_node
        self.edge_length = None if edge_length is None else np.asarray(edge_length, dtype=float)
        self.node_label = None if node_label is None else list(node_label)
        self.root_edge = root_edge

    def __repr__(self):
        return "EdgeTree(n_tip=%d, n_node=%s, n_edge=%d)"%(self.n_tip, self.n_node, self.n_edge)

    @property
    def n_tip(self):
        return len(self.tip_label)

    @property
    def n_edge(self):
        return self.edge.shape[0] if self.edge.ndim else 0

    @property
    def root(self):
        """number of the root node as required by the edge-matrix convention"""
        return self.n_tip + 1

    @classmethod
    def from_phylo(cls, tree):
        """build an EdgeTree from a Bio.Phylo tree"""
        from .tree_io import phylo_to_edge_tree
        return phylo_to_edge_tree(tree)

    def to_phylo(self):
        """convert to a Bio.Phylo tree"""
        from .tree_io import edge_tree_to_phylo
        return edge_tree_to_phylo(self)

    def is_valid(self):
        return len(edge_matrix_problems(self))==0


def _format_nodes(nodes):
    return ", ".join(str(int(n)) for n in nodes)


def edge_matrix_problems(tree):
    """
    Check the edge matrix of a tree for internal consistency.

    Parameters
    ----------

     tree : EdgeTree
        tree to check

    Returns
    -------

     problems : list
        description of every inconsistency found, empty if the tree is valid.
        Checks that depend on a readable, integer edge matrix are skipped
        when the matrix itself is malformed.

    """
    if not isinstance(tree, EdgeTree):
        raise TypeError("tree must be an EdgeTree, got %s"%type(tree).__name__)

    edge = np.asarray(tree.edge)
    if edge.ndim!=2 or edge.shape[1]!=2:
        return ["edge must be a matrix with two columns, got shape %s"%(edge.shape,)]
    if edge.shape[0]==0:
        return ["edge matrix has no rows"]
    try:
        values = edge.astype(float)
    except (TypeError, ValueError):
        return ["edge matrix must contain numeric node numbers"]
    if not np.all(np.isfinite(values)):
        return ["edge matrix contains missing or infinite node numbers"]
    if np.any(values!=np.round(values)):
        return ["edge matrix contains non-integer node numbers"]
    edge = values.astype(int)

    problems = []
    n_tip = tree.n_tip
    if n_tip==0:
        problems.append("tree has no tip labels")
    if np.any(edge<1):
        problems.append("node numbers must be positive, found %s"%_format_nodes(np.unique(edge[edge<1])))

    max_node = edge.max()
    try:
        n_node_ok = tree.n_node is not None and float(tree.n_node)==max_node-n_tip
    except (TypeError, ValueError):
        n_node_ok = False
    if not n_node_ok:
        problems.append("n_node (%s) is not equal to the highest node number minus the number of tips (%d)"
                        %(tree.n_node, max_node-n_tip))

    used = np.unique(edge)
    if not np.array_equal(used, np.arange(1, max_node+1)):
        missing = np.setdiff1d(np.arange(1, max_node+1), used)
        problems.append("tip and node numbers must be sequential from 1 to n_tip+n_node, missing %s"
                        %_format_nodes(missing))

    parents, children = edge[:,0], edge[:,1]
    roots = np.setdiff1d(parents, children)
    if len(roots)!=1:
        problems.append("tree has %d root nodes (%s), expected exactly one"%(len(roots), _format_nodes(roots)))
    elif roots[0]!=n_tip+1:
        problems.append("root is node %d, it should be the first internal node n_tip+1=%d"%(roots[0], n_tip+1))

    nodes, counts = np.unique(children, return_counts=True)
    if np.any(counts>1):
        problems.append("nodes listed as a descendant more than once: %s"%_format_nodes(nodes[counts>1]))

    tip_parents = np.unique(parents[parents<=n_tip])
    if len(tip_parents):
        problems.append("tips listed as ancestors: %s"%_format_nodes(tip_parents))

    childless = np.setdiff1d(np.arange(n_tip+1, max_node+1), parents)
    if len(childless):
        problems.append("internal nodes without descendants: %s"%_format_nodes(childless))

    if len(roots)==1:
        offspring = defaultdict(list)
        for p, c in edge:
            offspring[p].append(c)
        reached = set([roots[0]])
        queue = deque([roots[0]])
        while queue:
            node = queue.popleft()
            for c in offspring[node]:
                if c not in reached:
                    reached.add(c)
                    queue.append(c)
        detached = sorted(set(used.tolist()).difference(reached))
        if detached:
            problems.append("nodes not connected to the root: %s"%_format_nodes(detached))

    if tree.edge_length is not None and len(tree.edge_length)!=edge.shape[0]:
        problems.append("edge_length has %d entries for %d edges"%(len(tree.edge_length), edge.shape[0]))
    if tree.node_label is not None and n_node_ok and len(tree.node_label)!=max_node-n_tip:
        problems.append("node_label has %d entries for %d internal nodes"%(len(tree.node_label), max_node-n_tip))

    return problems


def validate_edge_matrix(tree):
    """
    Test the edge matrix of a tree and raise if it is inconsistent.

    Returns
    -------

     valid : bool
        True, an InvalidTreeError listing all problems is raised otherwise

    """
    problems = edge_matrix_problems(tree)
    if problems:
        raise InvalidTreeError("Edge matrix has inconsistencies:\n\t" + "\n\t".join(problems))
    return True


def clean_tree(tree, verbose=ptconf.VERBOSE):
    """
    Repair a tree whose edge matrix was modified by hand.

    The tree is rebuilt via a Bio.Phylo tree: node numbers are coerced to
    integers, tips and internal nodes are renumbered in preorder with the
    root as n_tip+1, the edges are ordered cladewise and n_node is
    recomputed. Internal nodes left without descendants become tips.
    The input tree is not modified.

    Parameters
    ----------

     tree : EdgeTree
        tree to clean

     verbose : int
        verbosity of the report on the changes

    Returns
    -------

     cleaned : EdgeTree
        a tree that passes validate_edge_matrix

    """
    from .tree_io import edge_tree_to_phylo, phylo_to_edge_tree
    if not isinstance(tree, EdgeTree):
        raise TypeError("tree must be an EdgeTree, got %s"%type(tree).__name__)

    problems = edge_matrix_problems(tree)
    if problems:
        logger("clean_tree: repairing edge matrix with %d problem(s)"%len(problems), 1, verbose=verbose)
        for p in problems:
            logger(p, 3, verbose=verbose)

    cleaned = phylo_to_edge_tree(edge_tree_to_phylo(tree))

    dropped = sorted(set(tree.tip_label).difference(cleaned.tip_label))
    if dropped:
        logger("clean_tree: labels that are no longer tips: %s"%", ".join(map(str, dropped)),
               1, verbose=verbose, warn=True)
    added = [t for t in cleaned.tip_label if t not in tree.tip_label]
    if added:
        logger("clean_tree: internal nodes without descendants became tips: %s"%", ".join(added),
               1, verbose=verbose, warn=True)

    validate_edge_matrix(cleaned)
    logger("clean_tree: %d tips, %d internal nodes, %d edges"%(cleaned.n_tip, cleaned.n_node, cleaned.n_edge),
           2, verbose=verbose)
    return cleaned
