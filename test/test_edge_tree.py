import numpy as np
import pytest


def small_tree(edge=None, n_node=2, **kwargs):
    from paleotime import EdgeTree
    if edge is None:
        edge = [[4,5],[5,1],[5,2],[4,3]]
    return EdgeTree(edge, ['A','B','C'], n_node, **kwargs)


# Tests
def test_import_short():
    print("testing short imports")
    from paleotime import EdgeTree
    from paleotime import validate_edge_matrix
    from paleotime import clean_tree
    from paleotime import create_mrbayes_tip_calibrations


def test_valid_tree():
    from paleotime import validate_edge_matrix, edge_matrix_problems
    tree = small_tree(edge_length=[0.5, 1, 2, 3])
    assert edge_matrix_problems(tree) == []
    assert validate_edge_matrix(tree)
    assert tree.is_valid()
    assert tree.n_tip == 3 and tree.root == 4 and tree.n_edge == 4


def test_wrong_node_count():
    from paleotime import validate_edge_matrix, InvalidTreeError
    from paleotime.edge_tree import edge_matrix_problems
    tree = small_tree(n_node=3)
    problems = edge_matrix_problems(tree)
    assert len(problems) == 1
    assert problems[0].startswith("n_node (3)")
    with pytest.raises(InvalidTreeError, match="n_node"):
        validate_edge_matrix(tree)


def test_root_not_first_internal_node():
    from paleotime import edge_matrix_problems
    tree = small_tree(edge=[[5,4],[4,1],[4,2],[5,3]])
    problems = edge_matrix_problems(tree)
    assert any("root is node 5" in p for p in problems)


def test_tip_listed_as_ancestor():
    from paleotime import edge_matrix_problems
    tree = small_tree(edge=[[4,1],[1,2],[4,3]], n_node=1)
    problems = edge_matrix_problems(tree)
    assert "tips listed as ancestors: 1" in problems


def test_descendant_listed_twice():
    from paleotime import edge_matrix_problems
    tree = small_tree(edge=[[4,5],[5,1],[5,2],[4,2],[4,3]])
    problems = edge_matrix_problems(tree)
    assert "nodes listed as a descendant more than once: 2" in problems


def test_non_sequential_numbers():
    from paleotime import edge_matrix_problems
    tree = small_tree(edge=[[4,6],[6,1],[6,2],[4,3]])
    problems = edge_matrix_problems(tree)
    assert any("sequential" in p and "missing 5" in p for p in problems)
    assert "internal nodes without descendants: 5" in problems


def test_several_roots():
    from paleotime import edge_matrix_problems
    tree = small_tree(edge=[[4,1],[4,2],[5,3]])
    problems = edge_matrix_problems(tree)
    assert "tree has 2 root nodes (4, 5), expected exactly one" in problems


def test_detached_cycle():
    from paleotime import edge_matrix_problems
    tree = small_tree(edge=[[4,1],[4,2],[5,6],[6,5],[5,3]], n_node=3)
    problems = edge_matrix_problems(tree)
    assert "nodes not connected to the root: 3, 5, 6" in problems


def test_malformed_matrix():
    from paleotime import EdgeTree, edge_matrix_problems
    assert "two columns" in edge_matrix_problems(EdgeTree([1, 2, 3], ['A'], 1))[0]
    assert "missing" in edge_matrix_problems(small_tree(edge=[[4,5],[5,1],[5,np.nan],[4,3]]))[0]
    assert "non-integer" in edge_matrix_problems(small_tree(edge=[[4,5],[5,1.5],[5,2],[4,3]]))[0]
    assert edge_matrix_problems(EdgeTree(np.zeros((0,2)), ['A'], 1)) == ["edge matrix has no rows"]


def test_label_and_length_counts():
    from paleotime import edge_matrix_problems
    problems = edge_matrix_problems(small_tree(edge_length=[1, 2], node_label=['root']))
    assert "edge_length has 2 entries for 4 edges" in problems
    assert "node_label has 1 entries for 2 internal nodes" in problems


def test_wrong_type():
    from paleotime import validate_edge_matrix, clean_tree
    with pytest.raises(TypeError):
        validate_edge_matrix("((A,B),C);")
    with pytest.raises(TypeError):
        clean_tree({'edge':[[4,5]]})


def test_clean_renumbers_root():
    from paleotime import clean_tree, validate_edge_matrix
    tree = small_tree(edge=[[5,4],[4,1],[4,2],[5,3]], edge_length=[0.5, 1, 2, 3])
    cleaned = clean_tree(tree, verbose=0)
    assert np.array_equal(cleaned.edge, [[4,5],[5,1],[5,2],[4,3]])
    assert np.allclose(cleaned.edge_length, [0.5, 1, 2, 3])
    assert cleaned.tip_label == ['A','B','C']
    assert cleaned.n_node == 2
    assert validate_edge_matrix(cleaned)
    # the input is left alone
    assert np.array_equal(tree.edge, [[5,4],[4,1],[4,2],[5,3]])


def test_clean_reorders_tips():
    from paleotime import clean_tree
    tree = small_tree(edge=[[4,3],[4,5],[5,1],[5,2]])
    cleaned = clean_tree(tree, verbose=0)
    assert cleaned.tip_label == ['C','A','B']
    assert np.array_equal(cleaned.edge, [[4,1],[4,5],[5,2],[5,3]])
    assert cleaned.edge_length is None


def test_clean_fixes_node_count_and_float_edges():
    from paleotime import clean_tree
    tree = small_tree(edge=np.array([[4,5],[5,1],[5,2],[4,3]], dtype=float), n_node=7)
    cleaned = clean_tree(tree, verbose=0)
    assert cleaned.n_node == 2
    assert cleaned.edge.dtype.kind == 'i'


def test_clean_childless_node_becomes_tip(capsys):
    from paleotime import EdgeTree, clean_tree
    tree = EdgeTree([[3,1],[3,2],[3,4]], ['A','B'], 2)
    cleaned = clean_tree(tree, verbose=2)
    assert cleaned.tip_label == ['A', 'B', 'node4']
    assert cleaned.n_node == 1
    assert np.array_equal(cleaned.edge, [[4,1],[4,2],[4,3]])
    assert "became tips: node4" in capsys.readouterr().out


def test_clean_keeps_node_labels():
    from paleotime import clean_tree
    tree = small_tree(edge=[[5,4],[4,1],[4,2],[5,3]], node_label=['AB', 'root'], root_edge=0.1)
    cleaned = clean_tree(tree, verbose=0)
    assert cleaned.node_label == ['root', 'AB']
    assert cleaned.root_edge == 0.1


def test_clean_unrepairable():
    from paleotime import clean_tree, InvalidTreeError
    with pytest.raises(InvalidTreeError, match="more than one parent"):
        clean_tree(small_tree(edge=[[4,5],[5,1],[5,2],[4,2],[4,3]]), verbose=0)
    with pytest.raises(InvalidTreeError, match="exactly one root"):
        clean_tree(small_tree(edge=[[4,1],[4,2],[5,3]]), verbose=0)
    with pytest.raises(InvalidTreeError, match="not connected to the root"):
        clean_tree(small_tree(edge=[[4,1],[4,2],[5,6],[6,5],[5,3]], n_node=3), verbose=0)
