from __future__ import annotations

import ast
import textwrap

import pytest

from codemend.syntax_tree import SyntaxTree


def _tree(src: str) -> SyntaxTree:
    return SyntaxTree.parse(textwrap.dedent(src))


def test_parent_lookup_and_enclosing_if():
    tree = _tree(
        """
        def run():
            if VERSION < 3:
                return
        """
    )
    name = next(n for n in tree.walk() if isinstance(n, ast.Name) and n.id == "VERSION")
    compare = tree.parent_of(name)
    assert isinstance(compare, ast.Compare)
    if_node = tree.find_parent_of_type(name, ast.If)
    assert isinstance(if_node, ast.If) and if_node.test is compare
    assert isinstance(tree.find_parent_of_type(name, ast.FunctionDef), ast.FunctionDef)
    assert tree.find_parent_of_type(name, ast.ClassDef) is None
    assert tree.parent_of(tree.module) is None


def test_nodes_have_stable_indices():
    tree = _tree("a = 1\nb = 2\n")
    first, second = tree.module.body
    assert tree.index_of(tree.module) == 0
    assert tree.nodes[tree.index_of(first)] is first
    assert tree.index_of(first) != tree.index_of(second)
    assert tree.index_of(ast.Pass()) is None


def test_walk_is_pre_order_in_source_order():
    tree = _tree("a = 1\nb = 2\n")
    names = [n.id for n in tree.walk() if isinstance(n, ast.Name)]
    assert names == ["a", "b"]


def test_remove_and_insert_are_deferred_until_applied():
    tree = _tree(
        """
        if flag:
            x = 1
            y = 2
        z = 3
        """
    )
    if_node = tree.module.body[0]
    tree.insert_nodes_before(if_node.body, if_node)
    tree.remove_node(if_node)
    assert tree.module.body[0] is if_node

    assert tree.apply_pending_edits() is True
    assert ast.unparse(tree.module) == "x = 1\ny = 2\nz = 3"
    assert tree.apply_pending_edits() is False


def test_hoisted_statements_keep_their_own_removals():
    tree = _tree(
        """
        if outer:
            a = 1
            if inner:
                b = 2
        """
    )
    outer = tree.module.body[0]
    inner = outer.body[1]
    tree.insert_nodes_before(outer.body, outer)
    tree.remove_node(outer)
    tree.remove_node(inner)
    tree.apply_pending_edits()
    assert ast.unparse(tree.module) == "a = 1"


def test_emptied_blocks_get_pass():
    tree = _tree(
        """
        def run():
            return
        """
    )
    func = tree.module.body[0]
    tree.remove_node(func.body[0])
    tree.apply_pending_edits()
    assert tree.to_source() == "def run():\n    pass\n"


def test_only_statements_of_this_tree_can_be_edited():
    tree = _tree("x = a + b\n")
    binop = tree.module.body[0].value
    with pytest.raises(TypeError):
        tree.remove_node(binop)
    with pytest.raises(ValueError):
        tree.remove_node(ast.parse("y = 1").body[0])


def test_try_without_handlers_keeps_a_finally_block():
    tree = _tree(
        """
        try:
            work()
        finally:
            cleanup()
        """
    )
    try_node = tree.module.body[0]
    tree.remove_node(try_node.finalbody[0])
    tree.apply_pending_edits()
    out = tree.to_source()
    assert out == "try:\n    work()\nfinally:\n    pass\n"
    ast.parse(out)
