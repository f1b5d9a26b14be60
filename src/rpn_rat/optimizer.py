"""Tree rewrites over compiled expressions: constant folding and algebraic simplification."""

from __future__ import annotations

from .errors import InternalInvariantError, RPNError
from .evaluator import apply_operator
from .expression import CompiledExpression
from .operators import LEAVES, Operator
from .tree import Tree, build_tree


def _is_one(tree: Tree, index: int) -> bool:
    node = tree[index]
    return node.op is Operator.CONST and type(node.payload) is int and node.payload == 1


def fold_constants(tree: Tree, index: int) -> None:
    """Replace operator nodes whose operands are all constants by their value.

    Best-effort: a node whose evaluation fails (division by zero, type
    mismatch, ...) is left as is so the failure surfaces at evaluation time.
    """
    node = tree[index]
    for child in node.children:
        fold_constants(tree, child)

    if node.op in LEAVES or not node.children:
        return
    if any(tree[child].op is not Operator.CONST for child in node.children):
        return

    try:
        value = apply_operator(node.op, [tree[child].payload for child in node.children])
    except InternalInvariantError:
        raise
    except (RPNError, ArithmeticError, MemoryError):
        return

    tree.set_children(index, [])
    node.op = Operator.CONST
    node.payload = value


def simplify(tree: Tree, index: int) -> None:
    """Apply at most one identity rewrite per node, children first.

    A rewrite that exposes another identity at the same node is not revisited
    in this pass; running the optimizer again picks it up.
    """
    node = tree[index]
    for slot in range(len(node.children)):
        simplify(tree, node.children[slot])

    op = node.op
    if op in {Operator.NEG, Operator.INV}:
        (inner,) = node.children
        inner_node = tree[inner]
        if inner_node.op is op:
            tree.replace(index, inner_node.children[0])
        elif op is Operator.NEG and inner_node.op is Operator.SUB:
            # -(a - b) == b - a
            inner_node.children.reverse()
            tree.replace(index, inner)
        return

    if op not in {Operator.MUL, Operator.QUO}:
        return

    left, right = node.children
    left_node, right_node = tree[left], tree[right]

    if left_node.op is Operator.NEG and right_node.op is Operator.NEG:
        tree.set_children(index, [left_node.children[0], right_node.children[0]])
        return

    if op is Operator.MUL:
        if right_node.op is Operator.INV:
            node.op = Operator.QUO
            tree.set_children(index, [left, right_node.children[0]])
        elif left_node.op is Operator.INV:
            node.op = Operator.QUO
            tree.set_children(index, [right, left_node.children[0]])
        elif _is_one(tree, left):
            tree.replace(index, right)
        elif _is_one(tree, right):
            tree.replace(index, left)
        return

    if left_node.op is Operator.INV and right_node.op is Operator.INV:
        # (1/a) / (1/b) == b / a
        tree.set_children(index, [right_node.children[0], left_node.children[0]])
    elif right_node.op is Operator.INV:
        node.op = Operator.MUL
        tree.set_children(index, [left, right_node.children[0]])
    elif _is_one(tree, right):
        tree.replace(index, left)
    elif _is_one(tree, left):
        node.op = Operator.INV
        tree.set_children(index, [right])


def optimize(expr: CompiledExpression) -> CompiledExpression:
    """Fold constants, simplify, and re-linearize into a new expression.

    Never fails on front-end output; the input expression is left untouched.
    """
    tree = build_tree(expr)
    for i in range(len(tree.roots)):
        fold_constants(tree, tree.roots[i])
    for i in range(len(tree.roots)):
        simplify(tree, tree.roots[i])
    return tree.linearize(trailing_error=expr.trailing_error)
