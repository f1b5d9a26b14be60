"""Tree form rebuilt from the linear instruction sequence, for rewriting."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import InternalInvariantError, TrailingStackError
from .expression import CompiledExpression, ExpressionBuilder
from .operators import Operator


@dataclass
class Node:
    """Arena entry; ``payload`` is the name of a LOAD or the value of a CONST."""

    op: Operator
    payload: object = None
    children: list[int] = field(default_factory=list)
    parent: int | None = None


class Tree:
    """Arena of nodes addressed by index.

    Rewrites move indices between child slots; nodes spliced out stay in the
    arena detached and are never emitted. A trailing-stack sequence yields
    several roots, kept in evaluation order.
    """

    def __init__(self) -> None:
        self.nodes: list[Node] = []
        self.roots: list[int] = []

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    def add(self, op: Operator, payload: object = None, children: list[int] | None = None) -> int:
        index = len(self.nodes)
        kids = list(children or ())
        self.nodes.append(Node(op=op, payload=payload, children=kids))
        for child in kids:
            self.nodes[child].parent = index
        return index

    def set_children(self, index: int, children: list[int]) -> None:
        node = self.nodes[index]
        for old in node.children:
            if old not in children:
                self.nodes[old].parent = None
        node.children = list(children)
        for child in children:
            self.nodes[child].parent = index

    def replace(self, index: int, replacement: int) -> None:
        """Put ``replacement`` (usually a descendant) in the slot ``index`` occupies."""
        parent = self.nodes[index].parent
        if parent is None:
            self.roots[self.roots.index(index)] = replacement
        else:
            siblings = self.nodes[parent].children
            siblings[siblings.index(index)] = replacement
        self.nodes[replacement].parent = parent
        self.nodes[index].parent = None

    def linearize(self, *, trailing_error: TrailingStackError | None = None) -> CompiledExpression:
        out = ExpressionBuilder()
        for root in self.roots:
            self._emit(root, out)
        return out.build(trailing_error=trailing_error)

    def _emit(self, index: int, out: ExpressionBuilder) -> None:
        node = self.nodes[index]
        if node.op is Operator.LOAD:
            out.load(node.payload)  # type: ignore[arg-type]
        elif node.op is Operator.CONST:
            out.const(node.payload)  # type: ignore[arg-type]
        else:
            for child in node.children:
                self._emit(child, out)
            out.emit(node.op)


class _Builder:
    """Consumes a linear sequence from its end, one subtree at a time."""

    def __init__(self, expr: CompiledExpression, tree: Tree) -> None:
        self.expr = expr
        self.tree = tree
        self.i = len(expr.ops)
        self.n = len(expr.names)
        self.c = len(expr.consts)

    def skip_nops(self) -> None:
        while self.i > 0 and self.expr.ops[self.i - 1] is Operator.NOP:
            self.i -= 1

    def subtree(self) -> int:
        self.skip_nops()
        if self.i == 0:
            raise InternalInvariantError("instruction sequence is missing operands")
        self.i -= 1
        op = self.expr.ops[self.i]

        if op is Operator.LOAD:
            self.n -= 1
            return self.tree.add(op, self.expr.names[self.n])
        if op is Operator.CONST:
            self.c -= 1
            return self.tree.add(op, self.expr.consts[self.c])

        # Operands were emitted left to right, so they come back right to left.
        children = [self.subtree() for _ in range(op.arity)]
        children.reverse()
        return self.tree.add(op, children=children)


def build_tree(expr: CompiledExpression) -> Tree:
    """Rebuild the tree (a forest, for trailing-stack sequences) behind ``expr``.

    Assumes ``expr`` came from a front end or from ``linearize``; it is not a
    general well-formedness check.
    """
    tree = Tree()
    builder = _Builder(expr, tree)
    builder.skip_nops()
    while builder.i > 0:
        tree.roots.append(builder.subtree())
        builder.skip_nops()
    tree.roots.reverse()
    return tree
