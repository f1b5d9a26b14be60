"""Syntax tree for the infix expression syntax."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    text: str
    pos: int


@dataclass(frozen=True)
class Literal:
    """A string, character or other literal kind with no numeric meaning."""

    kind: str
    text: str
    pos: int


@dataclass(frozen=True)
class Name:
    value: str
    pos: int


@dataclass(frozen=True)
class Paren:
    inner: "Expr"


@dataclass(frozen=True)
class Prefix:
    op: str
    right: "Expr"
    pos: int


@dataclass(frozen=True)
class Infix:
    op: str
    left: "Expr"
    right: "Expr"
    pos: int


@dataclass(frozen=True)
class Call:
    func: "Expr"
    args: tuple["Expr", ...]
    pos: int


Expr = Union[Number, Literal, Name, Paren, Prefix, Infix, Call]
