"""Iterate over every block in a tree.

Each function yields ``(depth, block)`` pairs. The block passed in is yielded first (or last, for
post-order) at depth ``0``, its children at depth ``1``, and so on. If a
:py:class:`~vmfkit.tree.Document` is passed, the traversal starts at its root block::

    >>> from vmfkit import parse
    >>> doc = parse('block1{ inner{} } block2{} block3{}')
    >>> for depth, block in breadth_first(doc):
    ...     print(block.name, '@ level', depth)
    root @ level 0
    block1 @ level 1
    block2 @ level 1
    block3 @ level 1
    inner @ level 2

These only use :py:meth:`Block.iter_children() <vmfkit.tree.Block.iter_children>`, and do not
recurse, so arbitrarily deep trees can be walked. The tree should not be modified during
iteration.
"""
from typing import Deque, Iterator, List, Tuple, TypeVar, Union
from collections import deque

from vmfkit.tree import Block, Document


__all__ = ['breadth_first', 'depth_first', 'depth_first_post']

S = TypeVar('S')


def _start(tree: Union[Block[S], Document[S]]) -> Block[S]:
    if isinstance(tree, Document):
        return tree.root
    if isinstance(tree, Block):
        return tree
    raise TypeError(f'Expected a Block or Document, not {type(tree).__name__}!')


def breadth_first(tree: Union[Block[S], Document[S]]) -> Iterator[Tuple[int, Block[S]]]:
    """Yield every block level by level, shallowest first."""
    todo: Deque[Tuple[int, Block[S]]] = deque([(0, _start(tree))])
    while todo:
        depth, block = todo.popleft()
        yield depth, block
        for child in block.iter_children():
            todo.append((depth + 1, child))


def depth_first(tree: Union[Block[S], Document[S]]) -> Iterator[Tuple[int, Block[S]]]:
    """Yield every block before its children, in the order they would be serialised."""
    stack: List[Tuple[int, Block[S]]] = [(0, _start(tree))]
    while stack:
        depth, block = stack.pop()
        yield depth, block
        # Reverse, so the first child is popped first.
        stack.extend([(depth + 1, child) for child in block.iter_children()][::-1])


def depth_first_post(tree: Union[Block[S], Document[S]]) -> Iterator[Tuple[int, Block[S]]]:
    """Yield every block after all of its children.

    The starting block is therefore the last produced.
    """
    # Each entry holds the iterator of children still to be visited.
    stack: List[Tuple[int, Block[S], Iterator[Block[S]]]] = []
    start = _start(tree)
    stack.append((0, start, start.iter_children()))
    while stack:
        depth, block, children = stack[-1]
        for child in children:
            stack.append((depth + 1, child, child.iter_children()))
            break
        else:
            stack.pop()
            yield depth, block
