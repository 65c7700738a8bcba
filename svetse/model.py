"""The Markov context trees and dictionary of the chatbot brain."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Optional

from .tokens import make_words


@dataclass(eq=False)
class Node:
    """A node of a context tree; children are kept sorted by symbol."""

    symbol: int = 0
    usage: int = 0
    count: int = 0
    children: list[Node] = field(default_factory=list)


def _locate(node: Node, symbol: int) -> tuple[int, bool]:
    index = bisect_left(node.children, symbol, key=lambda child: child.symbol)
    found = index < len(node.children) and node.children[index].symbol == symbol
    return index, found


def find_symbol(node: Optional[Node], symbol: int) -> Optional[Node]:
    """Return the child of *node* carrying *symbol*, or None."""
    if node is None:
        return None
    index, found = _locate(node, symbol)
    return node.children[index] if found else None


def add_symbol(node: Node, symbol: int) -> Node:
    """Find or create the child for *symbol* and count one more use of it."""
    index, found = _locate(node, symbol)
    if found:
        child = node.children[index]
    else:
        child = Node(symbol=symbol)
        node.children.insert(index, child)
    child.count += 1
    node.usage += 1
    return child


class Model:
    """Forward and backward context trees plus the word dictionary.

    Symbol 0 is the empty word, used both as sentence boundary and as
    the answer for unknown words.
    """

    def __init__(self, order: int = 5) -> None:
        self.order = order
        self.forward = Node()
        self.backward = Node()
        self.dictionary: list[str] = [""]
        self.word_ids: dict[str, int] = {}
        self.context: list[Optional[Node]] = [None] * (order + 2)

    def add_word(self, word: str) -> int:
        """Return the symbol of *word*, adding it to the dictionary if new."""
        symbol = self.word_ids.get(word)
        if symbol is None:
            symbol = len(self.dictionary)
            self.dictionary.append(word)
            self.word_ids[word] = symbol
        return symbol

    def find_word(self, word: str) -> int:
        """Return the symbol of *word*, or 0 when it is unknown."""
        return self.word_ids.get(word, 0)

    def initialize_context(self) -> None:
        """Clear every context slot."""
        self.context = [None] * (self.order + 2)

    def update_model(self, symbol: int) -> None:
        """Advance the context by *symbol*, adding nodes as needed."""
        for i in range(self.order + 1, 0, -1):
            parent = self.context[i - 1]
            if parent is not None:
                self.context[i] = add_symbol(parent, symbol)

    def update_context(self, symbol: int) -> None:
        """Advance the context by *symbol* without changing the trees."""
        for i in range(self.order + 1, 0, -1):
            parent = self.context[i - 1]
            if parent is not None:
                self.context[i] = find_symbol(parent, symbol)

    def learn(self, text: str) -> None:
        """Train both trees on *text*; inputs under three tokens are ignored."""
        tokens = make_words(text)
        if len(tokens) < 3:
            return
        symbols = [self.add_word(token) for token in tokens]

        for root, sequence in ((self.forward, symbols), (self.backward, symbols[::-1])):
            self.initialize_context()
            self.context[0] = root
            for symbol in sequence:
                self.update_model(symbol)
            self.update_model(0)