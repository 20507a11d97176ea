"""
Nested-block outline of a token stream, for display only.

Nodes live in a flat list and point at each other by index. Unmatched
closing delimiters are ignored rather than reported.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from tokenizer import TokenKind

TREE_CONTROL_KEYWORDS = frozenset(['if', 'else', 'for', 'while', 'switch', 'case', 'default'])
OPEN_DELIMITERS = {'{': '}', '(': ')', '[': ']'}
CLOSE_DELIMITERS = frozenset(OPEN_DELIMITERS.values())

ROOT = 0


@dataclass
class Node:
    kind: str  # 'root', 'block' or 'statement'
    label: str
    delimiter: Optional[str] = None
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


@dataclass
class BlockTree:
    nodes: List[Node] = field(default_factory=lambda: [Node('root', 'root')])

    def add(self, node):
        index = len(self.nodes)
        self.nodes.append(node)
        if node.parent is not None:
            self.nodes[node.parent].children.append(index)
        return index

    def children(self, index=ROOT):
        return [self.nodes[i] for i in self.nodes[index].children]

    def __len__(self):
        # root excluded
        return len(self.nodes) - 1


def _opens_block(tokens, start):
    """True when the next '{' after a keyword comes before any ( or [."""
    j = start
    while j < len(tokens) and tokens[j].kind is TokenKind.PUNCTUATION and tokens[j].value != '{':
        if tokens[j].value in ('(', '['):
            return False
        j += 1
    return j < len(tokens) and tokens[j].value == '{'


def build_tree(tokens):
    tree = BlockTree()
    stack = [ROOT]
    pending_label = None

    for i, token in enumerate(tokens):
        current = stack[-1]
        is_control = token.kind is TokenKind.KEYWORD and token.value in TREE_CONTROL_KEYWORDS

        if is_control:
            pending_label = token.value

        if token.kind is TokenKind.PUNCTUATION and token.value in OPEN_DELIMITERS:
            index = tree.add(Node('block', pending_label or 'block', token.value, parent=current))
            stack.append(index)
            pending_label = None
        elif token.kind is TokenKind.PUNCTUATION and token.value in CLOSE_DELIMITERS:
            if len(stack) > 1:
                stack.pop()
        elif is_control and not _opens_block(tokens, i + 1):
            tree.add(Node('statement', token.value, parent=current))

    return tree


def render(tree, index=ROOT, indent=0):
    """Indented text outline of the tree."""
    if not tree.nodes[index].children:
        return '(empty)' if index == ROOT else ''

    lines = []
    pad = '  ' * indent
    for child_index in tree.nodes[index].children:
        node = tree.nodes[child_index]
        if node.kind == 'block':
            lines.append(f"{pad}{node.label} {node.delimiter}")
            if node.children:
                lines.append(render(tree, child_index, indent + 1))
            lines.append(f"{pad}{OPEN_DELIMITERS[node.delimiter]}")
        else:
            lines.append(f"{pad}{node.label}")
    return '\n'.join(lines)
