"""Main Aurynx template parser."""

import re
from typing import List, Optional, Tuple, Type, Union

from aurynx.compiler.ast_nodes import (
    BooleanAttr,
    Branch,
    Comment,
    Component,
    Conditional,
    Echo,
    Existence,
    HostCode,
    Loop,
    Node,
    SlotSet,
    Text,
)
from aurynx.compiler.attributes import parse_attributes
from aurynx.compiler.preprocessor import IDENTIFIER

_TAG_NAME = r"[a-zA-Z0-9][a-zA-Z0-9.-]*"

_TOKEN_PATTERN = re.compile(
    rf"""
    (?P<comment>\{{\{{--(?P<comment_body>.*?)--\}}\}})
  | (?P<raw_echo>\{{\{{\{{(?P<raw_expression>[^\n]*?)\}}\}}\}})
  | (?P<echo>\{{\{{(?P<expression>[^\n]*?)\}}\}})
  | (?P<host><\?(?P<host_kind>php(?=\s)|=)(?P<host_code>.*?)\?>)
  | (?P<directive>@(?P<directive_name>if|each|has|checked|selected|disabled|(?i:elseif))\s*\()
  | (?P<else>@(?i:else)(?![a-zA-Z0-9_]))
  | (?P<closer>@(?P<closer_name>(?i:endif|endeach|endhas))(?![a-zA-Z0-9_]))
  | (?P<slot_open><x-slot:(?P<slot_name>[a-zA-Z0-9_-]+)\s*>)
  | (?P<slot_close></x-slot\s*>)
  | (?P<tag_open><x-(?P<tag>{_TAG_NAME})(?=[\s/>])
        (?P<attributes>(?:"[^"]*"|'[^']*'|[^"'<>/]|/(?!>))*)
        (?P<self_closing>/?)>)
  | (?P<tag_close></x-(?P<close_tag>{_TAG_NAME})\s*>)
    """,
    re.VERBOSE | re.DOTALL,
)

_EACH_PATTERN = re.compile(
    rf"""^\s*(?P<collection>.+?)\s+(?i:as)\s+
    (?:\$(?P<key>{IDENTIFIER})\s*=>\s*)?
    \$(?P<item>{IDENTIFIER})\s*$""",
    re.VERBOSE | re.DOTALL,
)


class _ClosedSlot:
    """A finished <x-slot:name> block waiting for its component to close."""

    def __init__(self, name: str, opening: str, body: Tuple[Node, ...], closing: str):
        self.name = name
        self.opening = opening
        self.body = body
        self.closing = closing

    def as_literal(self) -> List[Node]:
        return [Text(self.opening), *self.body, Text(self.closing)]


Child = Union[Node, _ClosedSlot]


def _append(children: List[Child], node: Child) -> None:
    """Append a child, merging adjacent text and dropping empty text."""
    if isinstance(node, Text):
        if not node.text:
            return
        if children and isinstance(children[-1], Text):
            children[-1] = Text(children[-1].text + node.text)
            return
    children.append(node)


def _nodes(children: List[Child]) -> Tuple[Node, ...]:
    merged: List[Child] = []
    for child in children:
        _append(merged, child)
    return tuple(c for c in merged if isinstance(c, Node))


class _Frame:
    """An open construct on the parser stack."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.children: List[Child] = []

    def close(self) -> Child:
        raise NotImplementedError

    def as_literal(self) -> List[Child]:
        """Source text of an unterminated construct, with its parsed children."""
        return [Text(self.raw), *self.children]


class _RootFrame(_Frame):
    pass


class _IfFrame(_Frame):
    def __init__(self, raw: str, condition: str) -> None:
        super().__init__(raw)
        self.condition: Optional[str] = condition
        self.finished: List[Tuple[Optional[str], str, List[Child]]] = []
        self.has_else = False

    def start_branch(self, raw: str, condition: Optional[str]) -> None:
        self.finished.append((self.condition, self.raw, self.children))
        self.raw = raw
        self.condition = condition
        self.children = []
        if condition is None:
            self.has_else = True

    def _arms(self) -> List[Tuple[Optional[str], str, List[Child]]]:
        return self.finished + [(self.condition, self.raw, self.children)]

    def close(self) -> Conditional:
        return Conditional(
            tuple(Branch(condition, _nodes(body)) for condition, _, body in self._arms())
        )

    def as_literal(self) -> List[Child]:
        literal: List[Child] = []
        for _, raw, body in self._arms():
            literal.append(Text(raw))
            literal.extend(body)
        return literal


class _EachFrame(_Frame):
    def __init__(self, raw: str, collection: str, item: str, key: Optional[str]) -> None:
        super().__init__(raw)
        self.collection = collection
        self.item = item
        self.key = key

    def close(self) -> Loop:
        return Loop(
            collection=self.collection,
            item=self.item,
            key=self.key,
            body=_nodes(self.children),
        )


class _HasFrame(_Frame):
    def __init__(self, raw: str, expression: str) -> None:
        super().__init__(raw)
        self.expression = expression

    def close(self) -> Existence:
        return Existence(self.expression, _nodes(self.children))


class _ComponentFrame(_Frame):
    def __init__(self, raw: str, tag: str, attributes: str) -> None:
        super().__init__(raw)
        self.tag = tag
        self.attributes = parse_attributes(attributes.strip())

    def close(self) -> Component:
        default: List[Child] = []
        named = {}
        for child in self.children:
            if isinstance(child, _ClosedSlot):
                # Ordered-map overwrite: the last body wins, first position is kept.
                named[child.name] = child.body
            else:
                _append(default, child)
        return Component(self.tag, self.attributes, SlotSet(_nodes(default), named))

    def as_literal(self) -> List[Child]:
        literal: List[Child] = [Text(self.raw)]
        for child in self.children:
            if isinstance(child, _ClosedSlot):
                literal.extend(child.as_literal())
            else:
                literal.append(child)
        return literal


class _SlotFrame(_Frame):
    def __init__(self, raw: str, name: str) -> None:
        super().__init__(raw)
        self.name = name
        self.closing = ""

    def close(self) -> _ClosedSlot:
        return _ClosedSlot(self.name, self.raw, _nodes(self.children), self.closing)


_CLOSERS = {
    "endif": _IfFrame,
    "endeach": _EachFrame,
    "endhas": _HasFrame,
}


def find_closing_paren(source: str, open_index: int) -> Optional[int]:
    """Return the index of the parenthesis balancing ``source[open_index]``.

    Parentheses inside quoted strings are ignored. Returns None when the
    group is never closed.
    """
    depth = 0
    quote = None
    index = open_index
    while index < len(source):
        char = source[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


class AurynxParser:
    """Scan template text into a node tree.

    Open constructs are tracked on a stack and matched by kind (and by tag
    name for components), so a component nested inside a slot of the same
    tag resolves correctly. Anything that cannot be matched becomes literal
    text; parsing never fails.
    """

    def parse(self, template: str) -> Tuple[Node, ...]:
        self._stack: List[_Frame] = [_RootFrame("")]
        position = 0

        while True:
            match = _TOKEN_PATTERN.search(template, position)
            if match is None:
                self._text(template[position:])
                break

            self._text(template[position : match.start()])
            position = self._handle(match, template)

        while len(self._stack) > 1:
            self._abandon()

        return _nodes(self._stack[0].children)

    @property
    def _top(self) -> _Frame:
        return self._stack[-1]

    def _text(self, text: str) -> None:
        _append(self._top.children, Text(text))

    def _add(self, node: Child) -> None:
        _append(self._top.children, node)

    def _abandon(self) -> None:
        """Pop an unterminated frame and splice it into its parent as literal text."""
        frame = self._stack.pop()
        for child in frame.as_literal():
            _append(self._top.children, child)

    def _close(self, index: int) -> None:
        while len(self._stack) - 1 > index:
            self._abandon()
        frame = self._stack.pop()
        self._add(frame.close())

    def _handle(self, match: re.Match, template: str) -> int:
        raw = match.group(0)
        kind = match.lastgroup

        if kind == "comment":
            self._add(Comment(match.group("comment_body").strip()))
        elif kind in ("raw_echo", "echo"):
            escaped = kind == "echo"
            expression = match.group("expression" if escaped else "raw_expression").strip()
            if expression:
                self._add(Echo(expression, escaped=escaped))
            else:
                self._text(raw)
        elif kind == "host":
            self._add(
                HostCode(match.group("host_code").strip(), echo=match.group("host_kind") == "=")
            )
        elif kind == "directive":
            return self._handle_directive(match, template)
        elif kind == "else":
            if isinstance(self._top, _IfFrame) and not self._top.has_else:
                self._top.start_branch(raw, None)
            else:
                self._text(raw)
        elif kind == "closer":
            frame_type: Type[_Frame] = _CLOSERS[match.group("closer_name").lower()]
            if type(self._top) is frame_type:
                self._close(len(self._stack) - 1)
            else:
                self._text(raw)
        elif kind == "slot_open":
            if isinstance(self._top, _ComponentFrame):
                self._stack.append(_SlotFrame(raw, match.group("slot_name")))
            else:
                self._text(raw)
        elif kind == "slot_close":
            if isinstance(self._top, _SlotFrame):
                self._top.closing = raw
                self._close(len(self._stack) - 1)
            else:
                self._text(raw)
        elif kind == "tag_open":
            self._handle_tag_open(match)
        elif kind == "tag_close":
            self._handle_tag_close(match)

        return match.end()

    def _handle_directive(self, match: re.Match, template: str) -> int:
        open_index = match.end() - 1
        close_index = find_closing_paren(template, open_index)
        if close_index is None:
            self._text(match.group(0))
            return match.end()

        raw = template[match.start() : close_index + 1]
        arguments = template[open_index + 1 : close_index].strip()
        name = match.group("directive_name").lower()

        if not arguments:
            self._text(raw)
        elif name == "elseif":
            if isinstance(self._top, _IfFrame) and not self._top.has_else:
                self._top.start_branch(raw, arguments)
            else:
                self._text(raw)
        elif name == "if":
            self._stack.append(_IfFrame(raw, arguments))
        elif name == "each":
            loop = _EACH_PATTERN.match(arguments)
            if loop is None:
                self._text(raw)
            else:
                self._stack.append(
                    _EachFrame(
                        raw,
                        collection=loop.group("collection").strip(),
                        item=loop.group("item"),
                        key=loop.group("key"),
                    )
                )
        elif name == "has":
            self._stack.append(_HasFrame(raw, arguments))
        else:
            self._add(BooleanAttr(name, arguments))

        return close_index + 1

    def _handle_tag_open(self, match: re.Match) -> None:
        raw = match.group(0)
        tag = match.group("tag")
        if tag == "slot":
            # <x-slot> without a name is not a component
            self._text(raw)
            return

        attributes = match.group("attributes")
        if match.group("self_closing"):
            self._add(Component(tag, parse_attributes(attributes.strip()), SlotSet()))
        else:
            self._stack.append(_ComponentFrame(raw, tag, attributes))

    def _handle_tag_close(self, match: re.Match) -> None:
        tag = match.group("close_tag")
        for index in range(len(self._stack) - 1, 0, -1):
            frame = self._stack[index]
            if isinstance(frame, _ComponentFrame) and frame.tag == tag:
                self._close(index)
                return
        self._text(match.group(0))


def parse_template(template: str) -> Tuple[Node, ...]:
    return AurynxParser().parse(template)
