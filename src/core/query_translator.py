"""Translate Virgo pool queries into JMRL (Sierra) search syntax.

A pool query is built from field-scoped clauses joined by boolean operators:

    title: {Moby Dick} AND (author: {Melville} OR keyword: {"white whale"})

The query is tokenized and parsed into a small tree, unsupported clauses are
rejected or neutralized, and the tree is rendered into the upstream syntax:

    t:(Moby Dick) AND (a:(Melville) OR ("white whale"))

Mapping to JMRL fields
- keyword    -> bare terms
- title      -> t:
- author     -> a:
- subject    -> d:
- published  -> v:  (never matches; keeps the AND/OR/NOT structure intact)
- filter     -> v:  (a filtered search cannot match in this pool)
- identifier -> rejected, or (b:(x) OR c:(x)) under the barcode_or_call_number policy
- date, journal_title, fulltext, series -> rejected
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, NamedTuple, Optional, Union
from urllib.parse import quote_plus

IdentifierPolicy = Literal["reject", "barcode_or_call_number"]

WILDCARD_QUERY = "(*)"

FIELD_CODES = {
    "keyword": "",
    "title": "t",
    "author": "a",
    "subject": "d",
    "published": "v",
    "filter": "v",
}

# Fields JMRL has no way to express; value is the label used in error messages
UNSUPPORTED_FIELDS = {
    "date": "Date",
    "identifier": "Identifier",
    "journal_title": "Journal Title",
    "fulltext": "Full Text",
    "series": "Series",
}

KNOWN_FIELDS = frozenset(FIELD_CODES) | frozenset(UNSUPPORTED_FIELDS)

OPERATORS = ("AND", "OR", "NOT")

# deepest allowed nesting of parentheses and NOT
MAX_DEPTH = 100

# most clauses allowed in one query
MAX_CLAUSES = 100


class QueryError(Exception):
    """Base class for query translation failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedQueryError(QueryError):
    """Raised when a query cannot be parsed."""


class UnsupportedQueryError(QueryError):
    """Raised when a query uses a field JMRL cannot search."""

    def __init__(self, field: str):
        label = UNSUPPORTED_FIELDS.get(field, field)
        super().__init__(f"{label} queries are not supported")
        self.field = field


@dataclass(frozen=True)
class TranslatedQuery:
    """A query rendered in JMRL syntax."""

    text: str
    filtered: bool = False

    @property
    def encoded(self) -> str:
        """The query escaped for use as a URL query parameter."""
        return quote_plus(self.text)


# --- Syntax tree ---


@dataclass(frozen=True)
class Clause:
    field: str
    value: str


@dataclass(frozen=True)
class Group:
    expr: "Node"


@dataclass(frozen=True)
class Not:
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


Node = Union[Clause, Group, Not, BinaryOp]


class Token(NamedTuple):
    kind: str  # CLAUSE, OP, LPAREN, RPAREN
    text: str
    pos: int
    value: str = ""


def _scan_braced(query: str, start: int) -> tuple[str, int]:
    """Return the text inside the braces opening at `start` and the index past the close.

    Nested braces must balance; braces inside double quotes are literal.
    """
    depth = 0
    in_quote = False
    for i in range(start, len(query)):
        ch = query[i]
        if ch == '"':
            in_quote = not in_quote
        elif in_quote:
            continue
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return query[start + 1:i], i + 1
    raise MalformedQueryError(f"Unterminated clause starting at position {start}")


def tokenize(query: str) -> list[Token]:
    """Split a pool query into clause, operator and parenthesis tokens."""
    tokens: list[Token] = []
    i = 0
    n = len(query)
    while i < n:
        ch = query[i]
        if ch.isspace():
            i += 1
        elif ch == "(":
            tokens.append(Token("LPAREN", ch, i))
            i += 1
        elif ch == ")":
            tokens.append(Token("RPAREN", ch, i))
            i += 1
        elif ch.isalpha() or ch == "_":
            start = i
            while i < n and (query[i].isalnum() or query[i] == "_"):
                i += 1
            word = query[start:i]
            j = i
            while j < n and query[j].isspace():
                j += 1
            if j < n and query[j] == ":":
                if word not in KNOWN_FIELDS:
                    raise MalformedQueryError(f"Unknown search field: {word}")
                j += 1
                while j < n and query[j].isspace():
                    j += 1
                if j >= n or query[j] != "{":
                    raise MalformedQueryError(f"Expected '{{' after {word}:")
                value, i = _scan_braced(query, j)
                tokens.append(Token("CLAUSE", word, start, value))
            elif word in OPERATORS:
                tokens.append(Token("OP", word, start))
            else:
                raise MalformedQueryError(f"Unexpected term '{word}' at position {start}")
        else:
            raise MalformedQueryError(f"Unexpected character '{ch}' at position {i}")
    return tokens


class _Parser:
    """Recursive-descent parser over the token list.

    Operators share one precedence level and associate to the left; the
    rendered query keeps the original order, so JMRL applies its own rules.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def parse(self) -> Node:
        if not self.tokens:
            raise MalformedQueryError("Empty query")
        if sum(1 for t in self.tokens if t.kind == "CLAUSE") > MAX_CLAUSES:
            raise MalformedQueryError(f"Query has more than {MAX_CLAUSES} clauses")
        node = self._expression()
        extra = self._peek()
        if extra is not None:
            raise MalformedQueryError(f"Unexpected '{extra.text}' at position {extra.pos}")
        return node

    def _expression(self) -> Node:
        node = self._unary()
        while True:
            tok = self._peek()
            if tok is None or tok.kind != "OP":
                return node
            self._next()
            node = BinaryOp(tok.text, node, self._unary())

    def _nested(self, tok: Token) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise MalformedQueryError(f"Query nested too deeply at position {tok.pos}")

    def _unary(self) -> Node:
        tok = self._peek()
        if tok is None:
            raise MalformedQueryError("Unexpected end of query")
        if tok.kind == "OP" and tok.text == "NOT":
            self._next()
            self._nested(tok)
            operand = self._unary()
            self.depth -= 1
            return Not(operand)
        if tok.kind == "LPAREN":
            self._next()
            self._nested(tok)
            inner = self._expression()
            close = self._peek()
            if close is None or close.kind != "RPAREN":
                raise MalformedQueryError(f"Unbalanced parenthesis at position {tok.pos}")
            self._next()
            self.depth -= 1
            return Group(inner)
        if tok.kind == "CLAUSE":
            self._next()
            return Clause(tok.text, tok.value)
        raise MalformedQueryError(f"Unexpected '{tok.text}' at position {tok.pos}")


def parse(query: str) -> Node:
    """Parse a pool query into a syntax tree."""
    return _Parser(tokenize(query)).parse()


def iter_clauses(node: Node):
    """Yield clauses in document order."""
    if isinstance(node, Clause):
        yield node
    elif isinstance(node, Group):
        yield from iter_clauses(node.expr)
    elif isinstance(node, Not):
        yield from iter_clauses(node.operand)
    else:
        yield from iter_clauses(node.left)
        yield from iter_clauses(node.right)


def _prune(node: Node) -> Optional[Node]:
    """Drop clauses with empty values, collapsing the operators around them."""
    if isinstance(node, Clause):
        return node if node.value.strip() else None
    if isinstance(node, Group):
        inner = _prune(node.expr)
        return Group(inner) if inner is not None else None
    if isinstance(node, Not):
        operand = _prune(node.operand)
        return Not(operand) if operand is not None else None
    left = _prune(node.left)
    right = _prune(node.right)
    if left is None and right is None:
        return None
    if left is None:
        return Not(right) if node.op == "NOT" else right
    if right is None:
        return left
    return BinaryOp(node.op, left, right)


def _render_clause(clause: Clause) -> str:
    value = clause.value.strip().replace("{", "(").replace("}", ")")
    if clause.field == "identifier":
        return f"(b:({value}) OR c:({value}))"
    code = FIELD_CODES[clause.field]
    if not code:
        return f"({value})"
    return f"{code}:({value})"


def render(node: Node) -> str:
    """Render a syntax tree in JMRL syntax."""
    if isinstance(node, Clause):
        return _render_clause(node)
    if isinstance(node, Group):
        return f"({render(node.expr)})"
    if isinstance(node, Not):
        return f"NOT {render(node.operand)}"
    return f"{render(node.left)} {node.op} {render(node.right)}"


def translate(query: str, identifier_policy: IdentifierPolicy = "reject") -> TranslatedQuery:
    """Translate a pool query into a JMRL search query.

    Args:
        query: Query in the pool query language
        identifier_policy: "reject" to refuse identifier clauses, or
            "barcode_or_call_number" to search them as barcode OR call number

    Returns:
        TranslatedQuery; `filtered` is set when the query carries a facet filter

    Raises:
        MalformedQueryError: The query does not parse
        UnsupportedQueryError: The query uses a field JMRL cannot search
    """
    tree = parse(query)

    filtered = False
    for clause in iter_clauses(tree):
        if clause.field in UNSUPPORTED_FIELDS:
            if clause.field == "identifier" and identifier_policy == "barcode_or_call_number":
                continue
            raise UnsupportedQueryError(clause.field)
        if clause.field == "filter" and clause.value.strip():
            filtered = True

    pruned = _prune(tree)
    text = render(pruned).strip() if pruned is not None else ""
    if text in ("", "()"):
        text = WILDCARD_QUERY
    return TranslatedQuery(text=text, filtered=filtered)
