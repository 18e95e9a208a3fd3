# filename: huffman_core.py

import heapq
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from itertools import count
from types import MappingProxyType
from typing import Hashable, Iterable, Iterator, List, NamedTuple, Sequence, Tuple, Union

from huffman_errors import EncodingDegenerate, InvalidInput, TruncatedOrCorruptSequence, UnknownSymbol

Symbol = Hashable
Code = Tuple[int, ...]


class FrequencyEntry(NamedTuple):
    symbol: Symbol
    count: int


@dataclass(frozen=True)
class Leaf:
    symbol: Symbol
    freq: int


@dataclass(frozen=True)
class Internal:
    left: "Node"
    right: "Node"
    freq: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "freq", self.left.freq + self.right.freq)


Node = Union[Leaf, Internal]


def _is_bit(value) -> bool:
    # bools and floats compare equal to 0 and 1 but are not bits
    return type(value) is int and value in (0, 1)


class CodeTable:
    """
    Immutable symbol <-> code mapping extracted from a Huffman tree.

    The same entries serve both directions: `code_for` is the encoding
    table and `symbol_for` the decoding table. Entries must form a
    prefix-free set, otherwise the table is rejected.
    """

    def __init__(self, entries: Iterable[Tuple[Symbol, Sequence[int]]]):
        codes = {}
        symbols = {}
        for symbol, code in entries:
            code = tuple(code)
            if not all(_is_bit(bit) for bit in code):
                raise InvalidInput(f"code {code} for symbol {symbol!r} contains a non-bit value")
            if symbol in codes:
                raise InvalidInput(f"symbol {symbol!r} appears more than once")
            if code in symbols:
                raise InvalidInput(f"code {code} is assigned to both {symbols[code]!r} and {symbol!r}")
            codes[symbol] = code
            symbols[code] = symbol
        if not codes:
            raise InvalidInput("a code table needs at least one entry")

        # In lexicographic order a code that prefixes another sorts directly before some code it prefixes
        ordered = sorted(symbols)
        for shorter, longer in zip(ordered, ordered[1:]):
            if longer[:len(shorter)] == shorter:
                raise InvalidInput(f"code {shorter} is a prefix of code {longer}")

        self._codes = codes
        self._symbols = symbols
        self.max_code_length = max(len(code) for code in symbols)

    @property
    def codes(self) -> Mapping:
        return MappingProxyType(self._codes)

    @property
    def symbols(self) -> Mapping:
        return MappingProxyType(self._symbols)

    @property
    def is_degenerate(self) -> bool:
        return () in self._symbols

    def code_for(self, symbol: Symbol) -> Code:
        try:
            return self._codes[symbol]
        except KeyError:
            raise UnknownSymbol(symbol) from None

    def symbol_for(self, code: Sequence[int], default=None):
        return self._symbols.get(tuple(code), default)

    def items(self):
        return self._codes.items()

    def entries_by_length(self) -> List[Tuple[Symbol, Code]]:
        """Entries ordered shortest code first; equal lengths keep table order."""
        return sorted(self._codes.items(), key=lambda item: len(item[1]))

    def average_code_length(self, freqs) -> float:
        """Mean code length in bits, weighted by the given symbol counts."""
        if isinstance(freqs, Mapping):
            freqs = freqs.items()
        total = 0
        weighted = 0
        for symbol, n in freqs:
            weighted += n * len(self.code_for(symbol))
            total += n
        if total <= 0:
            raise InvalidInput("frequencies must add up to a positive total")
        return weighted / total

    def __contains__(self, symbol):
        return symbol in self._codes

    def __iter__(self):
        return iter(self._codes)

    def __len__(self):
        return len(self._codes)

    def __eq__(self, other):
        if not isinstance(other, CodeTable):
            return NotImplemented
        return self._codes == other._codes

    def __repr__(self):
        body = ", ".join(f"{symbol!r}: {''.join(map(str, code))!r}" for symbol, code in self._codes.items())
        return f"CodeTable({{{body}}})"


def build_frequency_list(stream: Iterable[Symbol]) -> List[FrequencyEntry]:
    """Count symbols and order them ascending by count."""
    freqs = Counter(stream)
    # sorted() is stable: equal counts keep first-occurrence order
    ordered = sorted(freqs.items(), key=lambda item: item[1])
    return [FrequencyEntry(symbol, n) for symbol, n in ordered]


def build_tree(freqs) -> Node:
    """
    Merge the two lowest-frequency nodes until a single root remains.

    `freqs` is a FrequencyList (or any iterable of (symbol, count) pairs, or a
    symbol -> count mapping). Nodes are keyed by (frequency, sequence number);
    leaves are numbered in input order and every merged node takes the next
    number, so among equal frequencies the earlier node is popped first. The
    first node popped becomes the left child.
    """
    if isinstance(freqs, Mapping):
        freqs = freqs.items()

    sequence = count()
    heap = []
    seen = set()
    for symbol, n in freqs:
        if n <= 0:
            raise InvalidInput(f"symbol {symbol!r} has non-positive count {n}")
        if symbol in seen:
            raise InvalidInput(f"symbol {symbol!r} appears more than once")
        seen.add(symbol)
        heap.append((n, next(sequence), Leaf(symbol, n)))
    if not heap:
        raise InvalidInput("cannot build a tree from an empty frequency list")
    heapq.heapify(heap)

    while len(heap) > 1:
        _, _, left = heapq.heappop(heap)
        _, _, right = heapq.heappop(heap)
        merged = Internal(left, right)
        heapq.heappush(heap, (merged.freq, next(sequence), merged))

    return heap[0][2]


def tree_from_sample(sample: Iterable[Symbol]) -> Node:
    return build_tree(build_frequency_list(sample))


def leaves(tree: Node) -> Iterator[Leaf]:
    """Yield the leaves of `tree` from left to right."""
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def build_code_table(tree: Node, fixed_fallback: bool = False) -> CodeTable:
    """
    Walk the tree depth-first, appending 0 for a left edge and 1 for a right
    edge, and record the path that reaches each leaf.

    A bare Leaf (single-symbol alphabet) gets the empty code, or the one-bit
    code (0,) when `fixed_fallback` is set.
    """
    if isinstance(tree, Leaf):
        return CodeTable([(tree.symbol, (0,) if fixed_fallback else ())])

    entries = []
    stack = [(tree, ())]
    while stack:
        node, path = stack.pop()
        if isinstance(node, Leaf):
            entries.append((node.symbol, path))
        else:
            stack.append((node.right, path + (1,)))
            stack.append((node.left, path + (0,)))
    return CodeTable(entries)


def encode_table(tree: Node, fixed_fallback: bool = False) -> CodeTable:
    return build_code_table(tree, fixed_fallback)


def decode_table(tree: Node, fixed_fallback: bool = False) -> CodeTable:
    return build_code_table(tree, fixed_fallback)


def encode(stream: Iterable[Symbol], table: CodeTable, allow_empty_codes: bool = False) -> List[int]:
    """
    Concatenate the code of every symbol in `stream`.

    Raises UnknownSymbol for a symbol missing from the table and
    EncodingDegenerate for a zero-length code unless `allow_empty_codes`.
    Nothing is returned on failure.
    """
    bits = []
    for symbol in stream:
        code = table.code_for(symbol)
        if not code and not allow_empty_codes:
            raise EncodingDegenerate(symbol)
        bits.extend(code)
    return bits


def decode(bits: Iterable[int], table: CodeTable) -> list:
    """
    Accumulate bits until they equal a code, emit its symbol and start over.

    Raises TruncatedOrCorruptSequence when input ends with pending bits, or
    when the pending bits grow longer than any code in the table.
    """
    symbols = table.symbols
    limit = table.max_code_length
    decoded = []
    pending = []
    position = 0
    for position, bit in enumerate(bits, 1):
        if not _is_bit(bit):
            raise InvalidInput(f"value {bit!r} at bit {position} is not 0 or 1")
        pending.append(bit)
        key = tuple(pending)
        if key in symbols:
            decoded.append(symbols[key])
            pending.clear()
        elif len(pending) >= limit:
            raise TruncatedOrCorruptSequence(
                pending, position, reason=f"no code matches bits ending at position {position}"
            )
    if pending:
        raise TruncatedOrCorruptSequence(pending, position)
    return decoded


def bits_to_string(bits: Iterable[int]) -> str:
    return "".join(str(bit) for bit in bits)


def string_to_bits(text: str) -> List[int]:
    try:
        return [int(char, 2) for char in text]
    except ValueError:
        raise InvalidInput(f"{text!r} is not a string of 0 and 1 characters") from None
