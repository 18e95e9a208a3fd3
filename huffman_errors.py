# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every error raised by the Huffman engine."""


class InvalidInput(HuffmanError, ValueError):
    pass


class UnknownSymbol(HuffmanError, KeyError):
    """A symbol that has no entry in the code table was asked to be encoded."""

    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"symbol {self.symbol!r} was not found in the code table"


class TruncatedOrCorruptSequence(HuffmanError, ValueError):
    """
    The bit sequence ended while bits were still pending.

    `pending` holds the unmatched bits, `position` the number of input bits
    consumed when decoding stopped.
    """

    def __init__(self, pending=(), position=0, reason=None):
        self.pending = tuple(pending)
        self.position = position
        self.reason = reason
        super().__init__(self.pending, self.position)

    def __str__(self):
        if self.reason:
            return self.reason
        bits = "".join(str(bit) for bit in self.pending)
        return f"unmatched bits {bits!r} at end of input (after {self.position} bits)"


class EncodingDegenerate(HuffmanError, ValueError):
    """A single-symbol alphabet produced a zero-length code."""

    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"symbol {self.symbol!r} has a zero-length code"
