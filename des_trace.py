"""
Observers for the intermediate values of a DES computation.

The core calls these hooks at fixed points of the key schedule and the
rounds. :class:`Tracer` ignores everything; :class:`LoggingTracer` writes
each step as a DEBUG record.
"""
import logging

from des_bits import bits_to_str


class Tracer:
    """No-op hooks. Subclass and override the ones you care about."""

    def key_halves(self, c, d):
        pass

    def key_shift(self, index, c, d):
        pass

    def round_key(self, index, key):
        pass

    def message(self, block, bits):
        pass

    def initial_permutation(self, bits, left, right):
        pass

    def expanded_xor(self, round_index, bits):
        pass

    def sbox_lookup(self, round_index, box, chunk, row, col, value):
        pass

    def sbox_output(self, round_index, bits):
        pass

    def round_output(self, round_index, f_out, left, right):
        pass

    def final_block(self, bits):
        pass


NULL_TRACER = Tracer()


class LoggingTracer(Tracer):
    def __init__(self, logger=None):
        self.log = logger or logging.getLogger("des.trace")

    @property
    def enabled(self):
        return self.log.isEnabledFor(logging.DEBUG)

    def key_halves(self, c, d):
        if not self.enabled:
            return
        self.log.debug("First key permutation:  %s  %s", bits_to_str(c), bits_to_str(d))

    def key_shift(self, index, c, d):
        if not self.enabled:
            return
        self.log.debug("%d SHIFTED KEY: %s%s", index, bits_to_str(c), bits_to_str(d))

    def round_key(self, index, key):
        if not self.enabled:
            return
        self.log.debug("%d PERMUTED KEY:  %s", index, bits_to_str(key))

    def message(self, block, bits):
        if not self.enabled:
            return
        self.log.debug("MSG: %s BINCHARS: %s", bytes(block).hex().upper(), bits_to_str(bits))

    def initial_permutation(self, bits, left, right):
        if not self.enabled:
            return
        self.log.debug("Initial data permutation: %s", bits_to_str(bits))
        self.log.debug("L0 %s", bits_to_str(left))
        self.log.debug("R0 %s", bits_to_str(right))

    def expanded_xor(self, round_index, bits):
        if not self.enabled:
            return
        self.log.debug("XORED DATA: %s", bits_to_str(bits))

    def sbox_lookup(self, round_index, box, chunk, row, col, value):
        if not self.enabled:
            return
        self.log.debug(
            "SBOX LOOKUP FOR CHUNK %d (%s) is row %d col %d -> %d(int) = %s(bin)",
            box + 1, bits_to_str(chunk), row, col, value, format(value, "04b"),
        )

    def sbox_output(self, round_index, bits):
        if not self.enabled:
            return
        self.log.debug("SBOXed KEY IS %s", bits_to_str(bits))

    def round_output(self, round_index, f_out, left, right):
        if not self.enabled:
            return
        self.log.debug("F() result is %s", bits_to_str(f_out))
        self.log.debug("L%d: %s", round_index, bits_to_str(left))
        self.log.debug("R%d: %s", round_index, bits_to_str(right))

    def final_block(self, bits):
        if not self.enabled:
            return
        self.log.debug("Final permutation: %s", bits_to_str(bits))
