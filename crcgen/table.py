"""
Lookup table generation for table-driven CRC-8 and CRC-16 computations.

A table holds, for every possible input byte, the effect that byte has on
the CRC register when divided bit by bit against the generator polynomial.
Tables are produced for the forward (most significant bit first) form only,
with a zero initial register and no output XOR.

Commonly used polynomials are available in the ``Catalog`` class; any other
polynomial can be used by calling ``generate`` or constructing
``Parameters`` directly.
"""

import logging


__all__ = ["WIDTHS", "Parameters", "Table", "Predefined", "Catalog", "generate"]


logger = logging.getLogger(__name__)


#: CRC widths for which tables can be generated.
WIDTHS = (8, 16)


class Parameters:
    """
    Parameters for a CRC lookup table.

    The polynomial uses the same notation as the `reveng`_ catalogue:
    ``crc_width`` bits long, without the implicit ``x**crc_width`` term,
    with the highest order terms in the most significant bit positions.

    .. _reveng: https://reveng.sourceforge.io/crc-catalogue/all.htm

    Parameters
    ----------
    crc_width : int
        Bit width of the CRC register, 8 or 16.
    polynomial : int
        CRC polynomial to use. Must fit in ``crc_width`` bits.

    Raises
    ------
    ValueError
        If ``polynomial`` is negative or does not fit in ``crc_width`` bits.
    """
    def __init__(self, crc_width, polynomial):
        self.crc_width = int(crc_width)
        self.polynomial = int(polynomial)

        assert self.crc_width in WIDTHS
        if self.polynomial < 0:
            raise ValueError(f"Polynomial must be non-negative, not {self.polynomial}")
        if self.polynomial >= 2 ** self.crc_width:
            raise ValueError(
                f"Polynomial 0x{self.polynomial:X} does not fit in {self.crc_width} bits")

    def table(self):
        """
        Computes and returns the ``Table`` for these parameters.
        """
        top_bit = 1 << (self.crc_width - 1)
        crc_mask = (1 << self.crc_width) - 1

        # The input byte is tracked in a separate seed register aligned to
        # the top of the CRC register, so that only the polynomial feedback
        # accumulates in ``crc``. For an 8-bit CRC the seed is the byte
        # itself and shifts out completely, leaving the same result as
        # seeding ``crc`` with the byte directly.
        entries = []
        for byte in range(256):
            crc = 0
            seed = byte << (self.crc_width - 8)
            for _ in range(8):
                carry = (crc ^ seed) & top_bit
                crc = (crc << 1) & crc_mask
                seed = (seed << 1) & crc_mask
                if carry:
                    crc ^= self.polynomial
            entries.append(crc)

        return Table(self.crc_width, self.polynomial, entries)

    def compute(self, data):
        """
        Computes and returns the CRC of the bytes in ``data`` by bit-serial
        polynomial division, without a lookup table.
        """
        # Precompute some constants we use every iteration.
        top_bit = 1 << (self.crc_width + 7)
        crc_mask = (1 << (self.crc_width + 8)) - 1
        poly_shifted = self.polynomial << 8

        # Shift the CRC left by 8 bits and each byte left by the CRC width so
        # their most significant bits line up for either CRC width. The
        # result is shifted back down before output.
        crc = 0
        for byte in data:
            assert 0 <= byte <= 0xff

            crc ^= byte << self.crc_width
            for _ in range(8):
                if crc & top_bit:
                    crc = (crc << 1) ^ poly_shifted
                else:
                    crc <<= 1
            crc &= crc_mask

        return crc >> 8

    def check(self):
        """
        Compute the CRC of the ASCII string "123456789", commonly used as
        a verification value for CRC parameters.
        """
        return self.compute(b"123456789")

    def __repr__(self):
        return f"Parameters(crc_width={self.crc_width}," \
               f" polynomial=0x{self.polynomial:0{self.crc_width//4}x})"


class Table:
    """
    Immutable 256-entry CRC lookup table.

    Entry ``i`` is the CRC register contribution of input byte ``i``. Tables
    compare equal when their width, polynomial and entries are equal.

    Parameters
    ----------
    crc_width : int
        Bit width of each entry.
    polynomial : int
        Polynomial the table was generated from.
    entries : iterable of int
        The 256 table entries.
    """
    def __init__(self, crc_width, polynomial, entries):
        self.crc_width = crc_width
        self.polynomial = polynomial
        self._entries = tuple(entries)

        assert len(self._entries) == 256
        assert all(0 <= entry < 2 ** crc_width for entry in self._entries)

    def checksum(self, data):
        """
        Computes the CRC of the bytes in ``data`` using this table, starting
        from a zero register.

        Each byte updates the register as
        ``reg = table[(reg >> (width - 8)) ^ byte] ^ (reg << 8)``, truncated
        to the CRC width. For an 8-bit table this reduces to
        ``reg = table[reg ^ byte]``. With polynomial 0x1021 the result is
        CRC-16/XMODEM.
        """
        crc_mask = (1 << self.crc_width) - 1
        crc = 0
        for byte in data:
            crc = self._entries[((crc >> (self.crc_width - 8)) ^ byte) & 0xff] \
                  ^ ((crc << 8) & crc_mask)
        return crc

    def __len__(self):
        return len(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    def __iter__(self):
        return iter(self._entries)

    def __eq__(self, other):
        if not isinstance(other, Table):
            return NotImplemented
        return (self.crc_width, self.polynomial, self._entries) == \
               (other.crc_width, other.polynomial, other._entries)

    def __hash__(self):
        return hash((self.crc_width, self.polynomial, self._entries))

    def __repr__(self):
        return f"Table(crc_width={self.crc_width}," \
               f" polynomial=0x{self.polynomial:0{self.crc_width//4}x})"


class Predefined:
    """
    Predefined CRC parameters.

    Each instance of this class is a standard or well-known CRC algorithm
    whose tables this package can generate. ``check`` is the CRC of the
    ASCII byte string "123456789", commonly used to validate a CRC
    algorithm.

    To create a ``Parameters`` instance, call the ``Predefined`` object.
    """
    def __init__(self, crc_width, polynomial, check):
        self.crc_width = crc_width
        self.polynomial = polynomial
        self.check = check

    def __call__(self):
        return Parameters(self.crc_width, self.polynomial)

    def __repr__(self):
        return f"Predefined(crc_width={self.crc_width}," \
               f" polynomial=0x{self.polynomial:0{self.crc_width//4}x}," \
               f" check=0x{self.check:0{self.crc_width//4}x})"


class Catalog:
    """
    Catalog of predefined CRC algorithms.

    Entries are the 8 and 16-bit algorithms from `reveng`_, accessed on
    2023-05-25, which have a zero initial value, no bit reflection and no
    output XOR, so that a generated table reproduces them exactly.

    To use an entry, call it to obtain ``Parameters``. For example::

        table = crc.Catalog.CRC16_XMODEM().table()

    """
    CRC8_DVB_S2 = Predefined(8, 0xd5, 0xbc)
    CRC8_GSM_A = Predefined(8, 0x1d, 0x37)
    CRC8_LTE = Predefined(8, 0x9b, 0xea)
    CRC8_OPENSAFETY = Predefined(8, 0x2f, 0x3e)
    CRC8_SMBUS = Predefined(8, 0x07, 0xf4)
    CRC16_DECT_X = Predefined(16, 0x0589, 0x007f)
    CRC16_LJ1200 = Predefined(16, 0x6f63, 0xbdf4)
    CRC16_OPENSAFETY_A = Predefined(16, 0x5935, 0x5d38)
    CRC16_OPENSAFETY_B = Predefined(16, 0x755b, 0x20fe)
    CRC16_T10_DIF = Predefined(16, 0x8bb7, 0xd0db)
    CRC16_TELEDISK = Predefined(16, 0xa097, 0x0fb3)
    CRC16_UMTS = CRC16_BUYPASS = CRC16_VERIFONE = Predefined(16, 0x8005, 0xfee8)
    CRC16_XMODEM = CRC16_ACORN = CRC16_LTE = CRC16_V_41_MSB = CRC16_ZMODEM = \
        Predefined(16, 0x1021, 0x31c3)

    @classmethod
    def names(cls):
        """
        Returns the names of all catalog entries, including aliases, in
        alphabetical order.
        """
        return sorted(name for name in dir(cls) if name.startswith("CRC"))

    @classmethod
    def lookup(cls, name):
        """
        Returns the ``Predefined`` entry called ``name``, ignoring case and
        accepting ``-`` or ``/`` in place of ``_``.

        Raises
        ------
        KeyError
            If there is no such entry.
        """
        key = name.upper().replace("-", "_").replace("/", "_")
        if key.startswith("CRC_"):
            key = "CRC" + key[4:]
        if key not in cls.names():
            raise KeyError(name)
        return getattr(cls, key)


def generate(crc_width, polynomial):
    """
    Generate the lookup table for a ``crc_width``-bit CRC with the given
    polynomial.

    ``crc_width`` must be 8 or 16; callers are expected to validate it
    beforehand. A polynomial wider than ``crc_width`` bits raises
    ``ValueError``.
    """
    table = Parameters(crc_width, polynomial).table()
    logger.debug("generated %r", table)
    return table
