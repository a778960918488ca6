from amaranth.hdl import *
from amaranth.lib.memory import Memory

from .table import Table


__all__ = ["TableROM"]


class TableROM(Elaboratable):
    """
    Read-only memory holding a CRC lookup table.

    The table entry selected by ``addr`` is presented on ``data`` in the
    same clock cycle, so a hardware CRC engine can index the table with
    ``crc ^ data_in`` (or the high byte of ``crc`` for 16-bit CRCs) the same
    way software does.

    Parameters
    ----------
    table : Table
        Lookup table to store.

    Attributes
    ----------
    addr : Signal(8), in
        Input byte value used as the table index.
    data : Signal(crc_width), out
        Table entry for ``addr``.
    """
    def __init__(self, table):
        assert isinstance(table, Table)
        self.table = table
        self.crc_width = table.crc_width

        self.addr = Signal(8)
        self.data = Signal(self.crc_width)

    def elaborate(self, platform):
        m = Module()

        m.submodules.memory = memory = Memory(
            shape=unsigned(self.crc_width), depth=len(self.table), init=list(self.table))
        read_port = memory.read_port(domain="comb")

        m.d.comb += [
            read_port.addr.eq(self.addr),
            self.data.eq(read_port.data),
        ]

        return m
