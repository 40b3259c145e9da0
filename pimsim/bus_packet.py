"""Commands and data travelling on the memory bus."""

from dataclasses import dataclass
from enum import IntEnum

from pimsim.burst import Burst

__all__ = ["BusPacketType", "BusPacket"]


class BusPacketType(IntEnum):
    READ = 0
    WRITE = 1
    ACTIVATE = 2
    PRECHARGE = 3
    REF = 4
    DATA = 5
    RFCSB = 6


_LABELS = {
    BusPacketType.READ: "READ",
    BusPacketType.WRITE: "WRITE",
    BusPacketType.ACTIVATE: "ACT",
    BusPacketType.PRECHARGE: "PRE",
    BusPacketType.REF: "REF",
    BusPacketType.RFCSB: "RFCSB",
    BusPacketType.DATA: "DATA",
}


@dataclass
class BusPacket:
    """A single command or data transfer addressed to a rank and bank."""

    packet_type: BusPacketType
    physical_address: int
    column: int
    row: int
    rank: int
    bank: int
    data: Burst | None = None
    tag: str = ""

    def __post_init__(self):
        self.packet_type = BusPacketType(self.packet_type)

    def data_str(self):
        """Return the packet's data as a list of fp16 values."""
        if self.data is None:
            raise ValueError("bus packet carries no data")
        return self.data.fp16_str()

    def describe(self):
        """Return a one-line human-readable description of the packet."""
        text = (
            f"BP [{_LABELS[self.packet_type]}] pa[0x{self.physical_address:x}] "
            f"r[{self.rank}] b[{self.bank}] row[{self.row}] col[{self.column}]"
        )
        if self.packet_type is BusPacketType.DATA:
            data = self.data_str()
            text += f" data[{data}]={data}"
        return text

    def verification_line(self, clock_cycle):
        """Return the command trace line for ``clock_cycle``, or None for data packets."""
        kind = self.packet_type
        prefix = f"{clock_cycle}: "
        if kind is BusPacketType.READ:
            return f"{prefix}read ({self.rank},{self.bank},{self.column},0);"
        if kind is BusPacketType.WRITE:
            return f"{prefix}write ({self.rank},{self.bank},{self.column},0 , 0, 'h0);"
        if kind is BusPacketType.ACTIVATE:
            return f"{prefix}activate ({self.rank},{self.bank},{self.row});"
        if kind is BusPacketType.PRECHARGE:
            return f"{prefix}precharge ({self.rank},{self.bank},{self.row});"
        if kind is BusPacketType.REF:
            return f"{prefix}refresh ({self.rank});"
        if kind is BusPacketType.RFCSB:
            return f"{prefix}refresh single bank ({self.rank},{self.bank});"
        return None

    def __str__(self):
        return self.describe()