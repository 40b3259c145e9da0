"""Decoding of physical addresses into channel, rank, bank, row and column."""

import logging
from dataclasses import dataclass

from pimsim.sysconfig import AddressMappingScheme

__all__ = ["DecodedAddress", "AddressMapping", "take_bits"]

_log = logging.getLogger(__name__)

_UINT64_LIMIT = 1 << 64

# Order in which fields are taken from the address, lowest bits first.
_FIELD_ORDER = {
    AddressMappingScheme.SCHEME1: ("bank", "column", "row", "rank", "channel"),
    AddressMappingScheme.SCHEME2: ("rank", "bank", "column", "row", "channel"),
    AddressMappingScheme.SCHEME3: ("row", "column", "bank", "rank", "channel"),
    AddressMappingScheme.SCHEME4: ("column", "row", "bank", "rank", "channel"),
    AddressMappingScheme.SCHEME5: ("bank", "rank", "column", "row", "channel"),
    AddressMappingScheme.SCHEME6: ("column", "rank", "bank", "row", "channel"),
    AddressMappingScheme.SCHEME7: ("channel", "bank", "rank", "column", "row"),
    AddressMappingScheme.SCHEME8: (
        "channel",
        "bank_in_group",
        "bankgroup",
        "column",
        "row",
        "rank",
    ),
}


def _log2(value):
    """Base-2 logarithm rounded up; 0 for values of 0 or 1."""
    value = int(value)
    return 0 if value <= 1 else (value - 1).bit_length()


def take_bits(address, width):
    """Split the low ``width`` bits off ``address``; return ``(bits, rest)``."""
    if width < 0:
        raise ValueError(f"bit width must not be negative, got {width}")
    rest = address >> width
    return address ^ (rest << width), rest


@dataclass(frozen=True)
class DecodedAddress:
    """Location of a transaction in the memory system."""

    channel: int
    rank: int
    bank: int
    row: int
    column: int


class AddressMapping:
    """Maps physical addresses to DRAM coordinates according to the configured scheme."""

    def __init__(self, system):
        bus_bits = system.get_uint("JEDEC_DATA_BUS_BITS")
        self.transaction_size = bus_bits // 8 * system.get_uint("BL")
        self.transaction_mask = self.transaction_size - 1
        self.channel_bits = _log2(system.get_uint("NUM_CHANS"))
        self.rank_bits = _log2(system.get_uint("NUM_RANKS"))
        self.bank_bits = _log2(system.get_uint("NUM_BANKS"))
        self.bankgroup_bits = _log2(system.get_uint("NUM_BANK_GROUPS"))
        self.row_bits = _log2(system.get_uint("NUM_ROWS"))
        self.col_bits = _log2(system.get_uint("NUM_COLS"))
        self.byte_offset_bits = _log2(bus_bits // 8)
        self.col_low_bits = _log2(self.transaction_size) - self.byte_offset_bits
        self.col_high_bits = self.col_bits - self.col_low_bits
        self.num_channels = system.get_uint("NUM_CHANS")

        bank_groups = system.get_uint("NUM_BANK_GROUPS")
        if bank_groups == 0:
            raise ValueError("NUM_BANK_GROUPS must not be zero")
        self.banks_per_bankgroup = system.get_uint("NUM_BANKS") // bank_groups
        self.scheme = system.address_mapping_scheme()

    def _widths(self):
        return {
            "channel": self.channel_bits,
            "rank": self.rank_bits,
            "bank": self.bank_bits,
            "bank_in_group": self.bank_bits - self.bankgroup_bits,
            "bankgroup": self.bankgroup_bits,
            "row": self.row_bits,
            "column": self.col_high_bits,
        }

    def map(self, physical_address):
        """Decode ``physical_address`` into a :class:`DecodedAddress`."""
        if not 0 <= physical_address < _UINT64_LIMIT:
            raise ValueError(f"address {physical_address:#x} is not a 64-bit unsigned value")
        if physical_address & self.transaction_mask:
            _log.warning(
                "address %#x is not aligned to the request size of %d",
                physical_address,
                self.transaction_size,
            )

        address = physical_address >> self.byte_offset_bits
        address >>= self.col_low_bits

        _log.debug(
            "Bit widths: ch:%d r:%d b:%d row:%d colLow:%d colHigh:%d off:%d Total:%d",
            self.channel_bits,
            self.rank_bits,
            self.bank_bits,
            self.row_bits,
            self.col_low_bits,
            self.col_high_bits,
            self.byte_offset_bits,
            self.channel_bits
            + self.rank_bits
            + self.bank_bits
            + self.row_bits
            + self.col_low_bits
            + self.col_high_bits
            + self.byte_offset_bits,
        )

        try:
            order = _FIELD_ORDER[self.scheme]
        except KeyError:
            raise ValueError("Unknown Address Mapping Scheme") from None

        widths = self._widths()
        fields = dict.fromkeys(("channel", "rank", "bank", "row", "column"), 0)
        for name in order:
            bits, address = take_bits(address, widths[name])
            if name == "bank_in_group":
                fields["bank"] = bits
            elif name == "bankgroup":
                fields["bank"] |= bits << widths["bank_in_group"]
            else:
                fields[name] = bits

        decoded = DecodedAddress(**fields)
        _log.debug(
            "Mapped Ch=%d Rank=%d Bank=%d Row=%d Col=%d",
            decoded.channel,
            decoded.rank,
            decoded.bank,
            decoded.row,
            decoded.column,
        )
        return decoded

    def bankgroup_id(self, bank):
        """Return the bank group that ``bank`` belongs to."""
        return bank // self.banks_per_bankgroup

    def is_same_bankgroup(self, bank0, bank1):
        return self.bankgroup_id(bank0) == self.bankgroup_id(bank1)