"""System configuration store and the enumerations it selects."""

import re
import struct
from dataclasses import dataclass
from enum import Enum, IntEnum

from pimsim.params import read_parameters

__all__ = [
    "AddressMappingScheme",
    "RowBufferPolicy",
    "QueuingStructure",
    "SchedulingPolicy",
    "PIMMode",
    "PIMPrecision",
    "DramMode",
    "PimBankType",
    "ParamType",
    "SystemConfiguration",
]


class AddressMappingScheme(IntEnum):
    SCHEME1 = 1
    SCHEME2 = 2
    SCHEME3 = 3
    SCHEME4 = 4
    SCHEME5 = 5
    SCHEME6 = 6
    SCHEME7 = 7
    SCHEME8 = 8


class RowBufferPolicy(Enum):
    OPEN_PAGE = 0
    CLOSE_PAGE = 1


class QueuingStructure(Enum):
    PER_RANK = 0
    PER_RANK_PER_BANK = 1


class SchedulingPolicy(Enum):
    RANK_THEN_BANK_ROUND_ROBIN = 0
    BANK_THEN_RANK_ROUND_ROBIN = 1


class PIMMode(Enum):
    MAC_IN_BANKGROUP = 0
    MAC_IN_BANK = 1


class PIMPrecision(Enum):
    FP16 = 0
    INT8 = 1
    FP32 = 2


class DramMode(Enum):
    SB = 0
    HAB = 1
    HAB_PIM = 2


class PimBankType(Enum):
    EVEN_BANK = 0
    ODD_BANK = 1
    ALL_BANK = 2


class ParamType(Enum):
    DEV_PARAM = 0
    SYS_PARAM = 1


_UINT64_LIMIT = 1 << 64
_INT_PREFIX = re.compile(r"\s*([+-]?)(\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def _parse_unsigned(text):
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not an unsigned integer: {text!r}")
    number = int(match.group(2))
    if number >= _UINT64_LIMIT:
        raise ValueError(f"integer out of range: {text!r}")
    if match.group(1) == "-":
        number = (-number) % _UINT64_LIMIT
    return number


def _parse_float32(text):
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not a float: {text!r}")
    value = float(match.group(0))
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as exc:
        raise ValueError(f"float out of range: {text!r}") from exc


def _format_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:f}"
    return str(value)


@dataclass
class _Entry:
    value: str
    param_type: ParamType


class SystemConfiguration:
    """Key/value store of device and system parameters with typed access."""

    def __init__(self):
        self._entries = {}

    def __contains__(self, key):
        return key in self._entries

    def set(self, key, value, param_type):
        """Store ``value`` under ``key``, replacing any earlier value."""
        self._entries[key] = _Entry(_format_value(value), ParamType(param_type))

    def load(self, filename, param_type):
        """Store every parameter read from ``filename``."""
        for key, value in read_parameters(filename):
            self.set(key, value, param_type)

    def get_string(self, key):
        try:
            return self._entries[key].value
        except KeyError:
            raise KeyError(f"configuration parameter {key!r} is not set") from None

    def get_uint(self, key):
        """Return the value as a 32-bit unsigned integer, or 0 when unset."""
        entry = self._entries.get(key)
        return 0 if entry is None else _parse_unsigned(entry.value) & 0xFFFFFFFF

    def get_uint64(self, key):
        """Return the value as a 64-bit unsigned integer, or 0 when unset."""
        entry = self._entries.get(key)
        return 0 if entry is None else _parse_unsigned(entry.value)

    def get_float(self, key):
        """Return the value as a single-precision float, or 0.0 when unset."""
        entry = self._entries.get(key)
        return 0.0 if entry is None else _parse_float32(entry.value)

    def get_bool(self, key):
        """Return True only when the value is exactly ``true``."""
        entry = self._entries.get(key)
        return entry is not None and entry.value == "true"

    def row_buffer_policy(self):
        param = self.get_string("ROW_BUFFER_POLICY")
        if param == "open_page":
            return RowBufferPolicy.OPEN_PAGE
        if param == "close_page":
            return RowBufferPolicy.CLOSE_PAGE
        raise ValueError("Invalid row buffer policy")

    def scheduling_policy(self):
        param = self.get_string("SCHEDULING_POLICY")
        if param == "rank_then_bank_round_robin":
            return SchedulingPolicy.RANK_THEN_BANK_ROUND_ROBIN
        if param == "bank_then_rank_round_robin":
            return SchedulingPolicy.BANK_THEN_RANK_ROUND_ROBIN
        raise ValueError("Invalid scheduling policy")

    def address_mapping_scheme(self):
        param = self.get_string("ADDRESS_MAPPING_SCHEME").lower()
        for scheme in AddressMappingScheme:
            if param == f"scheme{scheme.value}":
                return scheme
        raise ValueError("Invalid address mapping scheme")

    def queuing_structure(self):
        param = self.get_string("QUEUING_STRUCTURE")
        if param == "per_rank_per_bank":
            return QueuingStructure.PER_RANK_PER_BANK
        if param == "per_rank":
            return QueuingStructure.PER_RANK
        raise ValueError("Invalid queueing structure")

    def pim_mode(self):
        param = self.get_string("PIM_MODE")
        if param == "mac_in_bankgroup":
            return PIMMode.MAC_IN_BANKGROUP
        if param == "mac_in_bank":
            return PIMMode.MAC_IN_BANK
        raise ValueError("Invalid PIM mode")

    def pim_precision(self):
        param = self.get_string("PIM_PRECISION")
        try:
            return PIMPrecision[param]
        except KeyError:
            raise ValueError("Invalid PIM precision") from None

    def pim_data_length(self):
        """Return the size in bytes of one PIM operand."""
        lengths = {"FP16": 2, "INT8": 1, "FP32": 4}
        param = self.get_string("PIM_PRECISION")
        try:
            return lengths[param]
        except KeyError:
            raise ValueError("Invalid PIM data length") from None