"""Per-bank timing state and sparse functional storage."""

import logging
from dataclasses import dataclass
from enum import Enum

from pimsim.burst import Burst
from pimsim.bus_packet import BusPacketType

__all__ = ["BankStateKind", "BankState", "Bank"]

_log = logging.getLogger(__name__)


class BankStateKind(Enum):
    IDLE = 0
    ROW_ACTIVE = 1
    PRECHARGING = 2
    REFRESHING = 3
    POWER_DOWN = 4


_STATE_NAMES = {
    BankStateKind.IDLE: "Idle",
    BankStateKind.ROW_ACTIVE: "Active",
    BankStateKind.REFRESHING: "Refreshing",
    BankStateKind.POWER_DOWN: "Power Down",
}

_SHORT_NAMES = {
    BankStateKind.IDLE: "idle",
    BankStateKind.PRECHARGING: "pre",
    BankStateKind.REFRESHING: "ref",
    BankStateKind.POWER_DOWN: "lowp",
}


@dataclass
class BankState:
    """Timing state of one bank; every bank starts precharged and idle."""

    current_state: BankStateKind = BankStateKind.IDLE
    open_row_address: int = 0
    next_read: int = 0
    next_write: int = 0
    next_activate: int = 0
    next_precharge: int = 0
    next_power_up: int = 0
    last_command: BusPacketType = BusPacketType.READ
    state_change_countdown: int = 0

    def describe(self):
        """Return a multi-line dump of the state."""
        lines = [" == Bank State "]
        name = _STATE_NAMES.get(self.current_state)
        if name is not None:
            lines.append(f"    State : {name}")
        lines += [
            f"    OpenRowAddress : {self.open_row_address}",
            f"    nextRead       : {self.next_read}",
            f"    nextWrite      : {self.next_write}",
            f"    nextActivate   : {self.next_activate}",
            f"    nextPrecharge  : {self.next_precharge}",
            f"    nextPowerUp    : {self.next_power_up}",
        ]
        return "\n".join(lines)

    def show_state(self):
        """Return the short bracketed form of the state."""
        if self.current_state is BankStateKind.ROW_ACTIVE:
            return f"[{self.open_row_address}] "
        return f"[{_SHORT_NAMES[self.current_state]}] "


class Bank:
    """Sparse storage of written bursts, addressed by column and row."""

    def __init__(self, num_cols):
        self.num_cols = num_cols
        self.state = BankState()
        self._cells = {}

    def read(self, packet):
        """Load stored data into ``packet`` and return it; None if never written."""
        data = self._cells.get((packet.column, packet.row))
        if data is not None:
            packet.data = data
        return data

    def write(self, packet):
        """Store the packet's data at its column and row."""
        if packet.column >= self.num_cols:
            raise ValueError(f"Bus Packet column {packet.column} out of bounds")
        key = (packet.column, packet.row)
        if key not in self._cells:
            self._cells[key] = packet.data if packet.data is not None else Burst()
            return
        if packet.data is None:
            raise ValueError("cannot overwrite a stored burst with a packet carrying no data")
        self._cells[key] = packet.data
        _log.debug(
            " -- Bank %d writing to physical address 0x%x:%s",
            packet.bank,
            packet.physical_address,
            packet.data.fp16_str(),
        )