"""Per-rank (or per-bank) queues of DRAM commands and the scheduler that drains them."""

from pimsim.bank import BankStateKind
from pimsim.bus_packet import BusPacket, BusPacketType
from pimsim.sysconfig import DramMode, QueuingStructure, SchedulingPolicy

__all__ = ["CommandQueueError", "CommandQueue"]

_BARRIER = "BAR"


class CommandQueueError(Exception):
    """Raised when the command queue is used in a way it does not allow."""


def _is_barrier(packet):
    return _BARRIER in packet.tag


class CommandQueue:
    """Holds pending commands and picks the next one that may be issued on the bus.

    ``bank_states`` is indexed ``[rank][bank]`` and is shared with the memory
    controller.  ``rank_modes`` holds the current :class:`DramMode` of each rank;
    when omitted every rank is in single-bank mode.
    """

    def __init__(self, bank_states, config, rank_modes=None):
        self.bank_states = bank_states
        self.num_ranks = config.num_ranks
        self.num_banks = config.num_banks
        self.cmd_queue_depth = config.cmd_queue_depth
        self.xaw = config.xaw
        self.total_row_accesses = config.total_row_accesses
        self.scheduling_policy = config.scheduling_policy
        self.queuing_structure = config.queuing_structure
        self.rank_modes = (
            [DramMode.SB] * self.num_ranks if rank_modes is None else rank_modes
        )
        self.current_clock_cycle = 0

        if self.queuing_structure is QueuingStructure.PER_RANK:
            queues_per_rank = 1
        elif self.queuing_structure is QueuingStructure.PER_RANK_PER_BANK:
            queues_per_rank = self.num_banks
        else:
            raise CommandQueueError("Unknown queuing structure")

        self.queues = [[[] for _ in range(queues_per_rank)] for _ in range(self.num_ranks)]
        # Counters that keep rows from staying open too long.
        self.row_access_counters = [[0] * self.num_banks for _ in range(self.num_ranks)]
        # Decrementing counters of activations within the X-bank activation window.
        self.txaw_countdown = [[] for _ in range(self.num_ranks)]

        self._next_rank = 0
        self._next_bank = 0
        self._next_rank_pre = 0
        self._next_bank_pre = 0
        self.refresh_rank = 0
        self.refresh_waiting = False

    def queue_for(self, rank, bank):
        """Return the queue holding commands for ``rank`` and ``bank``."""
        if self.queuing_structure is QueuingStructure.PER_RANK_PER_BANK:
            return self.queues[rank][bank]
        return self.queues[rank][0]

    def enqueue(self, packet):
        """Append ``packet`` to its queue; raise if the queue is already full."""
        queue = self.queue_for(packet.rank, packet.bank)
        if len(queue) >= self.cmd_queue_depth:
            raise CommandQueueError(
                "Enqueued more than allowed in command queue; "
                "call has_room_for(count, rank, bank) first"
            )
        queue.append(packet)

    def has_room_for(self, count, rank, bank):
        """Return True if ``count`` more packets fit in the queue of ``rank`` and ``bank``."""
        return self.cmd_queue_depth - len(self.queue_for(rank, bank)) >= count

    def is_empty(self, rank):
        """Return True if no command is pending for ``rank``."""
        return not any(self.queues[rank])

    def need_refresh(self, rank):
        """Mark ``rank`` as needing a refresh."""
        self.refresh_waiting = True
        self.refresh_rank = rank

    def step(self):
        """Advance the queue's clock by one cycle."""
        self.current_clock_cycle += 1

    def _advance(self, rank, bank):
        if self.scheduling_policy is SchedulingPolicy.RANK_THEN_BANK_ROUND_ROBIN:
            rank += 1
            if rank == self.num_ranks:
                rank = 0
                bank += 1
                if bank == self.num_banks:
                    bank = 0
        elif self.scheduling_policy is SchedulingPolicy.BANK_THEN_RANK_ROUND_ROBIN:
            bank += 1
            if bank == self.num_banks:
                bank = 0
                rank += 1
                if rank == self.num_ranks:
                    rank = 0
        else:
            raise CommandQueueError("Unknown scheduling policy")
        return rank, bank

    def is_issuable(self, packet):
        """Return True if ``packet`` may be issued in the current cycle."""
        kind = packet.packet_type
        if kind in (BusPacketType.REF, BusPacketType.RFCSB):
            return True

        state = self.bank_states[packet.rank][packet.bank]
        now = self.current_clock_cycle

        if kind is BusPacketType.ACTIVATE:
            if self.rank_modes[packet.rank] is not DramMode.SB and packet.bank >= 2:
                return False
            return (
                state.current_state in (BankStateKind.IDLE, BankStateKind.REFRESHING)
                and now >= state.next_activate
                and len(self.txaw_countdown[packet.rank]) < self.xaw
            )
        if kind in (BusPacketType.READ, BusPacketType.WRITE):
            ready = state.next_read if kind is BusPacketType.READ else state.next_write
            return (
                state.current_state is BankStateKind.ROW_ACTIVE
                and now >= ready
                and packet.row == state.open_row_address
                and self.row_access_counters[packet.rank][packet.bank] < self.total_row_accesses
            )
        if kind is BusPacketType.PRECHARGE:
            return state.current_state is BankStateKind.ROW_ACTIVE and now >= state.next_precharge
        raise CommandQueueError(f"Trying to issue a crazy bus packet type: {packet.describe()}")

    def process_refresh(self):
        """Return a precharge or refresh for the rank awaiting refresh, or None."""
        if not self.refresh_waiting:
            return None
        rank = self.refresh_rank
        send_ref = True
        for bank, state in enumerate(self.bank_states[rank][: self.num_banks]):
            if state.current_state is BankStateKind.ROW_ACTIVE:
                send_ref = False
                packet = BusPacket(
                    BusPacketType.PRECHARGE, 0, 0, state.open_row_address, rank, bank
                )
                if self.is_issuable(packet):
                    return packet
        if send_ref:
            packet = BusPacket(BusPacketType.REF, 0, 0, 0, rank, 0)
            if self.is_issuable(packet):
                self.refresh_waiting = False
                return packet
        return None

    def _depends_on_earlier(self, queue, index):
        packet = queue[index]
        for earlier in queue[:index]:
            if (
                earlier.bank == packet.bank
                and earlier.row == packet.row
                and earlier.column == packet.column
            ):
                return True
            if _is_barrier(earlier):
                return True
        return False

    def _pick_from(self, queue):
        for index, packet in enumerate(queue):
            if not self.is_issuable(packet):
                continue
            if index != 0 and _is_barrier(packet):
                break
            if not self._depends_on_earlier(queue, index):
                del queue[index]
                return packet

        for index, packet in enumerate(queue):
            if index != 0 and _is_barrier(packet):
                break
            if self.bank_states[packet.rank][packet.bank].current_state is BankStateKind.IDLE:
                activate = BusPacket(
                    BusPacketType.ACTIVATE,
                    packet.physical_address,
                    packet.column,
                    packet.row,
                    packet.rank,
                    packet.bank,
                    tag=packet.tag,
                )
                if self.is_issuable(activate):
                    return activate
        return None

    def process_command(self):
        """Return a queued read/write or an activate it needs, scanning round robin."""
        start = (self._next_rank, self._next_bank)
        while True:
            packet = self._pick_from(self.queue_for(self._next_rank, self._next_bank))
            if packet is not None:
                return packet
            if self.queuing_structure is QueuingStructure.PER_RANK:
                self._next_rank = (self._next_rank + 1) % self.num_ranks
            else:
                self._next_rank, self._next_bank = self._advance(
                    self._next_rank, self._next_bank
                )
            if (self._next_rank, self._next_bank) == start:
                return None

    def process_precharge(self):
        """Return a precharge for an open row no queued command still needs, or None."""
        start = (self._next_rank_pre, self._next_bank_pre)
        while True:
            rank, bank = self._next_rank_pre, self._next_bank_pre
            found = False
            for packet in self.queue_for(rank, bank):
                state = self.bank_states[packet.rank][packet.bank]
                if (
                    packet.rank == rank
                    and packet.bank == bank
                    and state.current_state is BankStateKind.ROW_ACTIVE
                    and packet.row == state.open_row_address
                ):
                    found = True
                if _is_barrier(packet):
                    break
            if not found:
                precharge = BusPacket(
                    BusPacketType.PRECHARGE,
                    0,
                    0,
                    self.bank_states[rank][bank].open_row_address,
                    rank,
                    bank,
                )
                if self.is_issuable(precharge):
                    return precharge
            self._next_rank_pre, self._next_bank_pre = self._advance(rank, bank)
            if (self._next_rank_pre, self._next_bank_pre) == start:
                return None

    def pop(self):
        """Return the next command to issue this cycle, or None."""
        if self.queuing_structure is QueuingStructure.PER_RANK_PER_BANK:
            raise CommandQueueError("queuing structure per_rank_per_bank is not allowed")

        for rank, countdown in enumerate(self.txaw_countdown):
            countdown = [value - 1 for value in countdown]
            if countdown and countdown[0] == 0:
                countdown.pop(0)
            self.txaw_countdown[rank] = countdown

        for process in (self.process_refresh, self.process_command, self.process_precharge):
            packet = process()
            if packet is not None:
                return packet
        return None

    def describe(self):
        """Return a dump of every queue's contents."""
        lines = []
        if self.queuing_structure is QueuingStructure.PER_RANK:
            lines.append("\n== Printing Per Rank Queue")
            for rank, per_rank in enumerate(self.queues):
                queue = per_rank[0]
                lines.append(f" = Rank {rank}  size : {len(queue)}")
                lines.extend(f"    {i}]{packet.describe()}" for i, packet in enumerate(queue))
        else:
            lines.append("\n== Printing Per Rank, Per Bank Queue")
            for rank, per_rank in enumerate(self.queues):
                lines.append(f" = Rank {rank}")
                for bank, queue in enumerate(per_rank):
                    lines.append(f"    Bank {bank}   size : {len(queue)}")
                    lines.extend(
                        f"       {i}]{packet.describe()}" for i, packet in enumerate(queue)
                    )
        return "\n".join(lines)