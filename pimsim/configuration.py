"""Snapshot of the simulator parameters with derived timing delays."""

from dataclasses import dataclass

__all__ = ["DebugFlags", "OutputFlags", "Configuration"]

_U32_MASK = 0xFFFFFFFF


def _u32(value):
    return value & _U32_MASK


@dataclass(frozen=True)
class DebugFlags:
    """Which debug traces are switched on."""

    pim_block: bool = False
    trans_q: bool = False
    cmd_q: bool = False
    addr_map: bool = False
    bankstate: bool = False
    bus: bool = False
    banks: bool = False
    power: bool = False
    cmd_trace: bool = False
    pim_time: bool = False


@dataclass(frozen=True)
class OutputFlags:
    """Which outputs the simulator produces."""

    print_chan_stat: bool = False
    vis_file_output: bool = False
    verification_output: bool = False
    show_sim_output: bool = False
    log_output: bool = False
    sim_trace_file: str = ""


class Configuration:
    """Device and system parameters read once from a :class:`SystemConfiguration`."""

    def __init__(self, system, address_mapping):
        uint = system.get_uint
        self.al = uint("AL")
        self.bl = uint("BL")
        self.cmd_queue_depth = uint("CMD_QUEUE_DEPTH")
        self.device_width = uint("DEVICE_WIDTH")
        self.epoch_length = uint("EPOCH_LENGTH")
        self.histogram_bin_size = uint("HISTOGRAM_BIN_SIZE")
        self.jedec_data_bus_bits = uint("JEDEC_DATA_BUS_BITS")
        self.num_banks = uint("NUM_BANKS")
        self.num_cols = uint("NUM_COLS")
        self.num_chans = uint("NUM_CHANS")
        self.num_pim_blocks = uint("NUM_PIM_BLOCKS")
        self.num_ranks = uint("NUM_RANKS")
        self.num_rows = uint("NUM_ROWS")
        self.rl = uint("RL")
        self.t_ccdl = uint("tCCDL")
        self.t_ccds = uint("tCCDS")
        self.t_ck = system.get_float("tCK")
        self.t_cmd = uint("tCMD")
        self.t_cke = uint("tCKE")
        self.t_ras = uint("tRAS")
        self.t_rc = uint("tRC")
        self.t_rcdrd = uint("tRCDRD")
        self.t_rcdwr = uint("tRCDWR")
        self.t_refi = uint("tREFI")
        self.t_refisb = uint("tREFISB")
        self.t_rfc = uint("tRFC")
        self.t_rp = uint("tRP")
        self.t_rrdl = uint("tRRDL")
        self.t_rrds = uint("tRRDS")
        self.t_rtp = uint("tRTP")
        self.t_rtpl = uint("tRTPL")
        self.t_rtps = uint("tRTPS")
        self.t_rtrs = uint("tRTRS")
        self.t_wr = uint("tWR")
        self.t_wtrl = uint("tWTRL")
        self.t_wtrs = uint("tWTRS")
        self.t_xp = uint("tXP")
        self.total_row_accesses = uint("TOTAL_ROW_ACCESSES")
        self.trans_queue_depth = uint("TRANS_QUEUE_DEPTH")
        self.wl = uint("WL")
        self.xaw = uint("XAW")

        self.pim_mode = system.pim_mode()
        self.pim_precision = system.pim_precision()
        self.row_buffer_policy = system.row_buffer_policy()
        self.scheduling_policy = system.scheduling_policy()
        self.queuing_structure = system.queuing_structure()
        self.address_mapping_scheme = system.address_mapping_scheme()

        half_burst = self.bl // 2
        self.read_to_pre_delay = _u32(
            self.al + half_burst + max(self.t_rtpl, self.t_ccdl) - self.t_ccdl
        )
        self.read_to_pre_delay_long = self.read_to_pre_delay
        self.read_to_pre_delay_short = _u32(
            self.al + half_burst + max(self.t_rtps, self.t_ccds) - self.t_ccds
        )
        self.write_to_pre_delay = _u32(self.wl + half_burst + self.t_wr)
        self.read_to_write_delay = _u32(self.rl + half_burst + self.t_rtrs - self.wl)
        self.read_autopre_delay = _u32(self.al + self.t_rtp + self.t_rp)
        self.write_autopre_delay = _u32(self.wl + half_burst + self.t_wr + self.t_rp)
        self.write_to_read_delay_b_long = _u32(self.wl + half_burst + self.t_wtrl)
        self.write_to_read_delay_b_short = _u32(self.wl + half_burst + self.t_wtrs)
        self.write_to_read_delay_r = max(self.wl + half_burst + self.t_rtrs - self.rl, 0)

        if self.num_chans == 0:
            raise ValueError("Not allowed zero channel")

        self.debug = self._read_debug_flags(system)
        self.output = self._read_output_flags(system)
        self.address_mapping = address_mapping

    @staticmethod
    def _read_debug_flags(system):
        flag = system.get_bool
        return DebugFlags(
            pim_block=flag("DEBUG_PIM_BLOCK"),
            trans_q=flag("DEBUG_TRANS_Q"),
            cmd_q=flag("DEBUG_CMD_Q"),
            addr_map=flag("DEBUG_ADDR_MAP"),
            bankstate=flag("DEBUG_BANKSTATE"),
            bus=flag("DEBUG_BUS"),
            banks=flag("DEBUG_BANKS"),
            power=flag("DEBUG_POWER"),
            cmd_trace=flag("DEBUG_CMD_TRACE"),
            pim_time=flag("DEBUG_PIM_TIME"),
        )

    @staticmethod
    def _read_output_flags(system):
        flag = system.get_bool
        return OutputFlags(
            print_chan_stat=flag("PRINT_CHAN_STAT"),
            vis_file_output=flag("VIS_FILE_OUTPUT"),
            verification_output=flag("VERIFICATION_OUTPUT"),
            show_sim_output=flag("SHOW_SIM_OUTPUT"),
            log_output=flag("LOG_OUTPUT"),
            sim_trace_file=system.get_string("SIM_TRACE_FILE"),
        )