# pimsim

Building blocks for a cycle-level simulator of DRAM channels with
processing-in-memory (PIM) units: configuration, address decoding, data
bursts, bus commands, bank state and the command scheduler.

## Modules

- `pimsim.fp16`: half-precision helpers built on numpy's `float16`.
  `to_half` rounds a number to half precision through float32.
  `half_to_bits` and `bits_to_half` convert between a half and its 16-bit
  pattern. `fp16_equal(a, b, max_ulps_diff, max_fs_diff)` treats two halves
  as equal when their bit patterns are within `max_ulps_diff` of each other
  or their absolute difference is below `max_fs_diff`.
- `pimsim.params`: reads `KEY = value ; comment` parameter files. Spaces and
  tabs are removed, and lines that start with `;` are skipped. A line that
  does not hold exactly one `=`, or that has an empty key or value, raises
  `ParameterReaderError`. The entry points are `read_parameters(filename)`,
  `parse_parameter_lines(lines, filename)` and `ParameterReader(filename).read()`.
  Each returns a list of `(key, value)` pairs.
- `pimsim.sysconfig`: `SystemConfiguration` is a key/value store.
  - `set(key, value, param_type)` stores a value, and `load(filename, param_type)` stores every parameter in a file. `ParamType` is `DEV_PARAM` or `SYS_PARAM`.
  - Typed getters are `get_string`, `get_uint`, `get_uint64`, `get_float` and `get_bool`. The numeric getters return 0 for unset keys. `get_bool` is true only for the value `true`. `get_string` raises `KeyError` for an unset key.
  - Methods such as `address_mapping_scheme()`, `scheduling_policy()`, `queuing_structure()`, `row_buffer_policy()`, `pim_mode()`, `pim_precision()` and `pim_data_length()` turn string settings into the enums of the module. They raise `ValueError` on unknown values.
  - The module also defines `DramMode` and `PimBankType`.
- `pimsim.configuration`: `Configuration(system, address_mapping)` reads the device timings once. It computes the derived delays, such as `read_to_pre_delay`, `write_to_pre_delay`, `read_to_write_delay` and `write_to_read_delay_r`. The debug switches go into `DebugFlags` and the output switches into `OutputFlags`. It raises `ValueError` if `NUM_CHANS` is zero.
- `pimsim.address_mapping`: `AddressMapping(system).map(address)` decodes a physical address into a `DecodedAddress` with `channel`, `rank`, `bank`, `row` and `column`.
  - It supports mapping schemes 1 to 8. Unaligned addresses are logged as a warning.
  - `bankgroup_id` and `is_same_bankgroup` give bank-group membership.
  - `take_bits(address, width)` splits off the low bits of an address.
- `pimsim.burst`: `Burst` is an immutable 32-byte burst.
  - It can be viewed as 16 fp16, 8 fp32, 16 u16 or 8 u32 lanes. Build one with `from_fp16`, `from_fp32`, `from_u16`, `from_u32`, the `filled_*` constructors or `random`.
  - It supports element-wise fp16 `+` and `*`, `fp16_reduce_sum`, `fp16_adder_tree`, `fp32_reduce_sum`, `fp16_similar` and several hex/binary/float string forms.
  - `NumpyBurst` loads `.npy` arrays into bursts with `load_fp32`, `load_fp16` or `load_fp16_from_fp32`, and writes them back with `dump_fp16` or `dump_int8`.
- `pimsim.clock`: `ClockDomainCrosser(callback)` calls `callback` from `update()` at the ratio `clock1 : clock2`, which is 1:1 by default.
- `pimsim.bus_packet`: `BusPacket` is a command or data transfer. Its type is a `BusPacketType`: READ, WRITE, ACTIVATE, PRECHARGE, REF, DATA or RFCSB. `describe()` gives a one-line summary, and `verification_line(cycle)` gives the command-trace line.
- `pimsim.bank`:
  - `BankState` holds the timing state of one bank: its `BankStateKind`, the open row, and the next allowed read, write, activate and precharge cycles.
  - `Bank(num_cols)` is sparse functional storage addressed by column and row. `read` returns `None` for cells that were never written.
- `pimsim.command_queue`: `CommandQueue(bank_states, config, rank_modes)` holds pending commands per rank, or per rank and bank.
  - `enqueue` raises `CommandQueueError` when a queue is full. Check `has_room_for` first.
  - `pop()` returns the next command to issue: a pending refresh (or the precharges it needs), then a ready read/write or the activate it waits for, then a precharge for an unneeded open row.
  - Tags containing `BAR` act as barriers.
  - `is_issuable` applies the bank timing rules, and `step()` advances the queue's clock.

## Installing

```
pip install .
```

## Example

```python
from pimsim.sysconfig import SystemConfiguration, ParamType
from pimsim.address_mapping import AddressMapping

system = SystemConfiguration()
for key, value in {
    "JEDEC_DATA_BUS_BITS": 64, "BL": 4, "NUM_CHANS": 16, "NUM_RANKS": 1,
    "NUM_BANKS": 16, "NUM_BANK_GROUPS": 4, "NUM_ROWS": 16384, "NUM_COLS": 128,
    "ADDRESS_MAPPING_SCHEME": "Scheme8",
}.items():
    system.set(key, value, ParamType.DEV_PARAM)
# or: system.load("device.ini", ParamType.DEV_PARAM)

mapping = AddressMapping(system)
decoded = mapping.map(0x12340)
print(decoded.channel, decoded.rank, decoded.bank, decoded.row, decoded.column)
```

```python
from pimsim.burst import Burst

a = Burst.filled_fp16(1.5)
b = Burst.filled_fp16(2.0)
print((a * b).fp16_reduce_sum())
```

## What it does not do

The package provides the parts of a channel simulator, but not a running simulator:

- It has no memory controller or transaction queue.
- It has no rank model and no PIM execution units.
- It has no top-level memory system or trace runner.
- It keeps no power or latency statistics.
- It has no command-line program.

## Running the tests

```
pip install .[test]
pytest
```