"""32-byte data bursts and numpy-backed collections of them."""

import math

import numpy as np

__all__ = ["Burst", "NumpyBurst", "BURST_BYTES"]

BURST_BYTES = 32

_FP16 = np.dtype("<f2")
_FP32 = np.dtype("<f4")
_U16 = np.dtype("<u2")
_U32 = np.dtype("<u4")


def _format_float(value):
    """Format a float the way a default-configured output stream does."""
    return f"{float(value):g}"


def _checked_count(arr, count, what):
    arr = np.asarray(arr).ravel()
    if arr.size != count:
        raise ValueError(f"{what} burst needs {count} values, got {arr.size}")
    return arr


def _unsigned_array(values, count, dtype):
    items = [int(v) for v in np.asarray(values, dtype=object).ravel()]
    if len(items) != count:
        raise ValueError(f"burst needs {count} values, got {len(items)}")
    limit = 1 << (8 * dtype.itemsize)
    for item in items:
        if not 0 <= item < limit:
            raise ValueError(f"value {item} does not fit in {8 * dtype.itemsize} bits")
    return np.array(items, dtype=dtype)


class Burst:
    """Immutable 32 bytes of data, viewable as fp16, fp32, u16, u32 or u8 lanes."""

    __slots__ = ("_raw",)

    def __init__(self, raw=None):
        raw = bytes(BURST_BYTES) if raw is None else bytes(raw)
        if len(raw) != BURST_BYTES:
            raise ValueError(f"a burst holds {BURST_BYTES} bytes, got {len(raw)}")
        self._raw = raw

    @property
    def raw(self):
        """The burst's 32 bytes."""
        return self._raw

    @classmethod
    def from_fp32(cls, values):
        arr = _checked_count(np.asarray(values, dtype=np.float32), 8, "an fp32")
        return cls(arr.astype(_FP32).tobytes())

    @classmethod
    def from_fp16(cls, values):
        arr = np.asarray(values)
        if arr.dtype != np.float16:
            arr = arr.astype(np.float32).astype(np.float16)
        arr = _checked_count(arr, 16, "an fp16")
        return cls(arr.astype(_FP16).tobytes())

    @classmethod
    def from_u32(cls, values):
        return cls(_unsigned_array(values, 8, _U32).tobytes())

    @classmethod
    def from_u16(cls, values):
        return cls(_unsigned_array(values, 16, _U16).tobytes())

    @classmethod
    def filled_fp32(cls, value):
        return cls.from_fp32([value] * 8)

    @classmethod
    def filled_fp16(cls, value):
        return cls.from_fp16([value] * 16)

    @classmethod
    def filled_u32(cls, value):
        return cls.from_u32([value] * 8)

    @classmethod
    def random(cls, rng=None):
        """Burst of 16 halves drawn uniformly from [-10, 10)."""
        rng = np.random.default_rng() if rng is None else rng
        values = rng.uniform(-10.0, 10.0, 16).astype(np.float32)
        return cls.from_fp16(values.astype(np.float16))

    def fp16_values(self):
        return np.frombuffer(self._raw, dtype=_FP16).astype(np.float16)

    def fp32_values(self):
        return np.frombuffer(self._raw, dtype=_FP32).astype(np.float32)

    def u16_values(self):
        return np.frombuffer(self._raw, dtype=_U16).astype(np.uint16)

    def u32_values(self):
        return np.frombuffer(self._raw, dtype=_U32).astype(np.uint32)

    def bin_str(self):
        return "[" + "".join(f"{int(v):016b}" for v in self.u16_values()) + "]"

    def hex_str(self):
        return "".join(f"{int(v):04x}" for v in self.u16_values())

    def hex_str_u8(self):
        return self._raw.hex()

    def hex_str_reversed(self):
        return "".join(f"{int(v):04x}" for v in reversed(self.u16_values()))

    def hex_range(self, start, end):
        """Hex of the 16-bit lanes ``start`` through ``end`` inclusive."""
        lanes = self.u16_values()[start : end + 1]
        return "".join(f"{int(v):04x}" for v in lanes)

    def hex_range_u8(self, start, end):
        """Hex of bytes ``start`` through ``end`` inclusive."""
        return self._raw[start : end + 1].hex()

    def fp32_str(self):
        return "[ " + "".join(_format_float(v) + " " for v in self.fp32_values()) + "]"

    def fp16_str(self):
        values = self.fp16_values().astype(np.float32)
        return "[ " + "".join(_format_float(v) + " " for v in values) + "]"

    def fp16_similar(self, other, epsilon):
        """True unless some lane's relative excess over ``other`` exceeds ``epsilon``."""
        mine = self.fp16_values().astype(np.float32)
        theirs = other.fp16_values().astype(np.float32)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            ratio = (mine - theirs) / mine
        return not bool(np.any(ratio > np.float32(epsilon)))

    def fp16_reduce_sum(self):
        total = np.float16(0.0)
        with np.errstate(over="ignore", invalid="ignore"):
            for value in self.fp16_values():
                total = np.float16(total + value)
        return total

    def fp16_adder_tree(self):
        level = list(self.fp16_values())
        with np.errstate(over="ignore", invalid="ignore"):
            while len(level) > 1:
                level = [np.float16(a + b) for a, b in zip(level[::2], level[1::2])]
        return level[0]

    def fp32_reduce_sum(self):
        total = np.float32(0.0)
        with np.errstate(over="ignore", invalid="ignore"):
            for value in self.fp32_values():
                total = np.float32(total + value)
        return total

    def __eq__(self, other):
        if not isinstance(other, Burst):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self):
        return hash(self._raw)

    def __add__(self, other):
        if not isinstance(other, Burst):
            return NotImplemented
        with np.errstate(over="ignore", invalid="ignore"):
            result = self.fp16_values() + other.fp16_values()
        return Burst(result.astype(_FP16).tobytes())

    def __mul__(self, other):
        if not isinstance(other, Burst):
            return NotImplemented
        with np.errstate(over="ignore", invalid="ignore"):
            result = self.fp16_values() * other.fp16_values()
        return Burst(result.astype(_FP16).tobytes())

    def __repr__(self):
        return f"Burst({self.hex_str()})"


def _chunks(values, size):
    """Split a flat array into rows of ``size``, zero-padding the last one."""
    values = np.asarray(values)
    remainder = values.size % size
    if remainder:
        values = np.concatenate([values, np.zeros(size - remainder, dtype=values.dtype)])
    return values.reshape(-1, size)


class NumpyBurst:
    """An array loaded from a ``.npy`` file and split into bursts."""

    def __init__(self):
        self.shape = []
        self.data = np.zeros(0, dtype=np.float32)
        self.u16_data = np.zeros(0, dtype=np.uint16)
        self.b_shape = []
        self.b_data = []

    def get_burst(self, x, y=None):
        """Return burst ``x``, or burst ``(x, y)`` of a two-dimensional layout."""
        if y is None:
            return self.b_data[x]
        return self.b_data[y * self.b_shape[1] + x]

    def _set_burst_shape(self, lanes):
        self.b_shape = list(self.shape)
        if self.b_shape:
            self.b_shape[-1] = -(-self.b_shape[-1] // lanes)

    def _load(self, filename):
        arr = np.load(filename, allow_pickle=False)
        self.shape = list(arr.shape)
        return arr

    def load_fp32(self, filename):
        arr = self._load(filename)
        self.data = np.asarray(arr, dtype=np.float32).ravel()
        self._set_burst_shape(8)
        self.b_data = [Burst.from_fp32(row) for row in _chunks(self.data, 8)]

    def load_fp16(self, filename):
        arr = self._load(filename)
        if arr.dtype.itemsize != 2 or arr.dtype.kind not in "uif":
            raise ValueError(f"expected 16-bit data in {filename}, found {arr.dtype}")
        self.u16_data = np.ascontiguousarray(arr).view(np.uint16).ravel()
        self._set_burst_shape(16)
        self.b_data = [Burst.from_u16(row) for row in _chunks(self.u16_data, 16)]

    def load_fp16_from_fp32(self, filename):
        arr = self._load(filename)
        self.data = np.asarray(arr, dtype=np.float32).ravel()
        self._set_burst_shape(16)
        halves = self.data.astype(np.float16)
        self.b_data = [Burst.from_fp16(row) for row in _chunks(halves, 16)]

    def dump_fp16(self, filename):
        """Write every 16-bit lane as a decimal number followed by a space."""
        with open(filename, "w", encoding="ascii") as handle:
            for burst in self.b_data:
                handle.write("".join(f"{int(v)} " for v in burst.u16_values()))

    def dump_int8(self, filename):
        """Write the raw bytes of every burst."""
        with open(filename, "wb") as handle:
            handle.write(b"".join(burst.raw for burst in self.b_data))

    def copy_bursts(self, bursts):
        bursts = list(bursts)
        self.b_shape.append(len(bursts))
        self.b_data.extend(bursts)

    def total_dim(self):
        return math.prod(self.b_shape)