"""Half-precision helpers built on numpy's float16."""

import numpy as np

__all__ = ["to_half", "half_to_bits", "bits_to_half", "fp16_equal"]

_SIGN_BIT = 1 << 15


def to_half(value):
    """Convert a number to a half-precision value, rounding through float32 first."""
    return np.float16(np.float32(value))


def half_to_bits(value):
    """Return the 16-bit pattern of a half-precision value as an int."""
    return int(np.array(to_half(value), dtype=np.float16).view(np.uint16).item())


def bits_to_half(bits):
    """Interpret a 16-bit pattern as a half-precision value."""
    bits = int(bits)
    if not 0 <= bits <= 0xFFFF:
        raise ValueError(f"bit pattern {bits:#x} does not fit in 16 bits")
    return np.array(bits, dtype=np.uint16).view(np.float16)[()]


def fp16_equal(a, b, max_ulps_diff, max_fs_diff):
    """Compare two halves within a distance in ULPs or an absolute tolerance."""
    a = to_half(a)
    b = to_half(b)
    a_bits = half_to_bits(a)
    b_bits = half_to_bits(b)

    # Values of opposite sign are only equal when they compare equal (+0 and -0).
    if (a_bits & _SIGN_BIT) != (b_bits & _SIGN_BIT) and float(a) == float(b):
        return True

    ulps_diff = abs(a_bits - b_bits)
    fs_diff = abs(float(np.float32(a)) - float(np.float32(b)))
    if ulps_diff <= max_ulps_diff:
        return True
    return fs_diff < max_fs_diff