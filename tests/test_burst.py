import numpy as np
import pytest

from pimsim.burst import Burst, NumpyBurst


def test_default_burst_is_zero():
    burst = Burst()
    assert burst.raw == bytes(32)
    assert burst == Burst.from_u16([0] * 16)


def test_raw_length_is_checked():
    with pytest.raises(ValueError):
        Burst(b"\x00" * 31)


def test_fp32_round_trip():
    values = [1.5, -2.25, 0.0, 3.0, 100.5, -0.125, 7.0, 8.5]
    assert list(Burst.from_fp32(values).fp32_values()) == values


def test_u16_and_u32_round_trip():
    u16 = list(range(100, 116))
    u32 = [0, 1, 2**31, 2**32 - 1, 5, 6, 7, 8]
    assert [int(v) for v in Burst.from_u16(u16).u16_values()] == u16
    assert [int(v) for v in Burst.from_u32(u32).u32_values()] == u32


def test_wrong_lane_count_rejected():
    with pytest.raises(ValueError):
        Burst.from_fp32([1.0] * 7)
    with pytest.raises(ValueError):
        Burst.from_u16([1] * 17)


def test_out_of_range_integer_rejected():
    with pytest.raises(ValueError):
        Burst.from_u16([0x10000] + [0] * 15)
    with pytest.raises(ValueError):
        Burst.from_u32([-1] + [0] * 7)


def test_filled_constructors():
    assert all(v == np.float16(1.5) for v in Burst.filled_fp16(1.5).fp16_values())
    assert all(v == np.float32(2.5) for v in Burst.filled_fp32(2.5).fp32_values())
    assert all(int(v) == 7 for v in Burst.filled_u32(7).u32_values())


def test_hex_strings_are_little_endian():
    burst = Burst.from_u16([0xABCD] + [0] * 15)
    assert burst.hex_str().startswith("abcd")
    assert burst.hex_str_reversed().endswith("abcd")
    assert burst.hex_str_u8().startswith("cdab")
    assert len(burst.hex_str_u8()) == 64


def test_hex_ranges_are_inclusive():
    burst = Burst.from_u16(list(range(16)))
    assert burst.hex_range(0, 15) == burst.hex_str()
    assert burst.hex_range(0, 0) == burst.hex_str()[:4]
    assert burst.hex_range_u8(0, 31) == burst.hex_str_u8()
    assert burst.hex_range_u8(2, 3) == burst.hex_str_u8()[4:8]


def test_bin_str():
    burst = Burst.from_u16([1] + [0] * 15)
    text = burst.bin_str()
    assert text[0] == "[" and text[-1] == "]"
    assert len(text) == 2 + 16 * 16
    assert text[1:17] == "0000000000000001"


def test_float_strings():
    assert Burst().fp16_str() == "[ " + "0 " * 16 + "]"
    assert Burst.filled_fp32(1.5).fp32_str() == "[ " + "1.5 " * 8 + "]"


def test_sums():
    ones = Burst.filled_fp16(1.0)
    assert ones.fp16_reduce_sum() == np.float16(16.0)
    assert ones.fp16_adder_tree() == ones.fp16_reduce_sum()
    assert Burst.filled_fp32(2.0).fp32_reduce_sum() == np.float32(16.0)


def test_arithmetic_identities():
    burst = Burst.random(np.random.default_rng(1))
    assert burst + Burst() == burst
    assert burst * Burst.filled_fp16(1.0) == burst
    assert burst + burst == burst * Burst.filled_fp16(2.0)


def test_fp16_similar():
    a = Burst.filled_fp16(2.0)
    b = Burst.filled_fp16(1.0)
    assert a.fp16_similar(a, 0.0)
    assert not a.fp16_similar(b, 0.1)
    assert b.fp16_similar(a, 0.1)


def test_equality_and_hash():
    a = Burst.from_u16(list(range(16)))
    b = Burst.from_u16(list(range(16)))
    assert a == b
    assert hash(a) == hash(b)
    assert a != Burst()


def test_random_is_bounded_and_seeded():
    first = Burst.random(np.random.default_rng(42))
    second = Burst.random(np.random.default_rng(42))
    assert first == second
    values = first.fp16_values().astype(np.float32)
    assert np.all(values >= -10.0) and np.all(values <= 10.0)


def test_load_fp32(tmp_path):
    arr = np.arange(32, dtype=np.float32).reshape(2, 16)
    path = tmp_path / "a.npy"
    np.save(path, arr)
    nb = NumpyBurst()
    nb.load_fp32(path)
    assert nb.shape == [2, 16]
    assert nb.b_shape == [2, 2]
    assert len(nb.b_data) == 4
    assert list(nb.get_burst(1, 1).fp32_values()) == list(arr[1, 8:16])
    assert nb.total_dim() == len(nb.b_data)


def test_load_fp32_pads_last_burst(tmp_path):
    arr = np.arange(1, 11, dtype=np.float32)
    path = tmp_path / "b.npy"
    np.save(path, arr)
    nb = NumpyBurst()
    nb.load_fp32(path)
    assert nb.b_shape == [2]
    tail = list(nb.get_burst(1).fp32_values())
    assert tail[:2] == [9.0, 10.0]
    assert tail[2:] == [0.0] * 6


def test_load_fp16_and_from_fp32_agree(tmp_path):
    halves = np.linspace(-4, 4, 32).astype(np.float16)
    p16 = tmp_path / "h.npy"
    p32 = tmp_path / "f.npy"
    np.save(p16, halves)
    np.save(p32, halves.astype(np.float32))
    a = NumpyBurst()
    a.load_fp16(p16)
    b = NumpyBurst()
    b.load_fp16_from_fp32(p32)
    assert a.b_shape == b.b_shape == [2]
    assert a.b_data == b.b_data
    assert list(a.get_burst(0).fp16_values()) == list(halves[:16])


def test_load_fp16_rejects_wide_data(tmp_path):
    path = tmp_path / "w.npy"
    np.save(path, np.zeros(16, dtype=np.float32))
    with pytest.raises(ValueError):
        NumpyBurst().load_fp16(path)


def test_dumps(tmp_path):
    nb = NumpyBurst()
    bursts = [Burst.from_u16(list(range(16))), Burst.from_u16(list(range(16, 32)))]
    nb.copy_bursts(bursts)
    assert nb.b_shape == [2]
    assert nb.total_dim() == 2

    text_path = tmp_path / "out.txt"
    nb.dump_fp16(text_path)
    assert [int(t) for t in text_path.read_text().split()] == list(range(32))

    bin_path = tmp_path / "out.bin"
    nb.dump_int8(bin_path)
    assert bin_path.read_bytes() == bursts[0].raw + bursts[1].raw