import logging
import random

import pytest

from pimsim.address_mapping import AddressMapping, DecodedAddress, take_bits
from pimsim.sysconfig import AddressMappingScheme, ParamType, SystemConfiguration

_BASE = {
    "JEDEC_DATA_BUS_BITS": 64,
    "BL": 4,
    "NUM_CHANS": 1,
    "NUM_RANKS": 1,
    "NUM_BANKS": 16,
    "NUM_BANK_GROUPS": 4,
    "NUM_ROWS": 16384,
    "NUM_COLS": 32,
    "ADDRESS_MAPPING_SCHEME": "Scheme8",
}


def _system(**overrides):
    system = SystemConfiguration()
    for key, value in {**_BASE, **overrides}.items():
        system.set(key, value, ParamType.DEV_PARAM)
    return system


def _mapping(**overrides):
    return AddressMapping(_system(**overrides))


def test_take_bits_splits_and_recombines():
    for address in (0, 1, 0xABCDEF, 0xFFFFFFFFFFFFFFFF):
        for width in (0, 1, 5, 17):
            bits, rest = take_bits(address, width)
            assert bits < (1 << width) or (width == 0 and bits == 0)
            assert bits | (rest << width) == address


def test_take_bits_zero_width_returns_nothing():
    assert take_bits(0x1234, 0) == (0, 0x1234)


def test_take_bits_rejects_negative_width():
    with pytest.raises(ValueError):
        take_bits(5, -1)


def test_transaction_size_from_bus_and_burst():
    mapping = _mapping()
    assert mapping.transaction_size == 64 // 8 * 4
    assert mapping.transaction_mask == mapping.transaction_size - 1


def test_address_zero_maps_to_origin():
    for scheme in AddressMappingScheme:
        mapping = _mapping(ADDRESS_MAPPING_SCHEME=scheme.name.capitalize())
        assert mapping.map(0) == DecodedAddress(0, 0, 0, 0, 0)


@pytest.mark.parametrize("scheme", list(AddressMappingScheme))
def test_fields_stay_in_range(scheme):
    mapping = _mapping(
        ADDRESS_MAPPING_SCHEME=f"scheme{scheme.value}", NUM_CHANS=2, NUM_RANKS=2
    )
    rng = random.Random(7)
    for _ in range(200):
        index = rng.randrange(1 << 24)
        decoded = mapping.map(index * mapping.transaction_size)
        assert 0 <= decoded.channel < 2
        assert 0 <= decoded.rank < 2
        assert 0 <= decoded.bank < 16
        assert 0 <= decoded.row < 16384
        assert 0 <= decoded.column < (1 << mapping.col_high_bits)


@pytest.mark.parametrize("scheme", list(AddressMappingScheme))
def test_distinct_aligned_addresses_decode_distinctly(scheme):
    mapping = _mapping(ADDRESS_MAPPING_SCHEME=f"scheme{scheme.value}", NUM_RANKS=2)
    rng = random.Random(scheme.value)
    total_bits = (
        mapping.channel_bits
        + mapping.rank_bits
        + mapping.bank_bits
        + mapping.row_bits
        + mapping.col_high_bits
    )
    indices = rng.sample(range(1 << total_bits), 500)
    decoded = {mapping.map(i * mapping.transaction_size) for i in indices}
    assert len(decoded) == len(indices)


def test_column_is_lowest_field_in_scheme4():
    mapping = _mapping(ADDRESS_MAPPING_SCHEME="scheme4")
    for k in range(1 << mapping.col_high_bits):
        decoded = mapping.map(k * mapping.transaction_size)
        assert decoded.column == k
        assert decoded.bank == 0
        assert decoded.row == 0


def test_channel_is_lowest_field_in_scheme7():
    mapping = _mapping(ADDRESS_MAPPING_SCHEME="scheme7", NUM_CHANS=2)
    assert mapping.map(mapping.transaction_size).channel == 1
    other = _mapping(ADDRESS_MAPPING_SCHEME="scheme1", NUM_CHANS=2)
    assert other.map(other.transaction_size).channel == 0


def test_scheme8_bank_group_bits_above_bank_bits():
    mapping = _mapping(ADDRESS_MAPPING_SCHEME="scheme8")
    banks_in_group = 1 << (mapping.bank_bits - mapping.bankgroup_bits)
    step = mapping.transaction_size
    decoded = mapping.map(banks_in_group * step)
    assert mapping.bankgroup_id(decoded.bank) == 1
    assert decoded.bank == banks_in_group


def test_unaligned_address_logs_warning_and_drops_low_bits(caplog):
    mapping = _mapping()
    with caplog.at_level(logging.WARNING, logger="pimsim.address_mapping"):
        decoded = mapping.map(1)
    assert "not aligned" in caplog.text
    assert decoded == mapping.map(0)


def test_address_out_of_range_rejected():
    mapping = _mapping()
    with pytest.raises(ValueError):
        mapping.map(-1)
    with pytest.raises(ValueError):
        mapping.map(1 << 64)


def test_bankgroup_membership():
    mapping = _mapping()
    assert mapping.banks_per_bankgroup == 16 // 4
    assert mapping.is_same_bankgroup(0, 3)
    assert not mapping.is_same_bankgroup(3, 4)
    assert [mapping.bankgroup_id(b) for b in range(16)] == sorted(
        mapping.bankgroup_id(b) for b in range(16)
    )


def test_zero_bank_groups_rejected():
    with pytest.raises(ValueError):
        _mapping(NUM_BANK_GROUPS=0)


def test_invalid_scheme_rejected():
    with pytest.raises(ValueError):
        _mapping(ADDRESS_MAPPING_SCHEME="scheme9")