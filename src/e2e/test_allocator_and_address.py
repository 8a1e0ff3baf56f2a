# src/e2e/test_allocator_and_address.py

import pytest

from prefixstore.address import AddressCodec
from prefixstore.allocator import IdAllocator
from prefixstore.errors import MalformedAddress


def test_same_text_gets_same_id():
    alloc = IdAllocator()
    a = alloc.allocate("bat")
    b = alloc.allocate("bath")
    assert (a, b) == (1, 2)
    assert alloc.allocate("bat") == 1
    assert alloc.next_id == 3
    assert len(alloc) == 2


def test_lookup_is_read_only():
    alloc = IdAllocator()
    assert alloc.lookup("bat") is None
    assert alloc.next_id == 1
    alloc.allocate("bat")
    assert alloc.lookup("bat") == 1


def test_reset_and_state_roundtrip():
    alloc = IdAllocator(first_id=5)
    alloc.allocate("x"); alloc.allocate("y")
    state = alloc.state()
    assert state == {"next_id": 7, "text_to_id": {"x": 5, "y": 6}}

    alloc.reset()
    assert alloc.lookup("x") is None
    assert alloc.allocate("z") == 5

    other = IdAllocator()
    other.load_state(state["next_id"], state["text_to_id"])
    assert other.allocate("x") == 5
    assert other.allocate("fresh") == 7


def test_encode_decode():
    codec = AddressCodec()
    assert codec.encode("ba", 1) == "ba_1"
    assert codec.decode("ba_1") == ("ba", 1)
    assert codec.decode("_0") == ("", 0)


def test_key_may_contain_separator():
    codec = AddressCodec()
    addr = codec.encode("a_b_", 12)
    assert addr == "a_b__12"
    assert codec.decode(addr) == ("a_b_", 12)


@pytest.mark.parametrize("bad", [
    "not-a-real-address",
    "ba_",
    "ba_x",
    "ba_01",
    "ba_-1",
    "ba_1.0",
    "ba_١",      # arabic-indic digit one
    "",
])
def test_malformed_addresses(bad):
    with pytest.raises(MalformedAddress):
        AddressCodec().decode(bad)


def test_non_string_address_is_malformed():
    with pytest.raises(MalformedAddress):
        AddressCodec().decode(42)  # type: ignore[arg-type]


def test_custom_separator():
    codec = AddressCodec(":")
    assert codec.encode("ba", 3) == "ba:3"
    assert codec.decode("b_a:3") == ("b_a", 3)
    with pytest.raises(MalformedAddress):
        codec.decode("ba_3")


@pytest.mark.parametrize("sep", ["", "7"])
def test_bad_separator_rejected(sep):
    with pytest.raises(ValueError):
        AddressCodec(sep)
