import pytest

from cheesebase.hashing import hash_string, murmur3_32


def test_empty_input_seed_zero_is_zero():
    assert murmur3_32(b"", 0) == 0


def test_empty_input_seed_one_known_vector():
    assert murmur3_32(b"", 1) == 0x514E28B7


def test_hello_known_vector():
    assert hash_string("hello") == 613153351


def test_hash_string_matches_utf8_bytes():
    for text in ["", "a", "abc", "key_name", "grüße"]:
        assert hash_string(text) == murmur3_32(text.encode("utf-8"), 0)


def test_hash_string_accepts_bytes():
    assert hash_string(b"hello") == hash_string("hello")


def test_default_seed_is_zero():
    assert murmur3_32(b"abcdef") == murmur3_32(b"abcdef", 0)


@pytest.mark.parametrize("text", ["", "a", "ab", "abc", "abcd", "abcde", "x" * 300])
def test_result_is_unsigned_32_bit(text):
    value = hash_string(text)
    assert 0 <= value <= 0xFFFFFFFF


def test_known_vectors():
    assert hash_string("test") == 0xBA6BD213
    assert hash_string("The quick brown fox jumps over the lazy dog") == 0x2E4FF723


def test_seed_changes_result():
    assert murmur3_32(b"abc", 0) != murmur3_32(b"abc", 7)


def test_all_tail_lengths_distinct():
    values = {hash_string("abcdefgh"[:n]) for n in range(9)}
    assert len(values) == 9


def test_seed_is_truncated_to_32_bits():
    assert murmur3_32(b"abc", 5 + (1 << 32)) == murmur3_32(b"abc", 5)


def test_accepts_bytearray_and_memoryview():
    raw = b"payload"
    assert murmur3_32(bytearray(raw)) == murmur3_32(raw)
    assert murmur3_32(memoryview(raw)) == murmur3_32(raw)