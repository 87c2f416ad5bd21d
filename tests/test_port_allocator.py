"""Tests for host port allocation."""

from wpdind.port_allocator import next_port


def test_first_port_is_range_start():
    assert next_port([]) == 8001


def test_next_port_is_above_highest():
    assert next_port([8001, 8002, 8005]) == 8006


def test_gaps_are_not_reused():
    # 8002 was freed by a removal; allocation stays append-only
    assert next_port([8001, 8003]) == 8004


def test_ports_below_range_are_ignored():
    assert next_port([80, 443], range_start=9000) == 9000


def test_none_entries_are_skipped():
    assert next_port([None, 8001]) == 8002
