# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
from kairosdb_client import items_equal


def test_identical():
    assert items_equal([[1, 2], [3, 4]], [[1, 2], [3, 4]])
    assert items_equal([], [])


def test_length_mismatch():
    assert not items_equal([[1, 2]], [[1, 2], [3, 4]])
    assert not items_equal([], [[1, 2]])


def test_differing_timestamp_or_value():
    assert not items_equal([[1, 2], [3, 4]], [[1, 2], [5, 4]])
    assert not items_equal([[1, 2], [3, 4]], [[1, 2], [3, 5]])


def test_order_sensitive():
    assert not items_equal([[1, 2], [3, 4]], [[3, 4], [1, 2]])


def test_tuples_and_lists_compare_equal():
    assert items_equal([(1000, 5), (2000, 6)], [[1000, 5], [2000, 6]])
