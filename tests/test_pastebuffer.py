import pytest

from wtmux.pastebuffer import PasteBuffer


def test_empty():
    buf = PasteBuffer(5)
    assert len(buf) == 0
    assert buf.top() is None
    assert buf.get(0) is None


def test_push_and_order():
    buf = PasteBuffer(5)
    buf.push("one")
    buf.push("two")
    assert buf.top() == "two"
    assert buf.get(0) == "two"
    assert buf.get(1) == "one"
    assert buf.get(2) is None
    assert len(buf) == 2


def test_oldest_dropped_when_full():
    buf = PasteBuffer(2)
    for text in ("a", "b", "c"):
        buf.push(text)
    assert len(buf) == 2
    assert buf.get(0) == "c"
    assert buf.get(1) == "b"


def test_negative_index():
    buf = PasteBuffer(3)
    buf.push("x")
    assert buf.get(-1) is None


def test_invalid_capacity():
    with pytest.raises(ValueError):
        PasteBuffer(0)