"""
Tape arena: allocation, capacity, generations and stale handles.
"""

import pytest

from tapegrad import (
    CapacityExceededError,
    Op,
    StaleHandleError,
    Tape,
    TapeConfig,
    create_leaf,
    current_tape,
    reset_tape,
    use_tape,
)


def test_leaves_get_consecutive_indices(tape):
    a = tape.create_leaf(1.5)
    b = tape.create_leaf(-2)
    assert (a.index, b.index) == (0, 1)
    assert a.data == 1.5
    assert b.data == -2.0
    assert a.grad == 0.0
    assert a.op is Op.LEAF
    assert len(tape) == 2


def test_capacity_exceeded_is_recoverable():
    tape = Tape(3)
    for i in range(3):
        tape.create_leaf(float(i))

    with pytest.raises(CapacityExceededError) as excinfo:
        tape.create_leaf(3.0)
    assert excinfo.value.capacity == 3
    assert len(tape) == 3

    tape.reset()
    v = tape.create_leaf(7.0)
    assert v.index == 0
    assert v.data == 7.0


def test_capacity_exceeded_inside_op():
    tape = Tape(2)
    a = tape.create_leaf(1.0)
    b = tape.create_leaf(2.0)
    with pytest.raises(CapacityExceededError):
        a + b
    assert len(tape) == 2
    assert a.data == 1.0


def test_columns_grow_up_to_capacity():
    tape = Tape(config=TapeConfig(capacity=10, initial_size=2))
    handles = [tape.create_leaf(float(i)) for i in range(10)]
    assert [h.data for h in handles] == [float(i) for i in range(10)]
    with pytest.raises(CapacityExceededError):
        tape.create_leaf(10.0)


def test_invalid_capacity():
    with pytest.raises(ValueError):
        Tape(0)
    with pytest.raises(ValueError):
        TapeConfig(capacity=-1)


def test_reset_reuses_index_zero_and_bumps_generation(tape):
    tape.create_leaf(1.0)
    tape.create_leaf(2.0)
    gen = tape.generation
    tape.reset()
    assert len(tape) == 0
    assert tape.generation == gen + 1
    assert tape.create_leaf(5.0).index == 0


def test_stale_handle_is_detected(tape):
    old = tape.create_leaf(1.0)
    tape.reset()
    new = tape.create_leaf(99.0)
    assert new.index == old.index
    assert not old.is_live

    with pytest.raises(StaleHandleError) as excinfo:
        old.data
    assert excinfo.value.index == 0
    assert excinfo.value.tape_generation == tape.generation
    with pytest.raises(StaleHandleError):
        old.grad
    with pytest.raises(StaleHandleError):
        old + new
    assert new.data == 99.0


def test_non_numeric_data_rejected(tape):
    with pytest.raises(TypeError):
        tape.create_leaf("1.0")
    with pytest.raises(TypeError):
        tape.create_leaf(True)


def test_allocate_op_checks_arity_and_tape(tape):
    a = tape.create_leaf(2.0)
    b = tape.create_leaf(3.0)
    c = tape.allocate_op(6.0, Op.MUL, (a, b))
    assert c.op is Op.MUL
    assert c.children[0].index == a.index
    assert c.children[1].index == b.index

    with pytest.raises(ValueError):
        tape.allocate_op(1.0, Op.ADD, (a,))
    with pytest.raises(ValueError):
        tape.allocate_op(1.0, Op.LEAF, ())

    other = Tape()
    d = other.create_leaf(1.0)
    with pytest.raises(ValueError):
        tape.allocate_op(3.0, Op.ADD, (a, d))
    with pytest.raises(ValueError):
        a + d


def test_children_precede_parents(tape):
    x = tape.create_leaf(0.5)
    y = tape.create_leaf(-1.5)
    z = (x * y + x) / (y - 3.0)
    (z ** 2).data
    for node in tape.nodes():
        for ref in node.children:
            assert 0 <= ref < node.index


def test_node_snapshot(tape):
    x = tape.create_leaf(2.0)
    y = x ** 3
    node = tape.node(y.index)
    assert node.op_tag == "pow"
    assert node.children == (x.index,)
    assert node.const == 3.0
    assert node.data == 8.0
    with pytest.raises(IndexError):
        tape.node(len(tape))


def test_use_tape_swaps_and_restores_default():
    before = current_tape()
    with use_tape() as t:
        assert current_tape() is t
        v = create_leaf(4.0)
        assert v.tape is t
        reset_tape()
        assert len(t) == 0
    assert current_tape() is before


def test_use_tape_accepts_empty_tape():
    mine = Tape()
    with use_tape(mine) as t:
        assert t is mine
