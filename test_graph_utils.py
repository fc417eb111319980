"""
Graph inspection, strategy recommendation, gradient helpers and the benchmark harness.
"""

import pytest

from tapegrad import Strategy, Tape, grad, grads, grads_list, value
from tapegrad.benchmark import build_dense_chain, build_disjoint_graph, compare_strategies
from tapegrad.core.graph_utils import (
    analyze_graph_complexity,
    get_graph_stats,
    reachable_count,
    reachable_fraction,
    recommend_strategy,
)


def test_graph_stats(tape):
    x = tape.create_leaf(2.0)
    y = tape.create_leaf(3.0)
    z = x * y
    z + x
    stats = get_graph_stats(tape)
    assert stats['nodes'] == 4
    assert stats['edges'] == 4
    assert stats['leaves'] == 2
    assert stats['parameters'] == 0
    assert stats['max_fan_in'] == 2
    assert stats['avg_fan_in'] == 1.0
    assert stats['max_fan_out'] == 2
    assert stats['ops'] == {'leaf': 2, 'mul': 1, 'add': 1}
    assert stats['fill'] == 4 / tape.capacity


def test_empty_graph_stats(tape):
    assert get_graph_stats(tape)['nodes'] == 0
    assert analyze_graph_complexity(tape) == "Empty computation graph"


def test_analyze_report(tape):
    x = tape.create_leaf(2.0)
    (x * x + 1.0) * x
    report = analyze_graph_complexity(tape)
    assert report.startswith("Graph Complexity Analysis:")
    assert "Total nodes: 5" in report
    assert "Complexity level: Low" in report
    assert "mul" in report


def test_reachability_and_recommendation():
    tape = Tape()
    root = build_disjoint_graph(tape, noise=50, signal=10)
    assert reachable_count(root) == 10
    assert reachable_fraction(root) == pytest.approx(10 / 60)
    assert recommend_strategy(root) is Strategy.DFS

    tape.reset()
    root = build_dense_chain(tape, length=30)
    assert reachable_fraction(root) == 1.0
    assert recommend_strategy(root) is Strategy.LINEAR


def test_leaf_root_reachability(tape):
    x = tape.create_leaf(1.0)
    assert reachable_fraction(x) == 1.0


@pytest.mark.parametrize("strategy", ["linear", "dfs"])
def test_grad_helpers(strategy):
    assert grad(lambda x: x ** 3, 2.0, strategy) == pytest.approx(12.0)
    assert grads(lambda v: v['a'] * v['b'] + v['a'], {'a': 2.0, 'b': 3.0}, strategy) == \
        pytest.approx({'a': 4.0, 'b': 2.0})
    assert grads_list(lambda xs: xs[0] * xs[0] + 3 * xs[1], [2.0, 4.0], strategy) == \
        pytest.approx([4.0, 3.0])


def test_grad_of_constant_function():
    assert grad(lambda x: 5.0, 1.0) == 0.0
    assert grads(lambda v: 1.0, {'a': 1.0}) == {'a': 0.0}
    assert grads_list(lambda xs: 2.0, [1.0, 2.0]) == [0.0, 0.0]


def test_value(tape):
    assert value(3) == 3
    assert value(tape.create_leaf(2.5)) == 2.5


def test_compare_strategies():
    tape = Tape()
    root = build_disjoint_graph(tape, noise=20, signal=5)
    results = compare_strategies(root, repeats=3)
    assert results['linear']['visited'] == root.index + 1
    assert results['dfs']['visited'] == 5
    assert results['grads_match']
    assert results['winner'] in ('linear', 'dfs')
    assert results['speedup'] >= 1.0
