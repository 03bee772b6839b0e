# tests/test_result.py
"""
Tests for NodeInfo and DataflowResult.
"""

from collections.abc import Mapping

import pytest

from creek import DataflowResult, Direction, NodeInfo


@pytest.fixture
def result():
    return DataflowResult(
        {
            1: NodeInfo(before=frozenset(), after=frozenset({"a"})),
            2: NodeInfo(before=frozenset({"a"}), after=frozenset({"a", "b"})),
        },
        direction=Direction.FORWARD,
        iterations=3,
        elapsed_seconds=0.01,
    )


class TestNodeInfo:

    def test_equality_is_structural(self):
        assert NodeInfo(1, 2) == NodeInfo(before=1, after=2)
        assert NodeInfo(1, 2) != NodeInfo(2, 1)

    def test_is_frozen(self):
        info = NodeInfo(1, 2)
        with pytest.raises(AttributeError):
            info.before = 5

    def test_hashable_with_hashable_facts(self):
        assert len({NodeInfo(1, 2), NodeInfo(1, 2)}) == 1


class TestDataflowResult:

    def test_is_a_mapping(self, result):
        assert isinstance(result, Mapping)
        assert len(result) == 2
        assert sorted(result) == [1, 2]
        assert 1 in result and 3 not in result

    def test_compares_equal_to_dict(self, result):
        assert result == {
            1: NodeInfo(frozenset(), frozenset({"a"})),
            2: NodeInfo(frozenset({"a"}), frozenset({"a", "b"})),
        }

    def test_before_after_accessors(self, result):
        assert result.before(2) == frozenset({"a"})
        assert result.after(2) == frozenset({"a", "b"})

    def test_missing_node_raises_key_error(self, result):
        with pytest.raises(KeyError):
            result[99]
        with pytest.raises(KeyError):
            result.before(99)

    def test_get_uses_mapping_default(self, result):
        assert result.get(99) is None

    def test_to_dict_is_a_copy(self, result):
        d = result.to_dict()
        d.clear()
        assert len(result) == 2

    def test_input_dict_is_copied(self):
        infos = {1: NodeInfo(0, 1)}
        res = DataflowResult(infos, direction=Direction.BACKWARD)
        infos[2] = NodeInfo(1, 2)
        assert list(res) == [1]

    def test_statistics(self, result):
        assert result.direction is Direction.FORWARD
        assert result.iterations == 3
        assert result.elapsed_seconds == pytest.approx(0.01)

    def test_repr(self, result):
        text = repr(result)
        assert "forward" in text
        assert "nodes=2" in text
