"""
Unit tests for the bounded plot history.
"""

import pytest

from simlib.models.history import HistoryBuffer


@pytest.mark.unit
class TestHistoryBuffer:

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            HistoryBuffer(0)

    def test_push_and_read(self):
        history = HistoryBuffer(5)
        history.push(1.0, 2.0)
        history.push(1.5, 2.0)
        assert len(history) == 2
        assert history.measured() == [1.0, 1.5]
        assert history.targets() == [2.0, 2.0]
        assert history.latest() == (1.5, 2.0)

    def test_evicts_oldest_when_full(self):
        history = HistoryBuffer(3)
        for i in range(5):
            history.push(float(i), 0.0)
        assert len(history) == 3
        assert history.measured() == [2.0, 3.0, 4.0]
        assert history[0] == (2.0, 0.0)

    def test_clear(self):
        history = HistoryBuffer(3)
        history.push(1.0, 1.0)
        history.clear()
        assert len(history) == 0
        assert history.latest() is None
        assert list(history) == []
