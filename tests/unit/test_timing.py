"""Tests for timing utilities."""

from unified_http.utils import compression_ratio, elapsed_ms, hrtime, round_half_up


class TestHrtime:
    """Tests for high-resolution timestamps."""

    def test_pair_shape(self) -> None:
        seconds, nanos = hrtime()
        assert isinstance(seconds, int)
        assert 0 <= nanos < 1_000_000_000

    def test_monotonic(self) -> None:
        first = hrtime()
        second = hrtime()
        assert second >= first


class TestElapsed:
    """Tests for elapsed_ms."""

    def test_across_second_boundary(self) -> None:
        assert elapsed_ms((1, 900_000_000), (2, 150_000_000)) == 250

    def test_rounds_to_nearest(self) -> None:
        assert elapsed_ms((0, 0), (0, 1_400_000)) == 1
        assert elapsed_ms((0, 0), (0, 1_600_000)) == 2

    def test_zero(self) -> None:
        assert elapsed_ms((5, 10), (5, 10)) == 0


class TestCompressionRatio:
    """Tests for compression_ratio."""

    def test_uncompressed(self) -> None:
        assert compression_ratio(100, 100) == 0

    def test_compressed(self) -> None:
        assert compression_ratio(25, 100) == 75

    def test_rounding(self) -> None:
        # 100 - 1/3 * 100 = 66.67
        assert compression_ratio(1, 3) == 67

    def test_empty_body(self) -> None:
        assert compression_ratio(0, 0) == 0
        assert compression_ratio(20, 0) == 0

    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
