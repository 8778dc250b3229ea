import pytest

from core.polyline import PolylineDecodeError, decode_polyline, encode_polyline
from fixtures import (
    ORS_POLYLINE,
    ORS_POLYLINE_COORDS,
    VALHALLA_SHAPE,
    VALHALLA_SHAPE_COORDS,
)


def _assert_coords_close(actual, expected, tol: float = 1e-5) -> None:
    assert len(actual) == len(expected)
    for got, want in zip(actual, expected, strict=True):
        assert got[0] == pytest.approx(want[0], abs=tol)
        assert got[1] == pytest.approx(want[1], abs=tol)


def test_decode_precision5_returns_lon_lat() -> None:
    coords = decode_polyline(ORS_POLYLINE, 5)

    _assert_coords_close(coords, ORS_POLYLINE_COORDS)


def test_decode_precision6_returns_lon_lat() -> None:
    coords = decode_polyline(VALHALLA_SHAPE, 6)

    _assert_coords_close(coords, VALHALLA_SHAPE_COORDS, tol=1e-6)


def test_fixture_polylines_survive_reencoding() -> None:
    assert encode_polyline(decode_polyline(ORS_POLYLINE, 5), 5) == ORS_POLYLINE
    assert encode_polyline(decode_polyline(VALHALLA_SHAPE, 6), 6) == VALHALLA_SHAPE


def test_encode_then_decode_matches_within_tolerance() -> None:
    path = [[-122.4194, 37.7749], [-122.41501, 37.77903], [-122.4084, 37.7849]]

    _assert_coords_close(decode_polyline(encode_polyline(path)), path)


def test_decode_empty_string() -> None:
    assert decode_polyline("") == []


def test_decode_truncated_polyline_raises() -> None:
    with pytest.raises(PolylineDecodeError):
        decode_polyline(ORS_POLYLINE[:-1])


def test_decode_rejects_characters_below_range() -> None:
    with pytest.raises(PolylineDecodeError):
        decode_polyline("_p~iF ~ps|U")
