import pytest

from locator.models import Coordinate
from locator.search import distance


@pytest.mark.parametrize(
    "a, b",
    [
        ((51.5074, -0.1278), (50.8225, -0.1372)),
        ((51.4102928, -0.0213582), (51.5087957, -0.1245731)),
        ((-33.8688, 151.2093), (40.7128, -74.0060)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert distance.haversine_distance(*a, *b) == pytest.approx(distance.haversine_distance(*b, *a))


def test_distance_to_self_is_zero():
    assert distance.haversine_distance(51.5074, -0.1278, 51.5074, -0.1278) == 0


def test_london_to_brighton():
    # The road-trip figure usually quoted is ~80 km; the great-circle distance is shorter.
    meters = distance.haversine_distance(51.5074, -0.1278, 50.8225, -0.1372)

    assert meters == pytest.approx(76_160, rel=0.01)


def test_beckenham_to_strand_is_not_a_few_hundred_meters():
    meters = distance.haversine_distance(51.4102928, -0.0213582, 51.5087957, -0.1245731)

    assert meters == pytest.approx(13_080, rel=0.01)
    assert meters > 10_000


def test_distance_between_coordinates():
    a = Coordinate(51.4102928, -0.0213582)
    b = Coordinate(51.5087957, -0.1245731)

    assert distance.distance_between(a, b) == distance.haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)


@pytest.mark.parametrize(
    "meters, expected",
    [
        (0, "0 m"),
        (272.4, "272 m"),
        (999, "999 m"),
        (1000, "1.0 km"),
        (999.4, "999 m"),
        (999.6, "1.0 km"),
        (17500, "17.5 km"),
        (13080.6, "13.1 km"),
    ],
)
def test_format_distance(meters, expected):
    assert distance.format_distance(meters) == expected


def test_directions_url():
    assert distance.directions_url(51.5, -0.12) == "https://www.google.com/maps/dir/?api=1&destination=51.5,-0.12"
