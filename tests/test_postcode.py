import pytest

from locator.search.postcode import QueryKind, classify_query


@pytest.mark.parametrize("text", ["BR3", "sw1", "E14", " N1 ", "W10"])
def test_outward_codes_are_partial(text):
    assert classify_query(text) is QueryKind.PARTIAL_POSTCODE


@pytest.mark.parametrize("text", ["BR3 5UF", "br35uf", "W1D 1AW", "WC2N 5HY", "SW16 6HG"])
def test_full_postcodes(text):
    assert classify_query(text) is QueryKind.FULL_POSTCODE


@pytest.mark.parametrize("text", ["Oxford Street", "", "Croydon", "BR3 5U", "12345", "Leicester Square WC2H"])
def test_everything_else_is_free_text(text):
    assert classify_query(text) is QueryKind.FREE_TEXT
