import math

import bson
import pytest
from bson.raw_bson import RawBSONDocument

from mongowire.check import check_nan
from mongowire.errors import WireError


def test_nan_float():
    with pytest.raises(WireError, match="NaN is not supported"):
        check_nan(math.nan)


def test_clean_then_nan_added():
    doc = {"insert": "values", "documents": [{"v": 1.5, "_id": 3}], "ordered": True}
    assert check_nan(doc) is None
    doc["documents"][0]["v"] = math.nan
    with pytest.raises(WireError) as info:
        check_nan(doc)
    assert info.value.root_message() == "NaN is not supported"


@pytest.mark.parametrize(
    "value",
    [
        {"v": math.nan},
        {"a": {"b": {"c": math.nan}}},
        [1, 2, math.nan],
        {"arr": [{"x": [math.nan]}]},
        ({"t": math.nan},),
    ],
)
def test_nested_nan(value):
    with pytest.raises(WireError, match="NaN is not supported"):
        check_nan(value)


def test_raw_bytes_with_nan():
    raw = bson.encode({"insert": "values", "documents": [{"v": math.nan}]})
    with pytest.raises(WireError, match="NaN is not supported"):
        check_nan(raw)


def test_raw_bson_document_with_nan():
    raw = RawBSONDocument(bson.encode({"outer": {"v": math.nan}}))
    with pytest.raises(WireError, match="NaN is not supported"):
        check_nan(raw)


def test_negative_zero_and_infinity_are_not_nan():
    doc = {"v": -0.0, "w": math.inf, "x": -math.inf}
    assert check_nan(bson.encode(doc)) is None
    with pytest.raises(WireError):
        check_nan(dict(doc, y=math.nan))


def test_invalid_raw_bytes():
    with pytest.raises(WireError) as info:
        check_nan(b"\x05\x00\x00\x00\x01")
    assert "NaN" not in str(info.value)