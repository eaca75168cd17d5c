import pytest

from aprstx.encoding.report import format_wx_report
from aprstx.errors import APRSValidationError, OutOfRangeError
from aprstx.models import Observation

from .conftest import BODY


def test_end_to_end_body(observation):
    assert format_wx_report(observation) == BODY


def test_accepts_observation_model(observation):
    assert format_wx_report(Observation.model_validate(observation)) == BODY


def test_minimal_observation_uses_fillers(now):
    body = format_wx_report({"longitude": 0, "latitude": 0}, now=now)
    assert body == "@021530z0000.00N/00000.00E_.../...g...t..."


def test_timestamp_defaults_to_current_time():
    body = format_wx_report({"longitude": 0, "latitude": 0})
    assert body.startswith("@") and body[7] == "z"


def test_timestamp_with_offset_is_converted():
    body = format_wx_report(
        {"timestamp": "2024-03-02T16:30:00+01:00", "longitude": 0, "latitude": 0}
    )
    assert body.startswith("@021530z")


def test_optional_fields_in_order(now):
    body = format_wx_report(
        {
            "longitude": 0,
            "latitude": 0,
            "weather": {
                "luminosity": 1500,
                "humidity": 100,
                "pressure": 1000,
                "rainSinceMidnight": 0,
                "rain24h": 2.54,
                "rain1h": 1,
            },
        },
        now=now,
    )
    assert body.endswith("t...r004p010P000b10000h00l500")


def test_rain_absent_is_omitted(now):
    body = format_wx_report({"longitude": 0, "latitude": 0, "weather": {"rain24h": 0}}, now=now)
    assert "r" not in body.split("t...")[1]
    assert body.endswith("t...p000")


def test_top_level_course_and_speed(now):
    body = format_wx_report(
        {"longitude": 0, "latitude": 0, "course": 90, "speed": 0}, now=now
    )
    assert "_090/000g..." in body


def test_extension_aliases(now):
    body = format_wx_report(
        {"longitude": 0, "latitude": 0, "extension": {"course": 0, "speed": 4.4704}},
        now=now,
    )
    assert "_360/010" in body


@pytest.mark.parametrize("missing", ["longitude", "latitude"])
def test_missing_position(observation, missing):
    del observation[missing]
    with pytest.raises(APRSValidationError, match=f"Missing {missing}"):
        format_wx_report(observation)


def test_out_of_range_measurement(observation):
    observation["weather"]["temperature"] = 600
    with pytest.raises(OutOfRangeError):
        format_wx_report(observation)


def test_invalid_observation():
    with pytest.raises(APRSValidationError):
        format_wx_report({"longitude": "west", "latitude": 0})
    with pytest.raises(APRSValidationError):
        format_wx_report(["not", "a", "mapping"])
