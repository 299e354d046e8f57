from __future__ import annotations

import os
import sys
from datetime import date

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from growatt.errors import InvalidDateError, ResponseParseError
from growatt.models import (
    Device,
    MINHistoryDataPoint,
    MINInverterData,
    Plant,
    PowerData,
    PowerDataPoint,
    flex_float,
    flex_powers,
    flex_string,
    normalize_time,
    parse_date,
    parse_power_data,
)


class TestFlexDecoding:
    """Fields the API sends with inconsistent JSON types."""

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 0.0), ("", 0.0), ("  ", 0.0), ("12.5", 12.5), (7, 7.0), (3.25, 3.25)],
    )
    def test_flex_float(self, raw, expected):
        assert flex_float(raw) == expected

    def test_flex_float_rejects_garbage(self):
        with pytest.raises(ResponseParseError):
            flex_float("abc")
        with pytest.raises(ResponseParseError):
            flex_float({"value": 1})

    def test_flex_string_accepts_numbers(self):
        assert flex_string("1234") == "1234"
        assert flex_string(1234) == "1234"
        assert flex_string(1234.0) == "1234"
        assert flex_string(None) == ""

    def test_normalize_time(self):
        assert normalize_time("2025-02-01 12:30") == "12:30"
        assert normalize_time("12:30") == "12:30"

    def test_flex_powers_map(self):
        powers = flex_powers({"12:00": "4500.5", "12:05": None})
        assert powers == {"12:00": 4500.5, "12:05": 0.0}

    def test_flex_powers_object_list(self):
        powers = flex_powers(
            [
                {"time": "2025-02-01 06:00", "power": 10},
                {"time": "06:05", "power": None},
            ]
        )
        assert powers == {"06:00": 10.0, "06:05": 0.0}

    def test_flex_powers_pair_list(self):
        assert flex_powers([["07:00", 5], ["07:05", "6"]]) == {"07:00": 5.0, "07:05": 6.0}

    def test_flex_powers_empty(self):
        assert flex_powers(None) == {}
        assert flex_powers([]) == {}
        assert flex_powers({}) == {}

    def test_flex_powers_rejects_other_shapes(self):
        with pytest.raises(ResponseParseError):
            flex_powers("12:00=5")
        with pytest.raises(ResponseParseError):
            flex_powers([42])


class TestModelDecoding:
    def test_plant_from_dict_with_string_numbers(self):
        plant = Plant.from_dict(
            {
                "plant_id": 98765,
                "plant_name": "Roof",
                "current_power": "1520.0",
                "today_energy": "8.4",
                "total_energy": 1234.5,
                "peak_power": "6.6",
                "status": "1",
            }
        )
        assert plant.plant_id == "98765"
        assert plant.plant_name == "Roof"
        assert plant.current_power == 1520.0
        assert plant.today_energy == 8.4
        assert plant.peak_power == 6.6
        assert plant.status == 1

    def test_device_from_dict(self):
        device = Device.from_dict(
            {"device_sn": "ABC123", "device_type": 7, "device_name": "MIN 6000TL-X"}
        )
        assert device.device_sn == "ABC123"
        assert device.device_type == 7

    def test_min_inverter_reads_tlx_serial(self):
        data = MINInverterData.from_dict({"tlx_sn": "TLX1", "pac": "2500", "etoday": ""})
        assert data.serial == "TLX1"
        assert data.pac == 2500.0
        assert data.etoday == 0.0

    def test_min_history_point(self):
        point = MINHistoryDataPoint.from_dict({"time": "2025-02-01 10:05", "pac": "321.5"})
        assert point.time == "2025-02-01 10:05"
        assert point.pac == 321.5
        assert point.ppv == 0.0


class TestParsePowerData:
    def test_parse_date(self):
        assert parse_date("2025-02-01") == date(2025, 2, 1)

    def test_parse_date_invalid(self):
        with pytest.raises(InvalidDateError):
            parse_date("02/01/2025")
        # Also usable as a plain ValueError
        with pytest.raises(ValueError):
            parse_date("2025-13-01")

    def test_splits_hour_and_minute(self):
        data = PowerData(
            plant_id="1",
            date="2025-02-01",
            powers=[
                PowerDataPoint(time="06:05", power=100.0),
                PowerDataPoint(time="13:45:00", power=2000.0),
                PowerDataPoint(time="2025-02-01 23:55", power=0.0),
            ],
        )
        parsed = parse_power_data(data)

        assert [(p.hour, p.minute) for p in parsed] == [(6, 5), (13, 45), (23, 55)]
        assert all(p.date == date(2025, 2, 1) for p in parsed)
        assert parsed[1].power == 2000.0
        assert parsed[2].time == "23:55"

    def test_skips_unparseable_times(self):
        data = PowerData(
            plant_id="1",
            date="2025-02-01",
            powers=[
                PowerDataPoint(time="noon", power=1.0),
                PowerDataPoint(time="ab:cd", power=2.0),
                PowerDataPoint(time="12:00", power=3.0),
            ],
        )
        parsed = parse_power_data(data)

        assert len(parsed) == 1
        assert parsed[0].power == 3.0

    def test_invalid_date_raises(self):
        with pytest.raises(InvalidDateError):
            parse_power_data(PowerData(plant_id="1", date="not-a-date"))
