from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from growatt.errors import InvalidDateError, ResponseParseError

DATE_FORMAT = "%Y-%m-%d"


class TimeUnit(Enum):
    DAY = "day"
    MONTH = "month"


def flex_float(value: Any) -> float:
    """Decode a number the API may send as a number, a string, "" or null."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0.0
        try:
            return float(text)
        except ValueError as e:
            raise ResponseParseError(f"cannot parse {value!r} as a number") from e
    raise ResponseParseError(f"unexpected numeric value: {value!r}")


def flex_int(value: Any) -> int:
    return int(flex_float(value))


def flex_string(value: Any) -> str:
    """Decode an identifier the API may send either as a string or a number."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def normalize_time(value: str) -> str:
    """Reduce "YYYY-MM-DD HH:MM" to "HH:MM"; plain times pass through."""
    parts = value.strip().split(" ")
    if len(parts) == 2:
        return parts[1]
    return value.strip()


def flex_powers(value: Any) -> dict[str, float]:
    """
    Decode the "powers" field of a power response.

    The API has been seen returning a map of time to power, a list of
    {"time", "power"} objects and a list of [time, power] pairs.
    """
    powers: dict[str, float] = {}
    if value is None:
        return powers

    if isinstance(value, dict):
        entries = list(value.items())
    elif isinstance(value, list):
        entries = []
        for entry in value:
            if isinstance(entry, dict):
                entries.append((entry.get("time"), entry.get("power")))
            elif isinstance(entry, (list, tuple)) and len(entry) >= 2:
                entries.append((entry[0], entry[1]))
            else:
                raise ResponseParseError(f"unexpected power entry: {entry!r}")
    else:
        raise ResponseParseError(f"unexpected powers value: {value!r}")

    for time_str, power in entries:
        if time_str is None:
            continue
        powers[normalize_time(str(time_str))] = flex_float(power)

    return powers


@dataclass
class Plant:
    plant_id: str
    plant_name: str = ""
    plant_type: int = 0
    country: str = ""
    city: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    peak_power: float = 0.0
    current_power: float = 0.0
    today_energy: float = 0.0
    total_energy: float = 0.0
    create_date: str = ""
    status: int = 0
    formula_coal: float = 0.0
    formula_co2: float = 0.0
    formula_money: float = 0.0
    formula_tree: float = 0.0
    money_unit: str = ""
    money_unit_text: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plant:
        return cls(
            plant_id=flex_string(data.get("plant_id")),
            plant_name=flex_string(data.get("plant_name")),
            plant_type=flex_int(data.get("plant_type")),
            country=flex_string(data.get("country")),
            city=flex_string(data.get("city")),
            latitude=flex_float(data.get("latitude")),
            longitude=flex_float(data.get("longitude")),
            peak_power=flex_float(data.get("peak_power")),
            current_power=flex_float(data.get("current_power")),
            today_energy=flex_float(data.get("today_energy")),
            total_energy=flex_float(data.get("total_energy")),
            create_date=flex_string(data.get("create_date")),
            status=flex_int(data.get("status")),
            formula_coal=flex_float(data.get("formula_coal")),
            formula_co2=flex_float(data.get("formula_co2")),
            formula_money=flex_float(data.get("formula_money")),
            formula_tree=flex_float(data.get("formula_tree")),
            money_unit=flex_string(data.get("money_unit")),
            money_unit_text=flex_string(data.get("money_unit_text")),
        )


@dataclass
class PlantData:
    """Energy overview of a plant."""

    plant_id: str
    today_energy: float = 0.0
    total_energy: float = 0.0
    current_power: float = 0.0
    peak_power_today: float = 0.0
    month_energy: float = 0.0
    year_energy: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlantData:
        return cls(
            plant_id=flex_string(data.get("plant_id")),
            today_energy=flex_float(data.get("today_energy")),
            total_energy=flex_float(data.get("total_energy")),
            current_power=flex_float(data.get("current_power")),
            peak_power_today=flex_float(data.get("peak_power_today")),
            month_energy=flex_float(data.get("month_energy")),
            year_energy=flex_float(data.get("year_energy")),
        )


@dataclass
class PowerDataPoint:
    time: str
    power: float


@dataclass
class PowerData:
    """5-minute power readings of a single day."""

    plant_id: str
    date: str
    powers: list[PowerDataPoint] = field(default_factory=list)


@dataclass
class EnergyDataPoint:
    date: str
    energy: float


@dataclass
class EnergyData:
    plant_id: str
    datas: list[EnergyDataPoint] = field(default_factory=list)


@dataclass
class Device:
    device_sn: str
    device_type: int = 0
    device_name: str = ""
    status: int = 0
    model: str = ""
    last_update: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Device:
        return cls(
            device_sn=flex_string(data.get("device_sn")),
            device_type=flex_int(data.get("device_type")),
            device_name=flex_string(data.get("device_name")),
            status=flex_int(data.get("status")),
            model=flex_string(data.get("model")),
            last_update=flex_string(data.get("last_update")),
        )


@dataclass
class MINInverterData:
    """Live readings of a MIN/TLX inverter."""

    serial: str
    status: int = 0
    pac: float = 0.0
    etoday: float = 0.0
    etotal: float = 0.0
    vpv1: float = 0.0
    vpv2: float = 0.0
    ipv1: float = 0.0
    ipv2: float = 0.0
    vac1: float = 0.0
    iac1: float = 0.0
    fac: float = 0.0
    temperature: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MINInverterData:
        return cls(
            serial=flex_string(data.get("tlx_sn")),
            status=flex_int(data.get("status")),
            pac=flex_float(data.get("pac")),
            etoday=flex_float(data.get("etoday")),
            etotal=flex_float(data.get("etotal")),
            vpv1=flex_float(data.get("vpv1")),
            vpv2=flex_float(data.get("vpv2")),
            ipv1=flex_float(data.get("ipv1")),
            ipv2=flex_float(data.get("ipv2")),
            vac1=flex_float(data.get("vac1")),
            iac1=flex_float(data.get("iac1")),
            fac=flex_float(data.get("fac")),
            temperature=flex_float(data.get("temperature")),
        )


@dataclass
class MINHistoryDataPoint:
    time: str
    pac: float = 0.0  # AC power (W)
    ppv: float = 0.0  # PV power (W)
    vpv1: float = 0.0
    vpv2: float = 0.0
    ipv1: float = 0.0
    ipv2: float = 0.0
    vac1: float = 0.0
    iac1: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MINHistoryDataPoint:
        return cls(
            time=flex_string(data.get("time")),
            pac=flex_float(data.get("pac")),
            ppv=flex_float(data.get("ppv")),
            vpv1=flex_float(data.get("vpv1")),
            vpv2=flex_float(data.get("vpv2")),
            ipv1=flex_float(data.get("ipv1")),
            ipv2=flex_float(data.get("ipv2")),
            vac1=flex_float(data.get("vac1")),
            iac1=flex_float(data.get("iac1")),
        )


@dataclass(frozen=True)
class ParsedPowerData:
    """A power reading with its time of day split into hour and minute."""

    date: date
    time: str
    power: float
    hour: int
    minute: int


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidDateError(f"invalid date format: {value!r}") from e


def parse_power_data(data: PowerData) -> list[ParsedPowerData]:
    """
    Split each reading's time into hour and minute.

    Accepts "HH:MM", "HH:MM:SS" and "YYYY-MM-DD HH:MM". Readings whose time
    cannot be parsed are skipped.
    """
    day = parse_date(data.date)

    result: list[ParsedPowerData] = []
    for point in data.powers:
        time_str = normalize_time(point.time)

        parts = time_str.split(":")
        if len(parts) < 2:
            continue

        try:
            hour = int(parts[0])
            minute = int(parts[1])
        except ValueError:
            continue

        result.append(
            ParsedPowerData(
                date=day,
                time=time_str,
                power=point.power,
                hour=hour,
                minute=minute,
            )
        )

    return result
