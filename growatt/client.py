from __future__ import annotations

import json
import logging
import os
import threading
import time
from datetime import date, timedelta
from typing import Any, Callable, TypeVar

import requests

from config.growatt_env import ENV_API_KEY, ENV_BASE_URL
from growatt.errors import (
    APIError,
    EmptyResponseError,
    FetchCancelledError,
    GrowattError,
    NoTokenError,
    RangeFetchError,
    RequestError,
    ResponseParseError,
)
from growatt.models import (
    DATE_FORMAT,
    Device,
    EnergyData,
    EnergyDataPoint,
    MINHistoryDataPoint,
    MINInverterData,
    Plant,
    PlantData,
    PowerData,
    PowerDataPoint,
    TimeUnit,
    flex_float,
    flex_int,
    flex_powers,
    flex_string,
    normalize_time,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openapi.growatt.com/v1/"
DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_RATE_LIMIT = 3.0  # seconds between calls
DEFAULT_TIMEZONE = "US/Central"
MIN_HISTORY_PAGE_SIZE = 100  # API maximum

T = TypeVar("T")


def check_response(body: bytes | str) -> dict[str, Any]:
    """Decode the response envelope and raise APIError for a non-zero error_code."""
    if not body:
        raise EmptyResponseError()

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise ResponseParseError(f"parsing response: {e}") from e

    if not isinstance(payload, dict):
        raise ResponseParseError(f"unexpected response: {payload!r}")

    error_code = flex_int(payload.get("error_code"))
    if error_code != 0:
        raise APIError(error_code, flex_string(payload.get("error_msg")))

    return payload


def parse_response(body: bytes | str) -> Any:
    """Return the "data" member of a successful response."""
    return check_response(body).get("data")


class GrowattClient:
    """Client for the Growatt OpenAPI v1."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limit: float = DEFAULT_RATE_LIMIT,
        session: requests.Session | None = None,
    ) -> None:
        self.token: str = token
        self.base_url: str = base_url
        self.timeout: float = timeout
        self.rate_limit: float = rate_limit
        self.session: requests.Session = session or requests.Session()
        self._last_call: float | None = None

    @classmethod
    def from_env(cls, **kwargs: Any) -> GrowattClient:
        """Create a client from GROWATT_API_KEY and, if set, GROWATT_BASE_URL."""
        token = os.getenv(ENV_API_KEY)
        if not token:
            raise NoTokenError()

        client = cls(token, **kwargs)

        base_url = os.getenv(ENV_BASE_URL)
        if base_url:
            client.base_url = base_url

        return client

    def __enter__(self) -> GrowattClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def set_rate_limit(self, seconds: float) -> None:
        self.rate_limit = seconds

    def _enforce_rate_limit(self) -> None:
        if self.rate_limit > 0 and self._last_call is not None:
            elapsed = time.monotonic() - self._last_call
            if elapsed < self.rate_limit:
                time.sleep(self.rate_limit - elapsed)
        self._last_call = time.monotonic()

    def _url(self, endpoint: str) -> str:
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        return base + endpoint

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> bytes:
        self._enforce_rate_limit()

        url = self._url(endpoint)
        headers = {"token": self.token}
        if data is None:
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s params=%s form=%s", method, url, params, data)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RequestError(f"executing request: {e}") from e

        logger.debug("%s %s -> HTTP %s", method, url, response.status_code)
        return response.content

    def get(self, endpoint: str, params: dict[str, str] | None = None) -> bytes:
        return self._request("GET", endpoint, params=params)

    def post_form(self, endpoint: str, data: dict[str, str]) -> bytes:
        return self._request("POST", endpoint, data=data)

    # Plants

    def list_plants(self) -> list[Plant]:
        data = parse_response(self.get("plant/list")) or {}
        return [Plant.from_dict(p) for p in data.get("plants") or []]

    def get_plant_details(self, plant_id: str) -> Plant:
        data = parse_response(self.get("plant/details", {"plant_id": plant_id}))
        return Plant.from_dict(data or {})

    def get_plant_data(self, plant_id: str) -> PlantData:
        data = parse_response(self.get("plant/data", {"plant_id": plant_id}))
        return PlantData.from_dict(data or {})

    def get_plant_power(self, plant_id: str, day: date) -> PowerData:
        """Return the 5-minute power readings of a plant for one day, sorted by time."""
        date_str = day.strftime(DATE_FORMAT)
        body = self.get("plant/power", {"plant_id": plant_id, "date": date_str})
        raw = parse_response(body) or {}

        powers = [
            PowerDataPoint(time=time_str, power=power)
            for time_str, power in flex_powers(raw.get("powers")).items()
        ]
        powers.sort(key=lambda p: p.time)

        return PowerData(
            plant_id=flex_string(raw.get("plant_id")),
            date=date_str,
            powers=powers,
        )

    def get_plant_power_range(
        self,
        plant_id: str,
        start: date,
        end: date,
        cancel_event: threading.Event | None = None,
    ) -> list[PowerData]:
        return self._fetch_range(
            lambda day: self.get_plant_power(plant_id, day),
            start,
            end,
            "power",
            cancel_event,
        )

    def get_plant_energy(
        self,
        plant_id: str,
        start_date: str,
        end_date: str,
        time_unit: TimeUnit = TimeUnit.DAY,
    ) -> EnergyData:
        params = {
            "plant_id": plant_id,
            "start_date": start_date,
            "end_date": end_date,
            "time_unit": time_unit.value,
        }
        raw = parse_response(self.get("plant/energy", params)) or {}

        datas = [
            EnergyDataPoint(date=date_str, energy=flex_float(energy))
            for date_str, energy in (raw.get("datas") or {}).items()
        ]
        datas.sort(key=lambda d: d.date)

        return EnergyData(plant_id=flex_string(raw.get("plant_id")), datas=datas)

    # Devices

    def list_devices(self, plant_id: str) -> list[Device]:
        data = parse_response(self.get("device/list", {"plant_id": plant_id})) or {}
        return [Device.from_dict(d) for d in data.get("devices") or []]

    def get_min_inverter_details(self, serial: str) -> MINInverterData:
        body = self.get("device/tlx/tlx_data_info", {"tlx_sn": serial})
        return MINInverterData.from_dict(parse_response(body) or {})

    def get_min_inverter_history(
        self, serial: str, day: date, timezone: str = ""
    ) -> PowerData:
        """
        Return one day of MIN/TLX inverter history as power readings.

        The AC power (pac) of each record is used. The endpoint returns at most
        100 records per page, so pages are requested until the reported count
        is reached.
        """
        if not timezone:
            timezone = DEFAULT_TIMEZONE

        date_str = day.strftime(DATE_FORMAT)
        powers: list[PowerDataPoint] = []

        page = 1
        while True:
            form = {
                "tlx_sn": serial,
                "start_date": date_str,
                "end_date": date_str,
                "timezone_id": timezone,
                "page": str(page),
                "perpage": str(MIN_HISTORY_PAGE_SIZE),
            }
            data = parse_response(self.post_form("device/tlx/tlx_data", form)) or {}

            records = data.get("datas") or []
            for record in records:
                point = MINHistoryDataPoint.from_dict(record)
                powers.append(
                    PowerDataPoint(time=normalize_time(point.time), power=point.pac)
                )

            count = flex_int(data.get("count"))
            if len(records) < MIN_HISTORY_PAGE_SIZE or len(powers) >= count:
                break
            page += 1

        powers.sort(key=lambda p: p.time)
        return PowerData(plant_id=serial, date=date_str, powers=powers)

    def get_min_inverter_history_range(
        self,
        serial: str,
        start: date,
        end: date,
        timezone: str = "",
        cancel_event: threading.Event | None = None,
    ) -> list[PowerData]:
        return self._fetch_range(
            lambda day: self.get_min_inverter_history(serial, day, timezone),
            start,
            end,
            "MIN history",
            cancel_event,
        )

    def _fetch_range(
        self,
        fetch: Callable[[date], T],
        start: date,
        end: date,
        label: str,
        cancel_event: threading.Event | None,
    ) -> list[T]:
        """Call fetch for every day from start to end inclusive."""
        results: list[T] = []

        current = start
        while current <= end:
            if cancel_event is not None and cancel_event.is_set():
                raise FetchCancelledError(
                    f"fetch cancelled before {current.strftime(DATE_FORMAT)}",
                    current,
                    results,
                )

            try:
                results.append(fetch(current))
            except GrowattError as e:
                raise RangeFetchError(
                    f"fetching {label} for {current.strftime(DATE_FORMAT)}: {e}",
                    current,
                    results,
                ) from e

            current += timedelta(days=1)

        return results
