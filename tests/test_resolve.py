from __future__ import annotations

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from cli.resolve import build_client, resolve_device_sn, resolve_plant_id
from config.growatt_env import GrowattConfig
from growatt.client import DEFAULT_BASE_URL
from growatt.errors import NoTokenError
from growatt.models import Device, Plant


@pytest.fixture(autouse=True)
def clean_env():
    with patch.dict(os.environ, {}, clear=True):
        yield


class TestBuildClient:
    def test_flag_token_wins(self):
        client = build_client("flag-token", None, GrowattConfig(token="file-token"))
        assert client.token == "flag-token"
        assert client.base_url == DEFAULT_BASE_URL

    def test_config_token_and_rate_limit(self):
        config = GrowattConfig(
            token="file-token", base_url="https://test.example/v1", rate_limit_seconds=1.5
        )
        client = build_client(None, None, config)
        assert client.token == "file-token"
        assert client.base_url == "https://test.example/v1"
        assert client.rate_limit == 1.5

    def test_missing_token(self):
        with pytest.raises(NoTokenError):
            build_client(None, None, GrowattConfig())


class TestResolvePlantId:
    def test_flag_skips_api(self):
        client = MagicMock()
        assert resolve_plant_id(client, "42") == "42"
        client.list_plants.assert_not_called()

    def test_environment_before_config(self):
        client = MagicMock()
        with patch.dict(os.environ, {"GROWATT_PLANT_ID": "7"}):
            assert resolve_plant_id(client, None, GrowattConfig(plant_id="8")) == "7"
        client.list_plants.assert_not_called()

    def test_config_file_value(self):
        client = MagicMock()
        assert resolve_plant_id(client, None, GrowattConfig(plant_id="8")) == "8"

    def test_auto_detect_single_plant(self, capsys):
        client = MagicMock()
        client.list_plants.return_value = [Plant(plant_id="99", plant_name="Roof")]

        assert resolve_plant_id(client, None) == "99"
        assert "export GROWATT_PLANT_ID=99" in capsys.readouterr().out

    def test_no_plants(self):
        client = MagicMock()
        client.list_plants.return_value = []
        with pytest.raises(LookupError, match="no plants found"):
            resolve_plant_id(client, None)

    def test_multiple_plants(self, capsys):
        client = MagicMock()
        client.list_plants.return_value = [
            Plant(plant_id="1", plant_name="East"),
            Plant(plant_id="2", plant_name="West"),
        ]
        with pytest.raises(LookupError, match="multiple plants found"):
            resolve_plant_id(client, None)
        out = capsys.readouterr().out
        assert "East (ID: 1)" in out
        assert "West (ID: 2)" in out


class TestResolveDeviceSn:
    def test_flag_skips_api(self):
        client = MagicMock()
        assert resolve_device_sn(client, "SN1", None) == "SN1"
        client.list_devices.assert_not_called()

    def test_environment(self):
        client = MagicMock()
        with patch.dict(os.environ, {"GROWATT_DEVICE_SN": "SN2"}):
            assert resolve_device_sn(client, None, None, GrowattConfig(device_sn="SN3")) == "SN2"

    def test_auto_detect_through_plant(self, capsys):
        client = MagicMock()
        client.list_plants.return_value = [Plant(plant_id="99", plant_name="Roof")]
        client.list_devices.return_value = [
            Device(device_sn="TLX1", device_name="MIN 6000TL-X", device_type=7)
        ]

        assert resolve_device_sn(client, None, None) == "TLX1"
        client.list_devices.assert_called_once_with("99")
        out = capsys.readouterr().out
        assert "export GROWATT_DEVICE_SN=TLX1" in out

    def test_no_devices(self):
        client = MagicMock()
        client.list_devices.return_value = []
        with pytest.raises(LookupError, match="no devices found for plant 5"):
            resolve_device_sn(client, None, "5")

    def test_multiple_devices(self):
        client = MagicMock()
        client.list_devices.return_value = [Device(device_sn="A"), Device(device_sn="B")]
        with pytest.raises(LookupError, match="multiple devices found"):
            resolve_device_sn(client, None, "5")
