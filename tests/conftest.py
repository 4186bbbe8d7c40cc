import json
from unittest.mock import Mock, patch

import pytest

STATION_URL = "https://192.168.0.1"


def make_response(text="", status_code=200, set_cookie=None):
    """Build a Mock that looks enough like requests.Response."""
    headers = {}
    if set_cookie is not None:
        headers["Set-Cookie"] = set_cookie
    return Mock(status_code=status_code, text=text, headers=headers)


@pytest.fixture
def station_responses():
    """Fixture providing station API responses."""
    return {
        "bootstrap": "<html><body>Vodafone Station</body></html>",
        "salts": json.dumps({"error": "ok", "salt": "s1", "saltwebui": "s2"}),
        "salts_error": json.dumps({"error": "error", "message": "MSG_LOGIN_150"}),
        "login_success": json.dumps(
            {
                "error": "ok",
                "message": "MSG_LOGIN_1",
                "data": {
                    "intf": "Lan",
                    "user": "admin",
                    "uid": "1",
                    "Dpd": "No",
                    "remoteAddr": "192.168.0.10",
                    "userAgent": "FibertelExporter/1.0.0",
                    "httpReferer": "http://192.168.0.1",
                },
            }
        ),
        "login_failure": json.dumps({"error": "fail"}),
        "login_failure_message": json.dumps({"error": "error", "message": "MSG_LOGIN_150"}),
        "menu": json.dumps({"error": "ok", "data": {"menu": []}}),
        "modem_status": json.dumps(
            {
                "error": "ok",
                "message": "all values retrieved",
                "data": {
                    "DSTbl": [
                        {
                            "__id": "1",
                            "ChannelID": "5",
                            "Frequency": "550.0",
                            "PowerLevel": "2.1",
                            "SNRLevel": "38.5",
                            "Modulation": "256QAM",
                            "LockStatus": "Locked",
                            "ChannelType": "1",
                        },
                        {
                            "__id": "2",
                            "ChannelID": "6",
                            "Frequency": "558.0 MHz",
                            "PowerLevel": "-1.4 dBmV",
                            "SNRLevel": "37.9 dB",
                            "Modulation": "256QAM",
                            "LockStatus": "Not Locked",
                            "ChannelType": "1",
                        },
                    ],
                    "USTbl": [
                        {
                            "__id": "1",
                            "ChannelID": "1",
                            "Frequency": "36.9",
                            "PowerLevel": "44.3",
                            "SymbolRate": "5120",
                            "LockStatus": "Locked",
                            "ChannelType": "2",
                        }
                    ],
                    "exDSTbl": [
                        {
                            "__id": "1",
                            "ChannelID": "33",
                            "StartFrequency": "751",
                            "PLCFrequency": "802",
                            "CentralFrequency": "846",
                            "BandWidth": "190",
                            "PowerLevel": "4.2",
                            "SNRLevel": "40.1",
                            "FFT": "4K",
                            "LockStatus": "Locked",
                            "ChannelType": "3",
                        }
                    ],
                    "exUSTbl": [
                        {
                            "__id": "1",
                            "ChannelID": "41",
                            "StartFrequency": "29.775",
                            "PLCFrequency": "",
                            "CentralFrequency": "45.6",
                            "BandWidth": "31.65",
                            "PowerLevel": "41.0",
                            "FFT": "2K",
                            "LockStatus": "Locked",
                            "ChannelType": "4",
                        }
                    ],
                },
            }
        ),
        "modem_status_single": json.dumps(
            {
                "error": "ok",
                "message": "",
                "data": {
                    "DSTbl": [
                        {
                            "__id": "1",
                            "ChannelID": "5",
                            "Frequency": "550.0",
                            "PowerLevel": "2.1",
                            "SNRLevel": "38.5",
                            "Modulation": "256QAM",
                            "LockStatus": "Locked",
                            "ChannelType": "1",
                        }
                    ],
                    "USTbl": [],
                    "exDSTbl": None,
                    "exUSTbl": [],
                },
            }
        ),
        "modem_status_error": json.dumps({"error": "error", "message": "not allowed", "data": None}),
        "logout_success": json.dumps({"error": "ok", "message": "MSG_LOGOUT_1"}),
        "logout_failure": json.dumps({"error": "error", "message": "MSG_LOGOUT_2"}),
    }


@pytest.fixture
def login_flow(station_responses):
    """The four responses of a successful login, with the CSRF cookie on the login answer."""
    return [
        make_response(station_responses["bootstrap"]),
        make_response(station_responses["salts"]),
        make_response(station_responses["login_success"], set_cookie="auth=TOKEN123; Path=/; HttpOnly"),
        make_response(station_responses["menu"]),
    ]


@pytest.fixture
def mock_station_request():
    """Patch the HTTP layer; tests assign side_effect with the response sequence."""
    with patch("requests.Session.request") as mock_request:
        yield mock_request


@pytest.fixture
def client_kwargs():
    """Default client kwargs for testing."""
    return {
        "password": "test_password",
        "username": "admin",
        "url": STATION_URL,
        "timeout": 20,
        "enable_instrumentation": True,
    }
