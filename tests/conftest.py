"""Shared fixtures: sample records, a fake backend client and HTTP responses."""
import json
from datetime import datetime, timedelta, timezone

import pytest
import requests

from firmware_admin.auth.session_store import SessionContext, SessionStore
from firmware_admin.data.models import Device, Firmware, Project
from firmware_admin.state.list_state import FirmwareListState

BASE_DATE = datetime(2024, 3, 7, 14, 5, 9, tzinfo=timezone.utc)


def make_firmware(n, esp_id="dev-1", version=None, uploaded=True, **kwargs):
    return Firmware(
        id=f"fw-{n}",
        version=version or f"1.0.{n}",
        esp_id=esp_id,
        description=kwargs.pop("description", f"build {n}"),
        file_name=kwargs.pop("file_name", f"stored-{n}.bin"),
        original_file_name=kwargs.pop("original_file_name", f"firmware-{n}.bin"),
        file_size=kwargs.pop("file_size", 1024 * n),
        uploaded_date=BASE_DATE + timedelta(days=n) if uploaded else None,
    )


def make_response(status=200, body=None, content=None, url="http://backend/api/x"):
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = "utf-8"
    if content is not None:
        response._content = content
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


class FakeHTTPSession:
    """Stands in for requests.Session; replays queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeAPI:
    """In-memory backend used by the action tests."""

    def __init__(self, firmwares=(), devices=(), projects=()):
        self.firmwares = list(firmwares)
        self.devices = list(devices)
        self.projects = list(projects)
        self.token = None
        self.calls = []
        self.fail_on = {}

    def _maybe_fail(self, name, key=None):
        error = self.fail_on.get((name, key)) or self.fail_on.get((name, None))
        if error is not None:
            raise error

    def list_firmwares(self):
        self.calls.append(("list_firmwares",))
        self._maybe_fail("list_firmwares")
        return list(self.firmwares)

    def list_devices(self):
        self.calls.append(("list_devices", self.token))
        self._maybe_fail("list_devices")
        return list(self.devices)

    def list_projects(self):
        self.calls.append(("list_projects", self.token))
        self._maybe_fail("list_projects")
        return list(self.projects)

    def upload_firmware(self, version, description, esp_id, file_name, content):
        self.calls.append(("upload", version, description, esp_id, file_name, content))
        self._maybe_fail("upload")
        return {"message": "ok"}

    def download_firmware(self, firmware_id):
        self.calls.append(("download", firmware_id))
        self._maybe_fail("download", firmware_id)
        return f"binary-{firmware_id}".encode()

    def delete_firmware(self, firmware_id):
        self.calls.append(("delete", firmware_id))
        self._maybe_fail("delete", firmware_id)
        self.firmwares = [fw for fw in self.firmwares if fw.id != firmware_id]

    def calls_named(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def projects():
    return [Project(id="p-1", name="Greenhouse"), Project(id="p-2", name="Weather")]


@pytest.fixture
def devices():
    return [
        Device(device_id="dev-1", name="Sensor A", project="p-1", status="online",
               date_created=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        Device(device_id="dev-2", name="Sensor B", project="p-1"),
        Device(device_id="dev-3", name="Station", project="p-2", status="offline"),
    ]


@pytest.fixture
def firmwares():
    return [
        make_firmware(1, "dev-1"),
        make_firmware(2, "dev-2"),
        make_firmware(3, "dev-3"),
        make_firmware(4, "dev-1"),
        make_firmware(5, "dev-3"),
        make_firmware(6, "dev-1"),
        make_firmware(7, "dev-2"),
    ]


@pytest.fixture
def state(firmwares, devices, projects):
    list_state = FirmwareListState()
    list_state.replace_firmwares(firmwares)
    list_state.replace_devices(devices)
    list_state.replace_projects(projects)
    return list_state


@pytest.fixture
def session_store():
    store = SessionStore({})
    store.save("secret-token", {"name": "Ada", "email": "ada@example.com"})
    return store


@pytest.fixture
def expired_calls():
    return []


@pytest.fixture
def session(session_store, expired_calls):
    return SessionContext(session_store, on_expired=lambda: expired_calls.append(True))
