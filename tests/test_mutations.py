# -*- coding: utf-8 -*-
"""
Tests for updating and creating records.
"""

import json
import warnings
import pytest

from .sl1_mock import mock_session_handler, get_mock

from sl1api_py import Client
from sl1api_py.exceptions import NoOpWarning, ValidationError, NotFoundError
from sl1api_py.mutations import FieldUpdate, RecordUpdate, Mutator, Outcome, MutationResult
from sl1api_py.results import Record


URL = "http://sl1:1234/api/"


@pytest.fixture
def client():
	"""Client with mocked API."""
	yield from mock_session_handler(Client(URL, auth=("user", "pass")))


def test_field_update():
	change = FieldUpdate({"name": "web01"})
	assert change.fields == {"name": "web01"}
	assert repr(change) == "<FieldUpdate of name>"
	assert repr(FieldUpdate({})) == "<FieldUpdate of no fields>"


@pytest.mark.parametrize("fields", ({"_id": 3}, {"name": "x", "_uri": "/api/device/1"}, ["name"], None))
def test_field_update_fail(fields):
	with pytest.raises(ValidationError):
		FieldUpdate(fields)


def test_record_update():
	record = Record.from_uri("/api/device/1", {"name": "device-001", "state": 1})
	change = RecordUpdate(record)
	assert change.fields == {"name": "device-001", "state": 1}
	assert change.uri == "/api/device/1"
	assert repr(change) == "<RecordUpdate of /api/device/1>"
	with pytest.raises(ValidationError):
		RecordUpdate("device-001")


def test_noop(client):
	"""Nothing to write: no request, a warning and the NOOP outcome."""
	with pytest.warns(NoOpWarning):
		result = client.update("/api/device/1", {})
	assert result.outcome is Outcome.NOOP
	assert not result.submitted
	assert result.uri == URL + "device/1"
	assert result.fields == {}
	assert not get_mock(client).requests


def test_noop_record(client):
	"""A record consisting of metadata only is nothing to write either."""
	with pytest.warns(NoOpWarning):
		result = client.update_record(Record.from_uri("/api/device/1"))
	assert result.outcome is Outcome.NOOP
	assert not get_mock(client).requests


def test_dry_run(client):
	with warnings.catch_warnings():
		warnings.simplefilter("error")
		result = client.update("/api/device/1", {"name": "web01"}, dry_run=True)
	assert result == MutationResult(Outcome.DRY_RUN, URL + "device/1", {"name": "web01"})
	assert not get_mock(client).requests
	assert get_mock(client).data["device"][1]["name"] == "device-001"


def test_update(client):
	result = client.update("device/1", {"name": "web01"})
	assert result.submitted
	assert result.record is None

	request, = get_mock(client).requests
	assert request.method == "POST"
	assert request.url == URL + "device/1"
	assert json.loads(request.body) == {"name": "web01"}
	assert get_mock(client).data["device"][1]["name"] == "web01"


def test_update_return_updated(client):
	result = client.update("/api/device/1", {"name": "web01"}, return_updated=True)
	assert result.record.uri == "/api/device/1"
	assert result.record["name"] == "web01"
	assert result.record["state"] == 1


def test_update_record(client):
	"""A loaded record is written back without its metadata."""
	record = client.fetch("/api/device/2")
	record["name"] = "renamed"
	result = client.update_record(record, return_updated=True)
	assert result.submitted
	assert result.record == record

	request, = get_mock(client).requests_for("POST")
	body = json.loads(request.body)
	assert body["name"] == "renamed"
	assert not set(body) & set(Record.METADATA_FIELDS)


def test_update_record_without_uri(client):
	with pytest.raises(ValidationError):
		client.update_record(Record({"name": "x"}))
	result = client.update_record(Record({"name": "x"}), uri="/api/device/3")
	assert result.submitted


def test_update_not_found(client):
	with pytest.raises(NotFoundError):
		client.update("/api/device/9999", {"name": "x"})


def test_create(client):
	result = client.create("device", {"name": "new-device"}, return_created=True)
	assert result.submitted
	assert result.uri == URL + "device/"
	assert result.record.uri == "/api/device/231"
	assert result.record["name"] == "new-device"
	assert get_mock(client).data["device"][231] == {"name": "new-device"}


def test_create_dry_run(client):
	result = client.devices.create({"name": "new-device"}, dry_run=True)
	assert result.outcome is Outcome.DRY_RUN
	assert not get_mock(client).requests


def test_mutator(client):
	mutator = Mutator(client)
	result = mutator.submit(URL + "organization/1", FieldUpdate({"city": "Othertown"}))
	assert result.submitted
	assert get_mock(client).data["organization"][1]["city"] == "Othertown"
