# -*- coding: utf-8 -*-
"""
Tests for the results module: links, records, unrolling and pages.
"""

import pytest

from sl1api_py.exceptions import TransportError, ValidationError
from sl1api_py.results import (
	Record, ResourceIdentifier, Page, unroll, parse_uri, uri_path, is_link, is_link_list, link_of, strip_metadata
)


#######################################################################################################################
# Links
#######################################################################################################################


@pytest.mark.parametrize("value, expected", (
		("/api/device/1", True),
		("/api/device_group/5/expanded_devices", True),
		("/api/", False),
		("/api/device/1?limit=3", False),
		("device/1", False),
		("web-010", False),
		(1, False),
		(None, False),
))
def test_is_link(value, expected):
	assert is_link(value) is expected


def test_is_link_list():
	assert is_link_list(["/api/device/1", "/api/device/2"])
	assert not is_link_list([])
	assert not is_link_list(["/api/device/1", "foo"])
	assert not is_link_list("/api/device/1")


def test_link_of():
	assert link_of("/api/device/1") == "/api/device/1"
	assert link_of({"URI": "/api/device/1", "description": "device-001"}) == "/api/device/1"
	assert link_of({"URI": "nope"}) is None
	assert link_of(42) is None


@pytest.mark.parametrize("uri, expected", (
		("/api/device/1", ResourceIdentifier("device", 1)),
		("/api/device/1/", ResourceIdentifier("device", 1)),
		("http://sl1:1234/api/device/1?extended_fetch=1", ResourceIdentifier("device", 1)),
		("/api/custom_attribute/device/c-1", ResourceIdentifier("custom_attribute/device", "c-1")),
))
def test_parse_uri(uri, expected):
	assert parse_uri(uri) == expected


@pytest.mark.parametrize("uri", ("/api/device", "/api/", "device/1", "", None, 1))
def test_parse_uri_fail(uri):
	with pytest.raises(ValidationError):
		parse_uri(uri)


def test_uri_path():
	assert uri_path("https://sl1/api/device/?limit=5") == "/api/device"
	assert uri_path("/api/device/1") == "/api/device/1"
	assert uri_path("/api/") == "/api/"


def test_resource_identifier():
	identifier = ResourceIdentifier("device", 42)
	assert identifier.uri == "/api/device/42"
	assert str(identifier) == "/api/device/42"


#######################################################################################################################
# Records
#######################################################################################################################


def test_record_metadata():
	"""Test metadata attached from the URI."""
	record = Record.from_uri("/api/device/42/", {"name": "web-042"})
	assert record.type == "device"
	assert record.id == 42
	assert record.uri == "/api/device/42"
	assert record.identifier == ResourceIdentifier("device", 42)
	assert record.fields() == {"name": "web-042"}
	assert repr(record) == "<Record /api/device/42>"


def test_record_without_metadata():
	record = Record({"name": "x"})
	assert record.type is None
	assert record.uri is None
	assert record.identifier is None
	assert repr(record) == "<Record (no URI)>"


def test_strip_metadata():
	record = Record.from_uri("/api/device/1", {"name": "x"})
	stripped = strip_metadata(record)
	assert stripped == {"name": "x"}
	assert "_uri" in record


#######################################################################################################################
# Unrolling
#######################################################################################################################


def test_unroll_links():
	"""An object of links is a collection, the keys are the metadata source."""
	data = {
		"/api/device/1": {"name": "device-001"},
		"/api/device/2": {"name": "device-002"},
	}
	records = unroll(data)
	assert len(records) == 2
	assert all(isinstance(record, Record) for record in records)
	assert [record.type for record in records] == ["device", "device"]
	assert [record.id for record in records] == [1, 2]
	assert records[1]["name"] == "device-002"


def test_unroll_single():
	"""A single object stays exactly as it is."""
	data = {"name": "x", "state": "PA"}
	records = unroll(data)
	assert len(records) == 1
	assert records[0] is data


@pytest.mark.parametrize("data", ({}, None, {"result_set": []}, {"result_set": {}}))
def test_unroll_empty(data):
	assert unroll(data) == []


def test_unroll_result_set_stubs():
	data = {
		"searchspec": {},
		"total_matched": 2,
		"total_returned": 2,
		"result_set": [
			{"URI": "/api/device/1", "description": "device-001"},
			"/api/device/2",
		]
	}
	records = unroll(data)
	assert [record.uri for record in records] == ["/api/device/1", "/api/device/2"]
	assert records[0]["description"] == "device-001"
	assert records[1]["URI"] == "/api/device/2"


def test_unroll_result_set_extended():
	data = {
		"total_matched": 1,
		"total_returned": 1,
		"result_set": {"/api/organization/6": {"company": "Organization 6"}},
	}
	record, = unroll(data)
	assert record.uri == "/api/organization/6"
	assert record["company"] == "Organization 6"


def test_unroll_link_descriptions():
	"""Non-extended objects of links may only map to a description."""
	record, = unroll({"/api/device/3": "device-003"})
	assert record == {"description": "device-003", "_type": "device", "_id": 3, "_uri": "/api/device/3"}


@pytest.mark.parametrize("data", ("foo", 42, True))
def test_unroll_fail(data):
	with pytest.raises(TransportError):
		unroll(data)


#######################################################################################################################
# Pages
#######################################################################################################################


def test_page():
	data = {
		"total_matched": "230",
		"total_returned": 2,
		"result_set": {
			"/api/device/1": {"name": "device-001"},
			"/api/device/2": {"name": "device-002"},
		}
	}
	page = Page.from_json(data)
	assert len(page) == 2
	assert page.total_matched == 230
	assert page.total_returned == 2
	assert list(page.fields("name")) == ["device-001", "device-002"]
	assert list(page.fields("nope", "-")) == ["-", "-"]
	assert page[0].id == 1
	assert len(page[1:]) == 1
	assert str(page) == "<Page with 2 records of 230 matched>"


def test_page_single():
	page = Page.from_json({"name": "x"})
	assert len(page) == 1
	assert page.total_matched is None
	assert str(page) == "<Page with 1 records of ? matched>"


def test_page_empty():
	page = Page.from_json({"total_matched": 0, "total_returned": 0, "result_set": []})
	assert not page
	assert page.total_matched == 0
	assert page == Page()
