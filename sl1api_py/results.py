# -*- coding: utf-8 -*-
"""
This module contains all relevant stuff regarding the data returned from the API: links, records and the unrolling of
the different response shapes into a flat sequence of records.

The API returns one of three shapes:

- a single object (a mapping of field names to values),
- an object of links, whose every key is a resource URI like ``/api/device/1`` mapped to the (extended) object,
- either of the above wrapped in an outer object with counters (``total_matched``, ...) and a ``result_set`` field;
  without extended fetch the ``result_set`` is a list of link stubs (``{"URI": ..., "description": ...}``).
"""

import collections.abc
import re
from typing import NamedTuple, Optional, Union
from urllib.parse import urlparse

from .exceptions import TransportError, ValidationError

#: Prefix of every resource URI path
API_PREFIX = "/api/"
#: Everything starting with the API prefix is considered a link
LINK_PATTERN = re.compile(r"^/api/[^\s?#]+$")
#: Resource URIs: /api/<type>/<id>, the type may contain slashes for sub-resources
IDENTIFIER_PATTERN = re.compile(r"^/api/(?P<type>.+)/(?P<id>[^/]+)/?$")


class ResourceIdentifier(NamedTuple):
	"""Resource type and ID of a record."""

	type: str
	id: Union[int, str]

	@property
	def uri(self) -> str:
		"""The relative (canonical) URI for this identifier."""
		return f"{API_PREFIX}{self.type}/{self.id}"

	def __str__(self):
		return self.uri


def is_link(value) -> bool:
	"""True if value is a string that looks like a resource URI (/api/...)."""
	return isinstance(value, str) and LINK_PATTERN.match(value) is not None


def is_link_list(value) -> bool:
	"""True for a non-empty list of links."""
	return isinstance(value, list) and bool(value) and all(is_link(item) for item in value)


def link_of(value) -> Optional[str]:
	"""Return the link a value represents: the value itself, or the URI field of a nested object. None otherwise."""
	if is_link(value):
		return value
	if isinstance(value, collections.abc.Mapping):
		uri = value.get("URI")
		if is_link(uri):
			return uri
	return None


def uri_path(uri: str) -> str:
	"""Get the /api/... path of a URI (which could also be an absolute URL), without query and trailing slash."""
	path = urlparse(uri).path if "://" in uri else uri.split("?", 1)[0]
	pos = path.find(API_PREFIX)
	if pos > 0:
		path = path[pos:]
	if len(path) > len(API_PREFIX):
		path = path.rstrip("/")
	return path


def parse_id(id_) -> Union[int, str]:
	"""IDs are integers if they look like one, strings otherwise."""
	if isinstance(id_, str) and id_.isdigit():
		return int(id_)
	return id_


def parse_uri(uri: str) -> ResourceIdentifier:
	"""Parse a resource URI (/api/<type>/<id> or an absolute URL with such a path).

	:raises ValidationError: if the URI does not identify a resource.
	"""
	if not isinstance(uri, str):
		raise ValidationError(f"Not a resource URI: {uri!r}")
	match = IDENTIFIER_PATTERN.match(uri_path(uri))
	if match is None:
		raise ValidationError(f"Not a resource URI: {uri!r}")
	return ResourceIdentifier(match.group("type"), parse_id(match.group("id")))


#######################################################################################################################
# Records
#######################################################################################################################


class Record(dict):
	"""A record of the API: a dict of fields with synthesized metadata.

	The metadata fields (see :attr:`METADATA_FIELDS`) hold the resource type, ID and canonical URI the record was
	loaded from. They are never sent back to the API, see :meth:`fields`.
	"""

	#: Keys of the metadata fields
	TYPE_FIELD = "_type"
	ID_FIELD = "_id"
	URI_FIELD = "_uri"
	METADATA_FIELDS = (TYPE_FIELD, ID_FIELD, URI_FIELD)

	@classmethod
	def from_uri(cls, uri: str, data=None) -> "Record":
		"""Create a record from data loaded from the given URI, with metadata attached."""
		record = cls(data or {})
		record.attach(uri)
		return record

	def attach(self, uri: str):
		"""Attach metadata derived from the given resource URI."""
		identifier = parse_uri(uri)
		self[self.TYPE_FIELD] = identifier.type
		self[self.ID_FIELD] = identifier.id
		self[self.URI_FIELD] = identifier.uri

	@property
	def type(self) -> Optional[str]:
		return self.get(self.TYPE_FIELD)

	@property
	def id(self) -> Optional[Union[int, str]]:
		return self.get(self.ID_FIELD)

	@property
	def uri(self) -> Optional[str]:
		return self.get(self.URI_FIELD)

	@property
	def identifier(self) -> Optional[ResourceIdentifier]:
		"""The ResourceIdentifier, or None without metadata."""
		if self.type is None:
			return None
		return ResourceIdentifier(self.type, self.id)

	def fields(self) -> dict:
		"""All fields except the metadata, e.g. to send them back to the API."""
		return strip_metadata(self)

	def __repr__(self):
		return f"<{self.__class__.__name__} {self.uri or '(no URI)'}>"


def strip_metadata(mapping: collections.abc.Mapping) -> dict:
	"""A copy of the mapping without metadata fields."""
	return {key: value for key, value in mapping.items() if key not in Record.METADATA_FIELDS}


#######################################################################################################################
# Unrolling
#######################################################################################################################


def _record_from_link(uri, value) -> Record:
	"""Record for one entry of an object of links."""
	if isinstance(value, collections.abc.Mapping):
		return Record.from_uri(uri, value)
	# Non-extended collections may map the link to a description only
	return Record.from_uri(uri, None if value is None else {"description": value})


def _record_from_stub(stub):
	"""Record for a stub ({"URI": ..., ...}) in a result_set list."""
	uri = link_of(stub)
	if uri is None:
		return stub
	if isinstance(stub, str):
		# Just a link
		return Record.from_uri(uri, {"URI": uri})
	return Record.from_uri(uri, stub)


def unroll(data) -> list:
	"""Normalize a decoded JSON value to a list of records.

	- A ``result_set`` wrapper is unwrapped first.
	- An object whose every key is a link is a collection: every value becomes a Record with metadata from its key.
	- A list (result_set of stubs) gets a Record for every item with a URI field.
	- Any other object is a single record, returned unchanged as the only item of the list.
	- An empty object (or None) results in an empty list.

	:raises TransportError: if the data has none of the shapes above.
	"""
	if isinstance(data, collections.abc.Mapping) and "result_set" in data:
		data = data["result_set"]
	if data is None:
		return []
	if isinstance(data, list):
		return [_record_from_stub(item) for item in data]
	if not isinstance(data, collections.abc.Mapping):
		raise TransportError(f"Unexpected response data of type {type(data).__name__}")

	if all(is_link(key) for key in data):
		# Also true for an empty object, which results in an empty list
		return [_record_from_link(key, value) for key, value in data.items()]
	return [data]


class Page(collections.abc.Sequence):
	"""One response of the API as an (immutable) sequence of records, plus the counters the server reported.

	Think of it as a tuple of records. ``total_matched`` is None if the response had no counters (which is the case
	for everything not wrapped in a result_set object).
	"""

	def __init__(self, records=None, total_matched=None, total_returned=None):
		self._records = tuple(records or ())
		self.total_matched = total_matched
		self.total_returned = total_returned

	@classmethod
	def from_json(cls, data) -> "Page":
		"""Create a page from decoded response data."""
		records = unroll(data)
		total_matched = total_returned = None
		if isinstance(data, collections.abc.Mapping) and "result_set" in data:
			total_matched = _counter(data.get("total_matched"))
			total_returned = _counter(data.get("total_returned"))
		return cls(records, total_matched, total_returned)

	@property
	def records(self) -> tuple:
		return self._records

	def __getitem__(self, index):
		if isinstance(index, slice):
			return self.__class__(self._records[index])
		return self._records[index]

	def __len__(self):
		return len(self._records)

	def __eq__(self, other):
		try:
			return self.records == other.records
		except AttributeError:
			return NotImplemented

	def fields(self, key, nokey_value=None):
		"""Yield the value every record has for the given key (nokey_value if it has none)."""
		for record in self._records:
			try:
				yield record[key]
			except (KeyError, TypeError):
				yield nokey_value

	def __str__(self):
		"""Return short string representation."""
		res = len(self) or "no"
		matched = "?" if self.total_matched is None else self.total_matched
		return "<{} with {} records of {} matched>".format(self.__class__.__name__, res, matched)


def _counter(value) -> Optional[int]:
	"""Parse a counter of the server (could be sent as a string)."""
	try:
		return int(value)
	except (TypeError, ValueError):
		return None
