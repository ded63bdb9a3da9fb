# -*- coding: utf-8 -*-
"""This module contains the write path: updating and creating resources.

The API doesn't distinguish update and create by HTTP method: both are a POST, an update goes to the URI of a resource
(``/api/device/42``), a create to the index of a resource type (``/api/device/``).

What to write is passed as one of two explicit types, so the decision what is written is made by the caller:

- :class:`FieldUpdate` - a mapping of the fields to write (e.g. ``{"name": "web01"}``)
- :class:`RecordUpdate` - a whole record as loaded from the API, whose metadata fields are stripped before sending

An update with nothing to write is not sent. A :class:`sl1api_py.exceptions.NoOpWarning` is issued instead, and the
returned :class:`MutationResult` has the outcome :attr:`Outcome.NOOP`.
"""

import collections.abc
import enum
import logging
import warnings
from typing import NamedTuple, Optional

from .exceptions import NoOpWarning, ValidationError
from .results import Record, link_of, parse_uri, strip_metadata, unroll

LOGGER = logging.getLogger(__name__)


class Outcome(enum.Enum):
	"""What happened to a change."""

	#: Nothing to write, no request sent
	NOOP = "noop"
	#: Dry run, no request sent
	DRY_RUN = "dry_run"
	#: Sent to the API successfully
	SUBMITTED = "submitted"


class MutationResult(NamedTuple):
	"""Result of an update or create."""

	outcome: Outcome
	#: Absolute URL the change was (or would have been) sent to
	uri: str
	#: The fields that were (or would have been) sent
	fields: dict
	#: The updated/created record, if requested and returned by the API
	record: Optional[Record] = None

	@property
	def submitted(self) -> bool:
		return self.outcome is Outcome.SUBMITTED


class FieldUpdate:
	"""A set of fields to write."""

	def __init__(self, fields: collections.abc.Mapping):
		if not isinstance(fields, collections.abc.Mapping):
			raise ValidationError(f"Fields to update have to be a mapping, not {type(fields).__name__}")
		metadata = [key for key in fields if key in Record.METADATA_FIELDS]
		if metadata:
			raise ValidationError(f"Metadata fields can't be written: {', '.join(metadata)}")
		self.fields = dict(fields)

	def __repr__(self):
		return f"<{self.__class__.__name__} of {', '.join(self.fields) or 'no fields'}>"


class RecordUpdate:
	"""A whole record to write, without its metadata fields."""

	def __init__(self, record: collections.abc.Mapping):
		if not isinstance(record, collections.abc.Mapping):
			raise ValidationError(f"A record has to be a mapping, not {type(record).__name__}")
		self.record = record
		self.fields = strip_metadata(record)

	@property
	def uri(self) -> Optional[str]:
		"""The URI the record was loaded from."""
		return self.record.get(Record.URI_FIELD)

	def __repr__(self):
		return f"<{self.__class__.__name__} of {self.uri or 'a record without URI'}>"


class Mutator:
	"""Sends updates and creates to the API."""

	def __init__(self, api):
		self.api = api

	def submit(self, uri: str, change, dry_run=False, return_updated=False) -> MutationResult:
		"""POST the fields of a change (FieldUpdate or RecordUpdate) to a URI.

		:param uri: Target URI: a link, a path relative to the API root or an absolute URL
		:param change: The change, a FieldUpdate or RecordUpdate
		:param dry_run: Only log what would be sent
		:param return_updated: Parse the response and return the record with metadata (from the target URI)
		:return: MutationResult with the outcome
		"""
		url = self.api.resolve(uri)
		fields = change.fields
		if not fields:
			warnings.warn(f"Nothing to write to {url}, no request sent", NoOpWarning, stacklevel=2)
			LOGGER.debug("No fields to write to %s", url)
			return MutationResult(Outcome.NOOP, url, fields)
		if dry_run:
			LOGGER.info("Dry run, would write %s to %s", fields, url)
			return MutationResult(Outcome.DRY_RUN, url, fields)

		response = self.api.send_request(url, "POST", body=fields)
		LOGGER.debug("Wrote %s to %s (%s)", ", ".join(fields), url, response.status_code)
		record = None
		if return_updated and response.content:
			record = self._record(response, url)
		return MutationResult(Outcome.SUBMITTED, url, fields, record)

	def create(self, resource: str, change, dry_run=False, return_created=False) -> MutationResult:
		"""Create a new resource of the given type, see :meth:`submit`."""
		return self.submit(self.api.build_uri(resource), change, dry_run, return_created)

	def _record(self, response, url: str) -> Optional[Record]:
		"""The record of a response to a POST, with metadata from Location header, URI field or target URL."""
		data = response.json()
		records = unroll(data)
		if not records:
			return None
		record = records[0]
		if isinstance(record, Record) and record.uri is not None:
			return record

		for candidate in (response.headers.get("Location"), link_of(record), url):
			try:
				parse_uri(candidate)
			except ValidationError:
				continue
			return Record.from_uri(candidate, record)
		return Record(record)
