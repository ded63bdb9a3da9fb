# -*- coding: utf-8 -*-
"""This module implements the expansion of link-valued properties of records.

A record of the API often references other resources with links (e.g. a device has ``"organization":
"/api/organization/6"``). Expanding a property replaces such a link with the record it points to. Property paths are
``/``-delimited, so that links of expanded records can be expanded as well (``class_type/device_category``).

Every link target is fetched at most once per :class:`ExpansionCache`. A cache belongs to one logical operation (e.g. one
find call): it is passed down explicitly and never shared between unrelated operations, as it would return stale data
otherwise.
"""

import collections.abc
import logging
from typing import Iterable, MutableMapping, Optional, Union

from .exceptions import NotFoundError, TransportError
from .results import Record, link_of, uri_path

LOGGER = logging.getLogger(__name__)

#: Separator of the fields in a property path
PATH_SEPARATOR = "/"


class ExpansionCache(collections.abc.MutableMapping):
	"""Mapping of links (/api/...) to the records fetched for them.

	The hits and misses counters are there to find out how effective the cache was. Links whose target could not be
	fetched by a lenient expander are remembered in :attr:`failed`, so they are not requested again.
	"""

	def __init__(self):
		self._records = {}
		self.hits = 0
		self.misses = 0
		#: Links that failed to load (lenient expansion only)
		self.failed = set()

	def lookup(self, uri: str):
		"""Get the cached record for a link (None if not cached), counting hits and misses."""
		try:
			record = self._records[uri]
		except KeyError:
			self.misses += 1
			LOGGER.debug("Expansion cache miss for %s", uri)
			return None
		self.hits += 1
		return record

	def __getitem__(self, uri):
		return self._records[uri]

	def __setitem__(self, uri, record):
		self._records[uri] = record

	def __delitem__(self, uri):
		del self._records[uri]

	def __iter__(self):
		return iter(self._records)

	def __len__(self):
		return len(self._records)

	def __str__(self):
		return f"<{self.__class__.__name__} with {len(self)} records, {self.hits} hits, {self.misses} misses>"


def split_path(path: str):
	"""Split a property path into head field and tail path (None if there is no tail)."""
	head, _, tail = path.strip(PATH_SEPARATOR).partition(PATH_SEPARATOR)
	return head, (tail or None)


class Expander:
	"""Expands link-valued properties of records.

	Two error policies are available:

	- strict (default): any error while fetching a link target propagates, so the whole operation fails.
	- lenient (``strict=False``): if a link target can't be fetched (NotFoundError or TransportError), a warning is
	  logged and the raw link stays in place; sibling paths are expanded anyway. An AuthenticationError still
	  propagates, as every other request would fail the same way.
	"""

	def __init__(self, api, cache: Optional[ExpansionCache] = None, strict=True, limit=None):
		"""Init an expander.

		:param api: The API session used to fetch link targets
		:param cache: The cache for this operation, a new one is created if None
		:param strict: Error policy, see class docstring
		:param limit: Page limit for fetching a link target, defaults to the expand_limit of the session
		"""
		self.api = api
		self.cache = cache if cache is not None else ExpansionCache()
		self.strict = strict
		self.limit = limit if limit is not None else api.expand_limit

	def fetch(self, uri: str) -> Union[Record, list]:
		"""Get the record(s) a link points to, from the cache or the API.

		A link to a single resource results in a Record, a link to an index (e.g. a sub-resource collection) in a list
		of records.
		"""
		uri = uri_path(uri)
		record = self.cache.lookup(uri)
		if record is not None:
			return record

		params = {"extended_fetch": 1, "limit": self.limit}
		try:
			page = self.api.send_request(uri, params=params).page()
		except (NotFoundError, TransportError):
			if not self.strict:
				self.cache.failed.add(uri)
			raise
		records = page.records
		if len(records) == 1 and page.total_matched is None:
			# A single resource
			record = records[0]
			if not isinstance(record, Record):
				record = Record.from_uri(uri, record)
		else:
			record = list(records)
		self.cache[uri] = record
		return record

	def expand(self, record: MutableMapping, *paths: str) -> MutableMapping:
		"""Expand the given property paths of a record (in place), return the record."""
		for path in paths:
			if not path:
				continue
			try:
				self._expand_path(record, path)
			except (NotFoundError, TransportError) as exc:
				# AuthenticationError is neither, so it always propagates
				if self.strict:
					raise
				LOGGER.warning("Unable to expand %s of %s: %s", path, getattr(record, "uri", None) or "record", exc)
		return record

	def expand_all(self, records: Iterable[MutableMapping], *paths: str):
		"""Expand the given property paths for every record, yield the records."""
		for record in records:
			yield self.expand(record, *paths)

	def _expand_path(self, record, path: str):
		"""Expand one path: resolve the head field, recurse with the tail into the resolved value(s)."""
		if not isinstance(record, collections.abc.MutableMapping):
			return
		head, tail = split_path(path)
		value = record.get(head)

		if isinstance(value, list):
			resolved = [self._resolve(item) for item in value]
		else:
			resolved = self._resolve(value)
		if resolved is not value:
			record[head] = resolved

		if tail is None:
			return
		for item in (resolved if isinstance(resolved, list) else (resolved, )):
			self._expand_path(item, tail)

	def _resolve(self, value):
		"""Resolve one value: a link or an object with a URI field is fetched, everything else stays as it is."""
		if isinstance(value, Record) and value.uri is not None:
			# Already expanded
			return value
		uri = link_of(value)
		if uri is None:
			return value
		if not self.strict and uri_path(uri) in self.cache.failed:
			# Failed before, keep the raw value
			return value
		return self.fetch(uri)
