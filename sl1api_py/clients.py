# -*- coding: utf-8 -*-
"""This module contains the client for object-oriented access to the API: finding, getting, expanding, updating and
creating records."""

import logging
from typing import Iterable, Iterator, Optional, Sequence

from .api import API
from . import objects
from .expansion import Expander, ExpansionCache
from .filters import id_filter
from .mutations import FieldUpdate, Mutator, MutationResult, RecordUpdate
from .pagination import Finder, batches, normalize_ids
from .results import Record
from .exceptions import ValidationError

LOGGER = logging.getLogger(__name__)


class Client(API):
	"""Standard client, built on the :class:`sl1api_py.api.API` session (and its configuration).

	Every operation that loads records takes an optional expansion cache. If none is passed, a new one is used for
	just this operation; pass one explicitly to share fetched link targets between operations that belong together.
	"""

	def __init__(self, url, **sessionparams):
		"""The client takes the same parameters as :class:`sl1api_py.api.API`."""
		super().__init__(url, **sessionparams)
		self.organizations = objects.Organizations(self)
		self.devices = objects.Devices(self)
		self.device_groups = objects.DeviceGroups(self)
		self.alerts = objects.Alerts(self)

	def find(self, resource: str, filter=None, limit: Optional[int] = None, offset=0, order: Optional[str] = None,
			expand: Sequence[str] = (), cache: Optional[ExpansionCache] = None, page_size: Optional[int] = None,
			strict_expand=True, extended=True) -> Iterator[Record]:
		"""Find records matching a filter, returns a lazy iterator (see :class:`sl1api_py.pagination.Finder`).

		Invalid parameters raise a ValidationError right away, not on iteration.
		"""
		finder = Finder(
			self, resource, filter=filter, limit=limit, offset=offset, order=order, expand=expand, cache=cache,
			page_size=page_size, extended=extended, strict_expand=strict_expand
		)
		return iter(finder)

	def get_by_id(self, resource: str, ids: Iterable, expand: Sequence[str] = (), cache: Optional[ExpansionCache] = None,
			strict_expand=True) -> Iterator[Record]:
		"""Get records of a resource type by ID, returns a lazy iterator.

		IDs are requested in batches of page_size, with one find per batch. The records come in batch order, the order
		within a batch is up to the server. Unknown IDs are silently missing in the output.

		:param ids: IDs as integers, strings or links (/api/<resource>/<id>)
		:raises ValidationError: on an invalid ID
		"""
		ids = normalize_ids(resource, ids)
		cache = cache if cache is not None else ExpansionCache()
		return self._get(resource, ids, expand, cache, strict_expand)

	def _get(self, resource, ids, expand, cache, strict_expand):
		for batch in batches(ids, self.page_size):
			LOGGER.debug("Getting %d %s records by ID", len(batch), resource)
			yield from self.find(
				resource, filter=id_filter(batch), limit=len(batch), expand=expand, cache=cache,
				page_size=self.page_size, strict_expand=strict_expand
			)

	def fetch(self, uri: str, expand: Sequence[str] = (), cache: Optional[ExpansionCache] = None,
			strict_expand=True) -> Record:
		"""Fetch a single record by URI (link, relative path or absolute URL).

		:raises NotFoundError: if there is no such resource
		:raises ValidationError: if the URI points to something that is not a single resource
		"""
		page = self.send_request(uri, params={"extended_fetch": 1}).page()
		if len(page) != 1 or page.total_matched is not None:
			raise ValidationError(f"{uri} is not a single resource")
		record = page[0]
		if not isinstance(record, Record):
			record = Record.from_uri(self.relative(uri), record)
		return self.expand(record, *expand, cache=cache, strict=strict_expand)

	def expand(self, record: Record, *paths: str, cache: Optional[ExpansionCache] = None, strict=True) -> Record:
		"""Expand property paths of a record in place, see :class:`sl1api_py.expansion.Expander`."""
		return Expander(self, cache, strict=strict).expand(record, *paths)

	###################################################################################################################
	# Write path
	###################################################################################################################

	@property
	def mutator(self) -> Mutator:
		return Mutator(self)

	def update(self, uri: str, fields, dry_run=False, return_updated=False) -> MutationResult:
		"""Write the given fields (mapping) to the resource at uri."""
		return self.mutator.submit(uri, FieldUpdate(fields), dry_run, return_updated)

	def update_record(self, record: Record, uri: Optional[str] = None, dry_run=False,
					return_updated=False) -> MutationResult:
		"""Write a whole record back (without metadata fields), to its own URI if none is given."""
		change = RecordUpdate(record)
		uri = uri or change.uri
		if not uri:
			raise ValidationError("No URI to write the record to")
		return self.mutator.submit(uri, change, dry_run, return_updated)

	def create(self, resource: str, fields, dry_run=False, return_created=False) -> MutationResult:
		"""Create a resource of the given type with the given fields (mapping)."""
		return self.mutator.create(resource, FieldUpdate(fields), dry_run, return_created)
