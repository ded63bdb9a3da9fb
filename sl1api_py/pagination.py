# -*- coding: utf-8 -*-
"""This module contains the paginated finder, and the ID handling for getting records by ID.

The server returns at most a page-size ceiling of records per request, while a caller may want more. The
:class:`Finder` requests one page after the other (strictly in increasing offset order), and yields the records of each
page as soon as it is loaded. It stops when:

- the overall limit is reached,
- the total number of matching records the server reported is reached,
- or a page returns no records at all.

The server may cap a page below the requested limit, so the offset advances by the number of records actually
returned. A short page only ends the iteration if the server reported no total.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Sequence

from .exceptions import ValidationError
from .expansion import Expander, ExpansionCache
from .results import Page, parse_id, parse_uri

LOGGER = logging.getLogger(__name__)


class Finder:
	"""Lazy, finite and non-restartable iteration over the records matching a filter.

	Every record is loaded (and expanded) only when the iteration gets to its page. Iterating a second time does not
	reload anything, it just continues where the first iteration stopped; to run the query again create a new Finder.
	Errors on any page propagate out of the iteration.
	"""

	def __init__(self, api, resource: str, filter=None, limit: Optional[int] = None, offset=0,
				order: Optional[str] = None, expand: Sequence[str] = (), cache: Optional[ExpansionCache] = None,
				page_size: Optional[int] = None, extended=True, strict_expand=True, hide_filterinfo=False):
		"""Init a finder, which validates the parameters but doesn't send any request yet.

		:param api: The API session
		:param resource: Resource type, e.g. "device"
		:param filter: Filter specification, see :mod:`sl1api_py.filters`
		:param limit: Overall limit of records, defaults to the default_limit of the session
		:param offset: Number of records to skip
		:param order: Sort key, "-field" for descending
		:param expand: Property paths to expand for every record
		:param cache: Expansion cache to use, a new one (for this finder only) if None
		:param page_size: Page-size ceiling, defaults to page_size of the session
		:param extended: Request full objects (extended fetch) instead of link stubs
		:param strict_expand: Expansion error policy, see :class:`sl1api_py.expansion.Expander`
		:param hide_filterinfo: Ask the server to leave out the search specification
		:raises ValidationError: on an invalid limit, offset or page size
		"""
		self.api = api
		self.resource = resource
		self.filter = filter
		self.limit = api.default_limit if limit is None else limit
		self.offset = offset
		self.order = order
		self.expand = tuple(expand or ())
		self.page_size = api.page_size if page_size is None else page_size
		self.extended = extended
		self.hide_filterinfo = hide_filterinfo
		self.expander = Expander(api, cache, strict=strict_expand)

		if self.limit < 1:
			raise ValidationError(f"Limit must be at least 1, not {self.limit}")
		if self.offset < 0:
			raise ValidationError(f"Offset must not be negative, not {self.offset}")
		if self.page_size < 1:
			raise ValidationError(f"Page size must be at least 1, not {self.page_size}")
		# Fail early on a bad resource type or filter
		self.uri(self.offset, min(self.limit, self.page_size))

		#: Number of records yielded so far
		self.yielded = 0
		#: Number of pages loaded so far
		self.pages = 0
		self._iterator = None

	def uri(self, offset: int, limit: int) -> str:
		"""Build the URI for the page at the given offset with the given page limit."""
		return self.api.build_uri(
			self.resource, filter=self.filter, limit=limit, offset=offset, extended=self.extended, order=self.order,
			hide_filterinfo=self.hide_filterinfo
		)

	def load_page(self, offset: int, limit: int) -> Page:
		"""Load the page at the given offset."""
		page = self.api.send_request(self.uri(offset, limit)).page()
		self.pages += 1
		LOGGER.debug(
			"Loaded page %d of %s (offset %d, limit %d): %d records, %s matched",
			self.pages, self.resource, offset, limit, len(page), page.total_matched
		)
		return page

	def _generate(self) -> Iterator:
		"""Generate the records page by page."""
		offset = self.offset
		while self.yielded < self.limit:
			limit = min(self.page_size, self.limit - self.yielded)
			page = self.load_page(offset, limit)
			if not page:
				break

			for record in page:
				self.expander.expand(record, *self.expand)
				self.yielded += 1
				yield record

			offset += len(page)
			if page.total_matched is None:
				if len(page) < limit:
					# Short page without a total, the server has nothing more
					break
			elif offset >= page.total_matched:
				break

	def __iter__(self):
		if self._iterator is None:
			self._iterator = self._generate()
		return self._iterator

	def __str__(self):
		return f"<{self.__class__.__name__} for {self.resource}, {self.yielded} of max. {self.limit} records yielded>"


#######################################################################################################################
# IDs
#######################################################################################################################


def normalize_ids(resource: str, ids: Iterable) -> List:
	"""Parse IDs given as integers, strings or links to resources of the given type; drop duplicates.

	:raises ValidationError: for anything that is not an ID of the given resource type
	"""
	ret = []
	for id_ in ids:
		if isinstance(id_, bool) or id_ is None:
			raise ValidationError(f"Invalid ID {id_!r}")
		if isinstance(id_, str) and "/" in id_:
			identifier = parse_uri(id_)
			if identifier.type != resource:
				raise ValidationError(f"{id_} is not a {resource}")
			id_ = identifier.id
		elif isinstance(id_, str):
			id_ = parse_id(id_.strip())
			if id_ == "":
				raise ValidationError("Empty ID")
		elif not isinstance(id_, int):
			raise ValidationError(f"Invalid ID {id_!r}")
		if id_ not in ret:
			ret.append(id_)
	return ret


def batches(items: Sequence, size: int) -> Iterator[Sequence]:
	"""Yield consecutive batches of at most size items."""
	if size < 1:
		raise ValidationError(f"Batch size must be at least 1, not {size}")
	for start in range(0, len(items), size):
		yield items[start:start + size]
