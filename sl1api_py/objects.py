# -*- coding: utf-8 -*-
"""Object oriented access to the inventory: organizations, devices, device groups and alerts.

These are thin wrappers around :class:`sl1api_py.clients.Client`, which know their resource type and translate keyword
search parameters (with wildcards) to a filter.
"""

import enum
import logging
from typing import Iterable, Iterator, Optional, Sequence

from .exceptions import ValidationError
from .filters import build_filter
from .mutations import MutationResult, Outcome
from .pagination import normalize_ids
from .results import Record, ResourceIdentifier, link_of

LOGGER = logging.getLogger(__name__)


class Resources:
	"""Access to the records of one resource type."""

	#: The resource type, set in subclasses
	RESOURCE = None

	def __init__(self, client):
		self.client = client

	def uri(self, id_) -> str:
		"""Link for the resource with the given ID."""
		return ResourceIdentifier(self.RESOURCE, id_).uri

	def find(self, limit: Optional[int] = None, offset=0, order: Optional[str] = None, expand: Sequence[str] = (),
			cache=None, **fields) -> Iterator[Record]:
		"""Find records by field values, e.g. ``find(name="*web*", organization=6)``.

		String values may contain wildcards (see :mod:`sl1api_py.filters`), None values are ignored.
		"""
		return self.client.find(
			self.RESOURCE, build_filter(fields), limit=limit, offset=offset, order=order, expand=expand, cache=cache
		)

	def get(self, *ids, expand: Sequence[str] = (), cache=None) -> Iterator[Record]:
		"""Get records by ID."""
		return self.client.get_by_id(self.RESOURCE, ids, expand=expand, cache=cache)

	def fetch(self, id_, expand: Sequence[str] = (), cache=None) -> Record:
		"""Fetch one record by ID, raises NotFoundError if there is none."""
		return self.client.fetch(self.uri(id_), expand=expand, cache=cache)

	def update(self, id_, fields, dry_run=False, return_updated=False) -> MutationResult:
		"""Write fields of the record with the given ID."""
		return self.client.update(self.uri(id_), fields, dry_run=dry_run, return_updated=return_updated)

	def create(self, fields, dry_run=False, return_created=False) -> MutationResult:
		"""Create a record of this type."""
		return self.client.create(self.RESOURCE, fields, dry_run=dry_run, return_created=return_created)


class Organizations(Resources):
	"""Organizations (companies) that devices belong to."""
	RESOURCE = "organization"


class Devices(Resources):
	"""Monitored devices."""
	RESOURCE = "device"


class Alerts(Resources):
	"""Alerts."""
	RESOURCE = "alert"


class MembershipState(enum.Enum):
	"""States of a device group membership update."""

	RESOLVING_GROUP = "resolving group"
	COLLECTING_CANDIDATES = "collecting candidates"
	DIFFING = "diffing against existing members"
	REFETCHING_GROUP = "re-fetching group"
	SUBMITTING = "submitting merged member list"
	DONE = "done"


class DeviceGroups(Resources):
	"""Device groups, with membership updates.

	A membership update reads the group, compares its members with the devices to add or remove, reads the group again
	and writes the merged member list. The second read narrows the window in which a concurrent update of the same group
	gets lost, but does not close it: the API has no transactions, the last write wins.
	"""
	RESOURCE = "device_group"
	#: Field of a device group with the links to its (static) member devices
	MEMBER_FIELD = "devices"

	def resolve(self, group) -> Record:
		"""Get the record of a group given as record, ID, link or (exact) name.

		:raises ValidationError: if no or more than one group has the given name
		"""
		if isinstance(group, Record) and group.type == self.RESOURCE:
			return group
		if isinstance(group, int) or (isinstance(group, str) and (group.isdigit() or "/" in group)):
			id_, = normalize_ids(self.RESOURCE, (group, ))
			return self.fetch(id_)
		if not isinstance(group, str) or not group:
			raise ValidationError(f"Invalid device group {group!r}")

		# Exact name match, at most two records are enough to find out it's ambiguous
		matches = list(self.client.find(self.RESOURCE, {"name": group}, limit=2))
		if len(matches) != 1:
			raise ValidationError(f"{'No' if not matches else 'More than one'} device group named {group!r}")
		return matches[0]

	def members(self, group, limit: Optional[int] = None, expand: Sequence[str] = ()) -> Iterator[Record]:
		"""All devices of a group (including those of nested groups), from the expanded_devices sub-resource."""
		group = self.resolve(group)
		path = (self.client / self.RESOURCE / group.id / "expanded_devices").path
		return self.client.find(path, limit=limit, expand=expand)

	def add_devices(self, group, devices: Iterable, dry_run=False) -> MutationResult:
		"""Add devices (records, IDs or links) to a group. Devices that are members already are skipped."""
		return self._change_members(group, devices, add=True, dry_run=dry_run)

	def remove_devices(self, group, devices: Iterable, dry_run=False) -> MutationResult:
		"""Remove devices (records, IDs or links) from a group. Devices that are no members are skipped."""
		return self._change_members(group, devices, add=False, dry_run=dry_run)

	@staticmethod
	def _enter(state: MembershipState, group):
		LOGGER.debug("Membership update of %s: %s", group, state.value)

	def member_links(self, group: Record) -> list:
		"""Links of the member devices of a group record."""
		links = (link_of(member) for member in group.get(self.MEMBER_FIELD) or ())
		return [link for link in links if link is not None]

	def device_links(self, devices: Iterable) -> list:
		"""Links for devices given as records, IDs or links."""
		ids = []
		for device in devices:
			if isinstance(device, Record):
				device = device.uri
			ids.append(device)
		return [ResourceIdentifier(Devices.RESOURCE, id_).uri for id_ in normalize_ids(Devices.RESOURCE, ids)]

	def _change_members(self, group, devices, add: bool, dry_run) -> MutationResult:
		"""Run the membership update."""
		# Validate before any request is sent
		candidates = self.device_links(devices)

		self._enter(MembershipState.RESOLVING_GROUP, group)
		record = self.resolve(group)
		uri = self.client.resolve(record.uri)

		self._enter(MembershipState.COLLECTING_CANDIDATES, record.uri)
		LOGGER.debug("%d devices to %s", len(candidates), "add" if add else "remove")

		self._enter(MembershipState.DIFFING, record.uri)
		if not self._difference(self.member_links(record), candidates, add):
			LOGGER.info("Nothing to change for the members of %s", record.uri)
			self._enter(MembershipState.DONE, record.uri)
			return MutationResult(Outcome.NOOP, uri, {})

		self._enter(MembershipState.REFETCHING_GROUP, record.uri)
		current = self.member_links(self.client.fetch(record.uri))
		changes = self._difference(current, candidates, add)
		if not changes:
			# Someone else did it in the meantime
			self._enter(MembershipState.DONE, record.uri)
			return MutationResult(Outcome.NOOP, uri, {})
		if add:
			merged = current + changes
		else:
			merged = [link for link in current if link not in changes]

		self._enter(MembershipState.SUBMITTING, record.uri)
		result = self.client.update(record.uri, {self.MEMBER_FIELD: merged}, dry_run=dry_run)
		self._enter(MembershipState.DONE, record.uri)
		return result

	@staticmethod
	def _difference(members: list, candidates: list, add: bool) -> list:
		"""Candidates that are no members yet (add), or candidates that are members (remove)."""
		return [link for link in candidates if (link in members) != add]
