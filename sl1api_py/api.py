# -*- coding: utf-8 -*-
"""
Small client for easy access to the API using the requests library (https://github.com/psf/requests).

The :class:`API` session is also the configuration of everything else in this package: base URL, credentials (as
``auth``), TLS verification, timeout, limits and page sizes are attributes of the session, which is passed on to (or
is) every higher level object. Set it up once before using it concurrently, it's not changed afterwards by this
package.

What the session itself does is building URIs, resolving links, sending requests and checking the responses.
By default the constructed request is a :class:`sl1api_py.models.APIRequest`, and the constructed response a
:class:`sl1api_py.models.APIResponse`. It's possible to override these defaults in a subclass.
"""

import logging
from typing import Optional, Union
from urllib.parse import quote, urlencode, urlparse

import requests
import urllib3

from .exceptions import ValidationError
from .filters import order_params, validate_filter
from .models import APIRequest, APIResponse
from .results import API_PREFIX, uri_path

LOGGER = logging.getLogger(__name__)

# Default request class
DEFAULT_REQUEST_CLASS = APIRequest
# Default response class
DEFAULT_RESPONSE_CLASS = APIResponse

#: Overall result limit of a find without an explicit limit
DEFAULT_LIMIT = 100
#: Maximum number of records requested with one page (and IDs with one filter)
PAGE_SIZE = 500
#: Page limit when fetching a link target for expansion
EXPAND_LIMIT = 10
#: Request timeout in seconds
DEFAULT_TIMEOUT = 60
#: Header to request pretty-printed JSON
PRETTY_HEADER = "X-em7-beautify-response"


class API(requests.Session):
	"""API session for easily sending requests and getting responses.

	Objects of this class are used for constructing a request, that than will use it's :meth:`prepare_request` and
	:meth:`create_response` methods for sending the request and constructing the response.
	The preparation method is inherited from the requests.Session superclass.
	"""

	#: Accepted HTTP methods (in a class attribute to enable easy overwriting).
	#: Everything else is a URL or body part for the :class:`RequestBuilder`
	HTTP_METHODS = {"GET", "POST"}

	#: Configuration attributes (besides the ones of requests.Session) that are copied on clone()
	CONFIG_ATTRS = ("timeout", "default_limit", "page_size", "expand_limit")

	def __init__(self, url: str, pretty=False, timeout=DEFAULT_TIMEOUT, default_limit=DEFAULT_LIMIT,
				page_size=PAGE_SIZE, expand_limit=EXPAND_LIMIT, **sessionparams):
		"""Construct the API session with an URL and "optional" session parameters.

		:param url: URL, e.g. "https://sl1host/api/", see :meth:`prepare_base_url` for what is expected here
		:param pretty: True to request pretty-printed JSON (for debugging)
		:param timeout: Timeout in seconds for every request, None to wait forever
		:param default_limit: Overall limit for finding records, if none is given
		:param page_size: Maximum number of records to request at once
		:param expand_limit: Page limit when fetching link targets for expansion
		:param **sessionparams: Keyword arguments are set as session attribute. Every attribute of a requests.Session
					is allowed, these include: headers (default headers), auth, proxies, params (default
					parameters), verify, cert (client certificate path), trust_env and more.
		"""
		super().__init__()
		self.base_url = self.prepare_base_url(url)

		# Set default Accept header to JSON, as the API uses that
		self.headers["Accept"] = "application/json"
		self.pretty = pretty

		self.timeout = timeout
		self.default_limit = default_limit
		self.page_size = page_size
		self.expand_limit = expand_limit

		# Set session parameters like verify, proxies, auth, ...
		for key, value in sessionparams.items():
			setattr(self, key, value)

		if self.verify is False:
			LOGGER.warning("TLS certificate verification disabled for %s, this is unsafe", self.base_url)
			urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

	@staticmethod
	def prepare_base_url(url: str) -> str:
		"""Prepare the base_url for usage.

		This static method adds scheme, trailing '/' and the 'api/' suffix if not specified.
		This method is called by :meth:`__init__`.

		:param url: The URL to prepare for client usage
		:raises ValueError: if the url is not a string with at least a host name
		:return: The prepared base URL
		"""
		if not url or not isinstance(url, str):
			raise ValueError(f"Unable to prepare URL {url}")
		# Prefix https if not specified
		if "://" not in url:
			url = f"https://{url}"
		# Append '/' to URL if not already there
		if url[-1:] != "/":
			url = f"{url}/"
		# Suffix API root
		if not url.endswith(API_PREFIX):
			url = f"{url}api/"

		parsed = urlparse(url)
		if parsed.scheme not in ("http", "https") or not parsed.hostname:
			raise ValueError(f"Unable to prepare URL {url}")
		return url

	@property
	def pretty(self) -> bool:
		"""Whether pretty-printed JSON is requested."""
		return self.headers.get(PRETTY_HEADER) == "1"

	@pretty.setter
	def pretty(self, value):
		if value:
			self.headers[PRETTY_HEADER] = "1"
		else:
			self.headers.pop(PRETTY_HEADER, None)

	@property
	def request_class(self):
		"""The class used as a request.

		This property is expected to return a callable, that acts like :class:`sl1api_py.models.APIRequest`.
		It's usually only used internally, overwriting it in subclasses enables to easily change client behavior.
		"""
		return DEFAULT_REQUEST_CLASS

	def create_response(self, response):
		"""Create a custom response from a requests.Response."""
		return DEFAULT_RESPONSE_CLASS(response)

	@classmethod
	def from_pieces(cls, host, port=443, url_prefix="/api", **sessionparams) -> "API":
		"""Simplified creation of an API object."""
		url = f"https://{host}:{port}{url_prefix}/"
		return cls(url, **sessionparams)

	@classmethod
	def clone(cls, obj: "API") -> "API":
		"""Clone the given client.

		The returned object is something like a shallow copy of the given obj, but only attributes usually used with
		this class are copied. That this method will return a shallow copy comes with the possibly unwanted effected
		that e.g. updating headers for the clone also updates the headers of the original object. Attribute assignments
		will have no effect on clone objects of course.
		"""
		sessionparams = {}
		for attr in obj.__attrs__:
			sessionparams[attr] = getattr(obj, attr, None)
		for attr in cls.CONFIG_ATTRS:
			sessionparams[attr] = getattr(obj, attr)
		return cls(obj.base_url, **sessionparams)

	def __copy__(self):
		"""Get a shallow copy."""
		return self.clone(self)

	###################################################################################################################
	# URIs
	###################################################################################################################

	def build_uri(self, resource: str, id=None, filter=None, limit=0, offset=0, extended=False,
				order: Optional[str] = None, hide_filterinfo=False) -> str:
		"""Build the absolute URI for a resource index (id is None) or a single resource.

		Query parameters are added in this order: ``filter.<key>`` for every filter item, ``limit`` and ``offset`` if
		not zero, ``extended_fetch=1``, ``hide_filterinfo=1``, ``order.<field>``. All values are percent-encoded.

		:param resource: Resource type, e.g. "device"; may be a sub-resource path like "device_group/5/expanded_devices"
		:param id: ID of a single resource, or None for the index
		:param filter: Filter specification (<field>[.<operator>] -> value), see :mod:`sl1api_py.filters`
		:param limit: Maximum number of records to return (0 for the server default)
		:param offset: Number of records to skip
		:param extended: True to get full objects instead of links
		:param order: Sort key, prefixed with "-" for descending order
		:param hide_filterinfo: True to tell the server not to return the search specification
		:raises ValidationError: on an empty resource type or a negative limit/offset
		"""
		resource = (resource or "").strip("/")
		if resource.startswith(API_PREFIX[1:]):
			resource = resource[len(API_PREFIX) - 1:]
		if not resource:
			raise ValidationError("A resource type is required to build a URI")
		if limit < 0 or offset < 0:
			raise ValidationError(f"Limit and offset must not be negative (limit {limit}, offset {offset})")

		path = f"{resource}/" if id is None else f"{resource}/{quote(str(id), safe='')}"
		params = [(f"filter.{key}", value) for key, value in validate_filter(filter).items()]
		if limit:
			params.append(("limit", str(limit)))
		if offset:
			params.append(("offset", str(offset)))
		if extended:
			params.append(("extended_fetch", "1"))
		if hide_filterinfo:
			params.append(("hide_filterinfo", "1"))
		params.extend(order_params(order).items())

		uri = self.base_url + path
		if params:
			uri = f"{uri}?{urlencode(params, quote_via=quote)}"
		return uri

	def resolve(self, uri: str) -> str:
		"""Get the absolute URL for a link (/api/...), a path relative to the API root, or an absolute URL."""
		if "://" in uri:
			return uri
		if uri.startswith(API_PREFIX):
			uri = uri[len(API_PREFIX):]
		return self.base_url + uri.lstrip("/")

	def relative(self, uri: str) -> str:
		"""Get the link form (/api/...) of an absolute URL or a path relative to the API root (inverse of resolve)."""
		if "://" not in uri and not uri.startswith(API_PREFIX):
			uri = API_PREFIX + uri.lstrip("/")
		return uri_path(uri)

	###################################################################################################################
	# Invoking
	###################################################################################################################

	def send_request(self, uri: str, method="GET", params=None, body=None) -> APIResponse:
		"""Send a request to the given URI and return the checked response.

		:param uri: Absolute URL or link/path, see :meth:`resolve`
		:param method: HTTP method
		:param params: Additional query parameters (mapping)
		:param body: Body to JSON-encode, or None
		:raises SL1ApiError: AuthenticationError, NotFoundError, RedirectError or TransportError
		"""
		request = self.request_class(self, method, self.resolve(uri), json=body)
		return request.send(params).check()

	def invoke(self, uri: str, method="GET", params=None, body=None):
		"""Send a request and return the JSON-decoded response content, see :meth:`send_request`."""
		return self.send_request(uri, method, params, body).json()

	###################################################################################################################
	# Request building
	###################################################################################################################

	def __getattr__(self, item) -> "RequestBuilder":
		"""Return a RequestBuilder object with the given first item."""
		if item.startswith("_"):
			# Never build requests for private/special attributes (copy, pickle, ...)
			raise AttributeError(item)
		return self.s(item)

	def s(self, item) -> "RequestBuilder":
		"""Return a RequestBuilder object with the given first item."""
		return self.RequestBuilder(self).s(item)

	def __truediv__(self, item) -> "RequestBuilder":
		"""Return a RequestBuilder object with the given first item."""
		return self.RequestBuilder(self).s(item)

	class RequestBuilder:
		"""Class to build a request path and it's dictionary (JSON) body.

		Path items are added with attribute access, :meth:`s` or ``/``; a call sets the last item as a body key
		instead. An HTTP method as item builds the request: ``api.device.s(42).name("web01").post``.
		"""

		def __init__(self, api: "API"):
			"""The RequestBuilder needs an API client object to init, mainly to pass it on to the request class."""
			self.api_client = api
			self._lastattr = None  # last item, goes into the path unless it's called
			self._builder_list = []  # path items, joined with "/" at the end
			self._body = {}

		def _rotate_attr(self, new=None) -> "API.RequestBuilder":
			"""Move the last item to the path (if it's still there) and remember a new one."""
			if self._lastattr is not None:
				self._builder_list.append(self._lastattr)
			self._lastattr = new
			return self

		def __getattr__(self, item) -> Union[APIRequest, "API.RequestBuilder"]:
			"""Add item to URL path OR prepare item for put in body OR construct a request."""
			if item.startswith("_"):
				raise AttributeError(item)
			return self.s(item)

		def __truediv__(self, item) -> Union[APIRequest, "API.RequestBuilder"]:
			"""Add item to URL path OR prepare item for put in body OR construct a request."""
			return self.s(item)

		@property
		def path(self) -> str:
			"""The path built so far (relative to the API root)."""
			items = self._builder_list + ([self._lastattr] if self._lastattr is not None else [])
			return "/".join(items)

		def s(self, item) -> Union[APIRequest, "API.RequestBuilder"]:
			"""Add item to URL path OR prepare item for put in body OR construct a request."""
			item = str(item)
			if item.upper() not in self.api_client.HTTP_METHODS:
				return self._rotate_attr(item)

			# Item is an accepted HTTP method -> construct a request
			self._rotate_attr()
			url = self.api_client.base_url + "/".join(self._builder_list)
			return self.api_client.request_class(self.api_client, item.upper(), url, json=self._body or None)

		def __call__(self, *args) -> "API.RequestBuilder":
			"""Put the last item into the body as a key, with the given argument(s) as value.

			One argument is the value, more arguments are a list. Calling the same key again appends to the value,
			calling without arguments deletes the key.
			"""
			key, self._lastattr = self._lastattr, None
			if not args:
				self._body.pop(key, None)
				return self

			value = args[0] if len(args) == 1 else list(args)
			if key not in self._body:
				self._body[key] = value
				return self

			existing = self._body[key]
			existing = existing if isinstance(existing, list) else [existing]
			self._body[key] = existing + (value if len(args) > 1 else [value])
			return self
