# -*- coding: utf-8 -*-

__version__ = "0.1.0"
__author__ = "sl1api_py contributors"

from .api import API
from .clients import Client
from .exceptions import (
	SL1ApiError, AuthenticationError, NotFoundError, TransportError, RedirectError, ValidationError, NoOpWarning
)
from .expansion import Expander, ExpansionCache
from .mutations import FieldUpdate, RecordUpdate, Outcome, MutationResult
from .results import Record, ResourceIdentifier, Page
