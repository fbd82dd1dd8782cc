"""
Services module for subgate.

Contains the access decision engine and the components built on it: the
list filter, the detail redactor, flag writeback, and the stores and
resolvers they read from.
"""

from __future__ import annotations

from subgate.services.access_engine import AccessDecisionEngine
from subgate.services.detail_redactor import DetailRedactor, RedactionResult
from subgate.services.flag_store import FlagStore
from subgate.services.flag_writeback import FlagWriteback
from subgate.services.list_filter import ListFilter
from subgate.services.membership_resolver import MembershipResolver
from subgate.services.policy_config import PolicyConfigProvider
from subgate.services.settings_manager import DatabaseSettingsManager

__all__: list[str] = [
    "AccessDecisionEngine",
    "DatabaseSettingsManager",
    "DetailRedactor",
    "FlagStore",
    "FlagWriteback",
    "ListFilter",
    "MembershipResolver",
    "PolicyConfigProvider",
    "RedactionResult",
]
