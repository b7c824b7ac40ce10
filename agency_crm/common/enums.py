# agency_crm/common/enums.py
from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "Admin"
    SUB_ADMIN = "Sub-Admin"
    AGENT = "Agent"


class AgentStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ClientStatus(str, Enum):
    LEAD = "Lead"
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class PolicyStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


class PolicyType(str, Enum):
    WHOLE_LIFE = "Whole Life"
    UNIVERSAL_LIFE = "Universal Life"
    INDEXED_UNIVERSAL_LIFE = "Indexed Universal Life (IUL)"
    FINAL_EXPENSE = "Final Expense"
    CRITICAL_ILLNESS = "Critical Illness"
    TERM_LIFE_WLB = "Term Life WLB"
    TERM_LIFE = "Term Life"
    HOME = "Home Insurance"
    AUTO = "Auto Insurance"
    COMMERCIAL = "Commercial Insurance"
    PROPERTY = "Property Insurance"
    E_AND_O = "E&O Insurance"


class InteractionType(str, Enum):
    CALL = "Call"
    EMAIL = "Email"
    MEETING = "Meeting"
    NOTE = "Note"


class LicenseType(str, Enum):
    HOME = "Home State License"
    NON_RESIDENT = "Non-Resident License"


class TestimonialStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"


class MessageStatus(str, Enum):
    ACTIVE = "active"
    TRASHED = "trashed"


class MessageSource(str, Enum):
    INTERNAL = "internal"
    PUBLIC_PROFILE = "public_profile"


class NotificationType(str, Enum):
    GENERAL = "general"
    NEW_LEAD = "new_lead"
    NEW_MESSAGE = "new_message"
    AGENT_APPROVED = "agent_approved"
    POLICY_RENEWAL = "policy_renewal"
    BROADCAST = "broadcast"


# Roles that hold an Agent record and can receive leads/broadcasts.
AGENT_ROLES = (UserRole.AGENT.value, UserRole.SUB_ADMIN.value)

# Id used as sender for messages generated by the public website.
SYSTEM_SENDER_ID = 0
