# agency_crm/schemas.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from agency_crm.common.enums import AgentStatus, ClientStatus, UserRole


# ----- auth -----
class LoginIn(BaseModel):
    email: str
    password: str


class RegisterIn(BaseModel):
    name: str
    email: str
    password: str
    role: UserRole = UserRole.AGENT


class VerifyIn(BaseModel):
    user_id: int
    code: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    title: Optional[str] = None


# ----- agents -----
class ApproveIn(BaseModel):
    role: UserRole = UserRole.AGENT


class AgentStatusIn(BaseModel):
    status: AgentStatus
    role: Optional[UserRole] = None


class AgentUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    languages: Optional[List[str]] = None
    bio: Optional[str] = None
    calendar_link: Optional[str] = None
    avatar: Optional[str] = None
    socials: Optional[Dict[str, str]] = None
    commission_rate: Optional[float] = None


# ----- clients / leads -----
class ClientFields(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    agent_id: Optional[int] = None
    dob: Optional[str] = None
    ssn: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    account_type: Optional[str] = None
    monthly_premium: Optional[float] = None
    annual_premium: Optional[float] = None
    height: Optional[str] = None
    weight: Optional[float] = None
    birth_state: Optional[str] = None
    medications: Optional[str] = None


class LeadCreate(ClientFields):
    first_name: str
    last_name: str


class ClientCreate(LeadCreate):
    status: ClientStatus = ClientStatus.LEAD
    join_date: Optional[date] = None


class ClientUpdate(ClientFields):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[ClientStatus] = None
    join_date: Optional[date] = None


class ProfileLeadIn(BaseModel):
    agent_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None


# ----- messages -----
class MessageIn(BaseModel):
    receiver_id: int
    text: str


class MessageEdit(BaseModel):
    text: str


class BroadcastIn(BaseModel):
    text: str


class MarkReadIn(BaseModel):
    sender_id: int


def changes(model: BaseModel) -> Dict[str, Any]:
    """Only the fields the caller actually sent."""
    return model.model_dump(exclude_unset=True)
