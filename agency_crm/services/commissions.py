# agency_crm/services/commissions.py
"""
Read-side commission and performance aggregation.

Nothing here is stored: every figure is recomputed from the current policies
and client assignments on each call.

    total_premium     = sum(annual_premium) over Active policies of the agent's clients
    commission_earned = total_premium * commission_rate
    agency_override   = total_premium * (1 - commission_rate)
"""
from __future__ import annotations

import calendar
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from agency_crm.common.date_rules import as_date, today
from agency_crm.common.enums import PolicyStatus
from agency_crm.models import Agent, Policy
from agency_crm.store.repository import UnitOfWork

CENTS = Decimal("0.01")
NEW_CLIENT_DAYS = 7


def _money(value: Any) -> Decimal:
    return Decimal(str(value or 0))


def _cents(value: Decimal) -> float:
    return float(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def _client_ids(uow: UnitOfWork, agent_id: int) -> List[int]:
    return [c.id for c in uow.clients.find(agent_id=agent_id)]


def _policies_for(uow: UnitOfWork, agent_id: int, active_only: bool = True) -> List[Policy]:
    ids = set(_client_ids(uow, agent_id))
    if not ids:
        return []
    rows = uow.policies.find(status=PolicyStatus.ACTIVE) if active_only else uow.policies.find()
    return [p for p in rows if p.client_id in ids]


def summarize(agent: Agent, policies: List[Policy]) -> Dict[str, Any]:
    total = sum((_money(p.annual_premium) for p in policies), Decimal("0"))
    rate = _money(agent.commission_rate)
    by_type: Dict[str, Decimal] = {}
    for p in policies:
        key = p.type or "Other"
        by_type[key] = by_type.get(key, Decimal("0")) + _money(p.annual_premium) * rate
    return {
        "agent_id": agent.id,
        "agent_name": agent.name,
        "commission_rate": float(agent.commission_rate or 0),
        "policy_count": len(policies),
        "total_premium": _cents(total),
        "commission_earned": _cents(total * rate),
        "agency_override": _cents(total * (Decimal("1") - rate)),
        "commission_by_type": {k: _cents(v) for k, v in sorted(by_type.items())},
    }


def agent_commissions(uow: UnitOfWork, agent_id: int) -> Dict[str, Any]:
    agent = uow.agents.get(agent_id)
    return summarize(agent, _policies_for(uow, agent_id))


def agency_report(uow: UnitOfWork) -> Dict[str, Any]:
    """Every agent's premium and override, plus agency totals."""
    rows = [summarize(a, _policies_for(uow, a.id)) for a in uow.agents.find()]
    total_premium = sum((_money(r["total_premium"]) for r in rows), Decimal("0"))
    total_override = sum((_money(r["agency_override"]) for r in rows), Decimal("0"))
    return {
        "agents": rows,
        "total_agency_premium": _cents(total_premium),
        "total_override": _cents(total_override),
    }


def performance(uow: UnitOfWork, agent_id: int, year: Optional[int] = None) -> Dict[str, Any]:
    """
    Dashboard metrics for one agent.

    Average policy value and the monthly breakdown count every policy of the
    agent's clients regardless of status; the monthly bucket is the policy's
    start month within ``year`` (default: current year).
    """
    agent = uow.agents.get(agent_id)
    clients = uow.clients.find(agent_id=agent_id)
    policies = _policies_for(uow, agent_id, active_only=False)
    rate = _money(agent.commission_rate)

    cutoff = today() - timedelta(days=NEW_CLIENT_DAYS)
    new_clients = sum(1 for c in clients if c.join_date is not None and c.join_date >= cutoff)

    total = sum((_money(p.annual_premium) for p in policies), Decimal("0"))
    average = total / len(policies) if policies else Decimal("0")

    year = year or today().year
    monthly = [
        {"month": calendar.month_abbr[m], "policies_sold": 0, "total_premium": Decimal("0"), "commission_earned": Decimal("0")}
        for m in range(1, 13)
    ]
    for p in policies:
        start = as_date(p.start_date)
        if start is None or start.year != year:
            continue
        bucket = monthly[start.month - 1]
        bucket["policies_sold"] += 1
        bucket["total_premium"] += _money(p.annual_premium)
        bucket["commission_earned"] += _money(p.annual_premium) * rate

    return {
        "agent_id": agent.id,
        "new_clients_last_7_days": new_clients,
        "policy_count": len(policies),
        "average_policy_value": _cents(average),
        "conversion_rate": round(float(agent.conversion_rate or 0), 4),
        "year": year,
        "monthly": [
            {**b, "total_premium": _cents(b["total_premium"]), "commission_earned": _cents(b["commission_earned"])}
            for b in monthly
        ],
    }
