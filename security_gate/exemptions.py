#!/usr/bin/env python3
"""
Exemption Resolver for the security gate

Filters normalized findings against the time-bounded allow-list in the
threshold file. An exemption matches a finding on exact ``tool`` and
``ruleId`` equality and only counts while its ``expiresAfter`` date is
strictly after the evaluation clock.

The clock is always passed in; nothing here reads the system time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from security_gate.config_loader import Exemption
from security_gate.models import NormalizedFinding

logger = logging.getLogger(__name__)


def parse_expiry(value: str) -> Optional[datetime]:
    """Parse an ``expiresAfter`` value into an aware UTC datetime.

    Date-only values mean midnight UTC; naive timestamps are treated as UTC.
    Returns ``None`` when the value cannot be parsed.
    """
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        expires = datetime.fromisoformat(text)
    except ValueError:
        return None
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    return expires


def _as_aware(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def is_active(exemption: Exemption, now: datetime) -> bool:
    expires = parse_expiry(exemption.expires_after)
    if expires is None:
        logger.warning(
            "Invalid expiresAfter for exemption %s/%s: %r (treated as expired)",
            exemption.tool,
            exemption.rule_id,
            exemption.expires_after,
        )
        return False
    return expires > _as_aware(now)


def active_exemptions(exemptions: Iterable[Exemption], now: datetime) -> list[Exemption]:
    """Return the exemptions that are still in force at *now*."""
    active = []
    for exemption in exemptions:
        if is_active(exemption, now):
            active.append(exemption)
        else:
            logger.debug(
                "Exemption %s/%s expired on %s",
                exemption.tool,
                exemption.rule_id,
                exemption.expires_after,
            )
    return active


def is_exempted(finding: NormalizedFinding, exemptions: Iterable[Exemption]) -> bool:
    """Exact ``(tool, ruleId)`` match against *exemptions*; no wildcards."""
    return any(
        ex.tool == finding.tool and ex.rule_id == finding.rule_id
        for ex in exemptions
    )


def apply_exemptions(
    findings: Iterable[NormalizedFinding],
    exemptions: Iterable[Exemption],
    now: datetime,
) -> tuple[list[NormalizedFinding], list[NormalizedFinding]]:
    """Split *findings* into ``(kept, exempted)``.

    Active exemptions are resolved once against *now* before any finding is
    matched, so a single evaluation sees one consistent allow-list.
    """
    active = active_exemptions(exemptions, now)
    kept: list[NormalizedFinding] = []
    exempted: list[NormalizedFinding] = []

    for finding in findings:
        if is_exempted(finding, active):
            exempted.append(finding)
        else:
            kept.append(finding)

    if exempted:
        logger.info(
            "Exempted %d finding(s) using %d active exemption(s)",
            len(exempted),
            len(active),
        )
    return kept, exempted
