"""Signal scanning - derive work items from collaborator snapshots.

Each source is a read-only snapshot supplied by the caller. A source left as
None (or empty) is simply not consulted.

Thresholds:
- completed dialogue session with unresolved contradictions -> contradiction
- record with coherence < 0.3 and resonance > 0.5            -> low_confidence
- more than 3 pending governance proposals                   -> governance_backlog
- more than 5 records with no edges                          -> missing_edges
- activation score > 0.8 with more than 5 accesses           -> hot_node
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from typing import Any

from cognition.engine.models import WorkItemType

LOW_COHERENCE_THRESHOLD = 0.3
HIGH_RESONANCE_THRESHOLD = 0.5
GOVERNANCE_BACKLOG_THRESHOLD = 3
GOVERNANCE_BACKLOG_INPUTS = 10
ISOLATED_RECORD_THRESHOLD = 5
ISOLATED_RECORD_INPUTS = 20
HOT_NODE_SCORE_THRESHOLD = 0.8
HOT_NODE_ACCESS_THRESHOLD = 5


@dataclass(frozen=True)
class DialogueSession:
    session_id: str
    topic: str = ""
    status: str = "completed"
    unresolved_contradictions: int = 0


@dataclass(frozen=True)
class KnowledgeRecord:
    record_id: str
    title: str = ""
    tags: tuple[str, ...] = ()
    coherence: float = 0.5
    resonance: float = 0.5


@dataclass(frozen=True)
class ActivationEntry:
    record_id: str
    score: float
    access_count: int


@dataclass(frozen=True)
class SignalSources:
    """Snapshots from the dialogue, knowledge, governance, graph and activation stores."""

    sessions: Sequence[DialogueSession] = ()
    records: Sequence[KnowledgeRecord] = ()
    pending_proposal_ids: Sequence[str] | None = None
    connected_record_ids: Collection[str] | None = None
    activations: Sequence[ActivationEntry] = ()


@dataclass(frozen=True)
class WorkItemDraft:
    """Arguments for one ``create_work_item`` call."""

    type: WorkItemType
    scope: str
    inputs: tuple[str, ...]
    description: str
    signals: dict[str, Any] = field(default_factory=dict)
    created_by: str = "system"


def scan(sources: SignalSources) -> list[WorkItemDraft]:
    """Return drafts for every threshold crossed, in source order."""
    drafts: list[WorkItemDraft] = []
    drafts.extend(_scan_contradictions(sources.sessions))
    drafts.extend(_scan_low_confidence(sources.records))
    drafts.extend(_scan_governance_backlog(sources.pending_proposal_ids))
    drafts.extend(_scan_missing_edges(sources.records, sources.connected_record_ids))
    drafts.extend(_scan_hot_nodes(sources.activations))
    return drafts


def _scan_contradictions(sessions: Sequence[DialogueSession]) -> list[WorkItemDraft]:
    drafts = []
    for session in sessions:
        if session.status != "completed" or session.unresolved_contradictions <= 0:
            continue
        count = session.unresolved_contradictions
        drafts.append(
            WorkItemDraft(
                type=WorkItemType.CONTRADICTION,
                scope=session.topic or "*",
                inputs=(session.session_id,),
                description=(
                    f'{count} unresolved contradiction(s) in session "{session.topic}"'
                ),
                signals={
                    "impact": 0.7,
                    "risk": 0.6,
                    "contradiction_pressure": min(1.0, count * 0.3),
                    "effort": 0.4,
                },
            )
        )
    return drafts


def _scan_low_confidence(records: Sequence[KnowledgeRecord]) -> list[WorkItemDraft]:
    drafts = []
    for record in records:
        if record.coherence >= LOW_COHERENCE_THRESHOLD:
            continue
        if record.resonance <= HIGH_RESONANCE_THRESHOLD:
            continue
        drafts.append(
            WorkItemDraft(
                type=WorkItemType.LOW_CONFIDENCE,
                scope=record.tags[0] if record.tags else "*",
                inputs=(record.record_id,),
                description=(
                    f'Record "{record.title}" has low coherence ({record.coherence}) '
                    f"but high usage ({record.resonance})"
                ),
                signals={
                    "impact": record.resonance,
                    "risk": 0.5,
                    "uncertainty": 1.0 - record.coherence,
                    "effort": 0.3,
                },
            )
        )
    return drafts


def _scan_governance_backlog(pending: Sequence[str] | None) -> list[WorkItemDraft]:
    if not pending or len(pending) <= GOVERNANCE_BACKLOG_THRESHOLD:
        return []
    return [
        WorkItemDraft(
            type=WorkItemType.GOVERNANCE_BACKLOG,
            scope="*",
            inputs=tuple(pending[:GOVERNANCE_BACKLOG_INPUTS]),
            description=f"{len(pending)} proposals awaiting governance review",
            signals={
                "impact": 0.6,
                "governance_pressure": min(1.0, len(pending) * 0.15),
                "effort": 0.3,
            },
        )
    ]


def _scan_missing_edges(
    records: Sequence[KnowledgeRecord], connected: Collection[str] | None
) -> list[WorkItemDraft]:
    if connected is None:
        return []
    isolated = [r.record_id for r in records if r.record_id not in connected]
    if len(isolated) <= ISOLATED_RECORD_THRESHOLD:
        return []
    return [
        WorkItemDraft(
            type=WorkItemType.MISSING_EDGES,
            scope="*",
            inputs=tuple(isolated[:ISOLATED_RECORD_INPUTS]),
            description=f"{len(isolated)} records have no edges",
            signals={"impact": 0.5, "uncertainty": 0.4, "effort": 0.3, "novelty": 0.4},
        )
    ]


def _scan_hot_nodes(activations: Sequence[ActivationEntry]) -> list[WorkItemDraft]:
    drafts = []
    for entry in activations:
        if entry.score <= HOT_NODE_SCORE_THRESHOLD:
            continue
        if entry.access_count <= HOT_NODE_ACCESS_THRESHOLD:
            continue
        drafts.append(
            WorkItemDraft(
                type=WorkItemType.HOT_NODE,
                scope="*",
                inputs=(entry.record_id,),
                description=(
                    f"Record {entry.record_id} is a hot node "
                    f"(score={entry.score:.2f}, accesses={entry.access_count})"
                ),
                signals={"impact": entry.score, "novelty": 0.6, "effort": 0.4},
            )
        )
    return drafts
