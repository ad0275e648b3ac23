"""Default selector trees per entity kind.

Callers may send their own tree with a page request; these are used when
the request leaves attributes empty (the CLI, mostly).
"""

from __future__ import annotations

from crowdstrike_connector.core.normalization import (
    AttributeSpec,
    AttributeType,
    ChildSelector,
    SelectorTree,
)
from crowdstrike_connector.features.entities.registry import EntityKind

_AD_ACCOUNTS = ChildSelector(
    path='$.accounts[?(@.__typename=="ActiveDirectoryAccountDescriptor")]',
    attributes=(
        AttributeSpec(name="objectGuid", unique_id=True),
        AttributeSpec(name="samAccountName"),
        AttributeSpec(name="domain"),
        AttributeSpec(name="enabled", type=AttributeType.BOOL),
        AttributeSpec(name="creationTime", type=AttributeType.DATETIME),
    ),
)

_RISK_FACTORS = ChildSelector(
    path="$.riskFactors",
    attributes=(
        AttributeSpec(name="type", unique_id=True),
        AttributeSpec(name="severity"),
    ),
)

_ALERT_FILE_ATTRIBUTES = (
    AttributeSpec(name="filename"),
    AttributeSpec(name="filepath", unique_id=True),
    # Epoch seconds as a string
    AttributeSpec(name="timestamp"),
)

_ALERT_TREE = SelectorTree(
    attributes=(
        AttributeSpec(name="composite_id", unique_id=True),
        AttributeSpec(name="aggregate_id"),
        AttributeSpec(name="status"),
        AttributeSpec(name="severity", type=AttributeType.INT64),
        AttributeSpec(name="created_timestamp", type=AttributeType.DATETIME),
    ),
    children=(
        ChildSelector(path="$.files_accessed", attributes=_ALERT_FILE_ATTRIBUTES),
        ChildSelector(path="$.files_written", attributes=_ALERT_FILE_ATTRIBUTES),
        ChildSelector(
            path="$.mitre_attack",
            attributes=(AttributeSpec(name="pattern_id", type=AttributeType.INT64, unique_id=True),),
        ),
    ),
)

DEFAULT_SELECTOR_TREES: dict[EntityKind, SelectorTree] = {
    EntityKind.USER: SelectorTree(
        attributes=(
            AttributeSpec(name="entityId", unique_id=True),
            AttributeSpec(name="primaryDisplayName"),
            AttributeSpec(name="secondaryDisplayName"),
            AttributeSpec(name="emailAddresses", is_list=True),
            AttributeSpec(name="riskScore", type=AttributeType.DOUBLE),
            AttributeSpec(name="riskScoreSeverity"),
            AttributeSpec(name="inactive", type=AttributeType.BOOL),
            AttributeSpec(name="creationTime", type=AttributeType.DATETIME),
            AttributeSpec(name="mostRecentActivity", type=AttributeType.DATETIME),
        ),
        children=(_AD_ACCOUNTS, _RISK_FACTORS),
    ),
    EntityKind.ENDPOINT: SelectorTree(
        attributes=(
            AttributeSpec(name="entityId", unique_id=True),
            AttributeSpec(name="hostName"),
            AttributeSpec(name="agentId"),
            AttributeSpec(name="lastIpAddress"),
            AttributeSpec(name="riskScore", type=AttributeType.DOUBLE),
            AttributeSpec(name="inactive", type=AttributeType.BOOL),
            AttributeSpec(name="unmanaged", type=AttributeType.BOOL),
            AttributeSpec(name="creationTime", type=AttributeType.DATETIME),
        ),
        children=(_AD_ACCOUNTS, _RISK_FACTORS),
    ),
    EntityKind.INCIDENT: SelectorTree(
        attributes=(
            AttributeSpec(name="incidentId", unique_id=True),
            AttributeSpec(name="type"),
            AttributeSpec(name="severity"),
            AttributeSpec(name="lifeCycleStage"),
            AttributeSpec(name="startTime", type=AttributeType.DATETIME),
            AttributeSpec(name="endTime", type=AttributeType.DATETIME),
        ),
        children=(
            ChildSelector(
                path="$.compromisedEntities",
                attributes=(
                    AttributeSpec(name="entityId", unique_id=True),
                    AttributeSpec(name="primaryDisplayName"),
                    AttributeSpec(name="type"),
                ),
            ),
            ChildSelector(
                path="$.alertEvents",
                attributes=(
                    AttributeSpec(name="alertId", unique_id=True),
                    AttributeSpec(name="alertType"),
                    AttributeSpec(name="timestamp", type=AttributeType.DATETIME),
                ),
            ),
        ),
    ),
    EntityKind.DEVICE: SelectorTree(
        attributes=(
            AttributeSpec(name="device_id", unique_id=True),
            AttributeSpec(name="hostname"),
            AttributeSpec(name="platform_name"),
            AttributeSpec(name="os_version"),
            AttributeSpec(name="agent_version"),
            AttributeSpec(name="local_ip"),
            AttributeSpec(name="mac_address"),
            AttributeSpec(name="status"),
            AttributeSpec(name="first_seen", type=AttributeType.DATETIME),
            AttributeSpec(name="last_seen", type=AttributeType.DATETIME),
        ),
    ),
    EntityKind.DETECT: SelectorTree(
        attributes=(
            AttributeSpec(name="detection_id", unique_id=True),
            AttributeSpec(name="status"),
            AttributeSpec(name="email_sent", type=AttributeType.BOOL),
            AttributeSpec(name="max_severity", type=AttributeType.INT64),
            AttributeSpec(name="created_timestamp", type=AttributeType.DATETIME),
            AttributeSpec(name="$.device.hostname"),
        ),
    ),
    EntityKind.ENDPOINT_INCIDENT: SelectorTree(
        attributes=(
            AttributeSpec(name="incident_id", unique_id=True),
            AttributeSpec(name="state"),
            AttributeSpec(name="status", type=AttributeType.INT64),
            AttributeSpec(name="fine_score", type=AttributeType.INT64),
            AttributeSpec(name="created", type=AttributeType.DATETIME),
        ),
    ),
    EntityKind.ALERT: _ALERT_TREE,
    EntityKind.COMBINED_ALERT: _ALERT_TREE,
}


def default_selector_tree(kind: EntityKind) -> SelectorTree:
    return DEFAULT_SELECTOR_TREES[kind]
