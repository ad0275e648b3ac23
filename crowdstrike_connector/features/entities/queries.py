"""GraphQL query builders for Identity Protection entities.

Each builder renders a complete query document from fixed templates. The
``after`` argument is rendered only when there is a cursor: the vendor's
grammar rejects an empty or null ``after``.

Builders are pure. The same call produces the live request body and, in
tests, the expected body a mock server matches against.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import re
from string import Template

from crowdstrike_connector.core.exceptions import InvalidCursor, UnsupportedEntity
from crowdstrike_connector.features.entities.registry import EntityKind

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class QueryParameters:
    """Inputs of a query builder.

    Attributes:
        page_size: Value of the ``first`` argument.
        archived: Include archived entities (users and endpoints only).
        enabled: Include enabled entities (users and endpoints only).
        after: Vendor cursor of the previous page, if any.
    """

    page_size: int
    archived: bool = False
    enabled: bool = False
    after: str | None = None


_AD_ACCOUNT_FIELDS = """
                        __typename
                        ... on ActiveDirectoryAccountDescriptor {
                            archived
                            cn
                            consistencyGuid
                            containingGroupIds
                            creationTime
                            dataSource
                            department
                            description
                            dn
                            domain
                            enabled
                            expirationTime
                            flattenedContainingGroupIds
                            lastUpdateTime
                            lockoutTime
                            mostRecentActivity
                            objectGuid
                            objectSid
                            ou
                            samAccountName
                            servicePrincipalNames
                            title
                            upn
                            userAccountControl
                            userAccountControlFlags
                        }"""

_USER_TEMPLATE = Template(
    """{
    entities(
        archived: $archived
        enabled: $enabled
        types: [USER]
        sortKey: RISK_SCORE
        sortOrder: DESCENDING
        first: $first
        $after
    ) {
        pageInfo {
            hasNextPage
            endCursor
        }
        nodes {
            ... on UserEntity {
                archived
                creationTime
                earliestSeenTraffic
                emailAddresses
                entityId
                hasADDomainAdminRole
                impactScore
                inactive
                learned
                markTime
                mostRecentActivity
                riskScore
                riskScoreSeverity
                riskScoreWithoutLinkedAccounts
                secondaryDisplayName
                shared
                stale
                watched
                type
                riskFactors {
                    score
                    severity
                    type
                }
                accounts {$accounts
                }
                primaryDisplayName
            }
        }
    }
}""",
)

_ENDPOINT_TEMPLATE = Template(
    """{
    entities(
        archived: $archived
        enabled: $enabled
        types: [ENDPOINT]
        sortKey: RISK_SCORE
        sortOrder: DESCENDING
        first: $first
        $after
    ) {
        pageInfo {
            hasNextPage
            endCursor
        }
        nodes {
            ... on EndpointEntity {
                agentId
                agentVersion
                archived
                cid
                creationTime
                earliestSeenTraffic
                entityId
                guestAccountEnabled
                hasADDomainAdminRole
                hasRole
                hostName
                impactScore
                inactive
                lastIpAddress
                learned
                markTime
                mostRecentActivity
                primaryDisplayName
                riskScore
                riskScoreSeverity
                secondaryDisplayName
                shared
                stale
                staticIpAddresses
                type
                unmanaged
                watched
                ztaScore
                accounts {$accounts
                }
                riskFactors {
                    score
                    severity
                    type
                }
            }
        }
    }
}""",
)

_ENTITY_SUMMARY_FIELDS = """
                    archived
                    creationTime
                    entityId
                    hasADDomainAdminRole
                    hasRole
                    learned
                    markTime
                    primaryDisplayName
                    riskScore
                    riskScoreSeverity
                    secondaryDisplayName
                    type
                    watched"""

_INCIDENT_TEMPLATE = Template(
    """{
    incidents(
        first: $first
        sortKey: END_TIME
        sortOrder: DESCENDING
        $after
    ) {
        pageInfo {
            hasNextPage
            endCursor
        }
        nodes {
            endTime
            incidentId
            lifeCycleStage
            markedAsRead
            severity
            startTime
            type
            compromisedEntities {$entity_fields
            }
            alertEvents {
                alertId
                alertType
                endTime
                eventId
                eventLabel
                eventSeverity
                eventType
                patternId
                resolved
                startTime
                timestamp
                entities {$entity_fields
                }
            }
        }
    }
}""",
)


def render_after(cursor: str | None) -> str:
    """Render the ``after`` argument, or nothing when there is no cursor.

    Quotes and backslashes are escaped so the cursor cannot leave the string
    literal; control characters are rejected outright.

    Raises:
        InvalidCursor: If the cursor contains control characters.
    """
    if not cursor:
        return ""
    if _CONTROL_CHARS_RE.search(cursor):
        raise InvalidCursor(detail="Cursor contains characters that cannot be sent to the datasource.")
    escaped = cursor.replace("\\", "\\\\").replace('"', '\\"')
    return f'after: "{escaped}"'


def _graphql_bool(value: bool) -> str:
    return "true" if value else "false"


def build_user_query(params: QueryParameters) -> str:
    return _USER_TEMPLATE.substitute(
        archived=_graphql_bool(params.archived),
        enabled=_graphql_bool(params.enabled),
        first=params.page_size,
        after=render_after(params.after),
        accounts=_AD_ACCOUNT_FIELDS,
    )


def build_endpoint_query(params: QueryParameters) -> str:
    return _ENDPOINT_TEMPLATE.substitute(
        archived=_graphql_bool(params.archived),
        enabled=_graphql_bool(params.enabled),
        first=params.page_size,
        after=render_after(params.after),
        accounts=_AD_ACCOUNT_FIELDS,
    )


def build_incident_query(params: QueryParameters) -> str:
    # Incidents take no archived/enabled arguments
    return _INCIDENT_TEMPLATE.substitute(
        first=params.page_size,
        after=render_after(params.after),
        entity_fields=_ENTITY_SUMMARY_FIELDS,
    )


QUERY_BUILDERS: dict[EntityKind, Callable[[QueryParameters], str]] = {
    EntityKind.USER: build_user_query,
    EntityKind.ENDPOINT: build_endpoint_query,
    EntityKind.INCIDENT: build_incident_query,
}


def build(entity_kind: str, params: QueryParameters) -> str:
    """Render the query document for an entity kind.

    Args:
        entity_kind: External ID of a GraphQL entity kind.
        params: Page size, flags and cursor.

    Returns:
        GraphQL query document.

    Raises:
        UnsupportedEntity: If the kind has no query builder.
        InvalidCursor: If the cursor cannot be rendered safely.
    """
    try:
        builder = QUERY_BUILDERS[EntityKind(entity_kind)]
    except (ValueError, KeyError) as e:
        raise UnsupportedEntity(
            entity_kind,
            detail=f"Unsupported Query for provided entity ID: {entity_kind}",
        ) from e
    return builder(params)


def normalize_query(query: str) -> str:
    """Collapse a query to single-spaced tokens for comparison.

    Literal ``\\n`` and ``\\t`` escapes (as they appear in a JSON-encoded body)
    and commas count as whitespace.
    """
    for token in ("\\n", "\\t", ","):
        query = query.replace(token, " ")
    return " ".join(query.split())
