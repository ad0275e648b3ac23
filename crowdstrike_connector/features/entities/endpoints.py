"""URL construction for the Falcon surfaces."""

from __future__ import annotations

from urllib.parse import quote_plus, urlsplit

from crowdstrike_connector.core.exceptions import InvalidDatasourceConfig

ALLOWED_SCHEMES = ("https",)


def normalize_address(address: str | None) -> str:
    """Return the datasource base URL for a configured address.

    Surrounding whitespace and trailing slashes are dropped, and an address
    without a scheme gets ``https://``.

    Raises:
        InvalidDatasourceConfig: If the address is empty, unparsable or uses
            a scheme other than https.
    """
    trimmed = (address or "").strip()
    if not trimmed:
        raise InvalidDatasourceConfig(detail="Provided datasource address is empty.")

    if "://" in trimmed:
        try:
            scheme = urlsplit(trimmed).scheme.lower()
        except ValueError as e:
            raise InvalidDatasourceConfig(detail="Invalid URL format.") from e
        if scheme not in ALLOWED_SCHEMES:
            raise InvalidDatasourceConfig(detail=f'Scheme "{scheme}" is not supported.')
        base = trimmed
    else:
        base = f"https://{trimmed}"

    try:
        parts = urlsplit(base)
    except ValueError as e:
        raise InvalidDatasourceConfig(detail="Invalid URL format.") from e
    if not parts.netloc:
        raise InvalidDatasourceConfig(detail="Invalid URL format.")

    return base.rstrip("/")


def graphql_url(base_url: str, api_version: str) -> str:
    return f"{base_url}/identity-protection/combined/graphql/{api_version}"


def list_url(
    base_url: str,
    path: str,
    *,
    limit: int,
    offset: int | str | None = None,
    filter: str | None = None,
) -> str:
    """Build a REST listing URL.

    ``offset`` is a number for offset listings and the vendor's token for
    scroll listings; it is left out for the first page. Both ``offset`` and
    ``filter`` are query-escaped.
    """
    params = f"limit={limit}"
    if offset:
        params += f"&offset={quote_plus(str(offset))}"
    if filter:
        params += f"&filter={quote_plus(filter)}"
    return f"{base_url}/{path}?{params}"


def resource_url(base_url: str, path: str) -> str:
    """URL of a detail or combined endpoint; these take their input in the body."""
    return f"{base_url}/{path}"
