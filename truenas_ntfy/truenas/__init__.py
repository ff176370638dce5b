"""TrueNAS alert source — REST client and look-back filtering."""

from truenas_ntfy.truenas.client import (
    TrueNASClient,
    compute_cutoff,
    filter_in_scope,
    is_in_scope,
    parse_alert_list,
)
from truenas_ntfy.truenas.exceptions import (
    FetchDecodeError,
    FetchError,
    FetchStatusError,
    FetchTransportError,
)

__all__ = [
    "FetchDecodeError",
    "FetchError",
    "FetchStatusError",
    "FetchTransportError",
    "TrueNASClient",
    "compute_cutoff",
    "filter_in_scope",
    "is_in_scope",
    "parse_alert_list",
]
