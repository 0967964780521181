"""IBM Cloud context-based restrictions client package.

Provides a high-level client for creating network zones and rules that
restrict access to compute, Kubernetes, object storage and key management
services, and for cleaning them up by naming pattern.

Example:
    ```python
    from cbr_client import CBRClient, ZoneSpec

    client = CBRClient()

    zone_id = client.create_zone("workers", ZoneSpec(address=["10.240.0.0/24"]))
    rule_id = client.create_rule_for_cos_service(zone_id)

    client.delete_rule_zone(rule_id, zone_id)
    ```
"""

from cbr_client.client import CBRClient
from cbr_client.config import load_zone_spec
from cbr_client.exceptions import (
    CBRAPIError,
    CBRAuthError,
    CBRBulkDeleteError,
    CBRConfigurationError,
    CBRConflictError,
    CBRNotFoundError,
    CBRRateLimitError,
    CBRValidationError,
)
from cbr_client.models import (
    COS_SERVICE,
    KMS_SERVICE,
    KUBERNETES_SERVICE,
    VPC_SERVICE,
    AddressType,
    APIType,
    BulkDeleteResult,
    DeleteOutcome,
    EnforcementMode,
    Rule,
    Zone,
    ZoneAddress,
    ZoneSpec,
    classify_address,
)
from cbr_client.settings import (
    CBRSettings,
    get_cbr_settings,
    reset_settings,
)

__all__ = [
    "COS_SERVICE",
    "KMS_SERVICE",
    "KUBERNETES_SERVICE",
    "VPC_SERVICE",
    "APIType",
    "AddressType",
    "BulkDeleteResult",
    "CBRAPIError",
    "CBRAuthError",
    "CBRBulkDeleteError",
    "CBRClient",
    "CBRConfigurationError",
    "CBRConflictError",
    "CBRNotFoundError",
    "CBRRateLimitError",
    "CBRSettings",
    "CBRValidationError",
    "DeleteOutcome",
    "EnforcementMode",
    "Rule",
    "Zone",
    "ZoneAddress",
    "ZoneSpec",
    "classify_address",
    "get_cbr_settings",
    "load_zone_spec",
    "reset_settings",
]

__version__ = "0.1.0"
