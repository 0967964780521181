"""Context-based restrictions client for managing network zones and rules.

Uses the official IBM Cloud platform services SDK for API operations.
"""

import json
import logging
from collections.abc import Iterator
from typing import Any

from ibm_cloud_sdk_core import ApiException
from ibm_cloud_sdk_core.authenticators import IAMAuthenticator
from ibm_platform_services.context_based_restrictions_v1 import ContextBasedRestrictionsV1
from requests.exceptions import RequestException

from cbr_client.exceptions import (
    CBRAPIError,
    CBRAuthError,
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
    NETWORK_ZONE_ID,
    VPC_SERVICE,
    APIType,
    BulkDeleteResult,
    DeleteOutcome,
    EnforcementMode,
    Rule,
    RuleAttribute,
    Zone,
    ZoneSpec,
)
from cbr_client.settings import CBRSettings, get_cbr_settings

logger = logging.getLogger(__name__)

DELETE_SUCCESS_STATUS = 204


class CBRClient:
    """Client for context-based restrictions operations.

    Creates zones and rules scoped to one account, and deletes them by ID
    or in bulk by naming pattern. All state lives in the remote service.

    Example:
        ```python
        client = CBRClient()

        zone_id = client.create_zone(
            "storage", ZoneSpec(address=["10.0.0.0/24"], service_ref=["cloud-object-storage"])
        )
        rule_id = client.create_rule_for_kubernetes_service(zone_id)

        # Remove everything created with the configured pattern
        client.delete_rules_with_pattern()
        client.delete_zones_with_pattern()
        ```
    """

    def __init__(
        self,
        settings: CBRSettings | None = None,
    ) -> None:
        """Initialize the CBR client.

        Args:
            settings: Optional settings. If not provided, reads from environment.

        Raises:
            CBRConfigurationError: If the authenticated service cannot be built.
        """
        self.settings = settings or get_cbr_settings()
        try:
            authenticator = IAMAuthenticator(
                apikey=self.settings.get_api_key_value(),
                url=self.settings.iam_url,
            )
            self._service = ContextBasedRestrictionsV1(authenticator=authenticator)
            if self.settings.service_url:
                self._service.set_service_url(self.settings.service_url)
        except (ValueError, TypeError) as e:
            msg = f"Error initializing context-based restrictions service: {e}"
            raise CBRConfigurationError(msg) from e

        self._account_id = self.settings.account_id
        self._resource_group_id = self.settings.resource_group_id
        self._cluster_id = self.settings.cluster_id or ""
        self._pattern = self.settings.pattern

        logger.info(
            "Initialized CBR client for account %s",
            self._account_id[:8] + "...",
        )

    @property
    def pattern(self) -> str:
        """Naming pattern appended to created zones and rules."""
        return self._pattern

    def _handle_api_error(
        self,
        error: Exception,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        """Convert SDK exceptions to our custom exceptions.

        The service's message is kept as-is and the original exception is chained.

        Args:
            error: Exception from the SDK or the HTTP transport.
            resource_type: Type of resource the call addressed.
            resource_id: ID of the resource the call addressed.

        Raises:
            CBRAuthError: For authentication failures.
            CBRRateLimitError: For rate limit errors.
            CBRNotFoundError: For missing resources.
            CBRValidationError: For invalid requests.
            CBRConflictError: For state conflicts.
            CBRAPIError: For other API errors.
        """
        if isinstance(error, ApiException):
            code = getattr(error, "status_code", None) or error.code
            message = error.message or str(error)
            errors = _response_errors(error)

            if code in (401, 403):
                raise CBRAuthError(message, code=code, errors=errors) from error

            if code == 429:
                retry_after = None
                if error.http_response is not None:
                    header = error.http_response.headers.get("Retry-After")
                    if header and header.isdigit():
                        retry_after = int(header)
                raise CBRRateLimitError(
                    message, retry_after=retry_after, code=code, errors=errors
                ) from error

            if code == 404:
                raise CBRNotFoundError(
                    message,
                    resource_type=resource_type,
                    resource_id=resource_id,
                    code=code,
                    errors=errors,
                ) from error

            if code in (400, 422):
                raise CBRValidationError(message, code=code, errors=errors) from error

            if code in (409, 412):
                raise CBRConflictError(message, code=code, errors=errors) from error

            raise CBRAPIError(message, code=code, errors=errors) from error

        if isinstance(error, RequestException):
            msg = f"Connection error: {error}"
            raise CBRAPIError(msg) from error

        raise CBRAPIError(str(error)) from error

    # =========================================================================
    # Zone Operations
    # =========================================================================

    def create_zone(self, name: str, spec: ZoneSpec) -> str:
        """Create a network zone.

        The configured pattern is appended to the name. Address strings are
        classified as ranges, subnets or single addresses by their shape.

        Args:
            name: Base zone name.
            spec: VPC CRNs, addresses and service refs to include.

        Returns:
            The service-assigned zone ID.

        Raises:
            CBRValidationError: If the service rejects the zone.
            CBRAPIError: If the API request fails.
        """
        name = f"{name}-{self._pattern}"
        addresses = spec.to_addresses(self._account_id)

        try:
            response = self._service.create_zone(
                name=name,
                account_id=self._account_id,
                description=f"Zone-{name}",
                addresses=[a.to_api_dict() for a in addresses],
            )
        except Exception as e:
            self._handle_api_error(e, resource_type="zone")
            raise  # Unreachable but satisfies type checker

        result = response.get_result()
        logger.debug("CreateZone() result:\n%s", json.dumps(result, indent=2))
        zone_id = result["id"]
        logger.info(
            "Created zone '%s' with ID %s (%d addresses)", name, zone_id, len(addresses)
        )
        return zone_id

    def list_zones(self) -> list[Zone]:
        """List all zones in the account.

        The service returns the complete set in one call.

        Returns:
            List of Zone objects.

        Raises:
            CBRAPIError: If the API request fails.
        """
        try:
            response = self._service.list_zones(account_id=self._account_id)
        except Exception as e:
            self._handle_api_error(e, resource_type="zone")
            raise

        result = response.get_result() or {}
        zones = [Zone.model_validate(z) for z in result.get("zones") or []]
        logger.info("total zone count: %s", result.get("count", len(zones)))
        return zones

    def iter_zones(self) -> Iterator[Zone]:
        """Yield zones from a fresh listing of the account."""
        yield from self.list_zones()

    def delete_zone(self, zone_id: str) -> int:
        """Delete a zone.

        A status other than 204 is logged but not raised.

        Args:
            zone_id: The zone identifier.

        Returns:
            HTTP status code of the delete call.

        Raises:
            CBRNotFoundError: If the zone doesn't exist.
            CBRConflictError: If the zone is still referenced by a rule.
            CBRAPIError: If the API request fails.
        """
        try:
            response = self._service.delete_zone(zone_id=zone_id)
        except Exception as e:
            self._handle_api_error(e, resource_type="zone", resource_id=zone_id)
            raise

        status_code = response.get_status_code()
        if status_code != DELETE_SUCCESS_STATUS:
            logger.warning(
                "Unexpected response status code received from DeleteZone(): %d",
                status_code,
            )
        logger.info("DeleteZone() response status code: %d", status_code)
        return status_code

    # =========================================================================
    # Rule Operations
    # =========================================================================

    def create_rule(
        self,
        zone_id: str,
        service_name: str,
        api_type: str | None = None,
    ) -> str:
        """Create a rule allowing a zone to reach a service.

        The rule is scoped to the configured cluster when one is set,
        otherwise to the configured resource group. Operation restrictions
        are attached only for the Kubernetes service.

        Args:
            zone_id: Zone bound as the rule's network context.
            service_name: Target service identifier.
            api_type: API type restriction; defaults to the configured one.

        Returns:
            The service-assigned rule ID.

        Raises:
            CBRValidationError: If the service rejects the rule.
            CBRAPIError: If the API request fails.
        """
        contexts = [
            {"attributes": [RuleAttribute(name=NETWORK_ZONE_ID, value=zone_id).to_api_dict()]}
        ]
        resources = [{"attributes": [a.to_api_dict() for a in self.resource_attributes(service_name)]}]

        operations = None
        # Operations are supported only for containers-kubernetes
        if service_name == KUBERNETES_SERVICE:
            operations = self.api_type_operations(
                api_type if api_type is not None else self.settings.api_type
            )

        description = f"{service_name}-rule-{self._pattern}"
        try:
            response = self._service.create_rule(
                description=description,
                contexts=contexts,
                resources=resources,
                operations=operations,
                enforcement_mode=EnforcementMode.ENABLED.value,
            )
        except Exception as e:
            self._handle_api_error(e, resource_type="rule")
            raise

        result = response.get_result()
        logger.debug("CreateRule() result:\n%s", json.dumps(result, indent=2))
        rule_id = result["id"]
        logger.info("Created rule '%s' with ID %s", description, rule_id)
        return rule_id

    def resource_attributes(self, service_name: str) -> list[RuleAttribute]:
        """Build the resource scope of a rule for a service.

        Args:
            service_name: Target service identifier.

        Returns:
            accountId and serviceName, plus serviceInstance when a cluster
            is configured or resourceGroupId when it is not.
        """
        attributes = [
            RuleAttribute(name="accountId", value=self._account_id),
            RuleAttribute(name="serviceName", value=service_name),
        ]
        if self._cluster_id:
            attributes.append(
                RuleAttribute(
                    name="serviceInstance",
                    value=self._cluster_id,
                    operator="stringEquals",
                )
            )
        else:
            attributes.append(
                RuleAttribute(name="resourceGroupId", value=self._resource_group_id)
            )
        return attributes

    def api_type_operations(self, api_type: str | None) -> dict[str, Any] | None:
        """Build the operations restriction for a Kubernetes rule.

        Args:
            api_type: "management" or "cluster"; anything else disables it.

        Returns:
            Operations payload, or None when no valid API type is given.
        """
        parsed = APIType.parse(api_type)
        if parsed is None:
            logger.info("No valid api types mentioned (%r)", api_type)
            return None
        return {"api_types": [{"api_type_id": parsed.crn}]}

    def create_rule_for_kubernetes_service(self, zone_id: str) -> str:
        """Create a rule for the Kubernetes service."""
        return self.create_rule(zone_id, KUBERNETES_SERVICE)

    def create_rule_for_vpc_service(self, zone_id: str) -> str:
        """Create a rule for the VPC infrastructure service."""
        return self.create_rule(zone_id, VPC_SERVICE)

    def create_rule_for_kms_service(self, zone_id: str) -> str:
        """Create a rule for the Key Protect service."""
        return self.create_rule(zone_id, KMS_SERVICE)

    def create_rule_for_cos_service(self, zone_id: str) -> str:
        """Create a rule for the Cloud Object Storage service."""
        return self.create_rule(zone_id, COS_SERVICE)

    def list_rules(self) -> list[Rule]:
        """List all rules in the account.

        Returns:
            List of Rule objects.

        Raises:
            CBRAPIError: If the API request fails.
        """
        try:
            response = self._service.list_rules(account_id=self._account_id)
        except Exception as e:
            self._handle_api_error(e, resource_type="rule")
            raise

        result = response.get_result() or {}
        rules = [Rule.model_validate(r) for r in result.get("rules") or []]
        logger.info("total rule count: %s", result.get("count", len(rules)))
        return rules

    def iter_rules(self) -> Iterator[Rule]:
        """Yield rules from a fresh listing of the account."""
        yield from self.list_rules()

    def delete_rule(self, rule_id: str) -> int:
        """Delete a rule.

        A status other than 204 is logged but not raised.

        Args:
            rule_id: The rule identifier.

        Returns:
            HTTP status code of the delete call.

        Raises:
            CBRNotFoundError: If the rule doesn't exist.
            CBRAPIError: If the API request fails.
        """
        try:
            response = self._service.delete_rule(rule_id=rule_id)
        except Exception as e:
            self._handle_api_error(e, resource_type="rule", resource_id=rule_id)
            raise

        status_code = response.get_status_code()
        if status_code != DELETE_SUCCESS_STATUS:
            logger.warning(
                "Unexpected response status code received from DeleteRule(): %d",
                status_code,
            )
        logger.info("DeleteRule() response status code: %d", status_code)
        return status_code

    # =========================================================================
    # Cleanup
    # =========================================================================

    def delete_rule_zone(self, rule_id: str = "", zone_id: str = "") -> None:
        """Delete a rule and/or a zone by ID.

        Each part runs only when its ID is non-empty. The zone delete is
        attempted even if the rule delete failed.

        Args:
            rule_id: Rule to delete, or empty to skip.
            zone_id: Zone to delete, or empty to skip.

        Raises:
            CBRAPIError: The last failure, after both deletes were attempted.
        """
        errors: list[CBRAPIError] = []

        if rule_id:
            try:
                self.delete_rule(rule_id)
            except CBRAPIError as e:
                logger.error("Error deleting rule %s: %s", rule_id, e)
                errors.append(e)

        if zone_id:
            try:
                self.delete_zone(zone_id)
            except CBRAPIError as e:
                logger.error("Error deleting zone %s: %s", zone_id, e)
                errors.append(e)

        if errors:
            raise errors[-1]

    def delete_zones_with_pattern(self, description: str = "") -> BulkDeleteResult:
        """Delete every zone whose name contains a substring.

        Failures are recorded per zone and the remaining zones are still
        processed.

        Args:
            description: Substring to match; defaults to the configured pattern.

        Returns:
            BulkDeleteResult with one outcome per matched zone.

        Raises:
            CBRAPIError: If the zones cannot be listed.
        """
        if not description:
            logger.info(
                "Empty zone description, so will continue with default pattern %r",
                self._pattern,
            )
            description = self._pattern

        try:
            zones = self.list_zones()
        except CBRAPIError as e:
            logger.error("Error while listing the zones: %s", e)
            raise

        result = BulkDeleteResult(pattern=description, listed_count=len(zones))
        for zone in zones:
            if description not in zone.name:
                continue
            outcome = DeleteOutcome(id=zone.id, name=zone.name)
            try:
                self.delete_zone(zone.id)
                outcome.deleted = True
            except CBRAPIError as e:
                logger.error(
                    "Error while deleting zone %s (%s): %s", zone.id, zone.name, e
                )
                outcome.error = str(e)
            result.outcomes.append(outcome)

        logger.info(
            "List of zone IDs deleted with match %r: %s",
            description,
            result.deleted_ids,
        )
        return result

    def delete_rules_with_pattern(self, description: str = "") -> BulkDeleteResult:
        """Delete every rule whose description contains a substring.

        Args:
            description: Substring to match; defaults to the configured pattern.

        Returns:
            BulkDeleteResult with one outcome per matched rule.

        Raises:
            CBRAPIError: If the rules cannot be listed.
        """
        if not description:
            logger.info(
                "Empty rule description, so will continue with default pattern %r",
                self._pattern,
            )
            description = self._pattern

        try:
            rules = self.list_rules()
        except CBRAPIError as e:
            logger.error("Error while listing the rules: %s", e)
            raise

        result = BulkDeleteResult(pattern=description, listed_count=len(rules))
        for rule in rules:
            if description not in rule.description:
                continue
            outcome = DeleteOutcome(id=rule.id, name=rule.description)
            try:
                self.delete_rule(rule.id)
                outcome.deleted = True
            except CBRAPIError as e:
                logger.error(
                    "Error while deleting rule %s (%s): %s", rule.id, rule.description, e
                )
                outcome.error = str(e)
            result.outcomes.append(outcome)

        logger.info(
            "List of rule IDs deleted with match %r: %s",
            description,
            result.deleted_ids,
        )
        return result


def _response_errors(error: ApiException) -> list[dict[str, Any]]:
    """Extract the error list from a failed response body, if any."""
    if error.http_response is None:
        return []
    try:
        body = error.http_response.json()
    except ValueError:
        return []
    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        return [e for e in body["errors"] if isinstance(e, dict)]
    return []
