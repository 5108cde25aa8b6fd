# ============================================================================
# REGISTRY VALIDATION
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Structural validation of registry documents
# PURPOSE: Turn a parsed registry tree into a typed RegistrySnapshot
# CREATED: 03 OCT 2026
# ============================================================================
"""
Registry Validation

Input is the generic tree produced by a YAML/JSON parser:

    {
        "services": {
            "<environment>": {
                "<service>": {"url": ..., "healthPath": ..., "dependsOn": [...]}
            }
        },
        "groups": {"<group>": ["<service>", ...]}     # optional
    }

Output is a RegistrySnapshot of ServiceDefinition objects. Nothing past
this module ever looks at the raw tree.

Dependency names are NOT checked against the environment here; unknown
names are tolerated until wake order resolution.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from core.models import ServiceDefinition, RegistrySnapshot

logger = logging.getLogger(__name__)

# Accepted spellings, first one is the canonical name used in messages
URL_KEYS = ("url",)
HEALTH_KEYS = ("healthPath", "health", "health_path")
WAKE_KEYS = ("wakePath", "wake", "wake_path")
DEPENDS_KEYS = ("dependsOn", "depends_on")


def _first_present(raw: Mapping[str, Any], keys: Sequence[str]) -> Tuple[Optional[str], Any]:
    """Return (key, value) for the first key present in raw."""
    for key in keys:
        if key in raw:
            return key, raw[key]
    return None, None


def _require_text(
    raw: Mapping[str, Any],
    keys: Sequence[str],
    name: str,
    environment: str,
) -> str:
    """Fetch a mandatory non-empty string field."""
    _, value = _first_present(raw, keys)
    canonical = keys[0]

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(
            f'Service "{name}" in environment "{environment}" '
            f'is missing required field "{canonical}"',
            environment=environment,
            service=name,
            field=canonical,
        )
    if not isinstance(value, str):
        raise ValidationError(
            f'Service "{name}" in environment "{environment}": '
            f'"{canonical}" must be a string, got {type(value).__name__}',
            environment=environment,
            service=name,
            field=canonical,
        )
    return value.strip()


def _validate_dependencies(raw: Mapping[str, Any], name: str, environment: str) -> Tuple[str, ...]:
    """dependsOn is optional, but when present must be a list of names."""
    key, value = _first_present(raw, DEPENDS_KEYS)
    if key is None or value is None:
        return ()

    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise ValidationError(
            f'Service "{name}" in environment "{environment}": '
            f'"dependsOn" must be a list, got {type(value).__name__}',
            environment=environment,
            service=name,
            field="dependsOn",
        )

    for dep in value:
        if not isinstance(dep, str) or not dep:
            raise ValidationError(
                f'Service "{name}" in environment "{environment}": '
                f'"dependsOn" entries must be service names, got {dep!r}',
                environment=environment,
                service=name,
                field="dependsOn",
            )

    return tuple(value)


def validate_service(name: str, raw: Any, environment: str) -> ServiceDefinition:
    """
    Validate one service entry and build its definition.

    Raises:
        ValidationError: url/healthPath missing, dependsOn malformed,
            or the entry is not a mapping
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f'Service "{name}" in environment "{environment}" must be a mapping',
            environment=environment,
            service=name,
        )

    url = _require_text(raw, URL_KEYS, name, environment)
    health_path = _require_text(raw, HEALTH_KEYS, name, environment)
    depends_on = _validate_dependencies(raw, name, environment)
    _, wake_path = _first_present(raw, WAKE_KEYS)

    try:
        return ServiceDefinition(
            name=name,
            url=url,
            health_path=health_path,
            wake_path=wake_path,
            depends_on=depends_on,
            description=raw.get("description"),
            group=raw.get("group"),
        )
    except PydanticValidationError as e:
        raise ValidationError(
            f'Service "{name}" in environment "{environment}" is invalid: '
            f"{e.errors()[0].get('msg', str(e))}",
            environment=environment,
            service=name,
        ) from e


def _validate_groups(raw: Any) -> Dict[str, Tuple[str, ...]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValidationError('"groups" must be a mapping of group name to service names', field="groups")

    groups: Dict[str, Tuple[str, ...]] = {}
    for group_name, members in raw.items():
        if isinstance(members, (str, bytes)) or not isinstance(members, (list, tuple)):
            raise ValidationError(
                f'Group "{group_name}" must be a list of service names',
                field="groups",
            )
        if not all(isinstance(m, str) for m in members):
            raise ValidationError(
                f'Group "{group_name}" must only contain service names',
                field="groups",
            )
        groups[str(group_name)] = tuple(members)
    return groups


def validate_registry(document: Any, source: Optional[str] = None) -> RegistrySnapshot:
    """
    Validate a parsed registry document.

    Args:
        document: Parsed YAML/JSON tree
        source: Optional description of where the document came from

    Returns:
        New RegistrySnapshot

    Raises:
        ValidationError: On the first structural problem found
    """
    if not document:
        raise ValidationError("Registry is empty or invalid")

    if not isinstance(document, Mapping):
        raise ValidationError(
            f"Registry must be a mapping, got {type(document).__name__}"
        )

    if "services" not in document:
        raise ValidationError('Registry must contain "services" key', field="services")

    services = document["services"]
    if not isinstance(services, Mapping):
        raise ValidationError(
            '"services" must map environment names to service definitions',
            field="services",
        )

    environments: Dict[str, Dict[str, ServiceDefinition]] = {}
    for environment, env_services in services.items():
        environment = str(environment)
        if not isinstance(env_services, Mapping):
            raise ValidationError(
                f'Services in environment "{environment}" must be a mapping, '
                f"got {type(env_services).__name__}",
                environment=environment,
            )

        environments[environment] = {
            str(name): validate_service(str(name), raw, environment)
            for name, raw in env_services.items()
        }

    groups = _validate_groups(document.get("groups"))

    snapshot = RegistrySnapshot.build(environments, groups, source=source)
    logger.debug(
        f"Validated registry: {snapshot.total_services} services "
        f"across {len(environments)} environments"
    )
    return snapshot


__all__ = ["validate_registry", "validate_service"]
