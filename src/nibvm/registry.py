"""Dynamic discovery and registry of bounds-checking policy modules.

Imports every module in the policies/ subpackage and keeps those that
provide the retreat(), check_access() and leave_loop() strategies.
"""

import importlib
import logging
import pkgutil
from types import ModuleType

from nibvm import policies

logger = logging.getLogger(__name__)

REQUIRED_STRATEGIES = ("retreat", "check_access", "leave_loop")


def is_valid_policy(module: ModuleType) -> bool:
    """Validate module has every required strategy as a callable."""
    return all(callable(getattr(module, name, None)) for name in REQUIRED_STRATEGIES)


def discover_policies() -> dict[str, ModuleType]:
    """
    Discover all policy modules.

    Returns:
        Dictionary mapping policy names (the module's NAME, or its module
        name when NAME is absent) to modules, sorted by name.

    Raises:
        RuntimeError: If no valid policies are found
    """
    found: dict[str, ModuleType] = {}

    for info in pkgutil.iter_modules(policies.__path__):
        if info.ispkg or info.name.startswith("_"):
            continue

        module_name = f"{policies.__name__}.{info.name}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.warning("failed to import %s: %s - skipping", module_name, e)
            continue

        if is_valid_policy(module):
            found[getattr(module, "NAME", info.name)] = module
        else:
            logger.warning("%s lacks %s - skipping", module_name, ", ".join(REQUIRED_STRATEGIES))

    if not found:
        raise RuntimeError("No valid bounds-checking policies found")

    return dict(sorted(found.items()))


_POLICY_REGISTRY = discover_policies()


def get_available_policies() -> list[str]:
    """Return sorted list of available policy names."""
    return list(_POLICY_REGISTRY.keys())


def get_policy(name: str) -> ModuleType:
    """
    Get the policy module registered under a name.

    Args:
        name: Policy name (e.g., 'strict', 'permissive')

    Raises:
        ValueError: If the name is not registered
    """
    if name in _POLICY_REGISTRY:
        return _POLICY_REGISTRY[name]
    available = ', '.join(get_available_policies())
    raise ValueError(f"Unknown policy: {name}. Available: {available}")
