"""Fallback ordering for selector definitions."""

from shopcheck.core.locators import Locator
from shopcheck.selectors.catalog import SelectorDefinition


def get_fallback_sequence(definition: SelectorDefinition) -> list[Locator]:
    """Locators of a definition in the order they must be tried.

    Primary always comes first, secondary second when present and the path
    expression last when present, whether or not a secondary exists. The
    stability rating never changes the order.

    Args:
        definition: The definition to expand.

    Returns:
        A list of one to three locators.
    """
    sequence = [definition.primary]
    if definition.secondary is not None:
        sequence.append(definition.secondary)
    if definition.path_expression is not None:
        sequence.append(definition.path_expression)
    return sequence
