"""
Dispatcher placement

Decides which output module owns a dispatcher's generated declarations.
"""

from typing import Dict, List, Optional, Tuple

from .config import DEFAULT_NAMESPACE, PLACEMENT_MARGIN


class ReferenceCounter:
    """Per source module reference counts for one dispatcher"""

    def __init__(self):
        self.locations: Dict[str, int] = {}
        self.location_counts: List[List] = []

    def add(self, module_path: str, amount: int = 1):
        index = self.locations.get(module_path)
        if index is None:
            self.locations[module_path] = len(self.location_counts)
            self.location_counts.append([module_path, amount])
        else:
            self.location_counts[index][1] += amount

    def count(self, module_path: str) -> int:
        index = self.locations.get(module_path)
        return 0 if index is None else self.location_counts[index][1]

    def ranked(self) -> List[Tuple[str, int]]:
        """Highest count first, ties by module path"""
        return sorted(((path, count) for path, count in self.location_counts), key=lambda item: (-item[1], item[0]))

    def __len__(self) -> int:
        return len(self.location_counts)


def is_namespace_special(registry: str) -> bool:
    """Dispatchers outside the default namespace always live in the shared module"""
    namespace, _, _ = registry.partition(':')
    return namespace != DEFAULT_NAMESPACE


def decide_placement(counter: Optional[ReferenceCounter], margin: int = PLACEMENT_MARGIN) -> Optional[str]:
    """Module to inline into, or None for the shared dispatcher module"""
    if counter is None or len(counter) == 0:
        return None

    ranked = counter.ranked()
    if len(ranked) == 1:
        return ranked[0][0]

    (top_module, top_count), (_, second_count) = ranked[0], ranked[1]
    if top_count > second_count + margin:
        return top_module
    return None
