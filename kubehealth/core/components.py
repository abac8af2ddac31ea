"""Merging of component facts discovered through different mechanisms."""

from typing import Dict, Iterable, List

from ..model.facts import ComponentFact, ComponentSource

# Higher wins on a dedup-key collision; equal ranks keep the first-seen entry
SOURCE_PRIORITY: Dict[ComponentSource, int] = {
    ComponentSource.HELM: 1,
    ComponentSource.DEPLOYMENT: 0,
    ComponentSource.STATEFULSET: 0,
    ComponentSource.DAEMONSET: 0,
}


def source_priority(source: ComponentSource) -> int:
    """Rank of a discovery source."""
    return SOURCE_PRIORITY.get(source, 0)


def resolve_components(components: Iterable[ComponentFact]) -> List[ComponentFact]:
    """Deduplicate components by namespace/name, preferring Helm metadata."""
    seen: Dict[str, ComponentFact] = {}

    for component in components:
        existing = seen.get(component.key)
        if existing is None:
            seen[component.key] = component
        elif source_priority(component.source) > source_priority(existing.source):
            seen[component.key] = component

    return list(seen.values())
