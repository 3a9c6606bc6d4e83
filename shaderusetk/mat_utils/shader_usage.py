# !/usr/bin/python
# coding=utf-8
"""Group the materials used under a scene object by the shader they reference.

The indexer is host agnostic: everything it knows about the scene comes from a
:class:`SceneHost`. The Maya binding lives in ``maya_scene_host``.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterator, List, Optional, Tuple

import pythontk as ptk


@dataclass(frozen=True)
class UsageRecord:
    """One observed usage of a material on a specific scene node."""

    material: Any
    node: Any
    name: str


@dataclass(frozen=True)
class ShaderGroup:
    """A shader, its display name and the usages found for it."""

    shader: Any
    name: str
    records: Tuple[UsageRecord, ...]


class UsageIndex(Mapping):
    """Read-only mapping of shader -> usage records, ordered by shader name.

    Lookups compare shaders by identity first, then by equality, so unhashable
    host objects can still be used as keys.
    """

    def __init__(self, groups=()):
        self._groups: Tuple[ShaderGroup, ...] = tuple(groups)

    def __getitem__(self, shader) -> Tuple[UsageRecord, ...]:
        for group in self._groups:
            if group.shader is shader or group.shader == shader:
                return group.records
        raise KeyError(shader)

    def __iter__(self) -> Iterator[Any]:
        return (group.shader for group in self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, shader) -> bool:
        return any(g.shader is shader or g.shader == shader for g in self._groups)

    def __eq__(self, other) -> bool:
        if not isinstance(other, UsageIndex):
            return NotImplemented
        return self._groups == other._groups

    __hash__ = None

    def __repr__(self) -> str:
        body = ", ".join(f"{g.name}: {len(g.records)}" for g in self._groups)
        return f"{self.__class__.__name__}({{{body}}})"

    @property
    def groups(self) -> Tuple[ShaderGroup, ...]:
        return self._groups

    @property
    def names(self) -> List[str]:
        """Shader display names in index order."""
        return [group.name for group in self._groups]

    @property
    def record_count(self) -> int:
        return sum(len(group.records) for group in self._groups)

    def get_group(self, name: str) -> Optional[ShaderGroup]:
        """Return the first group whose shader display name matches ``name``."""
        for group in self._groups:
            if group.name == name:
                return group
        return None


class SceneHost:
    """Adapter between the indexer and a host application's scene graph.

    Subclasses supply children, renderers, material slots and shaders. Empty
    material slots are reported as ``None``. Handles are the identity keys used
    for deduplication; the default ``id()`` is only valid when the host hands
    out the same object for the same scene entity for the duration of a pass.
    """

    def get_children(self, node) -> List[Any]:
        raise NotImplementedError

    def get_renderers(self, node) -> List[Any]:
        raise NotImplementedError

    def get_material_slots(self, renderer) -> List[Optional[Any]]:
        raise NotImplementedError

    def get_shader(self, material) -> Optional[Any]:
        raise NotImplementedError

    def get_selection(self) -> Optional[Any]:
        return None

    def get_name(self, obj) -> str:
        name = getattr(obj, "name", None)
        if callable(name):
            name = name()
        return str(name if name is not None else obj)

    def get_handle(self, obj) -> Hashable:
        return id(obj)

    def iter_nodes(self, root) -> Iterator[Any]:
        """Depth-first, pre-order walk of ``root`` and all of its descendants.

        Inactive nodes are visited like any other; filtering on active state is
        never done here.
        """
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            children = self.get_children(node) or []
            stack.extend(reversed(list(children)))


class ShaderUsageIndexer(ptk.LoggingMixin):
    """Collect the shaders used under a scene node.

    Example:
        indexer = ShaderUsageIndexer(MayaSceneHost())
        for group in indexer.analyze(root).groups:
            print(group.name, [r.name for r in group.records])
    """

    def __init__(self, host: SceneHost, log_level="WARNING"):
        super().__init__()
        self.host = host
        self.logger.setLevel(log_level)

    def analyze(self, root=None) -> UsageIndex:
        """Build a fresh usage index for the hierarchy under ``root``.

        Parameters:
            root (obj, optional): The scene node to analyze. None gives an empty index.

        Returns:
            (UsageIndex) Shader groups sorted by shader display name. Records within a
                group keep traversal order, with (material, node) pairs deduplicated.
        """
        if root is None:
            self.logger.debug("No root given; returning an empty index.")
            return UsageIndex()

        host = self.host
        found: Dict[Hashable, Tuple[Any, List[UsageRecord], set]] = {}

        for node in host.iter_nodes(root):
            for renderer in host.get_renderers(node) or []:
                for material in host.get_material_slots(renderer) or []:
                    if material is None:
                        continue
                    shader = host.get_shader(material)
                    if shader is None:
                        continue

                    key = host.get_handle(shader)
                    if key not in found:
                        found[key] = (shader, [], set())
                    _, records, seen = found[key]

                    pair = (host.get_handle(material), host.get_handle(node))
                    if pair in seen:
                        continue
                    seen.add(pair)
                    records.append(UsageRecord(material, node, host.get_name(node)))

        groups = sorted(
            (
                ShaderGroup(shader, host.get_name(shader), tuple(records))
                for shader, records, _ in found.values()
            ),
            key=lambda group: group.name,
        )
        index = UsageIndex(groups)
        self.logger.debug(
            "Analyzed %s: %d shaders, %d usages.", root, len(index), index.record_count
        )
        return index

    def analyze_selection(self) -> UsageIndex:
        """Analyze whatever the host currently reports as selected."""
        return self.analyze(self.host.get_selection())


# --------------------------------------------------------------------------------------------

if __name__ == "__main__":
    pass

# --------------------------------------------------------------------------------------------
# Notes
# --------------------------------------------------------------------------------------------
