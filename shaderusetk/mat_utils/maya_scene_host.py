# !/usr/bin/python
# coding=utf-8
from typing import Any, Hashable, Iterable, List, Optional

try:
    import pymel.core as pm
except ImportError as error:
    print(__file__, error)
import pythontk as ptk

# from this package:
from shaderusetk.mat_utils.shader_usage import SceneHost


class MayaSceneHost(SceneHost, ptk.LoggingMixin):
    """Expose a Maya scene to the shader usage indexer.

    Mapping:
        scene node      -> transform
        renderer        -> non-intermediate surface shape under the transform
        material slots  -> shading engines assigned to this instance of the shape
        material        -> surface shader connected to a shading engine
        shader          -> the material's node type (e.g. 'standardSurface')

    Hidden transforms, shapes with visibility off and members of disabled display
    layers are all walked; visibility is never consulted.
    """

    renderable_types = ("mesh", "nurbsSurface", "subdiv")

    def __init__(self, renderable_types: Optional[Iterable[str]] = None, log_level="WARNING"):
        super().__init__()
        if renderable_types is not None:
            self.renderable_types = tuple(renderable_types)
        self.logger.setLevel(log_level)

    @staticmethod
    def _node_errors() -> tuple:
        """Errors raised by pymel when a node or plug vanished mid-query."""
        return (pm.MayaNodeError, pm.MayaAttributeError)

    def get_children(self, node) -> List[Any]:
        try:
            return node.getChildren(type="transform") or []
        except self._node_errors() as e:
            self.logger.debug(f"Skipping children of {node}: {e}")
            return []

    def get_renderers(self, node) -> List[Any]:
        try:
            shapes = node.getShapes(noIntermediate=True) or []
            return [s for s in shapes if s.nodeType() in self.renderable_types]
        except self._node_errors() as e:
            self.logger.debug(f"Skipping shapes of {node}: {e}")
            return []

    def get_material_slots(self, renderer) -> List[Optional[Any]]:
        """Return one entry per shading engine assigned to this instance of the shape.

        Only the ``instObjGroups`` element of the renderer's own DAG path is read, so an
        instanced shape reports each instance's assignments separately. Whole-object
        assignments come first, then per-face (``objectGroups``) assignments.
        Shading engines without a surface shader give an empty (None) slot.
        """
        try:
            inst_grp = renderer.instObjGroups[renderer.instanceNumber()]
            shading_grps = inst_grp.listConnections(
                type="shadingEngine", source=False, destination=True
            ) or []
            shading_grps += inst_grp.objectGroups.listConnections(
                type="shadingEngine", source=False, destination=True
            ) or []
        except self._node_errors() as e:
            self.logger.debug(f"Skipping shading groups of {renderer}: {e}")
            return []

        slots = []
        for shading_grp in shading_grps:
            try:
                materials = shading_grp.surfaceShader.listConnections(
                    source=True, destination=False
                )
            except self._node_errors():
                materials = []
            slots.append(materials[0] if materials else None)
        return slots

    def get_shader(self, material) -> Optional[str]:
        try:
            return material.nodeType() or None
        except self._node_errors():
            return None

    def get_name(self, obj) -> str:
        """Short node name; deleted nodes give an empty name."""
        if not hasattr(obj, "nodeName"):
            return str(obj)
        try:
            return obj.nodeName()
        except self._node_errors() as e:
            self.logger.debug(f"Node name unavailable: {e}")
            return ""

    def get_handle(self, obj) -> Hashable:
        # PyNodes hash and compare on the underlying Maya object.
        return obj

    def get_selection(self) -> Optional[Any]:
        """Return the transform of the most recently selected DAG object."""
        selection = pm.ls(selection=True, objectsOnly=True, type="dagNode")
        if not selection:
            return None
        node = selection[-1]
        if not isinstance(node, pm.nt.Transform):
            node = node.getParent()
            if node is None:
                self.logger.debug(
                    f"Ignoring selection {selection[-1]}: not a transform and has no parent."
                )
        return node

    def select(self, objects) -> List[Any]:
        """Replace the scene selection with the given nodes, skipping missing ones."""
        existing = []
        for obj in ptk.make_iterable(objects):
            if obj is not None and pm.objExists(obj):
                existing.append(obj)
            else:
                pm.warning(f"Node no longer exists: {obj}")
        if existing:
            pm.select(existing, replace=True)
        return existing


# --------------------------------------------------------------------------------------------

if __name__ == "__main__":
    pass

# --------------------------------------------------------------------------------------------
# Notes
# --------------------------------------------------------------------------------------------
