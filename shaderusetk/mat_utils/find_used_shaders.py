# !/usr/bin/python
# coding=utf-8
import os
from typing import Any, Dict, Hashable, List, Optional

try:
    import pymel.core as pm
except ImportError as error:
    print(__file__, error)
import pythontk as ptk

# from this package:
from shaderusetk.mat_utils.shader_usage import (
    SceneHost,
    ShaderGroup,
    ShaderUsageIndexer,
    UsageIndex,
)
from shaderusetk.mat_utils.maya_scene_host import MayaSceneHost


class FindUsedShaders(ptk.LoggingMixin):
    """Panel session for the shader usage view.

    Holds the analyzed root, its usage index and which shader groups are expanded.
    The index is always rebuilt from scratch; expanded state survives a refresh of
    the same root and is reset whenever the root changes.
    """

    title = "Find Used Shaders"
    msg_no_root = "Select an object to analyze its shaders."
    msg_no_shaders = "No renderers with materials found on the selected object."

    def __init__(self, host: SceneHost, log_level="WARNING"):
        super().__init__()
        self.logger.setLevel(log_level)

        self.host = host
        self.indexer = ShaderUsageIndexer(host, log_level=log_level)
        self.root = None
        self.index = UsageIndex()
        self._expanded: Dict[Hashable, bool] = {}

    def clear(self) -> None:
        """Drop the current index and all expanded states."""
        self.index = UsageIndex()
        self._expanded.clear()

    def set_root(self, root) -> UsageIndex:
        """Make ``root`` the analyzed object. None clears the panel."""
        if root is None:
            self.root = None
            self.clear()
            self.logger.debug("Root cleared.")
            return self.index

        if self.root is None or self.host.get_handle(root) != self.host.get_handle(
            self.root
        ):
            self._expanded.clear()
        self.root = root
        return self.refresh()

    def refresh(self) -> UsageIndex:
        """Re-analyze the current root."""
        self.index = UsageIndex()
        self.index = self.indexer.analyze(self.root)

        keep = {self.host.get_handle(shader) for shader in self.index}
        self._expanded = {k: v for k, v in self._expanded.items() if k in keep}
        return self.index

    def on_selection_changed(self) -> bool:
        """Follow the host selection.

        Returns:
            (bool) True if the root changed and the view needs a redraw. Deselecting
                everything keeps the current root.
        """
        selected = self.host.get_selection()
        if selected is None:
            return False
        if self.root is not None and self.host.get_handle(
            selected
        ) == self.host.get_handle(self.root):
            return False
        self.set_root(selected)
        return True

    def is_expanded(self, shader) -> bool:
        return self._expanded.get(self.host.get_handle(shader), False)

    def set_expanded(self, shader, state: bool) -> None:
        self._expanded[self.host.get_handle(shader)] = bool(state)

    def toggle(self, shader) -> bool:
        state = not self.is_expanded(shader)
        self.set_expanded(shader, state)
        return state

    def status_message(self) -> Optional[str]:
        """The informational message to show instead of the groups, if any."""
        if self.root is None:
            return self.msg_no_root
        if not self.index:
            return self.msg_no_shaders
        return None

    def summary(self) -> str:
        return f"Total Shaders Found: {len(self.index)}"

    @staticmethod
    def group_label(group: ShaderGroup) -> str:
        return f"{group.name} ({len(group.records)} materials)"

    def rows(self) -> List[Dict[str, Any]]:
        """Display model of the current index, one entry per shader group."""
        rows = []
        for group in self.index.groups:
            records = []
            for record in group.records:
                records.append(
                    {
                        "material": record.material,
                        "material_name": self.host.get_name(record.material),
                        "node": record.node,
                        "node_name": record.name,
                        "renderer": f"Renderer: {record.name}" if record.name else "",
                    }
                )
            rows.append(
                {
                    "shader": group.shader,
                    "label": self.group_label(group),
                    "expanded": self.is_expanded(group.shader),
                    "records": records,
                }
            )
        return rows

    def owner_nodes(self, shader=None) -> List[Any]:
        """Unique owning nodes, for one shader group or the whole index."""
        groups = self.index.groups
        if shader is not None:
            groups = [g for g in groups if g.shader is shader or g.shader == shader]

        nodes, seen = [], set()
        for group in groups:
            for record in group.records:
                handle = self.host.get_handle(record.node)
                if handle not in seen:
                    seen.add(handle)
                    nodes.append(record.node)
        return nodes


class FindUsedShadersSlots(ptk.HelpMixin, ptk.LoggingMixin):
    """UI slots for the Find Used Shaders panel."""

    selection_events = ("SelectionChanged",)

    def __init__(self, switchboard, log_level="INFO"):
        super().__init__()
        self.logger.setLevel(log_level)

        self.sb = switchboard
        self.ui = self.sb.loaded_ui.find_used_shaders

        self.host = MayaSceneHost()
        self.session = FindUsedShaders(self.host)
        self._selection_job_ids: List[int] = []
        self._refresh_pending = False

        self._setup_selection_callback()
        try:
            self.ui.destroyed.connect(self.cleanup_callbacks)
        except Exception as e:
            self.logger.debug(f"Could not connect destroyed signal: {e}")

        self.session.set_root(self.host.get_selection())
        self.refresh_view()

    def header_init(self, widget):
        """Initialize the header widget."""
        widget.setTitle(FindUsedShaders.title)
        widget.menu.add(
            self.sb.registered_widgets.Label,
            setObjectName="lbl_refresh",
            setText="Refresh",
            setToolTip="Re-analyze the current object.",
        )
        widget.menu.add(
            self.sb.registered_widgets.Label,
            setObjectName="lbl_select_objects",
            setText="Select All Objects",
            setToolTip="Select every object that uses one of the listed shaders.",
        )

    def lbl_refresh(self):
        """Re-analyze the current root."""
        self.session.refresh()
        self.refresh_view()

    def lbl_select_objects(self):
        """Select all owning objects in the scene."""
        nodes = self.session.owner_nodes()
        if not nodes:
            pm.warning("No objects to select.")
            return
        self.host.select(nodes)

    def tree000_init(self, widget):
        """Initialize the shader tree."""
        if not widget.is_initialized:
            widget.setColumnCount(2)
            widget.setHeaderLabels(["Material", "Object"])
            widget.itemExpanded.connect(lambda item: self._on_item_toggled(item, True))
            widget.itemCollapsed.connect(
                lambda item: self._on_item_toggled(item, False)
            )
            widget.itemDoubleClicked.connect(self._on_item_double_clicked)

    def b000(self):
        """Use Selected."""
        selected = self.host.get_selection()
        if selected is None:
            pm.warning("Nothing selected.")
            return
        self.session.set_root(selected)
        self.refresh_view()

    def b001(self):
        """Clear."""
        self.session.set_root(None)
        self.refresh_view()

    def refresh_view(self):
        """Redraw the root field, the tree and the status line from the session."""
        root = self.session.root
        self.ui.txt000.setText(self.host.get_name(root) if root is not None else "")

        self._populate_tree()

        message = self.session.status_message()
        self.ui.lbl000.setText(message or self.session.summary())
        self.logger.debug(f"View refreshed: {self.session.index!r}")

    def _populate_tree(self):
        tree = self.ui.tree000
        tree.clear()

        user_role = self.sb.QtCore.Qt.UserRole
        for row in self.session.rows():
            parent_item = self.sb.QtWidgets.QTreeWidgetItem(tree)
            parent_item.setText(0, row["label"])
            parent_item.setData(0, user_role, row)

            for record in row["records"]:
                item = self.sb.QtWidgets.QTreeWidgetItem(parent_item)
                item.setText(0, record["material_name"])
                item.setText(1, record["node_name"])
                if record["renderer"]:
                    item.setToolTip(1, record["renderer"])
                item.setData(0, user_role, record)

            parent_item.setExpanded(row["expanded"])

    def _on_item_toggled(self, item, state: bool):
        if item.parent() is not None:
            return
        row = item.data(0, self.sb.QtCore.Qt.UserRole)
        if row:
            self.session.set_expanded(row["shader"], state)

    def _on_item_double_clicked(self, item, column: int):
        """Select the material (column 0) or owning object (column 1) in the scene."""
        data = item.data(0, self.sb.QtCore.Qt.UserRole)
        if not data:
            return
        if item.parent() is None:
            self.host.select(self.session.owner_nodes(data["shader"]))
        elif column == 0:
            self.host.select(data["material"])
        else:
            self.host.select(data["node"])

    def _setup_selection_callback(self):
        """Set up Maya scriptJobs to follow the scene selection."""
        self.cleanup_callbacks()

        for event in self.selection_events:
            try:
                job_id = pm.scriptJob(
                    event=[event, self._on_selection_changed], protected=False
                )
                self._selection_job_ids.append(job_id)
            except Exception as e:
                self.logger.warning(f"Failed to create scriptJob for '{event}': {e}")

        self.logger.debug(f"Created selection scriptJobs: {self._selection_job_ids}")

    def _on_selection_changed(self):
        """Coalesce selection events into one deferred analysis."""
        if self._refresh_pending:
            return
        self._refresh_pending = True

        def do_refresh():
            self._refresh_pending = False
            try:
                if self.session.on_selection_changed():
                    self.refresh_view()
            except RuntimeError:
                # The Qt widgets have been deleted.
                self.cleanup_callbacks()

        pm.evalDeferred(do_refresh)

    def cleanup_callbacks(self):
        """Kill the selection scriptJobs."""
        job_ids, self._selection_job_ids = self._selection_job_ids, []
        if not job_ids:
            return

        def kill_jobs(ids):
            for job_id in ids:
                try:
                    if pm.scriptJob(exists=job_id):
                        pm.scriptJob(kill=job_id, force=True)
                except Exception as e:
                    self.logger.debug(f"Error killing scriptJob {job_id}: {e}")

        # Deferred to avoid "cannot kill running scriptJob".
        pm.evalDeferred(lambda: kill_jobs(job_ids))


def get_main_window():
    """Get the main Maya window as a QMainWindow instance."""
    from qtpy import QtWidgets
    from shiboken6 import wrapInstance
    import maya.OpenMayaUI as omui

    main_window_ptr = omui.MQtUtil.mainWindow()
    return wrapInstance(int(main_window_ptr), QtWidgets.QMainWindow)


def launch(parent=None, **kwargs):
    """Show the Find Used Shaders panel inside Maya."""
    from uitk import Switchboard

    if parent is None:
        parent = get_main_window()
    ui_file = os.path.join(os.path.dirname(__file__), "find_used_shaders.ui")
    sb = Switchboard(parent, ui_location=ui_file, slot_location=FindUsedShadersSlots)

    ui = sb.current_ui
    ui.set_style(theme="dark")
    ui.header.configureButtons(minimize_button=True, hide_button=True)
    ui.show(pos="screen", **kwargs)
    return ui


# -----------------------------------------------------------------------------

if __name__ == "__main__":
    launch(app_exec=True)

# -----------------------------------------------------------------------------
# Notes
# -----------------------------------------------------------------------------
