"""
Main NiceGUI application: tree and timeline views over one shared store.
"""

import logging
from typing import Optional

from nicegui import ui

from family_legacy.config import settings
from family_legacy.graph.layout import LayoutEngine
from family_legacy.graph.nodes import DiagramEdge
from family_legacy.graph.repository import FamilyRepository
from family_legacy.interaction.controller import InteractionController
from family_legacy.interaction.gestures import AddMemberRequest
from family_legacy.state.session import Notice, TreeSession
from family_legacy.ui.member_dialog import MemberDetails, MemberDialog
from family_legacy.ui.timeline_view import TimelineView
from family_legacy.ui.tree_view import TreeCanvas, describe_edge

logger = logging.getLogger(__name__)


class FamilyLegacyApp:
    """One browser tab: a TreeSession plus the widgets that render it."""

    def __init__(self, repository: FamilyRepository):
        self.repository = repository
        self.session = TreeSession(
            repository,
            engine=LayoutEngine(settings.layout),
            on_change=self.refresh,
            on_notice=self.show_notice,
        )
        self.controller = InteractionController(
            self.session,
            on_member_request=self.request_member,
            on_confirm_delete=self.confirm_edge_delete,
        )
        self.canvas: Optional[TreeCanvas] = None
        self.timeline: Optional[TimelineView] = None
        self.member_dialog: Optional[MemberDialog] = None
        self.details: Optional[MemberDetails] = None
        self.client = None

    def setup(self):
        """Build the page."""
        self.client = ui.context.client
        self.session.open()

        ui.add_head_html('''
        <style>
            body { background-color: #fafaf9; }
        </style>
        ''')

        self.member_dialog = MemberDialog(self.controller)
        self.details = MemberDetails(self.controller, on_edit=self.member_dialog.open_edit)
        self._build_delete_dialog()

        with ui.row().classes("w-full items-center mb-4"):
            ui.label(settings.ui.title).classes("text-3xl font-bold font-serif text-amber-900")
            ui.space()
            ui.button("Add Member", icon="person_add",
                      on_click=lambda: self.member_dialog.open_new()).classes("bg-amber-700")

        with ui.tabs().classes("w-full") as tabs:
            tree_tab = ui.tab("Family Tree")
            timeline_tab = ui.tab("Timeline")

        with ui.tab_panels(tabs, value=tree_tab).classes("w-full"):
            with ui.tab_panel(tree_tab):
                self.canvas = TreeCanvas(self.controller, on_member_select=self.details.show)
                self.canvas.render()
            with ui.tab_panel(timeline_tab):
                self.timeline = TimelineView(self.session, on_member_select=self.details.show)
                self.timeline.render()

        self.client.on_disconnect(self.session.close)

    def _build_delete_dialog(self):
        with ui.dialog() as self.delete_dialog, ui.card():
            self.delete_label = ui.label("")
            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=self._dismiss_delete).props("flat")
                ui.button("Delete", on_click=self._confirm_delete).props("color=negative")
        self.delete_dialog.on("hide", lambda: self.controller.dismiss_delete())

    # ─────────────────────────────────────────
    # Controller callbacks
    # ─────────────────────────────────────────

    def request_member(self, request: AddMemberRequest):
        self.member_dialog.open_new(request)

    def confirm_edge_delete(self, edge: DiagramEdge):
        self.delete_label.text = describe_edge(edge, self.session)
        self.delete_dialog.open()

    def _confirm_delete(self):
        removed = self.controller.confirm_delete()
        self.delete_dialog.close()
        if removed:
            ui.notify(f"Removed {len(removed)} relationship(s)", type="info")

    def _dismiss_delete(self):
        self.controller.dismiss_delete()
        self.delete_dialog.close()

    # ─────────────────────────────────────────
    # Session callbacks
    # ─────────────────────────────────────────

    def refresh(self):
        if self.canvas:
            self.canvas.refresh()
        if self.timeline:
            self.timeline.refresh()

    def show_notice(self, notice: Notice):
        # writer callbacks arrive outside any page context
        if self.client is None:
            return
        with self.client:
            ui.notify(notice.message, type=notice.level)


def create_app(repository: Optional[FamilyRepository] = None) -> FamilyRepository:
    """Register the page; every client gets its own session over a shared repository."""
    repository = repository or FamilyRepository()

    @ui.page("/")
    def index():
        FamilyLegacyApp(repository).setup()

    return repository


def run_app(reload: bool = False):
    settings.database.ensure_dirs()
    create_app()
    logger.info("Starting %s on %s:%s", settings.ui.title, settings.ui.host, settings.ui.port)
    ui.run(
        title=settings.ui.title,
        host=settings.ui.host,
        port=settings.ui.port,
        reload=reload,
    )


if __name__ in {"__main__", "__mp_main__"}:
    run_app()
