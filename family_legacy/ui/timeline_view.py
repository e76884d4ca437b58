"""Chronological timeline of members for NiceGUI."""

from typing import Callable, Optional

from nicegui import ui

from family_legacy.graph.timeline import build_timeline
from family_legacy.models import Member
from family_legacy.state.session import TreeSession


class TimelineView:
    """Members ordered by birth, alternating sides of a centre line."""

    def __init__(self, session: TreeSession, on_member_select: Optional[Callable[[Member], None]] = None):
        self.session = session
        self.on_member_select = on_member_select
        self.container = None

    def render(self):
        self.container = ui.column().classes("w-full max-w-4xl mx-auto py-8")
        self.refresh()

    def refresh(self):
        if self.container is None:
            return
        self.container.clear()
        entries = build_timeline(self.session.members)
        with self.container:
            if not entries:
                ui.label("No family members yet. Use Add Member to start your tree.").classes("text-gray-500 p-8")
                return
            for entry in entries:
                align = "self-start" if entry.side == "left" else "self-end"
                member = entry.member
                with ui.card().classes(f"w-1/2 {align} cursor-pointer").on(
                    "click", lambda m=member: self._select(m)
                ):
                    ui.badge(entry.label).props("color=amber-7")
                    with ui.row().classes("items-center gap-3"):
                        if member.profile_image:
                            ui.image(member.profile_image.url).classes("w-12 h-12 rounded-full")
                        ui.label(member.full_name).classes("text-xl font-bold")
                    if member.bio:
                        ui.label(member.bio).classes("text-sm text-stone-600")

    def _select(self, member: Member):
        if self.on_member_select:
            self.on_member_select(member)
