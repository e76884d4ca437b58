"""Add / edit member dialogs for NiceGUI."""

from typing import Callable, Optional

from nicegui import ui

from family_legacy.errors import FamilyTreeError
from family_legacy.interaction.controller import InteractionController
from family_legacy.interaction.gestures import AddMemberRequest
from family_legacy.models import Gender, MediaItem, MediaType, Member

GENDER_OPTIONS = {g.value: g.value.title() for g in Gender}


class MemberDialog:
    """Form for creating a member (optionally seeded by a canvas drop) or editing one."""

    def __init__(self, controller: InteractionController):
        self.controller = controller
        self.session = controller.session
        self._request: Optional[AddMemberRequest] = None
        self._editing: Optional[Member] = None

        with ui.dialog() as self.dialog, ui.card().classes("w-96 p-4"):
            self.title = ui.label("Add Family Member").classes("text-lg font-bold mb-2")
            self.seed_label = ui.label("").classes("text-xs text-stone-500")
            self.first_name = ui.input("First name *").classes("w-full")
            self.last_name = ui.input("Last name *").classes("w-full")
            self.maiden_name = ui.input("Maiden name").classes("w-full")
            self.gender = ui.select(options=GENDER_OPTIONS, label="Gender", clearable=True).classes("w-full")
            self.birth_date = ui.input("Birth date (YYYY-MM-DD)").classes("w-full")
            self.death_date = ui.input("Death date (YYYY-MM-DD)").classes("w-full")
            self.bio = ui.textarea("Bio").classes("w-full")
            self.photo_url = ui.input("Profile picture URL").classes("w-full")
            with ui.row().classes("w-full justify-end mt-2"):
                ui.button("Cancel", on_click=self.close).props("flat")
                ui.button("Save", on_click=self.save).classes("bg-amber-600")

    def open_new(self, request: Optional[AddMemberRequest] = None):
        self._request = request
        self._editing = None
        self.title.text = "Add Family Member"
        self.seed_label.text = self._describe_request(request)
        for field in (self.first_name, self.last_name, self.maiden_name,
                      self.birth_date, self.death_date, self.bio, self.photo_url):
            field.value = ""
        self.gender.value = None
        self.dialog.open()

    def open_edit(self, member: Member):
        self._request = None
        self._editing = member
        self.title.text = f"Edit {member.full_name}"
        self.seed_label.text = ""
        self.first_name.value = member.first_name
        self.last_name.value = member.last_name
        self.maiden_name.value = member.maiden_name or ""
        self.gender.value = member.gender.value if member.gender else None
        self.birth_date.value = member.birth_date.isoformat() if member.birth_date else ""
        self.death_date.value = member.death_date.isoformat() if member.death_date else ""
        self.bio.value = member.bio or ""
        self.photo_url.value = ""
        self.dialog.open()

    def close(self):
        if self._request is not None:
            self.controller.abandon_member_request()
        self._request = None
        self._editing = None
        self.dialog.close()

    def _fields(self) -> dict:
        return {
            "first_name": self.first_name.value or "",
            "last_name": self.last_name.value or "",
            "maiden_name": self.maiden_name.value or None,
            "gender": self.gender.value or None,
            "birth_date": self.birth_date.value or None,
            "death_date": self.death_date.value or None,
            "bio": self.bio.value or None,
        }

    def save(self):
        try:
            if self._editing is not None:
                member = self.session.update_member(self._editing.id, **self._fields())
            else:
                member = self.session.new_member(**self._fields())
                self.controller.complete_member_request(member, self._request or AddMemberRequest())
            if self.photo_url.value:
                self.session.add_media(member.id, MediaItem(
                    type=MediaType.IMAGE, url=self.photo_url.value, title="Profile Picture",
                ))
        except FamilyTreeError as e:
            ui.notify(str(e), type="warning")
            return

        ui.notify(f"Saved {member.full_name}", type="positive")
        self._request = None
        self._editing = None
        self.dialog.close()

    def _describe_request(self, request: Optional[AddMemberRequest]) -> str:
        if request is None:
            return ""
        names = {m.id: m.full_name for m in self.session.members}
        if request.parents:
            return "Child of " + " and ".join(names.get(p, "?") for p in request.parents)
        if request.children:
            return "Parent of " + ", ".join(names.get(c, "?") for c in request.children)
        if request.spouses:
            return "Spouse of " + ", ".join(names.get(s, "?") for s in request.spouses)
        return ""


class MemberDetails:
    """Read-only details with media, edit and delete actions."""

    def __init__(self, controller: InteractionController, on_edit: Callable[[Member], None]):
        self.session = controller.session
        self.on_edit = on_edit
        self._member: Optional[Member] = None

        with ui.dialog() as self.dialog, ui.card().classes("w-[28rem] p-4"):
            self.content = ui.column().classes("w-full")

    def show(self, member: Member):
        self._member = member
        self.content.clear()
        relations = self.session.relations(member.id)
        names = {m.id: m.full_name for m in self.session.members}

        with self.content:
            if member.profile_image:
                ui.image(member.profile_image.url).classes("w-24 h-24 rounded-full self-center")
            ui.label(member.full_name).classes("text-xl font-bold font-serif")
            if member.maiden_name:
                ui.label(f"née {member.maiden_name}").classes("italic text-sm")
            ui.label(member.lifespan).classes("text-sm text-stone-500")
            if member.bio:
                ui.label(member.bio).classes("text-sm mt-2")

            for title, ids in (("Parents", relations.parents),
                               ("Spouses", relations.spouses),
                               ("Children", relations.children)):
                if ids:
                    ui.label(f"{title}: " + ", ".join(names.get(i, "?") for i in ids)).classes("text-sm")

            with ui.expansion(f"Media ({len(member.media)})").classes("w-full"):
                for item in member.media:
                    if item.type == MediaType.IMAGE:
                        ui.image(item.url).classes("w-24 h-24 rounded")
                    elif item.type == MediaType.NOTE:
                        ui.label(item.content or item.title).classes("text-sm")
                    else:
                        ui.link(item.title or item.url, item.url, new_tab=True)
                url = ui.input("Media URL").classes("w-full")
                title = ui.input("Title").classes("w-full")
                kind = ui.select({t.value: t.value.title() for t in MediaType}, value="image", label="Type")

                def attach():
                    if not url.value:
                        ui.notify("URL is required", type="warning")
                        return
                    self.session.add_media(member.id, MediaItem(
                        type=kind.value, url=url.value, title=title.value or url.value,
                    ))
                    self.show(self.session.member(member.id))

                ui.button("Attach", on_click=attach).props("flat dense")

            with ui.row().classes("w-full justify-between mt-4"):
                ui.button("Delete", on_click=self._confirm_delete).props("flat color=negative")
                ui.button("Edit", on_click=lambda: (self.dialog.close(), self.on_edit(member)))

        self.dialog.open()

    async def _confirm_delete(self):
        member = self._member
        with ui.dialog() as confirm, ui.card():
            ui.label(f"Delete {member.full_name}? This cannot be undone.")
            with ui.row():
                ui.button("Cancel", on_click=lambda: confirm.submit(False)).props("flat")
                ui.button("Delete", on_click=lambda: confirm.submit(True)).props("color=negative")
        if await confirm:
            self.session.delete_member(member.id)
            self.dialog.close()
