"""UI module for NiceGUI interface."""

from family_legacy.ui.main_app import FamilyLegacyApp, create_app, run_app
from family_legacy.ui.member_dialog import MemberDetails, MemberDialog
from family_legacy.ui.timeline_view import TimelineView
from family_legacy.ui.tree_view import TreeCanvas

__all__ = ["FamilyLegacyApp", "create_app", "run_app", "MemberDetails", "MemberDialog", "TimelineView", "TreeCanvas"]
