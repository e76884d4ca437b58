"""Tests for member and edge models."""

from datetime import date

import pytest
from pydantic import ValidationError

from family_legacy.models import Edge, MediaItem, MediaType, Member, Position, RelationKind


class TestMember:
    """Member validation and display helpers."""

    def test_names_are_required(self):
        """Blank first or last names should be rejected."""
        with pytest.raises(ValidationError):
            Member(first_name="   ", last_name="Smith")
        with pytest.raises(ValidationError):
            Member(first_name="Ann", last_name="")

    def test_names_are_stripped(self):
        member = Member(first_name="  Ann ", last_name=" Smith")
        assert member.full_name == "Ann Smith"
        assert member.initials == "AS"

    def test_blank_optional_fields_become_none(self):
        member = Member(first_name="Ann", last_name="Smith", maiden_name=" ", birth_date="", gender="")
        assert member.maiden_name is None
        assert member.birth_date is None
        assert member.gender is None

    def test_death_before_birth_rejected(self):
        with pytest.raises(ValidationError):
            Member(first_name="Ann", last_name="Smith",
                   birth_date=date(1950, 1, 1), death_date=date(1940, 1, 1))

    def test_ids_are_unique(self):
        a = Member(first_name="A", last_name="B")
        b = Member(first_name="A", last_name="B")
        assert a.id != b.id

    def test_profile_image_is_first_image(self):
        member = Member(first_name="Ann", last_name="Smith", media=[
            MediaItem(type=MediaType.NOTE, url="", title="Letter", content="Dear Ann"),
            MediaItem(type=MediaType.IMAGE, url="ann.jpg", title="Portrait"),
            MediaItem(type=MediaType.IMAGE, url="wedding.jpg", title="Wedding"),
        ])
        assert member.profile_image.url == "ann.jpg"
        assert Member(first_name="Ann", last_name="Smith").profile_image is None

    def test_lifespan(self):
        assert Member(first_name="A", last_name="B").lifespan == "b. ?"
        assert Member(first_name="A", last_name="B", birth_date=date(1940, 5, 1)).lifespan == "b. 1940"
        assert Member(
            first_name="A", last_name="B",
            birth_date=date(1940, 5, 1), death_date=date(2001, 2, 3),
        ).lifespan == "1940 - 2001"


class TestEdge:
    """Edge identity rules."""

    def test_spouse_key_ignores_direction(self):
        assert Edge.spouse("a", "b").same_as(Edge.spouse("b", "a"))

    def test_parent_key_keeps_direction(self):
        assert not Edge.parent("a", "b").same_as(Edge.parent("b", "a"))

    def test_parent_and_spouse_differ(self):
        assert not Edge.parent("a", "b").same_as(Edge.spouse("a", "b"))

    def test_child_alias_reverses(self):
        edge = Edge.normalize("kid", "mum", "child")
        assert edge.kind == RelationKind.PARENT
        assert (edge.from_id, edge.to_id) == ("mum", "kid")

    def test_self_loop(self):
        assert Edge.spouse("a", "a").is_self_loop
        assert not Edge.parent("a", "b").is_self_loop

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Edge.normalize("a", "b", "cousin")


class TestPosition:

    def test_offset(self):
        assert Position(x=10, y=20).offset(5, -5) == Position(x=15, y=15)
