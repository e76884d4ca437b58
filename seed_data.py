"""
Seed script for Family Legacy - populates the database with a sample family.

This script:
1. Removes the existing database file
2. Creates three generations of the Hart family with dates and bios
3. Links them with parent and spouse relationships

Run this script to start with a clean slate:
    python seed_data.py
"""

from datetime import date
from pathlib import Path

from family_legacy.config import settings
from family_legacy.graph.repository import FamilyRepository
from family_legacy.models import Gender, MediaItem, MediaType, Member, RelationKind


def clear_database():
    """Remove the database file to start fresh."""
    print("=" * 80)
    print("CLEARING DATABASE")
    print("=" * 80)

    db = Path(settings.database.path)
    if db.exists():
        db.unlink()
        print(f"Deleted: {db}")
    else:
        print(f"Not found: {db}")
    print()


def seed_sample_data(repo: FamilyRepository) -> dict[str, Member]:
    """Create a three generation sample family."""
    print("=" * 80)
    print("SEEDING SAMPLE FAMILY DATA")
    print("=" * 80)

    people = {
        "walter": Member(first_name="Walter", last_name="Hart", gender=Gender.MALE,
                         birth_date=date(1921, 3, 2), death_date=date(1998, 11, 17),
                         bio="Carpenter who built the family house on Elm Street."),
        "edith": Member(first_name="Edith", last_name="Hart", maiden_name="Lowell",
                        gender=Gender.FEMALE, birth_date=date(1924, 7, 9),
                        death_date=date(2005, 1, 30), bio="Schoolteacher for forty years."),
        "george": Member(first_name="George", last_name="Hart", gender=Gender.MALE,
                         birth_date=date(1948, 5, 21)),
        "ruth": Member(first_name="Ruth", last_name="Hart", maiden_name="Baker",
                       gender=Gender.FEMALE, birth_date=date(1950, 9, 3)),
        "alice": Member(first_name="Alice", last_name="Moreno", maiden_name="Hart",
                        gender=Gender.FEMALE, birth_date=date(1952, 2, 14)),
        "daniel": Member(first_name="Daniel", last_name="Hart", gender=Gender.MALE,
                         birth_date=date(1975, 12, 1)),
        "claire": Member(first_name="Claire", last_name="Hart", gender=Gender.FEMALE,
                         birth_date=date(1978, 6, 28)),
        "sam": Member(first_name="Sam", last_name="Hart", gender=Gender.OTHER),
    }
    people["walter"].media.append(MediaItem(
        type=MediaType.NOTE, title="Workshop", content="Kept every offcut in labelled jars.",
    ))

    for member in people.values():
        repo.create_member(member)
        print(f"  Added {member.full_name}")

    relationships = [
        ("walter", "edith", RelationKind.SPOUSE),
        ("walter", "george", RelationKind.PARENT),
        ("edith", "george", RelationKind.PARENT),
        ("walter", "alice", RelationKind.PARENT),
        ("edith", "alice", RelationKind.PARENT),
        ("george", "ruth", RelationKind.SPOUSE),
        ("george", "daniel", RelationKind.PARENT),
        ("ruth", "daniel", RelationKind.PARENT),
        ("george", "claire", RelationKind.PARENT),
        ("ruth", "claire", RelationKind.PARENT),
        ("claire", "sam", RelationKind.PARENT),
    ]
    for source, target, kind in relationships:
        repo.create_edge(people[source].id, people[target].id, kind)

    print(f"\nTotal members created: {len(people)}")
    print(f"Total relationships created: {len(relationships)}")
    return people


def main():
    clear_database()
    settings.database.ensure_dirs()
    seed_sample_data(FamilyRepository())

    print("\n" + "=" * 80)
    print("SEED COMPLETE!")
    print("=" * 80)
    print("\nYou can now:")
    print("  1. Start the UI: python run_ui.py")
    print(f"  2. View the family tree at http://localhost:{settings.ui.port}")
    print("\nTo reset and re-seed: python seed_data.py")


if __name__ == "__main__":
    main()
