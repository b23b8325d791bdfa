"""
Seed script for demo categories, sample responses and the first admin.
"""

from poprev.config import settings
from poprev.database import SessionLocal, init_db
from poprev.models.user import Role
from poprev.schemas.category import CategoryCreate
from poprev.schemas.response import Reference, ResponseCreate
from poprev.services.auth_service import hash_password
from poprev.store import ContentStore, SqlContentStore


CATEGORIES = [
    {
        "name": "Deity",
        "slug": "deity",
        "description": "Topics related to the nature, attributes, and activities of God and other divine beings.",
    },
    {
        "name": "Cosmology",
        "slug": "cosmology",
        "description": "Discussions on universe structure, cosmic evolution, and celestial hierarchies.",
    },
    {
        "name": "Afterlife",
        "slug": "afterlife",
        "description": "Information about what happens after physical death, including mansion worlds and ascension.",
    },
    {
        "name": "Spiritual Progression",
        "slug": "spiritual-progression",
        "description": "Concepts related to soul growth, spiritual evolution, and advancement through the universe.",
    },
    {
        "name": "Jesus",
        "slug": "jesus",
        "description": "Topics about the life, teachings, and significance of Jesus as portrayed in the Urantia Book.",
    },
]

RESPONSES = [
    {
        "title": "Why is God described as a Trinity?",
        "question": "I've heard that God is described as a Trinity in the Urantia Book. Can you explain this concept?",
        "excerpt": (
            "The Urantia Book describes God as the Trinity of Trinities, consisting of the "
            "Universal Father, Eternal Son, and Infinite Spirit..."
        ),
        "answer": (
            "<p>The Urantia Book presents a detailed view of God as a Trinity.</p>"
            "<ol>"
            "<li><strong>The Universal Father</strong>, the First Source and Center.</li>"
            "<li><strong>The Eternal Son</strong>, the Second Source and Center.</li>"
            "<li><strong>The Infinite Spirit</strong>, the Third Source and Center.</li>"
            "</ol>"
        ),
        "references": [
            {
                "paper": 10,
                "section": 0,
                "paragraph": 1,
                "quote": "The Paradise Trinity of eternal Deities facilitates the Father's escape from personality absolutism.",
            }
        ],
        "categories": ["deity", "cosmology"],
        "tags": ["God", "Trinity", "Paradise", "First Source and Center"],
    },
    {
        "title": "What are the Mansion Worlds?",
        "question": "The Urantia Book mentions Mansion Worlds. What are they and what happens there?",
        "excerpt": (
            "The Mansion Worlds are the seven transitional worlds where ascending mortals continue "
            "their spiritual progression after physical death..."
        ),
        "answer": (
            "<p>The Mansion Worlds are a series of seven transitional worlds where human souls go "
            "after physical death to continue their spiritual progression.</p>"
            "<p>On these worlds, you gradually shed your material nature and develop your morontia form.</p>"
        ),
        "references": [],
        "categories": ["afterlife", "spiritual-progression"],
        "tags": ["Mansion Worlds", "Morontia", "Ascension"],
    },
]


def seed_content(store: ContentStore) -> int:
    """Seed categories and sample responses. Returns how many responses were added."""
    if store.list_categories():
        print("Categories already seeded, skipping content")
        return 0

    slug_to_id = {}
    for cat_data in CATEGORIES:
        category = store.create_category(CategoryCreate(**cat_data))
        slug_to_id[category.slug] = category.id

    for resp_data in RESPONSES:
        store.create_response(
            ResponseCreate(
                title=resp_data["title"],
                question=resp_data["question"],
                answer=resp_data["answer"],
                excerpt=resp_data["excerpt"],
                references=[Reference(**ref) for ref in resp_data["references"]],
                categories=[slug_to_id[slug] for slug in resp_data["categories"]],
                tags=resp_data["tags"],
            ),
            author=settings.seed_admin_name,
        )

    print(f"Successfully seeded {len(CATEGORIES)} categories and {len(RESPONSES)} responses")
    return len(RESPONSES)


def seed_admin(store: ContentStore) -> bool:
    """Create the admin account named in settings, if configured and missing."""
    if not settings.seed_admin_email or not settings.seed_admin_password:
        print("SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set, skipping admin")
        return False
    if store.get_user_credentials(settings.seed_admin_email):
        print(f"Admin {settings.seed_admin_email} already exists")
        return False

    store.create_user(
        name=settings.seed_admin_name,
        email=settings.seed_admin_email,
        password_hash=hash_password(settings.seed_admin_password),
        role=Role.admin,
    )
    print(f"Created admin {settings.seed_admin_email}")
    return True


def main():
    init_db()
    db = SessionLocal()
    try:
        store = SqlContentStore(db)
        seed_admin(store)
        seed_content(store)
    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
