#!/usr/bin/env python3
"""Seed demo data for screenshots.

Creates two demo users with a handful of images, likes and comments in the
configured database, and writes the image files into UPLOAD_DIR.

Usage:
    JWT_SECRET=dev-secret python scripts/seed_demo_data.py

    # Against another database:
    JWT_SECRET=dev-secret DATABASE_URL=postgresql://user:pw@db:5432/imageshare \
        python scripts/seed_demo_data.py
"""

import os
import struct
import sys
import uuid
import zlib
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imageshare.config import get_settings
from imageshare.database import SessionLocal, init_db
from imageshare.models import Comment, Image, ImageLike, User
from imageshare.services.auth import get_password_context

# Demo user credentials (used for screenshots)
DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demopass123"
FRIEND_EMAIL = "friend@example.com"

DEMO_IMAGES = [
    # (original name, colour, description, tags)
    ("sunset.png", (242, 140, 40), "Sunset over the bay", "sunset,beach,orange"),
    ("forest.png", (34, 139, 34), "Morning walk in the forest", "forest,green"),
    ("ocean.png", (0, 105, 148), "Deep blue", "ocean,blue,beach"),
    ("snow.png", (240, 240, 250), "First snow of the year", "winter"),
]


def solid_png(rgb: tuple[int, int, int], size: int = 8) -> bytes:
    """Encode a square PNG filled with a single colour."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        return (
            struct.pack(">I", len(data))
            + kind
            + data
            + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)
        )

    row = b"\x00" + bytes(rgb) * size
    header = struct.pack(">IIBBBBB", size, size, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(row * size))
        + chunk(b"IEND", b"")
    )


def seed_demo_data():
    """Seed the database with representative data."""
    settings = get_settings()
    init_db()
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    pwd_context = get_password_context(settings.bcrypt_rounds)

    session = SessionLocal()
    try:
        # Check if demo users already exist
        existing = session.query(User).filter(User.email.in_([DEMO_EMAIL, FRIEND_EMAIL])).all()
        if existing:
            print("Demo data already exists. Clearing and re-seeding...")
            user_ids = [user.id for user in existing]
            images = session.query(Image).filter(Image.owner_id.in_(user_ids)).all()
            for image in images:
                Path(image.path).unlink(missing_ok=True)
                session.delete(image)
            session.query(ImageLike).filter(ImageLike.user_id.in_(user_ids)).delete(
                synchronize_session=False
            )
            session.query(Comment).filter(Comment.user_id.in_(user_ids)).delete(
                synchronize_session=False
            )
            for user in existing:
                session.delete(user)
            session.commit()

        print("Creating demo users...")
        demo = User(
            name="Demo User",
            email=DEMO_EMAIL,
            password_hash=pwd_context.hash(DEMO_PASSWORD),
        )
        friend = User(
            name="Friendly Neighbour",
            email=FRIEND_EMAIL,
            password_hash=pwd_context.hash(DEMO_PASSWORD),
        )
        session.add_all([demo, friend])
        session.flush()

        print("Creating images...")
        images = []
        for index, (original_name, colour, description, tags) in enumerate(DEMO_IMAGES):
            data = solid_png(colour)
            filename = uuid.uuid4().hex + Path(original_name).suffix
            path = upload_dir / filename
            path.write_bytes(data)
            image = Image(
                filename=filename,
                original_name=original_name,
                mimetype="image/png",
                size=len(data),
                path=str(path),
                owner_id=demo.id if index % 2 == 0 else friend.id,
                description=description,
                tags=[tag.strip() for tag in tags.split(",") if tag.strip()],
            )
            session.add(image)
            images.append(image)
        session.flush()

        print("Adding likes and comments...")
        session.add_all(
            [
                ImageLike(image_id=images[0].id, user_id=friend.id),
                ImageLike(image_id=images[1].id, user_id=demo.id),
                ImageLike(image_id=images[2].id, user_id=demo.id),
                ImageLike(image_id=images[2].id, user_id=friend.id),
            ]
        )
        session.add_all(
            [
                Comment(image_id=images[0].id, user_id=friend.id, text="Gorgeous colours!"),
                Comment(image_id=images[0].id, user_id=demo.id, text="Thanks, taken last week."),
                Comment(image_id=images[3].id, user_id=demo.id, text="Already? Brr."),
            ]
        )

        session.commit()
        print("Demo data seeded successfully!")

    except Exception as e:
        session.rollback()
        print(f"Error seeding demo data: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    seed_demo_data()
