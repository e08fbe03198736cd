#!/usr/bin/env python3
"""List all comments stored for a pin.

Usage:
    python scripts/list_comments.py PIN_ID
"""

import argparse
import json
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Comment, SessionLocal  # noqa: E402


def list_comments(pin_id: str, session_factory=None):
    """Fetch the comments of a pin, newest first.

    Args:
        pin_id: Pin id.
        session_factory: Callable returning a database session. Defaults to
            the application's SessionLocal.

    Returns:
        List of comment dictionaries.
    """
    db = (session_factory or SessionLocal)()
    try:
        comments = (
            db.query(Comment)
            .filter(Comment.pin_id == pin_id)
            .order_by(Comment.created_at.desc())
            .all()
        )
        return [c.to_dict() for c in comments]
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="List the comments of a pin.")
    parser.add_argument("pin_id", help="Pin id")
    args = parser.parse_args(argv)

    comments = list_comments(args.pin_id)
    print(f"Total comments for pin: {len(comments)}")
    print(json.dumps(comments, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
