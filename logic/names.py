"""
Random display name generation.

Visitors who have not chosen a display name are offered a friendly
"<Adjective> <Animal>" name.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

import random

ADJECTIVES = [
    "Adventurous", "Brave", "Clever", "Daring", "Energetic",
    "Friendly", "Gentle", "Happy", "Intelligent", "Joyful",
    "Kind", "Lively", "Majestic", "Noble", "Optimistic",
    "Playful", "Quiet", "Radiant", "Swift", "Thoughtful",
    "Unique", "Vibrant", "Wise", "Zealous", "Ambitious",
    "Brilliant", "Curious", "Delightful", "Eager", "Fearless",
    "Graceful", "Humble", "Imaginative", "Jolly", "Keen",
    "Loyal", "Merry", "Nimble", "Observant", "Patient",
    "Quick", "Resourceful", "Serene", "Talented", "Upbeat",
    "Valiant", "Witty", "Exuberant", "Youthful", "Zesty",
]

ANIMALS = [
    "Bird", "Fox", "Deer", "Wolf", "Bear",
    "Eagle", "Hawk", "Owl", "Rabbit", "Squirrel",
    "Otter", "Beaver", "Badger", "Hedgehog", "Sparrow",
    "Robin", "Swan", "Duck", "Goose", "Heron",
    "Falcon", "Raven", "Crow", "Dove", "Finch",
    "Lion", "Tiger", "Leopard", "Lynx", "Puma",
    "Moose", "Elk", "Reindeer", "Buffalo", "Bison",
    "Panda", "Koala", "Kangaroo", "Wallaby", "Wombat",
    "Penguin", "Seal", "Walrus", "Dolphin", "Whale",
    "Turtle", "Tortoise", "Frog", "Salamander", "Newt",
]


def generate_random_name(rng: random.Random = None) -> str:
    """Generate a random display name.

    Args:
        rng: Random generator to draw from (for reproducible tests).

    Returns:
        Name such as "Clever Otter".
    """
    rng = rng or random
    return f"{rng.choice(ADJECTIVES)} {rng.choice(ANIMALS)}"
