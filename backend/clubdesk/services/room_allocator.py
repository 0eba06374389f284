"""
Room allocation with pairing avoidance.

Leaders are seeded one per room, then everyone else is placed, in a shuffled
order, into the room where they have sat with the fewest people before.
"""
import math
import random
from collections import Counter
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Optional


def pair_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def count_pairs(groups: Iterable[Iterable[str]]) -> Counter:
    """How often each pair of members shared a room."""
    counts: Counter = Counter()
    for group in groups:
        for a, b in combinations(sorted(set(group)), 2):
            counts[(a, b)] += 1
    return counts


@dataclass
class AllocatedRoom:
    room_number: int
    leader_id: Optional[str] = None
    member_ids: list[str] = field(default_factory=list)


def allocate_rooms(
    member_ids: list[str],
    leader_ids: list[str],
    room_count: int,
    pair_counts: Optional[Counter] = None,
    rng: Optional[random.Random] = None,
) -> list[AllocatedRoom]:
    """
    Split ``member_ids`` into ``room_count`` balanced rooms.

    Rooms hold at most ``ceil(n / room_count)`` people. Ties on past
    co-assignments go to the emptier room, then the lower room number.
    """
    if room_count < 1:
        raise ValueError("room_count must be at least 1")

    pair_counts = pair_counts or Counter()
    rng = rng or random.Random()

    participants = list(dict.fromkeys(member_ids))
    rooms = [AllocatedRoom(room_number=i + 1) for i in range(room_count)]

    seeded = []
    for room, leader_id in zip(rooms, [lid for lid in leader_ids if lid in participants]):
        room.leader_id = leader_id
        room.member_ids.append(leader_id)
        seeded.append(leader_id)

    others = sorted(m for m in participants if m not in seeded)
    rng.shuffle(others)

    capacity = math.ceil(len(participants) / room_count) if participants else 0

    for member_id in others:
        candidates = [i for i, room in enumerate(rooms) if len(room.member_ids) < capacity]
        best = min(
            candidates,
            key=lambda i: (
                sum(pair_counts.get(pair_key(member_id, other), 0) for other in rooms[i].member_ids),
                len(rooms[i].member_ids),
                i,
            )
        )
        rooms[best].member_ids.append(member_id)

    return rooms
