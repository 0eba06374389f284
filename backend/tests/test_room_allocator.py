"""
Tests for room allocation and room assignment generation.
"""
import random
import pytest
from collections import Counter
from datetime import date

from conftest import MEETING_DATE, seoul
from clubdesk.core.exceptions import DomainValidationError, PolicyViolationError
from clubdesk.models.vote import VoteChoice
from clubdesk.services import rooms, votes
from clubdesk.services.room_allocator import allocate_rooms, count_pairs, pair_key


class TestAllocator:

    def test_pair_key_is_symmetric(self):
        assert pair_key("b", "a") == pair_key("a", "b") == ("a", "b")

    def test_count_pairs(self):
        counts = count_pairs([["a", "b", "c"], ["a", "b"]])
        assert counts[("a", "b")] == 2
        assert counts[("a", "c")] == 1
        assert counts[("b", "c")] == 1

    def test_everyone_placed_once(self):
        people = [f"m{i}" for i in range(10)]
        result = allocate_rooms(people, [], 3, rng=random.Random(7))

        placed = [m for room in result for m in room.member_ids]
        assert sorted(placed) == sorted(people)
        assert max(len(r.member_ids) for r in result) - min(len(r.member_ids) for r in result) <= 1

    def test_one_leader_per_room(self):
        people = ["lead1", "lead2", "a", "b", "c", "d"]
        result = allocate_rooms(people, ["lead1", "lead2"], 2, rng=random.Random(1))

        assert [r.leader_id for r in result] == ["lead1", "lead2"]
        assert result[0].member_ids[0] == "lead1"
        assert "lead2" not in result[0].member_ids

    def test_leaders_not_attending_are_ignored(self):
        result = allocate_rooms(["a", "b"], ["ghost"], 1, rng=random.Random(1))
        assert result[0].leader_id is None

    def test_avoids_repeat_pairs(self):
        history = Counter({pair_key("lead1", "a"): 3, pair_key("lead2", "b"): 3})
        result = allocate_rooms(["lead1", "lead2", "a", "b"], ["lead1", "lead2"], 2, history, random.Random(3))

        assert set(result[0].member_ids) == {"lead1", "b"}
        assert set(result[1].member_ids) == {"lead2", "a"}

    def test_same_seed_same_rooms(self):
        people = [f"m{i}" for i in range(12)]
        first = allocate_rooms(people, [], 4, rng=random.Random(42))
        second = allocate_rooms(people, [], 4, rng=random.Random(42))
        assert [r.member_ids for r in first] == [r.member_ids for r in second]

    def test_room_count_must_be_positive(self):
        with pytest.raises(ValueError):
            allocate_rooms(["a"], [], 0)


class TestRoomService:

    @pytest.mark.asyncio
    async def test_create_manual_room(self, db_session, make_member, test_admin):
        lead = await make_member(is_lead=True)
        other = await make_member()

        room = await rooms.create_room_assignment(
            db_session, MEETING_DATE, 1, [lead.id, other.id], leader_id=lead.id, created_by_id=test_admin.id
        )
        assert room.member_ids == [lead.id, other.id]
        assert [r.id for r in await rooms.list_room_assignments(db_session, meeting_date=MEETING_DATE)] == [room.id]

    @pytest.mark.asyncio
    async def test_manual_room_with_unknown_member(self, db_session):
        with pytest.raises(DomainValidationError):
            await rooms.create_room_assignment(db_session, MEETING_DATE, 1, ["nosuchmember000"])

    @pytest.mark.asyncio
    async def test_generate_from_yes_voters(self, db_session, make_member, test_location):
        vote = await votes.create_vote(
            db_session, "Sunday", MEETING_DATE, seoul(2026, 3, 11, 19, 30), location_id=test_location.id
        )
        lead1 = await make_member(is_lead=True)
        lead2 = await make_member(is_lead=True)
        regulars = [await make_member() for _ in range(4)]
        absentee = await make_member()

        for member in [lead1, lead2, *regulars]:
            await votes.respond(db_session, vote.id, member.id, VoteChoice.YES, seoul(2026, 3, 10, 9, 0))
        await votes.respond(db_session, vote.id, absentee.id, VoteChoice.NO, seoul(2026, 3, 10, 9, 0))

        generated = await rooms.generate_room_assignments(
            db_session, MEETING_DATE, location_id=test_location.id, rng=random.Random(5)
        )

        assert len(generated) == 2
        assert {r.leader_id for r in generated} == {lead1.id, lead2.id}
        placed = [m for r in generated for m in r.member_ids]
        assert len(placed) == 6
        assert absentee.id not in placed

    @pytest.mark.asyncio
    async def test_generate_twice_rejected(self, db_session, make_member):
        members = [await make_member() for _ in range(3)]
        ids = [m.id for m in members]
        await rooms.generate_room_assignments(db_session, MEETING_DATE, member_ids=ids, room_count=1)

        with pytest.raises(PolicyViolationError):
            await rooms.generate_room_assignments(db_session, MEETING_DATE, member_ids=ids, room_count=1)

    @pytest.mark.asyncio
    async def test_generate_without_participants(self, db_session):
        with pytest.raises(PolicyViolationError):
            await rooms.generate_room_assignments(db_session, MEETING_DATE)

    @pytest.mark.asyncio
    async def test_recent_pairs_feed_allocation(self, db_session, make_member):
        lead1 = await make_member(is_lead=True)
        lead2 = await make_member(is_lead=True)
        a = await make_member()
        b = await make_member()
        last_week = date(2026, 3, 8)
        await rooms.create_room_assignment(db_session, last_week, 1, [lead1.id, a.id], leader_id=lead1.id)
        await rooms.create_room_assignment(db_session, last_week, 2, [lead2.id, b.id], leader_id=lead2.id)

        counts = await rooms.recent_pair_counts(db_session, MEETING_DATE)
        assert counts[pair_key(lead1.id, a.id)] == 1

        generated = await rooms.generate_room_assignments(
            db_session, MEETING_DATE, member_ids=[lead1.id, lead2.id, a.id, b.id], rng=random.Random(9)
        )
        by_leader = {r.leader_id: set(r.member_ids) for r in generated}
        assert by_leader[lead1.id] == {lead1.id, b.id}
        assert by_leader[lead2.id] == {lead2.id, a.id}
