import uuid

import pytest
from sqlalchemy import select, func

from hackjudge.errors import TeamNotFound, JudgeNotFound, EmailTaken, Duplicate, UserNotFound
from hackjudge.models import Judge, User, UserRole
from hackjudge.services.directory import normalize_email

from conftest import PASSWORD, random_email


def test_normalize_email():
    assert normalize_email("  Someone@Example.COM ") == "someone@example.com"


@pytest.mark.asyncio
async def test_resolve_team_exact(directory, teams):
    team = await directory.resolve_team(5)
    assert team.id == teams[5].id
    with pytest.raises(TeamNotFound):
        await directory.resolve_team(6)


@pytest.mark.asyncio
async def test_duplicate_team_numero(directory, teams):
    with pytest.raises(Duplicate):
        await directory.create_team(1, "Again")


@pytest.mark.asyncio
async def test_judge_user_gets_directory_entry(directory, judge):
    assert judge.email == "judge.one@example.com"
    entry = await directory.resolve_judge("JUDGE.ONE@example.com")
    assert entry.email == "judge.one@example.com"
    assert entry.conflict_team_numbers == frozenset({7})


@pytest.mark.asyncio
async def test_non_judge_users_get_no_entry(directory, participant, admin):
    with pytest.raises(JudgeNotFound):
        await directory.resolve_judge(participant.email)
    with pytest.raises(JudgeNotFound):
        await directory.resolve_judge(admin.email)


@pytest.mark.asyncio
async def test_ensure_judge_keeps_existing_conflicts(directory, session, judge):
    await directory.ensure_judge("judge.one@example.com")
    await directory.ensure_judge("Judge.One@Example.com")
    await session.commit()

    count = await session.execute(select(func.count()).select_from(Judge))
    assert count.scalar_one() == 1
    entry = await directory.resolve_judge(judge.email)
    assert entry.conflict_team_numbers == frozenset({7})


@pytest.mark.asyncio
async def test_judge_created_for_preexisting_entry_keeps_it(directory, session, teams):
    await directory.ensure_judge("late.judge@example.com")
    await session.commit()
    await directory.set_conflicts("late.judge@example.com", [3])

    await directory.create_user("Late.Judge@example.com", PASSWORD, UserRole.JUDGE, conflict_team_numbers=[])

    entry = await directory.resolve_judge("late.judge@example.com")
    assert entry.conflict_team_numbers == frozenset({3})


@pytest.mark.asyncio
async def test_set_conflicts_replaces_the_set(directory, judge):
    entry = await directory.set_conflicts(judge.email, [1, 3, 3])
    assert entry.conflict_team_numbers == frozenset({1, 3})

    entry = await directory.set_conflicts(judge.email, [])
    assert entry.conflict_team_numbers == frozenset()


@pytest.mark.asyncio
async def test_set_conflicts_for_unknown_judge(directory):
    with pytest.raises(JudgeNotFound):
        await directory.set_conflicts("nobody@example.com", [1])


@pytest.mark.asyncio
async def test_email_is_unique_case_insensitively(directory, judge):
    with pytest.raises(EmailTaken):
        await directory.create_user("JUDGE.one@EXAMPLE.com", PASSWORD, UserRole.PARTICIPANT)


@pytest.mark.asyncio
async def test_failed_judge_creation_leaves_no_partial_state(directory, session, teams):
    with pytest.raises(TeamNotFound):
        await directory.create_user(random_email(), PASSWORD, UserRole.JUDGE, team_numero=99)

    users = await session.execute(select(func.count()).select_from(User))
    judges = await session.execute(select(func.count()).select_from(Judge))
    assert users.scalar_one() == 0
    assert judges.scalar_one() == 0


@pytest.mark.asyncio
async def test_participant_affiliation(directory, participant, teams):
    assert participant.team_id == teams[3].id
    assert participant.is_active


@pytest.mark.asyncio
async def test_deactivate_user(directory, participant):
    user = await directory.deactivate_user(participant.id)
    assert user.is_active is False


@pytest.mark.asyncio
async def test_deactivate_unknown_user(directory):
    with pytest.raises(UserNotFound):
        await directory.deactivate_user(uuid.uuid4())
