# tests/test_integration.py
"""End-to-end test of the core workflow."""
from datetime import date

from quest_hub.dashboard import get_badge_board, get_level_progress, get_weekly_history
from quest_hub.delegate import ContentDelegate
from quest_hub.persistence import LoadStatus
from quest_hub.store import AppStore


async def test_full_learning_workflow(tmp_db):
    """Seed, build a class, work through a unit, take a daily challenge, reload."""
    day = date(2026, 10, 17)
    store = AppStore.open(tmp_db)
    assert store.status is LoadStatus.SEEDED
    delegate = ContentDelegate(api_key="")

    # Roster
    class_id = store.add_class("Period 2", store.state.years[3].id)
    assert store.enroll_students_bulk(["Jane Doe", "Bob Smith"], class_id) == 2

    # A generated unit (offline placeholder) filed under a year
    quest = await store.create_quest(delegate, "Volcanoes", "Beginner", year_id=store.state.years[3].id)
    assert quest.total_xp == 325

    # Open a task's lesson, then finish the whole unit
    filled = await store.generate_task_content(delegate, quest.id, quest.tasks[0].id)
    assert filled.markdown_content
    unlocked = []
    for task in quest.tasks:
        unlocked += store.toggle_task(quest.id, task.id, today=day)
    assert store.state.stats.current_xp == 325
    assert store.state.stats.level == 3
    assert [b.id for b in unlocked] == ["novice"]

    # Daily challenge once per day
    challenge = await store.offer_daily_challenge(delegate, today=day)
    daily_id = store.accept_daily_challenge(challenge, today=day)
    assert await store.offer_daily_challenge(delegate, today=day) is None
    unlocked = store.toggle_task(daily_id, challenge.id, today=day)
    assert store.state.stats.current_xp == 375
    assert unlocked == []

    # Dashboard views
    assert get_weekly_history(store.state.stats, today=day)[-1]["xp"] == 375
    assert 0 < get_level_progress(store.state.stats) < 100
    earned = [e["badge"].id for e in get_badge_board(store.state.stats) if e["earned"]]
    assert earned == ["novice"]

    # Everything survives a restart
    reopened = AppStore.open(tmp_db)
    assert reopened.status is LoadStatus.RESTORED
    assert reopened.state == store.state
