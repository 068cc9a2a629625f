"""Tests for deferred AI moves."""

import asyncio
import random

from conftest import constant_policy
from puissance4.ai.scheduler import AITurnScheduler
from puissance4.ai.selector import MoveSelector, random_policy
from puissance4.game.rules import GameSession
from puissance4.utils import Player, SessionState

PREFER_6 = constant_policy([0, 0, 0, 0, 0, 0, 1])


def greedy():
    return MoveSelector(rank_probabilities=(1.0,), rng=random.Random(0))


class TestAITurnScheduler:
    """Test scheduling and the stale-callback guard."""

    def test_ai_vs_ai_plays_to_the_end(self):
        async def scenario():
            session = GameSession().start()
            scheduler = AITurnScheduler(
                session,
                {Player.A: random_policy(random.Random(1)), Player.B: random_policy(random.Random(2))},
                selector=MoveSelector(rng=random.Random(3)),
                delay=0,
            )
            await asyncio.wait_for(scheduler.run_until_finished(), timeout=10)
            return session, scheduler

        session, scheduler = asyncio.run(scenario())
        assert session.state == SessionState.FINISHED
        assert scheduler.moves_played == session.move_count

    def test_human_then_ai(self):
        async def scenario():
            session = GameSession().start()
            scheduler = AITurnScheduler(session, {Player.B: PREFER_6}, selector=greedy(), delay=0.01)

            assert scheduler.human_move(3)
            assert scheduler.pending
            # Not the human's turn until the AI has replied
            assert not scheduler.human_move(4)

            await asyncio.sleep(0.1)
            return session, scheduler

        session, scheduler = asyncio.run(scenario())
        assert session.moves == [3, 6]
        assert session.current_player == Player.A
        assert not scheduler.pending

    def test_no_schedule_on_human_turn(self):
        async def scenario():
            session = GameSession().start()
            scheduler = AITurnScheduler(session, {Player.B: PREFER_6}, delay=0)
            return scheduler.maybe_schedule()

        assert asyncio.run(scenario()) is False

    def test_reset_makes_callback_stale(self):
        async def scenario():
            session = GameSession().start()
            scheduler = AITurnScheduler(session, {Player.A: PREFER_6}, selector=greedy(), delay=0.02)
            assert scheduler.maybe_schedule()

            session.reset()
            await asyncio.sleep(0.1)
            return session, scheduler

        session, scheduler = asyncio.run(scenario())
        assert session.move_count == 0
        assert scheduler.moves_played == 0
        assert scheduler.stale_callbacks == 1

    def test_restart_makes_callback_stale(self):
        async def scenario():
            session = GameSession().start()
            scheduler = AITurnScheduler(session, {Player.A: PREFER_6}, selector=greedy(), delay=0.02)
            scheduler.maybe_schedule()

            # New game before the delay expires; only the new schedule may play
            session.start()
            scheduler.maybe_schedule()
            await asyncio.sleep(0.1)
            return session, scheduler

        session, scheduler = asyncio.run(scenario())
        assert session.moves == [6]
        assert scheduler.stale_callbacks == 1

    def test_cancel(self):
        async def scenario():
            session = GameSession().start()
            scheduler = AITurnScheduler(session, {Player.A: PREFER_6}, delay=0.02)
            scheduler.maybe_schedule()
            scheduler.cancel()
            await asyncio.sleep(0.1)
            return session, scheduler

        session, scheduler = asyncio.run(scenario())
        assert session.move_count == 0
        assert not scheduler.pending

    def test_failed_ai_move_is_logged_not_raised(self):
        async def scenario():
            session = GameSession().start()
            bad_policy = constant_policy([1.0, 0.0])  # wrong number of scores
            scheduler = AITurnScheduler(session, {Player.A: bad_policy}, delay=0)
            scheduler.maybe_schedule()
            await asyncio.sleep(0.05)
            return session, scheduler

        session, scheduler = asyncio.run(scenario())
        assert session.move_count == 0
        assert scheduler.moves_played == 0
