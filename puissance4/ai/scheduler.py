"""
scheduler.py - Deferred AI moves for interactive games

When it becomes a computer player's turn, the scheduler asks the event loop
to play its move after a short delay so the interface can draw the previous
move first. Human moves and AI moves go through the same GameSession, one
at a time, on the same loop.
"""

import asyncio
from typing import Dict, Optional

from puissance4.debug import debug
from puissance4.exceptions import Connect4Error
from puissance4.ai.selector import MoveSelector, Policy
from puissance4.game.rules import GameSession
from puissance4.utils import Player, SessionState, AI_MOVE_DELAY


class AITurnScheduler:
    """
    Schedule moves for the policy-controlled players of a session.

    A scheduled callback remembers the session generation and the player it
    was scheduled for. If the session was restarted or reset, or the turn
    changed before the delay expired, the callback drops its move.
    """

    def __init__(self, session: GameSession,
                 policies: Dict[Player, Policy],
                 selector: Optional[MoveSelector] = None,
                 delay: float = AI_MOVE_DELAY,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            session: The game to drive
            policies: Policy for each computer-controlled player
            selector: Move selector (default probability table if None)
            delay: Seconds to wait before playing
            loop: Event loop (the running loop if None)
        """
        self.session = session
        self.policies = dict(policies)
        self.selector = selector if selector is not None else MoveSelector()
        self.delay = delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._scheduled = None  # (generation, player) of the pending handle
        self.moves_played = 0
        self.stale_callbacks = 0

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def is_ai_turn(self) -> bool:
        return (self.session.state == SessionState.IN_PROGRESS
                and self.session.current_player in self.policies)

    def maybe_schedule(self) -> bool:
        """
        Schedule a move if a computer player is to move.

        Call after every state change of the session.

        Returns:
            True if a move was scheduled
        """
        if not self.is_ai_turn():
            return False

        generation = self.session.generation
        player = self.session.current_player
        if self.pending and self._scheduled == (generation, player):
            return False

        # an older handle left pending is dropped by the guard in _play
        self._scheduled = (generation, player)
        self._handle = self.loop.call_later(self.delay, self._play, generation, player)
        debug.debug(f"Scheduled {player} move in {self.delay}s (generation {generation})", "scheduler")
        return True

    def human_move(self, col: int) -> bool:
        """
        Apply a move from the interface and schedule the reply.

        Moves made while a computer player is to move are rejected.

        Returns:
            True if the move was applied
        """
        if self.is_ai_turn():
            debug.warning(f"Ignoring move {col}: waiting for {self.session.current_player}", "scheduler")
            return False
        applied = self.session.play_intent(col)
        if applied:
            self.maybe_schedule()
        return applied

    def cancel(self):
        """Drop the pending move, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._scheduled = None
            debug.debug("Cancelled pending AI move", "scheduler")

    def _play(self, generation: int, player: Player):
        if self._scheduled == (generation, player):
            self._handle = None
            self._scheduled = None

        if (self.session.generation != generation
                or self.session.state != SessionState.IN_PROGRESS
                or self.session.current_player != player):
            self.stale_callbacks += 1
            debug.debug(f"Dropping stale {player} move for generation {generation}", "scheduler")
            return

        try:
            scores = self.policies[player](self.session.board.to_vector())
            col = self.selector.select_move(self.session.board, player, scores)
            self.session.apply_move(col)
        except (Connect4Error, ValueError) as e:
            debug.error(f"AI move for {player} failed: {e}", "scheduler")
            return

        self.moves_played += 1
        debug.debug(f"{player} played column {col}", "scheduler")
        self.maybe_schedule()

    async def run_until_finished(self, poll_interval: float = 0.01):
        """Wait until the session finishes or nothing is left to schedule."""
        self.maybe_schedule()
        while self.session.state == SessionState.IN_PROGRESS and self.pending:
            await asyncio.sleep(poll_interval)
