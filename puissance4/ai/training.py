"""
training.py - Self-play training for the Connect Four AI

Two policies play complete games against each other; every move played
becomes a supervised example (board before the move -> move). The examples
accumulate in a TrainingCorpus and are fed to the policy models' fit().
"""

import asyncio
import os
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

from puissance4.debug import debug, DebugLevel
from puissance4.utils import Player, GameResult, default_data_dir
from puissance4.game.rules import GameSession, GameRecord
from puissance4.ai.corpus import TrainingCorpus, records_to_arrays
from puissance4.ai.model import PolicyModel
from puissance4.ai.selector import MoveSelector, Policy
from puissance4.data.data_manager import save_corpus, load_corpus, register_model


class TrainingStats:
    """Track game outcomes and fit losses during training."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.results: List[GameResult] = []
        self.game_lengths: List[int] = []
        self.losses: List[float] = []
        self.accuracies: List[float] = []

    def add_game(self, record: GameRecord):
        self.results.append(record.result)
        self.game_lengths.append(len(record))

    def add_fit(self, history: List[Dict[str, float]]):
        if history:
            self.losses.append(history[-1]['loss'])
            self.accuracies.append(history[-1]['accuracy'])

    def get_summary(self, window: int = 100) -> Dict[str, Any]:
        """
        Summarize the most recent games.

        Args:
            window: Number of recent games to include

        Returns:
            Dictionary with win/draw rates, average length and last loss
        """
        if not self.results:
            return {
                'games': 0,
                'win_rate_a': 0.0,
                'win_rate_b': 0.0,
                'draw_rate': 0.0,
                'avg_length': 0.0,
                'last_loss': None,
                'last_accuracy': None,
            }

        recent = self.results[-window:]
        return {
            'games': len(self.results),
            'win_rate_a': recent.count(GameResult.PLAYER_A_WIN) / len(recent),
            'win_rate_b': recent.count(GameResult.PLAYER_B_WIN) / len(recent),
            'draw_rate': recent.count(GameResult.DRAW) / len(recent),
            'avg_length': float(np.mean(self.game_lengths[-window:])),
            'last_loss': self.losses[-1] if self.losses else None,
            'last_accuracy': self.accuracies[-1] if self.accuracies else None,
        }


class SelfPlayTrainer:
    """
    Train two policy models through self-play.

    The trainer owns both models, the move selector and the corpus. reset()
    returns it to its freshly constructed state.
    """

    def __init__(self, model_a: Optional[PolicyModel] = None,
                 model_b: Optional[PolicyModel] = None,
                 selector: Optional[MoveSelector] = None,
                 corpus: Optional[TrainingCorpus] = None,
                 data_dir: Optional[str] = None,
                 epochs: int = 100,
                 batch_size: int = 32,
                 validation_split: float = 0.2):
        """
        Args:
            model_a: Model playing first (created if None)
            model_b: Model playing second (created if None)
            selector: Move selector shared by both sides
            corpus: Existing corpus to extend
            data_dir: Directory for the corpus file and checkpoints
            epochs: Epochs per fit
            batch_size: Batch size per fit
            validation_split: Fraction held out for validation per fit
        """
        debug.debug("Initializing SelfPlayTrainer", "training")

        self.model_a = model_a if model_a is not None else PolicyModel()
        self.model_b = model_b if model_b is not None else PolicyModel()
        self.selector = selector if selector is not None else MoveSelector()
        self.corpus = corpus if corpus is not None else TrainingCorpus()

        self.data_dir = data_dir if data_dir is not None else default_data_dir()
        self.corpus_path = os.path.join(self.data_dir, 'corpus.json.z')
        self.model_dir = os.path.join(self.data_dir, 'models')

        self.epochs = epochs
        self.batch_size = batch_size
        self.validation_split = validation_split

        self.stats = TrainingStats()
        self.games_played = 0
        self.start_time = datetime.now().strftime("%Y%m%d_%H%M%S")

    def reset(self):
        """Fresh models, empty corpus and statistics."""
        debug.info("Resetting trainer", "training")
        self.model_a = PolicyModel()
        self.model_b = PolicyModel()
        self.corpus.clear()
        self.stats.reset()
        self.games_played = 0

    def play_game(self, policy_a: Policy, policy_b: Policy) -> GameRecord:
        """
        Play one complete game.

        Args:
            policy_a: Policy for player A (moves first)
            policy_b: Policy for player B

        Returns:
            The finished game's record
        """
        session = GameSession().start()
        policies = {Player.A: policy_a, Player.B: policy_b}

        while not session.is_over:
            player = session.current_player
            scores = policies[player](session.board.to_vector())
            col = self.selector.select_move(session.board, player, scores)
            session.apply_move(col)

        return session.record

    def run_epoch(self, policy_a: Policy, policy_b: Policy, num_games: int) -> List[GameRecord]:
        """
        Play num_games games and add them to the corpus.

        Returns:
            Records of the games played, in order
        """
        debug.info(f"Running self-play epoch of {num_games} games", "training")
        debug.start_timer("epoch")

        records = []
        for _ in range(num_games):
            record = self.play_game(policy_a, policy_b)
            self.corpus.add_record(record)
            self.stats.add_game(record)
            self.games_played += 1
            records.append(record)

        debug.end_timer("epoch", "training")
        summary = self.stats.get_summary(window=max(num_games, 1))
        debug.info(f"Epoch done: A {summary['win_rate_a']:.2f}, B {summary['win_rate_b']:.2f}, "
                   f"draw {summary['draw_rate']:.2f}, corpus size {len(self.corpus)}", "training")
        return records

    def record_game(self, record: GameRecord):
        """Add a game played outside self-play, such as human vs AI."""
        self.corpus.add_record(record)
        self.stats.add_game(record)

    def fit(self, model: PolicyModel, records: Optional[List[GameRecord]] = None,
            **fit_kwargs) -> List[Dict[str, float]]:
        """
        Fit a model on game records, or on the whole corpus.

        Args:
            model: Model to train
            records: Records to train on; the full corpus if None
            **fit_kwargs: Overrides for epochs, batch_size, validation_split

        Returns:
            Per-epoch training history
        """
        if records is None:
            inputs, targets = self.corpus.to_arrays()
        else:
            boards = [board for record in records for board in record.boards]
            moves = [move for record in records for move in record.moves]
            inputs, targets = records_to_arrays(boards, moves)

        params = {
            'epochs': self.epochs,
            'batch_size': self.batch_size,
            'validation_split': self.validation_split,
        }
        params.update(fit_kwargs)

        debug.info(f"Fitting on {len(inputs)} examples", "training")
        debug.start_timer("fit")
        history = model.fit(inputs, targets, **params)
        debug.end_timer("fit", "training")

        self.stats.add_fit(history)
        return history

    async def fit_async(self, model: PolicyModel, records: Optional[List[GameRecord]] = None,
                        **fit_kwargs) -> List[Dict[str, float]]:
        """fit() in a worker thread so the event loop keeps running."""
        return await asyncio.to_thread(self.fit, model, records, **fit_kwargs)

    def train(self, iterations: int = 10, games_per_iteration: int = 1000,
              save: bool = False) -> Dict[str, Any]:
        """
        Alternate self-play epochs and fits of both models.

        Args:
            iterations: Number of play-then-fit rounds
            games_per_iteration: Games played per round
            save: Persist the corpus and both models after each round

        Returns:
            Summary statistics after the last round
        """
        debug.info(f"Starting self-play training: {iterations} x {games_per_iteration} games", "training")
        start = time.time()

        for iteration in range(1, iterations + 1):
            records = self.run_epoch(self.model_a, self.model_b, games_per_iteration)
            self.fit(self.model_a, records)
            self.fit(self.model_b, records)

            summary = self.stats.get_summary(window=games_per_iteration)
            debug.info(f"Iteration {iteration}/{iterations} [{time.time() - start:.1f}s] - "
                       f"avg length {summary['avg_length']:.1f}, loss {summary['last_loss']}", "training")

            if save:
                self.save_corpus()
                self.save_checkpoint(iteration)

        debug.info("Models trained", "training")
        return self.stats.get_summary()

    def save_corpus(self, path: Optional[str] = None) -> bool:
        return save_corpus(self.corpus, path or self.corpus_path)

    def load_corpus(self, path: Optional[str] = None) -> int:
        """
        Append a persisted corpus to the current one.

        A missing or corrupt file adds nothing.

        Returns:
            Number of (board, move) pairs loaded
        """
        loaded = load_corpus(path or self.corpus_path)
        self.corpus.merge(loaded)
        debug.info(f"Loaded {len(loaded)} examples, corpus size {len(self.corpus)}", "training")
        return len(loaded)

    def save_checkpoint(self, iteration: int, final: bool = False) -> Dict[str, str]:
        """
        Save both models and register them.

        Returns:
            Paths of the saved models, keyed by player name
        """
        tag = "final" if final else f"it{iteration}"
        paths = {}
        for name, model in (('A', self.model_a), ('B', self.model_b)):
            path = os.path.join(self.model_dir, f"model_{name}_{self.start_time}_{tag}.pt")
            model.save(path)
            register_model(path, player=name, iteration=iteration, is_final=final,
                           data_dir=self.data_dir)
            paths[name] = path

        debug.info(f"Saved checkpoint {tag} to {self.model_dir}", "training")
        return paths


if __name__ == "__main__":
    debug.configure(level=DebugLevel.INFO)

    trainer = SelfPlayTrainer(epochs=5)
    trainer.load_corpus()
    summary = trainer.train(iterations=2, games_per_iteration=50, save=True)
    print(summary)
