"""
puissance4.ai - Policies, move selection and self-play training

Submodules are imported directly (e.g. ``from puissance4.ai.training import
SelfPlayTrainer``) so that using the game engine alone does not load torch.
"""

__all__ = ['MoveSelector', 'AITurnScheduler', 'TrainingCorpus', 'PolicyModel',
           'PolicyNetwork', 'SelfPlayTrainer']
