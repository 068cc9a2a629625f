"""
puissance4.data - Persistence for the Connect Four AI

Compressed storage of the training corpus and the registry of saved
policy models.
"""

__all__ = ['data_manager']
