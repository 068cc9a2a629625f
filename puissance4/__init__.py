"""
puissance4 - Connect Four engine with a self-play trained neural opponent

This package provides the board and rules, a move selector driven by
policy scores, and the self-play loop that turns games into supervised
training data for a PyTorch policy network.
"""

__version__ = '0.1.0'
