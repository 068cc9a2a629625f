"""
model.py - Policy network for the Connect Four AI

This module provides a dense neural network that scores the seven columns
of a board, and a PolicyModel wrapper that owns the network and its
optimizer and exposes predict / fit / save / load.
"""

import os
import numpy as np
import torch
import torch.nn as nn
import torch.optim as optim
import torch.nn.functional as F
from typing import Dict, List, Optional, Sequence

from puissance4.debug import debug, DebugLevel
from puissance4.utils import COLS, NUM_CELLS


class PolicyNetwork(nn.Module):
    """
    Sequential dense network from a board vector to column logits.

    The default architecture is 42 -> 128 -> 128 -> 7 with ReLU activations.
    forward() returns logits; apply softmax for move probabilities.
    """

    def __init__(self, hidden_sizes: Sequence[int] = (128, 128)):
        super(PolicyNetwork, self).__init__()

        self.hidden_sizes = [int(size) for size in hidden_sizes]
        debug.debug(f"Initializing PolicyNetwork with hidden_sizes={self.hidden_sizes}", "ai")

        layers: List[nn.Module] = []
        in_features = NUM_CELLS
        for size in self.hidden_sizes:
            layers.append(nn.Linear(in_features, size))
            layers.append(nn.ReLU())
            in_features = size
        layers.append(nn.Linear(in_features, COLS))

        self.layers = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Args:
            x: Tensor of shape (batch_size, ROWS * COLS)

        Returns:
            Logits of shape (batch_size, COLS)
        """
        return self.layers(x)


class PolicyModel:
    """
    Trainable move policy.

    Calling the model on a board vector returns softmax scores for each
    column, so an instance can be passed anywhere a policy is expected.
    """

    def __init__(self, network: Optional[PolicyNetwork] = None,
                 hidden_sizes: Sequence[int] = (128, 128),
                 learning_rate: float = 0.001,
                 seed: Optional[int] = None):
        """
        Args:
            network: Existing network (a new one is created if None)
            hidden_sizes: Hidden layer sizes for a new network
            learning_rate: Adam learning rate
            seed: Seed for weight initialization and batch shuffling
        """
        self.generator = torch.Generator()
        if seed is not None:
            torch.manual_seed(seed)
            self.generator.manual_seed(seed)

        self.network = network if network is not None else PolicyNetwork(hidden_sizes)
        self.learning_rate = learning_rate
        self.optimizer = optim.Adam(self.network.parameters(), lr=learning_rate)
        self.fit_count = 0

    def predict(self, vector) -> np.ndarray:
        """
        Score each column for a board.

        Args:
            vector: Board vector of length ROWS * COLS

        Returns:
            Softmax probabilities, one per column
        """
        x = torch.as_tensor(np.asarray(vector, dtype=np.float32)).reshape(1, NUM_CELLS)
        self.network.eval()
        with torch.no_grad():
            probs = F.softmax(self.network(x), dim=-1).squeeze(0)
        return probs.numpy()

    def __call__(self, vector) -> np.ndarray:
        return self.predict(vector)

    def fit(self, inputs: np.ndarray, targets: np.ndarray,
            epochs: int = 100,
            batch_size: int = 32,
            validation_split: float = 0.2,
            shuffle: bool = True) -> List[Dict[str, float]]:
        """
        Supervised training with categorical cross-entropy.

        The last validation_split fraction of the samples is held out for
        validation, and the rest is shuffled every epoch.

        Args:
            inputs: Float array (n, ROWS * COLS)
            targets: One-hot array (n, COLS)
            epochs: Passes over the training samples
            batch_size: Samples per optimizer step
            validation_split: Fraction of samples used for validation

        Returns:
            One dict per epoch with loss and accuracy (and val_loss /
            val_accuracy when a validation set exists)
        """
        if len(inputs) != len(targets):
            raise ValueError(f"Got {len(inputs)} inputs but {len(targets)} targets")
        if not 0.0 <= validation_split < 1.0:
            raise ValueError(f"validation_split must be in [0, 1), got {validation_split}")
        if len(inputs) == 0:
            debug.warning("fit() called with no samples", "ai")
            return []

        x = torch.as_tensor(np.asarray(inputs, dtype=np.float32))
        y = torch.as_tensor(np.asarray(targets, dtype=np.float32))

        n_val = int(len(x) * validation_split)
        n_train = len(x) - n_val
        if n_train == 0:
            n_train, n_val = len(x), 0
        x_train, y_train = x[:n_train], y[:n_train]
        x_val, y_val = x[n_train:], y[n_train:]

        debug.debug(f"Fitting on {n_train} samples, validating on {n_val}", "ai")

        history = []
        for epoch in range(epochs):
            self.network.train()
            if shuffle:
                order = torch.randperm(n_train, generator=self.generator)
            else:
                order = torch.arange(n_train)

            total_loss = 0.0
            correct = 0
            for start in range(0, n_train, batch_size):
                idx = order[start:start + batch_size]
                xb, yb = x_train[idx], y_train[idx]

                logits = self.network(xb)
                loss = F.cross_entropy(logits, yb)

                self.optimizer.zero_grad()
                loss.backward()
                self.optimizer.step()

                total_loss += loss.item() * len(idx)
                correct += (logits.argmax(dim=1) == yb.argmax(dim=1)).sum().item()

            logs = {
                'epoch': epoch,
                'loss': total_loss / n_train,
                'accuracy': correct / n_train,
            }
            if n_val:
                logs.update(self.evaluate(x_val, y_val))

            debug.info(f"Epoch {epoch}: loss = {logs['loss']:.4f}, accuracy = {logs['accuracy']:.4f}", "ai")
            history.append(logs)

        self.fit_count += 1
        return history

    def evaluate(self, inputs, targets) -> Dict[str, float]:
        """Validation loss and accuracy without updating weights."""
        x = torch.as_tensor(np.asarray(inputs, dtype=np.float32))
        y = torch.as_tensor(np.asarray(targets, dtype=np.float32))

        self.network.eval()
        with torch.no_grad():
            logits = self.network(x)
            loss = F.cross_entropy(logits, y).item()
            accuracy = (logits.argmax(dim=1) == y.argmax(dim=1)).float().mean().item()
        return {'val_loss': loss, 'val_accuracy': accuracy}

    def save(self, path: str) -> None:
        """
        Save weights, optimizer state and architecture.

        Args:
            path: File path, usually ending in .pt
        """
        debug.info(f"Saving policy model to {path}", "ai")
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        torch.save({
            'hidden_sizes': self.network.hidden_sizes,
            'learning_rate': self.learning_rate,
            'fit_count': self.fit_count,
            'network': self.network.state_dict(),
            'optimizer': self.optimizer.state_dict(),
        }, path)

    @classmethod
    def load(cls, path: str) -> 'PolicyModel':
        """
        Load a model written by save().

        Args:
            path: Path to the saved model

        Returns:
            PolicyModel with restored weights and optimizer state
        """
        debug.info(f"Loading policy model from {path}", "ai")
        checkpoint = torch.load(path, map_location='cpu')

        network = PolicyNetwork(checkpoint['hidden_sizes'])
        network.load_state_dict(checkpoint['network'])

        model = cls(network=network, learning_rate=checkpoint['learning_rate'])
        model.optimizer.load_state_dict(checkpoint['optimizer'])
        model.fit_count = checkpoint.get('fit_count', 0)
        return model


if __name__ == "__main__":
    debug.configure(level=DebugLevel.INFO)

    model = PolicyModel(seed=0)
    empty = np.zeros(NUM_CELLS, dtype=np.int8)
    print(f"Scores on an empty board: {np.round(model(empty), 3).tolist()}")
