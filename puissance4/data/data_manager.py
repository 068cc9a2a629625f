"""
data_manager.py - Persistence for the training corpus and model registry

The corpus is stored as {"boards": [...], "moves": [...]} JSON, compressed
with zlib and base64 encoded so the blob can live in any text store. The
model registry is a plain JSON list. All files are written through a
file lock and an atomic replace.
"""

import base64
import binascii
import datetime
import json
import os
import shutil
import zlib
from typing import Any, Dict, List, Optional

import filelock

from puissance4.debug import debug
from puissance4.exceptions import CorpusDeserializationFailure
from puissance4.ai.corpus import TrainingCorpus
from puissance4.utils import default_data_dir

MODELS_FILE_NAME = 'models.json'


# File utility functions
def safe_read_text(file_path: str) -> Optional[str]:
    """
    Read a text file under its lock.

    Returns:
        File contents, or None if the file doesn't exist
    """
    if not os.path.exists(file_path):
        return None

    with filelock.FileLock(f"{file_path}.lock"):
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()


def safe_write_text(file_path: str, text: str) -> bool:
    """
    Write a text file atomically under its lock.

    Returns:
        True if successful, False otherwise
    """
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with filelock.FileLock(f"{file_path}.lock"):
        try:
            temp_file = f"{file_path}.tmp"
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(text)
            shutil.move(temp_file, file_path)
            return True
        except OSError as e:
            debug.error(f"Error writing to {file_path}: {e}", "data")
            return False


def safe_read_json(file_path: str) -> List[Dict]:
    """
    Read a JSON list file.

    Returns:
        Parsed JSON data (empty list if the file doesn't exist, is invalid
        or does not hold a list)
    """
    try:
        text = safe_read_text(file_path)
    except UnicodeDecodeError:
        debug.error(f"Error decoding text from {file_path}", "data")
        return []
    if text is None:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        debug.error(f"Error decoding JSON from {file_path}", "data")
        return []
    if not isinstance(data, list):
        debug.error(f"Expected a JSON list in {file_path}, got {type(data).__name__}", "data")
        return []
    return data


def safe_write_json(file_path: str, data: Any) -> bool:
    return safe_write_text(file_path, json.dumps(data, indent=2))


# Corpus encoding
def encode_corpus(corpus: TrainingCorpus) -> str:
    """
    Serialize a corpus to a compressed text blob.

    Returns:
        base64 text of the zlib-compressed JSON document
    """
    raw = json.dumps(corpus.to_dict(), separators=(',', ':')).encode('utf-8')
    return base64.b64encode(zlib.compress(raw)).decode('ascii')


def decode_corpus(blob: str) -> TrainingCorpus:
    """
    Inverse of encode_corpus.

    Raises:
        CorpusDeserializationFailure: the blob is not a valid encoded corpus
    """
    try:
        raw = zlib.decompress(base64.b64decode(blob, validate=True))
        data = json.loads(raw.decode('utf-8'))
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError, TypeError) as e:
        raise CorpusDeserializationFailure(f"Cannot decode corpus blob: {e}") from e

    return TrainingCorpus.from_dict(data)


def save_corpus(corpus: TrainingCorpus, file_path: str) -> bool:
    """
    Persist a corpus.

    Returns:
        True if successful, False otherwise
    """
    if safe_write_text(file_path, encode_corpus(corpus)):
        debug.info(f"Saved corpus of {len(corpus)} examples to {file_path}", "data")
        return True
    return False


def load_corpus(file_path: str) -> TrainingCorpus:
    """
    Restore a corpus written by save_corpus.

    A missing, unreadable or corrupt file yields an empty corpus.
    """
    try:
        blob = safe_read_text(file_path)
    except (OSError, UnicodeDecodeError) as e:
        debug.error(f"Error reading corpus from {file_path}: {e}", "data")
        return TrainingCorpus()

    if blob is None:
        debug.info(f"No corpus at {file_path}, starting empty", "data")
        return TrainingCorpus()

    try:
        corpus = decode_corpus(blob.strip())
    except CorpusDeserializationFailure as e:
        debug.error(f"Corrupt corpus at {file_path}, starting empty: {e}", "data")
        return TrainingCorpus()

    debug.info(f"Loaded corpus of {len(corpus)} examples from {file_path}", "data")
    return corpus


# Model registration
def register_model(path: str, player: str, iteration: int, is_final: bool = False,
                   data_dir: Optional[str] = None) -> bool:
    """
    Register a saved model.

    Args:
        path: Path to the model file
        player: Side the model was trained for ('A' or 'B')
        iteration: Training iteration the model was saved at
        is_final: Whether this is the final model of a run
        data_dir: Directory holding the registry file

    Returns:
        True if successful, False otherwise
    """
    models_file = os.path.join(data_dir or default_data_dir(), MODELS_FILE_NAME)
    models = safe_read_json(models_file)

    models.append({
        "model_id": len(models) + 1,
        "player": player,
        "iteration": iteration,
        "path": path,
        "timestamp": datetime.datetime.now().isoformat(),
        "is_final": is_final,
    })

    if safe_write_json(models_file, models):
        debug.info(f"Registered model {path}", "data")
        return True
    debug.error(f"Failed to register model {path}", "data")
    return False


def get_registered_models(player: Optional[str] = None,
                          data_dir: Optional[str] = None) -> List[Dict]:
    """
    Get registered models.

    Args:
        player: Only models for this side, or None for all
        data_dir: Directory holding the registry file

    Returns:
        List of registry entries, oldest first
    """
    models = safe_read_json(os.path.join(data_dir or default_data_dir(), MODELS_FILE_NAME))
    if player is None:
        return models
    return [model for model in models if model['player'] == player]
