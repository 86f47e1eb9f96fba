"""Corpus location configuration."""

from pathlib import Path

from pydantic import BaseModel


class CorpusConfig(BaseModel, frozen=True):
    root: Path
    checkpoint_path: Path = Path(".review-scorer/checkpoint.json")
