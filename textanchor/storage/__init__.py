"""Local annotation files."""

from textanchor.storage.yaml_store import load_annotations, save_annotations

__all__ = ["load_annotations", "save_annotations"]
