"""YAML reader/writer for annotation files.

File layout::

    annotations:
      - id: 1
        text: "A comment"
        target:
          - source: "article.html"
            selector:
              - type: TextPositionSelector
                start: 4
                end: 9
              - type: TextQuoteSelector
                exact: "quick"
                prefix: "The "
                suffix: " brown fox"
"""

from pathlib import Path

import ruamel.yaml
import yaml
from ruamel.yaml.scalarstring import LiteralScalarString

from textanchor.models import Annotation


def load_annotations(path: str | Path) -> list[Annotation]:
    """Load annotations from a YAML file.

    A missing file yields an empty list.
    """
    path = Path(path)
    if not path.exists():
        return []

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return [Annotation.from_dict(item) for item in data.get("annotations", [])]


def _literal_multiline(value):
    """Render multi-line strings as literal blocks, recursively."""
    if isinstance(value, str) and "\n" in value:
        return LiteralScalarString(value)
    if isinstance(value, dict):
        return {k: _literal_multiline(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_literal_multiline(v) for v in value]
    return value


def save_annotations(path: str | Path, annotations: list[Annotation]) -> Path:
    """Write annotations to a YAML file, creating parent directories.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    yaml_writer = ruamel.yaml.YAML()
    yaml_writer.default_flow_style = False
    yaml_writer.allow_unicode = True
    yaml_writer.width = 4096
    yaml_writer.indent(mapping=2, sequence=4, offset=2)

    data = {"annotations": [_literal_multiline(a.to_dict()) for a in annotations]}
    with open(path, "w", encoding="utf-8") as f:
        yaml_writer.dump(data, f)

    return path
