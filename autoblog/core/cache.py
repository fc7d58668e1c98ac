"""
Pipeline state persistence for autoblog.
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Key -> (location, file name); working state vs. outputs of the draft stage
STATE_FILES = {
    'topic': ('state', 'topic.json'),
    'research': ('state', 'research.json'),
    'batch': ('state', 'batch.json'),
    'article': ('out', 'article.json'),
    'quality': ('out', 'quality-report.json'),
}


class StateStore:
    """
    Stores each stage's output as a JSON file so stages can run separately.
    """
    def __init__(self, state_dir: Union[str, Path] = '.autoblog/state',
                 out_dir: Union[str, Path] = '.autoblog/out'):
        self.dirs = {'state': Path(state_dir), 'out': Path(out_dir)}

    @classmethod
    def from_config(cls, config) -> 'StateStore':
        return cls(
            config.get('state.directory', '.autoblog/state'),
            config.get('state.out_directory', '.autoblog/out'),
        )

    def path(self, key: str) -> Path:
        """
        Get the file backing a key.

        Args:
            key: One of STATE_FILES

        Returns:
            Path of the JSON file
        """
        try:
            location, file_name = STATE_FILES[key]
        except KeyError:
            raise KeyError(f"Unknown state key: {key}") from None
        return self.dirs[location] / file_name

    def exists(self, key: str) -> bool:
        return self.path(key).exists()

    def read_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Read a stored value.

        Args:
            key: State key

        Returns:
            Decoded JSON, or None if nothing is stored
        """
        path = self.path(key)
        if not path.exists():
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, key: str, value: Any) -> Path:
        """
        Store a value, replacing any previous one.

        Args:
            key: State key
            value: JSON-serializable value

        Returns:
            Path written
        """
        path = self.path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(value, f, indent=2, ensure_ascii=False)
            f.write('\n')
        return path
