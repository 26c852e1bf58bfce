"""
Markdown Vault

Reads tasks out of the markdown notes of a vault via direct file access.
Read-only: changed task lines are never written back.
"""

import re
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .settings import Settings
from .task import Task


logger = logging.getLogger("ChecklistTasks.Vault")

HEADING_REGEX = re.compile(r'^#{1,6}\s+(.*?)\s*#*\s*$')


def tasks_from_note(content: str, path: str, settings: Optional[Settings] = None) -> List[Task]:
    """
    Parse all tasks of one note

    Every heading starts a new section. Tasks remember the heading above
    them, the line the section starts on and their index within the section.

    Args:
        content: Full text of the note
        path: Path of the note, stored on each task
        settings: Parser settings

    Returns:
        Tasks in document order
    """
    tasks = []
    section_start = 0
    section_index = 0
    preceding_header = None

    for line_number, line in enumerate(content.split('\n')):
        heading_match = HEADING_REGEX.match(line)
        if heading_match:
            section_start = line_number
            section_index = 0
            preceding_header = heading_match.group(1)
            continue

        task = Task.from_line(
            line,
            path=path,
            section_start=section_start,
            section_index=section_index,
            preceding_header=preceding_header,
            settings=settings,
        )
        if task is None:
            continue

        tasks.append(task)
        section_index += 1

    return tasks


class MarkdownVault:
    """Task source over a folder of markdown notes"""

    def __init__(self, config: Dict[str, Any], settings: Optional[Settings] = None):
        """
        Initialize the vault

        Args:
            config: `vault` section of the main config file
            settings: Parser settings
        """
        self.config = config
        self.settings = settings or Settings()
        self.vault_path = Path(config['vault_path']).expanduser()
        self.include = config.get('include', '**/*.md')

        if not self.vault_path.exists():
            logger.warning(f"Vault not found: {self.vault_path}")

    def note_paths(self) -> List[Path]:
        if not self.vault_path.is_dir():
            return []
        return sorted(p for p in self.vault_path.glob(self.include) if p.is_file())

    def get_tasks(self) -> List[Task]:
        """
        Get the tasks of every note in the vault

        Notes that cannot be read are logged and skipped.

        Returns:
            Tasks, note by note in path order
        """
        if not self.vault_path.is_dir():
            logger.warning(f"Vault not found: {self.vault_path}")
            return []

        logger.info(f"Reading tasks from vault: {self.vault_path}")

        tasks = []
        for note in self.note_paths():
            relative_path = note.relative_to(self.vault_path).as_posix()
            try:
                content = note.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Error reading note {relative_path}: {e}")
                continue
            tasks.extend(tasks_from_note(content, relative_path, self.settings))

        logger.info(f"Found {len(tasks)} tasks in vault")
        return tasks
