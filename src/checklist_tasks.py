#!/usr/bin/env python3
"""
ChecklistTasks

Task tracking on plain markdown checklists:
1. Reads `- [ ]` task lines with due dates, done dates and recurrence rules
2. Runs query blocks (filters, sorting, limits) over all tasks of a vault
3. Toggles task lines, spawning the next occurrence of recurring tasks
"""

import sys
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime

from checklist import LayoutOptions, MarkdownVault, Query, Settings, Task


class ChecklistTasks:
    """
    Entry point tying configuration, vault and query engine together

    All core parsing is pure; this class only adds config, logging and
    reading notes from disk.
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize ChecklistTasks with configuration"""
        self.logger = self._setup_logging()
        self.project_root = self._detect_project_root()
        self.config = self._load_config(config_path)

        level = self.config.get('logging', {}).get('level')
        if level:
            self.logger.setLevel(level.upper())

        self.settings = Settings.from_dict(self.config.get('settings') or {})
        self._vault = MarkdownVault(self.config['vault'], self.settings)

        self.logger.info("✅ ChecklistTasks initialized successfully")

    def _setup_logging(self) -> logging.Logger:
        """Setup logging for the tool"""
        logger = logging.getLogger("ChecklistTasks")

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - ChecklistTasks - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(logging.INFO)

        return logger

    def _detect_project_root(self) -> Path:
        """Detect project root directory"""
        current_path = Path(__file__).resolve()

        for parent in current_path.parents:
            if (parent / 'pyproject.toml').exists():
                return parent

        return Path.cwd()

    def _load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if config_path is None:
            config_path = self.project_root / 'config' / 'config.yaml'
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            example_config = self.project_root / 'config' / 'config.example.yaml'
            if example_config.exists():
                self.logger.warning(
                    f"Config not found at {config_path}. "
                    f"Please copy {example_config} to {config_path} and customize."
                )
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    # ==================== Core Methods ====================

    def aggregate_tasks(self) -> List[Task]:
        """All tasks of the vault, note by note"""
        return self._vault.get_tasks()

    def run_query(self, source: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Run a query over all tasks of the vault

        Args:
            source: Query text
            now: Reference moment for relative dates

        Returns:
            Dict with the parsed 'query' and the resulting 'tasks'
        """
        query = Query(source, now=now)
        if query.error:
            self.logger.warning(f"Query problem: {query.error}")

        tasks = query.apply(self.aggregate_tasks())
        self.logger.info(f"Query matched {len(tasks)} tasks")
        return {'query': query, 'tasks': tasks}

    def toggle_line(self, line: str, path: str = '', now: Optional[datetime] = None) -> List[str]:
        """
        Toggle a raw task line

        Args:
            line: Task line as written in the note
            path: Note the line belongs to
            now: Moment of toggling

        Returns:
            Replacement lines (next occurrence first for recurring tasks),
            or an empty list if the line is not a task
        """
        task = Task.from_line(line, path=path, settings=self.settings)
        if task is None:
            self.logger.warning(f"Not a task: {line[:50]}")
            return []

        toggled = task.toggle(settings=self.settings, now=now)
        if len(toggled) > 1:
            self.logger.info(f"Spawned next occurrence of: {task.description[:50]}")
        return [t.to_file_line_string(self.settings) for t in toggled]

    def render(self, tasks: List[Task], layout_options: Optional[LayoutOptions] = None) -> str:
        """Plain-text listing of tasks honouring the layout options"""
        if layout_options is None:
            layout_options = LayoutOptions()

        lines = []
        for task in tasks:
            text = f"- [{task.original_status_character}] {task.to_display_string(layout_options, self.settings)}"
            if not layout_options.hide_backlinks and task.path:
                backlink = task.path
                if task.preceding_header:
                    backlink += f" > {task.preceding_header}"
                text += f"  ({backlink})"
            lines.append(text)

        if not layout_options.hide_task_count:
            lines.append(f"{len(tasks)} task{'' if len(tasks) == 1 else 's'}")

        return '\n'.join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description='Query and toggle markdown checklist tasks'
    )
    parser.add_argument(
        'command',
        choices=['list', 'query', 'toggle'],
        help='Command to execute'
    )
    parser.add_argument(
        '--config',
        help='Path to config file (default: config/config.yaml)'
    )
    parser.add_argument(
        '--query',
        help='Query text; separate instructions with newlines or ";"'
    )
    parser.add_argument(
        '--query-file',
        help='File containing the query'
    )
    parser.add_argument(
        '--line',
        help='Task line to toggle'
    )
    args = parser.parse_args(argv)

    try:
        app = ChecklistTasks(config_path=args.config)
    except Exception as e:
        print(f"❌ Failed to initialize ChecklistTasks: {e}")
        return 1

    if args.command == 'list':
        print(app.render(app.aggregate_tasks()))

    elif args.command == 'query':
        if args.query_file:
            source = Path(args.query_file).read_text(encoding='utf-8')
        elif args.query:
            source = args.query.replace(';', '\n')
        else:
            print("❌ --query or --query-file required for query command")
            return 1

        result = app.run_query(source)
        query = result['query']
        if query.error:
            print(f"⚠️  Tasks query: {query.error}")
        print(app.render(result['tasks'], query.layout_options))

    elif args.command == 'toggle':
        if not args.line:
            print("❌ --line required for toggle command")
            return 1
        lines = app.toggle_line(args.line)
        if not lines:
            print("❌ Not a task line")
            return 1
        print('\n'.join(lines))

    return 0


if __name__ == '__main__':
    sys.exit(main())
