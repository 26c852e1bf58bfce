#!/usr/bin/env python3
"""
checklist-tasks CLI

Query and toggle task lines kept in markdown checklists.

Usage:
    ./checklist-tasks.py list                          # List all tasks
    ./checklist-tasks.py query --query "not done"      # Run a query
    ./checklist-tasks.py query --query-file q.txt      # Run a query from a file
    ./checklist-tasks.py toggle --line "- [ ] ..."     # Print the toggled line(s)

Examples:
    # Open tasks due this week, soonest first
    ./checklist-tasks.py query --query "not done;due before in 7 days;sort by due"

    # Complete a recurring task; prints the next occurrence and the done task
    ./checklist-tasks.py toggle --line "- [ ] water plants 🔁 every week 🗓 2021-09-12"
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from checklist_tasks import main

if __name__ == '__main__':
    sys.exit(main())
