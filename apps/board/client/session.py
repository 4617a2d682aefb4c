# apps/board/client/session.py

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Notice:
    """Short user-facing message (toast)"""

    message: str
    level: str = 'info'


@dataclass
class SessionState:
    """
    UI state shared across one client session

    One instance per session (or per test), passed to whatever needs it
    instead of living in module-level globals.
    """

    selected_task_id: Optional[int] = None
    task_detail_open: bool = False
    sidebar_collapsed: bool = False
    command_palette_open: bool = False
    shortcuts_open: bool = False
    unread_count: int = 0
    notices: List[Notice] = field(default_factory=list)

    # Task detail
    def open_task(self, task_id):
        self.selected_task_id = task_id
        self.task_detail_open = True

    def close_task(self):
        self.selected_task_id = None
        self.task_detail_open = False

    # Panels
    def toggle_sidebar(self):
        self.sidebar_collapsed = not self.sidebar_collapsed

    def toggle_command_palette(self):
        self.command_palette_open = not self.command_palette_open

    def toggle_shortcuts(self):
        self.shortcuts_open = not self.shortcuts_open

    def set_unread_count(self, count):
        self.unread_count = max(0, count)

    # Notices
    def notify(self, message, level='info'):
        self.notices.append(Notice(message, level))

    def pop_notices(self):
        """Returns pending notices and clears the queue"""
        notices, self.notices = self.notices, []
        return notices
