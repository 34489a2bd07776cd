"""
Project Domain - internal projects and the work inside them.

This domain handles:
- Project lifecycle and public listing
- Contributions (tasks) and the kanban board
- Task urgency, "My Tasks" and per-member load
- Dashboard insights
- Natural-language task entry (due dates, priority, assignees)
"""
