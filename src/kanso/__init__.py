"""Kanban board ordering engine with optimistic drag-and-drop sync."""
