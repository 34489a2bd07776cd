"""
Organization Domain - clubs, their members and their positions.

This domain handles:
- Organization creation and membership
- Org chart construction and layout
- Role health and succession planning
- Organization health indicators
"""
