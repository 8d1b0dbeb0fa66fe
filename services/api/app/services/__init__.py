"""Counting, ranking and reporting logic.

Routes and scripts call these services; persistence goes through MemberStore
and the current time is always passed in by the caller.
"""
