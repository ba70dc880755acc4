"""
Schedules and tasks. A schedule belongs to a project; tasks form a tree inside one schedule.
"""
