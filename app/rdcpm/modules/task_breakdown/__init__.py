"""
Template-based task breakdown.

Project type is picked by keyword scoring; tasks come from static templates.
"""
