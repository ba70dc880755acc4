"""
Project assistant: keyword-matched canned replies with persisted conversations. No LLM calls.
"""
