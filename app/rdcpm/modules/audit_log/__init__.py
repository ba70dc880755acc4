"""
Read side of the append-only audit trail (events listing and stats).
"""
