"""
Region content module.

- One section per (region, section type); POST upserts
- Hidden sections are left out of the public views
"""
