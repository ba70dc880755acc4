"""
Region notices module.

- Notices belong to a region key and carry a category and a priority
- Emergency notices are published on creation; others wait for PATCH /publish
- The public list shows published, unexpired notices only
"""
