"""
Projects module.

- Projects carry an RDC-NNN code, a status/priority and a budget
- Visibility: owner, assigned project manager, or anyone with projects.view_all
- Mutations are recorded to the append-only audit trail
"""
