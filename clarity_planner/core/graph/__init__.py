"""Graph algorithms over the task dependency edges.

Edges are kept as a flat list of (task_id, depends_on) pairs plus an id
index; tasks never hold references to each other.
"""
