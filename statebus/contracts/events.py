from __future__ import annotations

# Event names (frozen semantics).

UPDATE = "update"

EXECUTE = "execute"
FINISH = "finish"
OOPS = "oops"

LIFECYCLE_EVENTS = (EXECUTE, FINISH, OOPS)
