"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Submissions come from anonymous browsers,
so the entry route is limited per client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Single source of truth for rate limit strings and decorators.
ENTRY_SUBMIT_LIMIT = "30/minute"

limit_entries = limiter.limit(ENTRY_SUBMIT_LIMIT)
