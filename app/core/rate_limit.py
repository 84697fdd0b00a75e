"""Rate limiting for the public audit endpoints (slowapi)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Every audit triggers an outbound fetch plus paid provider calls, so limits are per client address
limiter = Limiter(key_func=get_remote_address, headers_enabled=False)
