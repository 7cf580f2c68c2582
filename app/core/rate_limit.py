from slowapi import Limiter
from slowapi.util import get_remote_address

# Keyed by client IP; the inbound-message endpoints opt in per route
limiter = Limiter(key_func=get_remote_address)
