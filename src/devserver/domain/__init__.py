"""Domain models for devserver.

The only value type is the per-request information snapshot.
"""

from devserver.domain.models import InfoSnapshot, TIME_FORMAT

__all__ = ["InfoSnapshot", "TIME_FORMAT"]
