"""
Test utilities for groupelect.

Components:
    InMemoryGroupMembership: Deterministic fake of the external membership engine
    RecordingRebalanceListener: Listener that records every notification

Example:
    >>> from groupelect.testing import InMemoryGroupMembership, RecordingRebalanceListener
    >>>
    >>> engine = InMemoryGroupMembership()
    >>> listener = RecordingRebalanceListener()
    >>> engine.join(ElectionCoordinator(ElectionConfig(host="a", port=8081), listener))
    'member-1'
    >>> engine.rebalance()
    >>> listener.last_outcome.primary_member_id
    'member-1'

Note:
    This module is intended for test code only. It should not be imported
    in production code paths.
"""

from groupelect.testing.listener import RecordingRebalanceListener
from groupelect.testing.membership import (
    InconsistentGroupProtocolError,
    InMemoryGroupMembership,
    RoundRecord,
)

__all__ = [
    "InMemoryGroupMembership",
    "InconsistentGroupProtocolError",
    "RecordingRebalanceListener",
    "RoundRecord",
]
