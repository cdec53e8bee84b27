"""
Standard span attribute names for groupelect.

Using shared constants keeps span attributes consistent between the
coordinator hooks and makes them easy to query in a tracing backend.
"""

# Group
ATTR_GROUP_ID = "groupelect.group.id"
ATTR_SUB_PROTOCOL = "groupelect.sub_protocol"

# Round
ATTR_EPOCH = "groupelect.epoch"
ATTR_MEMBER_ID = "groupelect.member.id"
ATTR_LEADER_MEMBER_ID = "groupelect.leader.member_id"
ATTR_MEMBER_COUNT = "groupelect.member.count"
ATTR_EXCLUDED_COUNT = "groupelect.member.excluded_count"

# Outcome
ATTR_OUTCOME_STATUS = "groupelect.outcome.status"
ATTR_PRIMARY_MEMBER_ID = "groupelect.primary.member_id"
ATTR_IS_PRIMARY = "groupelect.primary.is_self"

# Coordinator
ATTR_COORDINATOR_STATE = "groupelect.coordinator.state"
ATTR_ERROR_TYPE = "error.type"

__all__ = [
    "ATTR_COORDINATOR_STATE",
    "ATTR_EPOCH",
    "ATTR_ERROR_TYPE",
    "ATTR_EXCLUDED_COUNT",
    "ATTR_GROUP_ID",
    "ATTR_IS_PRIMARY",
    "ATTR_LEADER_MEMBER_ID",
    "ATTR_MEMBER_COUNT",
    "ATTR_MEMBER_ID",
    "ATTR_OUTCOME_STATUS",
    "ATTR_PRIMARY_MEMBER_ID",
    "ATTR_SUB_PROTOCOL",
]
