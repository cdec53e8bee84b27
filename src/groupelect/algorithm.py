"""
Primary election over the identities submitted for one round.

Only the round leader runs the election; every other member trusts the
broadcast result. The function is therefore pure and deterministic:
the same round input and leader member id always produce the same
outcome.

Selection policy:
1. Any address claimed by two or more members fails the round with
   DUPLICATE_ADDRESS, whether or not those members are eligible.
2. With no eligible member the round succeeds without a primary.
3. Otherwise the round leader wins if it is eligible itself, which keeps
   the primary stable across rebalances. Failing that, the eligible member
   with the lexicographically smallest member id wins.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping

from groupelect.identity import Identity
from groupelect.outcome import DuplicateAddress, NoEligibleCandidate, Outcome, PrimaryElected
from groupelect.types import Address, MemberId


def find_duplicate_addresses(
    round_input: Mapping[MemberId, Identity],
) -> dict[Address, list[MemberId]]:
    """
    Find addresses advertised by more than one member.

    Args:
        round_input: Member id to submitted identity

    Returns:
        Address to the sorted member ids claiming it, for conflicting
        addresses only
    """
    claims: dict[Address, list[MemberId]] = defaultdict(list)
    for member_id, identity in round_input.items():
        claims[identity.address].append(member_id)
    return {
        address: sorted(member_ids)
        for address, member_ids in claims.items()
        if len(member_ids) > 1
    }


def elect_primary(
    round_input: Mapping[MemberId, Identity],
    leader_member_id: MemberId,
) -> Outcome:
    """
    Elect at most one primary for the round.

    Args:
        round_input: Member id to submitted identity for every member
            whose metadata could be decoded
        leader_member_id: Member id of the node running the election

    Returns:
        DuplicateAddress, NoEligibleCandidate or PrimaryElected

    Example:
        >>> leader = Identity(host="registry-1", port=8081, eligible=True)
        >>> elect_primary({"m-1": leader}, "m-1")
        PrimaryElected(member_id='m-1', identity=...)
    """
    if find_duplicate_addresses(round_input):
        return DuplicateAddress()

    eligible = sorted(
        member_id for member_id, identity in round_input.items() if identity.eligible
    )
    if not eligible:
        return NoEligibleCandidate()

    chosen = leader_member_id if leader_member_id in eligible else eligible[0]
    return PrimaryElected(chosen, round_input[chosen])


__all__ = ["elect_primary", "find_duplicate_addresses"]
