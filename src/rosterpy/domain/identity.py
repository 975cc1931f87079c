"""Name-based identity resolution against the roster.

Outcomes:
- one roster member carries the name -> ``ResolvedIdentity``
- several members carry it -> ``AmbiguousIdentity`` (left for the user to pick)
- nobody carries it -> ``UnresolvedIdentity``

A saved name resolution (name -> identity key) chosen earlier by the user is
consulted first, as long as its key is still on the roster. Ambiguous names are
never settled by taking the first candidate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

from rosterpy.domain.errors import UnknownEntityError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rosterpy.domain.model import RosterMember


type NameIndex = dict[str, tuple[RosterMember, ...]]
type NameResolutions = dict[str, str]


class IdentityStatus(StrEnum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    UNRESOLVED = "unresolved"


class MatchReason(StrEnum):
    UNIQUE_NAME = "unique_name"
    SAVED_RESOLUTION = "saved_resolution"


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedIdentity:
    identity_key: str
    reason: MatchReason = MatchReason.UNIQUE_NAME
    status: Literal[IdentityStatus.RESOLVED] = IdentityStatus.RESOLVED


@dataclass(frozen=True, slots=True, kw_only=True)
class AmbiguousIdentity:
    candidates: tuple[RosterMember, ...]
    status: Literal[IdentityStatus.AMBIGUOUS] = IdentityStatus.AMBIGUOUS

    def __post_init__(self) -> None:
        if len(self.candidates) < 2:  # noqa: PLR2004
            raise ValueError("Ambiguous identity needs at least two candidates")


@dataclass(frozen=True, slots=True, kw_only=True)
class UnresolvedIdentity:
    status: Literal[IdentityStatus.UNRESOLVED] = IdentityStatus.UNRESOLVED


type IdentityResolution = ResolvedIdentity | AmbiguousIdentity | UnresolvedIdentity


def build_name_index(roster: Iterable[RosterMember]) -> NameIndex:
    """Group roster members by trimmed display name, keeping roster order."""

    grouped: dict[str, list[RosterMember]] = {}
    for member in roster:
        grouped.setdefault(member.name.strip(), []).append(member)
    return {name: tuple(members) for name, members in grouped.items()}


def resolve_identity(
    name: str,
    index: NameIndex,
    *,
    known_keys: frozenset[str] = frozenset(),
    name_resolutions: Mapping[str, str] | None = None,
) -> IdentityResolution:
    """Resolve ``name`` to a roster identity key, or report why it cannot be."""

    saved_key = (name_resolutions or {}).get(name)
    if saved_key and saved_key in known_keys:
        return ResolvedIdentity(identity_key=saved_key, reason=MatchReason.SAVED_RESOLUTION)

    candidates = index.get(name.strip(), ())
    if not candidates:
        return UnresolvedIdentity()
    if len(candidates) == 1:
        return ResolvedIdentity(identity_key=candidates[0].identity_key)
    return AmbiguousIdentity(candidates=candidates)


def choose_identity(
    saved: Mapping[str, str],
    name: str,
    identity_key: str,
    *,
    roster: Iterable[RosterMember] | None = None,
) -> NameResolutions:
    """Return a copy of ``saved`` recording the user's pick for ``name``."""

    if roster is not None and identity_key not in {member.identity_key for member in roster}:
        raise UnknownEntityError(f"No roster member with identity key {identity_key!r}")
    return {**saved, name: identity_key}


def prune_name_resolutions(
    saved: Mapping[str, str],
    roster: Iterable[RosterMember],
) -> NameResolutions:
    """Drop saved picks whose identity key is no longer on the roster."""

    keys = {member.identity_key for member in roster}
    return {name: key for name, key in saved.items() if key in keys}
