"""People and the identities they appear under."""

from __future__ import annotations

from dataclasses import dataclass, field

from inbox_reply.models.uncertain import Uncertain

UNKNOWN = "<unknown>"


def normalize_name(name: str) -> str:
    """Lower-case a display name and drop any trailing "(...)" qualifier."""
    s = name.lower()
    k = s.find("(")
    if k > 0:
        s = s[:k].rstrip()
    return s.strip()


@dataclass(eq=False)
class ContactDetails:
    """One observable identity (name + address) of a person.

    Two identities are equal when they share an address, or, for
    identities without an address, the same normalised name. The owning
    person is referenced by id only.
    """

    name: Uncertain = field(default_factory=Uncertain)
    email: Uncertain = field(default_factory=Uncertain)
    is_me: bool = False
    person_id: str | None = None
    message_count: int = 0
    job_title: str | None = None

    @property
    def key(self) -> str:
        """Stable lookup key for this identity."""
        if self.email.value:
            return self.email.value.lower()
        if self.name.value:
            return f"name:{normalize_name(self.name.value)}"
        return UNKNOWN

    @property
    def person_key(self) -> str:
        """Key of the owning person, or of this identity if not yet merged."""
        return self.person_id if self.person_id is not None else f"contact:{self.key}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContactDetails):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return str(self.name)

    def __repr__(self) -> str:
        return f"ContactDetails({self.key!r})"


@dataclass(eq=False)
class Person:
    """A real-world individual owning one or more identities."""

    person_id: str
    identities: list[ContactDetails] = field(default_factory=list)
    manager_id: str | None = None
    report_ids: list[str] = field(default_factory=list)

    def add_identity(self, contact: ContactDetails) -> None:
        """Attach an identity to this person, setting its back-reference."""
        contact.person_id = self.person_id
        if contact not in self.identities:
            self.identities.append(contact)

    @property
    def is_me(self) -> bool:
        """Whether any identity belongs to the mailbox owner."""
        return any(cd.is_me for cd in self.identities)

    @property
    def best_identity(self) -> ContactDetails | None:
        """Identity seen on the most messages (first one on ties)."""
        if not self.identities:
            return None
        return max(self.identities, key=lambda cd: cd.message_count)

    @property
    def name(self) -> Uncertain:
        best = self.best_identity
        return best.name if best is not None else Uncertain()

    @property
    def first_name(self) -> Uncertain:
        name = self.name
        if name.value is None:
            return name
        return Uncertain.from_prob(name.value.split(" ", 1)[0], name.probability)

    @property
    def short_name(self) -> Uncertain:
        return Uncertain("Me") if self.is_me else self.first_name

    @property
    def best_name(self) -> Uncertain:
        """Name used for feature buckets: "Me" for the owner, else the full name."""
        return self.short_name if self.is_me else self.name

    @property
    def emails(self) -> list[Uncertain]:
        return [cd.email for cd in self.identities]

    def __str__(self) -> str:
        best = self.best_identity
        return "" if best is None else str(best)

    def __repr__(self) -> str:
        return f"Person({self.person_id!r})"


def unknown_person() -> Person:
    """Placeholder person used as the catch-all contact bucket."""
    person = Person(person_id=UNKNOWN)
    person.add_identity(ContactDetails(name=Uncertain(UNKNOWN), email=Uncertain(UNKNOWN)))
    return person
