import enum
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from respbridge.core.models import wire
from respbridge.core.models.shape import u8, u16, u32


def bulk(text: str) -> wire.BulkString:
    return wire.BulkString(text.encode("utf-8"))


def resp_map(**items: wire.WireValue) -> wire.Map:
    return wire.Map((bulk(k), v) for k, v in items.items())


class Gender(enum.Enum):
    Male = "m"
    Female = "f"


@dataclass
class Unemployed:
    pass


@dataclass
class Employed:
    title: str


@dataclass
class Owner:
    company: str
    net_worth: int


@dataclass(frozen=True)
class DateOfBirth:
    """Either unknown or a (day, month, year) triple."""
    known: tuple[int, int, int] | None = None

    def __resp_serialize__(self, visitor):
        if self.known is None:
            return visitor.visit_unit_variant("Unknown")
        return visitor.visit_variant("Known", self.known, tuple[u8, u8, u16])

    @classmethod
    def __resp_deserialize__(cls, source):
        if isinstance(source.wire, wire.Map):
            tagged = source.read(dict[str, tuple[u8, u8, u16]])
            if list(tagged) != ["Known"]:
                raise ValueError(f"unexpected date of birth variant {list(tagged)}")
            return cls(tagged["Known"])
        if source.read(str) != "Unknown":
            raise ValueError("unexpected date of birth variant")
        return cls()


@dataclass
class SimplePerson:
    name: str
    age: u32


@dataclass
class Person:
    name: str
    age: u32
    gender: Gender
    job: Unemployed | Employed | Owner
    date_of_birth: DateOfBirth
    weight: float | None


@dataclass
class Lenient:
    __resp_ignore_unknown__ = True

    name: str


@dataclass
class WithDefaults:
    name: str
    nickname: str | None
    tags: list[str] = field(default_factory=list)
    level: int = 1


@dataclass
class TreeNode:
    value: int
    children: list["TreeNode"] = field(default_factory=list)


@dataclass
class Positive:
    amount: int

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError("amount must be positive")


class Account(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(alias="accountId")
    balance: u32
    labels: dict[str, str] = Field(default_factory=dict)


class LenientAccount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    account_id: str


def people() -> list[Person]:
    return [
        Person(
            name="Alice",
            age=30,
            gender=Gender.Female,
            job=Employed("Engineer"),
            date_of_birth=DateOfBirth((15, 5, 1993)),
            weight=65.5
        ),
        Person(
            name="Bob",
            age=25,
            gender=Gender.Male,
            job=Owner(company="Tech Corp", net_worth=1_000_000),
            date_of_birth=DateOfBirth((20, 10, 1998)),
            weight=None
        ),
        Person(
            name="Charlie",
            age=40,
            gender=Gender.Male,
            job=Unemployed(),
            date_of_birth=DateOfBirth(),
            weight=80.0
        ),
    ]


def nested_arrays(depth: int) -> bytes:
    return b"*1\r\n" * depth + b":1\r\n"


def nested_lists(depth: int) -> Any:
    value: Any = 1
    for _ in range(depth):
        value = [value]
    return value
