import enum


class SplitPolicy(str, enum.Enum):
    EQUAL = "EQUAL"
    PERCENTAGE = "PERCENTAGE"
    AMOUNT = "AMOUNT"


class CreditorKind(str, enum.Enum):
    USER = "USER"


class GroupType(str, enum.Enum):
    PERSONAL = "PERSONAL"
    GROUP = "GROUP"


class SettlementMode(str, enum.Enum):
    SIMPLIFIED = "SIMPLIFIED"
    DETAILED = "DETAILED"


class SettlementStatus(str, enum.Enum):
    PENDING = "PENDING"
    SETTLED = "SETTLED"


class MemberRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class MemberStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    LEFT = "LEFT"
