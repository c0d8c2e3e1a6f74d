"""Enums and type aliases for SecondLeash."""

from enum import StrEnum


class Role(StrEnum):
    SUPER_ADMIN = "SUPER_ADMIN"
    SHELTER_ADMIN = "SHELTER_ADMIN"
    STAFF = "STAFF"
    VOLUNTEER = "VOLUNTEER"


class Operation(StrEnum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Sex(StrEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"


class Size(StrEnum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    XL = "XL"
    UNKNOWN = "UNKNOWN"


class DogStatus(StrEnum):
    AVAILABLE = "AVAILABLE"
    ON_HOLD = "ON_HOLD"
    ADOPTED = "ADOPTED"
    FOSTERED = "FOSTERED"
    MEDICAL = "MEDICAL"
    UNKNOWN = "UNKNOWN"
