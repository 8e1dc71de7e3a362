"""
Shared enumerations
"""

from enum import Enum


class Role(str, Enum):
    MEMBER = "MEMBER"
    OFFICER = "OFFICER"
    ADMIN = "ADMIN"


class Organization(str, Enum):
    CES = "CES"
    TCC = "TCC"
    ICSO = "ICSO"
    GENERAL = "GENERAL"


class NotificationType(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"


ORGANIZATIONS = [Organization.CES, Organization.TCC, Organization.ICSO, Organization.GENERAL]
