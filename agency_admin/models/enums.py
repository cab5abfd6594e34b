# agency_admin/models/enums.py
from __future__ import annotations
from enum import Enum


class AccountRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class ProjectType(str, Enum):
    WEB_DEVELOPMENT = "web_development"
    DIGITAL_MARKETING = "digital_marketing"
    DATA_ANALYTICS = "data_analytics"
    OTHER = "other"


class CandidateStatus(str, Enum):
    PENDING = "pending"
    DOCUMENTS_UPLOADED = "documents_uploaded"
    APPROVED = "approved"
    REJECTED = "rejected"


class LinkKind(str, Enum):
    ONBOARDING = "onboarding"
    PAYMENT = "payment"


class PaymentKind(str, Enum):
    PROJECT = "project"
    REGISTRATION = "registration"


class SubmissionStatus(str, Enum):
    UPLOADED = "uploaded"
    PENDING = "pending"


class ContactStatus(str, Enum):
    NEW = "new"
    VIEWED = "viewed"
    RESPONDED = "responded"
    CLOSED = "closed"
