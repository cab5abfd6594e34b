# Importing the package registers every table on Base.metadata.
from agency_admin.models.account import Account
from agency_admin.models.client import Client
from agency_admin.models.project import Project
from agency_admin.models.project_membership import ProjectMembership
from agency_admin.models.candidate import Candidate
from agency_admin.models.token_link import TokenLink
from agency_admin.models.submission import Submission
from agency_admin.models.contact import Contact

__all__ = [
    "Account",
    "Client",
    "Project",
    "ProjectMembership",
    "Candidate",
    "TokenLink",
    "Submission",
    "Contact",
]
