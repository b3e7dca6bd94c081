"""
Create and update schemas for the business entities.

Each entity has a ``<Entity>Fields`` base with every column optional, a
``Create`` schema that makes the identifying columns required, and an
``Update`` schema used for partial changes.
"""

from datetime import date, time
from typing import Any, Optional

from pydantic import EmailStr, Field, StrictBool

from ats.schemas.common import RecordPayload

# Organizations


class OrganizationFields(RecordPayload):
    __non_nullable__ = ("name", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    nicknames: Optional[str] = Field(None, max_length=255)
    parent_organization: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = Field(None, max_length=50)
    contract_on_file: Optional[str] = Field(None, max_length=50)
    contract_signed_by: Optional[str] = Field(None, max_length=255)
    date_contract_signed: Optional[date] = None
    year_founded: Optional[int] = Field(None, ge=1000, le=9999)
    overview: Optional[str] = None
    perm_fee: Optional[float] = Field(None, ge=0)
    num_employees: Optional[int] = Field(None, ge=0)
    num_offices: Optional[int] = Field(None, ge=0)
    contact_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)


class OrganizationCreate(OrganizationFields):
    name: str = Field(..., min_length=1, max_length=255)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Acme",
                "website": "https://acme.example",
                "status": "Active",
                "customFields": {"industry": "Manufacturing"},
            }
        }
    }


class OrganizationUpdate(OrganizationFields):
    pass


# Hiring managers


class HiringManagerFields(RecordPayload):
    __non_nullable__ = ("first_name", "last_name", "status")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    nickname: Optional[str] = Field(None, max_length=100)
    title: Optional[str] = Field(None, max_length=255)
    organization_id: Optional[int] = None
    organization_name: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, max_length=255)
    reports_to: Optional[str] = Field(None, max_length=255)
    owner: Optional[str] = Field(None, max_length=255)
    secondary_owners: Optional[list[Any]] = None
    email: Optional[EmailStr] = None
    email2: Optional[EmailStr] = None
    office_phone: Optional[str] = Field(None, max_length=50)
    mobile_phone: Optional[str] = Field(None, max_length=50)
    direct_line: Optional[str] = Field(None, max_length=50)
    linkedin_url: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    date_added: Optional[date] = None
    last_contact_date: Optional[date] = None


class HiringManagerCreate(HiringManagerFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class HiringManagerUpdate(HiringManagerFields):
    pass


# Jobs


class JobFields(RecordPayload):
    __non_nullable__ = ("job_title", "status")

    job_title: Optional[str] = Field(None, min_length=1, max_length=255)
    job_type: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    organization_id: Optional[int] = None
    hiring_manager: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = Field(None, max_length=50)
    priority: Optional[str] = Field(None, max_length=50)
    employment_type: Optional[str] = Field(None, max_length=100)
    start_date: Optional[date] = None
    worksite_location: Optional[str] = Field(None, max_length=255)
    remote_option: Optional[str] = Field(None, max_length=100)
    job_description: Optional[str] = None
    salary_type: Optional[str] = Field(None, max_length=50)
    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    benefits: Optional[str] = None
    required_skills: Optional[str] = None
    job_board_status: Optional[str] = Field(None, max_length=50)
    owner: Optional[str] = Field(None, max_length=255)
    date_added: Optional[date] = None


class JobCreate(JobFields):
    job_title: str = Field(..., min_length=1, max_length=255)


class JobUpdate(JobFields):
    pass


# Job seekers


class JobSeekerFields(RecordPayload):
    __non_nullable__ = ("first_name", "last_name", "status")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    mobile_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    status: Optional[str] = Field(None, max_length=50)
    current_organization: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    resume_text: Optional[str] = None
    skills: Optional[str] = None
    desired_salary: Optional[float] = Field(None, ge=0)
    owner: Optional[str] = Field(None, max_length=255)
    date_added: Optional[date] = None
    last_contact_date: Optional[date] = None


class JobSeekerCreate(JobSeekerFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class JobSeekerUpdate(JobSeekerFields):
    pass


# Leads


class LeadFields(RecordPayload):
    __non_nullable__ = ("first_name", "last_name", "status")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    nickname: Optional[str] = Field(None, max_length=100)
    title: Optional[str] = Field(None, max_length=255)
    organization_id: Optional[int] = None
    organization_name: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, max_length=255)
    reports_to: Optional[str] = Field(None, max_length=255)
    owner: Optional[str] = Field(None, max_length=255)
    secondary_owners: Optional[list[Any]] = None
    email: Optional[EmailStr] = None
    email2: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    mobile_phone: Optional[str] = Field(None, max_length=50)
    linkedin_url: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    date_added: Optional[date] = None
    last_contact_date: Optional[date] = None


class LeadCreate(LeadFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LeadUpdate(LeadFields):
    pass


# Tasks


class TaskFields(RecordPayload):
    __non_nullable__ = ("title", "is_completed")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_completed: Optional[StrictBool] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    organization_id: Optional[int] = None
    job_seeker_id: Optional[int] = None
    hiring_manager_id: Optional[int] = None
    job_id: Optional[int] = None
    lead_id: Optional[int] = None
    owner: Optional[str] = Field(None, max_length=255)
    priority: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, max_length=50)
    assigned_to: Optional[int] = None
    reminder_minutes_before_due: Optional[int] = Field(None, ge=0)


class TaskCreate(TaskFields):
    title: str = Field(..., min_length=1, max_length=255)


class TaskUpdate(TaskFields):
    pass


# Placements


class PlacementFields(RecordPayload):
    __non_nullable__ = ("job_id", "job_seeker_id", "status")

    job_id: Optional[int] = None
    job_seeker_id: Optional[int] = None
    placement_type: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, max_length=50)
    start_date: Optional[date] = None
    salary: Optional[float] = Field(None, ge=0)
    placement_fee_percent: Optional[float] = Field(None, ge=0, le=100)
    placement_fee_flat: Optional[float] = Field(None, ge=0)
    days_guaranteed: Optional[int] = Field(None, ge=0)
    hours_of_operation: Optional[str] = Field(None, max_length=100)
    hours_per_day: Optional[float] = Field(None, ge=0, le=24)
    pay_rate: Optional[float] = Field(None, ge=0)
    effective_date: Optional[date] = None
    overtime_exemption: Optional[StrictBool] = None


class PlacementCreate(PlacementFields):
    job_id: int
    job_seeker_id: int


class PlacementUpdate(PlacementFields):
    pass
