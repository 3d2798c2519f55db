"""
Tool parameter models. Tool JSON schemas are generated from these.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from utils.sanitizer_utils import is_valid_email

JobStatus = Literal['Interested', 'Applied', 'Callback', 'Interviewing', 'Offered', 'Rejected']


def _check_email(value):
    if not is_valid_email(value):
        raise ValueError("Must be a valid email")
    return value


# Resume

class ResumePersonalInfo(BaseModel):
    firstName: str = Field(description='First name of the person')
    lastName: str = Field(description='Last name of the person')
    email: str = Field(description='Email address')
    citizenship: Optional[str] = Field(None, description='Citizenship or work authorization')
    location: Optional[str] = Field(None, description='Current location (city, state, country)')
    linkedin: Optional[str] = Field(None, description='LinkedIn profile URL')
    github: Optional[str] = Field(None, description='GitHub profile URL')
    portfolio: Optional[str] = Field(None, description='Portfolio website URL')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value):
        return _check_email(value)


class Experience(BaseModel):
    company: str = Field(description='Company name')
    title: str = Field(description='Job title')
    location: Optional[str] = Field(None, description='Job location')
    date: str = Field(description='Employment dates (e.g., "Jan 2020 - Present")')
    details: List[str] = Field(description='List of job responsibilities and achievements')


class Education(BaseModel):
    name: str = Field(description='School/University name')
    degree: str = Field(description='Degree type and field')
    field: Optional[str] = Field(None, description='Field of study')
    location: Optional[str] = Field(None, description='School location')
    startDate: Optional[str] = Field(None, description='Start date')
    endDate: str = Field(description='Graduation date or "Present"')
    details: Optional[List[str]] = Field(None, description='Additional details like GPA, honors, etc.')


class Project(BaseModel):
    name: str = Field(description='Project name')
    description: str = Field(description='Project description')
    date: Optional[str] = Field(None, description='Project completion date')
    technologies: Optional[List[str]] = Field(None, description='Technologies used')
    details: Optional[List[str]] = Field(None, description='Additional project details')


class Skills(BaseModel):
    technical: Optional[List[str]] = Field(None, description='Technical skills')
    additional: Optional[List[str]] = Field(None, description='Additional skills')


class Language(BaseModel):
    language: str = Field(description='Language name')
    proficiency: Optional[str] = Field(None, description='Proficiency, e.g. "Native" or "Fluent"')


class AdditionalInfo(BaseModel):
    interests: Optional[List[str]] = Field(None, description='Professional interests')
    hobbies: Optional[List[str]] = Field(None, description='Relevant hobbies')
    languages: Optional[List[Language]] = Field(None, description='Languages spoken')
    references: Optional[List[str]] = Field(None, description='References')


class CreateResumeParams(BaseModel):
    personalInfo: ResumePersonalInfo
    experience: Optional[List[Experience]] = []
    education: Optional[List[Education]] = []
    projects: Optional[List[Project]] = []
    skills: Optional[Skills] = None
    additionalInfo: Optional[AdditionalInfo] = None
    targetCompany: Optional[str] = Field(
        None, description='Target company name for this resume (will be included in document name)'
    )
    templateId: Literal['jake'] = Field(
        description='REQUIRED: Use "jake" (JobKompass Jake) - the only template currently available.'
    )


# Cover letter

class CoverLetterPersonalInfo(BaseModel):
    firstName: str = Field(description='First name of the applicant')
    lastName: str = Field(description='Last name of the applicant')
    email: str = Field(description='Email address')
    phone: Optional[str] = Field(None, description='Phone number')
    location: Optional[str] = Field(None, description='City, State or full address')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value):
        return _check_email(value)


class JobInfo(BaseModel):
    company: str = Field(description='Name of the company applying to')
    position: str = Field(description='Job title/position applying for')
    hiringManagerName: Optional[str] = Field(None, description='Name of the hiring manager (if known)')
    companyAddress: Optional[str] = Field(None, description='Company address (if known)')


class LetterContent(BaseModel):
    openingParagraph: str = Field(
        description="Opening paragraph introducing yourself and expressing interest in the position. "
                    "Should mention how you found the job and why you're excited about it."
    )
    bodyParagraphs: List[str] = Field(
        description='Body paragraphs highlighting your relevant experience, skills, and achievements. '
                    'Each paragraph should focus on specific qualifications that match the job requirements.'
    )
    closingParagraph: str = Field(
        description='Closing paragraph summarizing your interest, thanking them for their consideration, '
                    'and expressing enthusiasm for next steps.'
    )


class CreateCoverLetterParams(BaseModel):
    personalInfo: CoverLetterPersonalInfo
    jobInfo: JobInfo
    letterContent: LetterContent


# Library and tracker

class AddResourceParams(BaseModel):
    title: str = Field(min_length=1, description='Provide a descriptive title for the resource.')
    url: str = Field(min_length=1, description='Full URL for the resource the user wants to save.')
    description: Optional[str] = Field(None, description='Short summary or context for why this resource matters.')
    notes: Optional[str] = Field(None, description='Any extra notes the assistant wants to attach.')
    tags: Optional[List[str]] = Field(None, description='Categorize the resource with keywords (e.g. interview, resume).')
    category: Optional[str] = Field(
        None, description='High-level category to group this resource (e.g. articles, templates).'
    )
    type: Optional[str] = Field(None, description="Resource type slug. Defaults to 'resource'.")


class NoParams(BaseModel):
    pass


class GetUserJobsParams(BaseModel):
    status: Optional[JobStatus] = Field(None, description='Filter jobs by status. If not provided, returns all jobs.')


class AddJobParams(BaseModel):
    company: str = Field(min_length=1, description='Provide the company name.')
    title: str = Field(min_length=1, description='Provide the job title.')
    link: Optional[str] = Field(None, description='Full URL for the job posting.')
    status: JobStatus = Field(
        'Interested',
        description="Job status (Interested, Applied, Callback, Interviewing, Offered, Rejected). "
                    "Defaults to 'Interested'.",
    )
    compensation: Optional[str] = Field(
        None, description="Salary range or compensation details (e.g., '$100k-$150k', '€60k', 'Competitive')."
    )
    keywords: Optional[List[str]] = Field(None, description='List of keywords associated with the job.')
    skills: Optional[List[str]] = Field(None, description='Skills required or relevant to the job.')
    description: Optional[str] = Field(None, description='Short summary or description of the job.')
    dateApplied: Optional[str] = Field(None, description='Date the user applied, if applicable.')
    interviewed: Optional[bool] = Field(None, description='Has the user interviewed for this role?')
    easyApply: Optional[str] = Field(None, description='Platform used for easy apply, if any.')
    resumeUsed: Optional[str] = Field(None, description='Which resume version was used.')
    coverLetterUsed: Optional[str] = Field(None, description='Which cover letter (if any) was used.')
    notes: Optional[str] = Field(None, description='Additional notes to remember about the job.')


class GetResumeByIdParams(BaseModel):
    resumeId: str = Field(description='The ID of the resume document to fetch.')


class GetJobByIdParams(BaseModel):
    jobId: str = Field(description='The ID of the job to fetch.')
