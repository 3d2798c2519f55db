"""
Agent tools. Every tool returns a result dict with success and message keys
and never raises into the run loop.
"""
import base64
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Type

from pydantic import BaseModel

from agent.schemas import (
    AddJobParams, AddResourceParams, CreateCoverLetterParams, CreateResumeParams, GetJobByIdParams,
    GetResumeByIdParams, GetUserJobsParams, NoParams,
)
from compilers import CompilerUnavailableError, LatexCompileError
from services.document_service import get_resume, list_resumes
from services.errors import JobKompassError, NotAuthorizedError, NotFoundError
from services.generation_service import generate_cover_letter_document, generate_resume_document
from services.job_service import add_job, get_job, list_jobs
from services.resource_service import add_resource
from services.usage_service import (
    can_add_job, can_generate_document, document_limit_message, get_usage_summary, job_limit_message,
)
from services.user_service import get_resume_preferences

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Who the agent is acting for. user_id is None for runs with no signed-in user, such as the resume assistant."""
    config: Dict
    user_id: Optional[int] = None
    username: Optional[str] = None


@dataclass
class Tool:
    name: str
    description: str
    parameters: Type[BaseModel]
    handler: Callable = field(repr=False)

    def to_openai(self):
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.model_json_schema(),
            },
        }

    def run(self, context, params):
        return self.handler(context, params)


def _execution_id():
    return f"tool_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def _not_signed_in(message):
    return {'success': False, 'message': message, 'error': 'Not authenticated'}


def _failure_message(error, signed_out_message, fallback_message):
    return signed_out_message if 'not authenticated' in str(error).lower() else fallback_message


# Document generation

def create_resume(context, params):
    execution_id = _execution_id()
    info = params.personalInfo
    logger.info(
        f"[{execution_id}] [RESUME_TOOL] Starting resume generation for {info.firstName} {info.lastName} "
        f"(company: {params.targetCompany}, experience: {len(params.experience or [])}, "
        f"education: {len(params.education or [])})"
    )
    if context.user_id is None:
        return _not_signed_in("Please sign in to generate resumes.")

    check = can_generate_document(context.user_id, context.config)
    if not check['allowed']:
        logger.warning(f"[{execution_id}] [RESUME_TOOL] Document limit reached")
        return {
            'success': False,
            'error': 'Document limit reached',
            'message': document_limit_message(check),
            'limitReached': True,
        }

    content = params.model_dump(exclude={'targetCompany', 'templateId'})
    try:
        generated = generate_resume_document(
            context.user_id, content, context.config,
            template_id=params.templateId, target_company=params.targetCompany,
        )
    except CompilerUnavailableError as e:
        return {'success': False, 'error': str(e), 'message': 'The LaTeX compiler is not available.'}
    except LatexCompileError as e:
        logger.error(f"[{execution_id}] [RESUME_TOOL] LaTeX compilation failed: {e}")
        return {
            'success': False,
            'error': f"LaTeX compilation failed: {e}",
            'message': 'LaTeX compilation failed. The PDF could not be generated.',
            'logContent': (e.log or '')[:2000],
        }
    except Exception as e:
        logger.error(f"[{execution_id}] [RESUME_TOOL] Resume generation error: {e}")
        return {'success': False, 'error': str(e), 'message': 'Failed to generate resume'}

    logger.info(f"[{execution_id}] [RESUME_TOOL] Resume generation completed: {generated['file_name']}")
    return {
        'success': True,
        'message': 'Resume generated and saved successfully',
        'pdfBase64': base64.b64encode(generated['pdf_bytes']).decode('ascii'),
        'fileName': generated['file_name'],
        'texFileName': generated['tex_file_name'],
        'documentType': 'resume',
    }


def create_cover_letter(context, params):
    execution_id = _execution_id()
    if context.user_id is None:
        return _not_signed_in("Please sign in to generate cover letters.")

    check = can_generate_document(context.user_id, context.config)
    if not check['allowed']:
        return {
            'success': False,
            'error': 'Document limit reached',
            'message': (
                f"You've reached your limit of {check['limit']} documents this month. "
                f"Please upgrade your plan to continue generating cover letters."
            ),
            'limitReached': True,
        }

    try:
        generated = generate_cover_letter_document(context.user_id, params.model_dump(), context.config)
    except CompilerUnavailableError as e:
        return {'success': False, 'error': str(e), 'message': 'The LaTeX compiler is not available.'}
    except LatexCompileError as e:
        return {
            'success': False,
            'error': f"LaTeX compilation failed: {e}",
            'message': 'LaTeX compilation failed. The PDF could not be generated.',
        }
    except Exception as e:
        logger.error(f"[{execution_id}] [COVER_LETTER_TOOL] Cover letter generation error: {e}")
        return {'success': False, 'error': str(e), 'message': 'Failed to generate cover letter'}

    return {
        'success': True,
        'message': 'Cover letter generated and saved successfully',
        'pdfBase64': base64.b64encode(generated['pdf_bytes']).decode('ascii'),
        'fileName': generated['file_name'],
        'documentType': 'cover-letter',
    }


# Library and tracker

def add_resource_to_library(context, params):
    if context.user_id is None:
        return _not_signed_in("Please sign in to save resources to your library.")
    try:
        resource = add_resource(context.user_id, params.model_dump(), context.config)
    except Exception as e:
        logger.error(f"Failed to add resource via tool: {e}")
        return {
            'success': False,
            'message': _failure_message(e, "Please sign in to save resources to your library.",
                                        "Failed to add the resource. Try again once you're signed in."),
            'error': str(e),
        }
    return {'success': True, 'message': "Resource saved to the user's library.", 'resourceId': resource['id']}


def get_user_resumes(context, params):
    if context.user_id is None:
        return _not_signed_in("Please sign in to view your resumes.")
    try:
        resumes = list_resumes(context.user_id, context.config)
    except Exception as e:
        logger.error(f"Failed to fetch resumes via tool: {e}")
        return {'success': False, 'message': "Failed to fetch resumes. Try again once you're signed in.", 'error': str(e)}
    return {
        'success': True,
        'message': f"Found {len(resumes)} resume(s) in the user's library.",
        'resumes': resumes,
        'count': len(resumes),
    }


def get_user_jobs(context, params):
    if context.user_id is None:
        return _not_signed_in("Please sign in to view your jobs.")
    try:
        jobs = list_jobs(context.user_id, context.config, status=params.status)
    except Exception as e:
        logger.error(f"Failed to fetch jobs via tool: {e}")
        return {'success': False, 'message': "Failed to fetch jobs. Try again once you're signed in.", 'error': str(e)}
    if params.status:
        message = f'Found {len(jobs)} job(s) with status "{params.status}".'
    else:
        message = f"Found {len(jobs)} job(s) in the user's tracker."
    return {'success': True, 'message': message, 'jobs': jobs, 'count': len(jobs)}


def add_job_to_tracker(context, params):
    if context.user_id is None:
        return _not_signed_in("Please sign in to save jobs to your tracker.")

    check = can_add_job(context.user_id, context.config)
    if not check['allowed']:
        return {
            'success': False,
            'message': job_limit_message(check),
            'error': 'Job limit reached',
            'limitReached': True,
        }

    data = {
        'company': params.company,
        'title': params.title,
        'link': params.link or '',
        'status': params.status,
        'compensation': params.compensation,
        'keywords': params.keywords,
        'skills': params.skills,
        'description': params.description,
        'date_applied': params.dateApplied,
        'interviewed': params.interviewed,
        'easy_apply': params.easyApply,
        'resume_used': params.resumeUsed,
        'cover_letter_used': params.coverLetterUsed,
        'notes': params.notes,
    }
    try:
        job = add_job(context.user_id, data, context.config)
    except Exception as e:
        logger.error(f"Failed to add job via tool: {e}")
        return {
            'success': False,
            'message': _failure_message(e, "Please sign in to save jobs to your tracker.",
                                        "Failed to add the job. Try again once you're signed in."),
            'error': str(e),
        }
    return {'success': True, 'message': "Job saved to the user's tracker.", 'jobId': job['id']}


def get_resume_by_id(context, params):
    not_found = {
        'success': False,
        'message': f'Resume with ID "{params.resumeId}" not found.',
        'error': 'Resume not found',
    }
    if context.user_id is None:
        return _not_signed_in("Please sign in to view your resumes.")
    try:
        resume = get_resume(int(params.resumeId), context.user_id, context.config)
    except (ValueError, NotFoundError, NotAuthorizedError):
        return not_found
    except Exception as e:
        logger.error(f"Failed to fetch resume by ID via tool: {e}")
        return {
            'success': False,
            'message': 'Failed to fetch the resume. Please check the ID and try again.',
            'error': str(e),
        }
    return {'success': True, 'message': f"Successfully fetched resume: {resume.get('name') or 'Untitled'}", 'resume': resume}


def get_job_by_id(context, params):
    not_found = {'success': False, 'message': f'Job with ID "{params.jobId}" not found.', 'error': 'Job not found'}
    if context.user_id is None:
        return _not_signed_in("Please sign in to view your jobs.")
    try:
        job = get_job(int(params.jobId), context.user_id, context.config)
    except (ValueError, NotAuthorizedError):
        return not_found
    except Exception as e:
        logger.error(f"Failed to fetch job by ID via tool: {e}")
        return {
            'success': False,
            'message': 'Failed to fetch the job. Please check the ID and try again.',
            'error': str(e),
        }
    if job is None:
        return not_found
    return {'success': True, 'message': f"Successfully fetched job: {job['title']} at {job['company']}", 'job': job}


def get_user_resume_preferences(context, params):
    if context.user_id is None:
        return _not_signed_in("Please sign in to view your resume preferences.")
    try:
        preferences = get_resume_preferences(context.user_id, context.config)
    except JobKompassError as e:
        return {
            'success': False,
            'message': "Failed to fetch resume preferences. Try again once you're signed in.",
            'error': str(e),
        }
    if preferences:
        message = f"Found {len(preferences)} resume preference(s) that must be applied to all resume generation."
    else:
        message = "No resume preferences found. Generate resume using best practices."
    return {'success': True, 'message': message, 'preferences': preferences, 'count': len(preferences)}


def get_user_usage(context, params):
    if context.user_id is None:
        return {'success': False, 'message': "Unable to fetch usage statistics. User may not be authenticated."}
    try:
        summary = get_usage_summary(context.user_id, context.config)
    except Exception as e:
        logger.error(f"Failed to fetch usage via tool: {e}")
        return {'success': False, 'message': "Failed to fetch usage statistics.", 'error': str(e)}

    usage = summary['usage']
    return {
        'success': True,
        'usage': {
            'documentsGeneratedThisMonth': usage['documents_generated_this_month'],
            'documentsLimit': summary['limits']['documents_per_month'],
            'documentsRemaining': summary['remaining']['documents_remaining'],
            'jobsCount': usage['jobs_count'],
            'jobsLimit': summary['limits']['jobs'],
            'jobsRemaining': summary['remaining']['jobs_remaining'],
            'planId': summary['plan_id'],
        },
        'message': summary['message'],
    }


RESUME_TOOL = Tool(
    name='createResumeJakeTemplate',
    description=(
        "Generate a professional resume using the JobKompass Jake template. The user selects the template in the "
        "Context panel. Do NOT call this tool until the user has selected a template - if they ask to create a "
        "resume without a selection, ask them to select one first. Automatically saves the resume to the user's "
        "documents."
    ),
    parameters=CreateResumeParams,
    handler=create_resume,
)

COVER_LETTER_TOOL = Tool(
    name='createCoverLetterJakeTemplate',
    description=(
        "Generate a professional cover letter using the Jake LaTeX template style. This tool creates a "
        "well-formatted cover letter tailored for the specific job and company. Automatically saves the cover "
        "letter to the user's documents."
    ),
    parameters=CreateCoverLetterParams,
    handler=create_cover_letter,
)

ADD_RESOURCE_TOOL = Tool(
    name='addResourceToLibrary',
    description=(
        "Save a resource (link, document, or note) to the user's JobKompass library so they can revisit it later."
    ),
    parameters=AddResourceParams,
    handler=add_resource_to_library,
)

GET_RESUMES_TOOL = Tool(
    name='getUserResumes',
    description=(
        "Fetch all resumes from the user's library to understand what resumes they have available. Use this when "
        "the user asks about their resumes or wants help with resume selection."
    ),
    parameters=NoParams,
    handler=get_user_resumes,
)

GET_JOBS_TOOL = Tool(
    name='getUserJobs',
    description=(
        "Fetch all job applications from the user's job tracker to understand what jobs they're tracking. Use this "
        "when the user asks about their job applications or wants help with job management."
    ),
    parameters=GetUserJobsParams,
    handler=get_user_jobs,
)

ADD_JOB_TOOL = Tool(
    name='addJobToTracker',
    description="Add a job opportunity to the user's JobKompass tracker so they can follow up later.",
    parameters=AddJobParams,
    handler=add_job_to_tracker,
)

GET_RESUME_BY_ID_TOOL = Tool(
    name='getResumeById',
    description=(
        "Fetch a specific resume by its ID to get detailed information about it. Use this when the user references "
        "a specific resume or when a resume ID is provided in context."
    ),
    parameters=GetResumeByIdParams,
    handler=get_resume_by_id,
)

GET_JOB_BY_ID_TOOL = Tool(
    name='getJobById',
    description=(
        "Fetch a specific job by its ID to get detailed information about it. Use this when the user references a "
        "specific job or when a job ID is provided in context."
    ),
    parameters=GetJobByIdParams,
    handler=get_job_by_id,
)

GET_PREFERENCES_TOOL = Tool(
    name='getUserResumePreferences',
    description=(
        "Fetch the user's resume generation preferences. These preferences should ALWAYS be considered when "
        "generating resumes. Use this tool at the start of any resume generation task to understand the user's "
        "requirements."
    ),
    parameters=NoParams,
    handler=get_user_resume_preferences,
)

GET_USAGE_TOOL = Tool(
    name='getUserUsage',
    description=(
        "Get the user's current usage statistics including documents generated this month and total jobs tracked. "
        "Use this to check limits before generating documents or adding jobs. Always available."
    ),
    parameters=NoParams,
    handler=get_user_usage,
)

CHAT_TOOLS = [RESUME_TOOL, ADD_RESOURCE_TOOL, ADD_JOB_TOOL, GET_RESUMES_TOOL, GET_JOBS_TOOL]
