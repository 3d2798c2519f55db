"""
JobKompass agents: tools, run loop and instructions.
"""
from openai import OpenAI

from agent.prompts import (
    JOB_EXTRACTION_INSTRUCTIONS, JOBKOMPASS_INSTRUCTIONS, RESUME_ASSIST_INSTRUCTIONS, build_template_instructions,
    build_template_user_message,
)
from agent.runner import MaxTurnsExceededError, RunResult, run_agent
from agent.tools import ADD_JOB_TOOL, CHAT_TOOLS, COVER_LETTER_TOOL, RESUME_TOOL, ToolContext

CHAT_MAX_TURNS = 67
JOB_EXTRACTION_MAX_TURNS = 3
TEMPLATE_MAX_TURNS = 3
ASSIST_MAX_TURNS = 4

AGENT_INFO = {
    'id': 'jobkompass',
    'name': 'JobKompass',
    'description': 'AI Career Assistant - Specializes in resume creation, job search optimization, and career guidance',
    'capabilities': ['resume-creation', 'career-guidance', 'ats-optimization', 'job-tracking'],
    'tools': [
        {
            'name': tool.name,
            'description': tool.description,
            'parameters': list(tool.parameters.model_fields),
        }
        for tool in CHAT_TOOLS
    ],
}


def get_openai_client(config):
    if not config.get('openai_api_key'):
        raise ValueError("OpenAI API key not configured")
    return OpenAI(api_key=config['openai_api_key'])


def run_chat_agent(client, config, messages, context):
    return run_agent(
        client, config['chat_model'], JOBKOMPASS_INSTRUCTIONS, messages, CHAT_TOOLS, context,
        max_turns=CHAT_MAX_TURNS, agent_name='JobKompass',
    )


def run_job_extractor(client, config, job_information, context):
    return run_agent(
        client, config['template_model'], JOB_EXTRACTION_INSTRUCTIONS,
        [{"role": "user", "content": job_information}], [ADD_JOB_TOOL], context,
        max_turns=JOB_EXTRACTION_MAX_TURNS, agent_name='JobExtractor',
    )


def run_resume_assistant(client, config, messages):
    return run_agent(
        client, config['chat_model'], RESUME_ASSIST_INSTRUCTIONS, messages, [], ToolContext(config=config),
        max_turns=ASSIST_MAX_TURNS, agent_name='ResumeAssistant',
    )


def run_template_generator(client, config, template_type, template_id, context, reference_resume=None,
                           job_details=None, job_title=None, job_company=None, current_user=None,
                           resume_preferences=None):
    """
    One-shot document generation: the model may only call the generation tool
    for the requested template type.

    Returns:
        tuple: (RunResult, name of the generation tool)
    """
    tool = RESUME_TOOL if template_type == 'resume' else COVER_LETTER_TOOL
    instructions = build_template_instructions(
        template_type, template_id,
        reference_resume=reference_resume,
        job_details=job_details,
        job_title=job_title,
        job_company=job_company,
        current_user=current_user,
        resume_preferences=resume_preferences,
    )
    message = build_template_user_message(template_type, template_id, job_title=job_title, job_company=job_company)
    result = run_agent(
        client, config['template_model'], instructions, [{"role": "user", "content": message}], [tool], context,
        max_turns=TEMPLATE_MAX_TURNS, agent_name='JobKompassTemplateGenerator',
    )
    return result, tool.name


__all__ = [
    'AGENT_INFO', 'MaxTurnsExceededError', 'RunResult', 'ToolContext', 'get_openai_client', 'run_agent',
    'run_chat_agent', 'run_job_extractor', 'run_resume_assistant', 'run_template_generator',
]
