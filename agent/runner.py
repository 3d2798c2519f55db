"""
Tool-calling run loop over the OpenAI chat completions API.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

# Keys stripped from tool results before they are shown to the model
MODEL_HIDDEN_KEYS = ('pdfBase64',)


class MaxTurnsExceededError(Exception):
    def __init__(self, max_turns):
        super().__init__(f"Max turns ({max_turns}) exceeded")
        self.max_turns = max_turns


@dataclass
class RunResult:
    final_output: str
    tool_calls: List[Dict] = field(default_factory=list)
    messages: List[Dict] = field(default_factory=list)
    agent_name: Optional[str] = None

    def calls_to(self, tool_name):
        return [call for call in self.tool_calls if call['name'] == tool_name]


def _model_view(result):
    if not isinstance(result, dict):
        return result
    return {k: v for k, v in result.items() if k not in MODEL_HIDDEN_KEYS}


def execute_tool_call(tool, raw_arguments, context):
    """
    Validate arguments and run one tool.

    Args:
        tool (Tool): Tool to run
        raw_arguments (str): JSON arguments from the model
        context (ToolContext): Caller context

    Returns:
        tuple: (parsed arguments, result dict)
    """
    try:
        arguments = json.loads(raw_arguments or '{}')
    except json.JSONDecodeError as e:
        return {}, {'success': False, 'error': f"Invalid JSON arguments: {e}", 'message': 'Invalid tool arguments'}

    try:
        params = tool.parameters.model_validate(arguments)
    except PydanticValidationError as e:
        logger.warning(f"Invalid arguments for {tool.name}: {e}")
        return arguments, {'success': False, 'error': str(e), 'message': 'Invalid tool arguments'}

    try:
        return arguments, tool.run(context, params)
    except Exception as e:
        logger.error(f"Tool {tool.name} failed: {e}")
        return arguments, {'success': False, 'error': str(e), 'message': f"The {tool.name} tool failed"}


def run_agent(client, model, instructions, messages, tools, context, max_turns=10, agent_name=None,
              **completion_kwargs):
    """
    Run the model until it answers without requesting tools.

    Args:
        client (openai.OpenAI): OpenAI client
        model (str): Chat model
        instructions (str): System prompt
        messages (list): Conversation as role/content dicts
        tools (list): Tool objects the model may call
        context (ToolContext): Passed to every tool
        max_turns (int): Model calls allowed before giving up
        agent_name (str): Name reported in the result
        **completion_kwargs: Extra chat completion arguments, e.g. max_tokens

    Returns:
        RunResult: Final answer, executed tool calls and the full transcript

    Raises:
        MaxTurnsExceededError: If the model still wants tools after max_turns calls
    """
    tools_by_name = {tool.name: tool for tool in tools}
    transcript = [{"role": "system", "content": instructions}] + list(messages)
    tool_calls = []
    request = {'model': model, **completion_kwargs}
    if tools:
        request['tools'] = [tool.to_openai() for tool in tools]

    for turn in range(max_turns):
        response = client.chat.completions.create(messages=list(transcript), **request)
        message = response.choices[0].message

        if not message.tool_calls:
            transcript.append({"role": "assistant", "content": message.content or ''})
            return RunResult(
                final_output=message.content or '',
                tool_calls=tool_calls,
                messages=transcript,
                agent_name=agent_name,
            )

        transcript.append({
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.function.name, "arguments": call.function.arguments},
                }
                for call in message.tool_calls
            ],
        })

        for call in message.tool_calls:
            tool = tools_by_name.get(call.function.name)
            if tool is None:
                arguments = {}
                result = {'success': False, 'error': f"Unknown tool: {call.function.name}"}
            else:
                logger.info(f"Turn {turn + 1}: running {tool.name}")
                arguments, result = execute_tool_call(tool, call.function.arguments, context)
            tool_calls.append({'name': call.function.name, 'arguments': arguments, 'result': result})
            transcript.append({
                "role": "tool",
                "tool_call_id": call.id,
                "content": json.dumps(_model_view(result), default=str),
            })

    raise MaxTurnsExceededError(max_turns)
