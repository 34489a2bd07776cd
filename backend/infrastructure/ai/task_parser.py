"""
Task Parser.

Turns a one-line request ("Sarah, draft the sponsor email by Friday,
urgent") into task fields using OpenAI function calling. Dates and names
are returned as raw text; resolving them is left to the domain.
"""

import json
import logging
from datetime import datetime
from typing import Iterable, Optional

import openai
from django.conf import settings

from domain.project.task_parsing import ParsedTask
from domain.shared.exceptions import ExternalServiceException, ValidationException

logger = logging.getLogger(__name__)

PARSE_TASK_FUNCTION = {
    'name': 'parse_task',
    'description': 'Extract task details from natural language input',
    'parameters': {
        'type': 'object',
        'properties': {
            'title': {
                'type': 'string',
                'description': 'The main task title (concise and action-oriented)',
            },
            'assignee_names': {
                'type': 'array',
                'items': {'type': 'string'},
                'description': 'Full names of people to assign (match to available members)',
            },
            'due_date': {
                'type': 'string',
                'description': 'Due date in natural language (e.g., "tomorrow", "next Friday", "March 15")',
            },
            'priority': {
                'type': 'string',
                'enum': ['low', 'medium', 'high', 'urgent'],
                'description': 'Task priority level',
            },
            'subtasks': {
                'type': 'array',
                'items': {'type': 'string'},
                'description': 'List of subtasks if mentioned',
            },
            'description': {
                'type': 'string',
                'description': 'Additional details or context',
            },
        },
        'required': ['title'],
    },
}

SYSTEM_PROMPT = """You are a task parser for a project management system. Extract task details from natural language.

Current date: {current_date}
User timezone: {timezone}
Available team members: {members}

Guidelines:
- Match names flexibly (e.g., "Sarah" matches "Sarah Johnson")
- For dates, return the natural language as-is (e.g., "next Friday", "tomorrow", "end of month")
- Time-based deadlines: "by midnight" = "today", "by noon" = "today", "by EOD" = "today"
- Infer priority from keywords: urgent/asap/midnight = urgent, important = high, whenever/eventually = low
- If multiple tasks are mentioned, focus on the main one
- Extract subtasks if they're clearly listed
- Be concise in task titles"""


class TaskParserClient:
    """
    Thin wrapper around the chat completions API.

    Usage:
        parser = TaskParserClient()
        parsed = parser.parse("Design the flyer by Friday", now, ["Sarah Johnson"])
    """

    temperature = 0.3
    max_tokens = 500

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client=None):
        conf = settings.CAMPUSHUB
        self.api_key = api_key or conf.get('OPENAI_API_KEY')
        self.model = model or conf.get('OPENAI_MODEL', 'gpt-4o-mini')
        self._client = client

    @property
    def client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ExternalServiceException('openai', 'Task parsing is not configured')
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def build_messages(self, text: str, now: datetime, member_names: Iterable[str]) -> list:
        members = ', '.join(member_names) or 'No members provided'
        tz_name = now.tzname() or 'UTC'
        system = SYSTEM_PROMPT.format(
            current_date=f"{now:%A, %B} {now.day}, {now.year}",
            timezone=tz_name,
            members=members,
        )
        return [
            {'role': 'system', 'content': system},
            {'role': 'user', 'content': text},
        ]

    def parse(self, text: str, now: datetime, member_names: Iterable[str] = ()) -> ParsedTask:
        text = (text or '').strip()
        if not text:
            raise ValidationException("Describe the task to create", "input")

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(text, now, list(member_names)),
                tools=[{'type': 'function', 'function': PARSE_TASK_FUNCTION}],
                tool_choice={'type': 'function', 'function': {'name': 'parse_task'}},
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limit hit while parsing task: {e}")
            raise ExternalServiceException(
                'openai', 'Too many requests. Please wait a moment and try again.', retry_after=60
            )
        except openai.AuthenticationError as e:
            logger.error(f"OpenAI rejected the API key: {e}")
            raise ExternalServiceException('openai', 'Task parsing is not configured')
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise ExternalServiceException('openai', 'Failed to parse task')

        message = completion.choices[0].message
        calls = message.tool_calls or []
        if not calls or not calls[0].function.arguments:
            raise ExternalServiceException('openai', 'Failed to parse task')

        try:
            arguments = json.loads(calls[0].function.arguments)
        except json.JSONDecodeError:
            logger.error(f"Unparseable parse_task arguments: {calls[0].function.arguments!r}")
            raise ExternalServiceException('openai', 'Failed to parse task')

        logger.debug(f"parse_task arguments: {arguments}")
        return ParsedTask.from_arguments(arguments, text)
