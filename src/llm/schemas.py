from __future__ import annotations

import json

from voice_tasks.models import ParsedTaskData

# JSON schema of the task object the provider must return, embedded in the system prompt.
PARSED_TASK_SCHEMA = ParsedTaskData.model_json_schema(by_alias=True)

EXTRACTION_SYSTEM_PROMPT = f"""You are a highly accurate task parsing agent.

You receive a natural language voice transcript and extract exactly one task.

Return ONLY a JSON object matching this schema:
{json.dumps(PARSED_TASK_SCHEMA, indent=2)}

Rules:
- title: short and action oriented, no filler phrases like "create a task" or "remind me to".
- description: extra details from the transcript, or null.
- dueDate: ISO-8601 date-time resolved against the reference time, or null when no date is mentioned.
- priority: one of CRITICAL, HIGH, MEDIUM, LOW. Use MEDIUM when nothing indicates urgency.
- status: TODO unless the transcript explicitly says IN_PROGRESS or DONE.
- Output valid JSON only. No prose, no markdown fences.
"""

EXTRACTION_USER_TEMPLATE = (
    "Reference time: {reference_now} ({weekday}, timezone {timezone})\n"
    "Transcript: {transcript}"
)
