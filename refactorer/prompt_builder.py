"""
Prompt construction and response extraction.

Each target file gets its own freshly built request: a system message
describing the output contract, one worked example, and a user message
that keeps the instruction and the file contents in separate tagged
sections.  The model is asked to wrap the rewritten file in
`<CHANGED_FILE_CONTENTS>` tags so the replacement can be cut out of the
reply without guessing where commentary ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .errors import MalformedResponseError

CHANGED_START_TAG = "<CHANGED_FILE_CONTENTS>"
CHANGED_END_TAG = "</CHANGED_FILE_CONTENTS>"

SYSTEM_INSTRUCTIONS = (
    "You are an expert code transformation assistant. Your task is to carefully "
    "refactor code based on the user's instruction and return only the modified "
    f"file contents enclosed within {CHANGED_START_TAG} tags. Additionally, provide "
    "your reasoning inside <REASONING> tags. Do not include any other text outside "
    "these tags."
)

# One-shot example showing the expected reply shape.
EXAMPLE_INSTRUCTION = 'Replace all variable names that start with "old_" to start with "new_".'
EXAMPLE_CONTENT = 'let old_value = 10;\nlet old_name = "example";\nlet other_var = 5;'
EXAMPLE_REPLY = (
    "<REASONING>\n"
    'The instruction is to change all variable names that start with "old_" to "new_". '
    "This is a straightforward text transformation, so the variables old_value and "
    "old_name will be renamed to new_value and new_name, respectively. Variables that "
    'don\'t start with "old_" remain unchanged.\n'
    "</REASONING>\n\n"
    f"{CHANGED_START_TAG}\n"
    'let new_value = 10;\nlet new_name = "example";\nlet other_var = 5;\n'
    f"{CHANGED_END_TAG}"
)


def format_user_message(instruction: str, content: str) -> str:
    """Separate what to do from what to operate on."""
    return (
        f"<INSTRUCTION>\n{instruction}\n</INSTRUCTION>\n\n"
        f"<FILECONTENTS>\n{content}\n</FILECONTENTS>"
    )


@dataclass(frozen=True)
class ModelRequest:
    """A single, never-reused request for one target file."""

    model: str
    instruction: str
    content: str
    messages: List[Dict[str, str]] = field(default_factory=list, compare=False)


def build_request(instruction: str, content: str, model: str) -> ModelRequest:
    """Assemble the chat messages for one file.  `model` is passed through as-is."""
    messages = [
        {"role": "system", "content": SYSTEM_INSTRUCTIONS},
        {"role": "user", "content": format_user_message(EXAMPLE_INSTRUCTION, EXAMPLE_CONTENT)},
        {"role": "assistant", "content": EXAMPLE_REPLY},
        {"role": "user", "content": format_user_message(instruction, content)},
    ]
    return ModelRequest(model=model, instruction=instruction, content=content, messages=messages)


def extract_changed_contents(output: str) -> str:
    """Return the file body from a model reply.

    The text between the first `<CHANGED_FILE_CONTENTS>` tag and the
    closing tag that follows it is returned with the newlines hugging
    the tags removed.  Replies without both tags, or with nothing
    between them, raise `MalformedResponseError` so prose or an empty
    answer never overwrites a file.
    """
    start = output.find(CHANGED_START_TAG)
    if start == -1:
        raise MalformedResponseError(f"response is missing the {CHANGED_START_TAG} tag")
    start += len(CHANGED_START_TAG)
    end = output.find(CHANGED_END_TAG, start)
    if end == -1:
        raise MalformedResponseError(f"response is missing the {CHANGED_END_TAG} tag")
    body = output[start:end].strip("\r\n")
    if not body.strip():
        raise MalformedResponseError("response contained empty file contents")
    return body
