SYSTEM_PROMPT = (
    "You are a helpful assistant designed to suggest valid, safe, and relevant "
    "terminal commands based on user input and session history."
)

HISTORY_SECTION = """
The command line history is as follows:

<COMMAND_HISTORY>
{context}
</COMMAND_HISTORY>
"""

RULES = """
Always adhere to these rules when suggesting the command:
1. The command must be a valid terminal command.
2. The command should not require user input.
3. It must not be destructive or modify the system in any harmful way.
4. The command should not require additional software, configuration, or access to external resources, the internet, or sensitive information.
5. Avoid duplicates of previous commands in this session.
6. The command should not reference user-specific files or data.

Format your response as follows:
- Only respond with the suggested command.
- Ensure the command is executable in the current session.
- Do not include any additional information or context.
- Do not include any formatting.
- Do not include 'dingus-aid' in the command.
"""

QUESTION_SECTION = """
The user query is as follows:

<USER_QUESTION> {query} </USER_QUESTION>

Suggested command:"""


def build_prompt(query: str, context: str) -> str:
    """Assembles history, rules and the query into the user message, in that order."""
    parts = []
    if context:
        parts.append(HISTORY_SECTION.format(context=context))
    parts.append(RULES)
    parts.append(QUESTION_SECTION.format(query=query))
    return "".join(parts)
