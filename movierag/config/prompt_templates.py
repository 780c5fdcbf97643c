"""
MovieRAG - Prompt Templates & Console Strings
===============================================
Centralised prompt management for the movie assistant.  All prompts and
user-facing console strings live here so they can be reviewed and tuned
independently of application logic.

Exports
-------
SYSTEM_PROMPT, MOVIE_CONTEXT_TEMPLATE, SESSION_BANNER, USER_PROMPT,
BOT_PREFIX, API_KEY_PROMPT, RESULTS_RULE, RESULTS_HEADER,
RESULT_BLOCK_TEMPLATE, MODEL_FAILURE_RESPONSE.
"""

# ══════════════════════════════════════════════════════════════════════
#  CHAT PROMPTS
# ══════════════════════════════════════════════════════════════════════

SYSTEM_PROMPT: str = "You are a friendly assistant who helps me select a movie to watch based my preferences. Only recommend movies I tell you about."

# One user message per retrieved movie, appended after the question.
MOVIE_CONTEXT_TEMPLATE: str = 'The movie "{title}" is about: {description}'


# ══════════════════════════════════════════════════════════════════════
#  CONSOLE
# ══════════════════════════════════════════════════════════════════════

SESSION_BANNER: str = "Movie search assistant. Starting chat session..."
USER_PROMPT: str = "User> "
BOT_PREFIX: str = "Bot> "
API_KEY_PROMPT: str = "Please enter a valid Google API key: "

RESULTS_RULE: str = "-" * 65
RESULTS_HEADER: str = "Vector search results:"
RESULT_BLOCK_TEMPLATE: str = """Title: {title}
Description: {description}
Score: {score}
"""

MODEL_FAILURE_RESPONSE: str = "Sorry, I couldn't answer that ({stage} failed). Please try again."
