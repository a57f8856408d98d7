"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build the ingredient substitution prompt from a recipe and a user preference.
- Call Groq and parse the suggested substitutions out of the reply.
- Report an unconfigured or failing LLM as a distinct, catchable error.
"""
