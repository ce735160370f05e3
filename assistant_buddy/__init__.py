"""Keep an OpenAI assistant in sync with a local project directory and chat with it."""

__version__ = "0.1.0"
