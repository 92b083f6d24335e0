"""cc-cli: run local LLMs through Ollama and size cloud instances for them."""

__version__ = "0.2.0"
