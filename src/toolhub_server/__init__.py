"""toolhub-server: Headless FastAPI server for tool-augmented chat via Ollama.

This package discovers tools from external provider processes, keeps a
shared catalog with a global selection, and binds each chat session to the
tools it has enabled.
"""

__version__ = "0.1.0"

from toolhub_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
