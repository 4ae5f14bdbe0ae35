"""
moni - authenticated Google Cloud client layer for document insight.

Typed clients for Discovery Engine (Vertex AI Search) and Vertex AI Gemini
models, with cached bearer credentials and long-running operation polling.
"""

__version__ = "0.1.0"
