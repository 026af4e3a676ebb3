"""
MediVoice: multi-language voice medical consultation backend

Runs patient conversations with AI doctor personas over voice or text,
enriches patient turns with medical keyword analysis, and compiles a
structured clinical report when a consultation closes.
"""

__version__ = "0.1.0"
__author__ = "MediVoice Team"
__description__ = "Multi-language voice medical consultation backend"
