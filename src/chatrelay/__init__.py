# src/chatrelay/__init__.py
"""chatrelay - relay chat sessions to local or cloud LLM backends"""
__version__ = "0.1.0"
