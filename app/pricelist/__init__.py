"""
Price List Extraction Service.

A FastAPI service that turns a web page or an uploaded PDF into a
Markdown price list using AI (OpenAI GPT-4o).
"""

__version__ = "1.0.0"
