"""
Serving — FastAPI application for document upload and chat.

Run with ``docqa-server`` or ``python -m docqa.serving.app``.
"""
