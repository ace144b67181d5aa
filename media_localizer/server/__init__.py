"""HTTP gateway server for the transcribe and voice-over endpoints.

WHY: The client pipeline needs two endpoints that forward work to a
hosted model. This package provides them as a FastAPI application.

RULES:
- app.py holds the routes, models.py the Pydantic schemas
- gateway.py is the only module that calls the upstream model
- prompts.py holds prompt text and the emotion direction table
"""
