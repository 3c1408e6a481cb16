"""
API Layer for the Staff Face Check service

This package provides the FastAPI application that exposes:
- REST endpoint for staff authentication (POST /authenticate)
- Health check endpoints

The API layer connects the capture client (frontend) to AWS Rekognition
through the core package.
"""
