"""
FastAPI integration
"""
