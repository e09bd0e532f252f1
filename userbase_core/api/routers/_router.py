"""
Userbase router object collecting all path operations
"""

from fastapi import APIRouter


router = APIRouter()
