"""
Apadbandhav Backend - Services Module

Business logic layer.
"""

from app.services import sms_service
from app.services import otp_service
from app.services import user_service
from app.services import login_log_service
from app.services import auth_service
from app.services import admin_service

__all__ = [
    "sms_service",
    "otp_service",
    "user_service",
    "login_log_service",
    "auth_service",
    "admin_service",
]
