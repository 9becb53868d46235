"""
Configuration for the badge pass service.

Every value can be overridden with an environment variable of the same name.
"""
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "supersecretkey")
    DB_FILE = os.environ.get("DB_FILE", "event_system.db")

    # Text shown where the logo goes on badges and in the confirmation footer
    BADGE_LOGO_TEXT = os.environ.get("BADGE_LOGO_TEXT", "Validity Events")
    BRAND_NAME = os.environ.get("BRAND_NAME", "Validity Events Management System")

    QR_ERROR_CORRECTION = os.environ.get("QR_ERROR_CORRECTION", "H")
    RASTER_SCALE = float(os.environ.get("RASTER_SCALE", "2"))

    # Badges per row / column on bulk print sheets
    SHEET_COLUMNS = int(os.environ.get("SHEET_COLUMNS", "2"))
    SHEET_ROWS = int(os.environ.get("SHEET_ROWS", "4"))
