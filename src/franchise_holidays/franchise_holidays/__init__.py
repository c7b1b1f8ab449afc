"""Franchise holiday calendar service.

This package is organized by feature modules (organizations, holidays) with a thin
Flask controller layer on top of service/repository layers. ``holidays.draft`` holds
the editor-side state helpers that turn a resolved calendar into a save bundle.
"""
